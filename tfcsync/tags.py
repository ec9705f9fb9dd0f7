"""Keep a workspace's tags equal to the tags in its spec."""

from __future__ import annotations

import logging
from collections.abc import Collection

from tfcsync.cloud import Tag, Workspace
from tfcsync.workspace import WorkspaceInstance, WorkspaceSpec

_log = logging.getLogger(__name__)


def get_tags(spec: WorkspaceSpec) -> set[str]:
    """Return the set of tags the spec asks for."""
    return set(spec.tags)


def get_workspace_tags(workspace: Workspace) -> set[str]:
    """Return the set of tags assigned to the workspace."""
    return set(workspace.tag_names)


def get_tags_to_add(instance_tags: Collection[str], workspace_tags: Collection[str]) -> list[Tag]:
    return tag_difference(instance_tags, workspace_tags)


def get_tags_to_remove(instance_tags: Collection[str], workspace_tags: Collection[str]) -> list[Tag]:
    return tag_difference(workspace_tags, instance_tags)


def tag_difference(left_tags: Collection[str], right_tags: Collection[str]) -> list[Tag]:
    """Return the tags of left_tags that are not in right_tags, sorted by name."""
    return [Tag(name) for name in sorted(set(left_tags)) if name not in right_tags]


def reconcile_tags(instance: WorkspaceInstance, workspace: Workspace) -> None:
    _log.info("reconcile tags: new reconciliation event for %s", instance.name)

    instance_tags = get_tags(instance.spec)
    workspace_tags = get_workspace_tags(workspace)

    remove = get_tags_to_remove(instance_tags, workspace_tags)
    if remove:
        _log.info("reconcile tags: removing tags from the workspace")
        instance.client.remove_tags(instance.workspace_id, remove)

    add = get_tags_to_add(instance_tags, workspace_tags)
    if add:
        _log.info("reconcile tags: adding tags to the workspace")
        instance.client.add_tags(instance.workspace_id, add)