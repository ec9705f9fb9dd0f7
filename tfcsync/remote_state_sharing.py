"""Keep the consumers of a workspace's state equal to those in its spec."""

from __future__ import annotations

import logging

from tfcsync.cloud import Workspace
from tfcsync.workspace import EVENT_WARNING, ConsumerWorkspace, WorkspaceInstance

_log = logging.getLogger(__name__)


def get_workspaces(instance: WorkspaceInstance) -> dict[str, str]:
    """Map both the ID and the name of every workspace in the organization to its ID."""
    mapping: dict[str, str] = {}
    for workspace in instance.client.list_workspaces(instance.spec.organization):
        mapping[workspace.id] = workspace.id
        mapping[workspace.name] = workspace.id
    return mapping


def name_or_id(consumer: ConsumerWorkspace) -> str:
    """Return the consumer's name if it has one, otherwise its ID."""
    return consumer.name or consumer.id


def get_workspace_id(workspaces: dict[str, str], consumer: ConsumerWorkspace) -> str:
    try:
        return workspaces[name_or_id(consumer)]
    except KeyError:
        raise LookupError("workspace ID not found") from None


def get_instance_remote_state_sharing(instance: WorkspaceInstance) -> list[Workspace]:
    """Resolve the spec's consumer workspaces to workspaces with IDs."""
    sharing = instance.spec.remote_state_sharing
    if sharing is None or not sharing.workspaces:
        return []

    workspaces = get_workspaces(instance)
    resolved = []
    for consumer in sharing.workspaces:
        try:
            resolved.append(Workspace(id=get_workspace_id(workspaces, consumer)))
        except LookupError:
            _log.error("reconcile remote state sharing: failed to get workspace ID")
            instance.recorder.event(EVENT_WARNING, "ReconcileRemoteStateSharing", "Failed to get workspace ID")
            raise
    return resolved


def reconcile_remote_state_sharing(instance: WorkspaceInstance) -> None:
    _log.info("reconcile remote state sharing: new reconciliation event for %s", instance.name)

    if instance.spec.remote_state_sharing is None:
        return

    consumers = get_instance_remote_state_sharing(instance)
    if consumers:
        instance.client.update_remote_state_consumers(instance.workspace_id, consumers)