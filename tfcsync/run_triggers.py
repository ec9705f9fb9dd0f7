"""Keep the inbound run triggers of a workspace equal to those in its spec."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from tfcsync.workspace import WorkspaceInstance

_log = logging.getLogger(__name__)


def get_run_triggers_sources(instance: WorkspaceInstance) -> dict[str, str]:
    """Return the IDs of the source workspaces the spec asks for.

    Sources given by name are resolved through the organization's workspace
    list. Values are always empty strings: only the keys matter.
    """
    sources: dict[str, str] = {}
    names: list[str] = []

    for trigger in instance.spec.run_triggers:
        if trigger.name:
            names.append(trigger.name)
        if trigger.id:
            sources[trigger.id] = ""

    if not names:
        return sources

    ids_by_name = {
        workspace.name: workspace.id
        for workspace in instance.client.list_workspaces(instance.spec.organization)
    }
    for name in names:
        try:
            sources[ids_by_name[name]] = ""
        except KeyError:
            raise LookupError(f"cannot find ID for Workspace {name}") from None

    return sources


def get_run_triggers_workspace(instance: WorkspaceInstance) -> dict[str, str]:
    """Map the source workspace ID of each inbound run trigger to the trigger's ID."""
    return {
        trigger.sourceable.id: trigger.id
        for trigger in instance.client.list_inbound_run_triggers(instance.workspace_id)
    }


def get_workspaces_to_add(
    instance_workspaces: Mapping[str, str], run_triggers_workspaces: Mapping[str, str]
) -> dict[str, str]:
    return workspace_difference(instance_workspaces, run_triggers_workspaces)


def get_workspaces_to_delete(
    instance_workspaces: Mapping[str, str], run_triggers_workspaces: Mapping[str, str]
) -> dict[str, str]:
    return workspace_difference(run_triggers_workspaces, instance_workspaces)


def workspace_difference(left: Mapping[str, str], right: Mapping[str, str]) -> dict[str, str]:
    """Return the entries of left whose keys are not in right."""
    return {key: value for key, value in left.items() if key not in right}


def add_run_triggers(instance: WorkspaceInstance, workspaces: Mapping[str, str]) -> None:
    """Create a run trigger from each workspace whose ID is a key of workspaces."""
    for source_id in workspaces:
        instance.client.create_run_trigger(instance.workspace_id, source_id)


def remove_run_triggers(instance: WorkspaceInstance, workspaces: Mapping[str, str]) -> None:
    """Delete the run triggers whose IDs are the values of workspaces."""
    for trigger_id in workspaces.values():
        instance.client.delete_run_trigger(trigger_id)


def reconcile_run_triggers(instance: WorkspaceInstance) -> None:
    """Bring the run triggers in line with the spec.

    A failure to read the desired or current triggers ends the reconciliation
    quietly; failures to change them are raised.
    """
    _log.info("reconcile run triggers: new reconciliation event for %s", instance.name)

    try:
        wanted = get_run_triggers_sources(instance)
        current = get_run_triggers_workspace(instance)
    except LookupError as error:
        _log.error("reconcile run triggers: %s", error)
        return

    add = get_workspaces_to_add(wanted, current)
    if add:
        _log.info("reconcile run triggers: adding run triggers workspaces to the workspace")
        add_run_triggers(instance, add)

    delete = get_workspaces_to_delete(wanted, current)
    if delete:
        _log.info("reconcile run triggers: deleting run triggers workspaces from the workspace")
        remove_run_triggers(instance, delete)