"""Keep the run tasks attached to a workspace equal to those in its spec."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace

from tfcsync.cloud import RunTask, WorkspaceRunTask
from tfcsync.workspace import WorkspaceInstance

_log = logging.getLogger(__name__)


def run_tasks_difference(
    a: Mapping[str, WorkspaceRunTask], b: Mapping[str, WorkspaceRunTask]
) -> dict[str, WorkspaceRunTask]:
    """Return the entries of a whose keys are not in b."""
    return {key: task for key, task in a.items() if key not in b}


def get_run_tasks_to_create(
    spec: Mapping[str, WorkspaceRunTask], ws: Mapping[str, WorkspaceRunTask]
) -> dict[str, WorkspaceRunTask]:
    return run_tasks_difference(spec, ws)


def get_run_tasks_to_update(
    spec: Mapping[str, WorkspaceRunTask], ws: Mapping[str, WorkspaceRunTask]
) -> dict[str, WorkspaceRunTask]:
    """Return the spec's run tasks that are attached but differ.

    Each returned task carries the ID of the attached one. The workspace a
    task belongs to is not compared.
    """
    changed: dict[str, WorkspaceRunTask] = {}
    for key, wanted in spec.items():
        current = ws.get(key)
        if current is None:
            continue
        wanted = replace(wanted, id=current.id)
        if replace(wanted, workspace=None) != replace(current, workspace=None):
            changed[key] = wanted
    return changed


def get_run_tasks_to_delete(
    spec: Mapping[str, WorkspaceRunTask], ws: Mapping[str, WorkspaceRunTask]
) -> dict[str, WorkspaceRunTask]:
    return run_tasks_difference(ws, spec)


def create_run_tasks(instance: WorkspaceInstance, create: Mapping[str, WorkspaceRunTask]) -> None:
    for task in create.values():
        try:
            instance.client.create_workspace_run_task(
                instance.workspace_id, task.run_task.id, task.enforcement_level, task.stage
            )
        except (LookupError, ValueError):
            _log.error("reconcile run tasks: failed to create a new run task")
            raise


def update_run_tasks(instance: WorkspaceInstance, update: Mapping[str, WorkspaceRunTask]) -> None:
    for task in update.values():
        _log.info("reconcile run tasks: updating run task")
        try:
            instance.client.update_workspace_run_task(
                instance.workspace_id, task.id, task.enforcement_level, task.stage
            )
        except (LookupError, ValueError):
            _log.error("reconcile run tasks: failed to update run task")
            raise


def delete_run_tasks(instance: WorkspaceInstance, delete: Mapping[str, WorkspaceRunTask]) -> None:
    for task in delete.values():
        try:
            instance.client.delete_workspace_run_task(instance.workspace_id, task.id)
        except LookupError:
            _log.error("reconcile run tasks: failed to delete run task")
            raise


def has_run_task_name(instance: WorkspaceInstance) -> bool:
    """Tell whether any run task in the spec is given by name."""
    return any(task.name for task in instance.spec.run_tasks)


def get_instance_run_tasks(instance: WorkspaceInstance) -> dict[str, WorkspaceRunTask]:
    """Return the spec's run tasks keyed by run task ID.

    A name that does not match any run task in the organization resolves to
    an empty ID.
    """
    ids_by_name: dict[str, str] = {}
    if has_run_task_name(instance):
        ids_by_name = {
            task.name: task.id for task in instance.client.list_run_tasks(instance.spec.organization)
        }

    tasks: dict[str, WorkspaceRunTask] = {}
    for spec_task in instance.spec.run_tasks:
        task_id = ids_by_name.get(spec_task.name, "") if spec_task.name else spec_task.id
        tasks[task_id] = WorkspaceRunTask(
            enforcement_level=spec_task.enforcement_level,
            stage=spec_task.stage,
            run_task=RunTask(id=task_id),
        )
    return tasks


def get_workspace_run_tasks(instance: WorkspaceInstance) -> dict[str, WorkspaceRunTask]:
    """Return the run tasks attached to the workspace keyed by run task ID."""
    return {
        task.run_task.id: WorkspaceRunTask(
            id=task.id,
            enforcement_level=task.enforcement_level,
            stage=task.stage,
            run_task=RunTask(id=task.run_task.id),
        )
        for task in instance.client.list_workspace_run_tasks(instance.workspace_id)
    }


def reconcile_run_tasks(instance: WorkspaceInstance) -> None:
    _log.info("reconcile run tasks: new reconciliation event for %s", instance.name)

    try:
        spec = get_instance_run_tasks(instance)
    except LookupError:
        _log.error("reconcile run tasks: failed to get instance run tasks")
        raise

    try:
        ws = get_workspace_run_tasks(instance)
    except LookupError:
        _log.error("reconcile run tasks: failed to get workspace run tasks")
        raise

    create = get_run_tasks_to_create(spec, ws)
    if create:
        _log.info("reconcile run tasks: creating %d run tasks", len(create))
        create_run_tasks(instance, create)

    update = get_run_tasks_to_update(spec, ws)
    if update:
        _log.info("reconcile run tasks: updating %d run tasks", len(update))
        update_run_tasks(instance, update)

    delete = get_run_tasks_to_delete(spec, ws)
    if delete:
        _log.info("reconcile run tasks: deleting %d run tasks", len(delete))
        delete_run_tasks(instance, delete)