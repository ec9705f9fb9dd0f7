"""Keep the SSH key assigned to a workspace equal to the one in its spec."""

from __future__ import annotations

import logging

from tfcsync.cloud import Workspace
from tfcsync.workspace import WorkspaceInstance

_log = logging.getLogger(__name__)


def get_ssh_key_id_by_name(instance: WorkspaceInstance) -> str:
    """Look the spec's SSH key up by name in the organization."""
    name = instance.spec.ssh_key.name
    for key in instance.client.list_ssh_keys(instance.spec.organization):
        if key.name == name:
            return key.id
    raise LookupError(f'ssh key ID was not found for ssh key name "{name}"')


def get_ssh_key_id(instance: WorkspaceInstance) -> str:
    """Return the ID of the spec's SSH key, resolving a name if one is given."""
    spec_key = instance.spec.ssh_key
    if spec_key.name:
        _log.info("reconcile ssh key: getting ssh key ID by name")
        return get_ssh_key_id_by_name(instance)
    _log.info("reconcile ssh key: getting ssh key ID from the spec")
    return spec_key.id


def reconcile_ssh_key(instance: WorkspaceInstance, workspace: Workspace) -> None:
    client = instance.client

    if instance.spec.ssh_key is None:
        if workspace.ssh_key is not None:
            _log.info("reconcile ssh key: unassigning the ssh key")
            client.unassign_ssh_key(workspace.id)
        return

    key_id = get_ssh_key_id(instance)
    if workspace.ssh_key is None or workspace.ssh_key.id != key_id:
        _log.info("reconcile ssh key: assigning the ssh key")
        client.assign_ssh_key(workspace.id, key_id)