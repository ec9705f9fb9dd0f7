import pytest

from tfcsync.cloud import CloudClient
from tfcsync.sshkey import get_ssh_key_id, get_ssh_key_id_by_name, reconcile_ssh_key
from tfcsync.workspace import SSHKeyRef, WorkspaceInstance, WorkspaceSpec

ORG = "acme"


@pytest.fixture
def setup():
    client = CloudClient()
    ws = client.create_workspace(ORG, "alpha")
    deploy = client.create_ssh_key(ORG, "deploy")
    backup = client.create_ssh_key(ORG, "backup")
    return client, ws, deploy, backup


def _instance(client, ws, ssh_key):
    return WorkspaceInstance(
        name="alpha",
        spec=WorkspaceSpec(organization=ORG, ssh_key=ssh_key),
        client=client,
        workspace_id=ws.id,
    )


def test_lookup_by_name(setup):
    client, ws, deploy, _ = setup
    assert get_ssh_key_id_by_name(_instance(client, ws, SSHKeyRef(name="deploy"))) == deploy.id


def test_id_is_taken_from_spec():
    instance = _instance(CloudClient(), CloudClient().create_workspace(ORG, "x"), SSHKeyRef(id="sshkey-given"))
    assert get_ssh_key_id(instance) == "sshkey-given"


def test_missing_name_raises(setup):
    client, ws, _, _ = setup
    with pytest.raises(LookupError, match='ssh key ID was not found for ssh key name "missing"'):
        get_ssh_key_id(_instance(client, ws, SSHKeyRef(name="missing")))


def test_assigns_key_by_name(setup):
    client, ws, deploy, _ = setup
    reconcile_ssh_key(_instance(client, ws, SSHKeyRef(name="deploy")), client.read_workspace(ws.id))
    assert client.read_workspace(ws.id).ssh_key.id == deploy.id


def test_replaces_different_key(setup):
    client, ws, deploy, backup = setup
    client.assign_ssh_key(ws.id, backup.id)
    reconcile_ssh_key(_instance(client, ws, SSHKeyRef(id=deploy.id)), client.read_workspace(ws.id))
    assert client.read_workspace(ws.id).ssh_key.id == deploy.id


def test_keeps_matching_key(setup):
    client, ws, deploy, _ = setup
    client.assign_ssh_key(ws.id, deploy.id)
    reconcile_ssh_key(_instance(client, ws, SSHKeyRef(id=deploy.id)), client.read_workspace(ws.id))
    assert client.read_workspace(ws.id).ssh_key == deploy


def test_unassigns_when_spec_has_no_key(setup):
    client, ws, deploy, _ = setup
    client.assign_ssh_key(ws.id, deploy.id)
    reconcile_ssh_key(_instance(client, ws, None), client.read_workspace(ws.id))
    assert client.read_workspace(ws.id).ssh_key is None


def test_nothing_assigned_and_nothing_wanted(setup):
    client, ws, _, _ = setup
    reconcile_ssh_key(_instance(client, ws, None), client.read_workspace(ws.id))
    assert client.read_workspace(ws.id).ssh_key is None