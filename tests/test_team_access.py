import pytest

from tfcsync.cloud import AccessType, CloudClient, Team, TeamAccess
from tfcsync.team_access import (
    create_team_access,
    delete_team_access,
    get_instance_team_access,
    get_team_access_to_create,
    get_team_access_to_delete,
    get_team_access_to_update,
    get_team_id,
    get_teams,
    get_workspace_team_access,
    reconcile_team_access,
    team_access_difference,
    update_team_access,
)
from tfcsync.workspace import (
    EVENT_WARNING,
    CustomPermission,
    TeamAccessSpec,
    TeamRef,
    WorkspaceInstance,
    WorkspaceSpec,
)

ORG = "example-org"


@pytest.fixture
def setup():
    client = CloudClient()
    workspace = client.create_workspace(ORG, "app")
    devs = client.create_team(ORG, "devs")
    ops = client.create_team(ORG, "ops")
    instance = WorkspaceInstance(
        name="this",
        spec=WorkspaceSpec(organization=ORG, team_access=[]),
        client=client,
        workspace_id=workspace.id,
    )
    return instance, devs, ops


def _granted(instance):
    return {a.team.id: a for a in instance.client.list_team_access(instance.workspace_id)}


def test_get_team_id_by_name_and_id():
    teams = {"devs": Team(id="team-1", name="devs")}
    assert get_team_id(teams, TeamRef(name="devs")) == "team-1"
    assert get_team_id(teams, TeamRef(id="team-1")) == "team-1"


@pytest.mark.parametrize("ref", [TeamRef(name="nobody"), TeamRef(id="team-9"), TeamRef()])
def test_get_team_id_missing_raises(ref):
    teams = {"devs": Team(id="team-1", name="devs")}
    with pytest.raises(LookupError):
        get_team_id(teams, ref)


def test_team_access_difference():
    a = {"x": TeamAccess(id="1"), "y": TeamAccess(id="2")}
    b = {"y": TeamAccess(id="3")}
    assert team_access_difference(a, b) == {"x": a["x"]}
    assert get_team_access_to_create(a, b) == {"x": a["x"]}
    assert get_team_access_to_delete(a, b) == {}
    assert get_team_access_to_delete(b, a) == {"x": a["x"]}


def test_update_non_custom_compares_access_only():
    spec = {"t": TeamAccess(access=AccessType.READ, runs="apply")}
    current = {"t": TeamAccess(id="tws-1", access=AccessType.READ, runs="read")}
    assert get_team_access_to_update(spec, current) == {}

    spec = {"t": TeamAccess(access=AccessType.WRITE)}
    update = get_team_access_to_update(spec, current)
    assert list(update) == ["t"]
    assert update["t"].id == "tws-1"
    assert update["t"].access == AccessType.WRITE


def test_update_custom_compares_permissions():
    spec = {"t": TeamAccess(access=AccessType.CUSTOM, runs="apply", team=Team(id="t"))}
    same = {"t": TeamAccess(id="tws-1", access=AccessType.CUSTOM, runs="apply", team=Team(id="t", name="n"))}
    assert get_team_access_to_update(spec, same) == {}

    differs = {"t": TeamAccess(id="tws-1", access=AccessType.CUSTOM, runs="plan")}
    update = get_team_access_to_update(spec, differs)
    assert update["t"].runs == "apply"
    assert update["t"].id == "tws-1"


def test_update_empty_inputs():
    assert get_team_access_to_update({}, {"t": TeamAccess()}) == {}
    assert get_team_access_to_update({"t": TeamAccess()}, {}) == {}


def test_get_teams_filters_by_name(setup):
    instance, devs, ops = setup
    instance.spec.team_access = [TeamAccessSpec(team=TeamRef(name="devs"))]
    assert get_teams(instance) == {"devs": devs}
    instance.spec.team_access = [TeamAccessSpec(team=TeamRef(id=ops.id))]
    assert set(get_teams(instance)) == {"devs", "ops"}


def test_get_instance_team_access_none_spec(setup):
    instance, _, _ = setup
    instance.spec.team_access = None
    assert get_instance_team_access(instance) == {}


def test_get_instance_team_access_builds_entries(setup):
    instance, devs, _ = setup
    instance.spec.team_access = [
        TeamAccessSpec(
            team=TeamRef(name="devs"),
            access=AccessType.CUSTOM,
            custom=CustomPermission(runs="apply", sentinel="read", run_tasks=True),
        )
    ]
    wanted = get_instance_team_access(instance)
    assert list(wanted) == [devs.id]
    access = wanted[devs.id]
    assert access.team.id == devs.id
    assert access.workspace.id == instance.workspace_id
    assert access.runs == "apply"
    assert access.sentinel_mocks == "read"
    assert access.run_tasks is True


def test_missing_team_records_event_and_raises(setup):
    instance, _, _ = setup
    instance.spec.team_access = [TeamAccessSpec(team=TeamRef(name="ghosts"))]
    with pytest.raises(LookupError):
        reconcile_team_access(instance)
    assert [(e.kind, e.reason, e.message) for e in instance.recorder.events] == [
        (EVENT_WARNING, "ReconcileTeamAccess", "Failed to get team ID")
    ]


def test_reconcile_is_idempotent(setup):
    instance, _, _ = setup
    instance.spec.team_access = [
        TeamAccessSpec(team=TeamRef(name="devs"), access=AccessType.CUSTOM, custom=CustomPermission(runs="plan"))
    ]
    reconcile_team_access(instance)
    first = _granted(instance)
    reconcile_team_access(instance)
    assert _granted(instance) == first
    spec = get_instance_team_access(instance)
    assert get_team_access_to_update(spec, get_workspace_team_access(instance)) == {}


def test_reconcile_updates_and_deletes(setup):
    instance, devs, ops = setup
    client = instance.client
    client.add_team_access(instance.workspace_id, devs.id, AccessType.READ)
    client.add_team_access(instance.workspace_id, ops.id, AccessType.ADMIN)
    original_id = _granted(instance)[devs.id].id

    instance.spec.team_access = [TeamAccessSpec(team=TeamRef(name="devs"), access=AccessType.PLAN)]
    reconcile_team_access(instance)

    granted = _granted(instance)
    assert set(granted) == {devs.id}
    assert granted[devs.id].access == AccessType.PLAN
    assert granted[devs.id].id == original_id


def test_reconcile_none_spec_removes_all(setup):
    instance, devs, _ = setup
    instance.client.add_team_access(instance.workspace_id, devs.id, AccessType.READ)
    instance.spec.team_access = None
    reconcile_team_access(instance)
    assert _granted(instance) == {}


def test_direct_create_update_delete(setup):
    instance, devs, _ = setup
    create_team_access(instance, {devs.id: TeamAccess(access=AccessType.CUSTOM, runs="apply")})
    current = get_workspace_team_access(instance)
    assert current[devs.id].runs == "apply"

    update_team_access(instance, {devs.id: replace_access(current[devs.id], AccessType.WRITE)})
    assert get_workspace_team_access(instance)[devs.id].access == AccessType.WRITE

    delete_team_access(instance, get_workspace_team_access(instance))
    assert get_workspace_team_access(instance) == {}


def test_delete_unknown_access_raises(setup):
    instance, _, _ = setup
    with pytest.raises(LookupError):
        delete_team_access(instance, {"t": TeamAccess(id="tws-missing")})


def replace_access(access, level):
    access.access = level
    return access