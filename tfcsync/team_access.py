"""Keep the team access of a workspace equal to the team access in its spec."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace

from tfcsync.cloud import AccessType, Team, TeamAccess, Workspace
from tfcsync.workspace import EVENT_WARNING, TeamRef, WorkspaceInstance

_log = logging.getLogger(__name__)


def _permissions(team_access: TeamAccess) -> dict:
    """Return the custom permissions to send, which only custom access carries."""
    if team_access.access != AccessType.CUSTOM:
        return {}
    return {
        "runs": team_access.runs,
        "run_tasks": team_access.run_tasks,
        "sentinel_mocks": team_access.sentinel_mocks,
        "state_versions": team_access.state_versions,
        "variables": team_access.variables,
        "workspace_locking": team_access.workspace_locking,
    }


def get_team_id(teams: Mapping[str, Team], team: TeamRef) -> str:
    """Resolve a team reference against teams keyed by name.

    A name is looked up directly; otherwise the ID must belong to one of the
    teams. Raises LookupError when the team is not found.
    """
    if team.name:
        try:
            return teams[team.name].id
        except KeyError:
            raise LookupError(f'team ID was not found by name "{team.name}"') from None

    if team.id:
        for known in teams.values():
            if known.id == team.id:
                return known.id

    raise LookupError(f'team ID was not found by ID "{team.id}"')


def get_teams(instance: WorkspaceInstance) -> dict[str, Team]:
    """Return the organization's teams keyed by name.

    When the spec names teams, only those are fetched; otherwise all are.
    """
    names = [spec.team.name for spec in instance.spec.team_access or () if spec.team.name]
    return {team.name: team for team in instance.client.list_teams(instance.spec.organization, names)}


def get_instance_team_access(instance: WorkspaceInstance) -> dict[str, TeamAccess]:
    """Return the team access the spec asks for, keyed by team ID."""
    if instance.spec.team_access is None:
        return {}

    teams = get_teams(instance)
    wanted: dict[str, TeamAccess] = {}
    for spec in instance.spec.team_access:
        try:
            team_id = get_team_id(teams, spec.team)
        except LookupError:
            _log.error("reconcile team access: failed to get team ID")
            instance.recorder.event(EVENT_WARNING, "ReconcileTeamAccess", "Failed to get team ID")
            raise

        wanted[team_id] = TeamAccess(
            team=Team(id=team_id),
            workspace=Workspace(id=instance.workspace_id),
            access=AccessType(spec.access),
            runs=spec.custom.runs,
            run_tasks=spec.custom.run_tasks,
            sentinel_mocks=spec.custom.sentinel,
            state_versions=spec.custom.state_versions,
            variables=spec.custom.variables,
            workspace_locking=spec.custom.workspace_locking,
        )
    return wanted


def get_workspace_team_access(instance: WorkspaceInstance) -> dict[str, TeamAccess]:
    """Return the team access granted on the workspace, keyed by team ID."""
    return {access.team.id: access for access in instance.client.list_team_access(instance.workspace_id)}


def team_access_difference(
    a: Mapping[str, TeamAccess], b: Mapping[str, TeamAccess]
) -> dict[str, TeamAccess]:
    """Return the entries of a whose keys are not in b."""
    return {key: access for key, access in a.items() if key not in b}


def get_team_access_to_create(
    spec_team_access: Mapping[str, TeamAccess], workspace_team_access: Mapping[str, TeamAccess]
) -> dict[str, TeamAccess]:
    return team_access_difference(spec_team_access, workspace_team_access)


def get_team_access_to_delete(
    spec_team_access: Mapping[str, TeamAccess], workspace_team_access: Mapping[str, TeamAccess]
) -> dict[str, TeamAccess]:
    return team_access_difference(workspace_team_access, spec_team_access)


def get_team_access_to_update(
    spec_team_access: Mapping[str, TeamAccess], workspace_team_access: Mapping[str, TeamAccess]
) -> dict[str, TeamAccess]:
    """Return the spec's team access that is granted but differs.

    Custom access is compared on every permission; any other access only on
    its level. Each returned entry carries the ID of the granted access.
    """
    changed: dict[str, TeamAccess] = {}
    for key, wanted in spec_team_access.items():
        current = workspace_team_access.get(key)
        if current is None:
            continue
        wanted = replace(wanted, id=current.id)
        if wanted.access == AccessType.CUSTOM:
            stripped_wanted = replace(wanted, id="", team=None, workspace=None)
            stripped_current = replace(current, id="", team=None, workspace=None)
            if stripped_wanted != stripped_current:
                changed[key] = wanted
        elif wanted.access != current.access:
            changed[key] = wanted
    return changed


def create_team_access(instance: WorkspaceInstance, create: Mapping[str, TeamAccess]) -> None:
    """Grant each team, given by the keys of create, its access."""
    for team_id, access in create.items():
        try:
            instance.client.add_team_access(
                instance.workspace_id, team_id, access.access, **_permissions(access)
            )
        except (LookupError, ValueError, TypeError):
            _log.error("reconcile team access: failed to create a new team access")
            raise


def delete_team_access(instance: WorkspaceInstance, delete: Mapping[str, TeamAccess]) -> None:
    for access in delete.values():
        try:
            instance.client.remove_team_access(access.id)
        except LookupError:
            _log.error("reconcile team access: failed to delete team access")
            raise


def update_team_access(instance: WorkspaceInstance, update: Mapping[str, TeamAccess]) -> None:
    for access in update.values():
        _log.info("reconcile team access: updating team access")
        try:
            instance.client.update_team_access(access.id, access.access, **_permissions(access))
        except (LookupError, ValueError, TypeError):
            _log.error("reconcile team access: failed to update team access")
            raise


def reconcile_team_access(instance: WorkspaceInstance) -> None:
    _log.info("reconcile team access: new reconciliation event for %s", instance.name)

    try:
        spec = get_instance_team_access(instance)
    except LookupError:
        _log.error("reconcile team access: failed to get instance team access")
        raise

    try:
        current = get_workspace_team_access(instance)
    except LookupError:
        _log.error("reconcile team access: failed to get workspace team access")
        raise

    create = get_team_access_to_create(spec, current)
    if create:
        _log.info("reconcile team access: creating %d team accesses", len(create))
        create_team_access(instance, create)

    update = get_team_access_to_update(spec, current)
    if update:
        _log.info("reconcile team access: updating %d team accesses", len(update))
        update_team_access(instance, update)

    delete = get_team_access_to_delete(spec, current)
    if delete:
        _log.info("reconcile team access: deleting %d team accesses", len(delete))
        delete_team_access(instance, delete)