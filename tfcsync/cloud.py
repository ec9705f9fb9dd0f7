"""Terraform Cloud objects and an in-memory implementation of its API."""

from __future__ import annotations

import copy
import itertools
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum


class CategoryType(str, Enum):
    """Kind of a workspace variable."""

    TERRAFORM = "terraform"
    ENV = "env"


class AccessType(str, Enum):
    """Level of access a team has to a workspace."""

    READ = "read"
    PLAN = "plan"
    WRITE = "write"
    ADMIN = "admin"
    CUSTOM = "custom"


@dataclass
class SSHKey:
    id: str
    name: str = ""


@dataclass
class Workspace:
    id: str
    name: str = ""
    tag_names: list[str] = field(default_factory=list)
    ssh_key: SSHKey | None = None


@dataclass(frozen=True)
class Tag:
    name: str


@dataclass
class RunTask:
    id: str
    name: str = ""


@dataclass
class WorkspaceRunTask:
    id: str = ""
    enforcement_level: str = ""
    stage: str = ""
    run_task: RunTask | None = None
    workspace: Workspace | None = None


@dataclass
class Team:
    id: str
    name: str = ""


@dataclass
class TeamAccess:
    id: str = ""
    access: AccessType = AccessType.READ
    runs: str = ""
    run_tasks: bool = False
    sentinel_mocks: str = ""
    state_versions: str = ""
    variables: str = ""
    workspace_locking: bool = False
    team: Team | None = None
    workspace: Workspace | None = None


@dataclass
class Variable:
    key: str = ""
    value: str = ""
    description: str = ""
    hcl: bool = False
    sensitive: bool = False
    category: CategoryType = CategoryType.TERRAFORM
    id: str = ""
    version_id: str = ""
    workspace: Workspace | None = None


@dataclass
class RunTrigger:
    id: str
    workspace: Workspace
    sourceable: Workspace


_TEAM_PERMISSIONS = frozenset(
    {"runs", "run_tasks", "sentinel_mocks", "state_versions", "variables", "workspace_locking"}
)


def _check_permissions(permissions: dict) -> None:
    unknown = set(permissions) - _TEAM_PERMISSIONS
    if unknown:
        raise TypeError(f"unknown team access permissions: {', '.join(sorted(unknown))}")


class CloudClient:
    """An in-memory Terraform Cloud API.

    Every object lives in one organization. Methods return copies, so callers
    never change the stored state by accident. A missing object raises
    LookupError.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._organizations: dict[str, str] = {}
        self._workspaces: dict[str, Workspace] = {}
        self._ssh_keys: dict[str, SSHKey] = {}
        self._run_tasks: dict[str, RunTask] = {}
        self._teams: dict[str, Team] = {}
        self._consumers: dict[str, list[str]] = {}
        self._workspace_run_tasks: dict[str, dict[str, WorkspaceRunTask]] = {}
        self._run_triggers: dict[str, RunTrigger] = {}
        self._team_access: dict[str, TeamAccess] = {}
        self._variables: dict[str, dict[str, Variable]] = {}

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counter):016d}"

    @staticmethod
    def _get(objects: dict, object_id: str, kind: str):
        try:
            return objects[object_id]
        except KeyError:
            raise LookupError(f"{kind} {object_id!r} not found") from None

    def _in_organization(self, objects: dict, organization: str) -> list:
        return [
            copy.deepcopy(obj)
            for object_id, obj in objects.items()
            if self._organizations.get(object_id) == organization
        ]

    def _register(self, objects: dict, obj, organization: str):
        objects[obj.id] = obj
        self._organizations[obj.id] = organization
        return copy.deepcopy(obj)

    # Workspaces

    def create_workspace(self, organization: str, name: str) -> Workspace:
        workspace = Workspace(id=self._new_id("ws"), name=name)
        self._consumers[workspace.id] = []
        self._workspace_run_tasks[workspace.id] = {}
        self._variables[workspace.id] = {}
        return self._register(self._workspaces, workspace, organization)

    def read_workspace(self, workspace_id: str) -> Workspace:
        return copy.deepcopy(self._get(self._workspaces, workspace_id, "workspace"))

    def list_workspaces(self, organization: str) -> list[Workspace]:
        return self._in_organization(self._workspaces, organization)

    def add_tags(self, workspace_id: str, tags: Iterable[Tag]) -> None:
        workspace = self._get(self._workspaces, workspace_id, "workspace")
        for tag in tags:
            if tag.name not in workspace.tag_names:
                workspace.tag_names.append(tag.name)

    def remove_tags(self, workspace_id: str, tags: Iterable[Tag]) -> None:
        workspace = self._get(self._workspaces, workspace_id, "workspace")
        names = {tag.name for tag in tags}
        workspace.tag_names = [name for name in workspace.tag_names if name not in names]

    def assign_ssh_key(self, workspace_id: str, ssh_key_id: str) -> Workspace:
        workspace = self._get(self._workspaces, workspace_id, "workspace")
        key = self._get(self._ssh_keys, ssh_key_id, "ssh key")
        workspace.ssh_key = replace(key)
        return copy.deepcopy(workspace)

    def unassign_ssh_key(self, workspace_id: str) -> Workspace:
        workspace = self._get(self._workspaces, workspace_id, "workspace")
        workspace.ssh_key = None
        return copy.deepcopy(workspace)

    def update_remote_state_consumers(self, workspace_id: str, workspaces: Iterable[Workspace]) -> None:
        """Replace the consumers of a workspace's state with the given workspaces."""
        self._get(self._workspaces, workspace_id, "workspace")
        consumer_ids: list[str] = []
        for consumer in workspaces:
            self._get(self._workspaces, consumer.id, "workspace")
            if consumer.id not in consumer_ids:
                consumer_ids.append(consumer.id)
        self._consumers[workspace_id] = consumer_ids

    def list_remote_state_consumers(self, workspace_id: str) -> list[Workspace]:
        consumer_ids = self._get(self._consumers, workspace_id, "workspace")
        return [copy.deepcopy(self._workspaces[consumer_id]) for consumer_id in consumer_ids]

    # SSH keys

    def create_ssh_key(self, organization: str, name: str) -> SSHKey:
        return self._register(self._ssh_keys, SSHKey(id=self._new_id("sshkey"), name=name), organization)

    def list_ssh_keys(self, organization: str) -> list[SSHKey]:
        return self._in_organization(self._ssh_keys, organization)

    # Run tasks

    def create_run_task(self, organization: str, name: str) -> RunTask:
        return self._register(self._run_tasks, RunTask(id=self._new_id("task"), name=name), organization)

    def list_run_tasks(self, organization: str) -> list[RunTask]:
        return self._in_organization(self._run_tasks, organization)

    def list_workspace_run_tasks(self, workspace_id: str) -> list[WorkspaceRunTask]:
        tasks = self._get(self._workspace_run_tasks, workspace_id, "workspace")
        return [copy.deepcopy(task) for task in tasks.values()]

    def create_workspace_run_task(
        self, workspace_id: str, run_task_id: str, enforcement_level: str, stage: str
    ) -> WorkspaceRunTask:
        tasks = self._get(self._workspace_run_tasks, workspace_id, "workspace")
        run_task = self._get(self._run_tasks, run_task_id, "run task")
        task = WorkspaceRunTask(
            id=self._new_id("wstask"),
            enforcement_level=enforcement_level,
            stage=stage,
            run_task=replace(run_task),
            workspace=Workspace(id=workspace_id),
        )
        tasks[task.id] = task
        return copy.deepcopy(task)

    def update_workspace_run_task(
        self, workspace_id: str, workspace_run_task_id: str, enforcement_level: str, stage: str
    ) -> WorkspaceRunTask:
        tasks = self._get(self._workspace_run_tasks, workspace_id, "workspace")
        task = self._get(tasks, workspace_run_task_id, "workspace run task")
        task.enforcement_level = enforcement_level
        task.stage = stage
        return copy.deepcopy(task)

    def delete_workspace_run_task(self, workspace_id: str, workspace_run_task_id: str) -> None:
        tasks = self._get(self._workspace_run_tasks, workspace_id, "workspace")
        self._get(tasks, workspace_run_task_id, "workspace run task")
        del tasks[workspace_run_task_id]

    # Run triggers

    def create_run_trigger(self, workspace_id: str, sourceable_id: str) -> RunTrigger:
        workspace = self._get(self._workspaces, workspace_id, "workspace")
        source = self._get(self._workspaces, sourceable_id, "workspace")
        trigger = RunTrigger(
            id=self._new_id("rt"),
            workspace=Workspace(id=workspace.id, name=workspace.name),
            sourceable=Workspace(id=source.id, name=source.name),
        )
        self._run_triggers[trigger.id] = trigger
        return copy.deepcopy(trigger)

    def list_inbound_run_triggers(self, workspace_id: str) -> list[RunTrigger]:
        self._get(self._workspaces, workspace_id, "workspace")
        return [
            copy.deepcopy(trigger)
            for trigger in self._run_triggers.values()
            if trigger.workspace.id == workspace_id
        ]

    def delete_run_trigger(self, run_trigger_id: str) -> None:
        self._get(self._run_triggers, run_trigger_id, "run trigger")
        del self._run_triggers[run_trigger_id]

    # Teams

    def create_team(self, organization: str, name: str) -> Team:
        return self._register(self._teams, Team(id=self._new_id("team"), name=name), organization)

    def list_teams(self, organization: str, names: Iterable[str] | None = None) -> list[Team]:
        """List the organization's teams, only those named if names are given."""
        teams = self._in_organization(self._teams, organization)
        wanted = set(names or ())
        if wanted:
            teams = [team for team in teams if team.name in wanted]
        return teams

    def list_team_access(self, workspace_id: str) -> list[TeamAccess]:
        self._get(self._workspaces, workspace_id, "workspace")
        return [
            copy.deepcopy(access)
            for access in self._team_access.values()
            if access.workspace is not None and access.workspace.id == workspace_id
        ]

    def add_team_access(self, workspace_id: str, team_id: str, access, **permissions) -> TeamAccess:
        _check_permissions(permissions)
        workspace = self._get(self._workspaces, workspace_id, "workspace")
        team = self._get(self._teams, team_id, "team")
        for existing in self._team_access.values():
            if existing.team.id == team_id and existing.workspace.id == workspace_id:
                raise ValueError(f"team {team_id!r} already has access to workspace {workspace_id!r}")
        team_access = TeamAccess(
            id=self._new_id("tws"),
            access=AccessType(access),
            team=replace(team),
            workspace=Workspace(id=workspace.id, name=workspace.name),
            **permissions,
        )
        self._team_access[team_access.id] = team_access
        return copy.deepcopy(team_access)

    def update_team_access(self, team_access_id: str, access, **permissions) -> TeamAccess:
        _check_permissions(permissions)
        team_access = self._get(self._team_access, team_access_id, "team access")
        team_access.access = AccessType(access)
        for name, value in permissions.items():
            setattr(team_access, name, value)
        return copy.deepcopy(team_access)

    def remove_team_access(self, team_access_id: str) -> None:
        self._get(self._team_access, team_access_id, "team access")
        del self._team_access[team_access_id]

    # Variables

    @staticmethod
    def _visible(variable: Variable) -> Variable:
        shown = copy.deepcopy(variable)
        if shown.sensitive:
            shown.value = ""
        return shown

    def list_variables(self, workspace_id: str) -> list[Variable]:
        """List the workspace's variables; sensitive values come back empty."""
        variables = self._get(self._variables, workspace_id, "workspace")
        return [self._visible(variable) for variable in variables.values()]

    def create_variable(
        self,
        workspace_id: str,
        *,
        key: str,
        value: str = "",
        description: str = "",
        hcl: bool = False,
        sensitive: bool = False,
        category: CategoryType = CategoryType.TERRAFORM,
    ) -> Variable:
        variables = self._get(self._variables, workspace_id, "workspace")
        category = CategoryType(category)
        if any(v.key == key and v.category == category for v in variables.values()):
            raise ValueError(f"{category.value} variable {key!r} already exists")
        variable = Variable(
            key=key,
            value=value,
            description=description,
            hcl=hcl,
            sensitive=sensitive,
            category=category,
            id=self._new_id("var"),
            version_id=self._new_id("ver"),
            workspace=Workspace(id=workspace_id),
        )
        variables[variable.id] = variable
        return self._visible(variable)

    def update_variable(
        self,
        workspace_id: str,
        variable_id: str,
        *,
        key: str | None = None,
        value: str | None = None,
        description: str | None = None,
        hcl: bool | None = None,
        sensitive: bool | None = None,
        category: CategoryType | None = None,
    ) -> Variable:
        """Change the given attributes of a variable; None leaves one unchanged."""
        variables = self._get(self._variables, workspace_id, "workspace")
        variable = self._get(variables, variable_id, "variable")
        if variable.sensitive and sensitive is False:
            raise ValueError(f"variable {variable.key!r} is sensitive and cannot be made non-sensitive")
        changes = {
            "key": key,
            "value": value,
            "description": description,
            "hcl": hcl,
            "sensitive": sensitive,
            "category": None if category is None else CategoryType(category),
        }
        for name, new_value in changes.items():
            if new_value is not None:
                setattr(variable, name, new_value)
        variable.version_id = self._new_id("ver")
        return self._visible(variable)

    def delete_variable(self, workspace_id: str, variable_id: str) -> None:
        variables = self._get(self._variables, workspace_id, "workspace")
        self._get(variables, variable_id, "variable")
        del variables[variable_id]