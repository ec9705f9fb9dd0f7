"""The desired state of a workspace and the context a reconciliation runs in."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tfcsync.cloud import AccessType, CloudClient

EVENT_NORMAL = "Normal"
EVENT_WARNING = "Warning"

_log = logging.getLogger(__name__)


@dataclass
class ConsumerWorkspace:
    """A workspace allowed to read state, given by ID or by name."""

    id: str = ""
    name: str = ""


@dataclass
class RunTriggerSource:
    """A workspace whose runs trigger runs here, given by ID or by name."""

    id: str = ""
    name: str = ""


@dataclass
class RunTaskSpec:
    id: str = ""
    name: str = ""
    enforcement_level: str = "advisory"
    stage: str = "post_plan"


@dataclass
class TeamRef:
    id: str = ""
    name: str = ""


@dataclass
class CustomPermission:
    runs: str = "read"
    run_tasks: bool = False
    sentinel: str = "none"
    state_versions: str = "none"
    variables: str = "none"
    workspace_locking: bool = False


@dataclass
class TeamAccessSpec:
    team: TeamRef
    access: AccessType = AccessType.READ
    custom: CustomPermission = field(default_factory=CustomPermission)


@dataclass
class KeyRef:
    """A key inside a named ConfigMap or Secret."""

    name: str
    key: str


@dataclass
class ValueFrom:
    config_map_key_ref: KeyRef | None = None
    secret_key_ref: KeyRef | None = None


@dataclass
class VariableSpec:
    name: str
    value: str = ""
    value_from: ValueFrom | None = None
    description: str = ""
    hcl: bool = False
    sensitive: bool = False


@dataclass
class SSHKeyRef:
    id: str = ""
    name: str = ""


@dataclass
class RemoteStateSharing:
    all_workspaces: bool = False
    workspaces: list[ConsumerWorkspace] = field(default_factory=list)


@dataclass
class WorkspaceSpec:
    organization: str
    name: str = ""
    tags: list[str] = field(default_factory=list)
    ssh_key: SSHKeyRef | None = None
    remote_state_sharing: RemoteStateSharing | None = None
    run_tasks: list[RunTaskSpec] = field(default_factory=list)
    run_triggers: list[RunTriggerSource] = field(default_factory=list)
    team_access: list[TeamAccessSpec] | None = None
    terraform_variables: list[VariableSpec] = field(default_factory=list)
    environment_variables: list[VariableSpec] = field(default_factory=list)


@dataclass(frozen=True)
class Event:
    kind: str
    reason: str
    message: str


@dataclass
class EventRecorder:
    """Collects the events raised while reconciling a workspace."""

    events: list[Event] = field(default_factory=list)

    def event(self, kind, reason, message):
        recorded = Event(kind, reason, message)
        self.events.append(recorded)
        _log.debug("event %s %s: %s", kind, reason, message)
        return recorded


@dataclass
class WorkspaceInstance:
    """One workspace resource: its spec, status, client and namespace objects."""

    name: str
    spec: WorkspaceSpec
    client: CloudClient
    namespace: str = "default"
    workspace_id: str = ""
    recorder: EventRecorder = field(default_factory=EventRecorder)
    config_maps: dict[str, dict[str, str]] = field(default_factory=dict)
    secrets: dict[str, dict[str, bytes]] = field(default_factory=dict)