# tfcsync

`tfcsync` brings a Terraform Cloud workspace into line with a declared
specification. Each part of a workspace has its own module. Each module
works out what differs between the specification and the workspace, then
applies the changes through a client:

| Module | What it reconciles |
| --- | --- |
| `tfcsync.tags` | workspace tags |
| `tfcsync.sshkey` | the SSH key assigned to the workspace |
| `tfcsync.remote_state_sharing` | workspaces allowed to read this workspace's state |
| `tfcsync.run_triggers` | inbound run triggers from other workspaces |
| `tfcsync.run_tasks` | run tasks attached to the workspace |
| `tfcsync.team_access` | team access levels and custom permissions |
| `tfcsync.variables` | Terraform and environment variables |

The package has no runtime dependencies.

## Installation

```
pip install tfcsync
```

To run the test suite:

```
pip install "tfcsync[test]"
pytest
```

## The pieces

- `tfcsync.cloud` holds the records of Terraform Cloud: `Workspace`,
  `Tag`, `SSHKey`, `RunTask`, `WorkspaceRunTask`, `Team`, `TeamAccess`,
  `Variable` and `RunTrigger`. It also holds the `CategoryType`
  (`TERRAFORM`, `ENV`) and `AccessType` (`READ`, `PLAN`, `WRITE`, `ADMIN`,
  `CUSTOM`) enumerations. `CloudClient` is an in-memory Terraform Cloud.
  It stores workspaces, SSH keys, run tasks, run triggers, teams, team
  access, variables and remote state consumers. Every method returns a
  copy. A missing object raises `LookupError`. Sensitive variable values
  come back empty, as they do from the real service.
- `tfcsync.workspace` describes what you want: a `WorkspaceSpec` and its
  parts (`VariableSpec`, `ValueFrom`, `KeyRef`, `TeamAccessSpec`,
  `TeamRef`, `CustomPermission`, `RunTaskSpec`, `RunTriggerSource`,
  `SSHKeyRef`, `RemoteStateSharing`, `ConsumerWorkspace`). A
  `WorkspaceInstance` joins a specification to a client, the workspace ID,
  an `EventRecorder`, and the ConfigMap and Secret data that variables can
  read their values from.
- `tfcsync.sequences.remove_at(items, index)` returns a new list without
  the item at `index`. It raises `IndexError` when the index is out of
  range.

## Example

```python
from tfcsync.cloud import CloudClient
from tfcsync.tags import reconcile_tags
from tfcsync.variables import reconcile_variables
from tfcsync.workspace import VariableSpec, WorkspaceInstance, WorkspaceSpec

client = CloudClient()
workspace = client.create_workspace("acme", "network")

spec = WorkspaceSpec(
    organization="acme",
    tags=["prod", "team-a"],
    terraform_variables=[VariableSpec(name="region", value="eu-west-1")],
)
instance = WorkspaceInstance(
    name="network", spec=spec, client=client, workspace_id=workspace.id
)

reconcile_tags(instance, client.read_workspace(workspace.id))
reconcile_variables(instance)

client.read_workspace(workspace.id).tag_names   # ['prod', 'team-a']
[v.key for v in client.list_variables(workspace.id)]  # ['region']
```

You can also call the functions that compute differences without applying
any change:

```python
from tfcsync.tags import get_tags_to_add, get_tags_to_remove

get_tags_to_add({"prod", "team-a"}, {"prod", "legacy"})     # [Tag(name='team-a')]
get_tags_to_remove({"prod", "team-a"}, {"prod", "legacy"})  # [Tag(name='legacy')]
```

The other areas follow the same pattern:

- `reconcile_ssh_key(instance, workspace)`
- `reconcile_remote_state_sharing(instance)`
- `reconcile_run_triggers(instance)`
- `reconcile_run_tasks(instance)`
- `reconcile_team_access(instance)`
- `reconcile_variables(instance)`

## Errors and events

If a reconcile function cannot finish, it raises an exception, usually
`LookupError`. There is one exception: `reconcile_run_triggers` stops
without raising if it cannot resolve the desired or current triggers.
Some problems are reported without stopping the work. These are recorded
as warning events on `instance.recorder.events`. Examples are a variable
whose value cannot be read from its ConfigMap or Secret, and a team or a
consumer workspace that cannot be found.

A sensitive variable can be made non-sensitive. `CloudClient` does not
allow that change in place, so the variable is deleted and created again.
Sensitive values are never returned, so a sensitive variable with a value
is always sent again.

## What it does not do

- It does not talk to the real Terraform Cloud. The only client is the
  in-memory `CloudClient`.
- It has no command, no service that watches for changes, and no schedule
  for running reconciliations. You call the reconcile functions yourself.
- It does not read ConfigMaps or Secrets from a cluster. You put their
  data in `WorkspaceInstance.config_maps` and `WorkspaceInstance.secrets`.