"""Keep the variables of a workspace equal to the variables in its spec."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace

from tfcsync.cloud import CategoryType, Variable
from tfcsync.workspace import EVENT_WARNING, ValueFrom, VariableSpec, WorkspaceInstance

_log = logging.getLogger(__name__)


def _comparable(variable: Variable) -> Variable:
    """Drop the attributes that do not take part in a comparison."""
    return replace(variable, id="", version_id="", workspace=None)


def get_variables_to_create(
    instance_variables: Mapping[str, Variable], workspace_variables: Mapping[str, Variable]
) -> dict[str, Variable]:
    """Return the variables in the spec that the workspace lacks."""
    return var_difference(instance_variables, workspace_variables)


def get_variables_to_delete(
    instance_variables: Mapping[str, Variable], workspace_variables: Mapping[str, Variable]
) -> dict[str, Variable]:
    """Return the variables in the workspace that the spec lacks."""
    return var_difference(workspace_variables, instance_variables)


def get_variables_to_update(
    instance_variables: Mapping[str, Variable], workspace_variables: Mapping[str, Variable]
) -> dict[str, Variable]:
    """Return the variables present on both sides whose content differs.

    Sensitive values cannot be read back, so sensitive variables with a value
    always count as changed. Variables that stop being sensitive are left to
    get_variables_requiring_recreate. Each returned variable carries the ID of
    the workspace variable.
    """
    changed: dict[str, Variable] = {}
    for key, wanted in instance_variables.items():
        current = workspace_variables.get(key)
        if current is None:
            continue
        if is_no_longer_sensitive(wanted.sensitive, current.sensitive):
            continue
        if _comparable(wanted) != _comparable(current):
            changed[wanted.key] = replace(wanted, id=current.id)
    return changed


def get_variables_requiring_recreate(
    instance_variables: Mapping[str, Variable], workspace_variables: Mapping[str, Variable]
) -> dict[str, Variable]:
    """Return the variables that stop being sensitive and must be recreated."""
    recreate: dict[str, Variable] = {}
    for key, wanted in instance_variables.items():
        current = workspace_variables.get(key)
        if current is not None and is_no_longer_sensitive(wanted.sensitive, current.sensitive):
            recreate[wanted.key] = replace(wanted, id=current.id)
    return recreate


def is_no_longer_sensitive(instance_sensitive: bool, workspace_sensitive: bool) -> bool:
    """Tell whether a variable changes from sensitive to non-sensitive."""
    return not instance_sensitive and workspace_sensitive


def var_difference(a: Mapping[str, Variable], b: Mapping[str, Variable]) -> dict[str, Variable]:
    """Return the entries of a whose keys are not in b; content is not compared."""
    return {key: variable for key, variable in a.items() if key not in b}


def create_workspace_variables(
    instance: WorkspaceInstance, variables: Mapping[str, Variable], category: CategoryType
) -> None:
    for variable in variables.values():
        instance.client.create_variable(
            instance.workspace_id,
            key=variable.key,
            value=variable.value,
            description=variable.description,
            hcl=variable.hcl,
            sensitive=variable.sensitive,
            category=category,
        )


def get_workspace_variables(instance: WorkspaceInstance) -> list[Variable]:
    """Return every variable of the workspace."""
    return instance.client.list_variables(instance.workspace_id)


def update_workspace_variables(instance: WorkspaceInstance, variables: Mapping[str, Variable]) -> None:
    for variable in variables.values():
        instance.client.update_variable(
            instance.workspace_id,
            variable.id,
            key=variable.key,
            value=variable.value,
            description=variable.description,
            hcl=variable.hcl,
            sensitive=variable.sensitive,
            category=variable.category,
        )


def update_workspace_sensitive_variables(
    instance: WorkspaceInstance, variables: Mapping[str, Variable], category: CategoryType
) -> None:
    """Make sensitive variables non-sensitive by deleting and recreating them."""
    delete_workspace_variables(instance, variables)
    create_workspace_variables(instance, variables, category)


def delete_workspace_variables(instance: WorkspaceInstance, variables: Mapping[str, Variable]) -> None:
    for variable in variables.values():
        instance.client.delete_variable(instance.workspace_id, variable.id)


def get_value_from(instance: WorkspaceInstance, value_from: ValueFrom) -> str:
    """Read a value from a ConfigMap or Secret in the instance's namespace.

    Raises LookupError when the object or the key does not exist. Returns an
    empty string when no source is given.
    """
    ref = value_from.config_map_key_ref
    if ref is not None:
        data = instance.config_maps.get(ref.name)
        if data is None:
            raise LookupError(f"ConfigMap {instance.namespace}/{ref.name} not found")
        if ref.key in data:
            return data[ref.key]
        raise LookupError(f"key {ref.key} not found in ConfigMap {ref.name}")

    ref = value_from.secret_key_ref
    if ref is not None:
        data = instance.secrets.get(ref.name)
        if data is None:
            raise LookupError(f"Secret {instance.namespace}/{ref.name} not found")
        if ref.key in data:
            return data[ref.key].decode("utf-8", errors="replace")
        raise LookupError(f"key {ref.key} not found in Secret {ref.name}")

    return ""


def _spec_variables(instance: WorkspaceInstance, category: CategoryType) -> Iterable[VariableSpec]:
    if category == CategoryType.ENV:
        return instance.spec.environment_variables
    if category == CategoryType.TERRAFORM:
        return instance.spec.terraform_variables
    return ()


def get_variables_by_category(instance: WorkspaceInstance, category: CategoryType) -> dict[str, Variable]:
    """Return the spec's variables of one category keyed by name.

    A variable whose value cannot be read is skipped with a warning event.
    """
    variables: dict[str, Variable] = {}
    for spec in _spec_variables(instance, category):
        value = spec.value
        if spec.value_from is not None:
            try:
                value = get_value_from(instance, spec.value_from)
            except LookupError as error:
                _log.error("reconcile variables: failed to get value for the variable %s: %s", spec.name, error)
                instance.recorder.event(EVENT_WARNING, "ReconcileVariables", "Failed to get value for a variable")
                continue
        variables[spec.name] = Variable(
            key=spec.name,
            description=spec.description,
            value=value,
            hcl=spec.hcl,
            sensitive=spec.sensitive,
            category=category,
        )
    return variables


def get_workspace_variables_by_category(
    workspace_variables: Iterable[Variable], category: CategoryType
) -> dict[str, Variable]:
    """Return the workspace variables of one category keyed by name."""
    return {
        variable.key: Variable(
            id=variable.id,
            key=variable.key,
            description=variable.description,
            value=variable.value,
            hcl=variable.hcl,
            sensitive=variable.sensitive,
            category=category,
        )
        for variable in workspace_variables
        if variable.category == category
    }


def reconcile_variables_by_category(
    instance: WorkspaceInstance, variables: Iterable[Variable], category: CategoryType
) -> None:
    workspace_id = instance.workspace_id
    wanted = get_variables_by_category(instance, category)
    current = get_workspace_variables_by_category(variables, category)
    label = CategoryType(category).value

    delete = get_variables_to_delete(wanted, current)
    if delete:
        _log.info(
            "reconcile variables: deleting %d %s variables from the workspace ID %s",
            len(delete), label, workspace_id,
        )
        delete_workspace_variables(instance, delete)

    create = get_variables_to_create(wanted, current)
    if create:
        _log.info(
            "reconcile variables: creating %d new %s variables to the workspace ID %s",
            len(create), label, workspace_id,
        )
        create_workspace_variables(instance, create, category)

    update = get_variables_to_update(wanted, current)
    if update:
        _log.info(
            "reconcile variables: updating %d %s variables in the workspace ID %s",
            len(update), label, workspace_id,
        )
        update_workspace_variables(instance, update)

    recreate = get_variables_requiring_recreate(wanted, current)
    if recreate:
        _log.info(
            "reconcile variables: making %d %s variables no sensitive in the workspace ID %s",
            len(recreate), label, workspace_id,
        )
        update_workspace_sensitive_variables(instance, recreate, category)


def reconcile_variables(instance: WorkspaceInstance) -> None:
    """Bring the Terraform and environment variables in line with the spec."""
    _log.info("reconcile variables: new reconciliation event for %s", instance.name)

    variables = get_workspace_variables(instance)
    reconcile_variables_by_category(instance, variables, CategoryType.TERRAFORM)
    reconcile_variables_by_category(instance, variables, CategoryType.ENV)