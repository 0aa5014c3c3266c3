"""
Task Resource Mapping

This module rewrites the Resource field of Task states inside state machine
definitions so that local runs hit local endpoints instead of deployed ARNs.

Mappings are keyed by the field name under which a container was reached
while walking the definition tree (usually the state name), not by a stable
state identifier. Two unrelated states reached through the same key receive
the same replacement.
"""

from typing import Any, Dict, Optional


def _is_container(value: Any) -> bool:
    return isinstance(value, (dict, list))


def replace_task_resource_mappings(
    node: Any, mapping: Optional[Dict[str, Any]], parent_key: Optional[str] = None
) -> None:
    """
    Replace Resource properties with the values mapped in TaskResourceMapping.

    The tree is mutated in place. While iterating a dict that owns a Resource
    field, each container-valued child triggers the replacement when
    ``parent_key`` (the key this dict was reached under) is mapped. Every
    nested dict and list is then visited recursively. List elements are
    visited without a parent key.

    Scalars, unmapped keys and states without a Resource field are left as
    they are; no fields are ever added and nothing is raised.

    Args:
        node: Any value from a parsed state machine configuration tree
        mapping: Parent key -> replacement Resource value
        parent_key: Key under which ``node`` was reached in its parent
    """
    if not mapping or not _is_container(node):
        return

    if isinstance(node, dict):
        children = list(node.items())
    else:
        children = [(None, item) for item in node]

    for key, value in children:
        if not _is_container(value):
            continue
        if isinstance(node, dict) and "Resource" in node and parent_key in mapping:
            node["Resource"] = mapping[parent_key]
        # Recursive replacement of nested states
        replace_task_resource_mappings(value, mapping, key)


def replace_state_machine_resources(
    state_machines: Dict[str, Any], mapping: Optional[Dict[str, Any]]
) -> Dict[str, Any]:
    """
    Apply a TaskResourceMapping to a whole stateMachines collection.

    Args:
        state_machines: Workflow name -> workflow definition entry
        mapping: TaskResourceMapping from the plugin settings

    Returns:
        The same (mutated) ``state_machines`` object, for chaining
    """
    replace_task_resource_mappings(state_machines, mapping)
    return state_machines
