"""Seed form data from a field tree.

Values are only filled where a key is absent, so initializing an already
seeded object is a no-op and user-entered data is never overwritten.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from src.mid import FieldNode, NodeKind, children_of, property_nodes
from src.schema import confirmation_key, needs_confirmation


def default_value(node: FieldNode) -> Any:
    """Default value for a leaf, chosen by its schema type.

    Returns:
        False for booleans, 0 for numbers, [] for arrays, '' otherwise.
    """
    schema_type = node.json_schema.get("type")
    if schema_type == "boolean":
        return False
    if schema_type in ("number", "integer"):
        return 0
    if schema_type == "array":
        return []
    return ""


def create_default_array_item(children: Iterable[FieldNode]) -> dict[str, Any]:
    """Build one array item with defaults for every item property."""
    item: dict[str, Any] = {}
    for node in property_nodes(children):
        if node.kind is NodeKind.OBJECT:
            item[node.key] = create_default_array_item(children_of(node))
        elif node.kind is NodeKind.ARRAY:
            item[node.key] = []
        else:
            item[node.key] = default_value(node)
            if needs_confirmation(node):
                item[confirmation_key(node.key)] = ""
    return item


def _seed_array(node: FieldNode) -> list[Any]:
    children = children_of(node)
    return [create_default_array_item(children)] if children else []


def initialize_nested_form_data(
    tree: Iterable[FieldNode], data: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Merge default values for every property into existing data.

    Args:
        tree: Sibling list describing one object level.
        data: Existing values for that level. Never mutated.

    Returns:
        New dictionary holding the existing values plus defaults for the
        keys that were missing. Nested objects are merged recursively.
    """
    result = dict(data or {})

    for node in property_nodes(tree):
        key = node.key
        if node.kind is NodeKind.OBJECT:
            existing = result.get(key)
            nested = existing if isinstance(existing, Mapping) else {}
            if key not in result or isinstance(existing, Mapping):
                result[key] = initialize_nested_form_data(children_of(node), nested)
        elif key not in result:
            if node.kind is NodeKind.ARRAY or node.json_schema.get("type") == "array":
                result[key] = _seed_array(node)
            else:
                result[key] = default_value(node)

        if needs_confirmation(node):
            result.setdefault(confirmation_key(key), "")

    return result


__all__ = [
    "default_value",
    "create_default_array_item",
    "initialize_nested_form_data",
]
