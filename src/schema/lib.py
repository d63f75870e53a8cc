"""JSON Schema projection of a field tree.

Layout nodes are transparent here: their children are flattened into the
enclosing level. Object nodes open exactly one nested level and array nodes
describe their item schema once through their children.
"""

from collections.abc import Iterable
from typing import Any

from src.mid import FieldNode, NodeKind, children_of, property_nodes

CONFIRM_SUFFIX = "_confirm"


def confirmation_key(key: str) -> str:
    """Key of the synthetic field paired with a confirmed password."""
    return f"{key}{CONFIRM_SUFFIX}"


def needs_confirmation(node: FieldNode) -> bool:
    """True for password leaves that ask for the value twice."""
    return node.type == "password" and getattr(node, "require_confirmation", False)


def _level_schema(children: Iterable[FieldNode]) -> dict[str, Any]:
    """Build ``{"properties", "required"?}`` for one object level."""
    built = build_schema_from_fields(children)
    level: dict[str, Any] = {"properties": built["properties"]}
    if built["required"]:
        level["required"] = built["required"]
    return level


def _array_schema(node: FieldNode) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "array",
        "title": node.label,
        "uniqueItems": True,
    }
    schema.update({k: v for k, v in node.json_schema.items() if k != "type"})
    children = children_of(node)
    if children:
        schema["items"] = {"type": "object", **_level_schema(children)}
    return schema


def _object_schema(node: FieldNode) -> dict[str, Any]:
    return {"type": "object", "title": node.label, **_level_schema(children_of(node))}


def build_schema_from_fields(tree: Iterable[FieldNode]) -> dict[str, Any]:
    """Build the properties and required list for one schema level.

    Args:
        tree: Sibling list to project (layouts are flattened).

    Returns:
        Dictionary with ``properties`` (insertion ordered like the tree)
        and ``required`` (list of keys, possibly empty).
    """
    properties: dict[str, Any] = {}
    required: list[str] = []

    for node in property_nodes(tree):
        if node.kind is NodeKind.ARRAY:
            properties[node.key] = _array_schema(node)
        elif node.kind is NodeKind.OBJECT:
            properties[node.key] = _object_schema(node)
        else:
            properties[node.key] = {**node.json_schema, "title": node.label}

        if node.required:
            required.append(node.key)

        if needs_confirmation(node):
            confirm = confirmation_key(node.key)
            properties[confirm] = {
                "type": "string",
                "format": "password",
                "title": f"Confirm {node.label}",
            }
            if node.required:
                required.append(confirm)

    return {"properties": properties, "required": required}


def build_json_schema(tree: Iterable[FieldNode]) -> dict[str, Any]:
    """Build the root JSON Schema document for a tree.

    Example:
        >>> build_json_schema(tree)
        {'type': 'object', 'properties': {...}, 'required': [...]}
    """
    return {"type": "object", **_level_schema(tree)}


__all__ = [
    "CONFIRM_SUFFIX",
    "confirmation_key",
    "needs_confirmation",
    "build_schema_from_fields",
    "build_json_schema",
]
