"""MID layer - Metadata-Intermediate-Definition for form trees.

This module provides the field-tree model (FieldNode), the id generator
injected into every builder, and structural validation.

Example usage:
    >>> from src.mid import LeafField, validate_tree
    >>> node = LeafField(id="field_1", type="text", key="name", label="Name")
    >>> errors = validate_tree((node,))
"""

from .lib import (
    LAYOUT_TYPES,
    ArrayField,
    Condition,
    Effect,
    FieldNode,
    FieldTree,
    FieldType,
    IdGenerator,
    IdSource,
    LayoutField,
    LeafField,
    LogicalJoin,
    NodeKind,
    ObjectField,
    ValidationError,
    children_of,
    dump_tree,
    format_field_id,
    get_node_kind,
    is_valid,
    iter_nodes,
    load_node,
    load_tree,
    property_nodes,
    validate_tree,
)

__all__ = [
    # Enums
    "NodeKind",
    "FieldType",
    "Effect",
    "LogicalJoin",
    "LAYOUT_TYPES",
    "get_node_kind",
    # Core model
    "Condition",
    "LeafField",
    "LayoutField",
    "ObjectField",
    "ArrayField",
    "FieldNode",
    "FieldTree",
    "children_of",
    "iter_nodes",
    "property_nodes",
    "load_node",
    "load_tree",
    "dump_tree",
    # Ids
    "IdSource",
    "IdGenerator",
    "format_field_id",
    # Validation
    "ValidationError",
    "validate_tree",
    "is_valid",
]
