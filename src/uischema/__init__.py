"""UI Schema module - presentation schema generation from field trees.

Example usage:
    >>> from src.uischema import build_ui_schema
    >>> uischema = build_ui_schema(tree)
"""

from .lib import (
    LAYOUT_ELEMENT_TYPES,
    ROOT_SCOPE,
    build_ui_schema,
    build_ui_schema_from_fields,
    scope_for,
)

__all__ = [
    "ROOT_SCOPE",
    "LAYOUT_ELEMENT_TYPES",
    "scope_for",
    "build_ui_schema_from_fields",
    "build_ui_schema",
]
