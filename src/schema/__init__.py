"""Schema module - JSON Schema generation from field trees.

Example usage:
    >>> from src.schema import build_json_schema
    >>> schema = build_json_schema(tree)
"""

from .lib import (
    CONFIRM_SUFFIX,
    build_json_schema,
    build_schema_from_fields,
    confirmation_key,
    needs_confirmation,
)

__all__ = [
    "CONFIRM_SUFFIX",
    "confirmation_key",
    "needs_confirmation",
    "build_schema_from_fields",
    "build_json_schema",
]
