"""Convert module - JSON Schema import into field trees.

Example usage:
    >>> from src.convert import convert_schema_to_fields
    >>> tree = convert_schema_to_fields(schema, registry, ids)
"""

from .lib import (
    TEXTAREA_MIN_LENGTH,
    SchemaImportError,
    convert_schema_to_fields,
    humanize_key,
    map_schema_property_to_field_type,
)

__all__ = [
    "SchemaImportError",
    "TEXTAREA_MIN_LENGTH",
    "humanize_key",
    "map_schema_property_to_field_type",
    "convert_schema_to_fields",
]
