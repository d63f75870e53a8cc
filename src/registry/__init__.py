"""Field-type registry - palette entries and node materialization.

Example usage:
    >>> from src.mid import IdGenerator
    >>> from src.registry import FieldRegistry, create_field
    >>> registry = FieldRegistry.with_defaults()
    >>> node = create_field(registry.require("email"), IdGenerator())
    >>> node.key
    'email_1'
"""

from .lib import DEFAULT_FIELD_TYPES, FieldRegistry, FieldTypeSpec, create_field

__all__ = [
    "FieldTypeSpec",
    "FieldRegistry",
    "DEFAULT_FIELD_TYPES",
    "create_field",
]
