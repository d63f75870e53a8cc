"""formtree: field-tree model and JSON Schema / UI Schema compiler."""

from src.convert import SchemaImportError, convert_schema_to_fields
from src.data import initialize_nested_form_data
from src.export import FormDocument, dump_form, export_form, load_form
from src.mid import FieldNode, IdGenerator, ValidationError, is_valid, validate_tree
from src.registry import FieldRegistry, FieldTypeSpec
from src.rules import compile_rule
from src.schema import build_json_schema, build_schema_from_fields
from src.uischema import build_ui_schema, build_ui_schema_from_fields

__all__ = [
    # Model
    "FieldNode",
    "IdGenerator",
    "validate_tree",
    "is_valid",
    "ValidationError",
    # Registry
    "FieldRegistry",
    "FieldTypeSpec",
    # Projections
    "build_schema_from_fields",
    "build_json_schema",
    "build_ui_schema_from_fields",
    "build_ui_schema",
    "compile_rule",
    "initialize_nested_form_data",
    # Import / export
    "convert_schema_to_fields",
    "SchemaImportError",
    "FormDocument",
    "export_form",
    "dump_form",
    "load_form",
]
