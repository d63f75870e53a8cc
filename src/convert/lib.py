"""Import a JSON Schema document into a field tree.

The mapping is heuristic and intentionally lossy: enum length decides
between radio buttons and a select, a key containing ``checkbox`` selects
the checkbox display for multi-choice arrays, and long strings become text
areas. Trees built from unambiguous leaf types survive a build/import round
trip with the same properties and required set.
"""

import copy
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.config import EnvVar, get_environment
from src.mid import FieldTree, IdGenerator, IdSource, format_field_id, load_node
from src.registry import FieldRegistry, FieldTypeSpec

logger = logging.getLogger(__name__)

TEXTAREA_MIN_LENGTH = 100

# Array-container schema keywords carried over on import.
_ARRAY_KEYWORDS = ("title", "minItems", "maxItems", "uniqueItems", "tableView")

_STRING_FORMATS: dict[str, str] = {
    "email": "email",
    "date": "date",
    "date-time": "date",
    "data-url": "file",
    "uri": "url",
    "password": "password",
}


class SchemaImportError(ValueError):
    """Raised when a document cannot be imported as a form."""


def humanize_key(key: str) -> str:
    """Derive a label from a property key (``first_name`` -> ``First name``)."""
    if not key:
        return key
    return key[0].upper() + key[1:].replace("_", " ")


def _pick(registry: FieldRegistry, type_id: str) -> FieldTypeSpec:
    return registry.get(type_id) or registry.get("text") or registry.default_control()


def map_schema_property_to_field_type(
    prop: Mapping[str, Any] | None,
    registry: FieldRegistry | None = None,
    *,
    radio_max_options: int | None = None,
) -> FieldTypeSpec:
    """Choose the registry entry for a primitive or enum property.

    Args:
        prop: JSON Schema of the property.
        registry: Registry to pick from (defaults shipped).
        radio_max_options: Largest enum rendered as radio buttons.
            Defaults to FORMTREE_RADIO_MAX_OPTIONS.

    Returns:
        The nearest registered entry, text when nothing matches.
    """
    registry = registry or FieldRegistry.with_defaults()
    prop = prop or {}
    if radio_max_options is None:
        radio_max_options = get_environment(EnvVar.RADIO_MAX_OPTIONS)

    enum_values = prop.get("enum")
    if isinstance(enum_values, list) and enum_values:
        return _pick(registry, "radio" if len(enum_values) <= radio_max_options else "select")

    prop_type = prop.get("type")
    if prop_type == "string":
        fmt = prop.get("format")
        if fmt in _STRING_FORMATS:
            return _pick(registry, _STRING_FORMATS[fmt])
        max_length = prop.get("maxLength")
        if isinstance(max_length, (int, float)) and max_length > TEXTAREA_MIN_LENGTH:
            return _pick(registry, "textarea")
        return _pick(registry, "text")
    if prop_type == "number":
        return _pick(registry, "number")
    if prop_type == "integer":
        return registry.get("integer") or _pick(registry, "number")
    if prop_type == "boolean":
        return _pick(registry, "checkbox")
    return _pick(registry, "text")


class _Importer:
    """Recursive importer bound to one registry and one id source."""

    def __init__(self, registry: FieldRegistry, id_source: IdSource, radio_max_options: int):
        self.registry = registry
        self.id_source = id_source
        self.radio_max_options = radio_max_options

    def level(self, schema: Mapping[str, Any], parent_id: str | None) -> list[dict[str, Any]]:
        properties = schema.get("properties")
        if not isinstance(properties, Mapping):
            return []
        required = schema.get("required")
        if not isinstance(required, list):
            required = []
        nodes = []
        for key, prop in properties.items():
            if not isinstance(prop, Mapping):
                prop = {}
            node = self.node(key, prop, parent_id)
            node["required"] = key in required
            nodes.append(node)
        return nodes

    def node(self, key: str, prop: Mapping[str, Any], parent_id: str | None) -> dict[str, Any]:
        number = self.id_source()
        node_id = format_field_id(number)
        label = str(prop.get("title") or humanize_key(key))
        base = {"id": node_id, "key": key, "label": label, "parentId": parent_id}

        prop_type = prop.get("type")
        items = prop.get("items") if isinstance(prop.get("items"), Mapping) else {}

        if prop_type == "object" and isinstance(prop.get("properties"), Mapping):
            return self.object_node(base, prop)
        if prop_type == "array" and items.get("type") == "object":
            return self.array_node(base, prop, items)
        if prop_type == "array" and items.get("enum"):
            return self.multi_choice_node(base, prop)

        spec = map_schema_property_to_field_type(
            prop, self.registry, radio_max_options=self.radio_max_options
        )
        schema = copy.deepcopy(dict(spec.default_schema))
        schema.update(copy.deepcopy(dict(prop)))
        return {
            **base,
            "type": spec.id,
            "schema": schema,
            "uiOptions": copy.deepcopy(dict(spec.default_ui_options)),
        }

    def object_node(self, base: dict[str, Any], prop: Mapping[str, Any]) -> dict[str, Any]:
        children = self.level(prop, None)
        layout_number = self.id_source()
        layout_id = format_field_id(layout_number)
        for child in children:
            child["parentId"] = layout_id
        layout = {
            "id": layout_id,
            "type": "vertical-layout",
            "key": f"layout_{layout_number}",
            "label": "Vertical Layout",
            "parentId": base["id"],
            "children": children,
        }
        schema = {k: copy.deepcopy(v) for k, v in prop.items() if k not in ("properties", "required")}
        return {**base, "type": "object", "schema": schema, "children": [layout]}

    def array_node(
        self, base: dict[str, Any], prop: Mapping[str, Any], items: Mapping[str, Any]
    ) -> dict[str, Any]:
        children = self.level(items, base["id"])
        schema: dict[str, Any] = {"type": "array"}
        for keyword in _ARRAY_KEYWORDS:
            if prop.get(keyword):
                schema[keyword] = copy.deepcopy(prop[keyword])
        detail = {
            "type": "VerticalLayout",
            "elements": [
                {
                    "type": "Control",
                    "scope": f"#/properties/{child['key']}",
                    "options": copy.deepcopy(child.get("uiOptions", {})),
                }
                for child in children
            ],
        }
        return {
            **base,
            "type": "array",
            "schema": schema,
            "uiOptions": {"addable": True, "detail": detail},
            "children": children,
        }

    def multi_choice_node(self, base: dict[str, Any], prop: Mapping[str, Any]) -> dict[str, Any]:
        use_checkboxes = "checkbox" in base["key"]
        spec = _pick(self.registry, "multicheckbox" if use_checkboxes else "multiselect")
        ui_options = {
            **copy.deepcopy(dict(spec.default_ui_options)),
            "multi": True,
            "format": "select",
            "displayType": "checkbox" if use_checkboxes else "dropdown",
        }
        return {
            **base,
            "type": spec.id,
            "schema": copy.deepcopy(dict(prop)),
            "uiOptions": ui_options,
        }


def convert_schema_to_fields(
    schema: Mapping[str, Any],
    registry: FieldRegistry | None = None,
    id_source: IdSource | None = None,
    *,
    radio_max_options: int | None = None,
) -> FieldTree:
    """Import a JSON Schema document as a field tree.

    Args:
        schema: Root JSON Schema with a ``properties`` object.
        registry: Registry used to pick node types (defaults shipped).
        id_source: Injected id generator; a fresh one when omitted.
        radio_max_options: Largest enum rendered as radio buttons.

    Returns:
        Tuple of root nodes.

    Raises:
        SchemaImportError: If the document has no ``properties`` object or
            describes fields that fail validation.
    """
    if not isinstance(schema, Mapping) or not isinstance(schema.get("properties"), Mapping):
        raise SchemaImportError("Schema has no 'properties' object to import")

    if radio_max_options is None:
        radio_max_options = get_environment(EnvVar.RADIO_MAX_OPTIONS)
    importer = _Importer(
        registry or FieldRegistry.with_defaults(),
        id_source if id_source is not None else IdGenerator(),
        radio_max_options,
    )
    nodes = importer.level(schema, None)
    logger.debug("Imported %d root fields", len(nodes))
    try:
        return tuple(load_node(node) for node in nodes)
    except PydanticValidationError as e:
        raise SchemaImportError(f"Schema describes invalid fields: {e}") from e


__all__ = [
    "SchemaImportError",
    "TEXTAREA_MIN_LENGTH",
    "humanize_key",
    "map_schema_property_to_field_type",
    "convert_schema_to_fields",
]
