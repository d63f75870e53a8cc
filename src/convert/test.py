"""Unit tests for JSON Schema import."""

import pytest

from src.convert import (
    SchemaImportError,
    convert_schema_to_fields,
    humanize_key,
    map_schema_property_to_field_type,
)
from src.mid import ArrayField, IdGenerator, LayoutField, LeafField, ObjectField, is_valid
from src.registry import FieldRegistry, FieldTypeSpec
from src.schema import build_json_schema, build_schema_from_fields


@pytest.fixture(autouse=True)
def _default_radio_limit(monkeypatch):
    monkeypatch.delenv("FORMTREE_RADIO_MAX_OPTIONS", raising=False)


class TestMapPropertyToFieldType:
    """Tests for the primitive dispatch."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "prop,expected",
        [
            ({"type": "string"}, "text"),
            ({"type": "string", "format": "email"}, "email"),
            ({"type": "string", "format": "date"}, "date"),
            ({"type": "string", "format": "date-time"}, "date"),
            ({"type": "string", "format": "data-url"}, "file"),
            ({"type": "string", "format": "uri"}, "url"),
            ({"type": "string", "format": "password"}, "password"),
            ({"type": "string", "maxLength": 500}, "textarea"),
            ({"type": "string", "maxLength": 100}, "text"),
            ({"type": "number"}, "number"),
            ({"type": "integer"}, "integer"),
            ({"type": "boolean"}, "checkbox"),
            ({"type": "null"}, "text"),
            ({}, "text"),
        ],
    )
    def test_primitives(self, registry, prop, expected):
        """Primitive type and format pick the nearest entry."""
        assert map_schema_property_to_field_type(prop, registry).id == expected

    @pytest.mark.unit
    def test_enum_threshold(self, registry):
        """Small enums become radios, larger ones selects."""
        small = {"type": "string", "enum": ["a", "b", "c"]}
        large = {"type": "string", "enum": ["a", "b", "c", "d"]}
        assert map_schema_property_to_field_type(small, registry).id == "radio"
        assert map_schema_property_to_field_type(large, registry).id == "select"

    @pytest.mark.unit
    def test_enum_threshold_configurable(self, registry, monkeypatch):
        """The radio limit comes from the environment."""
        monkeypatch.setenv("FORMTREE_RADIO_MAX_OPTIONS", "5")
        prop = {"type": "string", "enum": ["a", "b", "c", "d"]}
        assert map_schema_property_to_field_type(prop, registry).id == "radio"
        assert map_schema_property_to_field_type(prop, registry, radio_max_options=2).id == "select"

    @pytest.mark.unit
    def test_missing_entry_falls_back_to_text(self):
        """Unregistered targets fall back to text."""
        registry = FieldRegistry(
            [FieldTypeSpec(id="text", label="Text"), FieldTypeSpec(id="checkbox", label="Check")]
        )
        assert map_schema_property_to_field_type({"type": "number"}, registry).id == "text"

    @pytest.mark.unit
    def test_humanize_key(self):
        """Labels are derived from keys."""
        assert humanize_key("first_name") == "First name"
        assert humanize_key("") == ""


class TestConvertSchemaToFields:
    """Tests for whole-document import."""

    @pytest.mark.unit
    def test_missing_properties_raises(self, registry, ids):
        """A document without properties is a reported failure."""
        with pytest.raises(SchemaImportError):
            convert_schema_to_fields({"type": "object"}, registry, ids)
        with pytest.raises(SchemaImportError):
            convert_schema_to_fields([], registry, ids)

    @pytest.mark.unit
    def test_leaves(self, registry, ids):
        """Leaves keep their schema and pick up required and labels."""
        schema = {
            "type": "object",
            "properties": {
                "first_name": {"type": "string"},
                "email": {"type": "string", "format": "email", "title": "E-mail"},
            },
            "required": ["email"],
        }
        tree = convert_schema_to_fields(schema, registry, ids)
        first, email = tree
        assert (first.id, first.type, first.label, first.required) == (
            "field_1",
            "text",
            "First name",
            False,
        )
        assert (email.id, email.type, email.label, email.required) == (
            "field_2",
            "email",
            "E-mail",
            True,
        )

    @pytest.mark.unit
    def test_object_wraps_layout(self, registry, ids):
        """Objects get a synthetic vertical layout around their children."""
        schema = {
            "properties": {
                "address": {
                    "type": "object",
                    "properties": {"street": {"type": "string"}},
                    "required": ["street"],
                }
            }
        }
        (address,) = convert_schema_to_fields(schema, registry, ids)
        assert isinstance(address, ObjectField)
        (layout,) = address.children
        assert isinstance(layout, LayoutField)
        assert layout.type == "vertical-layout"
        assert layout.parent_id == address.id
        (street,) = layout.children
        assert street.parent_id == layout.id
        assert street.required is True
        assert (address.id, street.id, layout.id) == ("field_1", "field_2", "field_3")
        assert layout.key == "layout_3"

    @pytest.mark.unit
    def test_array_of_objects(self, registry, ids):
        """Object arrays become containers with item children and a detail."""
        schema = {
            "properties": {
                "contacts": {
                    "type": "array",
                    "minItems": 1,
                    "items": {
                        "type": "object",
                        "properties": {"phone": {"type": "string"}},
                    },
                }
            }
        }
        (contacts,) = convert_schema_to_fields(schema, registry, ids)
        assert isinstance(contacts, ArrayField)
        assert contacts.json_schema == {"type": "array", "minItems": 1}
        assert contacts.children[0].parent_id == contacts.id
        detail = contacts.ui_options["detail"]["elements"]
        assert detail[0]["scope"] == "#/properties/phone"

    @pytest.mark.unit
    def test_multi_choice_display(self, registry, ids):
        """Enum arrays pick checkboxes when the key says so."""
        choice = {"type": "array", "items": {"type": "string", "enum": ["a", "b"]}}
        schema = {"properties": {"tags": choice, "colors_checkbox": choice}}
        tags, colors = convert_schema_to_fields(schema, registry, ids)
        assert tags.type == "multiselect"
        assert tags.ui_options["displayType"] == "dropdown"
        assert colors.type == "multicheckbox"
        assert colors.ui_options["displayType"] == "checkbox"
        assert colors.json_schema == choice

    @pytest.mark.unit
    def test_non_string_title_becomes_label(self, registry, ids):
        """Titles of any JSON type are imported as text labels."""
        schema = {"properties": {"a": {"type": "string", "title": 5}}}
        (node,) = convert_schema_to_fields(schema, registry, ids)
        assert node.label == "5"

    @pytest.mark.unit
    def test_invalid_fields_reported(self, registry, ids, monkeypatch):
        """Node validation failures surface as SchemaImportError."""

        def reject(node):
            return LeafField.model_validate({**node, "label": ["not", "text"]})

        monkeypatch.setattr("src.convert.lib.load_node", reject)
        with pytest.raises(SchemaImportError, match="invalid fields"):
            convert_schema_to_fields({"properties": {"a": {"type": "string"}}}, registry, ids)

    @pytest.mark.unit
    @pytest.mark.parametrize("required", ["name", {"name": True}, None, 3])
    def test_required_must_be_a_list(self, registry, ids, required):
        """A non-list required value marks nothing as required."""
        schema = {
            "properties": {"n": {"type": "string"}, "name": {"type": "string"}},
            "required": required,
        }
        tree = convert_schema_to_fields(schema, registry, ids)
        assert [node.required for node in tree] == [False, False]

    @pytest.mark.unit
    def test_ids_from_injected_generator(self, registry):
        """Import continues from the caller's counter."""
        ids = IdGenerator(start=40)
        (node,) = convert_schema_to_fields({"properties": {"a": {"type": "string"}}}, registry, ids)
        assert node.id == "field_41"
        assert ids.last == 41

    @pytest.mark.unit
    def test_imported_tree_is_valid(self, sample_tree, registry, ids):
        """Imported trees pass structural validation."""
        tree = convert_schema_to_fields(build_json_schema(sample_tree), registry, ids)
        assert is_valid(tree)


class TestRoundTrip:
    """Tests for build/import round trips."""

    @pytest.mark.unit
    def test_unambiguous_leaves(self, flat_tree, registry, ids):
        """Build -> import -> build reproduces the same schema."""
        original = build_schema_from_fields(flat_tree)
        imported = convert_schema_to_fields(build_json_schema(flat_tree), registry, ids)
        assert build_schema_from_fields(imported) == original

    @pytest.mark.unit
    def test_nested_containers(self, sample_tree, registry, ids):
        """Objects and arrays keep their properties through a round trip."""
        original = build_json_schema(sample_tree)
        imported = convert_schema_to_fields(original, registry, ids)
        rebuilt = build_json_schema(imported)
        assert rebuilt["required"] == original["required"]
        assert rebuilt["properties"]["address"] == original["properties"]["address"]
        assert rebuilt["properties"]["contacts"]["items"] == original["properties"]["contacts"]["items"]
