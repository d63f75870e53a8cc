"""Unit tests for JSON Schema generation."""

import pytest

from src.mid import ArrayField, LayoutField, LeafField, ObjectField
from src.schema import build_json_schema, build_schema_from_fields


class TestLeaves:
    """Tests for control projection."""

    @pytest.mark.unit
    def test_leaf_merges_schema_and_title(self):
        """A leaf contributes its fragment plus its label."""
        tree = (
            LeafField(
                id="field_1",
                type="integer",
                key="age",
                label="Age",
                required=True,
                json_schema={"type": "integer", "minimum": 0},
            ),
        )
        result = build_schema_from_fields(tree)
        assert result == {
            "properties": {"age": {"type": "integer", "minimum": 0, "title": "Age"}},
            "required": ["age"],
        }

    @pytest.mark.unit
    def test_property_order_follows_tree(self, flat_tree):
        """Property order mirrors traversal order."""
        keys = list(build_schema_from_fields(flat_tree)["properties"])
        assert keys == ["first_name", "age", "email", "subscribed", "birthday"]

    @pytest.mark.unit
    def test_password_confirmation(self):
        """A confirmed password adds a required twin property."""
        tree = (
            LeafField(
                id="field_1",
                type="password",
                key="pw",
                label="Password",
                required=True,
                require_confirmation=True,
                json_schema={"type": "string", "format": "password"},
            ),
        )
        result = build_schema_from_fields(tree)
        assert result["properties"]["pw_confirm"] == {
            "type": "string",
            "format": "password",
            "title": "Confirm Password",
        }
        assert result["required"] == ["pw", "pw_confirm"]

    @pytest.mark.unit
    def test_optional_confirmation_not_required(self):
        """The twin is only required when the password is."""
        tree = (
            LeafField(id="field_1", type="password", key="pw", require_confirmation=True),
        )
        result = build_schema_from_fields(tree)
        assert "pw_confirm" in result["properties"]
        assert result["required"] == []

    @pytest.mark.unit
    def test_confirmation_ignored_for_other_types(self):
        """Only password leaves expand."""
        tree = (LeafField(id="field_1", type="text", key="t", require_confirmation=True),)
        assert list(build_schema_from_fields(tree)["properties"]) == ["t"]


class TestContainers:
    """Tests for layout / object / array projection."""

    @pytest.mark.unit
    def test_sample_tree(self, sample_tree):
        """Layouts flatten, objects nest and arrays describe items."""
        result = build_schema_from_fields(sample_tree)
        props = result["properties"]
        assert list(props) == ["name", "age", "active", "address", "contacts"]
        assert "layout_2" not in props
        assert props["address"] == {
            "type": "object",
            "title": "Address",
            "properties": {"street": {"type": "string", "title": "Street"}},
            "required": ["street"],
        }
        assert props["contacts"] == {
            "type": "array",
            "title": "Contacts",
            "uniqueItems": True,
            "items": {
                "type": "object",
                "properties": {
                    "email": {"type": "string", "format": "email", "title": "Email"},
                    "primary": {"type": "boolean", "title": "Primary"},
                },
                "required": ["email"],
            },
        }
        assert result["required"] == ["name"]

    @pytest.mark.unit
    def test_nested_layouts_flatten(self):
        """Layouts inside layouts are still transparent."""
        tree = (
            LayoutField(
                id="field_1",
                type="group",
                children=(
                    LayoutField(
                        id="field_2",
                        type="horizontal-layout",
                        children=(
                            LeafField(id="field_3", type="text", key="deep", required=True),
                        ),
                    ),
                ),
            ),
        )
        result = build_schema_from_fields(tree)
        assert list(result["properties"]) == ["deep"]
        assert result["required"] == ["deep"]

    @pytest.mark.unit
    def test_array_type_is_always_array(self):
        """A stray type in the array fragment is ignored."""
        tree = (
            ArrayField(
                id="field_1",
                type="array",
                key="rows",
                label="Rows",
                json_schema={"type": "object", "minItems": 1},
            ),
        )
        rows = build_schema_from_fields(tree)["properties"]["rows"]
        assert rows == {"type": "array", "title": "Rows", "uniqueItems": True, "minItems": 1}

    @pytest.mark.unit
    def test_empty_object(self):
        """Childless objects have empty properties and no required list."""
        tree = (ObjectField(id="field_1", type="object", key="meta", label="Meta"),)
        meta = build_schema_from_fields(tree)["properties"]["meta"]
        assert meta == {"type": "object", "title": "Meta", "properties": {}}

    @pytest.mark.unit
    def test_required_container(self):
        """Required objects and arrays are listed by key."""
        tree = (
            ObjectField(id="field_1", type="object", key="meta", required=True),
            ArrayField(id="field_2", type="array", key="rows", required=True),
        )
        assert build_schema_from_fields(tree)["required"] == ["meta", "rows"]


class TestBuildJsonSchema:
    """Tests for the root document."""

    @pytest.mark.unit
    def test_root_document(self, flat_tree):
        """The root is an object with the required list."""
        schema = build_json_schema(flat_tree)
        assert schema["type"] == "object"
        assert schema["required"] == ["first_name", "email"]

    @pytest.mark.unit
    def test_required_omitted_when_empty(self):
        """No required list is emitted for an all-optional form."""
        schema = build_json_schema((LeafField(id="field_1", type="text", key="a"),))
        assert "required" not in schema

    @pytest.mark.unit
    def test_empty_tree(self):
        """An empty tree yields an empty object schema."""
        assert build_json_schema(()) == {"type": "object", "properties": {}}
