"""Unit tests for default data initialization."""

import pytest

from src.data import create_default_array_item, initialize_nested_form_data
from src.mid import ArrayField, LeafField, ObjectField


class TestInitializeNestedFormData:
    """Tests for seeding and merging."""

    @pytest.mark.unit
    def test_sample_tree(self, sample_tree):
        """Every property gets a type-appropriate default."""
        data = initialize_nested_form_data(sample_tree)
        assert data == {
            "name": "",
            "age": 0,
            "active": False,
            "address": {"street": ""},
            "contacts": [{"email": "", "primary": False}],
        }

    @pytest.mark.unit
    def test_idempotent(self, sample_tree):
        """Initializing seeded data changes nothing."""
        once = initialize_nested_form_data(sample_tree)
        assert initialize_nested_form_data(sample_tree, once) == once

    @pytest.mark.unit
    def test_existing_values_kept(self, sample_tree):
        """User data is merged, never overwritten."""
        existing = {"name": "Ada", "address": {"city": "London"}, "contacts": []}
        data = initialize_nested_form_data(sample_tree, existing)
        assert data["name"] == "Ada"
        assert data["address"] == {"city": "London", "street": ""}
        assert data["contacts"] == []

    @pytest.mark.unit
    def test_input_not_mutated(self, sample_tree):
        """The caller's dictionaries are left untouched."""
        existing = {"address": {"city": "London"}}
        initialize_nested_form_data(sample_tree, existing)
        assert existing == {"address": {"city": "London"}}

    @pytest.mark.unit
    def test_integer_and_array_leaves(self):
        """Integers seed 0 and array-typed leaves seed []."""
        tree = (
            LeafField(id="field_1", type="integer", key="n", json_schema={"type": "integer"}),
            LeafField(
                id="field_2",
                type="multiselect",
                key="tags",
                json_schema={"type": "array", "items": {"type": "string"}},
            ),
        )
        assert initialize_nested_form_data(tree) == {"n": 0, "tags": []}

    @pytest.mark.unit
    def test_empty_array_container(self):
        """Arrays without item fields seed an empty list."""
        tree = (ArrayField(id="field_1", type="array", key="rows"),)
        assert initialize_nested_form_data(tree) == {"rows": []}

    @pytest.mark.unit
    def test_password_confirmation(self):
        """A confirmed password seeds its twin key."""
        tree = (
            LeafField(
                id="field_1",
                type="password",
                key="pw",
                require_confirmation=True,
                json_schema={"type": "string"},
            ),
        )
        assert initialize_nested_form_data(tree) == {"pw": "", "pw_confirm": ""}


class TestCreateDefaultArrayItem:
    """Tests for array item defaults."""

    @pytest.mark.unit
    def test_nested_containers(self):
        """Objects recurse and arrays start empty inside an item."""
        children = (
            ObjectField(
                id="field_1",
                type="object",
                key="meta",
                children=(
                    LeafField(id="field_2", type="checkbox", key="ok", json_schema={"type": "boolean"}),
                ),
            ),
            ArrayField(id="field_3", type="array", key="tags"),
            LeafField(id="field_4", type="text", key="note"),
        )
        assert create_default_array_item(children) == {
            "meta": {"ok": False},
            "tags": [],
            "note": "",
        }
