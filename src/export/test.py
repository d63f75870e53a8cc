"""Unit tests for form documents and boundary edits."""

import json

import pytest

from src.convert import SchemaImportError
from src.export import (
    FormDocument,
    FormState,
    apply_edited_text,
    build_form_state,
    dump_form,
    export_form,
    load_form,
)
from src.mid import IdGenerator, dump_tree


class TestBuildFormState:
    """Tests for renderer state projection."""

    @pytest.mark.unit
    def test_projections(self, sample_tree):
        """State holds schema, UI schema and seeded data."""
        state = build_form_state(sample_tree)
        assert state.schema["type"] == "object"
        assert state.uischema["type"] == "VerticalLayout"
        assert state.data["contacts"] == [{"email": "", "primary": False}]

    @pytest.mark.unit
    def test_existing_data_merged(self, flat_tree):
        """Existing data survives seeding."""
        state = build_form_state(flat_tree, {"first_name": "Ada"})
        assert state.data["first_name"] == "Ada"
        assert state.data["subscribed"] is False


class TestExport:
    """Tests for document export."""

    @pytest.mark.unit
    def test_export_form(self, sample_tree):
        """Documents bundle both schemas with the tree."""
        document = export_form(sample_tree)
        assert isinstance(document, FormDocument)
        assert document.fields == sample_tree
        assert "address" in document.json_schema["properties"]

    @pytest.mark.unit
    def test_dump_form_keys(self, sample_tree):
        """Dumped documents use schema / uischema / fields keys."""
        payload = json.loads(dump_form(sample_tree))
        assert set(payload) == {"schema", "uischema", "fields"}
        assert payload["fields"] == dump_tree(sample_tree)

    @pytest.mark.unit
    def test_dump_form_indent(self, flat_tree, monkeypatch):
        """Indentation follows the argument, then the environment."""
        monkeypatch.setenv("FORMTREE_INDENT", "4")
        assert '\n    "schema"' in dump_form(flat_tree)
        assert '\n  "schema"' in dump_form(flat_tree, indent=2)


class TestLoadForm:
    """Tests for document loading."""

    @pytest.mark.unit
    def test_fields_restore_exactly(self, sample_tree):
        """A document with fields reloads the identical tree."""
        assert load_form(dump_form(sample_tree)) == sample_tree

    @pytest.mark.unit
    def test_bare_schema_is_imported(self, registry):
        """A plain JSON Schema goes through the importer."""
        tree = load_form(
            {"type": "object", "properties": {"age": {"type": "integer"}}},
            registry,
            IdGenerator(),
        )
        assert tree[0].type == "integer"

    @pytest.mark.unit
    def test_document_without_fields(self, flat_tree, registry):
        """A document without fields imports its schema entry."""
        payload = {"schema": export_form(flat_tree).json_schema, "uischema": {}}
        tree = load_form(payload, registry, IdGenerator())
        assert [node.key for node in tree] == [node.key for node in flat_tree]

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "payload",
        ["{not json", "[1, 2]", {"type": "object"}, {"fields": [{"id": "x", "type": "slider"}]}],
    )
    def test_failures(self, payload):
        """Bad input is reported as SchemaImportError."""
        with pytest.raises(SchemaImportError):
            load_form(payload)


class TestApplyEditedText:
    """Tests for hand-edited schema text."""

    @pytest.fixture
    def state(self):
        return FormState(schema={"type": "object"}, uischema={"type": "VerticalLayout"}, data={"a": 1})

    @pytest.mark.unit
    def test_valid_edit(self, state):
        """Parsed documents replace the current ones; data is kept."""
        result = apply_edited_text(state, '{"type": "object", "properties": {}}', '{"type": "Group"}')
        assert result.ok
        assert result.state.schema == {"type": "object", "properties": {}}
        assert result.state.uischema == {"type": "Group"}
        assert result.state.data == {"a": 1}

    @pytest.mark.unit
    def test_invalid_json_keeps_state(self, state):
        """A parse failure keeps the previous state and reports an error."""
        result = apply_edited_text(state, '{"type": "object"}', "{oops")
        assert result.state is state
        assert "uischema" in result.error
        assert not result.ok

    @pytest.mark.unit
    def test_non_object_rejected(self, state):
        """Documents must be JSON objects."""
        result = apply_edited_text(state, "[]")
        assert result.state is state
        assert result.error

    @pytest.mark.unit
    def test_nothing_to_apply(self, state):
        """Omitted texts keep the state."""
        assert apply_edited_text(state).state is state
