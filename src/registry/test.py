"""Tests for the field-type registry."""

import pytest

from src.mid import ArrayField, IdGenerator, LayoutField, LeafField, NodeKind, ObjectField
from src.registry import DEFAULT_FIELD_TYPES, FieldRegistry, FieldTypeSpec, create_field


class TestFieldTypeSpec:
    """Tests for registry entries."""

    @pytest.mark.unit
    def test_kind_derived_from_id(self):
        """Entry kind follows the node vocabulary."""
        assert FieldTypeSpec(id="group", label="Group").kind is NodeKind.LAYOUT
        assert FieldTypeSpec(id="array", label="Rows").kind is NodeKind.ARRAY
        assert FieldTypeSpec(id="text", label="Text").kind is NodeKind.LEAF

    @pytest.mark.unit
    def test_unknown_id_rejected(self):
        """Entries must use a known node type."""
        with pytest.raises(ValueError):
            FieldTypeSpec(id="signature", label="Signature")

    @pytest.mark.unit
    def test_to_dict(self):
        """Entries export with camelCase keys."""
        spec = FieldTypeSpec(
            id="email", label="Email", default_schema={"type": "string"}
        )
        assert spec.to_dict() == {
            "id": "email",
            "label": "Email",
            "isLayout": False,
            "defaultSchema": {"type": "string"},
            "defaultUiOptions": {},
        }


class TestDefaultFieldTypes:
    """Tests for the shipped palette."""

    @pytest.mark.unit
    def test_ids_unique(self):
        """Every default entry has a distinct id."""
        ids = [spec.id for spec in DEFAULT_FIELD_TYPES]
        assert len(ids) == len(set(ids))

    @pytest.mark.unit
    def test_layouts_flagged(self):
        """Layouts and objects are palette containers."""
        flagged = {spec.id for spec in DEFAULT_FIELD_TYPES if spec.is_layout}
        assert flagged == {"group", "vertical-layout", "horizontal-layout", "object"}

    @pytest.mark.unit
    def test_radio_options(self):
        """Radio buttons render with the radio format."""
        radio = next(s for s in DEFAULT_FIELD_TYPES if s.id == "radio")
        assert radio.default_ui_options == {"format": "radio"}
        assert len(radio.default_schema["enum"]) == 3


class TestFieldRegistry:
    """Tests for registry lookups and updates."""

    @pytest.mark.unit
    def test_with_defaults(self, registry):
        """Default registry exposes every shipped entry in order."""
        assert len(registry) == len(DEFAULT_FIELD_TYPES)
        assert registry.list_types()[0].id == "group"
        assert "email" in registry

    @pytest.mark.unit
    def test_get_missing_returns_none(self, registry):
        """Unknown ids are not found."""
        assert registry.get("signature") is None

    @pytest.mark.unit
    def test_require_missing_raises(self, registry):
        """require() reports unknown ids."""
        with pytest.raises(KeyError, match="signature"):
            registry.require("signature")

    @pytest.mark.unit
    def test_register_upserts(self, registry):
        """Registering an existing id replaces it in place."""
        position = [s.id for s in registry].index("email")
        registry.register([FieldTypeSpec(id="email", label="E-mail address")])
        assert registry.get("email").label == "E-mail address"
        assert [s.id for s in registry].index("email") == position

    @pytest.mark.unit
    def test_reset(self, registry):
        """reset() replaces every entry."""
        registry.reset([FieldTypeSpec(id="date", label="Date")])
        assert [s.id for s in registry] == ["date"]

    @pytest.mark.unit
    def test_resolve_fallbacks(self):
        """resolve() falls back to text, then to the first entry."""
        registry = FieldRegistry([FieldTypeSpec(id="number", label="Number")])
        assert registry.resolve("email").id == "number"
        registry.register([FieldTypeSpec(id="text", label="Text")])
        assert registry.resolve("email").id == "text"

    @pytest.mark.unit
    def test_resolve_empty_registry(self):
        """An empty registry cannot resolve anything."""
        with pytest.raises(LookupError):
            FieldRegistry().resolve("text")

    @pytest.mark.unit
    def test_default_control(self, registry):
        """The first plain control is offered for quick inserts."""
        assert registry.default_control().id == "number"


class TestCreateField:
    """Tests for node materialization."""

    @pytest.mark.unit
    def test_leaf(self, registry, ids):
        """Controls get type-based keys and copied defaults."""
        node = create_field(registry.require("email"), ids)
        assert isinstance(node, LeafField)
        assert node.id == "field_1"
        assert node.key == "email_1"
        assert node.label == "Email"
        assert node.json_schema == {"type": "string", "format": "email"}
        assert node.parent_id is None

    @pytest.mark.unit
    def test_layout_key(self, registry, ids):
        """Layouts get layout_<n> keys and empty children."""
        ids()
        node = create_field(registry.require("horizontal-layout"), ids, parent_id="field_1")
        assert isinstance(node, LayoutField)
        assert node.key == "layout_2"
        assert node.children == ()
        assert node.parent_id == "field_1"

    @pytest.mark.unit
    def test_containers(self, registry, ids):
        """Object and array entries become container nodes."""
        assert isinstance(create_field(registry.require("object"), ids), ObjectField)
        assert isinstance(create_field(registry.require("array"), ids), ArrayField)

    @pytest.mark.unit
    def test_defaults_are_copied(self, registry, ids):
        """Nodes never share mutable defaults with the registry."""
        spec = registry.require("multiselect")
        node = create_field(spec, ids)
        node.json_schema["items"]["enum"].append("Option 4")
        assert spec.default_schema["items"]["enum"] == ["Option 1", "Option 2", "Option 3"]

    @pytest.mark.unit
    def test_label_override(self, registry, ids):
        """An explicit label replaces the palette label."""
        node = create_field(registry.require("text"), ids, label="Nickname")
        assert node.label == "Nickname"

    @pytest.mark.unit
    def test_group_icon(self, ids):
        """Group entries with an icon pass it to the node."""
        spec = FieldTypeSpec(id="group", label="Group", is_layout=True, icon="Box")
        assert create_field(spec, ids).icon == "Box"

    @pytest.mark.unit
    def test_independent_generators(self, registry):
        """Separate generators mint independent ids."""
        first = create_field(registry.require("text"), IdGenerator())
        second = create_field(registry.require("text"), IdGenerator())
        assert first.id == second.id == "field_1"
