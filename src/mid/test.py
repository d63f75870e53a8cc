"""Unit tests for the MID layer."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.mid import (
    ArrayField,
    Condition,
    Effect,
    FieldType,
    IdGenerator,
    LayoutField,
    LeafField,
    LogicalJoin,
    NodeKind,
    ObjectField,
    children_of,
    dump_tree,
    format_field_id,
    get_node_kind,
    is_valid,
    iter_nodes,
    load_node,
    load_tree,
    property_nodes,
    validate_tree,
)


class TestFieldType:
    """Tests for the node type vocabulary."""

    @pytest.mark.unit
    def test_all_types_exist(self):
        """All expected node types are defined."""
        expected = {
            # Layouts
            "vertical-layout",
            "horizontal-layout",
            "group",
            # Containers
            "object",
            "array",
            # Controls
            "text",
            "textarea",
            "number",
            "integer",
            "email",
            "password",
            "url",
            "date",
            "file",
            "checkbox",
            "select",
            "radio",
            "multiselect",
            "multicheckbox",
            "array-strings",
        }
        assert {ft.value for ft in FieldType} == expected

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "field_type,kind",
        [
            ("group", NodeKind.LAYOUT),
            ("horizontal-layout", NodeKind.LAYOUT),
            ("object", NodeKind.OBJECT),
            ("array", NodeKind.ARRAY),
            ("array-strings", NodeKind.LEAF),
            (FieldType.EMAIL, NodeKind.LEAF),
        ],
    )
    def test_node_kind(self, field_type, kind):
        """Every type maps to one structural kind."""
        assert get_node_kind(field_type) is kind

    @pytest.mark.unit
    def test_unknown_type_raises(self):
        """Types outside the vocabulary are rejected."""
        with pytest.raises(ValueError):
            get_node_kind("slider")


class TestCondition:
    """Tests for visibility rows."""

    @pytest.mark.unit
    def test_camel_case_aliases(self):
        """Rows exported by the editor load with camelCase keys."""
        row = Condition.model_validate(
            {"dependsOn": "age", "operator": "gte", "value": "18", "logical": "AND"}
        )
        assert row.depends_on == "age"
        assert row.logical == "AND"

    @pytest.mark.unit
    def test_long_form_aliases(self):
        """dependsOnKey / logicalJoin spellings are accepted too."""
        row = Condition.model_validate(
            {"dependsOnKey": "plan", "operator": "equals", "logicalJoin": "OR"}
        )
        assert row.depends_on == "plan"
        assert row.logical == LogicalJoin.OR

    @pytest.mark.unit
    def test_defaults(self):
        """A blank row has no key, no operator and no joiner."""
        row = Condition()
        assert row.depends_on == ""
        assert row.operator == ""
        assert row.logical == ""

    @pytest.mark.unit
    def test_invalid_join_rejected(self):
        """Only '', AND and OR are valid joiners."""
        with pytest.raises(PydanticValidationError):
            Condition(depends_on="a", logical="XOR")

    @pytest.mark.unit
    def test_serializes_with_aliases(self):
        """Dumping by alias restores the editor's field names."""
        row = Condition(depends_on="age", operator="lt", value=3)
        dumped = row.model_dump(by_alias=True)
        assert dumped == {
            "dependsOn": "age",
            "operator": "lt",
            "value": 3,
            "logical": "",
        }


class TestFieldNodes:
    """Tests for the node variants."""

    @pytest.mark.unit
    def test_minimal_leaf(self):
        """Create a leaf with only required fields."""
        node = LeafField(id="field_1", type="text")
        assert node.key == ""
        assert node.required is False
        assert node.json_schema == {}
        assert node.ui_options == {}
        assert node.visibility == ()
        assert node.effect == "SHOW"
        assert node.parent_id is None
        assert node.kind is NodeKind.LEAF
        assert node.is_container is False

    @pytest.mark.unit
    def test_alias_population(self):
        """schema / uiOptions / parentId aliases populate the fields."""
        node = LeafField.model_validate(
            {
                "id": "field_2",
                "type": "password",
                "schema": {"type": "string", "format": "password"},
                "uiOptions": {"format": "password"},
                "parentId": "field_1",
                "requireConfirmation": True,
            }
        )
        assert node.json_schema["format"] == "password"
        assert node.ui_options == {"format": "password"}
        assert node.parent_id == "field_1"
        assert node.require_confirmation is True

    @pytest.mark.unit
    def test_effect_enum_stored_as_value(self):
        """Effects are stored as their string values."""
        node = LeafField(id="f", type="text", effect=Effect.HIDE)
        assert node.effect == "HIDE"

    @pytest.mark.unit
    def test_nodes_are_frozen(self):
        """Nodes cannot be mutated in place."""
        node = LeafField(id="f", type="text")
        with pytest.raises(PydanticValidationError):
            node.label = "changed"

    @pytest.mark.unit
    def test_leaf_rejects_container_type(self):
        """A leaf cannot carry a container type."""
        with pytest.raises(PydanticValidationError):
            LeafField(id="f", type="object")

    @pytest.mark.unit
    def test_containers(self):
        """Container variants own their children."""
        child = LeafField(id="c", type="text", key="street")
        layout = LayoutField(id="l", type="vertical-layout", children=(child,))
        obj = ObjectField(id="o", type="object", key="address", children=(layout,))
        arr = ArrayField(id="a", type="array", key="items")
        assert obj.kind is NodeKind.OBJECT
        assert arr.kind is NodeKind.ARRAY
        assert layout.is_container is True
        assert children_of(obj) == (layout,)
        assert children_of(child) == ()

    @pytest.mark.unit
    def test_deep_equality(self):
        """Nodes with equal content compare equal."""
        a = LeafField(id="f", type="number", key="age", json_schema={"type": "number"})
        b = LeafField(id="f", type="number", key="age", json_schema={"type": "number"})
        assert a == b
        assert a != a.model_copy(update={"label": "Age"})


class TestLoadAndDump:
    """Tests for tree (de)serialization."""

    @pytest.mark.unit
    def test_discriminated_load(self):
        """Node dicts load into the variant named by their type."""
        tree = load_tree(
            [
                {"id": "field_1", "type": "text", "key": "name"},
                {
                    "id": "field_2",
                    "type": "group",
                    "children": [{"id": "field_3", "type": "checkbox", "key": "ok"}],
                },
                {"id": "field_4", "type": "array", "key": "rows"},
            ]
        )
        assert isinstance(tree[0], LeafField)
        assert isinstance(tree[1], LayoutField)
        assert isinstance(tree[1].children[0], LeafField)
        assert isinstance(tree[2], ArrayField)

    @pytest.mark.unit
    def test_unknown_type_rejected(self):
        """Unknown node types fail validation."""
        with pytest.raises(PydanticValidationError):
            load_tree([{"id": "x", "type": "slider"}])

    @pytest.mark.unit
    def test_load_single_node(self):
        """load_node validates one node dictionary."""
        node = load_node({"id": "field_9", "type": "object", "key": "meta"})
        assert isinstance(node, ObjectField)

    @pytest.mark.unit
    def test_dump_uses_camel_case(self, sample_tree):
        """Dumped trees use the editor's camelCase keys and lists."""
        dumped = dump_tree(sample_tree)
        assert isinstance(dumped, list)
        assert "uiOptions" in dumped[0]
        assert "schema" in dumped[0]
        assert isinstance(dumped[1]["children"], list)

    @pytest.mark.unit
    def test_dump_then_load_preserves_tree(self, sample_tree):
        """A dumped tree loads back into an equal tree."""
        assert load_tree(dump_tree(sample_tree)) == sample_tree

    @pytest.mark.unit
    def test_load_from_json_text(self):
        """JSON text is accepted directly."""
        tree = load_tree('[{"id": "field_1", "type": "date", "key": "dob"}]')
        assert tree[0].type == "date"


class TestTraversal:
    """Tests for tree walking helpers."""

    @pytest.mark.unit
    def test_iter_nodes_preorder(self, sample_tree):
        """Ancestors are yielded before descendants."""
        ids = [node.id for node in iter_nodes(sample_tree)]
        assert ids.index("field_2") < ids.index("field_3")
        assert ids.index("field_5") < ids.index("field_6") < ids.index("field_7")
        assert len(ids) == len(set(ids))

    @pytest.mark.unit
    def test_property_nodes_flatten_layouts(self, sample_tree):
        """Layouts are replaced by their children at a schema level."""
        keys = [node.key for node in property_nodes(sample_tree)]
        assert keys == ["name", "age", "active", "address", "contacts"]


class TestIdGenerator:
    """Tests for the injected id generator."""

    @pytest.mark.unit
    def test_monotonic(self):
        """Each call returns the next integer."""
        ids = IdGenerator()
        assert [ids(), ids(), ids()] == [1, 2, 3]
        assert ids.last == 3

    @pytest.mark.unit
    def test_instances_are_independent(self):
        """Two generators never share a counter."""
        first, second = IdGenerator(), IdGenerator()
        first()
        first()
        assert second() == 1

    @pytest.mark.unit
    def test_after_existing_tree(self, sample_tree):
        """A generator seeded from a tree continues past its ids."""
        ids = IdGenerator.after(sample_tree)
        assert ids() == 11

    @pytest.mark.unit
    def test_format_field_id(self, monkeypatch):
        """Ids use the configured prefix."""
        monkeypatch.delenv("FORMTREE_ID_PREFIX", raising=False)
        assert format_field_id(4) == "field_4"
        assert format_field_id(4, prefix="node-") == "node-4"


class TestValidateTree:
    """Tests for structural validation."""

    @pytest.mark.unit
    def test_valid_tree(self, sample_tree):
        """The shared sample tree has no issues."""
        assert validate_tree(sample_tree) == []
        assert is_valid(sample_tree)

    @pytest.mark.unit
    def test_duplicate_ids(self):
        """Duplicate ids are reported once per id."""
        tree = (
            LeafField(id="field_1", type="text", key="a"),
            LeafField(id="field_1", type="text", key="b"),
        )
        errors = validate_tree(tree)
        assert [e.error_type for e in errors] == ["duplicate_id"]

    @pytest.mark.unit
    def test_duplicate_keys_across_layouts(self):
        """Keys collide through transparent layouts."""
        tree = (
            LeafField(id="field_1", type="text", key="name"),
            LayoutField(
                id="field_2",
                type="horizontal-layout",
                children=(LeafField(id="field_3", type="text", key="name"),),
            ),
        )
        errors = validate_tree(tree)
        assert len(errors) == 1
        assert errors[0].error_type == "duplicate_key"
        assert errors[0].node_id == "field_3"

    @pytest.mark.unit
    def test_same_key_at_different_levels_is_fine(self):
        """Object nesting opens a new key scope."""
        tree = (
            LeafField(id="field_1", type="text", key="name"),
            ObjectField(
                id="field_2",
                type="object",
                key="owner",
                children=(
                    LeafField(id="field_3", type="text", key="name", parent_id="field_2"),
                ),
            ),
        )
        assert is_valid(tree)

    @pytest.mark.unit
    def test_confirmation_key_collision(self):
        """A password confirmation claims the <key>_confirm name."""
        tree = (
            LeafField(id="field_1", type="password", key="pw", require_confirmation=True),
            LeafField(id="field_2", type="text", key="pw_confirm"),
        )
        errors = validate_tree(tree)
        assert [e.error_type for e in errors] == ["duplicate_key"]

    @pytest.mark.unit
    def test_missing_key(self):
        """Property nodes must carry a key; layouts need none."""
        tree = (
            LayoutField(
                id="field_1",
                type="group",
                children=(LeafField(id="field_2", type="text"),),
            ),
        )
        errors = validate_tree(tree)
        assert [(e.node_id, e.error_type) for e in errors] == [("field_2", "missing_key")]

    @pytest.mark.unit
    def test_parent_mismatch(self):
        """parent_id must name the actual owner when set."""
        tree = (
            LayoutField(
                id="field_1",
                type="group",
                children=(
                    LeafField(id="field_2", type="text", key="a", parent_id="field_9"),
                ),
            ),
        )
        errors = validate_tree(tree)
        assert [e.error_type for e in errors] == ["parent_mismatch"]
