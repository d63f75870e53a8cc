"""Tests for structural tree operations."""

import pytest

from src.mid import IdGenerator, LeafField, is_valid
from src.tree import (
    Direction,
    DropData,
    InsertGuard,
    add_field,
    delete_by_id,
    find_by_id,
    find_parent,
    get_all_ids,
    insert_field,
    move_field,
    reorder_relative,
    shift_field,
    update_by_id,
)


def _ids(level):
    return [node.id for node in level]


class TestLookup:
    """Tests for find_by_id / find_parent / get_all_ids."""

    @pytest.mark.unit
    def test_find_nested(self, sample_tree):
        """Nodes are found at any depth."""
        assert find_by_id(sample_tree, "field_7").key == "street"
        assert find_by_id(sample_tree, "field_99") is None

    @pytest.mark.unit
    def test_find_parent(self, sample_tree):
        """The owning container is returned; roots have none."""
        assert find_parent(sample_tree, "field_7").id == "field_6"
        assert find_parent(sample_tree, "field_1") is None

    @pytest.mark.unit
    def test_get_all_ids_preorder(self, sample_tree):
        """Ids come out in preorder."""
        assert get_all_ids(sample_tree) == [f"field_{n}" for n in range(1, 11)]

    @pytest.mark.unit
    def test_get_all_ids_deduplicates(self):
        """A repeated id is listed once."""
        tree = (
            LeafField(id="field_1", type="text", key="a"),
            LeafField(id="field_1", type="text", key="b"),
        )
        assert get_all_ids(tree) == ["field_1"]


class TestUpdateById:
    """Tests for path-copying updates."""

    @pytest.mark.unit
    def test_structural_sharing(self, sample_tree):
        """Only the path to the updated node is reallocated."""
        street = find_by_id(sample_tree, "field_7")
        updated = update_by_id(sample_tree, street.model_copy(update={"label": "Road"}))
        assert find_by_id(updated, "field_7").label == "Road"
        assert updated is not sample_tree
        assert updated[0] is sample_tree[0]
        assert updated[1] is sample_tree[1]
        assert updated[3] is sample_tree[3]
        assert updated[2] is not sample_tree[2]

    @pytest.mark.unit
    def test_absent_node_returns_same_tree(self, sample_tree):
        """Unknown ids leave the tree object untouched."""
        ghost = LeafField(id="field_42", type="text", key="ghost")
        assert update_by_id(sample_tree, ghost) is sample_tree

    @pytest.mark.unit
    def test_equal_node_returns_same_tree(self, sample_tree):
        """A deep-equal replacement is a no-op."""
        copy = find_by_id(sample_tree, "field_3").model_copy()
        assert update_by_id(sample_tree, copy) is sample_tree

    @pytest.mark.unit
    def test_input_not_mutated(self, sample_tree):
        """The original tree keeps its values."""
        age = find_by_id(sample_tree, "field_3")
        update_by_id(sample_tree, age.model_copy(update={"required": True}))
        assert find_by_id(sample_tree, "field_3").required is False


class TestDeleteById:
    """Tests for subtree removal."""

    @pytest.mark.unit
    def test_cascade(self, sample_tree):
        """Deleting a container removes its descendants."""
        tree = delete_by_id(sample_tree, "field_5")
        assert find_by_id(tree, "field_7") is None
        assert _ids(tree) == ["field_1", "field_2", "field_8"]

    @pytest.mark.unit
    def test_absent(self, sample_tree):
        """Deleting an unknown id is a no-op."""
        assert delete_by_id(sample_tree, "nope") is sample_tree


class TestInsertField:
    """Tests for inserting existing nodes."""

    @pytest.mark.unit
    def test_insert_into_layout(self, sample_tree):
        """Inserted nodes get the container as parent."""
        node = LeafField(id="field_11", type="text", key="nick")
        tree = insert_field(sample_tree, node, "field_2", 1)
        layout = find_by_id(tree, "field_2")
        assert _ids(layout.children) == ["field_3", "field_11", "field_4"]
        assert layout.children[1].parent_id == "field_2"
        assert is_valid(tree)

    @pytest.mark.unit
    def test_index_is_clamped(self, sample_tree):
        """Out-of-range indexes clamp to the ends."""
        node = LeafField(id="field_11", type="text", key="nick")
        assert insert_field(sample_tree, node, None, 99)[-1].id == "field_11"
        assert insert_field(sample_tree, node, None, -5)[0].id == "field_11"

    @pytest.mark.unit
    def test_leaf_parent_rejected(self, sample_tree):
        """Leaves cannot receive children."""
        node = LeafField(id="field_11", type="text", key="nick")
        assert insert_field(sample_tree, node, "field_1") is sample_tree


class TestAddField:
    """Tests for registry-driven inserts."""

    @pytest.mark.unit
    def test_adds_at_root(self, registry, ids):
        """A new field is minted and appended."""
        tree, node = add_field((), "text", registry=registry, id_source=ids)
        assert node.id == "field_1"
        assert node.key == "text_1"
        assert tree == (node,)

    @pytest.mark.unit
    def test_adds_into_container(self, sample_tree, registry):
        """A new field lands inside the requested container."""
        ids = IdGenerator.after(sample_tree)
        tree, node = add_field(
            sample_tree, "email", registry=registry, id_source=ids, parent_id="field_8", index=0
        )
        array = find_by_id(tree, "field_8")
        assert array.children[0] == node
        assert node.parent_id == "field_8"
        assert node.id == "field_11"

    @pytest.mark.unit
    def test_repeated_token_rejected(self, registry, ids):
        """The same operation token only inserts once."""
        guard = InsertGuard()
        tree, first = add_field(
            (), "checkbox", registry=registry, id_source=ids, token="drop-1", guard=guard
        )
        again, second = add_field(
            tree, "checkbox", registry=registry, id_source=ids, token="drop-1", guard=guard
        )
        assert first is not None
        assert second is None
        assert again is tree
        assert ids.last == 1

    @pytest.mark.unit
    def test_distinct_tokens_accepted(self, registry, ids):
        """Different tokens are independent inserts."""
        guard = InsertGuard()
        tree, _ = add_field((), "text", registry=registry, id_source=ids, token="a", guard=guard)
        tree, _ = add_field(tree, "text", registry=registry, id_source=ids, token="b", guard=guard)
        assert len(tree) == 2
        assert len(guard) == 2

    @pytest.mark.unit
    def test_discarded_token_claimable_again(self, registry, ids):
        """Released tokens allow a fresh insert."""
        guard = InsertGuard()
        tree, _ = add_field((), "text", registry=registry, id_source=ids, token="a", guard=guard)
        guard.discard("a")
        tree, node = add_field(tree, "text", registry=registry, id_source=ids, token="a", guard=guard)
        assert node is not None
        assert len(tree) == 2
        guard.clear()
        assert len(guard) == 0

    @pytest.mark.unit
    def test_invalid_parent_does_not_consume(self, sample_tree, registry, ids):
        """A rejected target mints no id and keeps the token usable."""
        guard = InsertGuard()
        tree, node = add_field(
            sample_tree,
            "text",
            registry=registry,
            id_source=ids,
            parent_id="field_1",
            token="t",
            guard=guard,
        )
        assert node is None
        assert tree is sample_tree
        assert ids.last == 0
        assert "t" not in guard

    @pytest.mark.unit
    def test_unknown_type(self, registry, ids):
        """Unregistered types raise KeyError."""
        with pytest.raises(KeyError):
            add_field((), "signature", registry=registry, id_source=ids)


class TestMoveField:
    """Tests for atomic moves."""

    @pytest.mark.unit
    def test_move_between_containers(self, sample_tree):
        """A leaf moves into another container."""
        tree = move_field(sample_tree, "field_3", "field_6", 0)
        assert _ids(find_by_id(tree, "field_6").children) == ["field_3", "field_7"]
        assert _ids(find_by_id(tree, "field_2").children) == ["field_4"]
        assert find_by_id(tree, "field_3").parent_id == "field_6"
        assert is_valid(tree)

    @pytest.mark.unit
    def test_move_to_root(self, sample_tree):
        """A None target moves to the root level."""
        tree = move_field(sample_tree, "field_9", None, 0)
        assert tree[0].id == "field_9"
        assert tree[0].parent_id is None

    @pytest.mark.unit
    def test_index_measured_after_detach(self, sample_tree):
        """Moving within the same list clamps against the shortened list."""
        tree = move_field(sample_tree, "field_1", None, 10)
        assert _ids(tree) == ["field_2", "field_5", "field_8", "field_1"]

    @pytest.mark.unit
    def test_move_into_object(self, sample_tree):
        """Object nodes accept drops."""
        tree = move_field(sample_tree, "field_1", "field_5", 0)
        assert _ids(find_by_id(tree, "field_5").children) == ["field_1", "field_6"]

    @pytest.mark.unit
    def test_move_into_own_subtree(self, sample_tree):
        """A container cannot be moved inside itself."""
        assert move_field(sample_tree, "field_5", "field_6", 0) is sample_tree

    @pytest.mark.unit
    def test_move_onto_leaf(self, sample_tree):
        """Leaves are not drop targets."""
        assert move_field(sample_tree, "field_3", "field_1", 0) is sample_tree

    @pytest.mark.unit
    def test_move_unknown(self, sample_tree):
        """Unknown ids and targets are no-ops."""
        assert move_field(sample_tree, "field_99", None, 0) is sample_tree
        assert move_field(sample_tree, "field_3", "field_99", 0) is sample_tree


class TestReorderRelative:
    """Tests for drop-over reordering."""

    @pytest.mark.unit
    def test_after_over_node(self, sample_tree):
        """Without zone data the node lands right after the target."""
        tree = reorder_relative(sample_tree, "field_1", "field_5")
        assert _ids(tree) == ["field_2", "field_5", "field_1", "field_8"]

    @pytest.mark.unit
    def test_across_containers(self, sample_tree):
        """Dropping over a nested node adopts its container."""
        tree = reorder_relative(sample_tree, "field_1", "field_9")
        array = find_by_id(tree, "field_8")
        assert _ids(array.children) == ["field_9", "field_1", "field_10"]
        assert array.children[1].parent_id == "field_8"

    @pytest.mark.unit
    def test_drop_zone_wins(self, sample_tree):
        """Explicit container data places the node at the zone index."""
        zone = DropData(parent_id="field_2", index=0)
        tree = reorder_relative(sample_tree, "field_10", "field_2", zone)
        assert _ids(find_by_id(tree, "field_2").children) == ["field_10", "field_3", "field_4"]

    @pytest.mark.unit
    def test_drop_zone_from_mapping(self, sample_tree):
        """Zone data may arrive as a plain camelCase dict."""
        tree = reorder_relative(
            sample_tree, "field_1", "field_8", {"parentId": "field_8", "accepts": ["text"]}
        )
        assert _ids(find_by_id(tree, "field_8").children)[-1] == "field_1"

    @pytest.mark.unit
    def test_invalid_zone_falls_back(self, sample_tree):
        """A zone that is not a container falls back to after-over."""
        zone = DropData(parent_id="field_3", index=0)
        tree = reorder_relative(sample_tree, "field_1", "field_3", zone)
        assert _ids(find_by_id(tree, "field_2").children) == ["field_3", "field_1", "field_4"]

    @pytest.mark.unit
    def test_noops(self, sample_tree):
        """Same ids or unknown ids leave the tree unchanged."""
        assert reorder_relative(sample_tree, "field_1", "field_1") is sample_tree
        assert reorder_relative(sample_tree, "field_1", "field_99") is sample_tree
        assert reorder_relative(sample_tree, "field_99", "field_1") is sample_tree

    @pytest.mark.unit
    def test_over_inside_own_subtree(self, sample_tree):
        """Dropping a container over its own descendant is a no-op."""
        assert reorder_relative(sample_tree, "field_5", "field_7") is sample_tree


class TestShiftField:
    """Tests for up/down sibling swaps."""

    @pytest.mark.unit
    def test_shift_down(self, sample_tree):
        """A node swaps with its next sibling."""
        tree = shift_field(sample_tree, "field_3", Direction.DOWN)
        assert _ids(find_by_id(tree, "field_2").children) == ["field_4", "field_3"]

    @pytest.mark.unit
    def test_shift_up_root(self, sample_tree):
        """Root nodes shift too; strings are accepted for direction."""
        tree = shift_field(sample_tree, "field_8", "up")
        assert _ids(tree) == ["field_1", "field_2", "field_8", "field_5"]

    @pytest.mark.unit
    def test_boundary(self, sample_tree):
        """Shifting past either end is a no-op."""
        assert shift_field(sample_tree, "field_1", Direction.UP) is sample_tree
        assert shift_field(sample_tree, "field_10", Direction.DOWN) is sample_tree
