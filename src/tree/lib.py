"""Structural operations on field trees.

Every operation takes a tree (the tuple of root nodes) and returns a tree.
Only the path from the root to a changed node is reallocated, so untouched
siblings and subtrees keep their identity. Requests that cannot be honoured
(unknown ids, drops onto non-containers) return the input tree unchanged:
they happen on every pointer movement during drag-and-drop and must never
interrupt the editor.
"""

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from src.mid import FieldNode, FieldTree, IdSource, children_of, iter_nodes
from src.registry import FieldRegistry, FieldTypeSpec, create_field

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    """Sibling shift direction."""

    UP = "up"
    DOWN = "down"


class DropData(BaseModel):
    """Drop-zone payload attached to a drag/drop position event.

    Attributes:
        parent_id: Container the zone belongs to (None for a plain node).
        index: Insert position inside the container (None appends).
        accepts: Field-type ids the zone accepts (informational).
    """

    parent_id: str | None = Field(None, alias="parentId")
    index: int | None = None
    accepts: tuple[str, ...] = ()

    model_config = {"frozen": True, "populate_by_name": True}


class InsertGuard:
    """Idempotent-insert ledger keyed on caller-supplied operation tokens.

    A host that may fire the same drop handler twice passes a stable token
    per user action; the second request with that token is rejected.
    Tokens are kept for the lifetime of the guard, normally one editing
    session. Call `discard` or `clear` when a token may be reused.
    """

    def __init__(self) -> None:
        self._tokens: set[str] = set()

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    def claim(self, token: str) -> bool:
        """Record a token. Returns False if it was already claimed."""
        if token in self._tokens:
            return False
        self._tokens.add(token)
        return True

    def discard(self, token: str) -> None:
        """Forget a token so it can be claimed again."""
        self._tokens.discard(token)

    def clear(self) -> None:
        """Forget every claimed token."""
        self._tokens.clear()


# =============================================================================
# Lookup
# =============================================================================


def find_by_id(tree: Iterable[FieldNode], node_id: str) -> FieldNode | None:
    """Find a node anywhere in the tree.

    Args:
        tree: Root sibling list.
        node_id: Id to look for.

    Returns:
        The node, or None if absent.
    """
    for node in iter_nodes(tree):
        if node.id == node_id:
            return node
    return None


def find_parent(tree: Iterable[FieldNode], node_id: str) -> FieldNode | None:
    """Find the container that owns a node (None for root nodes or unknown ids)."""
    for node in iter_nodes(tree):
        if any(child.id == node_id for child in children_of(node)):
            return node
    return None


def get_all_ids(tree: Iterable[FieldNode]) -> list[str]:
    """List every id in preorder without duplicates.

    Ancestors precede their descendants; the renderer uses this list to
    scope reorderable regions.
    """
    ids: list[str] = []
    seen: set[str] = set()
    for node in iter_nodes(tree):
        if node.id not in seen:
            seen.add(node.id)
            ids.append(node.id)
    return ids


# =============================================================================
# Path-copying helpers
# =============================================================================


def _with_children(node: FieldNode, children: FieldTree) -> FieldNode:
    return node.model_copy(update={"children": children})


def _replace_at(level: FieldTree, index: int, node: FieldNode) -> FieldTree:
    return level[:index] + (node,) + level[index + 1 :]


def _splice(level: FieldTree, node: FieldNode, index: int | None) -> FieldTree:
    position = len(level) if index is None else max(0, min(index, len(level)))
    return level[:position] + (node,) + level[position:]


def _replace(level: FieldTree, node: FieldNode) -> FieldTree | None:
    """Swap in ``node`` by id; None when absent or already equal."""
    for i, current in enumerate(level):
        if current.id == node.id:
            if current == node:
                return None
            return _replace_at(level, i, node)
        children = children_of(current)
        if children:
            new_children = _replace(children, node)
            if new_children is not None:
                return _replace_at(level, i, _with_children(current, new_children))
    return None


def _detach(level: FieldTree, node_id: str) -> tuple[FieldTree, FieldNode] | None:
    for i, current in enumerate(level):
        if current.id == node_id:
            return level[:i] + level[i + 1 :], current
        children = children_of(current)
        if children:
            result = _detach(children, node_id)
            if result is not None:
                new_children, removed = result
                return _replace_at(level, i, _with_children(current, new_children)), removed
    return None


def _attach_to(
    level: FieldTree, node: FieldNode, parent_id: str, index: int | None
) -> FieldTree | None:
    for i, current in enumerate(level):
        if current.id == parent_id:
            if not current.is_container:
                return None
            child = node.model_copy(update={"parent_id": current.id})
            new_children = _splice(children_of(current), child, index)
            return _replace_at(level, i, _with_children(current, new_children))
        children = children_of(current)
        if children:
            new_children = _attach_to(children, node, parent_id, index)
            if new_children is not None:
                return _replace_at(level, i, _with_children(current, new_children))
    return None


def _attach(
    tree: FieldTree, node: FieldNode, parent_id: str | None, index: int | None
) -> FieldTree | None:
    if parent_id is None:
        return _splice(tree, node.model_copy(update={"parent_id": None}), index)
    return _attach_to(tree, node, parent_id, index)


def _insert_after(
    level: FieldTree, node: FieldNode, after_id: str, owner_id: str | None
) -> FieldTree | None:
    for i, current in enumerate(level):
        if current.id == after_id:
            moved = node.model_copy(update={"parent_id": owner_id})
            return level[: i + 1] + (moved,) + level[i + 1 :]
        children = children_of(current)
        if children:
            new_children = _insert_after(children, node, after_id, current.id)
            if new_children is not None:
                return _replace_at(level, i, _with_children(current, new_children))
    return None


def _shift(level: FieldTree, node_id: str, step: int) -> FieldTree | None:
    for i, current in enumerate(level):
        if current.id == node_id:
            j = i + step
            if j < 0 or j >= len(level):
                return None
            items = list(level)
            items[i], items[j] = items[j], items[i]
            return tuple(items)
        children = children_of(current)
        if children:
            new_children = _shift(children, node_id, step)
            if new_children is not None:
                return _replace_at(level, i, _with_children(current, new_children))
    return None


# =============================================================================
# Mutations
# =============================================================================


def update_by_id(tree: Iterable[FieldNode], node: FieldNode) -> FieldTree:
    """Replace the node that shares ``node.id``.

    Returns the very same tree object when the id is absent or the stored
    node is already deep-equal to ``node``.
    """
    tree = tuple(tree)
    updated = _replace(tree, node)
    return tree if updated is None else updated


def delete_by_id(tree: Iterable[FieldNode], node_id: str) -> FieldTree:
    """Remove a node together with its whole subtree."""
    tree = tuple(tree)
    result = _detach(tree, node_id)
    if result is None:
        logger.debug("Delete ignored: '%s' not found", node_id)
        return tree
    return result[0]


def insert_field(
    tree: Iterable[FieldNode],
    node: FieldNode,
    parent_id: str | None = None,
    index: int | None = None,
) -> FieldTree:
    """Insert a node under a container (or the root) at a clamped index.

    Args:
        tree: Root sibling list.
        node: Node to insert; its ``parent_id`` is rewritten.
        parent_id: Target container id, None for the root level.
        index: Position among the target's children; None appends.

    Returns:
        New tree, or the input tree when the parent is missing or cannot
        hold children.
    """
    tree = tuple(tree)
    result = _attach(tree, node, parent_id, index)
    if result is None:
        logger.debug("Insert ignored: '%s' is not a container", parent_id)
        return tree
    return result


def add_field(
    tree: Iterable[FieldNode],
    field_type: FieldTypeSpec | str,
    *,
    id_source: IdSource,
    registry: FieldRegistry | None = None,
    parent_id: str | None = None,
    index: int | None = None,
    token: str | None = None,
    guard: InsertGuard | None = None,
    label: str | None = None,
) -> tuple[FieldTree, FieldNode | None]:
    """Materialize a palette entry and insert it.

    When both ``token`` and ``guard`` are given the insert is idempotent:
    a token that was already claimed is rejected without minting an id.

    Args:
        tree: Root sibling list.
        field_type: Registry entry or its id.
        id_source: Injected id generator.
        registry: Registry used to resolve string ids (defaults shipped).
        parent_id: Target container id, None for the root.
        index: Insert position; None appends.
        token: Stable operation token supplied by the caller.
        guard: Ledger of tokens already claimed.
        label: Optional label override.

    Returns:
        Tuple of (new tree, created node). The node is None and the tree is
        unchanged when the request was rejected.

    Raises:
        KeyError: If ``field_type`` names an unregistered type.
    """
    tree = tuple(tree)
    use_guard = token is not None and guard is not None
    if use_guard and token in guard:
        logger.debug("Insert ignored: token '%s' already used", token)
        return tree, None

    if isinstance(field_type, str):
        spec = (registry or FieldRegistry.with_defaults()).require(field_type)
    else:
        spec = field_type

    if parent_id is not None:
        parent = find_by_id(tree, parent_id)
        if parent is None or not parent.is_container:
            logger.debug("Insert ignored: '%s' is not a container", parent_id)
            return tree, None

    if use_guard:
        guard.claim(token)

    node = create_field(spec, id_source, parent_id=parent_id, label=label)
    return insert_field(tree, node, parent_id, index), node


def move_field(
    tree: Iterable[FieldNode],
    field_id: str,
    target_parent_id: str | None,
    target_index: int | None = None,
) -> FieldTree:
    """Detach a node and reattach it under another container.

    The index is clamped to ``[0, len(target children)]`` measured after the
    node has been detached. The move is atomic: if the target is missing or
    not a container (including a target inside the moved subtree) the input
    tree is returned.
    """
    tree = tuple(tree)
    detached = _detach(tree, field_id)
    if detached is None:
        logger.debug("Move ignored: '%s' not found", field_id)
        return tree
    remaining, node = detached
    result = _attach(remaining, node, target_parent_id, target_index)
    if result is None:
        logger.debug("Move ignored: invalid target '%s'", target_parent_id)
        return tree
    return result


def reorder_relative(
    tree: Iterable[FieldNode],
    active_id: str,
    over_id: str,
    over_data: DropData | Mapping[str, Any] | None = None,
) -> FieldTree:
    """Reposition ``active_id`` relative to the node it was dropped over.

    An explicit drop zone in ``over_data`` (``parent_id`` + ``index``) wins
    when it resolves to a container. Otherwise the active node is placed
    immediately after ``over_id`` in whichever list holds it.
    """
    tree = tuple(tree)
    if active_id == over_id:
        return tree
    if find_by_id(tree, over_id) is None:
        logger.debug("Reorder ignored: '%s' not found", over_id)
        return tree

    if over_data is not None and not isinstance(over_data, DropData):
        over_data = DropData.model_validate(over_data)

    detached = _detach(tree, active_id)
    if detached is None:
        logger.debug("Reorder ignored: '%s' not found", active_id)
        return tree
    remaining, node = detached

    if over_data is not None and over_data.parent_id:
        result = _attach_to(remaining, node, over_data.parent_id, over_data.index)
        if result is not None:
            return result

    result = _insert_after(remaining, node, over_id, None)
    return tree if result is None else result


def shift_field(
    tree: Iterable[FieldNode], field_id: str, direction: Direction | str
) -> FieldTree:
    """Swap a node with its previous (up) or next (down) sibling."""
    tree = tuple(tree)
    step = -1 if Direction(direction) is Direction.UP else 1
    result = _shift(tree, field_id, step)
    return tree if result is None else result


__all__ = [
    "Direction",
    "DropData",
    "InsertGuard",
    "find_by_id",
    "find_parent",
    "get_all_ids",
    "update_by_id",
    "delete_by_id",
    "insert_field",
    "add_field",
    "move_field",
    "reorder_relative",
    "shift_field",
]
