"""Tree operations - find, update, insert, move and reorder field nodes.

Example usage:
    >>> from src.tree import move_field, get_all_ids
    >>> tree = move_field(tree, "field_3", "field_2", 0)
    >>> get_all_ids(tree)
"""

from .lib import (
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
