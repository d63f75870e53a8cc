"""Output module - text rendering of field trees.

Example usage:
    >>> from src.output import format_field_tree
    >>> print(format_field_tree(tree))
"""

from .lib import format_field_tree

__all__ = ["format_field_tree"]
