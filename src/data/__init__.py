"""Data module - default form data for a field tree.

Example usage:
    >>> from src.data import initialize_nested_form_data
    >>> data = initialize_nested_form_data(tree, existing)
"""

from .lib import create_default_array_item, default_value, initialize_nested_form_data

__all__ = [
    "default_value",
    "create_default_array_item",
    "initialize_nested_form_data",
]
