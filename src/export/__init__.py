"""Export module - form documents, loading and boundary text edits.

Example usage:
    >>> from src.export import dump_form, load_form
    >>> text = dump_form(tree)
    >>> assert load_form(text) == tree
"""

from .lib import (
    EditResult,
    FormDocument,
    FormState,
    apply_edited_text,
    build_form_state,
    dump_form,
    export_form,
    load_form,
)

__all__ = [
    "FormState",
    "EditResult",
    "FormDocument",
    "build_form_state",
    "export_form",
    "dump_form",
    "load_form",
    "apply_edited_text",
]
