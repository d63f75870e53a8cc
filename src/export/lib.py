"""Form documents and boundary edits.

A form document bundles the generated JSON Schema, the UI Schema and the
field tree that produced them, so an exported form can be reopened in the
editor without going through the lossy schema import.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from src.config import EnvVar, get_environment
from src.convert import SchemaImportError, convert_schema_to_fields
from src.data import initialize_nested_form_data
from src.mid import FieldNode, FieldTree, IdSource, load_tree
from src.registry import FieldRegistry
from src.schema import build_json_schema
from src.uischema import build_ui_schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormState:
    """What a schema-driven renderer consumes.

    Attributes:
        schema: JSON Schema document.
        uischema: UI Schema document.
        data: Current form data.
    """

    schema: dict[str, Any]
    uischema: dict[str, Any]
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EditResult:
    """Outcome of applying hand-edited schema text.

    Attributes:
        state: The new state, or the previous one when parsing failed.
        error: Human-readable parse error, None on success.
    """

    state: FormState
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FormDocument(BaseModel):
    """Exported form: ``{"schema", "uischema", "fields"}``."""

    json_schema: dict[str, Any] = Field(default_factory=dict, alias="schema")
    ui_schema: dict[str, Any] = Field(default_factory=dict, alias="uischema")
    fields: tuple[FieldNode, ...] = ()

    model_config = {"frozen": True, "populate_by_name": True}


def build_form_state(
    tree: Iterable[FieldNode], data: Mapping[str, Any] | None = None
) -> FormState:
    """Project a tree into schema, UI schema and seeded data."""
    tree = tuple(tree)
    return FormState(
        schema=build_json_schema(tree),
        uischema=build_ui_schema(tree),
        data=initialize_nested_form_data(tree, data),
    )


def export_form(tree: Iterable[FieldNode]) -> FormDocument:
    """Bundle a tree with its generated schemas."""
    tree = tuple(tree)
    return FormDocument(
        json_schema=build_json_schema(tree),
        ui_schema=build_ui_schema(tree),
        fields=tree,
    )


def dump_form(tree: Iterable[FieldNode], indent: int | None = None) -> str:
    """Serialize a form document to JSON text.

    Args:
        tree: Field tree to export.
        indent: JSON indentation. Defaults to FORMTREE_INDENT.
    """
    indent = get_environment(EnvVar.INDENT, override=indent)
    return export_form(tree).model_dump_json(by_alias=True, indent=indent)


def _parse_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaImportError(f"Invalid JSON in {what}: {e}") from e


def load_form(
    payload: str | Mapping[str, Any],
    registry: FieldRegistry | None = None,
    id_source: IdSource | None = None,
) -> FieldTree:
    """Load a field tree from an exported document or a bare JSON Schema.

    A document carrying ``fields`` restores its tree exactly. Anything else
    is treated as a JSON Schema (a document's ``schema`` entry when present)
    and imported heuristically.

    Args:
        payload: JSON text or an already parsed mapping.
        registry: Registry used for heuristic import.
        id_source: Id generator used for heuristic import.

    Returns:
        Tuple of root nodes.

    Raises:
        SchemaImportError: On invalid JSON, malformed fields, or a schema
            without properties.
    """
    if isinstance(payload, str):
        payload = _parse_json(payload, "form document")
    if not isinstance(payload, Mapping):
        raise SchemaImportError("Form document must be a JSON object")

    fields = payload.get("fields")
    if isinstance(fields, list):
        try:
            return load_tree(fields)
        except PydanticValidationError as e:
            raise SchemaImportError(f"Invalid fields: {e}") from e

    schema = payload.get("schema")
    if not isinstance(schema, Mapping):
        schema = payload
    return convert_schema_to_fields(schema, registry, id_source)


def apply_edited_text(
    state: FormState,
    schema_text: str | None = None,
    uischema_text: str | None = None,
) -> EditResult:
    """Apply hand-edited schema / UI schema text to a form state.

    Either text may be omitted to keep the current document. Parsing is all
    or nothing: on any failure the previous state is returned with an error.
    """
    updates: dict[str, Any] = {}
    for name, text in (("schema", schema_text), ("uischema", uischema_text)):
        if text is None:
            continue
        try:
            parsed = _parse_json(text, name)
        except SchemaImportError as e:
            logger.warning("%s", e)
            return EditResult(state=state, error=str(e))
        if not isinstance(parsed, dict):
            message = f"Invalid JSON in {name}: expected an object"
            logger.warning("%s", message)
            return EditResult(state=state, error=message)
        updates[name] = parsed

    if not updates:
        return EditResult(state=state)
    return EditResult(state=replace(state, **updates))


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
