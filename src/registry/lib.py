"""Field-type registry for palette selections.

The registry maps a field-type id to the defaults used when a new node is
materialized from the palette: its JSON Schema fragment, its UI options and
its display label. Registries are plain objects; callers can start from the
defaults, replace them, or upsert their own entries.
"""

import copy
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from src.mid import (
    FieldNode,
    FieldType,
    IdSource,
    NodeKind,
    format_field_id,
    get_node_kind,
    load_node,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldTypeSpec:
    """Defaults for one palette entry.

    Attributes:
        id: Field-type id; doubles as the node ``type``.
        label: Palette label, also the initial node label.
        is_layout: Whether the entry is a container in the palette.
        default_schema: JSON Schema fragment copied into new nodes.
        default_ui_options: UI options copied into new nodes.
        icon: Optional icon name for group-like containers.
    """

    id: str
    label: str
    is_layout: bool = False
    default_schema: Mapping[str, Any] = field(default_factory=dict)
    default_ui_options: Mapping[str, Any] = field(default_factory=dict)
    icon: str = ""

    def __post_init__(self) -> None:
        # Raises ValueError for ids outside the node vocabulary.
        get_node_kind(self.id)

    @property
    def kind(self) -> NodeKind:
        """Structural kind of nodes created from this entry."""
        return get_node_kind(self.id)

    def to_dict(self) -> dict[str, Any]:
        """Convert the entry to a dictionary for export."""
        return {
            "id": self.id,
            "label": self.label,
            "isLayout": self.is_layout,
            "defaultSchema": copy.deepcopy(dict(self.default_schema)),
            "defaultUiOptions": copy.deepcopy(dict(self.default_ui_options)),
        }


_ENUM_PLACEHOLDER = ["Option 1", "Option 2", "Option 3"]

DEFAULT_FIELD_TYPES: tuple[FieldTypeSpec, ...] = (
    # === LAYOUTS ===
    FieldTypeSpec(id=FieldType.GROUP.value, label="Group", is_layout=True),
    FieldTypeSpec(
        id=FieldType.VERTICAL_LAYOUT.value, label="Vertical Layout", is_layout=True
    ),
    FieldTypeSpec(
        id=FieldType.HORIZONTAL_LAYOUT.value,
        label="Horizontal Layout",
        is_layout=True,
    ),
    # === CONTROLS ===
    FieldTypeSpec(
        id=FieldType.NUMBER.value, label="Number", default_schema={"type": "number"}
    ),
    FieldTypeSpec(
        id=FieldType.INTEGER.value, label="Integer", default_schema={"type": "integer"}
    ),
    FieldTypeSpec(
        id=FieldType.TEXT.value, label="Text Input", default_schema={"type": "string"}
    ),
    FieldTypeSpec(
        id=FieldType.TEXTAREA.value,
        label="Textarea",
        default_schema={"type": "string"},
        default_ui_options={"multi": True},
    ),
    FieldTypeSpec(
        id=FieldType.EMAIL.value,
        label="Email",
        default_schema={"type": "string", "format": "email"},
    ),
    FieldTypeSpec(
        id=FieldType.PASSWORD.value,
        label="Password",
        default_schema={"type": "string", "format": "password"},
        default_ui_options={"format": "password"},
    ),
    FieldTypeSpec(
        id=FieldType.URL.value,
        label="URL",
        default_schema={"type": "string", "format": "uri"},
    ),
    FieldTypeSpec(
        id=FieldType.DATE.value,
        label="Date",
        default_schema={"type": "string", "format": "date"},
    ),
    FieldTypeSpec(
        id=FieldType.FILE.value,
        label="File Upload",
        default_schema={"type": "string", "format": "data-url"},
        default_ui_options={"ui:widget": "file"},
    ),
    FieldTypeSpec(
        id=FieldType.CHECKBOX.value,
        label="Checkbox",
        default_schema={"type": "boolean"},
    ),
    FieldTypeSpec(
        id=FieldType.MULTICHECKBOX.value,
        label="Multi Checkbox",
        default_schema={
            "type": "array",
            "items": {"type": "string", "enum": _ENUM_PLACEHOLDER},
            "uniqueItems": True,
        },
        default_ui_options={"multi": True, "format": "select", "displayType": "checkbox"},
    ),
    FieldTypeSpec(
        id=FieldType.SELECT.value,
        label="Select",
        default_schema={"type": "string", "enum": _ENUM_PLACEHOLDER},
    ),
    FieldTypeSpec(
        id=FieldType.MULTISELECT.value,
        label="Multi-Select",
        default_schema={
            "type": "array",
            "items": {"type": "string", "enum": _ENUM_PLACEHOLDER},
            "uniqueItems": True,
        },
        default_ui_options={
            "multi": True,
            "format": "select",
            "displayType": "dropdown",
            "autocompleteProps": {"limitTags": 5},
        },
    ),
    FieldTypeSpec(
        id=FieldType.RADIO.value,
        label="Radio Buttons",
        default_schema={"type": "string", "enum": _ENUM_PLACEHOLDER},
        default_ui_options={"format": "radio"},
    ),
    # === CONTAINERS ===
    FieldTypeSpec(
        id=FieldType.OBJECT.value,
        label="Object",
        is_layout=True,
        default_schema={"type": "object"},
    ),
    FieldTypeSpec(
        id=FieldType.ARRAY_STRINGS.value,
        label="Array of Strings",
        default_schema={"type": "array", "items": {"type": "string"}, "uniqueItems": True},
    ),
    FieldTypeSpec(
        id=FieldType.ARRAY.value,
        label="Array of Objects",
        default_schema={"type": "array", "uniqueItems": True},
    ),
)


class FieldRegistry:
    """Ordered, id-keyed collection of FieldTypeSpec entries.

    Example:
        >>> registry = FieldRegistry.with_defaults()
        >>> registry.get("email").default_schema["format"]
        'email'
    """

    def __init__(self, types: Iterable[FieldTypeSpec] = ()):
        self._types: dict[str, FieldTypeSpec] = {}
        self.reset(types)

    @classmethod
    def with_defaults(cls) -> "FieldRegistry":
        """Create a registry holding DEFAULT_FIELD_TYPES."""
        return cls(DEFAULT_FIELD_TYPES)

    def reset(self, types: Iterable[FieldTypeSpec] = ()) -> None:
        """Replace every entry with the given types."""
        self._types = {spec.id: spec for spec in types}

    def register(self, types: Iterable[FieldTypeSpec]) -> None:
        """Add or replace entries by id; existing entries keep their position."""
        for spec in types:
            if spec.id in self._types:
                logger.debug("Replacing field type '%s'", spec.id)
            self._types[spec.id] = spec

    def get(self, type_id: str) -> FieldTypeSpec | None:
        """Look up an entry by id."""
        return self._types.get(type_id)

    def require(self, type_id: str) -> FieldTypeSpec:
        """Look up an entry by id.

        Raises:
            KeyError: If no entry is registered under the id.
        """
        try:
            return self._types[type_id]
        except KeyError:
            raise KeyError(f"Unknown field type: {type_id}") from None

    def resolve(self, type_id: str, fallback: str = FieldType.TEXT.value) -> FieldTypeSpec:
        """Look up an entry, falling back to ``fallback`` then the first entry.

        Raises:
            LookupError: If the registry is empty.
        """
        spec = self._types.get(type_id) or self._types.get(fallback)
        if spec is not None:
            return spec
        if not self._types:
            raise LookupError("Field registry is empty")
        return next(iter(self._types.values()))

    def list_types(self) -> list[FieldTypeSpec]:
        """All entries in palette order."""
        return list(self._types.values())

    def default_control(self) -> FieldTypeSpec:
        """First plain control in the palette (used by "add field here")."""
        for spec in self._types.values():
            if spec.kind is NodeKind.LEAF:
                return spec
        return self.resolve(FieldType.TEXT.value)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._types

    def __iter__(self) -> Iterator[FieldTypeSpec]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)


def create_field(
    spec: FieldTypeSpec,
    id_source: IdSource,
    parent_id: str | None = None,
    label: str | None = None,
) -> FieldNode:
    """Materialize a new node from a registry entry.

    The id and key share one freshly minted number: ``field_<n>`` and
    ``layout_<n>`` (layouts) or ``<type>_<n>`` (everything else).

    Args:
        spec: Registry entry to copy defaults from.
        id_source: Injected monotonic id generator.
        parent_id: Id of the container the node will be inserted into.
        label: Label override; defaults to the palette label.

    Returns:
        A new FieldNode with empty children for containers.
    """
    number = id_source()
    kind = spec.kind
    key = f"layout_{number}" if kind is NodeKind.LAYOUT else f"{spec.id}_{number}"
    data: dict[str, Any] = {
        "id": format_field_id(number),
        "type": spec.id,
        "key": key,
        "label": label if label is not None else spec.label,
        "schema": copy.deepcopy(dict(spec.default_schema)),
        "uiOptions": copy.deepcopy(dict(spec.default_ui_options)),
        "parentId": parent_id,
    }
    if kind in (NodeKind.LAYOUT, NodeKind.OBJECT) and spec.icon:
        data["icon"] = spec.icon
    return load_node(data)


__all__ = [
    "FieldTypeSpec",
    "FieldRegistry",
    "DEFAULT_FIELD_TYPES",
    "create_field",
]
