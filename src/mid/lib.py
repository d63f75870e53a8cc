"""Metadata-Intermediate-Definition (MID) layer.

The MID layer is the **Source of Truth** for the editable form tree. It
defines the structural model (FieldNode) and the validation rules that
govern every projection derived from it (JSON Schema, UI Schema, seed data).

FieldNode is a tagged union of four variants discriminated on ``type``:

- LeafField: an input control (text, number, checkbox, ...)
- LayoutField: a transparent grouping container (vertical/horizontal/group)
- ObjectField: a container that introduces one nested schema level
- ArrayField: a container whose children describe the item schema

Nodes are frozen. Trees are tuples of nodes and every edit produces a new
tree (see src.tree). ``parent_id`` is plain metadata; ownership flows only
through ``children``.
"""

import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter

from src.config import EnvVar, get_environment


class NodeKind(str, Enum):
    """Structural role of a node within the tree."""

    LEAF = "leaf"
    LAYOUT = "layout"
    OBJECT = "object"
    ARRAY = "array"


class FieldType(str, Enum):
    """Closed vocabulary of node types.

    Categories:
        Layouts: vertical-layout, horizontal-layout, group
        Containers: object, array
        Controls: text, textarea, number, integer, email, password, url,
                  date, file, checkbox, select, radio, multiselect,
                  multicheckbox, array-strings
    """

    # Layouts
    VERTICAL_LAYOUT = "vertical-layout"
    HORIZONTAL_LAYOUT = "horizontal-layout"
    GROUP = "group"

    # Containers
    OBJECT = "object"
    ARRAY = "array"

    # Controls
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    INTEGER = "integer"
    EMAIL = "email"
    PASSWORD = "password"
    URL = "url"
    DATE = "date"
    FILE = "file"
    CHECKBOX = "checkbox"
    SELECT = "select"
    RADIO = "radio"
    MULTISELECT = "multiselect"
    MULTICHECKBOX = "multicheckbox"
    ARRAY_STRINGS = "array-strings"


class Effect(str, Enum):
    """Effect applied by a compiled rule when its condition holds."""

    SHOW = "SHOW"
    HIDE = "HIDE"
    ENABLE = "ENABLE"
    DISABLE = "DISABLE"


class LogicalJoin(str, Enum):
    """Joiner placed in front of a condition row."""

    NONE = ""
    AND = "AND"
    OR = "OR"


LeafType = Literal[
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
]
LayoutType = Literal["vertical-layout", "horizontal-layout", "group"]

LAYOUT_TYPES: frozenset[FieldType] = frozenset(
    {FieldType.VERTICAL_LAYOUT, FieldType.HORIZONTAL_LAYOUT, FieldType.GROUP}
)


def get_node_kind(field_type: FieldType | str) -> NodeKind:
    """Get the structural kind for a node type.

    Args:
        field_type: A FieldType member or its string value.

    Returns:
        NodeKind for the type.

    Raises:
        ValueError: If the type is not part of the vocabulary.
    """
    ft = FieldType(field_type)
    if ft in LAYOUT_TYPES:
        return NodeKind.LAYOUT
    if ft is FieldType.OBJECT:
        return NodeKind.OBJECT
    if ft is FieldType.ARRAY:
        return NodeKind.ARRAY
    return NodeKind.LEAF


class Condition(BaseModel):
    """One user-authored visibility row.

    Attributes:
        depends_on: Key of the field the row inspects.
        operator: Comparison operator (equals, gte, starts_with, ...).
        value: Comparison value. ``between`` expects ``{"min", "max"}``.
        logical: Joiner relative to the previous row ('', AND, OR).
    """

    depends_on: str = Field(
        default="",
        validation_alias=AliasChoices("dependsOn", "dependsOnKey", "depends_on"),
        serialization_alias="dependsOn",
    )
    operator: str = ""
    value: Any = ""
    logical: LogicalJoin = Field(
        default=LogicalJoin.NONE,
        validation_alias=AliasChoices("logical", "logicalJoin"),
        serialization_alias="logical",
    )

    model_config = {"frozen": True, "use_enum_values": True}


class _FieldBase(BaseModel):
    """Fields shared by every node variant."""

    kind: ClassVar[NodeKind]

    id: str = Field(..., description="Unique identifier minted by an IdGenerator")
    key: str = Field("", description="Property name in the generated schema")
    label: str = Field("", description="Human-readable title")
    required: bool = False
    json_schema: dict[str, Any] = Field(
        default_factory=dict,
        alias="schema",
        description="Partial JSON Schema fragment (type, format, enum, ...)",
    )
    ui_options: dict[str, Any] = Field(
        default_factory=dict,
        alias="uiOptions",
        description="Presentation directives (readonly, format, displayType, ...)",
    )
    visibility: tuple[Condition, ...] = ()
    effect: Effect = Effect.SHOW
    parent_id: str | None = Field(
        None, alias="parentId", description="Owning container id (metadata only)"
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "use_enum_values": True,
    }

    @property
    def is_container(self) -> bool:
        """True for nodes that own children."""
        return self.kind is not NodeKind.LEAF


class LeafField(_FieldBase):
    """An input control that maps to exactly one schema property."""

    kind: ClassVar[NodeKind] = NodeKind.LEAF

    type: LeafType
    require_confirmation: bool = Field(False, alias="requireConfirmation")


class LayoutField(_FieldBase):
    """A transparent grouping node; its children join the enclosing level."""

    kind: ClassVar[NodeKind] = NodeKind.LAYOUT

    type: LayoutType
    icon: str = ""
    children: tuple["FieldNode", ...] = ()


class ObjectField(_FieldBase):
    """A container that introduces one nested object in the schema."""

    kind: ClassVar[NodeKind] = NodeKind.OBJECT

    type: Literal["object"]
    icon: str = ""
    children: tuple["FieldNode", ...] = ()


class ArrayField(_FieldBase):
    """A repeatable container; children describe a single item once."""

    kind: ClassVar[NodeKind] = NodeKind.ARRAY

    type: Literal["array"]
    children: tuple["FieldNode", ...] = ()


FieldNode = Annotated[
    Union[LeafField, LayoutField, ObjectField, ArrayField],
    Field(discriminator="type"),
]
FieldTree = tuple[FieldNode, ...]

LayoutField.model_rebuild()
ObjectField.model_rebuild()
ArrayField.model_rebuild()

_NODE_ADAPTER: TypeAdapter = TypeAdapter(FieldNode)
_TREE_ADAPTER: TypeAdapter = TypeAdapter(FieldTree)


def children_of(node: FieldNode) -> FieldTree:
    """Return a node's children, or an empty tuple for leaves."""
    return getattr(node, "children", ())


def iter_nodes(tree: Iterable[FieldNode]) -> Iterator[FieldNode]:
    """Walk a tree in preorder (ancestors before descendants)."""
    for node in tree:
        yield node
        yield from iter_nodes(children_of(node))


def load_node(data: dict[str, Any]) -> FieldNode:
    """Validate a single node dictionary (camelCase or snake_case keys)."""
    return _NODE_ADAPTER.validate_python(data)


def load_tree(data: Iterable[dict[str, Any]] | str) -> FieldTree:
    """Validate a tree from a list of node dicts or its JSON text.

    Raises:
        pydantic.ValidationError: If any node is malformed.
    """
    if isinstance(data, str):
        return _TREE_ADAPTER.validate_json(data)
    return _TREE_ADAPTER.validate_python(list(data))


def dump_tree(tree: Iterable[FieldNode]) -> list[dict[str, Any]]:
    """Serialize a tree to JSON-compatible dicts using camelCase keys."""
    return [node.model_dump(mode="json", by_alias=True) for node in tree]


# =============================================================================
# Id Generation
# =============================================================================

IdSource = Callable[[], int]

_ID_SUFFIX = re.compile(r"(\d+)$")


def format_field_id(number: int, prefix: str | None = None) -> str:
    """Build a node id such as ``field_7``."""
    if prefix is None:
        prefix = get_environment(EnvVar.ID_PREFIX)
    return f"{prefix}{number}"


class IdGenerator:
    """Monotonic counter injected into every call that mints ids.

    Each editing session owns its own instance, so independent builders
    never share state.

    Example:
        >>> ids = IdGenerator()
        >>> ids(), ids()
        (1, 2)
    """

    def __init__(self, start: int = 0):
        self._last = start

    def __call__(self) -> int:
        self._last += 1
        return self._last

    @property
    def last(self) -> int:
        """Most recently issued number (``start`` before the first call)."""
        return self._last

    @classmethod
    def after(cls, tree: Iterable[FieldNode]) -> "IdGenerator":
        """Create a generator that continues past every numeric id in a tree."""
        highest = 0
        for node in iter_nodes(tree):
            match = _ID_SUFFIX.search(node.id)
            if match:
                highest = max(highest, int(match.group(1)))
        return cls(start=highest)


# =============================================================================
# Validation
# =============================================================================


@dataclass
class ValidationError:
    """Represents a validation error in a field tree.

    Attributes:
        node_id: ID of the node where the error occurred.
        message: Human-readable error description.
        error_type: Machine-readable error classification.
    """

    node_id: str
    message: str
    error_type: str


def property_nodes(children: Iterable[FieldNode]) -> Iterator[FieldNode]:
    """Yield the nodes that become properties at this schema level.

    Layout nodes are transparent, so their children are yielded in their
    place (recursively).
    """
    for node in children:
        if node.kind is NodeKind.LAYOUT:
            yield from property_nodes(children_of(node))
        else:
            yield node


def validate_tree(tree: Iterable[FieldNode]) -> list[ValidationError]:
    """Validate a field tree for structural issues.

    Checks for:
    - Duplicate node ids anywhere in the tree
    - Property-projecting nodes without a key
    - Duplicate keys among siblings of one schema level (layouts flattened)
    - ``parent_id`` values that disagree with actual ownership

    Args:
        tree: Root sibling list.

    Returns:
        List of ValidationError objects. Empty list if valid.
    """
    tree = tuple(tree)
    errors: list[ValidationError] = []
    id_counts: dict[str, int] = {}

    def check_level(children: FieldTree) -> None:
        seen: dict[str, str] = {}
        for node in property_nodes(children):
            if not node.key:
                errors.append(
                    ValidationError(
                        node_id=node.id,
                        message=f"Node '{node.id}' ({node.type}) has no key",
                        error_type="missing_key",
                    )
                )
                continue
            keys = [node.key]
            if getattr(node, "require_confirmation", False):
                keys.append(f"{node.key}_confirm")
            for key in keys:
                if key in seen:
                    errors.append(
                        ValidationError(
                            node_id=node.id,
                            message=(
                                f"Duplicate key '{key}' "
                                f"(already used by '{seen[key]}')"
                            ),
                            error_type="duplicate_key",
                        )
                    )
                else:
                    seen[key] = node.id

    def visit(node: FieldNode, owner: str | None) -> None:
        id_counts[node.id] = id_counts.get(node.id, 0) + 1

        if node.parent_id is not None and node.parent_id != owner:
            errors.append(
                ValidationError(
                    node_id=node.id,
                    message=(
                        f"parentId '{node.parent_id}' does not match "
                        f"owner '{owner}'"
                    ),
                    error_type="parent_mismatch",
                )
            )

        children = children_of(node)
        if node.kind in (NodeKind.OBJECT, NodeKind.ARRAY):
            check_level(children)
        for child in children:
            visit(child, node.id)

    check_level(tree)
    for root in tree:
        visit(root, None)

    for node_id, count in id_counts.items():
        if count > 1:
            errors.append(
                ValidationError(
                    node_id=node_id,
                    message=f"Duplicate ID '{node_id}' appears {count} times",
                    error_type="duplicate_id",
                )
            )

    return errors


def is_valid(tree: Iterable[FieldNode]) -> bool:
    """Check if a field tree is valid.

    Args:
        tree: Root sibling list.

    Returns:
        True if valid, False if any validation errors exist.
    """
    return not validate_tree(tree)


__all__ = [
    # Enums
    "NodeKind",
    "FieldType",
    "Effect",
    "LogicalJoin",
    "LAYOUT_TYPES",
    "get_node_kind",
    # Core model
    "Condition",
    "LeafField",
    "LayoutField",
    "ObjectField",
    "ArrayField",
    "FieldNode",
    "FieldTree",
    "children_of",
    "iter_nodes",
    "property_nodes",
    "load_node",
    "load_tree",
    "dump_tree",
    # Ids
    "IdSource",
    "IdGenerator",
    "format_field_id",
    # Validation
    "ValidationError",
    "validate_tree",
    "is_valid",
]
