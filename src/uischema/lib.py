"""UI Schema projection of a field tree.

Unlike the JSON Schema projection, layout nodes are preserved here as UI
layout elements. Scope paths depend only on object nesting: a layout never
changes the scope of its children, an object adds one ``/properties/<key>``
segment, and array items restart at ``#`` inside the array's ``detail``.
"""

from collections.abc import Iterable
from typing import Any

from src.config import EnvVar, get_environment
from src.mid import FieldNode, NodeKind, children_of
from src.rules import compile_rule
from src.schema import confirmation_key, needs_confirmation

ROOT_SCOPE = "#"

LAYOUT_ELEMENT_TYPES: dict[str, str] = {
    "vertical-layout": "VerticalLayout",
    "horizontal-layout": "HorizontalLayout",
    "group": "GroupWithIcon",
    "object": "GroupWithIcon",
}


def scope_for(key: str, scope_base: str = ROOT_SCOPE) -> str:
    """Build the scope path of a property under ``scope_base``."""
    return f"{scope_base}/properties/{key}"


def _is_hidden(node: FieldNode) -> bool:
    return bool(node.ui_options.get("hidden"))


def _rule(node: FieldNode) -> dict[str, Any] | None:
    if not node.visibility:
        return None
    return compile_rule(node.visibility, node.effect)


def _with_rule(element: dict[str, Any], rule: dict[str, Any] | None) -> dict[str, Any]:
    if rule is not None:
        element["rule"] = rule
    return element


def _group_element(
    node: FieldNode, scope_base: str, sort_buttons: bool
) -> dict[str, Any]:
    element: dict[str, Any] = {}
    if getattr(node, "icon", ""):
        element["icon"] = f"Icon{node.icon}"
    element["type"] = LAYOUT_ELEMENT_TYPES[node.type]
    element["label"] = node.label
    element["elements"] = build_ui_schema_from_fields(
        children_of(node), scope_base, sort_buttons=sort_buttons
    )
    if node.ui_options:
        element["options"] = dict(node.ui_options)
    return element


def _array_element(
    node: FieldNode, scope_base: str, sort_buttons: bool
) -> dict[str, Any]:
    options: dict[str, Any] = {"addable": True, **node.ui_options}
    options["showSortButtons"] = sort_buttons
    detail = build_ui_schema_from_fields(
        children_of(node), ROOT_SCOPE, sort_buttons=sort_buttons
    )
    if detail:
        options["detail"] = {"type": "VerticalLayout", "elements": detail}
    return {
        "type": "Control",
        "scope": scope_for(node.key, scope_base),
        "options": options,
    }


def _control(scope: str, label: str, options: dict[str, Any]) -> dict[str, Any]:
    element: dict[str, Any] = {"type": "Control", "scope": scope, "label": label}
    if options:
        element["options"] = dict(options)
    return element


def build_ui_schema_from_fields(
    tree: Iterable[FieldNode],
    scope_base: str = ROOT_SCOPE,
    *,
    sort_buttons: bool | None = None,
) -> list[dict[str, Any]]:
    """Build the UI elements for one sibling list.

    Args:
        tree: Sibling list to project.
        scope_base: Scope of the enclosing object (``#`` at the root and
            inside array items).
        sort_buttons: Show item sort buttons on array controls. Defaults to
            FORMTREE_ARRAY_SORT_BUTTONS.

    Returns:
        List of UI Schema elements. Nodes whose ``uiOptions.hidden`` is set
        are omitted together with their subtree.
    """
    if sort_buttons is None:
        sort_buttons = get_environment(EnvVar.ARRAY_SORT_BUTTONS)

    elements: list[dict[str, Any]] = []
    for node in tree:
        if _is_hidden(node):
            continue
        rule = _rule(node)

        if node.kind is NodeKind.LAYOUT:
            elements.append(_with_rule(_group_element(node, scope_base, sort_buttons), rule))
        elif node.kind is NodeKind.OBJECT:
            nested = scope_for(node.key, scope_base)
            elements.append(_with_rule(_group_element(node, nested, sort_buttons), rule))
        elif node.kind is NodeKind.ARRAY:
            elements.append(_with_rule(_array_element(node, scope_base, sort_buttons), rule))
        else:
            control = _control(scope_for(node.key, scope_base), node.label, node.ui_options)
            elements.append(_with_rule(control, rule))
            if needs_confirmation(node):
                confirm = _control(
                    scope_for(confirmation_key(node.key), scope_base),
                    f"Confirm {node.label}",
                    {"format": "password"},
                )
                elements.append(_with_rule(confirm, rule))

    return elements


def build_ui_schema(
    tree: Iterable[FieldNode], *, sort_buttons: bool | None = None
) -> dict[str, Any]:
    """Build the root UI Schema document.

    Returns:
        ``{"type": "VerticalLayout", "elements": [...]}``.
    """
    return {
        "type": "VerticalLayout",
        "elements": build_ui_schema_from_fields(tree, sort_buttons=sort_buttons),
    }


__all__ = [
    "ROOT_SCOPE",
    "LAYOUT_ELEMENT_TYPES",
    "scope_for",
    "build_ui_schema_from_fields",
    "build_ui_schema",
]
