"""Human-readable rendering of field trees for terminal review."""

from collections.abc import Iterable

from src.mid import FieldNode, NodeKind, children_of


def format_field_tree(tree: Iterable[FieldNode]) -> str:
    """Format a field tree as indented text.

    Example output:
        Name [text, name, required]
        Vertical Layout [vertical-layout]
        ├── Age [number, age]
        └── Active [checkbox, active]
        Contacts [array, contacts]
        └── Email [email, email, required, rule]

    Args:
        tree: Root sibling list.

    Returns:
        Formatted tree string, one node per line.
    """
    lines: list[str] = []
    for node in tree:
        _format_node(node, lines, "", is_last=True, is_root=True)
    return "\n".join(lines)


def _describe(node: FieldNode) -> str:
    label = node.label or node.key or node.id
    attrs = [node.type]
    if node.kind is not NodeKind.LAYOUT and node.key:
        attrs.append(node.key)
    if node.required:
        attrs.append("required")
    if getattr(node, "require_confirmation", False):
        attrs.append("confirm")
    if node.visibility:
        attrs.append("rule")
    if node.ui_options.get("hidden"):
        attrs.append("hidden")
    return f"{label} [{', '.join(attrs)}]"


def _format_node(
    node: FieldNode,
    lines: list[str],
    prefix: str,
    is_last: bool,
    is_root: bool = False,
) -> None:
    """Recursively format a node and its children."""
    if is_root:
        connector = ""
        child_prefix = ""
    else:
        connector = "└── " if is_last else "├── "
        child_prefix = prefix + ("    " if is_last else "│   ")

    lines.append(f"{prefix}{connector}{_describe(node)}")

    children = children_of(node)
    for i, child in enumerate(children):
        _format_node(child, lines, child_prefix, i == len(children) - 1)


__all__ = ["format_field_tree"]
