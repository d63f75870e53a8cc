"""Visibility rule compilation.

Turns a node's ordered condition rows into a UI Schema rule whose condition
is a JSON Schema evaluated against live form data. Rows form a flat token
stream: AND chains are grouped into ``allOf`` and OR splits chains into
``anyOf`` alternatives (disjunctive normal form, one level deep).
"""

import logging
import math
import re
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from src.mid import Condition, Effect, FieldNode, LogicalJoin

logger = logging.getLogger(__name__)


class Operator(str, Enum):
    """Comparison operators understood by the compiler.

    Categories:
        Generic: equals, not_equals
        Numeric: eq, neq, gt, gte, lt, lte, between
        Text: pattern, starts_with, ends_with
        Date: date_equals, date_not_equals, date_after, date_on_or_after,
              date_before, date_on_or_before
    """

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    BETWEEN = "between"

    PATTERN = "pattern"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"

    DATE_EQUALS = "date_equals"
    DATE_NOT_EQUALS = "date_not_equals"
    DATE_AFTER = "date_after"
    DATE_ON_OR_AFTER = "date_on_or_after"
    DATE_BEFORE = "date_before"
    DATE_ON_OR_BEFORE = "date_on_or_before"


# Operators offered by the condition editor per dependency kind. ``between``
# is accepted by the compiler but not offered here.
OPERATORS: dict[str, tuple[Operator, ...]] = {
    "string": (Operator.EQUALS, Operator.NOT_EQUALS),
    "boolean": (Operator.EQUALS, Operator.NOT_EQUALS),
    "number": (
        Operator.EQ,
        Operator.NEQ,
        Operator.GT,
        Operator.GTE,
        Operator.LT,
        Operator.LTE,
    ),
    "text": (
        Operator.EQUALS,
        Operator.NOT_EQUALS,
        Operator.PATTERN,
        Operator.STARTS_WITH,
        Operator.ENDS_WITH,
    ),
    "date": (
        Operator.DATE_EQUALS,
        Operator.DATE_NOT_EQUALS,
        Operator.DATE_AFTER,
        Operator.DATE_ON_OR_AFTER,
        Operator.DATE_BEFORE,
        Operator.DATE_ON_OR_BEFORE,
    ),
}

_NUMERIC_KEYWORDS: dict[Operator, str] = {
    Operator.EQ: "const",
    Operator.GT: "exclusiveMinimum",
    Operator.GTE: "minimum",
    Operator.LT: "exclusiveMaximum",
    Operator.LTE: "maximum",
}

_DATE_KEYWORDS: dict[Operator, str] = {
    Operator.DATE_EQUALS: "const",
    Operator.DATE_AFTER: "formatExclusiveMinimum",
    Operator.DATE_ON_OR_AFTER: "formatMinimum",
    Operator.DATE_BEFORE: "formatExclusiveMaximum",
    Operator.DATE_ON_OR_BEFORE: "formatMaximum",
}

_REGEX_SPECIAL = re.compile(r"[.*+?^${}()|[\]\\]")


def operators_for(node: FieldNode) -> tuple[Operator, ...]:
    """List the operators the condition editor offers for a dependency.

    Args:
        node: The field a condition row depends on.

    Returns:
        Tuple of operators; empty for fields that cannot be compared.
    """
    schema_type = node.json_schema.get("type")
    if "enum" in node.json_schema:
        return OPERATORS.get(schema_type, ())
    if node.type == "date":
        return OPERATORS["date"]
    if schema_type in ("number", "integer"):
        return OPERATORS["number"]
    if schema_type == "string":
        return OPERATORS["text"]
    if schema_type == "boolean":
        return OPERATORS["boolean"]
    return ()


def normalize_const(value: Any) -> Any:
    """Map the strings 'true' / 'false' to booleans, pass anything else."""
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def to_number(value: Any) -> int | float | None:
    """Parse a finite number, preferring int for integral values.

    Returns:
        The number, or None for booleans, blanks and unparseable input.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def escape_pattern(value: Any) -> str:
    """Escape regex metacharacters so the value matches literally."""
    return _REGEX_SPECIAL.sub(lambda m: "\\" + m.group(0), str(value))


def _constraint(operator: str, value: Any) -> dict[str, Any] | None:
    try:
        op = Operator(operator)
    except ValueError:
        return {"const": normalize_const(value)}

    if op is Operator.EQUALS:
        return {"const": normalize_const(value)}
    if op is Operator.NOT_EQUALS:
        return {"not": {"const": normalize_const(value)}}

    if op is Operator.NEQ or op in _NUMERIC_KEYWORDS:
        number = to_number(normalize_const(value))
        if number is None:
            return None
        if op is Operator.NEQ:
            return {"not": {"const": number}}
        return {"type": "number", _NUMERIC_KEYWORDS[op]: number}

    if op is Operator.BETWEEN:
        bounds = value if isinstance(value, Mapping) else {}
        low, high = to_number(bounds.get("min")), to_number(bounds.get("max"))
        if low is None or high is None or low > high:
            return None
        return {"minimum": low, "maximum": high}

    if op is Operator.PATTERN:
        return {"pattern": escape_pattern(value)}
    if op is Operator.STARTS_WITH:
        return {"pattern": f"^{escape_pattern(value)}"}
    if op is Operator.ENDS_WITH:
        return {"pattern": f"{escape_pattern(value)}$"}

    if value in (None, ""):
        return None
    if op is Operator.DATE_NOT_EQUALS:
        return {"not": {"const": str(value)}}
    return {_DATE_KEYWORDS[op]: str(value)}


def build_property_condition(row: Condition | Mapping[str, Any]) -> dict[str, Any] | None:
    """Compile one condition row into a JSON Schema predicate.

    Args:
        row: Condition model or its dict form (camelCase accepted).

    Returns:
        ``{"properties": {key: constraint}, "required": [key]}``, or None
        when the value cannot satisfy the operator (non-numeric input for a
        numeric operator, an inverted ``between`` range, a blank date).
    """
    if not isinstance(row, Condition):
        row = Condition.model_validate(row)
    constraint = _constraint(row.operator, row.value)
    if constraint is None:
        logger.debug(
            "Dropped condition on '%s': %s %r", row.depends_on, row.operator, row.value
        )
        return None
    return {
        "properties": {row.depends_on: constraint},
        "required": [row.depends_on],
    }


def _close(group: list[dict[str, Any]], groups: list[dict[str, Any]]) -> None:
    if len(group) == 1:
        groups.append(group[0])
    elif group:
        groups.append({"allOf": list(group)})


def compile_condition_schema(
    visibility: Iterable[Condition | Mapping[str, Any]],
) -> dict[str, Any] | None:
    """Group condition rows into a single predicate schema.

    Returns:
        The predicate, ``{"allOf": ...}`` / ``{"anyOf": ...}`` combination,
        or None when no row yields a predicate.
    """
    rows = [
        row if isinstance(row, Condition) else Condition.model_validate(row)
        for row in visibility
    ]
    rows = [row for row in rows if row.depends_on]

    groups: list[dict[str, Any]] = []
    current: list[dict[str, Any]] = []
    for position, row in enumerate(rows):
        # The first row cannot open with a joiner.
        if position > 0 and row.logical == LogicalJoin.OR:
            _close(current, groups)
            current = []
        predicate = build_property_condition(row)
        if predicate is not None:
            current.append(predicate)
    _close(current, groups)

    if not groups:
        return None
    if len(groups) == 1:
        return groups[0]
    return {"anyOf": groups}


def compile_rule(
    visibility: Iterable[Condition | Mapping[str, Any]],
    effect: Effect | str = Effect.SHOW,
) -> dict[str, Any] | None:
    """Compile visibility rows into a UI Schema rule.

    Args:
        visibility: Ordered condition rows.
        effect: Effect applied when the condition holds.

    Returns:
        ``{"effect", "condition": {"scope": "#", "schema",
        "failWhenUndefined": True}}`` or None when nothing is usable.

    Example:
        >>> compile_rule([{"dependsOn": "age", "operator": "gte", "value": "18"}], "SHOW")
        {'effect': 'SHOW', 'condition': {'scope': '#', 'schema': {...}, 'failWhenUndefined': True}}
    """
    schema = compile_condition_schema(visibility)
    if schema is None:
        return None
    return {
        "effect": Effect(effect).value,
        "condition": {
            "scope": "#",
            "schema": schema,
            "failWhenUndefined": True,
        },
    }


__all__ = [
    "Operator",
    "OPERATORS",
    "operators_for",
    "normalize_const",
    "to_number",
    "escape_pattern",
    "build_property_condition",
    "compile_condition_schema",
    "compile_rule",
]
