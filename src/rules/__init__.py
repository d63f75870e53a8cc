"""Rules module - compile visibility rows into UI Schema rules.

Example usage:
    >>> from src.rules import compile_rule
    >>> rule = compile_rule(node.visibility, node.effect)
"""

from .lib import (
    OPERATORS,
    Operator,
    build_property_condition,
    compile_condition_schema,
    compile_rule,
    escape_pattern,
    normalize_const,
    operators_for,
    to_number,
)

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
