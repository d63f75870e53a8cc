"""Unit tests for visibility rule compilation."""

import pytest

from src.mid import Condition, LeafField
from src.rules import (
    Operator,
    build_property_condition,
    compile_condition_schema,
    compile_rule,
    escape_pattern,
    operators_for,
    to_number,
)


def _row(key, operator, value="", logical=""):
    return {"dependsOn": key, "operator": operator, "value": value, "logical": logical}


def _pred(key, constraint):
    return {"properties": {key: constraint}, "required": [key]}


class TestHelpers:
    """Tests for value helpers."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw,expected",
        [("18", 18), ("2.5", 2.5), (" 7 ", 7), (4.0, 4), (3, 3), ("abc", None), ("", None), (True, None)],
    )
    def test_to_number(self, raw, expected):
        """Numbers parse from text and integral floats become ints."""
        result = to_number(raw)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.unit
    def test_escape_pattern(self):
        """Metacharacters are escaped."""
        assert escape_pattern("a.b*(c)") == r"a\.b\*\(c\)"
        assert escape_pattern("$5^[x]") == r"\$5\^\[x\]"


class TestBuildPropertyCondition:
    """Tests for single-row predicates."""

    @pytest.mark.unit
    def test_equals_normalizes_booleans(self):
        """'true' and 'false' compare as booleans."""
        assert build_property_condition(_row("ok", "equals", "true")) == _pred("ok", {"const": True})
        assert build_property_condition(_row("ok", "not_equals", "false")) == _pred(
            "ok", {"not": {"const": False}}
        )

    @pytest.mark.unit
    def test_equals_keeps_strings(self):
        """Other values pass through unchanged."""
        assert build_property_condition(_row("plan", "equals", "pro")) == _pred(
            "plan", {"const": "pro"}
        )

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "operator,constraint",
        [
            ("eq", {"type": "number", "const": 5}),
            ("neq", {"not": {"const": 5}}),
            ("gt", {"type": "number", "exclusiveMinimum": 5}),
            ("gte", {"type": "number", "minimum": 5}),
            ("lt", {"type": "number", "exclusiveMaximum": 5}),
            ("lte", {"type": "number", "maximum": 5}),
        ],
    )
    def test_numeric_operators(self, operator, constraint):
        """Numeric operators compare against a parsed number."""
        assert build_property_condition(_row("n", operator, "5")) == _pred("n", constraint)

    @pytest.mark.unit
    def test_non_numeric_value_dropped(self):
        """A numeric operator with text input yields no predicate."""
        assert build_property_condition(_row("n", "gt", "many")) is None

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "operator,pattern",
        [("pattern", r"a\.b"), ("starts_with", r"^a\.b"), ("ends_with", r"a\.b$")],
    )
    def test_text_operators(self, operator, pattern):
        """Text operators become escaped, anchored patterns."""
        assert build_property_condition(_row("s", operator, "a.b")) == _pred(
            "s", {"pattern": pattern}
        )

    @pytest.mark.unit
    def test_between(self):
        """between produces an inclusive range."""
        row = _row("n", "between", {"min": "1", "max": 10})
        assert build_property_condition(row) == _pred("n", {"minimum": 1, "maximum": 10})

    @pytest.mark.unit
    def test_between_inverted_dropped(self):
        """An inverted range yields no predicate."""
        assert build_property_condition(_row("n", "between", {"min": 9, "max": 1})) is None
        assert build_property_condition(_row("n", "between", "1-9")) is None

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "operator,constraint",
        [
            ("date_equals", {"const": "2024-01-31"}),
            ("date_not_equals", {"not": {"const": "2024-01-31"}}),
            ("date_after", {"formatExclusiveMinimum": "2024-01-31"}),
            ("date_on_or_after", {"formatMinimum": "2024-01-31"}),
            ("date_before", {"formatExclusiveMaximum": "2024-01-31"}),
            ("date_on_or_before", {"formatMaximum": "2024-01-31"}),
        ],
    )
    def test_date_operators(self, operator, constraint):
        """Date operators compare formatted dates."""
        assert build_property_condition(_row("d", operator, "2024-01-31")) == _pred(
            "d", constraint
        )

    @pytest.mark.unit
    def test_blank_date_dropped(self):
        """A date comparison without a date yields no predicate."""
        assert build_property_condition(_row("d", "date_after", "")) is None

    @pytest.mark.unit
    def test_unknown_operator_is_const(self):
        """Unrecognized operators fall back to equality."""
        assert build_property_condition(_row("x", "like", "y")) == _pred("x", {"const": "y"})

    @pytest.mark.unit
    def test_accepts_condition_model(self):
        """Condition models are accepted directly."""
        row = Condition(depends_on="age", operator="lt", value=3)
        assert build_property_condition(row) == _pred(
            "age", {"type": "number", "exclusiveMaximum": 3}
        )


class TestGrouping:
    """Tests for AND / OR grouping."""

    @pytest.mark.unit
    def test_single_row(self):
        """One row compiles to its predicate."""
        schema = compile_condition_schema([_row("a", "equals", "1")])
        assert schema == _pred("a", {"const": "1"})

    @pytest.mark.unit
    def test_and_chain(self):
        """AND rows share one allOf group."""
        schema = compile_condition_schema(
            [_row("a", "equals", "1"), _row("b", "equals", "2", "AND")]
        )
        assert schema == {"allOf": [_pred("a", {"const": "1"}), _pred("b", {"const": "2"})]}

    @pytest.mark.unit
    def test_or_splits_groups(self):
        """A AND B OR C compiles to anyOf[allOf[A, B], C]."""
        schema = compile_condition_schema(
            [
                _row("a", "equals", "1"),
                _row("b", "equals", "2", "AND"),
                _row("c", "equals", "3", "OR"),
            ]
        )
        assert schema == {
            "anyOf": [
                {"allOf": [_pred("a", {"const": "1"}), _pred("b", {"const": "2"})]},
                _pred("c", {"const": "3"}),
            ]
        }

    @pytest.mark.unit
    def test_and_after_or_opens_new_group(self):
        """A OR B AND C compiles to anyOf[A, allOf[B, C]]."""
        schema = compile_condition_schema(
            [
                _row("a", "equals", "1"),
                _row("b", "equals", "2", "OR"),
                _row("c", "equals", "3", "AND"),
            ]
        )
        assert schema == {
            "anyOf": [
                _pred("a", {"const": "1"}),
                {"allOf": [_pred("b", {"const": "2"}), _pred("c", {"const": "3"})]},
            ]
        }

    @pytest.mark.unit
    def test_leading_joiner_ignored(self):
        """A joiner on the first row does not open an empty group."""
        schema = compile_condition_schema(
            [_row("a", "equals", "1", "OR"), _row("b", "equals", "2", "AND")]
        )
        assert "allOf" in schema

    @pytest.mark.unit
    def test_blank_dependency_discarded(self):
        """Rows without a dependency are ignored before grouping."""
        schema = compile_condition_schema(
            [_row("", "equals", "1"), _row("b", "equals", "2", "OR")]
        )
        assert schema == _pred("b", {"const": "2"})

    @pytest.mark.unit
    def test_dropped_predicate_leaves_group(self):
        """Failed predicates are excluded; empty groups vanish."""
        schema = compile_condition_schema(
            [
                _row("a", "gt", "x"),
                _row("b", "equals", "2", "OR"),
            ]
        )
        assert schema == _pred("b", {"const": "2"})

    @pytest.mark.unit
    def test_nothing_usable(self):
        """No usable rows compile to nothing."""
        assert compile_condition_schema([]) is None
        assert compile_condition_schema([_row("a", "gt", "x")]) is None


class TestCompileRule:
    """Tests for the rule envelope."""

    @pytest.mark.unit
    def test_gte_example(self):
        """A single numeric row compiles to a full rule."""
        rule = compile_rule([{"dependsOn": "age", "operator": "gte", "value": "18"}], "SHOW")
        assert rule == {
            "effect": "SHOW",
            "condition": {
                "scope": "#",
                "schema": {
                    "properties": {"age": {"type": "number", "minimum": 18}},
                    "required": ["age"],
                },
                "failWhenUndefined": True,
            },
        }

    @pytest.mark.unit
    def test_effect_passed_through(self):
        """The node's effect is carried over."""
        rule = compile_rule([_row("a", "equals", "1")], "DISABLE")
        assert rule["effect"] == "DISABLE"

    @pytest.mark.unit
    def test_no_rows(self):
        """Empty visibility yields no rule."""
        assert compile_rule([], "HIDE") is None


class TestOperatorsFor:
    """Tests for the operator catalogue."""

    @pytest.mark.unit
    def test_by_dependency_type(self):
        """Operators depend on the dependency's schema."""
        number = LeafField(id="f1", type="number", json_schema={"type": "number"})
        date = LeafField(id="f2", type="date", json_schema={"type": "string", "format": "date"})
        text = LeafField(id="f3", type="text", json_schema={"type": "string"})
        choice = LeafField(
            id="f4", type="select", json_schema={"type": "string", "enum": ["a", "b"]}
        )
        assert Operator.GTE in operators_for(number)
        assert operators_for(date)[0] is Operator.DATE_EQUALS
        assert Operator.STARTS_WITH in operators_for(text)
        assert operators_for(choice) == (Operator.EQUALS, Operator.NOT_EQUALS)

    @pytest.mark.unit
    def test_between_not_offered(self):
        """between is never offered by the editor."""
        number = LeafField(id="f1", type="integer", json_schema={"type": "integer"})
        assert Operator.BETWEEN not in operators_for(number)
