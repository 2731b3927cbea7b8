#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for ifeval expression evaluation."""

import pytest

from adoc2ast.ifeval import compare, evaluate_expression, parse_expression, resolve_operand


def _no_attributes(text: str) -> str:
    return text


def _attributes(**values: str):
    def _sub(text: str) -> str:
        for name, value in values.items():
            text = text.replace("{" + name + "}", value)
        return text

    return _sub


@pytest.mark.unit
class TestParseExpression:
    """Tests for splitting an expression into operands and operator."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("1 == 1", ("1", "==", "1")),
            ("{a}>=2", ("{a}", ">=", "2")),
            ('"x" != "y"', ('"x"', "!=", '"y"')),
            ("3 < 4", ("3", "<", "4")),
        ],
    )
    def test_valid_expressions(self, text, expected) -> None:
        """Test that the operator and both sides are found."""
        assert parse_expression(text) == expected

    @pytest.mark.parametrize("text", [None, "", "just words"])
    def test_malformed_expressions(self, text) -> None:
        """Test that text without a comparison is rejected."""
        assert parse_expression(text) is None


@pytest.mark.unit
class TestResolveOperand:
    """Tests for converting operands to comparable values."""

    def test_quoted_string_stays_string(self) -> None:
        """Test that quoted numbers are compared as text."""
        assert resolve_operand('"10"', _no_attributes) == "10"

    def test_numbers(self) -> None:
        """Test integer and float operands."""
        assert resolve_operand("10", _no_attributes) == 10
        assert resolve_operand("1.5", _no_attributes) == 1.5

    def test_booleans(self) -> None:
        """Test the boolean keywords."""
        assert resolve_operand("true", _no_attributes) is True
        assert resolve_operand("false", _no_attributes) is False

    def test_attribute_references_are_substituted(self) -> None:
        """Test that references are resolved before conversion."""
        assert resolve_operand("{count}", _attributes(count="7")) == 7

    def test_empty_after_substitution(self) -> None:
        """Test that a dropped reference resolves to None."""
        assert resolve_operand("{missing}", lambda text: "") is None


@pytest.mark.unit
class TestEvaluateExpression:
    """Tests for evaluating whole expressions."""

    def test_numeric_comparison(self) -> None:
        """Test that numbers compare numerically."""
        assert evaluate_expression("10 > 2", _no_attributes)
        assert not evaluate_expression('"10" > "2"', _no_attributes)

    def test_attribute_comparison(self) -> None:
        """Test comparing a substituted attribute to a string."""
        sub = _attributes(backend="html5")

        assert evaluate_expression('"{backend}" == "html5"', sub)
        assert not evaluate_expression('"{backend}" != "html5"', sub)

    def test_malformed_expression_raises(self) -> None:
        """Test that a missing operator raises ValueError."""
        with pytest.raises(ValueError, match="invalid expression"):
            evaluate_expression("nothing to compare", _no_attributes)

    def test_bool_and_number_are_never_equal(self) -> None:
        """Test that a boolean does not equal a number."""
        assert compare(True, "==", 1) is False
        assert compare(True, "!=", 1) is True
        assert compare(True, ">", 0) is False

    def test_unorderable_values(self) -> None:
        """Test that comparing unorderable values yields False."""
        assert compare("a", "<", 1) is False
