"""
Tests for the Kaleidoscope source formatter.

Formatting an AST and parsing the result must give back an equal AST, so
most tests here go through the parser.
"""

import math

import pytest
from kaleido.ast import BinaryOp, Call, FunctionDef, NumberLiteral, Prototype, VariableRef
from kaleido.driver import FrontendOptions, parse_program
from kaleido.errors import FormatError
from kaleido.formatter import format_number, format_program, to_source
from kaleido.parser import parse_expression


class TestFormatNumber:
    """Tests for number spelling."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0.0, "0"),
            (2.0, "2"),
            (1.5, "1.5"),
            (0.1, "0.1"),
            (1e20, "100000000000000000000"),
            (1e-7, "0.0000001"),
        ],
    )
    def test_spelling(self, value, expected):
        assert format_number(value) == expected

    @pytest.mark.parametrize("value", [-1.0, -0.0, math.inf, math.nan])
    def test_no_spelling(self, value):
        """Negative and non-finite values cannot be written as literals."""
        with pytest.raises(FormatError):
            format_number(value)

    @pytest.mark.parametrize("value", [0.1, 1 / 3, 123.456, 2.5e-10, 9.87e15])
    def test_reads_back_exactly(self, value):
        assert parse_expression(format_number(value)) == NumberLiteral(value)


class TestToSource:
    """Tests for rendering single nodes."""

    def test_binary_ops_fully_parenthesized(self):
        assert to_source(parse_expression("1+2*x")) == "(1 + (2 * x))"
        assert to_source(parse_expression("(1+2)*x")) == "((1 + 2) * x)"

    def test_call(self):
        assert to_source(parse_expression("f(a, g(), 1)")) == "f(a, g(), 1)"

    def test_prototype(self):
        assert to_source(Prototype("sin", ["x"])) == "extern sin(x)"

    def test_definition(self):
        node = FunctionDef(Prototype("f", ["a", "b"]), BinaryOp("-", VariableRef("a"), VariableRef("b")))
        assert to_source(node) == "def f(a b) (a - b)"

    def test_anonymous_function_is_body(self):
        node = FunctionDef(Prototype("", []), Call("f", []))
        assert to_source(node) == "f()"


class TestRoundTrip:
    """Formatting then parsing gives the same entities."""

    @pytest.mark.parametrize(
        "source",
        [
            "def f(a b) a*b+1; extern sin(x); f(2, 3)",
            "def fib(x) fib(x-1)+fib(x-2)",
            "a<b+c*d-e",
            "extern nothing()",
            "def g() (1); g()",
            "1.25 * .5",
        ],
    )
    def test_round_trip(self, source):
        original = parse_program(source, "<test>")
        assert original.ok
        text = format_program(original.entities)
        reparsed = parse_program(text, "<formatted>")
        assert reparsed.ok, reparsed.report()
        assert reparsed.entities == original.entities

    def test_round_trip_with_custom_operator(self):
        """Parenthesized output reads back under the same table."""
        options = FrontendOptions(precedence={"+": 20, "/": 40})
        original = parse_program("a/b+c/d", options=options)
        text = format_program(original.entities)
        assert text == "((a / b) + (c / d));\n"
        assert parse_program(text, options=options).entities == original.entities

    def test_program_layout(self):
        report = parse_program("extern f(x)\nf(1)")
        assert format_program(report.entities) == "extern f(x);\nf(1);\n"
