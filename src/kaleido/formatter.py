"""
Kaleidoscope Source Formatter
=============================

Renders an AST back to Kaleidoscope source. Parsing the output yields a
structurally identical AST:

- every binary operation is wrapped in parentheses, so the output does
  not depend on the precedence table in use
- numbers are written in positional notation, since the lexer has no
  exponent syntax (1e20 is written 100000000000000000000)
- entities are separated by ';' so a following '(' can never be read as
  a call on the previous body

Negative and non-finite literals have no source spelling (there is no
unary minus) and raise FormatError.

Example Usage
-------------
>>> from kaleido.parser import parse_expression
>>> from kaleido.formatter import to_source
>>> to_source(parse_expression("1+2*x"))
'(1 + (2 * x))'
"""

from decimal import Decimal
from typing import Iterable, Union
import math

from kaleido.ast import (
    ASTNode,
    ASTVisitor,
    BinaryOp,
    Call,
    FunctionDef,
    NumberLiteral,
    Prototype,
    VariableRef,
)
from kaleido.errors import FormatError


def format_number(value: float) -> str:
    """
    Spell a float so the lexer reads back exactly the same value.

    Integral values are written without a fractional part.
    """
    if not math.isfinite(value) or value < 0 or math.copysign(1.0, value) < 0:
        raise FormatError(f"number {value!r} has no source spelling")
    if value == int(value):
        return str(int(value))
    # repr() is the shortest round-tripping form; Decimal expands exponents
    return format(Decimal(repr(value)), "f")


class SourceFormatter(ASTVisitor):
    """Visitor that returns the source text of each node."""

    def visit_NumberLiteral(self, node: NumberLiteral) -> str:
        return format_number(node.value)

    def visit_VariableRef(self, node: VariableRef) -> str:
        return node.name

    def visit_BinaryOp(self, node: BinaryOp) -> str:
        return f"({self.visit(node.lhs)} {node.op} {self.visit(node.rhs)})"

    def visit_Call(self, node: Call) -> str:
        args = ", ".join(self.visit(arg) for arg in node.args)
        return f"{node.callee}({args})"

    def visit_Prototype(self, node: Prototype) -> str:
        return f"extern {self._signature(node)}"

    def visit_FunctionDef(self, node: FunctionDef) -> str:
        body = self.visit(node.body)
        if node.is_anonymous:
            return body
        return f"def {self._signature(node.proto)} {body}"

    def generic_visit(self, node: ASTNode) -> str:
        raise FormatError(f"cannot format {type(node).__name__}")

    @staticmethod
    def _signature(proto: Prototype) -> str:
        return f"{proto.name}({' '.join(proto.params)})"


def to_source(node: ASTNode) -> str:
    """Render one expression, prototype, or function definition."""
    return SourceFormatter().visit(node)


def format_program(entities: Iterable[Union[FunctionDef, Prototype]]) -> str:
    """Render a sequence of top-level entities, one per line."""
    formatter = SourceFormatter()
    return "".join(f"{formatter.visit(entity)};\n" for entity in entities)
