"""
Kaleidoscope Abstract Syntax Tree (AST) Definitions
===================================================

This module defines the AST node types built by the Kaleidoscope parser.

Node Hierarchy
--------------
ASTNode (base)
├── Expressions (the closed Expr union)
│   ├── NumberLiteral - numeric constant
│   ├── VariableRef - reference to a parameter
│   ├── BinaryOp - binary operator application
│   └── Call - function call
├── Prototype - function name and parameter names
└── FunctionDef - prototype plus single-expression body

A bare top-level expression is represented as a FunctionDef whose
prototype has an empty name and no parameters (the anonymous wrapper).

Design Notes
------------
- All nodes are dataclasses; children are owned by exactly one parent
- Each node may carry its source location, which is excluded from
  equality and repr so trees compare structurally
- Parentheses are not represented; grouping is in the tree shape
"""

from dataclasses import dataclass, field, fields
from typing import Any, Optional, Union

from kaleido.errors import SourceLocation


# Name of the prototype that wraps a bare top-level expression
ANONYMOUS_FUNCTION_NAME = ""


def _location_field():
    return field(default=None, compare=False, repr=False)


# =============================================================================
# AST Node Base Class
# =============================================================================

class ASTNode:
    """
    Base class for all AST nodes.

    Subclasses are dataclasses whose last field is an optional
    `location` used for diagnostics.
    """
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class NumberLiteral(ASTNode):
    """
    Numeric literal such as "1.0".

    Attributes:
        value: The 64-bit float value
    """
    value: float
    location: Optional[SourceLocation] = _location_field()


@dataclass
class VariableRef(ASTNode):
    """
    Reference to a variable (function parameter) by name.

    Attributes:
        name: Variable name
    """
    name: str
    location: Optional[SourceLocation] = _location_field()


@dataclass
class BinaryOp(ASTNode):
    """
    Binary operator application.

    Attributes:
        op: The operator character ('+', '<', ...)
        lhs: Left operand
        rhs: Right operand
    """
    op: str
    lhs: "Expr"
    rhs: "Expr"
    location: Optional[SourceLocation] = _location_field()


@dataclass
class Call(ASTNode):
    """
    Function call.

    Attributes:
        callee: Name of the called function
        args: Argument expressions in positional order
    """
    callee: str
    args: list["Expr"] = field(default_factory=list)
    location: Optional[SourceLocation] = _location_field()


Expr = Union[NumberLiteral, VariableRef, BinaryOp, Call]


# =============================================================================
# Declaration Nodes
# =============================================================================

@dataclass
class Prototype(ASTNode):
    """
    The "prototype" of a function: its name and parameter names.

    Parameter names are not checked for uniqueness; order is the
    positional binding order.

    Attributes:
        name: Function name ("" for the anonymous top-level wrapper)
        params: Parameter names
    """
    name: str
    params: list[str] = field(default_factory=list)
    location: Optional[SourceLocation] = _location_field()

    @property
    def is_anonymous(self) -> bool:
        """True for the wrapper of a bare top-level expression."""
        return self.name == ANONYMOUS_FUNCTION_NAME

    @property
    def arity(self) -> int:
        return len(self.params)


@dataclass
class FunctionDef(ASTNode):
    """
    Function definition: a prototype and a single-expression body.

    Attributes:
        proto: The function's prototype
        body: The body expression
    """
    proto: Prototype
    body: Expr
    location: Optional[SourceLocation] = _location_field()

    @property
    def is_anonymous(self) -> bool:
        return self.proto.is_anonymous


def make_anonymous_function(body: Expr) -> FunctionDef:
    """Wrap a top-level expression as a nameless, parameterless FunctionDef."""
    location = getattr(body, "location", None)
    proto = Prototype(ANONYMOUS_FUNCTION_NAME, [], location=location)
    return FunctionDef(proto, body, location=location)


# =============================================================================
# Visitor Pattern Support
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about.

    Example:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_Call(self, node):
                self.count += 1
                self.generic_visit(node)
    """

    def visit(self, node: ASTNode) -> Any:
        """
        Visit a node by dispatching to visit_<ClassName>.

        Args:
            node: The AST node to visit

        Returns:
            The result of the visit method (varies by visitor)
        """
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit every child node of an unhandled node type."""
        for node_field in fields(node):
            value = getattr(node, node_field.name)
            if isinstance(value, ASTNode):
                self.visit(value)
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Tree dump of an AST for debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(function_def))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _indent(self) -> None:
        self.indent_level += 1

    def _dedent(self) -> None:
        self.indent_level = max(0, self.indent_level - 1)

    def visit_FunctionDef(self, node: FunctionDef):
        if node.is_anonymous:
            self._emit("TopLevelExpr")
        else:
            self._emit(f"Function: {node.proto.name}({' '.join(node.proto.params)})")
        self._indent()
        self.visit(node.body)
        self._dedent()

    def visit_Prototype(self, node: Prototype):
        self._emit(f"Extern: {node.name}({' '.join(node.params)})")

    def visit_NumberLiteral(self, node: NumberLiteral):
        self._emit(f"Number: {node.value:g}")

    def visit_VariableRef(self, node: VariableRef):
        self._emit(f"Variable: {node.name}")

    def visit_BinaryOp(self, node: BinaryOp):
        self._emit(f"BinaryOp: {node.op}")
        self._indent()
        self.visit(node.lhs)
        self.visit(node.rhs)
        self._dedent()

    def visit_Call(self, node: Call):
        self._emit(f"Call: {node.callee} ({len(node.args)} args)")
        self._indent()
        for arg in node.args:
            self.visit(arg)
        self._dedent()
