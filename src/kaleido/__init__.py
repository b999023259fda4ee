"""
Kaleidoscope Front End
======================

This package implements the front end for Kaleidoscope, a small untyped,
expression-oriented language whose only value type is the 64-bit float:

    # Average of two numbers.
    def average(a b) (a + b) * 0.5;
    average(3, 4)

- A streaming lexer with one character of lookahead
- A recursive descent parser with precedence climbing for binary
  operators, driven by a caller-supplied precedence table
- AST dataclasses for function definitions, extern declarations and
  top-level expressions
- A driver loop with one-token error recovery, a call-site arity checker
  and a source formatter

Pipeline
--------
    Characters → Lexer → Parser → AST → (your backend)

Lowering the AST to an executable form is left to the caller, which
receives entities through an EntityHandler.

Usage
-----
>>> from kaleido import parse_program
>>> report = parse_program("extern sin(x); def f(a b) a*b+1; f(2, 3)")
>>> len(report.entities), report.ok
(3, True)

Or use the command-line tool:
    $ kaleido parse program.ks --ast
    $ kaleido repl
"""

__version__ = "1.0.0"

from kaleido.errors import (
    KaleidoError,
    SourceLocation,
    ConfigurationError,
    FormatError,
    KaleidoSourceError,
    KSyntaxError,
    UnexpectedTokenError,
    MissingTokenError,
    NestingTooDeepError,
    KSemanticError,
    UnknownFunctionError,
    ArgumentCountError,
    TooManyErrors,
    ErrorCollector,
)
from kaleido.source import CharSource, StringSource, StreamSource, EOF_CHAR
from kaleido.lexer import Lexer, Token, TokenKind
from kaleido.ast import (
    ASTNode,
    Expr,
    NumberLiteral,
    VariableRef,
    BinaryOp,
    Call,
    Prototype,
    FunctionDef,
    ANONYMOUS_FUNCTION_NAME,
    ASTVisitor,
    ASTPrinter,
)
from kaleido.precedence import PrecedenceTable, DEFAULT_PRECEDENCE
from kaleido.parser import Parser, ParseResult, EntityKind, parse_expression
from kaleido.checker import ArityChecker
from kaleido.formatter import SourceFormatter, to_source, format_program
from kaleido.driver import (
    FrontendOptions,
    Driver,
    DriverReport,
    EntityHandler,
    CollectingHandler,
    EchoHandler,
    parse_program,
    repl,
)

__all__ = [
    "__version__",
    # Errors
    "KaleidoError",
    "SourceLocation",
    "ConfigurationError",
    "FormatError",
    "KaleidoSourceError",
    "KSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "NestingTooDeepError",
    "KSemanticError",
    "UnknownFunctionError",
    "ArgumentCountError",
    "TooManyErrors",
    "ErrorCollector",
    # Input
    "CharSource",
    "StringSource",
    "StreamSource",
    "EOF_CHAR",
    # Lexer
    "Lexer",
    "Token",
    "TokenKind",
    # AST
    "ASTNode",
    "Expr",
    "NumberLiteral",
    "VariableRef",
    "BinaryOp",
    "Call",
    "Prototype",
    "FunctionDef",
    "ANONYMOUS_FUNCTION_NAME",
    "ASTVisitor",
    "ASTPrinter",
    # Parser
    "PrecedenceTable",
    "DEFAULT_PRECEDENCE",
    "Parser",
    "ParseResult",
    "EntityKind",
    "parse_expression",
    # Checking and formatting
    "ArityChecker",
    "SourceFormatter",
    "to_source",
    "format_program",
    # Driver
    "FrontendOptions",
    "Driver",
    "DriverReport",
    "EntityHandler",
    "CollectingHandler",
    "EchoHandler",
    "parse_program",
    "repl",
]
