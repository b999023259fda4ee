"""
Kaleidoscope Front End Error Hierarchy
======================================

This module defines the exception hierarchy for the Kaleidoscope front end.
All exceptions inherit from KaleidoError, allowing callers to catch every
front-end error with a single except clause if desired.

Exception Hierarchy
-------------------
KaleidoError (base)
├── ConfigurationError - invalid precedence table or options
├── FormatError - AST that has no concrete source spelling
└── KaleidoSourceError (errors tied to a source position)
    ├── KSyntaxError - parser failures
    │   ├── UnexpectedTokenError - token cannot start the expected form
    │   ├── MissingTokenError - required punctuation not found
    │   └── NestingTooDeepError - expression nested beyond the limit
    ├── KSemanticError - call-site checks
    │   ├── UnknownFunctionError - call to an undeclared function
    │   └── ArgumentCountError - call with the wrong number of arguments
    └── TooManyErrors - error limit reached while driving a parse

Error Message Format
--------------------
Errors tied to a source position follow this format:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)

The lexer never raises: malformed input always produces *some* token.
Parser methods raise KSyntaxError subclasses, and the entity-level parse
call converts them into an explicit result for the driver.
"""

from dataclasses import dataclass
from typing import List, Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class KaleidoError(Exception):
    """
    Base exception for all Kaleidoscope front-end errors.

        try:
            report = parse_program(source)
        except KaleidoError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Errors Without Source Position
# =============================================================================

class ConfigurationError(KaleidoError):
    """
    Invalid front-end configuration.

    Raised when an operator precedence table or an option value cannot
    be used, e.g. a multi-character operator key or a non-integer
    precedence.
    """
    pass


class FormatError(KaleidoError):
    """
    An AST node has no concrete source spelling.

    The language has no unary minus and no exponent notation, so negative
    and non-finite number literals cannot be written back as source.
    """
    pass


# =============================================================================
# Source Errors
# =============================================================================

class KaleidoSourceError(KaleidoError):
    """
    Base exception for errors that point into the source text.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            demo.ks:3:9: error: Expected ')' in prototype
                def foo(a b
                        ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class KSyntaxError(KaleidoSourceError):
    """
    Syntax error in Kaleidoscope source.

    Raised by the parser when the token stream does not match the
    grammar. The message names the expectation that was violated, e.g.
    "Expected function name in prototype".
    """
    pass


class UnexpectedTokenError(KSyntaxError):
    """
    A token that cannot start the form the parser was expecting.

    Attributes:
        found: Display text of the offending token
        expected: Description of what was expected
    """

    def __init__(
        self,
        message: str,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected
        super().__init__(
            message,
            location=location,
            hint=f"found {found}",
            source_line=source_line,
        )


class MissingTokenError(KSyntaxError):
    """
    Required punctuation is missing.

    Raised when a required token (like ')' or '(') is not found where
    the grammar demands it.

    Attributes:
        expected: The punctuation (or alternatives) that was required
        found: Display text of the token found instead
    """

    def __init__(
        self,
        message: str,
        expected: str,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found
        super().__init__(
            message,
            location=location,
            hint=f"found {found}",
            source_line=source_line,
        )


class NestingTooDeepError(KSyntaxError):
    """
    An expression nests parentheses, calls or operands beyond the limit.

    Attributes:
        found: Display text of the token where the limit was reached
        limit: The nesting limit in force
    """

    def __init__(
        self,
        message: str,
        found: str,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.limit = limit
        super().__init__(
            message,
            location=location,
            hint=f"expressions may nest at most {limit} levels deep",
            source_line=source_line,
        )


class KSemanticError(KaleidoSourceError):
    """
    Call-site check failure.

    Arity checking is the only semantic analysis the front end performs.
    """
    pass


class UnknownFunctionError(KSemanticError):
    """Call to a function that was neither defined nor declared extern."""

    def __init__(
        self,
        function_name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.function_name = function_name
        super().__init__(
            f"Unknown function referenced: '{function_name}'",
            location=location,
            hint="declare it with 'extern' or define it with 'def' first",
            source_line=source_line,
        )


class ArgumentCountError(KSemanticError):
    """
    Wrong number of arguments in function call.

    Raised when a function is called with a different number of arguments
    than its prototype declares.
    """

    def __init__(
        self,
        function_name: str,
        expected: int,
        actual: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.function_name = function_name
        self.expected = expected
        self.actual = actual

        word = "argument" if expected == 1 else "arguments"
        super().__init__(
            f"Incorrect # arguments passed: '{function_name}' expects "
            f"{expected} {word}, got {actual}",
            location=location,
            source_line=source_line,
        )


class TooManyErrors(KaleidoSourceError):
    """
    Raised when too many errors have been encountered.

    Stops the driver from producing an unbounded cascade of diagnostics on
    badly malformed input.
    """

    def __init__(self, message: str = "Too many errors"):
        super().__init__(message)


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The driver uses this to keep parsing after a failed entity, collecting
    every diagnostic before reporting them together.

    Example:
        collector = ErrorCollector(max_errors=100)

        result = parser.parse_next_entity()
        if result.error is not None:
            collector.add(result.error)
            if collector.should_stop():
                ...

        if collector.errors:
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before stopping
        """
        self.errors: List[KaleidoSourceError] = []
        self.warnings: List[str] = []
        self.max_errors = max_errors

    def add(self, error: KaleidoSourceError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        for warning in self.warnings:
            lines.append(warning)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()
