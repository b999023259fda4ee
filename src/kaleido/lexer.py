"""
Kaleidoscope Lexer (Tokenizer)
==============================

This module implements the lexer for the Kaleidoscope language. It pulls
characters one at a time from a CharSource and produces one token per call
to next_token(), holding exactly one pending character between calls.

Token Categories
----------------
- Keywords: def, extern
- Identifiers: [A-Za-z][A-Za-z0-9]*
- Numbers: any run of digits and '.' characters, as a 64-bit float
- Characters: every other character is its own token ('(', '+', ';', ...)
- End of input

Comments
--------
'#' starts a comment that runs to the end of the line. Comments never
become tokens.

Malformed Numbers
-----------------
The lexer accepts any run of digits and dots ("1.2.3", "..") and never
fails. Conversion follows C strtod: the longest valid prefix is used
("1.2.3" -> 1.2) and text without digits converts to 0.0. Such cases are
recorded in Lexer.warnings.

Example Usage
-------------
>>> from kaleido.lexer import Lexer
>>> for token in Lexer("def f(x) x*2", "demo.ks").tokenize():
...     print(token)
Token(DEF, 'def', 1:1)
Token(IDENTIFIER, 'f', 1:5)
Token(CHAR, '(', 1:6)
Token(IDENTIFIER, 'x', 1:7)
Token(CHAR, ')', 1:8)
Token(IDENTIFIER, 'x', 1:10)
Token(CHAR, '*', 1:11)
Token(NUMBER, 2.0, 1:12)
Token(EOF, 1:13)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, Union
import logging
import re
import string

from kaleido.errors import SourceLocation
from kaleido.source import CharSource, StringSource, EOF_CHAR

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenKind(Enum):
    """Token kinds for the Kaleidoscope language."""

    EOF = auto()            # End of input
    DEF = auto()            # def
    EXTERN = auto()         # extern
    IDENTIFIER = auto()     # Function and variable names
    NUMBER = auto()         # Numeric literals (float)
    CHAR = auto()           # Any other single character


# Map keyword strings to their token kinds
KEYWORDS: dict[str, TokenKind] = {
    "def": TokenKind.DEF,
    "extern": TokenKind.EXTERN,
}

# C isspace() set
WHITESPACE = " \t\n\v\f\r"

# C isalpha() / isalnum() / isdigit() in the "C" locale
LETTERS = string.ascii_letters
ALNUM = string.ascii_letters + string.digits
DIGITS = string.digits

# Longest prefix strtod would accept from a digits-and-dots run
_NUMBER_PREFIX = re.compile(r"\d*(?:\.\d*)?")


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from Kaleidoscope source.

    Attributes:
        kind: The TokenKind classification
        value: Name for identifiers, float for numbers, the character for
               CHAR tokens, the spelling for keywords, None for EOF
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    kind: TokenKind
    value: Union[str, float, None]
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is None:
            return f"Token({self.kind.name}, {self.line}:{self.column})"
        return f"Token({self.kind.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def char(self) -> Optional[str]:
        """The character of a CHAR token, None for every other kind."""
        if self.kind == TokenKind.CHAR:
            return self.value
        return None

    def is_char(self, char: str) -> bool:
        """Return True if this is the CHAR token for the given character."""
        return self.kind == TokenKind.CHAR and self.value == char

    def describe(self) -> str:
        """Human-readable description for diagnostics."""
        if self.kind == TokenKind.EOF:
            return "end of input"
        if self.kind == TokenKind.NUMBER:
            return f"number {self.value:g}"
        if self.kind == TokenKind.IDENTIFIER:
            return f"identifier '{self.value}'"
        if self.kind == TokenKind.CHAR and not self.value.isprintable():
            return f"character {self.value!r}"
        return f"'{self.value}'"


# =============================================================================
# Numeric Conversion
# =============================================================================

def convert_number(text: str) -> tuple[float, bool]:
    """
    Convert a run of digits and dots the way strtod would.

    Returns:
        (value, exact) where exact is False when only a prefix of the text
        (or none of it) was numeric
    """
    prefix = _NUMBER_PREFIX.match(text).group(0)
    if not any(c in DIGITS for c in prefix):
        return 0.0, False
    return float(prefix), prefix == text


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Kaleidoscope source.

    The lexer is streaming: it reads one character at a time from its
    source and keeps a single pending character between calls. Every call
    to next_token() returns exactly one token; after end of input it
    keeps returning EOF.

    Usage:
        lexer = Lexer(source_text, filename)
        token = lexer.next_token()

    Attributes:
        filename: Name of the source (for locations)
        warnings: Messages about malformed numeric literals
    """

    def __init__(self, source: Union[str, CharSource], filename: str = "<input>"):
        """
        Initialize the lexer.

        Args:
            source: Source text, or a CharSource to read from
            filename: Name of the source file (for error messages)
        """
        if isinstance(source, str):
            source = StringSource(source)
        self._source = source
        self.filename = filename
        self.warnings: list[str] = []

        # Pending character; a space makes the first call read real input
        self._last_char = " "
        self._char_line = 1
        self._char_column = 0

        # Where the next character read will sit
        self._next_line = 1
        self._next_column = 1

        # Text seen so far for recent lines, for error context
        self._lines: dict[int, list[str]] = {1: []}

    # =========================================================================
    # Character Access
    # =========================================================================

    def _read(self) -> str:
        """Read the next character into the pending slot."""
        char = self._source.read_char()
        self._last_char = char
        self._char_line = self._next_line
        self._char_column = self._next_column

        if char == EOF_CHAR:
            return char

        if char == "\n":
            self._next_line += 1
            self._next_column = 1
            self._lines[self._next_line] = []
            # Keep only the current and previous line
            self._lines.pop(self._next_line - 2, None)
        else:
            self._next_column += 1
            self._lines.setdefault(self._char_line, []).append(char)

        return char

    def source_line(self, line: int) -> Optional[str]:
        """
        Return the text read so far for a recent line.

        Only the current and the previous line are retained, so this is
        meant for the token the parser has just failed on.
        """
        chars = self._lines.get(line)
        if chars is None:
            return None
        return "".join(chars).rstrip("\r")

    def _make_token(self, kind: TokenKind, value, line: int, column: int) -> Token:
        return Token(kind=kind, value=value, line=line, column=column, filename=self.filename)

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def next_token(self) -> Token:
        """
        Scan and return the next token.

        Never raises for malformed input.
        """
        while True:
            # Skip whitespace
            while self._last_char != EOF_CHAR and self._last_char in WHITESPACE:
                self._read()

            line, column = self._char_line, self._char_column
            char = self._last_char

            # Identifiers and keywords
            if char != EOF_CHAR and char in LETTERS:
                return self._scan_identifier(line, column)

            # Numbers
            if char != EOF_CHAR and (char in DIGITS or char == "."):
                return self._scan_number(line, column)

            # Comment until end of line, then look again
            if char == "#":
                while self._read() not in (EOF_CHAR, "\n", "\r"):
                    pass
                continue

            if char == EOF_CHAR:
                return self._make_token(TokenKind.EOF, None, line, column)

            # Any other character is its own token
            self._read()
            return self._make_token(TokenKind.CHAR, char, line, column)

    def _scan_identifier(self, line: int, column: int) -> Token:
        """Scan an identifier or keyword."""
        chars = [self._last_char]
        while self._read() != EOF_CHAR and self._last_char in ALNUM:
            chars.append(self._last_char)

        name = "".join(chars)
        if name in KEYWORDS:
            return self._make_token(KEYWORDS[name], name, line, column)
        return self._make_token(TokenKind.IDENTIFIER, name, line, column)

    def _scan_number(self, line: int, column: int) -> Token:
        """Scan a run of digits and dots."""
        chars = [self._last_char]
        while self._read() != EOF_CHAR and (self._last_char in DIGITS or self._last_char == "."):
            chars.append(self._last_char)

        text = "".join(chars)
        value, exact = convert_number(text)
        if not exact:
            message = f"malformed number '{text}' read as {value:g}"
            self.warnings.append(f"{SourceLocation(self.filename, line, column)}: warning: {message}")
            logger.debug(f"{self.filename}:{line}:{column}: {message}")

        return self._make_token(TokenKind.NUMBER, value, line, column)

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens until end of input.

        Yields:
            Each token in order, ending with a single EOF token
        """
        while True:
            token = self.next_token()
            yield token
            if token.kind == TokenKind.EOF:
                return
