"""
Character Sources
=================

The lexer reads its input one character at a time through a CharSource.
A source has no seek and no pushback; the lexer itself keeps the single
pending character it needs for lookahead.

End of input is signalled by the empty string (EOF_CHAR). Once a source
has returned EOF_CHAR it keeps returning it.

Example Usage
-------------
>>> from kaleido.source import StringSource
>>> src = StringSource("ab")
>>> src.read_char(), src.read_char(), src.read_char()
('a', 'b', '')
"""

from abc import ABC, abstractmethod
from typing import TextIO


# Returned by read_char() at end of input
EOF_CHAR = ""


class CharSource(ABC):
    """Abstract one-character-at-a-time input."""

    @abstractmethod
    def read_char(self) -> str:
        """Return the next character, or EOF_CHAR at end of input."""
        pass


class StringSource(CharSource):
    """Characters from an in-memory string."""

    def __init__(self, text: str):
        self._text = text
        self._pos = 0

    def read_char(self) -> str:
        if self._pos >= len(self._text):
            return EOF_CHAR
        char = self._text[self._pos]
        self._pos += 1
        return char


class StreamSource(CharSource):
    """
    Characters from a text stream such as sys.stdin.

    Reads with stream.read(1) so interactive input is consumed only as
    far as the lexer needs it.
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._exhausted = False

    def read_char(self) -> str:
        if self._exhausted:
            return EOF_CHAR
        char = self._stream.read(1)
        if not char:
            self._exhausted = True
            return EOF_CHAR
        return char
