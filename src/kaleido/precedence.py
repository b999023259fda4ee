"""
Binary Operator Precedence Table
================================

The parser decides which characters are binary operators, and how tightly
they bind, from a PrecedenceTable supplied by the caller. Higher values
bind tighter; every operator is left-associative at equal precedence.

Default Table
-------------
| Operator | Precedence |
|----------|------------|
| <        | 10         |
| + -      | 20         |
| *        | 40         |

Only characters registered with a positive value are operators. Lookup of
anything else (unregistered characters, non-positive entries, and tokens
that are not single characters at all) yields -1.

Textual Form
------------
The command line and the KALEIDO_PRECEDENCE environment variable use a
comma-separated list of OP:PREC pairs, split on the last ':' so that ':'
itself can be registered:

    <:10,+:20,-:20,*:40,/:40
"""

from collections.abc import Mapping
from typing import Iterator, Optional

from kaleido.errors import ConfigurationError
from kaleido.lexer import ALNUM, WHITESPACE


DEFAULT_PRECEDENCE: dict[str, int] = {
    "<": 10,
    "+": 20,
    "-": 20,
    "*": 40,
}

# Precedence reported for anything that is not a binary operator
NO_PRECEDENCE = -1

# Punctuation the grammar already uses for calls, grouping and separators
RESERVED_CHARS = frozenset("(),;")


class PrecedenceTable(Mapping):
    """
    Immutable mapping from operator character to precedence.

    The table is validated and copied on construction and cannot be
    changed afterwards; use with_overrides() to derive a new table.

    Usage:
        table = PrecedenceTable({"<": 10, "+": 20, "*": 40})
        table.lookup("+")   # 20
        table.lookup("@")   # -1
    """

    def __init__(self, mapping: Optional[Mapping] = None):
        if mapping is None:
            mapping = DEFAULT_PRECEDENCE
        self._table: dict[str, int] = {}
        for op, precedence in mapping.items():
            self._validate(op, precedence)
            self._table[op] = precedence

    @staticmethod
    def _validate(op, precedence) -> None:
        if not isinstance(op, str) or len(op) != 1:
            raise ConfigurationError(f"operator must be a single character, got {op!r}")
        if op in ALNUM or op in WHITESPACE or op in ".#":
            raise ConfigurationError(
                f"'{op}' cannot be an operator: the lexer never emits it as a character token"
            )
        if op in RESERVED_CHARS:
            raise ConfigurationError(f"'{op}' is reserved punctuation and cannot be an operator")
        if isinstance(precedence, bool) or not isinstance(precedence, int):
            raise ConfigurationError(
                f"precedence for '{op}' must be an integer, got {precedence!r}"
            )

    # Mapping interface

    def __getitem__(self, op: str) -> int:
        return self._table[op]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"PrecedenceTable({self._table!r})"

    def lookup(self, op: Optional[str]) -> int:
        """Return the precedence of an operator character, or -1."""
        if op is None:
            return NO_PRECEDENCE
        precedence = self._table.get(op, NO_PRECEDENCE)
        if precedence <= 0:
            return NO_PRECEDENCE
        return precedence

    def is_operator(self, op: Optional[str]) -> bool:
        return self.lookup(op) > 0

    def with_overrides(self, overrides: Mapping) -> "PrecedenceTable":
        """Return a new table with entries added or replaced."""
        merged = dict(self._table)
        merged.update(overrides)
        return PrecedenceTable(merged)

    def to_spec(self) -> str:
        """Render the table in the OP:PREC textual form."""
        return ",".join(f"{op}:{precedence}" for op, precedence in self._table.items())

    @classmethod
    def parse_spec(cls, text: str) -> dict[str, int]:
        """
        Parse the OP:PREC textual form into a plain mapping.

        Args:
            text: Comma-separated OP:PREC pairs (empty items are ignored)

        Returns:
            Mapping from operator to precedence (not yet validated)

        Raises:
            ConfigurationError: If an item has no ':' or a non-integer value
        """
        result: dict[str, int] = {}
        for item in text.split(","):
            item = item.strip()
            if not item:
                continue
            op, sep, value = item.rpartition(":")
            if not sep or not op:
                raise ConfigurationError(f"expected OP:PREC, got '{item}'")
            try:
                result[op] = int(value)
            except ValueError:
                raise ConfigurationError(
                    f"precedence for '{op}' must be an integer, got '{value}'"
                ) from None
        return result


DEFAULT_TABLE = PrecedenceTable()
