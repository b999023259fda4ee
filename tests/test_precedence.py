# =============================================================================
# test_precedence.py - Operator Precedence Table Tests
# =============================================================================
# Tests for the binary operator precedence table: defaults, lookup rules,
# validation of operator characters, immutability and the OP:PREC text form
# used by the command line and the KALEIDO_PRECEDENCE variable.
# =============================================================================

import pytest
from kaleido.errors import ConfigurationError
from kaleido.precedence import (
    DEFAULT_PRECEDENCE,
    DEFAULT_TABLE,
    NO_PRECEDENCE,
    PrecedenceTable,
)


class TestDefaults:
    """Tests for the standard table."""

    def test_default_entries(self):
        """The standard operators and their precedences."""
        assert dict(DEFAULT_TABLE) == {"<": 10, "+": 20, "-": 20, "*": 40}
        assert dict(PrecedenceTable()) == DEFAULT_PRECEDENCE

    def test_lookup(self):
        assert DEFAULT_TABLE.lookup("<") == 10
        assert DEFAULT_TABLE.lookup("+") == 20
        assert DEFAULT_TABLE.lookup("-") == 20
        assert DEFAULT_TABLE.lookup("*") == 40

    def test_lookup_unknown(self):
        """Characters not in the table are not operators."""
        assert DEFAULT_TABLE.lookup("/") == NO_PRECEDENCE
        assert DEFAULT_TABLE.lookup(None) == NO_PRECEDENCE
        assert not DEFAULT_TABLE.is_operator("/")
        assert DEFAULT_TABLE.is_operator("*")


class TestLookupRules:
    """Tests for non-positive entries."""

    def test_zero_and_negative_are_not_operators(self):
        """Entries with precedence <= 0 behave like missing ones."""
        table = PrecedenceTable({"+": 0, "-": -5, "*": 40})
        assert table.lookup("+") == NO_PRECEDENCE
        assert table.lookup("-") == NO_PRECEDENCE
        assert table.lookup("*") == 40
        # The entries are still stored
        assert "+" in table
        assert table["-"] == -5


class TestValidation:
    """Tests for rejected table entries."""

    @pytest.mark.parametrize("op", ["a", "Z", "7", " ", "\n", ".", "#"])
    def test_characters_the_lexer_never_emits(self, op):
        """Letters, digits, whitespace, '.' and '#' never reach the parser as CHAR tokens."""
        with pytest.raises(ConfigurationError):
            PrecedenceTable({op: 10})

    @pytest.mark.parametrize("op", ["(", ")", ",", ";"])
    def test_reserved_punctuation(self, op):
        """Grammar punctuation cannot be an operator."""
        with pytest.raises(ConfigurationError) as exc_info:
            PrecedenceTable({op: 10})
        assert "reserved" in str(exc_info.value)

    @pytest.mark.parametrize("op", ["", "<=", 1])
    def test_operator_must_be_one_character(self, op):
        with pytest.raises(ConfigurationError):
            PrecedenceTable({op: 10})

    @pytest.mark.parametrize("value", ["10", 1.5, True, None])
    def test_precedence_must_be_integer(self, value):
        with pytest.raises(ConfigurationError):
            PrecedenceTable({"/": value})

    def test_non_ascii_operator_allowed(self):
        """Any other character can be an operator."""
        table = PrecedenceTable({"×": 40})
        assert table.lookup("×") == 40


class TestImmutability:
    """Tests for read-only tables."""

    def test_no_item_assignment(self):
        table = PrecedenceTable()
        with pytest.raises(TypeError):
            table["/"] = 40

    def test_source_mapping_is_copied(self):
        """Changing the mapping after construction does not affect the table."""
        source = {"+": 20}
        table = PrecedenceTable(source)
        source["*"] = 40
        assert "*" not in table

    def test_with_overrides(self):
        """with_overrides returns a new table and leaves the original alone."""
        table = DEFAULT_TABLE.with_overrides({"/": 40, "<": 5})
        assert table.lookup("/") == 40
        assert table.lookup("<") == 5
        assert table.lookup("+") == 20
        assert DEFAULT_TABLE.lookup("/") == NO_PRECEDENCE
        assert DEFAULT_TABLE.lookup("<") == 10

    def test_with_overrides_validates(self):
        with pytest.raises(ConfigurationError):
            DEFAULT_TABLE.with_overrides({"(": 1})


class TestSpecText:
    """Tests for the OP:PREC text form."""

    def test_parse_spec(self):
        assert PrecedenceTable.parse_spec("/:40, %:40") == {"/": 40, "%": 40}

    def test_parse_spec_colon_operator(self):
        """The last ':' separates the value, so ':' itself can be an operator."""
        assert PrecedenceTable.parse_spec("::5") == {":": 5}

    def test_parse_spec_ignores_empty_items(self):
        assert PrecedenceTable.parse_spec("") == {}
        assert PrecedenceTable.parse_spec("/:40,,") == {"/": 40}

    def test_parse_spec_negative_value(self):
        assert PrecedenceTable.parse_spec("+:-1") == {"+": -1}

    @pytest.mark.parametrize("text", ["/", "/40", ":40", "/:x", "/:"])
    def test_parse_spec_errors(self, text):
        with pytest.raises(ConfigurationError):
            PrecedenceTable.parse_spec(text)

    def test_to_spec(self):
        """to_spec renders a form parse_spec reads back."""
        text = DEFAULT_TABLE.to_spec()
        assert text == "<:10,+:20,-:20,*:40"
        assert PrecedenceTable(PrecedenceTable.parse_spec(text)) == DEFAULT_TABLE
