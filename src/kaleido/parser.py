"""
Kaleidoscope Recursive Descent Parser
=====================================

This module implements the parser for the Kaleidoscope language. It pulls
tokens from the lexer one at a time (a single token of lookahead, the
"current" token) and builds the AST with recursive descent for primary
expressions and precedence climbing for binary operator chains.

Grammar (Simplified EBNF)
-------------------------
top_level       ::= definition | external | expression | ';'
definition      ::= 'def' prototype expression
external        ::= 'extern' prototype
prototype       ::= IDENTIFIER '(' IDENTIFIER* ')'

expression      ::= primary (BINOP primary)*
primary         ::= NUMBER | identifier_expr | paren_expr
identifier_expr ::= IDENTIFIER
                  | IDENTIFIER '(' (expression (',' expression)*)? ')'
paren_expr      ::= '(' expression ')'

Binary operators and their precedences come from a PrecedenceTable
(default: '<' 10, '+' '-' 20, '*' 40). The expression rule is parsed by
precedence climbing rather than one rule per level.

Errors
------
Every parse_* method raises a KSyntaxError subclass as soon as the input
stops matching the grammar. Nothing is caught or retried inside the
parser, so a failed sub-parse never leaves a partially built node behind.
Expressions nested deeper than max_depth (MAX_NESTING_DEPTH by default)
fail with NestingTooDeepError instead of exhausting the interpreter stack.
The current token is left on the offending token.

parse_next_entity() is the boundary for the driver: it never raises for
malformed input and instead returns a ParseResult carrying the error.

Example Usage
-------------
>>> from kaleido.parser import Parser
>>> parser = Parser.from_source("def foo(a b) a+b")
>>> result = parser.parse_next_entity()
>>> result.kind, result.node.proto.params
(<EntityKind.DEFINITION: 3>, ['a', 'b'])
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Mapping, Optional, Union
import logging

from kaleido.ast import (
    BinaryOp,
    Call,
    Expr,
    FunctionDef,
    NumberLiteral,
    Prototype,
    VariableRef,
    make_anonymous_function,
)
from kaleido.errors import (
    KSyntaxError,
    MissingTokenError,
    NestingTooDeepError,
    UnexpectedTokenError,
)
from kaleido.lexer import Lexer, Token, TokenKind
from kaleido.precedence import DEFAULT_TABLE, PrecedenceTable
from kaleido.source import CharSource

logger = logging.getLogger(__name__)

# Deepest nesting of parentheses, calls and operands in one expression
MAX_NESTING_DEPTH = 128


# =============================================================================
# Entity-Level Results
# =============================================================================

class EntityKind(Enum):
    """Outcome of one entity-level parse call."""
    END = auto()             # End of input, no more entities
    SKIP = auto()            # A stray ';' was consumed; ask again
    DEFINITION = auto()      # 'def' function definition
    EXTERN = auto()          # 'extern' prototype
    TOP_LEVEL_EXPR = auto()  # Bare expression in an anonymous FunctionDef
    ERROR = auto()           # Parse failure; see ParseResult.error


@dataclass
class ParseResult:
    """
    Result of Parser.parse_next_entity().

    Attributes:
        kind: What was parsed (or END / SKIP / ERROR)
        node: FunctionDef for definitions and top-level expressions,
              Prototype for externs, None otherwise
        error: The syntax error when kind is ERROR
    """
    kind: EntityKind
    node: Union[FunctionDef, Prototype, None] = None
    error: Optional[KSyntaxError] = None

    @property
    def ok(self) -> bool:
        """True unless the entity failed to parse."""
        return self.kind != EntityKind.ERROR

    @property
    def message(self) -> Optional[str]:
        """The bare diagnostic text, without location or context."""
        if self.error is None:
            return None
        return self.error.message


PrecedenceSpec = Union[PrecedenceTable, Mapping[str, int], None]


def _as_table(precedence: PrecedenceSpec) -> PrecedenceTable:
    if precedence is None:
        return DEFAULT_TABLE
    if isinstance(precedence, PrecedenceTable):
        return precedence
    return PrecedenceTable(precedence)


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """
    Recursive descent parser for Kaleidoscope.

    The parser owns a single cursor, `current`, refreshed by advancing the
    lexer. It is LL(1): no method looks further ahead than the current
    token and nothing is ever pushed back.

    Attributes:
        lexer: Token source
        precedence: Binary operator precedence table (read-only)
    """

    def __init__(
        self,
        lexer: Lexer,
        precedence: PrecedenceSpec = None,
        max_depth: int = MAX_NESTING_DEPTH,
    ):
        """
        Initialize the parser.

        Args:
            lexer: The lexer to pull tokens from
            precedence: Operator precedence table or mapping (default table
                        when None)
            max_depth: Deepest allowed nesting of primary expressions
        """
        self.lexer = lexer
        self.precedence = _as_table(precedence)
        self.max_depth = max_depth
        self._current: Optional[Token] = None
        self._depth = 0

    @classmethod
    def from_source(
        cls,
        source: Union[str, CharSource],
        filename: str = "<input>",
        precedence: PrecedenceSpec = None,
    ) -> "Parser":
        """Create a parser over a string or CharSource."""
        return cls(Lexer(source, filename), precedence)

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    @property
    def current(self) -> Token:
        """The current token, reading the first one on demand."""
        if self._current is None:
            self._current = self.lexer.next_token()
        return self._current

    def get_next_token(self) -> Token:
        """Advance the cursor and return the new current token."""
        self._current = self.lexer.next_token()
        return self._current

    def _syntax_error(self, cls, message: str, **kwargs) -> KSyntaxError:
        """Build a syntax error located at the current token."""
        token = self.current
        return cls(
            message,
            found=token.describe(),
            location=token.location,
            source_line=self.lexer.source_line(token.line),
            **kwargs,
        )

    # =========================================================================
    # Primary Expressions
    # =========================================================================

    def parse_number_expr(self) -> NumberLiteral:
        """numberexpr ::= NUMBER"""
        token = self.current
        result = NumberLiteral(token.value, location=token.location)
        self.get_next_token()
        return result

    def parse_paren_expr(self) -> Expr:
        """parenexpr ::= '(' expression ')'"""
        self.get_next_token()  # eat (
        expr = self.parse_expression()

        if not self.current.is_char(")"):
            raise self._syntax_error(MissingTokenError, "expected ')'", expected="')'")
        self.get_next_token()  # eat )
        return expr

    def parse_identifier_expr(self) -> Union[VariableRef, Call]:
        """
        identifierexpr ::= IDENTIFIER
                         | IDENTIFIER '(' (expression (',' expression)*)? ')'
        """
        token = self.current
        name = token.value
        self.get_next_token()  # eat identifier

        # Simple variable reference
        if not self.current.is_char("("):
            return VariableRef(name, location=token.location)

        # Call
        self.get_next_token()  # eat (
        args: list[Expr] = []
        if not self.current.is_char(")"):
            while True:
                # Input ended inside the argument list
                if self.current.kind == TokenKind.EOF:
                    raise self._syntax_error(
                        MissingTokenError,
                        "Expected ')' or ',' in argument list",
                        expected="')' or ','",
                    )

                args.append(self.parse_expression())

                if self.current.is_char(")"):
                    break

                if not self.current.is_char(","):
                    raise self._syntax_error(
                        MissingTokenError,
                        "Expected ')' or ',' in argument list",
                        expected="')' or ','",
                    )
                self.get_next_token()  # eat ,

        self.get_next_token()  # eat )
        return Call(name, args, location=token.location)

    def parse_primary(self) -> Expr:
        """
        primary ::= identifierexpr | numberexpr | parenexpr
        """
        if self._depth >= self.max_depth:
            raise self._syntax_error(
                NestingTooDeepError,
                "expression nested too deeply",
                limit=self.max_depth,
            )

        self._depth += 1
        try:
            return self._parse_primary_form()
        finally:
            self._depth -= 1

    def _parse_primary_form(self) -> Expr:
        token = self.current

        if token.kind == TokenKind.IDENTIFIER:
            return self.parse_identifier_expr()

        if token.kind == TokenKind.NUMBER:
            return self.parse_number_expr()

        if token.is_char("("):
            return self.parse_paren_expr()

        raise self._syntax_error(
            UnexpectedTokenError,
            "unknown token when expecting an expression",
            expected="expression",
        )

    # =========================================================================
    # Binary Expressions (Precedence Climbing)
    # =========================================================================

    def get_token_precedence(self) -> int:
        """
        Precedence of the current token as a binary operator.

        Returns -1 unless the current token is a character registered in
        the precedence table with a positive value.
        """
        return self.precedence.lookup(self.current.char)

    def parse_expression(self) -> Expr:
        """expression ::= primary binoprhs"""
        lhs = self.parse_primary()
        return self.parse_bin_op_rhs(0, lhs)

    def parse_bin_op_rhs(self, expr_precedence: int, lhs: Expr) -> Expr:
        """
        binoprhs ::= (BINOP primary)*

        Folds operators binding at least as tightly as expr_precedence
        into lhs and returns the result.
        """
        while True:
            token_precedence = self.get_token_precedence()

            # Operator binds less tightly than required (or is no operator)
            if token_precedence < expr_precedence:
                return lhs

            op_token = self.current
            self.get_next_token()  # eat binop

            rhs = self.parse_primary()

            # A tighter operator after rhs takes rhs as its lhs first
            next_precedence = self.get_token_precedence()
            if token_precedence < next_precedence:
                rhs = self.parse_bin_op_rhs(token_precedence + 1, rhs)

            lhs = BinaryOp(op_token.value, lhs, rhs, location=op_token.location)

    # =========================================================================
    # Prototypes and Top-Level Forms
    # =========================================================================

    def parse_prototype(self) -> Prototype:
        """prototype ::= IDENTIFIER '(' IDENTIFIER* ')'"""
        token = self.current
        if token.kind != TokenKind.IDENTIFIER:
            raise self._syntax_error(
                UnexpectedTokenError,
                "Expected function name in prototype",
                expected="function name",
            )

        name = token.value
        self.get_next_token()

        if not self.current.is_char("("):
            raise self._syntax_error(
                MissingTokenError, "Expected '(' in prototype", expected="'('"
            )

        params: list[str] = []
        while self.get_next_token().kind == TokenKind.IDENTIFIER:
            params.append(self.current.value)

        if not self.current.is_char(")"):
            raise self._syntax_error(
                MissingTokenError, "Expected ')' in prototype", expected="')'"
            )
        self.get_next_token()  # eat )

        return Prototype(name, params, location=token.location)

    def parse_definition(self) -> FunctionDef:
        """definition ::= 'def' prototype expression"""
        def_token = self.current
        self.get_next_token()  # eat def
        proto = self.parse_prototype()
        body = self.parse_expression()
        return FunctionDef(proto, body, location=def_token.location)

    def parse_extern(self) -> Prototype:
        """external ::= 'extern' prototype"""
        self.get_next_token()  # eat extern
        return self.parse_prototype()

    def parse_top_level_expr(self) -> FunctionDef:
        """toplevelexpr ::= expression"""
        expr = self.parse_expression()
        return make_anonymous_function(expr)

    # =========================================================================
    # Driver-Facing Entity Dispatch
    # =========================================================================

    def parse_next_entity(self) -> ParseResult:
        """
        Parse one top-level entity.

        Never raises for malformed input. On ERROR the current token is
        the one the failing rule stopped at; the caller decides how to
        resynchronize.
        """
        token = self.current

        if token.kind == TokenKind.EOF:
            return ParseResult(EntityKind.END)

        # Ignore top-level semicolons
        if token.is_char(";"):
            self.get_next_token()
            return ParseResult(EntityKind.SKIP)

        try:
            if token.kind == TokenKind.DEF:
                kind, node = EntityKind.DEFINITION, self.parse_definition()
            elif token.kind == TokenKind.EXTERN:
                kind, node = EntityKind.EXTERN, self.parse_extern()
            else:
                kind, node = EntityKind.TOP_LEVEL_EXPR, self.parse_top_level_expr()
        except KSyntaxError as e:
            logger.debug(f"{e.location}: {e.message}")
            return ParseResult(EntityKind.ERROR, error=e)
        except RecursionError:
            # Operator chains under a large max_depth can still exhaust the stack
            e = self._syntax_error(
                NestingTooDeepError,
                "expression nested too deeply",
                limit=self.max_depth,
            )
            logger.debug(f"{e.location}: {e.message}")
            return ParseResult(EntityKind.ERROR, error=e)

        logger.debug(f"{token.location}: parsed {kind.name.lower()}")
        return ParseResult(kind, node)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_expression(
    source: str,
    precedence: PrecedenceSpec = None,
    filename: str = "<input>",
) -> Expr:
    """
    Parse a single expression from a string.

    The whole input must be one expression.

    Raises:
        KSyntaxError: If the text is not exactly one expression
    """
    parser = Parser.from_source(source, filename, precedence)
    expr = parser.parse_expression()
    if parser.current.kind != TokenKind.EOF:
        raise parser._syntax_error(
            UnexpectedTokenError,
            "unexpected input after expression",
            expected="end of input",
        )
    return expr
