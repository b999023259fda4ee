"""
Kaleidoscope Front-End Driver
=============================

This module provides the top-level loop that sits on the collaborator side
of the parser: it asks the parser for one entity at a time, hands accepted
entities to a handler, and resynchronizes after failures.

    Source → Lexer → Parser.parse_next_entity() → Driver → EntityHandler

Recovery Policy
---------------
After a failed entity the driver discards exactly one token and asks for
a new entity from there. This is a best-effort heuristic: on badly
malformed input it can produce a cascade of follow-on errors, which is
accepted behavior. The max_errors option bounds the cascade.

Usage
-----
Programmatic:
    >>> from kaleido.driver import parse_program
    >>> report = parse_program("def add(a b) a+b; add(1, 2)")
    >>> [type(e).__name__ for e in report.entities]
    ['FunctionDef', 'FunctionDef']

Interactive (the classic "ready>" loop):
    >>> import sys
    >>> from kaleido.driver import repl
    >>> repl(sys.stdin, sys.stdout)  # doctest: +SKIP

Configuration
-------------
FrontendOptions can be built directly or from the environment:

- KALEIDO_PRECEDENCE   OP:PREC pairs merged over the default table
- KALEIDO_CHECK_ARITY  1/true/yes/on enables call-site arity checking
- KALEIDO_MAX_ERRORS   maximum diagnostics before stopping
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, TextIO, Union
import logging
import os

from kaleido.ast import FunctionDef, Prototype
from kaleido.checker import ArityChecker
from kaleido.errors import (
    ConfigurationError,
    ErrorCollector,
    KaleidoSourceError,
    KSemanticError,
    TooManyErrors,
)
from kaleido.lexer import Lexer
from kaleido.parser import EntityKind, Parser
from kaleido.precedence import DEFAULT_TABLE, PrecedenceTable
from kaleido.source import CharSource, StreamSource

logger = logging.getLogger(__name__)

Entity = Union[FunctionDef, Prototype]

_TRUE_VALUES = ("1", "true", "yes", "on")


# =============================================================================
# Options
# =============================================================================

@dataclass
class FrontendOptions:
    """
    Front-end configuration options.

    Attributes:
        precedence: Operator precedence table, or a mapping to build one
                    from. None means the default table.
        check_arity: Check call sites against known prototypes
        max_errors: Stop after this many diagnostics
        prompt: Prompt written before each entity in interactive mode
    """
    precedence: Union[PrecedenceTable, Mapping[str, int], None] = None
    check_arity: bool = False
    max_errors: int = 100
    prompt: str = "ready> "

    def __post_init__(self):
        if self.precedence is None:
            self.precedence = DEFAULT_TABLE
        elif not isinstance(self.precedence, PrecedenceTable):
            self.precedence = PrecedenceTable(self.precedence)
        if self.max_errors < 1:
            raise ConfigurationError(f"max_errors must be at least 1, got {self.max_errors}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "FrontendOptions":
        """
        Build options from KALEIDO_* environment variables.

        Keyword overrides take priority over the environment.

        Raises:
            ConfigurationError: If a variable has an invalid value
        """
        if environ is None:
            environ = os.environ

        values: dict = {}

        spec = environ.get("KALEIDO_PRECEDENCE")
        if spec:
            values["precedence"] = DEFAULT_TABLE.with_overrides(PrecedenceTable.parse_spec(spec))

        check_arity = environ.get("KALEIDO_CHECK_ARITY")
        if check_arity is not None:
            values["check_arity"] = check_arity.strip().lower() in _TRUE_VALUES

        max_errors = environ.get("KALEIDO_MAX_ERRORS")
        if max_errors:
            try:
                values["max_errors"] = int(max_errors)
            except ValueError:
                raise ConfigurationError(
                    f"KALEIDO_MAX_ERRORS must be an integer, got '{max_errors}'"
                ) from None

        values.update(overrides)
        return cls(**values)


# =============================================================================
# Entity Handlers
# =============================================================================

class EntityHandler:
    """
    Receives every accepted top-level entity.

    Subclasses override the methods for the entity kinds they process
    (lowering to IR, printing, evaluation, ...).
    """

    def handle_definition(self, function: FunctionDef) -> None:
        pass

    def handle_extern(self, proto: Prototype) -> None:
        pass

    def handle_top_level_expression(self, function: FunctionDef) -> None:
        pass


class CollectingHandler(EntityHandler):
    """Keeps every accepted entity in input order."""

    def __init__(self):
        self.entities: list[Entity] = []

    def handle_definition(self, function: FunctionDef) -> None:
        self.entities.append(function)

    def handle_extern(self, proto: Prototype) -> None:
        self.entities.append(proto)

    def handle_top_level_expression(self, function: FunctionDef) -> None:
        self.entities.append(function)


class EchoHandler(CollectingHandler):
    """Collects entities and announces each one on an output stream."""

    def __init__(self, output: TextIO):
        super().__init__()
        self.output = output

    def _say(self, text: str) -> None:
        self.output.write(f"{text}\n")
        self.output.flush()

    def handle_definition(self, function: FunctionDef) -> None:
        super().handle_definition(function)
        self._say("Parsed a function definition.")

    def handle_extern(self, proto: Prototype) -> None:
        super().handle_extern(proto)
        self._say("Parsed an extern")

    def handle_top_level_expression(self, function: FunctionDef) -> None:
        super().handle_top_level_expression(function)
        self._say("Parsed a top-level expr")


# =============================================================================
# Driver
# =============================================================================

@dataclass
class DriverReport:
    """
    Outcome of a driver run.

    Attributes:
        entities: Accepted entities in input order (when the handler
                  collects them)
        errors: Diagnostics in the order they occurred
        warnings: Lexer warnings (malformed numbers)
        stopped_early: True when max_errors ended the run
    """
    entities: list[Entity] = field(default_factory=list)
    errors: list[KaleidoSourceError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stopped_early: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors

    def report(self) -> str:
        """Format diagnostics for display."""
        collector = ErrorCollector()
        collector.errors.extend(self.errors)
        collector.warnings.extend(self.warnings)
        return collector.report()


class Driver:
    """
    Drives the parser over a whole input.

    Example:
        driver = Driver("def f(x) x*x; f(2)", FrontendOptions(check_arity=True))
        report = driver.run()
        if not report.ok:
            print(report.report())

    Attributes:
        options: Front-end configuration
        handler: Receiver of accepted entities
        parser: The parser being driven
    """

    def __init__(
        self,
        source: Union[str, CharSource],
        options: Optional[FrontendOptions] = None,
        handler: Optional[EntityHandler] = None,
        filename: str = "<input>",
        output: Optional[TextIO] = None,
    ):
        """
        Initialize the driver.

        Args:
            source: Source text or character source
            options: Configuration (defaults if None)
            handler: Entity receiver (a CollectingHandler if None)
            filename: Source name for diagnostics
            output: Stream for prompts and "Error:" lines in interactive
                    mode; None for batch mode
        """
        self.options = options or FrontendOptions()
        self.handler = handler if handler is not None else CollectingHandler()
        self.parser = Parser(Lexer(source, filename), self.options.precedence)
        self.output = output
        self.checker = ArityChecker() if self.options.check_arity else None
        self._errors = ErrorCollector(self.options.max_errors)

    def _prompt(self) -> None:
        if self.output is not None and self.options.prompt:
            self.output.write(self.options.prompt)
            self.output.flush()

    def _record(self, error: KaleidoSourceError) -> None:
        self._errors.add(error)
        logger.debug(f"{error.location}: {error.message}")
        if self.output is not None:
            self.output.write(f"Error: {error.message}\n")
            self.output.flush()

    def _dispatch(self, kind: EntityKind, node: Entity) -> None:
        if kind == EntityKind.DEFINITION:
            self.handler.handle_definition(node)
        elif kind == EntityKind.EXTERN:
            self.handler.handle_extern(node)
        else:
            self.handler.handle_top_level_expression(node)

    def run(self) -> DriverReport:
        """
        Parse entities until end of input (or the error limit).

        Returns:
            DriverReport with the collected entities and diagnostics
        """
        self._errors.clear()
        stopped_early = False

        while True:
            self._prompt()
            result = self.parser.parse_next_entity()

            if result.kind == EntityKind.END:
                break

            if result.kind == EntityKind.SKIP:
                continue

            if result.kind == EntityKind.ERROR:
                self._record(result.error)
                # Skip token for error recovery
                skipped = self.parser.get_next_token()
                logger.debug(f"resynchronizing at {skipped!r}")
            else:
                try:
                    if self.checker is not None:
                        self.checker.check(result.node)
                except KSemanticError as e:
                    self._record(e)
                else:
                    self._dispatch(result.kind, result.node)

            if self._errors.should_stop():
                logger.warning(f"stopping after {self._errors.error_count()} errors")
                stopped_early = True
                break

        if self.output is not None:
            self.output.write("\n")
            self.output.flush()

        errors = list(self._errors.errors)
        if stopped_early:
            errors.append(TooManyErrors(f"Too many errors ({self.options.max_errors}), stopping"))

        entities = list(getattr(self.handler, "entities", []))
        return DriverReport(
            entities=entities,
            errors=errors,
            warnings=list(self.parser.lexer.warnings),
            stopped_early=stopped_early,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_program(
    source: Union[str, CharSource],
    filename: str = "<input>",
    options: Optional[FrontendOptions] = None,
) -> DriverReport:
    """
    Parse a whole program, collecting entities and diagnostics.

    Never raises for malformed input; check report.ok.
    """
    return Driver(source, options, filename=filename).run()


def repl(
    input_stream: TextIO,
    output_stream: TextIO,
    options: Optional[FrontendOptions] = None,
    filename: str = "<stdin>",
) -> DriverReport:
    """
    Run the interactive loop.

    Writes the prompt before each entity, announces each accepted entity
    and reports failures as "Error: <message>" on output_stream.
    """
    handler = EchoHandler(output_stream)
    driver = Driver(
        StreamSource(input_stream),
        options,
        handler=handler,
        filename=filename,
        output=output_stream,
    )
    return driver.run()
