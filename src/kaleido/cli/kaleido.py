"""
kaleido - Kaleidoscope Front-End Command-Line Interface
=======================================================

This module implements the command-line interface for the Kaleidoscope
front end.

Usage Examples
--------------
Parse a file and summarize its entities:
    $ kaleido parse program.ks

Dump the AST:
    $ kaleido parse --ast program.ks

Read from stdin, with call-site arity checking:
    $ echo "extern sin(x); sin(1, 2)" | kaleido --check-arity parse -

Add an operator:
    $ kaleido --op /:40 parse program.ks

Interactive mode:
    $ kaleido repl
    ready> def f(x) x*2
    Parsed a function definition.

Configuration
-------------
Options are merged over the KALEIDO_PRECEDENCE, KALEIDO_CHECK_ARITY and
KALEIDO_MAX_ERRORS environment variables; command-line values win.

Exit Codes
----------
0 - Success
1 - Parse errors (or an unformattable AST)
2 - Invalid arguments or configuration
3 - Internal error
"""

import logging
from typing import Optional, TextIO

import click

from kaleido import __version__
from kaleido.ast import ASTPrinter, FunctionDef, Prototype
from kaleido.cli.errors import ExitCode, handle_cli_exception
from kaleido.driver import DriverReport, FrontendOptions, parse_program, repl
from kaleido.formatter import format_program
from kaleido.lexer import Lexer
from kaleido.precedence import PrecedenceTable

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores the global options given before the subcommand.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.ops: tuple[str, ...] = ()
        self.check_arity: bool = False
        self.max_errors: Optional[int] = None

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.INFO
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )

    def options(self) -> FrontendOptions:
        """
        Build front-end options from the environment and the command line.

        Raises:
            ConfigurationError: If an --op value or variable is invalid
        """
        options = FrontendOptions.from_env()
        if self.ops:
            overrides: dict[str, int] = {}
            for spec in self.ops:
                overrides.update(PrecedenceTable.parse_spec(spec))
            options.precedence = options.precedence.with_overrides(overrides)
        if self.check_arity:
            options.check_arity = True
        if self.max_errors is not None:
            options.max_errors = self.max_errors
        return options


pass_context = click.make_pass_decorator(Context, ensure=True)


def describe_entity(entity) -> str:
    """One-line summary of a top-level entity."""
    if isinstance(entity, Prototype):
        return f"extern {entity.name}({' '.join(entity.params)})"
    if isinstance(entity, FunctionDef) and entity.is_anonymous:
        return "top-level expression"
    return f"def {entity.proto.name}({' '.join(entity.proto.params)})"


def _parse_input(ctx: Context, source: TextIO) -> DriverReport:
    options = ctx.options()
    logger.debug(f"precedence table: {options.precedence.to_spec()}")
    return parse_program(source.read(), source.name, options)


def _report_diagnostics(report: DriverReport) -> None:
    """Print diagnostics to stderr and exit with BUILD_ERROR if any."""
    if not report.ok:
        click.echo(report.report(), err=True)
        raise SystemExit(ExitCode.BUILD_ERROR)
    for warning in report.warnings:
        click.echo(warning, err=True)


# =============================================================================
# CLI Definition
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging)",
)
@click.option(
    "--op",
    "ops",
    multiple=True,
    metavar="OP:PREC",
    help="Register or override a binary operator, e.g. --op /:40 (can be repeated)",
)
@click.option(
    "--check-arity",
    is_flag=True,
    help="Check call sites against known prototypes",
)
@click.option(
    "--max-errors",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many errors (default: 100)",
)
@click.version_option(version=__version__, prog_name="kaleido")
@pass_context
def main(
    ctx: Context,
    verbose: bool,
    ops: tuple[str, ...],
    check_arity: bool,
    max_errors: Optional[int],
) -> None:
    """
    Kaleidoscope front end: lexer, parser and AST tools.

    \b
    Examples:
        kaleido parse program.ks         # Summarize entities
        kaleido parse --ast program.ks   # Dump the AST
        kaleido tokens program.ks        # Dump tokens
        kaleido fmt program.ks           # Canonical source
        kaleido repl                     # Interactive loop
    """
    ctx.verbose = verbose
    ctx.ops = ops
    ctx.check_arity = check_arity
    ctx.max_errors = max_errors
    ctx.setup_logging()


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--ast", "dump_ast", is_flag=True, help="Print the AST of each entity")
@pass_context
def parse(ctx: Context, source: TextIO, dump_ast: bool) -> None:
    """
    Parse SOURCE and list its top-level entities.

    SOURCE is a Kaleidoscope file, or - for stdin.
    """
    try:
        report = _parse_input(ctx, source)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    printer = ASTPrinter()
    for entity in report.entities:
        if dump_ast:
            click.echo(printer.print(entity))
        else:
            click.echo(describe_entity(entity))

    _report_diagnostics(report)

    if ctx.verbose:
        click.echo(f"Parsed {len(report.entities)} entities from {source.name}")


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@pass_context
def tokens(ctx: Context, source: TextIO) -> None:
    """
    Print the token stream of SOURCE.

    SOURCE is a Kaleidoscope file, or - for stdin.
    """
    try:
        lexer = Lexer(source.read(), source.name)
        for token in lexer.tokenize():
            click.echo(repr(token))
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    for warning in lexer.warnings:
        click.echo(warning, err=True)


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@pass_context
def fmt(ctx: Context, source: TextIO) -> None:
    """
    Print SOURCE in canonical form.

    Binary operations are fully parenthesized; one entity per line.
    """
    try:
        report = _parse_input(ctx, source)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    _report_diagnostics(report)

    try:
        click.echo(format_program(report.entities), nl=False)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


@main.command(name="repl")
@pass_context
def repl_command(ctx: Context) -> None:
    """
    Interactive loop: parse entities from stdin as they are typed.
    """
    try:
        options = ctx.options()
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    stdin = click.get_text_stream("stdin")
    stdout = click.get_text_stream("stdout")
    report = repl(stdin, stdout, options)

    if ctx.verbose:
        click.echo(f"{len(report.entities)} entities, {len(report.errors)} errors")


if __name__ == "__main__":
    main()
