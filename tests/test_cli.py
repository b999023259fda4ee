# =============================================================================
# test_cli.py - Command-Line Interface Tests
# =============================================================================
# Tests for the kaleido command: parse, tokens, fmt and repl, the global
# --op / --check-arity / --max-errors options and exit codes.
# =============================================================================

import pytest


@pytest.fixture
def program(tmp_path):
    """A small valid program on disk."""
    path = tmp_path / "program.ks"
    path.write_text("extern sin(x);\ndef f(a b) a*b+1;\nf(2, 3)\n")
    return path


class TestParseCommand:
    """Tests for 'kaleido parse'."""

    def test_help(self):
        """Test CLI help output."""
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Kaleidoscope front end" in result.output

    def test_version(self):
        """Test CLI version output."""
        from click.testing import CliRunner
        from kaleido import __version__
        from kaleido.cli.kaleido import main

        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_parse_summary(self, program):
        """Each entity is listed on its own line."""
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        runner = CliRunner()
        result = runner.invoke(main, ["parse", str(program)])

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "extern sin(x)",
            "def f(a b)",
            "top-level expression",
        ]

    def test_parse_ast(self, program):
        """--ast prints the tree of each entity."""
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        runner = CliRunner()
        result = runner.invoke(main, ["parse", "--ast", str(program)])

        assert result.exit_code == 0
        assert "Function: f(a b)" in result.output
        assert "BinaryOp: +" in result.output
        assert "Call: f (2 args)" in result.output

    def test_parse_stdin(self):
        """'-' reads the program from stdin."""
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        runner = CliRunner()
        result = runner.invoke(main, ["parse", "-"], input="def g() 1\n")

        assert result.exit_code == 0
        assert "def g()" in result.output

    def test_parse_errors(self, tmp_path):
        """Syntax errors give exit code 1 and a located diagnostic."""
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        source = tmp_path / "bad.ks"
        source.write_text("def (x) x\n")

        runner = CliRunner()
        result = runner.invoke(main, ["parse", str(source)])

        assert result.exit_code == 1
        assert "bad.ks:1:5: error: Expected function name in prototype" in result.output

    def test_parse_deep_nesting(self, tmp_path):
        """Over-deep input is a parse error (exit 1), not an internal error."""
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        source = tmp_path / "deep.ks"
        source.write_text("(" * 400 + "1" + ")" * 400 + "\n")

        runner = CliRunner()
        result = runner.invoke(main, ["parse", str(source)])

        assert result.exit_code == 1
        assert "expression nested too deeply" in result.output
        assert "Internal error" not in result.output

    def test_missing_file(self, tmp_path):
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        runner = CliRunner()
        result = runner.invoke(main, ["parse", str(tmp_path / "missing.ks")])

        assert result.exit_code == 2


class TestGlobalOptions:
    """Tests for options given before the subcommand."""

    def test_op_adds_operator(self, tmp_path):
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        source = tmp_path / "div.ks"
        source.write_text("a/b+c")

        runner = CliRunner()
        result = runner.invoke(main, ["--op", "/:40", "fmt", str(source)])

        assert result.exit_code == 0
        assert result.output == "((a / b) + c);\n"

    def test_invalid_op(self, program):
        """A reserved character is a configuration error."""
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        runner = CliRunner()
        result = runner.invoke(main, ["--op", "(:10", "parse", str(program)])

        assert result.exit_code == 2
        assert "Configuration error" in result.output

    def test_check_arity(self, tmp_path):
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        source = tmp_path / "arity.ks"
        source.write_text("extern sin(x); sin(1, 2)")

        runner = CliRunner()
        ok = runner.invoke(main, ["parse", str(source)])
        checked = runner.invoke(main, ["--check-arity", "parse", str(source)])

        assert ok.exit_code == 0
        assert checked.exit_code == 1
        assert "Incorrect # arguments passed" in checked.output

    def test_max_errors(self, tmp_path):
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        source = tmp_path / "junk.ks"
        source.write_text(")))))")

        runner = CliRunner()
        result = runner.invoke(main, ["--max-errors", "2", "parse", str(source)])

        assert result.exit_code == 1
        assert "Too many errors" in result.output

    def test_environment_precedence(self, tmp_path):
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        source = tmp_path / "env.ks"
        source.write_text("a/b")

        runner = CliRunner()
        result = runner.invoke(
            main, ["fmt", str(source)], env={"KALEIDO_PRECEDENCE": "/:40"}
        )

        assert result.exit_code == 0
        assert result.output == "(a / b);\n"


class TestOtherCommands:
    """Tests for tokens, fmt and repl."""

    def test_tokens(self, tmp_path):
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        source = tmp_path / "t.ks"
        source.write_text("f(1)")

        runner = CliRunner()
        result = runner.invoke(main, ["tokens", str(source)])

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "Token(IDENTIFIER, 'f', 1:1)",
            "Token(CHAR, '(', 1:2)",
            "Token(NUMBER, 1.0, 1:3)",
            "Token(CHAR, ')', 1:4)",
            "Token(EOF, 1:5)",
        ]

    def test_fmt(self, program):
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        runner = CliRunner()
        result = runner.invoke(main, ["fmt", str(program)])

        assert result.exit_code == 0
        assert result.output == "extern sin(x);\ndef f(a b) ((a * b) + 1);\nf(2, 3);\n"

    def test_repl(self):
        from click.testing import CliRunner
        from kaleido.cli.kaleido import main

        runner = CliRunner()
        result = runner.invoke(main, ["repl"], input="def f(x) x*2\nf(4)\n")

        assert result.exit_code == 0
        assert "ready> Parsed a function definition." in result.output
        assert "Parsed a top-level expr" in result.output
