"""
Kaleidoscope Command-Line Interface
===================================

This package provides the `kaleido` command-line tool:

- **kaleido parse**: parse a file and report entities or diagnostics
- **kaleido tokens**: dump the token stream
- **kaleido fmt**: print the canonical source form
- **kaleido repl**: interactive "ready>" loop

The tool is a Click-based application with a shared error handler.
"""

__all__ = ["kaleido"]
