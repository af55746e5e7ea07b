"""Per-invocation output mode for tk commands.

The root callback seeds the mode from the global ``--json`` flag. A command
given its own ``--json`` flips it on for the rest of the run, so errors
reported by ``report_errors`` come out in the same format as the result.
"""

from __future__ import annotations

import orjson
import typer


class _OutputMode:
    json = False


_mode = _OutputMode()


def set_json_mode(value: bool) -> None:
    """Seed the output mode for this invocation."""
    _mode.json = value


def is_json_output(local_flag: bool = False) -> bool:
    """Return True when a command should print JSON."""
    _mode.json = _mode.json or local_flag
    return _mode.json


def echo_json(payload: object) -> None:
    typer.echo(orjson.dumps(payload).decode())


def echo_error(message: str) -> None:
    """Report an error on stderr in the active output format."""
    if _mode.json:
        typer.echo(orjson.dumps({"error": message}).decode(), err=True)
    else:
        typer.echo(f"Error: {message}", err=True)
