"""tk CLI commands for ticket tracking."""

from __future__ import annotations

import logging

import typer

from ._helpers import SortedGroup

app = typer.Typer(
    help="tk - minimal ticket system with dependency tracking.\n\n"
    "Tickets are stored as Markdown files with a YAML header in .tickets/. "
    "Partial IDs are accepted anywhere an ID is expected "
    "(e.g. 'tk show 5c4' matches 'tk-5c46').",
    no_args_is_help=True,
    cls=SortedGroup,
)


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON for all commands",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
) -> None:
    from ._json_state import set_json_mode

    set_json_mode(json_output)
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


from . import (  # noqa: E402
    _cmd_clean,
    _cmd_config,
    _cmd_create,
    _cmd_dep,
    _cmd_link,
    _cmd_prune,
    _cmd_read,
    _cmd_rm,
    _cmd_status,
)

for _mod in (
    _cmd_clean,
    _cmd_config,
    _cmd_create,
    _cmd_dep,
    _cmd_link,
    _cmd_prune,
    _cmd_read,
    _cmd_rm,
    _cmd_status,
):
    _mod.register(app)


def main() -> None:
    """Run the tk CLI application."""
    app()
