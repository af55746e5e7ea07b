"""Configuration commands for tk CLI."""

from __future__ import annotations

import typer

from tkt.config import (
    CONFIG_KEYS,
    coerce_config_value,
    load_config,
    resolve_tickets_dir,
    save_config,
)

from ._helpers import DIR_HELP, SortedGroup, report_errors
from ._json_state import echo_json, is_json_output

config_app = typer.Typer(
    help="Manage tk configuration (<tickets dir>/config.toml).",
    no_args_is_help=True,
    cls=SortedGroup,
)


@config_app.command("get")
@report_errors
def config_get(
    key: str = typer.Argument(..., help="Config key"),
    tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
) -> None:
    """Print one config value."""
    config = load_config(resolve_tickets_dir(tickets_dir))
    if key not in config:
        msg = f"config key '{key}' is not set"
        raise ValueError(msg)
    typer.echo(str(config[key]))


@config_app.command("set")
@report_errors
def config_set(
    key: str = typer.Argument(..., help=f"Config key ({', '.join(CONFIG_KEYS)})"),
    value: str = typer.Argument(..., help="New value"),
    tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
) -> None:
    """Set a config value."""
    directory = resolve_tickets_dir(tickets_dir)
    config = load_config(directory)
    config[key] = coerce_config_value(key, value)
    save_config(directory, config)
    typer.echo(f"Set {key} = {config[key]}")


@config_app.command("list")
@report_errors
def config_list(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
) -> None:
    """List all config values."""
    config = load_config(resolve_tickets_dir(tickets_dir))
    if is_json_output(json_output):
        echo_json(config)
        return
    for key in sorted(config):
        typer.echo(f"{key} = {config[key]}")


def register(app: typer.Typer) -> None:
    """Register the config sub-app and the version command."""
    app.add_typer(config_app, name="config")

    @app.command()
    def version() -> None:
        """Show the tk version."""
        from tkt._version import version as v

        typer.echo(v)
