"""Status commands for tk CLI: status, start, close, reopen."""

from __future__ import annotations

import typer

from tkt.models import Status, parse_status

from ._helpers import DIR_HELP, get_storage, report_errors
from ._json_state import echo_json, is_json_output


def _set_status(
    ticket_id: str,
    status: Status,
    tickets_dir: str | None,
    json_output: bool,
) -> None:
    storage = get_storage(tickets_dir)
    resolved = storage.update_field(ticket_id, "status", status.value)
    if is_json_output(json_output):
        echo_json({"id": resolved, "status": status.value})
    else:
        typer.echo(f"Updated {resolved} -> {status.value}")


def register(app: typer.Typer) -> None:
    """Register status commands."""

    valid = ", ".join(s.value for s in Status)

    @app.command("status")
    @report_errors
    def status(
        ticket_id: str = typer.Argument(..., help="Ticket ID (partial IDs allowed)"),
        new_status: str = typer.Argument(..., help=f"New status ({valid})"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Update the status of a ticket."""
        _set_status(ticket_id, parse_status(new_status), tickets_dir, json_output)

    @app.command("start")
    @report_errors
    def start(
        ticket_id: str = typer.Argument(..., help="Ticket ID (partial IDs allowed)"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Set ticket status to in_progress."""
        _set_status(ticket_id, Status.IN_PROGRESS, tickets_dir, json_output)

    @app.command("close")
    @report_errors
    def close(
        ticket_id: str = typer.Argument(..., help="Ticket ID (partial IDs allowed)"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Set ticket status to closed."""
        _set_status(ticket_id, Status.CLOSED, tickets_dir, json_output)

    @app.command("reopen")
    @report_errors
    def reopen(
        ticket_id: str = typer.Argument(..., help="Ticket ID (partial IDs allowed)"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Set ticket status to open."""
        _set_status(ticket_id, Status.OPEN, tickets_dir, json_output)
