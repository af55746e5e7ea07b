"""Read-only commands for tk CLI: show, ls, ready, blocked, closed."""

from __future__ import annotations

import typer

from tkt.constants import CLOSED_DEFAULT_LIMIT, CLOSED_SCAN_WINDOW
from tkt.deps import find_children, find_dependants, get_blocked, get_ready
from tkt.models import Status, parse_status, ticket_to_dict

from ._formatting import (
    format_ticket_details,
    format_ticket_line,
    format_ticket_prioritized,
)
from ._helpers import DIR_HELP, get_storage, report_errors
from ._json_state import echo_json, is_json_output


def register(app: typer.Typer) -> None:
    """Register read-only commands."""

    @app.command("show")
    @report_errors
    def show(
        ticket_id: str = typer.Argument(..., help="Ticket ID (partial IDs allowed)"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Display a ticket with its metadata, content, and relationships."""
        storage = get_storage(tickets_dir)
        target = storage.get(ticket_id)
        all_tickets = storage.list()
        by_id = {t.id: t for t in all_tickets}

        blockers = [
            by_id[dep]
            for dep in target.deps
            if dep in by_id and not by_id[dep].is_closed()
        ]
        blocking = [
            t for t in find_dependants(all_tickets, target.id) if not t.is_closed()
        ]
        children = find_children(all_tickets, target.id)
        linked = [by_id[link] for link in target.links if link in by_id]

        if is_json_output(json_output):
            data = ticket_to_dict(target)
            data["blockers"] = [t.id for t in blockers]
            data["blocking"] = [t.id for t in blocking]
            data["children"] = [t.id for t in children]
            echo_json(data)
            return

        typer.echo(
            format_ticket_details(
                target,
                blockers=blockers,
                blocking=blocking,
                children=children,
                linked=linked,
            ),
        )

    @app.command("ls")
    @report_errors
    def list_tickets(
        status: str | None = typer.Option(
            None,
            "--status",
            "-s",
            help="Filter by status (open|in_progress|closed)",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """List tickets, sorted by ID."""
        storage = get_storage(tickets_dir)
        tickets = storage.list()
        if status:
            wanted = parse_status(status)
            tickets = [t for t in tickets if t.status == wanted]
        tickets.sort(key=lambda t: t.id)

        if is_json_output(json_output):
            echo_json([ticket_to_dict(t) for t in tickets])
            return
        for ticket in tickets:
            typer.echo(format_ticket_line(ticket))

    app.command("list", hidden=True)(list_tickets)

    @app.command("ready")
    @report_errors
    def ready(
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """List open/in-progress tickets whose dependencies are all closed."""
        storage = get_storage(tickets_dir)
        tickets = get_ready(storage.list())

        if is_json_output(json_output):
            echo_json([ticket_to_dict(t) for t in tickets])
            return
        for ticket in tickets:
            typer.echo(format_ticket_prioritized(ticket))

    @app.command("blocked")
    @report_errors
    def blocked(
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """List open/in-progress tickets with unresolved dependencies."""
        storage = get_storage(tickets_dir)
        blocked_tickets = get_blocked(storage.list())

        if is_json_output(json_output):
            echo_json(
                [
                    {**ticket_to_dict(b.ticket), "blockers": b.blockers}
                    for b in blocked_tickets
                ],
            )
            return
        for b in blocked_tickets:
            typer.echo(format_ticket_prioritized(b.ticket, b.blockers))

    @app.command("closed")
    @report_errors
    def closed(
        limit: int = typer.Option(
            CLOSED_DEFAULT_LIMIT,
            "--limit",
            "-n",
            help="Maximum number of tickets to show",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """List recently closed tickets, most recently modified first."""
        storage = get_storage(tickets_dir)
        recent = storage.list_by_mtime(CLOSED_SCAN_WINDOW)
        tickets = [t for t in recent if t.status == Status.CLOSED][: max(limit, 0)]

        if is_json_output(json_output):
            echo_json([ticket_to_dict(t) for t in tickets])
            return
        for ticket in tickets:
            typer.echo(format_ticket_line(ticket))
