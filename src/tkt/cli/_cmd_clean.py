"""Clean command for tk CLI: delete closed tickets that are safe to remove."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import typer

from tkt.deps import find_children, find_dependants
from tkt.errors import StorageError

from ._helpers import DIR_HELP, get_storage, report_errors
from ._json_state import echo_json, is_json_output

if TYPE_CHECKING:
    from tkt.models import Ticket

logger = logging.getLogger(__name__)


def blocking_reason(ticket: Ticket, tickets: list[Ticket]) -> str | None:
    """Return why a closed ticket must be kept, or None if it can go."""
    if find_dependants(tickets, ticket.id):
        return "has dependants"
    if any(not child.is_closed() for child in find_children(tickets, ticket.id)):
        return "has non-closed children"
    if ticket.links:
        return "has links"
    return None


def register(app: typer.Typer) -> None:
    """Register the clean command."""

    @app.command("clean")
    @report_errors
    def clean(
        fix: bool = typer.Option(
            False,
            "--fix",
            help="Actually delete closed tickets (default is dry-run)",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Delete closed tickets nothing else relies on.

        A closed ticket is kept when another ticket depends on it, when it
        has children that are not closed, or when it has links.
        """
        storage = get_storage(tickets_dir)
        tickets = storage.list()

        deletable: list[Ticket] = []
        blocked: list[tuple[Ticket, str]] = []
        for ticket in sorted(tickets, key=lambda t: t.id):
            if not ticket.is_closed():
                continue
            reason = blocking_reason(ticket, tickets)
            if reason is None:
                deletable.append(ticket)
            else:
                blocked.append((ticket, reason))

        deleted: list[str] = []
        failed: list[str] = []
        if fix:
            for ticket in deletable:
                try:
                    storage.delete(ticket.id)
                except StorageError as e:
                    logger.warning("Failed to delete %s: %s", ticket.id, e)
                    failed.append(ticket.id)
                else:
                    deleted.append(ticket.id)

        if is_json_output(json_output):
            echo_json(
                {
                    "fixed": fix,
                    "deletable": [t.id for t in deletable],
                    "blocked": [{"id": t.id, "reason": r} for t, r in blocked],
                    "deleted": deleted,
                    "failed": failed,
                },
            )
            return

        if not deletable and not blocked:
            typer.echo("No closed tickets found.")
            return

        if not fix:
            typer.echo(f"Found {len(deletable) + len(blocked)} closed ticket(s):")
            typer.echo(f"  {len(deletable)} deletable")
            typer.echo(f"  {len(blocked)} blocked")
            if blocked:
                typer.echo("\nBlocked tickets:")
                for ticket, reason in blocked:
                    typer.echo(
                        f"  {ticket.id} [{ticket.status.value}] {ticket.title}"
                        f" - {reason}",
                    )
            if deletable:
                typer.echo(
                    f"\nRun with --fix to delete {len(deletable)} deletable ticket(s).",
                )
            return

        if not deletable:
            typer.echo(
                f"No deletable tickets. All {len(blocked)} closed ticket(s)"
                " are blocked.",
            )
            return

        for ticket_id in deleted:
            typer.echo(f"Deleted: {ticket_id}")
        summary = f"\nDeleted {len(deleted)} ticket(s)"
        if blocked:
            summary += f", skipped {len(blocked)} blocked ticket(s)"
        if failed:
            summary += f", {len(failed)} error(s)"
        typer.echo(summary + ".")
