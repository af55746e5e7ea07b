"""Create command for tk CLI."""

from __future__ import annotations

from pathlib import Path

import typer

from tkt.config import get_prefix, load_config
from tkt.constants import DEFAULT_PRIORITY, DEFAULT_TITLE, DEFAULT_TYPE
from tkt.idgen import generate_unique_id
from tkt.models import Status, Ticket, parse_ticket_type, validate_priority

from ._helpers import DIR_HELP, get_default_assignee, get_storage, report_errors
from ._json_state import echo_json, is_json_output


def build_body(
    description: str | None,
    design: str | None,
    acceptance: str | None,
) -> str:
    """Assemble the ticket body from the optional text sections."""
    parts: list[str] = []
    if description:
        parts.append(description)
    if design:
        parts.append("## Design\n\n" + design)
    if acceptance:
        parts.append("## Acceptance Criteria\n\n" + acceptance)
    return "\n\n".join(parts)


def register(app: typer.Typer) -> None:
    """Register the create command."""

    @app.command("create")
    @report_errors
    def create(
        title_words: list[str] | None = typer.Argument(
            None,
            help="Ticket title (words are joined with spaces)",
            show_default=False,
        ),
        description: str | None = typer.Option(
            None,
            "--description",
            "-d",
            help="Description text",
        ),
        design: str | None = typer.Option(None, "--design", help="Design notes"),
        acceptance: str | None = typer.Option(
            None,
            "--acceptance",
            help="Acceptance criteria",
        ),
        priority: int | None = typer.Option(
            None,
            "--priority",
            "-p",
            help="Priority 0-4, 0=highest",
        ),
        ticket_type: str | None = typer.Option(
            None,
            "--type",
            "-t",
            help="Type (bug|feature|task|epic|chore)",
        ),
        assignee: str | None = typer.Option(None, "--assignee", "-a", help="Assignee"),
        external_ref: str | None = typer.Option(
            None,
            "--external-ref",
            help="External reference (e.g., gh-123)",
        ),
        parent: str | None = typer.Option(None, "--parent", help="Parent ticket ID"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Create a new ticket and print its ID."""
        storage = get_storage(tickets_dir)
        config = load_config(storage.tickets_dir)

        resolved_type = parse_ticket_type(
            ticket_type or config.get("default_type", DEFAULT_TYPE),
        )
        resolved_priority = (
            priority
            if priority is not None
            else config.get("default_priority", DEFAULT_PRIORITY)
        )
        validate_priority(resolved_priority)

        prefix = get_prefix(storage.tickets_dir, Path.cwd())
        ticket = Ticket(
            id=generate_unique_id(storage, prefix),
            title=" ".join(title_words) if title_words else DEFAULT_TITLE,
            status=Status.OPEN,
            ticket_type=resolved_type,
            priority=resolved_priority,
            assignee=(
                assignee or config.get("default_assignee") or get_default_assignee()
            ),
            external_ref=external_ref,
            parent=parent,
            body=build_body(description, design, acceptance),
        )
        storage.create(ticket)

        if is_json_output(json_output):
            echo_json({"id": ticket.id})
        else:
            typer.echo(ticket.id)
