"""Display and formatting functions for tk CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from tkt.constants import PRIORITY_COLORS, STATUS_COLORS
from tkt.parser import format_id_list, format_timestamp

if TYPE_CHECKING:
    from tkt.models import Ticket


def _status(ticket: Ticket) -> str:
    color = STATUS_COLORS.get(ticket.status.value, "white")
    return typer.style(f"[{ticket.status.value}]", fg=color)


def _priority(ticket: Ticket) -> str:
    color = PRIORITY_COLORS.get(ticket.priority, "white")
    return typer.style(f"[P{ticket.priority}]", fg=color, bold=True)


def format_ticket_line(ticket: Ticket) -> str:
    """Format a ticket for `ls`: ID, status, title, and open deps."""
    deps = f" <- {format_id_list(ticket.deps)}" if ticket.deps else ""
    return f"{ticket.id:<8} {_status(ticket)} - {ticket.title}{deps}"


def format_ticket_prioritized(ticket: Ticket, blockers: list[str] | None = None) -> str:
    """Format a ticket for `ready` / `blocked`, including its priority."""
    line = f"{ticket.id:<8} {_priority(ticket)}{_status(ticket)} - {ticket.title}"
    if blockers:
        line += f" <- {format_id_list(blockers)}"
    return line


def format_ticket_ref(ticket: Ticket) -> str:
    """Format a related ticket as an indented one-liner."""
    return f"  - {ticket.id} [{ticket.status.value}] {ticket.title}"


def format_ticket_details(
    ticket: Ticket,
    *,
    blockers: list[Ticket],
    blocking: list[Ticket],
    children: list[Ticket],
    linked: list[Ticket],
) -> str:
    """Format a ticket with its metadata, body, and relationships for `show`."""
    lines = [
        typer.style(ticket.id, bold=True) + f" {_status(ticket)} {ticket.title}",
        f"Type: {ticket.ticket_type.value}   Priority: {_priority(ticket)}",
        f"Created: {format_timestamp(ticket.created)}",
    ]
    if ticket.assignee:
        lines.append(f"Assignee: {ticket.assignee}")
    if ticket.external_ref:
        lines.append(f"External ref: {ticket.external_ref}")
    if ticket.parent:
        lines.append(f"Parent: {ticket.parent}")
    if ticket.deps:
        lines.append(f"Deps: {format_id_list(ticket.deps)}")
    if ticket.links:
        lines.append(f"Links: {format_id_list(ticket.links)}")

    if ticket.body:
        lines.extend(["", ticket.body])

    sections = (
        ("Blockers", blockers),
        ("Blocking", blocking),
        ("Children", children),
        ("Linked", linked),
    )
    for heading, related in sections:
        if related:
            lines.extend(["", f"{heading}:"])
            lines.extend(format_ticket_ref(t) for t in related)

    return "\n".join(lines)
