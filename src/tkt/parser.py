"""Reading and writing the Markdown ticket file format.

A ticket file is a header block of ``key: value`` lines between two ``---``
delimiter lines, followed by a ``# <title>`` heading and a freeform body::

    ---
    id: tk-5c46
    status: open
    deps: [tk-a1b2, tk-c3d4]
    links: []
    created: 2026-01-01T12:00:00Z
    type: task
    priority: 2
    ---
    # Fix the flux capacitor

    Body text, kept verbatim.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import yaml

from tkt.constants import HEADER_DELIMITER
from tkt.errors import MalformedTicketError
from tkt.models import Ticket, parse_status, parse_ticket_type, validate_priority

if TYPE_CHECKING:
    from collections.abc import Iterable


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as RFC 3339 UTC with second precision."""
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 / RFC 3339 timestamp and convert it to UTC."""
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_id_list(ids: Iterable[str]) -> str:
    """Format ticket IDs as an inline bracketed list (``[a, b]`` or ``[]``)."""
    return "[" + ", ".join(ids) + "]"


def _find_header(lines: list[str]) -> tuple[int, int] | None:
    """Return the indexes of the opening and closing delimiter lines."""
    start: int | None = None
    for idx, line in enumerate(lines):
        if line.rstrip("\r") != HEADER_DELIMITER:
            continue
        if start is None:
            start = idx
        else:
            return start, idx
    return None


def _as_id_list(value: Any, key: str) -> list[str]:
    """Normalize a header value to a list of IDs (absent means empty)."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    if isinstance(value, str):
        return [value.strip()]
    msg = f"'{key}' must be a list of ticket IDs"
    raise MalformedTicketError(msg)


def _optional(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _split_title(body_lines: list[str]) -> tuple[str, str]:
    """Extract the title heading and the remaining body text."""
    title = ""
    body_start = 0
    for idx, line in enumerate(body_lines):
        stripped = line.strip()
        if stripped == "#" or stripped.startswith("# "):
            title = stripped[1:].strip()
            body_start = idx + 1
            break
        if stripped:
            # Non-empty, non-heading line means there is no title
            break
    body = "\n".join(body_lines[body_start:]).strip()
    return title, body


def parse_ticket(text: str, path: str | None = None) -> Ticket:
    """Parse the contents of a ticket file.

    Args:
        text: Full file contents.
        path: Optional source path, included in error messages.

    Returns:
        The parsed Ticket.

    Raises:
        MalformedTicketError: If the header block is missing or invalid.
    """
    lines = text.split("\n")
    bounds = _find_header(lines)
    if bounds is None:
        msg = "missing or unterminated header block"
        raise MalformedTicketError(msg, path)
    start, end = bounds

    header_text = "\n".join(line.rstrip("\r") for line in lines[start + 1 : end])
    try:
        header = yaml.load(header_text, Loader=yaml.BaseLoader)  # noqa: S506
    except yaml.YAMLError as e:
        msg = f"invalid header: {e}"
        raise MalformedTicketError(msg, path) from e

    if header is None:
        header = {}
    if not isinstance(header, dict):
        msg = "header must be a mapping of key: value lines"
        raise MalformedTicketError(msg, path)

    ticket_id = _optional(header.get("id"))
    if not ticket_id:
        msg = "header has no 'id'"
        raise MalformedTicketError(msg, path)

    created_raw = _optional(header.get("created"))
    if not created_raw:
        msg = "header has no 'created' timestamp"
        raise MalformedTicketError(msg, path)

    try:
        created = parse_timestamp(created_raw)
        status = parse_status(_optional(header.get("status")) or "open")
        ticket_type = parse_ticket_type(_optional(header.get("type")) or "task")
        priority = int(_optional(header.get("priority")) or 0)
        validate_priority(priority)
        deps = _as_id_list(header.get("deps"), "deps")
        links = _as_id_list(header.get("links"), "links")
    except MalformedTicketError as e:
        raise MalformedTicketError(str(e), path) from e
    except ValueError as e:
        raise MalformedTicketError(str(e), path) from e

    title, body = _split_title(lines[end + 1 :])

    return Ticket(
        id=ticket_id,
        title=title,
        status=status,
        ticket_type=ticket_type,
        priority=priority,
        created=created,
        deps=deps,
        links=links,
        assignee=_optional(header.get("assignee")),
        external_ref=_optional(header.get("external-ref")),
        parent=_optional(header.get("parent")),
        body=body,
    )


def format_ticket(ticket: Ticket) -> str:
    """Serialize a ticket to the on-disk file format.

    Header keys are written in a fixed order; optional keys are omitted
    when empty.
    """
    lines = [
        HEADER_DELIMITER,
        f"id: {ticket.id}",
        f"status: {ticket.status.value}",
        f"deps: {format_id_list(ticket.deps)}",
        f"links: {format_id_list(ticket.links)}",
        f"created: {format_timestamp(ticket.created)}",
        f"type: {ticket.ticket_type.value}",
        f"priority: {ticket.priority}",
    ]
    if ticket.assignee:
        lines.append(f"assignee: {ticket.assignee}")
    if ticket.external_ref:
        lines.append(f"external-ref: {ticket.external_ref}")
    if ticket.parent:
        lines.append(f"parent: {ticket.parent}")
    lines.append(HEADER_DELIMITER)
    lines.append(f"# {ticket.title}")

    content = "\n".join(lines) + "\n"
    if ticket.body:
        content += "\n" + ticket.body
        if not ticket.body.endswith("\n"):
            content += "\n"
    return content


def update_field(content: str, field: str, value: str) -> str:
    """Replace one header field in raw ticket content.

    Only lines inside the header block are touched. If the field is absent
    it is inserted directly after the opening delimiter. Everything else,
    including the body and the formatting of other header lines, is kept
    byte for byte.

    Raises:
        MalformedTicketError: If the content has no header block.
    """
    lines = content.split("\n")
    bounds = _find_header(lines)
    if bounds is None:
        msg = "missing or unterminated header block"
        raise MalformedTicketError(msg)
    start, end = bounds

    new_line = f"{field}: {value}"
    prefix = f"{field}:"
    replaced = False
    for idx in range(start + 1, end):
        if lines[idx].startswith(prefix):
            lines[idx] = new_line
            replaced = True

    if not replaced:
        lines.insert(start + 1, new_line)

    return "\n".join(lines)
