"""Data models for tk tickets using dataclasses."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from tkt.constants import DEFAULT_PRIORITY, MAX_PRIORITY, MIN_PRIORITY


class Status(str, Enum):
    """Ticket status enumeration."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


class TicketType(str, Enum):
    """Ticket type enumeration."""

    BUG = "bug"
    FEATURE = "feature"
    TASK = "task"
    EPIC = "epic"
    CHORE = "chore"


def utc_now() -> datetime:
    """Return the current UTC time truncated to whole seconds."""
    return datetime.now(UTC).replace(microsecond=0)


def normalize_timestamp(value: datetime) -> datetime:
    """Convert a datetime to second-precision UTC.

    Naive datetimes are assumed to already be in UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).replace(microsecond=0)


@dataclass
class Ticket:
    """A ticket in the tracking system."""

    id: str
    title: str = ""
    status: Status = Status.OPEN
    ticket_type: TicketType = TicketType.TASK
    priority: int = DEFAULT_PRIORITY  # 0-4 range, lower is higher priority
    created: datetime = field(default_factory=utc_now)
    deps: list[str] = field(default_factory=list[str])
    links: list[str] = field(default_factory=list[str])
    assignee: str | None = None
    external_ref: str | None = None
    parent: str | None = None
    body: str = ""

    def __post_init__(self) -> None:
        # Absent collections are always normalized to empty lists
        if self.deps is None:
            self.deps = []
        if self.links is None:
            self.links = []
        self.created = normalize_timestamp(self.created)

    def is_closed(self) -> bool:
        """Check if the ticket is closed."""
        return self.status == Status.CLOSED

    def is_active(self) -> bool:
        """Check if the ticket is open or in progress."""
        return self.status in (Status.OPEN, Status.IN_PROGRESS)


def validate_priority(priority: Any) -> None:
    """Validate that priority is in valid range (0-4)."""
    if (
        isinstance(priority, bool)
        or not isinstance(priority, int)
        or priority < MIN_PRIORITY
        or priority > MAX_PRIORITY
    ):
        msg = f"Priority must be an integer between {MIN_PRIORITY} and {MAX_PRIORITY}"
        raise ValueError(msg)


def parse_status(value: str) -> Status:
    """Convert a string to a Status, with a readable error."""
    try:
        return Status(value)
    except ValueError:
        valid = ", ".join(s.value for s in Status)
        msg = f"invalid status '{value}'. Must be one of: {valid}"
        raise ValueError(msg) from None


def parse_ticket_type(value: str) -> TicketType:
    """Convert a string to a TicketType, with a readable error."""
    try:
        return TicketType(value)
    except ValueError:
        valid = ", ".join(t.value for t in TicketType)
        msg = f"invalid type '{value}'. Must be one of: {valid}"
        raise ValueError(msg) from None


def ticket_to_dict(ticket: Ticket) -> dict[str, Any]:
    """Convert a Ticket to a dictionary, serializing the timestamp."""
    return {
        "id": ticket.id,
        "title": ticket.title,
        "status": ticket.status.value,
        "type": ticket.ticket_type.value,
        "priority": ticket.priority,
        "created": ticket.created.isoformat().replace("+00:00", "Z"),
        "deps": list(ticket.deps),
        "links": list(ticket.links),
        "assignee": ticket.assignee,
        "external_ref": ticket.external_ref,
        "parent": ticket.parent,
        "body": ticket.body,
    }


def dict_to_ticket(data: dict[str, Any]) -> Ticket:
    """Convert a dictionary produced by ``ticket_to_dict`` back to a Ticket."""
    return Ticket(
        id=data["id"],
        title=data.get("title", ""),
        status=parse_status(data.get("status", Status.OPEN.value)),
        ticket_type=parse_ticket_type(data.get("type", TicketType.TASK.value)),
        priority=data.get("priority", DEFAULT_PRIORITY),
        created=datetime.fromisoformat(data["created"]),
        deps=list(data.get("deps") or []),
        links=list(data.get("links") or []),
        assignee=data.get("assignee"),
        external_ref=data.get("external_ref"),
        parent=data.get("parent"),
        body=data.get("body", ""),
    )
