"""Tests for the Markdown ticket file format."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from tkt.errors import MalformedTicketError
from tkt.models import Status, Ticket, TicketType
from tkt.parser import (
    format_id_list,
    format_ticket,
    format_timestamp,
    parse_ticket,
    update_field,
)

CREATED = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

BASIC_FILE = """\
---
id: tk-0001
status: open
deps: [tk-a, tk-b]
links: []
created: 2026-01-01T12:00:00Z
type: task
priority: 2
---
# Fix the flux capacitor
"""


def _header(*lines: str) -> str:
    return "---\n" + "\n".join(lines) + "\n---\n# Title\n"


class TestFormat:
    """Test serialization to the file format."""

    def test_basic_layout(self) -> None:
        """Header keys are written in fixed order followed by the title."""
        ticket = Ticket(
            id="tk-0001",
            title="Fix the flux capacitor",
            created=CREATED,
            deps=["tk-a", "tk-b"],
        )
        assert format_ticket(ticket) == BASIC_FILE

    def test_optional_fields_after_priority(self) -> None:
        """assignee, external-ref and parent only appear when set."""
        ticket = Ticket(
            id="tk-0001",
            title="T",
            created=CREATED,
            assignee="alice",
            external_ref="gh-123",
            parent="tk-9999",
        )
        lines = format_ticket(ticket).splitlines()
        assert lines[7:11] == [
            "priority: 2",
            "assignee: alice",
            "external-ref: gh-123",
            "parent: tk-9999",
        ]
        assert lines[11] == "---"

    def test_body_separated_by_blank_line(self) -> None:
        """The body follows the title after one blank line."""
        ticket = Ticket(id="tk-0001", title="T", created=CREATED, body="Details here")
        assert format_ticket(ticket).endswith("---\n# T\n\nDetails here\n")

    def test_format_timestamp_converts_to_utc(self) -> None:
        """Timestamps are always written in UTC with a Z suffix."""
        assert format_timestamp(CREATED) == "2026-01-01T12:00:00Z"

    def test_format_id_list(self) -> None:
        """ID lists use inline brackets."""
        assert format_id_list([]) == "[]"
        assert format_id_list(["a", "b"]) == "[a, b]"


class TestParse:
    """Test parsing ticket files."""

    def test_parse_basic(self) -> None:
        """All header fields and the title are read back."""
        ticket = parse_ticket(BASIC_FILE)
        assert ticket.id == "tk-0001"
        assert ticket.status == Status.OPEN
        assert ticket.ticket_type == TicketType.TASK
        assert ticket.priority == 2
        assert ticket.deps == ["tk-a", "tk-b"]
        assert ticket.links == []
        assert ticket.created == CREATED
        assert ticket.title == "Fix the flux capacitor"
        assert ticket.body == ""

    def test_round_trip(self) -> None:
        """Formatting then parsing yields an equal ticket."""
        ticket = Ticket(
            id="tk-0001",
            title="Round trip",
            status=Status.IN_PROGRESS,
            ticket_type=TicketType.EPIC,
            priority=0,
            created=CREATED,
            deps=["tk-a"],
            links=["tk-b", "tk-c"],
            assignee="Jane Doe",
            external_ref="gh-42",
            parent="tk-p",
            body="First paragraph.\n\n## Design\n\nMore text.",
        )
        assert parse_ticket(format_ticket(ticket)) == ticket

    def test_body_may_contain_delimiters(self) -> None:
        """Only the first two delimiter lines bound the header."""
        text = BASIC_FILE + "\nabove\n---\nbelow\n"
        ticket = parse_ticket(text)
        assert ticket.body == "above\n---\nbelow"

    def test_missing_optional_values_default(self) -> None:
        """Absent status, type, deps and priority fall back to defaults."""
        ticket = parse_ticket(_header("id: tk-0001", "created: 2026-01-01T12:00:00Z"))
        assert ticket.status == Status.OPEN
        assert ticket.ticket_type == TicketType.TASK
        assert ticket.deps == []
        assert ticket.priority == 0

    def test_scalar_deps_become_list(self) -> None:
        """A single unbracketed dep is accepted."""
        ticket = parse_ticket(
            _header("id: tk-0001", "deps: tk-a", "created: 2026-01-01T12:00:00Z"),
        )
        assert ticket.deps == ["tk-a"]

    def test_offset_timestamp_normalized(self) -> None:
        """Timestamps with an offset are converted to UTC."""
        ticket = parse_ticket(
            _header("id: tk-0001", "created: 2026-01-01T14:00:00+02:00"),
        )
        assert ticket.created == CREATED

    def test_empty_title_heading(self) -> None:
        """A bare "#" heading is an empty title, not body text."""
        ticket = Ticket(id="tk-0001", created=CREATED, body="Body")
        text = format_ticket(ticket)
        assert "\n# \n" in text
        assert parse_ticket(text) == ticket

    def test_no_title_heading(self) -> None:
        """Body text without a heading leaves the title empty."""
        text = "---\nid: tk-0001\ncreated: 2026-01-01T12:00:00Z\n---\nJust text\n"
        ticket = parse_ticket(text)
        assert ticket.title == ""
        assert ticket.body == "Just text"

    @pytest.mark.parametrize(
        ("text", "match"),
        [
            ("# No header at all\n", "header block"),
            ("---\nid: tk-0001\n", "header block"),
            (_header("created: 2026-01-01T12:00:00Z"), "no 'id'"),
            (_header("id: tk-0001"), "no 'created'"),
            (_header("id: tk-0001", "created: yesterday"), "Invalid isoformat"),
            (
                _header("id: tk-0001", "created: 2026-01-01T12:00:00Z", "status: done"),
                "invalid status",
            ),
            (
                _header("id: tk-0001", "created: 2026-01-01T12:00:00Z", "priority: 9"),
                "between 0 and 4",
            ),
            (_header("id: tk-0001", "deps: [tk-a"), "invalid header"),
        ],
    )
    def test_malformed(self, text: str, match: str) -> None:
        """Broken files raise MalformedTicketError."""
        with pytest.raises(MalformedTicketError, match=match):
            parse_ticket(text)

    def test_error_includes_path(self) -> None:
        """The source path prefixes the error message."""
        with pytest.raises(MalformedTicketError) as exc_info:
            parse_ticket("garbage", "/tmp/tk-0001.md")
        assert str(exc_info.value).startswith("/tmp/tk-0001.md: ")
        assert exc_info.value.path == "/tmp/tk-0001.md"


class TestUpdateField:
    """Test in-place header field replacement."""

    def test_replace_existing_field(self) -> None:
        """Only the targeted line changes."""
        updated = update_field(BASIC_FILE, "status", "closed")
        assert updated == BASIC_FILE.replace("status: open", "status: closed")

    def test_insert_missing_field(self) -> None:
        """A missing field is inserted right after the opening delimiter."""
        updated = update_field(BASIC_FILE, "assignee", "bob")
        lines = updated.split("\n")
        assert lines[0] == "---"
        assert lines[1] == "assignee: bob"
        assert parse_ticket(updated).assignee == "bob"

    def test_body_lines_untouched(self) -> None:
        """Body lines that look like header keys are not modified."""
        text = BASIC_FILE + "\nstatus: this is prose\n"
        updated = update_field(text, "status", "closed")
        assert updated.endswith("\nstatus: this is prose\n")
        assert "status: closed" in updated

    def test_preserves_unknown_formatting(self) -> None:
        """Other header lines keep their exact bytes."""
        text = BASIC_FILE.replace("links: []", "links:   [tk-x]   ")
        updated = update_field(text, "deps", "[]")
        assert "links:   [tk-x]   " in updated
        assert "deps: []" in updated

    def test_no_header(self) -> None:
        """Content without a header block cannot be patched."""
        with pytest.raises(MalformedTicketError):
            update_field("# Title only\n", "status", "closed")
