"""Tests for shared CLI helpers."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest
import typer

from tkt.cli._formatting import format_ticket_line, format_ticket_prioritized
from tkt.cli._helpers import get_default_assignee, get_storage, report_errors
from tkt.cli._json_state import (
    echo_error,
    echo_json,
    is_json_output,
    set_json_mode,
)
from tkt.errors import TicketNotFoundError
from tkt.models import Ticket

if TYPE_CHECKING:
    from pathlib import Path


class TestReportErrors:
    """Test the error reporting decorator."""

    def test_ticket_error_exits_1(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Tracker errors print a message and exit with status 1."""
        set_json_mode(False)

        @report_errors
        def failing() -> None:
            raise TicketNotFoundError("tk-x")

        with pytest.raises(typer.Exit) as exc_info:
            failing()

        assert exc_info.value.exit_code == 1
        assert "Error: ticket 'tk-x' not found" in capsys.readouterr().err

    def test_other_errors_propagate(self) -> None:
        """Unexpected exceptions are not swallowed."""

        @report_errors
        def broken() -> None:
            msg = "boom"
            raise KeyError(msg)

        with pytest.raises(KeyError):
            broken()

    def test_preserves_metadata(self) -> None:
        """The wrapped function keeps its name and docstring."""

        @report_errors
        def documented() -> None:
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."


class TestJsonState:
    """Test the output mode switch."""

    def test_local_flag_is_sticky(self) -> None:
        """A command-level --json switches the whole invocation."""
        set_json_mode(False)
        assert is_json_output() is False
        assert is_json_output(True) is True
        assert is_json_output() is True
        set_json_mode(False)

    def test_echo_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Payloads are printed as compact JSON."""
        echo_json({"id": "tk-1", "deps": []})
        assert capsys.readouterr().out == '{"id":"tk-1","deps":[]}\n'

    def test_echo_error_follows_mode(
        self, capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Errors are plain text by default and JSON once JSON is on."""
        set_json_mode(False)
        echo_error("bad id")
        assert capsys.readouterr().err == "Error: bad id\n"
        set_json_mode(True)
        echo_error("bad id")
        assert capsys.readouterr().err == '{"error":"bad id"}\n'
        set_json_mode(False)


class TestStorageAndAssignee:
    """Test storage construction and git lookups."""

    def test_get_storage_explicit_dir(self, tmp_path: Path) -> None:
        """--dir is used as-is."""
        assert get_storage(str(tmp_path)).tickets_dir == tmp_path

    def test_default_assignee_from_git(self) -> None:
        """The git user.name becomes the default assignee."""
        get_default_assignee.cache_clear()
        completed = MagicMock(returncode=0, stdout="Jane Doe\n")
        with patch("tkt.cli._helpers.subprocess.run", return_value=completed):
            assert get_default_assignee() == "Jane Doe"
        get_default_assignee.cache_clear()

    def test_default_assignee_without_git(self) -> None:
        """A missing git binary yields no assignee."""
        get_default_assignee.cache_clear()
        with patch("tkt.cli._helpers.subprocess.run", side_effect=FileNotFoundError):
            assert get_default_assignee() is None
        get_default_assignee.cache_clear()


class TestFormatting:
    """Test one-line ticket formatting."""

    def test_ticket_line(self) -> None:
        """ls lines show ID, status, title, and deps."""
        ticket = Ticket(
            id="tk-0001",
            title="Title",
            deps=["tk-0002"],
            created=datetime(2026, 1, 1, tzinfo=UTC),
        )
        line = typer.unstyle(format_ticket_line(ticket))
        assert line == "tk-0001  [open] - Title <- [tk-0002]"

    def test_prioritized_line(self) -> None:
        """ready/blocked lines add the priority and blockers."""
        ticket = Ticket(id="tk-0001", title="Title", priority=1)
        line = typer.unstyle(format_ticket_prioritized(ticket, ["tk-9"]))
        assert line == "tk-0001  [P1][open] - Title <- [tk-9]"
