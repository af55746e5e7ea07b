"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest

from tkt.models import Ticket
from tkt.storage import FileStorage

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

# Fixed creation time so formatted files are predictable
CREATED = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment and git identity out of tests."""
    monkeypatch.delenv("TICKETS_DIR", raising=False)
    monkeypatch.setattr("tkt.cli._cmd_create.get_default_assignee", lambda: None)


@pytest.fixture
def tickets_dir(tmp_path: Path) -> Path:
    """Create a temporary .tickets directory for testing."""
    path = tmp_path / ".tickets"
    path.mkdir()
    return path


@pytest.fixture
def storage(tickets_dir: Path) -> FileStorage:
    """Create a storage instance bound to the temporary directory."""
    return FileStorage(tickets_dir)


@pytest.fixture
def make_ticket(storage: FileStorage) -> Callable[..., Ticket]:
    """Factory that creates and persists a ticket."""

    def _make(ticket_id: str, title: str | None = None, **kwargs: Any) -> Ticket:
        kwargs.setdefault("created", CREATED)
        ticket = Ticket(id=ticket_id, title=title or f"Ticket {ticket_id}", **kwargs)
        return storage.create(ticket)

    return _make
