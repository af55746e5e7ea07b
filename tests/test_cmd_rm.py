"""Tests for the rm command."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cli_test_helpers import _tk

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from tkt.models import Ticket
    from tkt.storage import FileStorage


class TestRemove:
    """Test ticket deletion safety checks."""

    def test_delete_unreferenced(
        self,
        tickets_dir: Path,
        storage: FileStorage,
        make_ticket: Callable[..., Ticket],
    ) -> None:
        """A ticket nothing points at is deleted."""
        make_ticket("tk-a111")

        result = _tk(tickets_dir, "rm", "a111")

        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "Deleted ticket: tk-a111"
        assert not storage.exists("tk-a111")

    def test_refuses_with_dependants(
        self,
        tickets_dir: Path,
        storage: FileStorage,
        make_ticket: Callable[..., Ticket],
    ) -> None:
        """Tickets that others depend on are kept, even with --force."""
        make_ticket("tk-a111", "Base")
        make_ticket("tk-b222", "Needs base", deps=["tk-a111"])

        result = _tk(tickets_dir, "rm", "--force", "tk-a111")

        assert result.exit_code == 1
        assert "cannot delete tk-a111: ticket has dependants" in result.output
        assert "tk-b222 [open] Needs base" in result.output
        assert storage.exists("tk-a111")

    def test_refuses_with_children(
        self,
        tickets_dir: Path,
        storage: FileStorage,
        make_ticket: Callable[..., Ticket],
    ) -> None:
        """Parents of other tickets are kept."""
        make_ticket("tk-epic")
        make_ticket("tk-task", parent="tk-epic")

        result = _tk(tickets_dir, "rm", "tk-epic")

        assert result.exit_code == 1
        assert "ticket has children" in result.output
        assert storage.exists("tk-epic")

    def test_links_need_force(
        self,
        tickets_dir: Path,
        storage: FileStorage,
        make_ticket: Callable[..., Ticket],
    ) -> None:
        """Linked tickets require --force."""
        make_ticket("tk-a111", links=["tk-b222"])
        make_ticket("tk-b222", links=["tk-a111"])

        result = _tk(tickets_dir, "rm", "tk-a111")

        assert result.exit_code == 1
        assert "ticket has links" in result.output
        assert "--force" in result.output
        assert storage.exists("tk-a111")

    def test_force_removes_links(
        self,
        tickets_dir: Path,
        storage: FileStorage,
        make_ticket: Callable[..., Ticket],
    ) -> None:
        """--force unlinks the other side first, skipping missing tickets."""
        make_ticket("tk-a111", links=["tk-b222", "tk-gone"])
        make_ticket("tk-b222", links=["tk-a111"])

        result = _tk(tickets_dir, "rm", "-f", "tk-a111")

        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "Removed 1 link(s) and deleted ticket: tk-a111"
        assert not storage.exists("tk-a111")
        assert storage.get("tk-b222").links == []
