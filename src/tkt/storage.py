"""File-per-ticket storage with atomic writes."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from tkt.constants import DEFAULT_TICKETS_DIR
from tkt.errors import (
    MalformedTicketError,
    StorageError,
    TicketError,
    TicketExistsError,
)
from tkt.models import Ticket
from tkt.parser import format_ticket, parse_ticket
from tkt.parser import update_field as patch_field
from tkt.resolver import IDResolver

logger = logging.getLogger(__name__)


class FileStorage:
    """Stores each ticket as a Markdown file named after its ID.

    Every mutation of an existing ticket writes a temporary file in the
    tickets directory and renames it over the target, so the canonical
    path only ever holds a complete old or a complete new record.
    There is no locking: concurrent writers to the same ticket race and
    the last rename wins.
    """

    def __init__(
        self,
        tickets_dir: str | Path = DEFAULT_TICKETS_DIR,
        resolver: IDResolver | None = None,
    ) -> None:
        """Initialize storage.

        Args:
            tickets_dir: Directory holding the ticket files. It does not
                need to exist until the first ticket is created.
            resolver: Resolver for partial IDs. Defaults to one bound to
                ``tickets_dir``.
        """
        self.tickets_dir = Path(tickets_dir)
        self.resolver = resolver or IDResolver(self.tickets_dir)

    # -- Internal helpers ------------------------------------------------

    def _path(self, ticket_id: str) -> Path:
        return self.resolver.path_for(ticket_id)

    def _read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            msg = f"Failed to read ticket {path}: {e}"
            raise StorageError(msg) from e

    def _read_ticket(self, path: Path) -> Ticket:
        return parse_ticket(self._read_text(path), str(path))

    def _write_temp(self, content: str, ticket_id: str) -> Path:
        """Write content to a fully synced temporary file next to the target."""
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.tickets_dir,
                prefix=f".{ticket_id}.",
                suffix=".tmp",
                delete=False,
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                try:
                    tmp_file.write(content)
                    tmp_file.flush()
                    os.fsync(tmp_file.fileno())
                except OSError:
                    tmp_path.unlink(missing_ok=True)
                    raise
        except OSError as e:
            msg = f"Failed to write temporary file for {ticket_id}: {e}"
            raise StorageError(msg) from e
        return tmp_path

    def _atomic_write(self, ticket_id: str, content: str) -> None:
        """Replace the ticket file with ``content`` via temp file + rename."""
        path = self._path(ticket_id)
        tmp_path = self._write_temp(content, ticket_id)
        try:
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            msg = f"Failed to rename temporary file over {path}: {e}"
            raise StorageError(msg) from e

    def ensure_dir(self) -> None:
        """Create the tickets directory if it doesn't exist."""
        try:
            self.tickets_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Failed to create tickets directory {self.tickets_dir}: {e}"
            raise StorageError(msg) from e

    # -- Public API ------------------------------------------------------

    def create(self, ticket: Ticket) -> Ticket:
        """Create a new ticket file.

        The record is written to a temporary file and then hard-linked to
        its canonical path, which fails if a file is already there. An
        existing ticket is never overwritten.

        Args:
            ticket: The ticket to persist

        Returns:
            The created ticket

        Raises:
            TicketExistsError: If a ticket with the same ID already exists
            StorageError: If the directory or file cannot be written
        """
        self.ensure_dir()
        path = self._path(ticket.id)
        tmp_path = self._write_temp(format_ticket(ticket), ticket.id)
        try:
            os.link(tmp_path, path)
        except FileExistsError:
            raise TicketExistsError(ticket.id) from None
        except OSError as e:
            msg = f"Failed to create ticket file {path}: {e}"
            raise StorageError(msg) from e
        finally:
            tmp_path.unlink(missing_ok=True)

        logger.debug("Created ticket %s at %s", ticket.id, path)
        return ticket

    def get(self, id_or_partial: str) -> Ticket:
        """Get a ticket by full or partial ID.

        Raises:
            TicketNotFoundError: If nothing matches
            AmbiguousTicketIDError: If several tickets match
            MalformedTicketError: If the ticket file cannot be parsed
        """
        ticket_id = self.resolver.resolve(id_or_partial)
        return self._read_ticket(self._path(ticket_id))

    def exists(self, ticket_id: str) -> bool:
        """Check whether a ticket file exists for an exact ID."""
        return self._path(ticket_id).is_file()

    def ids(self) -> list[str]:
        """Return every stored ticket ID in directory enumeration order."""
        return list(self.resolver.iter_ids())

    def path(self, id_or_partial: str) -> Path:
        """Return the file path for a full or partial ticket ID."""
        return self._path(self.resolver.resolve(id_or_partial))

    def list(self) -> list[Ticket]:
        """List all tickets.

        Files that cannot be read or parsed are skipped with a warning so
        one corrupt ticket does not hide the rest. A missing tickets
        directory yields an empty list.
        """
        tickets: list[Ticket] = []
        for ticket_id in self.resolver.iter_ids():
            ticket = self._load_quietly(self._path(ticket_id))
            if ticket is not None:
                tickets.append(ticket)
        return tickets

    def list_by_mtime(self, limit: int = 0) -> list[Ticket]:
        """List tickets by modification time, most recent first.

        Args:
            limit: Maximum number of tickets to return; zero or negative
                means unlimited.
        """
        stamped: list[tuple[int, Path]] = []
        for ticket_id in self.resolver.iter_ids():
            path = self._path(ticket_id)
            try:
                stamped.append((path.stat().st_mtime_ns, path))
            except OSError:
                continue
        stamped.sort(key=lambda item: item[0], reverse=True)

        tickets: list[Ticket] = []
        for _, path in stamped:
            if limit > 0 and len(tickets) >= limit:
                break
            ticket = self._load_quietly(path)
            if ticket is not None:
                tickets.append(ticket)
        return tickets

    def _load_quietly(self, path: Path) -> Ticket | None:
        try:
            return self._read_ticket(path)
        except (MalformedTicketError, StorageError) as e:
            logger.warning("Skipping unreadable ticket %s: %s", path, e)
            return None

    def load_all(self) -> dict[str, Ticket]:
        """Return every readable ticket keyed by ID."""
        return {ticket.id: ticket for ticket in self.list()}

    def update(self, ticket: Ticket) -> Ticket:
        """Rewrite a whole ticket atomically.

        Raises:
            StorageError: If the temporary file or the rename fails; the
                previous content stays in place
        """
        self._atomic_write(ticket.id, format_ticket(ticket))
        logger.debug("Updated ticket %s", ticket.id)
        return ticket

    def update_field(self, id_or_partial: str, field: str, value: str) -> str:
        """Patch a single header field in place, preserving everything else.

        Args:
            id_or_partial: Full or partial ticket ID
            field: Header key, e.g. ``status`` or ``deps``
            value: Already formatted value, e.g. ``closed`` or ``[a, b]``

        Returns:
            The resolved full ticket ID
        """
        ticket_id = self.resolver.resolve(id_or_partial)
        path = self._path(ticket_id)
        content = self._read_text(path)
        try:
            new_content = patch_field(content, field, value)
        except MalformedTicketError as e:
            raise MalformedTicketError(str(e), str(path)) from e
        self._atomic_write(ticket_id, new_content)
        logger.debug("Set %s=%s on ticket %s", field, value, ticket_id)
        return ticket_id

    def read_raw(self, id_or_partial: str) -> tuple[str, str]:
        """Return ``(ticket_id, raw file content)`` for a ticket."""
        ticket_id = self.resolver.resolve(id_or_partial)
        return ticket_id, self._read_text(self._path(ticket_id))

    def write_raw(self, ticket_id: str, content: str) -> None:
        """Atomically replace a ticket file with raw content."""
        self._atomic_write(ticket_id, content)

    def delete(self, id_or_partial: str) -> str:
        """Remove a ticket file.

        No relationship checks happen here; callers decide whether a
        deletion is safe.

        Returns:
            The resolved full ticket ID
        """
        ticket_id = self.resolver.resolve(id_or_partial)
        path = self._path(ticket_id)
        try:
            path.unlink()
        except OSError as e:
            msg = f"Failed to delete ticket {path}: {e}"
            raise StorageError(msg) from e
        logger.debug("Deleted ticket %s", ticket_id)
        return ticket_id


def require_tickets(storage: FileStorage) -> dict[str, Ticket]:
    """Load all tickets, failing if there are none."""
    tickets = storage.load_all()
    if not tickets:
        msg = "no tickets found"
        raise TicketError(msg)
    return tickets
