"""Partial ticket ID resolution."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from tkt.constants import TICKET_EXTENSION
from tkt.errors import AmbiguousTicketIDError, StorageError, TicketNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class IDResolver:
    """Maps a full or partial ticket ID to exactly one stored ticket ID."""

    def __init__(self, tickets_dir: str | Path) -> None:
        """Initialize the resolver.

        Args:
            tickets_dir: Directory holding one ``<id>.md`` file per ticket.
        """
        self.tickets_dir = Path(tickets_dir)

    def path_for(self, ticket_id: str) -> Path:
        """Return the file path for a full ticket ID."""
        return self.tickets_dir / f"{ticket_id}{TICKET_EXTENSION}"

    def iter_ids(self) -> Iterator[str]:
        """Yield every stored ticket ID in directory enumeration order.

        A missing tickets directory yields nothing.

        Raises:
            StorageError: If the directory exists but cannot be read.
        """
        try:
            entries = list(os.scandir(self.tickets_dir))
        except FileNotFoundError:
            return
        except OSError as e:
            msg = f"Failed to read tickets directory {self.tickets_dir}: {e}"
            raise StorageError(msg) from e

        for entry in entries:
            name = entry.name
            if not name.endswith(TICKET_EXTENSION) or entry.is_dir():
                continue
            yield name[: -len(TICKET_EXTENSION)]

    def resolve(self, partial_id: str) -> str:
        """Resolve a partial ID to a full ticket ID.

        An exact match always wins, even when other IDs also contain the
        input. Otherwise any ID containing the input as a substring is a
        candidate.

        Args:
            partial_id: Full or partial ticket ID (e.g. "tk-5c46" or "5c4")

        Returns:
            The full ticket ID.

        Raises:
            TicketNotFoundError: If no stored ID contains ``partial_id``.
            AmbiguousTicketIDError: If more than one stored ID contains it.
        """
        if _is_plain_id(partial_id) and self.path_for(partial_id).is_file():
            return partial_id

        matches = [tid for tid in self.iter_ids() if partial_id in tid]

        if not _is_plain_id(partial_id) or not matches:
            raise TicketNotFoundError(partial_id)
        if len(matches) > 1:
            logger.debug("Partial ID %r matched %d tickets", partial_id, len(matches))
            raise AmbiguousTicketIDError(partial_id, matches)
        return matches[0]

    def resolve_many(self, partial_ids: list[str]) -> list[str]:
        """Resolve several partial IDs in order, failing on the first error."""
        return [self.resolve(partial) for partial in partial_ids]


def _is_plain_id(value: str) -> bool:
    """Check that a value can name a file inside the tickets directory."""
    return bool(value) and "/" not in value and os.sep not in value
