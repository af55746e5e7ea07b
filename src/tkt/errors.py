"""Exception types raised by the ticket store and resolver."""

from __future__ import annotations


class TicketError(Exception):
    """Base class for all ticket tracker errors."""


class TicketNotFoundError(TicketError, LookupError):
    """No stored ticket matches the given identifier."""

    def __init__(self, ticket_id: str) -> None:
        self.ticket_id = ticket_id
        super().__init__(f"ticket '{ticket_id}' not found")


class AmbiguousTicketIDError(TicketError, ValueError):
    """A partial identifier matches more than one stored ticket."""

    def __init__(self, ticket_id: str, matches: list[str]) -> None:
        self.ticket_id = ticket_id
        self.matches = list(matches)
        super().__init__(
            f"ambiguous ID '{ticket_id}' matches multiple tickets: "
            f"{', '.join(self.matches)}",
        )


class TicketExistsError(TicketError, FileExistsError):
    """A ticket file already exists at the path derived from an ID."""

    def __init__(self, ticket_id: str) -> None:
        self.ticket_id = ticket_id
        super().__init__(f"ticket '{ticket_id}' already exists")


class StorageError(TicketError, RuntimeError):
    """A filesystem operation on the tickets directory failed."""


class MalformedTicketError(TicketError, ValueError):
    """A ticket file could not be parsed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
