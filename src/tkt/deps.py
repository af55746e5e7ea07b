"""Dependency queries: ready work, blocked work, and dangling references."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tkt.models import Status
from tkt.parser import format_id_list

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tkt.models import Ticket
    from tkt.storage import FileStorage


@dataclass
class BlockedTicket:
    """A ticket that still waits on unclosed dependencies."""

    ticket: Ticket
    blockers: list[str]


@dataclass
class DanglingRefs:
    """References from one ticket to tickets that no longer exist."""

    ticket: Ticket
    deps: list[str] = field(default_factory=list[str])
    links: list[str] = field(default_factory=list[str])
    parent: str | None = None

    def count(self) -> int:
        """Total number of dangling references."""
        return len(self.deps) + len(self.links) + (1 if self.parent else 0)


def _by_priority(ticket: Ticket) -> tuple[int, str]:
    return ticket.priority, ticket.id


def _status_map(tickets: Iterable[Ticket]) -> dict[str, Status]:
    return {t.id: t.status for t in tickets}


def get_ready(tickets: list[Ticket]) -> list[Ticket]:
    """Get active tickets whose dependencies are all closed.

    A dependency on a missing ticket counts as unresolved.

    Returns:
        Ready tickets sorted by priority, then ID
    """
    statuses = _status_map(tickets)
    ready = [
        t
        for t in tickets
        if t.is_active() and all(statuses.get(dep) == Status.CLOSED for dep in t.deps)
    ]
    ready.sort(key=_by_priority)
    return ready


def get_blocked(tickets: list[Ticket]) -> list[BlockedTicket]:
    """Get active tickets with at least one unclosed dependency.

    Returns:
        Blocked tickets with only their unclosed blockers, sorted by
        priority, then ID
    """
    statuses = _status_map(tickets)
    blocked: list[BlockedTicket] = []
    for t in tickets:
        if not t.is_active():
            continue
        blockers = [dep for dep in t.deps if statuses.get(dep) != Status.CLOSED]
        if blockers:
            blocked.append(BlockedTicket(ticket=t, blockers=blockers))
    blocked.sort(key=lambda b: _by_priority(b.ticket))
    return blocked


def find_dependants(tickets: list[Ticket], target_id: str) -> list[Ticket]:
    """Return tickets that list ``target_id`` in their deps."""
    return [t for t in tickets if t.id != target_id and target_id in t.deps]


def find_children(tickets: list[Ticket], target_id: str) -> list[Ticket]:
    """Return tickets whose parent is ``target_id``."""
    return [t for t in tickets if t.parent == target_id]


def find_dangling(tickets: list[Ticket]) -> list[DanglingRefs]:
    """Find deps, links, and parents that name tickets not in the store."""
    valid_ids = {t.id for t in tickets}
    result: list[DanglingRefs] = []
    for t in tickets:
        refs = DanglingRefs(
            ticket=t,
            deps=[dep for dep in t.deps if dep not in valid_ids],
            links=[link for link in t.links if link not in valid_ids],
            parent=t.parent if t.parent and t.parent not in valid_ids else None,
        )
        if refs.count():
            result.append(refs)
    return result


def prune_dangling(storage: FileStorage, dangling: list[DanglingRefs]) -> int:
    """Remove dangling references from the affected tickets.

    Deps and links are patched in place; a dangling parent requires a full
    rewrite because the header line is dropped rather than emptied.

    Returns:
        Number of references removed
    """
    removed = 0
    for refs in dangling:
        ticket = refs.ticket
        if refs.parent:
            ticket.deps = [d for d in ticket.deps if d not in refs.deps]
            ticket.links = [lnk for lnk in ticket.links if lnk not in refs.links]
            ticket.parent = None
            storage.update(ticket)
        else:
            if refs.deps:
                kept = [d for d in ticket.deps if d not in refs.deps]
                storage.update_field(ticket.id, "deps", format_id_list(kept))
            if refs.links:
                kept = [lnk for lnk in ticket.links if lnk not in refs.links]
                storage.update_field(ticket.id, "links", format_id_list(kept))
        removed += refs.count()
    return removed
