"""Shared infrastructure for tk CLI commands."""

from __future__ import annotations

import functools
import subprocess
from typing import TYPE_CHECKING, Any, TypeVar

import typer
from typer.core import TyperGroup

from tkt.config import resolve_tickets_dir
from tkt.errors import TicketError
from tkt.storage import FileStorage

from ._json_state import echo_error

if TYPE_CHECKING:
    from collections.abc import Callable

    import click

F = TypeVar("F", bound="Callable[..., Any]")

DIR_HELP = "Tickets directory (default: TICKETS_DIR or nearest .tickets)"


class SortedGroup(TyperGroup):
    """Typer group that lists commands in alphabetical order."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return commands sorted alphabetically."""
        return sorted(super().list_commands(ctx))


def get_storage(tickets_dir: str | None = None) -> FileStorage:
    """Build the storage for a command invocation.

    Args:
        tickets_dir: Explicit ``--dir`` value, if given.
    """
    return FileStorage(resolve_tickets_dir(tickets_dir))


@functools.lru_cache(maxsize=1)
def get_default_assignee() -> str | None:
    """Get the git ``user.name``, or None if git is unavailable or unset."""
    try:
        result = subprocess.run(
            ["git", "config", "user.name"],
            capture_output=True,
            text=True,
            check=False,
        )
    except (FileNotFoundError, OSError):
        return None
    name = result.stdout.strip()
    return name if result.returncode == 0 and name else None


def report_errors(fn: F) -> F:
    """Turn tracker errors into ``Error: ...`` output and exit code 1."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except typer.Exit:
            raise
        except (TicketError, ValueError) as e:
            echo_error(str(e))
            raise typer.Exit(1) from None

    return wrapper  # type: ignore[return-value]
