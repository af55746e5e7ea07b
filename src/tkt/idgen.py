"""Random ID generation for tickets."""

from __future__ import annotations

import re
import secrets
from typing import TYPE_CHECKING

from tkt.constants import ID_ALPHABET, ID_GENERATION_RETRIES, ID_SUFFIX_LENGTH
from tkt.errors import TicketError

if TYPE_CHECKING:
    from tkt.storage import FileStorage


def derive_prefix(directory_name: str) -> str:
    """Derive an ID prefix from a project directory name.

    Takes the first letter or digit of each ``-``/``_`` separated segment
    (``my-cool_project`` -> ``mcp``), falling back to the first three
    characters of the name.

    Args:
        directory_name: Base name of the project directory.

    Returns:
        Lowercase prefix string.
    """
    prefix = ""
    for segment in re.split(r"[-_]+", directory_name):
        for char in segment:
            if char.isalnum():
                prefix += char
                break

    if not prefix:
        prefix = directory_name[:3]
    return prefix.lower()


def random_suffix(length: int = ID_SUFFIX_LENGTH) -> str:
    """Return a random lowercase alphanumeric string."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def generate_id(prefix: str) -> str:
    """Generate a ticket ID of the form ``<prefix>-<4 random chars>``."""
    return f"{prefix}-{random_suffix()}"


def generate_unique_id(
    storage: FileStorage,
    prefix: str,
    max_retries: int = ID_GENERATION_RETRIES,
) -> str:
    """Generate an ID that no stored ticket uses yet.

    Args:
        storage: Store checked for collisions
        prefix: ID prefix
        max_retries: Attempts before giving up

    Raises:
        TicketError: If every attempt collided
    """
    for _ in range(max_retries):
        candidate = generate_id(prefix)
        if not storage.exists(candidate):
            return candidate
    msg = f"failed to generate unique ticket ID after {max_retries} attempts"
    raise TicketError(msg)
