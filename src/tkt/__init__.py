"""tk - minimal file-based ticket tracking with dependency trees."""

from tkt._version import version as __version__

__all__ = ["__version__"]
