"""Cap desktop process bootstrap."""

from cap_desktop.version import __version__

__all__ = ["__version__"]
