"""PopcornPal - terminal client for a media catalog with AI watch suggestions."""

from popcornpal.__version__ import __version__

__all__ = ["__version__"]
