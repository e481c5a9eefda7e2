"""Terminal front end for the Deploykit installation daemon."""

from .__version__ import __version__


__all__ = ["__version__"]
