"""Resilient file sync to removable USB media players."""

from .__version__ import __version__


__all__ = ["__version__"]
