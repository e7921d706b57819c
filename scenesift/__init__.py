"""Torrent-to-scene matching and quality-profile selection."""

from scenesift.__version__ import __version__

__all__ = ["__version__"]
