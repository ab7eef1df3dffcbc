"""
Release channel lookup service.

Maps a (container, release channel) pair to a fully-qualified image reference,
served from an in-memory index that is rebuilt whenever the backing JSON file
changes on disk.
"""

__version__ = "0.1.0"
