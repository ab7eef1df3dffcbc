"""
Error types raised by the release store, the loader and the reload supervisor.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class ReleaseStoreError(Exception):
    """Base class for all release store errors."""


class ValidationError(ReleaseStoreError, ValueError):
    """A candidate release is missing a required field."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"`{field}` not set on write")


class MalformedInputError(ReleaseStoreError, ValueError):
    """The backing blob could not be parsed into a release document."""


class DatabaseFileError(ReleaseStoreError, OSError):
    """The backing file could not be stat'ed or read."""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")
