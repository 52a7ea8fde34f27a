"""Exceptions raised by pyfsync."""

from pathlib import Path
from typing import Optional, Union


class SyncError(Exception):
    """Base exception for all synchronization errors.

    Every error carries the offending path and, where one exists, the
    underlying cause (usually an ``OSError``).
    """

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None
        self.cause = cause

    def __str__(self) -> str:
        text = self.message
        if self.path is not None:
            text = f"{text}: {self.path}"
        if self.cause is not None:
            text = f"{text} ({self.cause})"
        return text


class FilesystemError(SyncError):
    """Opening, reading, writing, creating or removing an entry failed."""


class PathError(SyncError):
    """A path could not be expressed relative to its expected root."""


class TraversalError(SyncError):
    """Enumerating a directory failed (missing root, permission denied)."""
