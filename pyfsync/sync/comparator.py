"""Staleness detection for sync passes."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..utils import DEFAULT_HASH_CHUNK_SIZE, calculate_file_hash
from .scanner import Entry

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Actions that can be taken during a sync pass."""

    CREATE_DIR = "create_dir"
    """Create a missing destination directory"""

    COPY = "copy"
    """Copy source file over the destination"""

    SKIP = "skip"
    """Nothing to do"""

    DELETE_FILE = "delete_file"
    """Remove a destination file without a source counterpart"""

    DELETE_DIR = "delete_dir"
    """Remove a destination subtree without a source counterpart"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync one entry."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    relative_path: str
    """Relative path of the entry"""

    destination: Path
    """Path of the entry under the destination root"""

    entry: Optional[Entry] = None
    """Source entry (None for deletions)"""


class FileComparator:
    """Decides whether destination entries are stale.

    A destination file needs an update when it is missing, when the source
    modification time is strictly newer, or, failing that, when the SHA-256
    digests of the source and destination contents differ. Timestamps are
    checked first so unchanged trees are only hashed when the timestamps
    cannot tell.
    """

    def __init__(self, chunk_size: int = DEFAULT_HASH_CHUNK_SIZE):
        """Initialize file comparator.

        Args:
            chunk_size: Read size used when hashing file contents
        """
        self.chunk_size = chunk_size

    def needs_update(self, entry: Entry, destination_root: Union[str, Path]) -> bool:
        """Check whether the destination copy of a source file is stale.

        Args:
            entry: Source file entry
            destination_root: Root the entry's relative path is joined onto

        Returns:
            True if the file must be copied
        """
        return self._check_file(entry, Path(destination_root)) is not None

    def compare(
        self, entry: Entry, destination_root: Union[str, Path]
    ) -> SyncDecision:
        """Determine the action for a single source entry.

        Args:
            entry: Source entry (file or directory)
            destination_root: Root of the tree being updated

        Returns:
            SyncDecision for this entry
        """
        destination_root = Path(destination_root)
        destination = destination_root / entry.relative_path

        if entry.is_dir:
            if destination.is_dir():
                return SyncDecision(
                    action=SyncAction.SKIP,
                    reason="Directory exists",
                    relative_path=entry.relative_path,
                    destination=destination,
                    entry=entry,
                )
            return SyncDecision(
                action=SyncAction.CREATE_DIR,
                reason="New directory",
                relative_path=entry.relative_path,
                destination=destination,
                entry=entry,
            )

        reason = self._check_file(entry, destination_root)
        if reason is None:
            return SyncDecision(
                action=SyncAction.SKIP,
                reason="Files are identical",
                relative_path=entry.relative_path,
                destination=destination,
                entry=entry,
            )
        return SyncDecision(
            action=SyncAction.COPY,
            reason=reason,
            relative_path=entry.relative_path,
            destination=destination,
            entry=entry,
        )

    def _check_file(self, entry: Entry, destination_root: Path) -> Optional[str]:
        """Return why the destination file is stale, or None if it is not."""
        destination = destination_root / entry.relative_path

        try:
            dest_stat = destination.stat()
        except OSError:
            return "New file"

        if entry.mtime is not None and entry.mtime > dest_stat.st_mtime:
            return "Source file is newer"

        # Timestamps are inconclusive, compare contents
        try:
            source_hash = calculate_file_hash(entry.path, self.chunk_size)
            dest_hash = calculate_file_hash(destination, self.chunk_size)
        except OSError as e:
            logger.debug(f"Hashing failed for {entry.relative_path}: {e}")
            return "Could not compare contents"

        if source_hash != dest_hash:
            return "Contents differ"
        return None
