"""One-directional reconciliation of a destination tree against a source tree."""

import logging
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from .comparator import FileComparator, SyncAction, SyncDecision
from .operations import SyncOperations
from .scanner import DirectoryScanner

logger = logging.getLogger(__name__)


def create_empty_stats() -> dict:
    """Create a statistics dictionary with every counter at zero."""
    return {
        "created_dirs": 0,
        "copied": 0,
        "skipped": 0,
        "deleted_files": 0,
        "deleted_dirs": 0,
        "bytes_copied": 0,
    }


class Reconciler:
    """Makes a destination tree mirror a source tree in one direction.

    A pass runs in three steps:

    1. If deletion is enabled, snapshot every relative path under the
       destination root.
    2. Walk the source top-down. Each entry is struck from the snapshot,
       missing directories are created and stale files are copied.
    3. If deletion is enabled, remove whatever is left in the snapshot.

    All creations and copies finish before the first removal. The first
    error aborts the pass; changes already applied are kept.
    """

    def __init__(
        self,
        scanner: Optional[DirectoryScanner] = None,
        comparator: Optional[FileComparator] = None,
        operations: Optional[SyncOperations] = None,
    ):
        """Initialize reconciler.

        Args:
            scanner: Tree walker used for both roots
            comparator: Staleness detector for files
            operations: Filesystem operations to apply changes with
        """
        self.scanner = scanner or DirectoryScanner()
        self.comparator = comparator or FileComparator()
        self.operations = operations or SyncOperations()

    def reconcile(
        self,
        source_root: Union[str, Path],
        destination_root: Union[str, Path],
        delete_enabled: bool,
    ) -> dict:
        """Run one reconciliation pass from ``source_root`` to ``destination_root``.

        Args:
            source_root: Tree to copy from
            destination_root: Tree to update
            delete_enabled: Remove destination entries absent from the source

        Returns:
            Dictionary with pass statistics

        Raises:
            TraversalError: If either tree cannot be enumerated
            FilesystemError: If a create, copy or remove fails
            PathError: If an entry escapes its root
        """
        source_root = Path(source_root)
        destination_root = Path(destination_root)
        stats = create_empty_stats()

        if not destination_root.is_dir():
            self.operations.create_directory(destination_root)
            stats["created_dirs"] += 1

        snapshot: Optional[set[str]] = None
        if delete_enabled:
            snapshot = {
                entry.relative_path for entry in self.scanner.walk(destination_root)
            }

        for entry in self.scanner.walk(source_root):
            if snapshot is not None:
                snapshot.discard(entry.relative_path)

            decision = self.comparator.compare(entry, destination_root)
            self._apply(decision, stats)

        if snapshot:
            self._delete_extraneous(snapshot, destination_root, stats)

        logger.debug(
            "Pass %s -> %s: %d dir(s) created, %d copied, %d skipped, "
            "%d file(s) removed, %d dir(s) removed",
            source_root,
            destination_root,
            stats["created_dirs"],
            stats["copied"],
            stats["skipped"],
            stats["deleted_files"],
            stats["deleted_dirs"],
        )
        return stats

    def _apply(self, decision: SyncDecision, stats: dict) -> None:
        """Apply a create/copy/skip decision for one source entry."""
        if decision.action == SyncAction.CREATE_DIR:
            self.operations.create_directory(decision.destination)
            stats["created_dirs"] += 1
        elif decision.action == SyncAction.COPY and decision.entry is not None:
            logger.debug(f"{decision.relative_path}: {decision.reason}")
            stats["bytes_copied"] += self.operations.copy_file(
                decision.entry.path, decision.destination
            )
            stats["copied"] += 1
        elif decision.entry is not None and decision.entry.is_file:
            logger.debug(f"Skipping unchanged file: {decision.entry.path}")
            stats["skipped"] += 1

    def _delete_extraneous(
        self, snapshot: set[str], destination_root: Path, stats: dict
    ) -> None:
        """Remove destination entries that no source entry accounted for.

        Paths are processed in sorted order so a directory comes before its
        contents; anything below an already removed directory is skipped.
        """
        removed_dirs: set[PurePosixPath] = set()

        for relative_path in sorted(snapshot):
            pure_path = PurePosixPath(relative_path)
            if any(parent in removed_dirs for parent in pure_path.parents):
                continue

            target = destination_root / relative_path
            if target.is_dir() and not target.is_symlink():
                self.operations.delete_directory(target)
                removed_dirs.add(pure_path)
                stats["deleted_dirs"] += 1
            else:
                self.operations.delete_file(target)
                stats["deleted_files"] += 1
