"""Core sync engine for executing sync cycles."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..exceptions import TraversalError
from .modes import SyncMode
from .reconciler import Reconciler, create_empty_stats

logger = logging.getLogger(__name__)


class SyncEngine:
    """Core sync engine that runs the reconciliation passes for a mode.

    One-way modes run a single source -> destination pass. Bidirectional
    modes run source -> destination and then destination -> source, always
    in that order; the second pass is skipped if the first one fails.

    There is no conflict detection. When both trees changed the same file
    between cycles, whatever the second pass writes is the result.
    """

    def __init__(self, reconciler: Optional[Reconciler] = None):
        """Initialize sync engine.

        Args:
            reconciler: Reconciler used for each pass
        """
        self.reconciler = reconciler or Reconciler()

    def run(
        self,
        source_root: Union[str, Path],
        destination_root: Union[str, Path],
        mode: SyncMode,
    ) -> dict:
        """Run one sync cycle.

        Args:
            source_root: Source directory
            destination_root: Destination directory
            mode: Sync mode to apply

        Returns:
            Dictionary with statistics summed over all passes, plus the
            number of passes run under ``"passes"``

        Raises:
            SyncError: If a pass fails; remaining passes are not run

        Examples:
            >>> engine = SyncEngine()
            >>> stats = engine.run(Path("/data"), Path("/backup"), SyncMode.ONE_WAY)
            >>> print(f"Copied {stats['copied']} file(s)")
        """
        source_root = Path(source_root)
        destination_root = Path(destination_root)

        passes = [(source_root, destination_root)]
        if mode.is_bidirectional:
            passes.append((destination_root, source_root))

        totals = create_empty_stats()
        totals["passes"] = 0
        for pass_source, pass_destination in passes:
            stats = self.reconciler.reconcile(
                pass_source, pass_destination, mode.delete_extraneous
            )
            for key, value in stats.items():
                totals[key] = totals.get(key, 0) + value
            totals["passes"] += 1

        return totals

    def check_roots(
        self, source_root: Union[str, Path], destination_root: Union[str, Path]
    ) -> None:
        """Verify that a pair of roots can be synced at all.

        The source must be a readable directory. The destination may be
        missing (it is created by the first pass) but must not be a file.

        Args:
            source_root: Source directory
            destination_root: Destination directory

        Raises:
            TraversalError: If a root is unusable
        """
        source_root = Path(source_root)
        destination_root = Path(destination_root)

        if not source_root.exists():
            raise TraversalError("Source directory does not exist", source_root)
        if not source_root.is_dir():
            raise TraversalError("Source path is not a directory", source_root)
        if not os.access(source_root, os.R_OK | os.X_OK):
            raise TraversalError("Source directory is not readable", source_root)
        if destination_root.exists() and not destination_root.is_dir():
            raise TraversalError(
                "Destination path is not a directory", destination_root
            )
        logger.debug("Roots checked: %s -> %s", source_root, destination_root)
