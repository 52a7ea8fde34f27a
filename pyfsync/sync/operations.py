"""Filesystem operations applied during a sync pass."""

import logging
import shutil
from pathlib import Path

from ..exceptions import FilesystemError

logger = logging.getLogger(__name__)


class SyncOperations:
    """Create, copy and remove entries, reporting each change.

    Every ``OSError`` is re-raised as a FilesystemError naming the path that
    failed, which aborts the running pass.
    """

    def create_directory(self, path: Path) -> None:
        """Create a directory and any missing parents.

        Args:
            path: Directory to create
        """
        logger.info(f"Creating directory: {path}")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError("Failed to create directory", path, e) from e

    def copy_file(self, source: Path, destination: Path) -> int:
        """Copy a file's bytes and metadata, overwriting the destination.

        The modification time is preserved so the copy is not seen as newer
        than its original on the next pass.

        Args:
            source: File to copy
            destination: Target path

        Returns:
            Number of bytes copied
        """
        logger.info(f"Copying file from {source} to {destination}")
        try:
            # copyfile refuses a directory target instead of copying into it
            shutil.copyfile(source, destination)
            shutil.copystat(source, destination)
            return destination.stat().st_size
        except OSError as e:
            raise FilesystemError(f"Failed to copy {source}", destination, e) from e

    def delete_file(self, path: Path) -> None:
        """Remove a single file.

        Args:
            path: File to remove
        """
        logger.info(f"Removing file: {path}")
        try:
            path.unlink()
        except OSError as e:
            raise FilesystemError("Failed to remove file", path, e) from e

    def delete_directory(self, path: Path) -> None:
        """Remove a directory and everything below it.

        Args:
            path: Directory to remove
        """
        logger.info(f"Removing directory: {path}")
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise FilesystemError("Failed to remove directory", path, e) from e
