"""Directory tree walking for sync passes."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from stat import S_ISDIR, S_ISLNK
from typing import Iterator, Optional, Union

from ..exceptions import PathError, TraversalError

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    """Kind of a filesystem entry."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass
class Entry:
    """A file or directory found under a root."""

    path: Path
    """Absolute path to the entry"""

    relative_path: str
    """Path relative to the walked root (forward slashes on all platforms)"""

    kind: EntryKind
    """File or directory"""

    size: int = 0
    """File size in bytes (0 for directories)"""

    mtime: Optional[float] = None
    """Last modification time (Unix timestamp), files only"""

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE

    @property
    def parts(self) -> tuple[str, ...]:
        """Relative path as a sequence of segments."""
        return tuple(self.relative_path.split("/"))

    @classmethod
    def from_path(cls, entry_path: Path, base_path: Path) -> "Entry":
        """Create an Entry from a path below ``base_path``.

        A symbolic link whose target is missing is reported as a file with
        the link's own size and modification time.

        Args:
            entry_path: Absolute path to the file or directory
            base_path: Root the relative path is computed against

        Returns:
            Entry instance

        Raises:
            PathError: If ``entry_path`` is not below ``base_path``
            OSError: If the entry cannot be stat'ed
        """
        try:
            relative_path = entry_path.relative_to(base_path).as_posix()
        except ValueError as e:
            raise PathError(
                f"Path is not relative to root {base_path}", entry_path, e
            ) from e

        try:
            stat = entry_path.stat()
        except FileNotFoundError:
            # Dangling symlink: report the link itself so it can be removed
            stat = entry_path.lstat()
            if not S_ISLNK(stat.st_mode):
                raise
        if S_ISDIR(stat.st_mode):
            return cls(
                path=entry_path,
                relative_path=relative_path,
                kind=EntryKind.DIRECTORY,
            )
        return cls(
            path=entry_path,
            relative_path=relative_path,
            kind=EntryKind.FILE,
            size=stat.st_size,
            mtime=stat.st_mtime,
        )


class DirectoryScanner:
    """Walks a directory tree and yields its entries.

    The walk is depth-first and top-down: a directory is always yielded
    before anything it contains. It keeps an explicit stack, so deep trees
    do not run into the interpreter's recursion limit. Entries within one
    directory are visited in name order so repeated walks of an unchanged
    tree are identical.

    The walk is lazy. Callers that stop iterating early (for example on the
    first error) never enumerate the rest of the tree.

    Symbolic links are reported as what they point to, but linked
    directories are not descended into. A dangling link is reported as a
    file.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> for entry in scanner.walk(Path("/data/photos")):
        ...     print(entry.kind.value, entry.relative_path)
    """

    def walk(self, root: Union[str, Path]) -> Iterator[Entry]:
        """Walk every file and directory under ``root``.

        The root itself is not yielded.

        Args:
            root: Directory to walk

        Yields:
            Entry objects in top-down, depth-first order

        Raises:
            TraversalError: If the root does not exist or a directory
                cannot be enumerated
            PathError: If an entry escapes the root
        """
        base_path = Path(root)
        if not base_path.is_dir():
            raise TraversalError("Root is not an existing directory", base_path)

        logger.debug("Walking %s", base_path)
        yield from self._walk_directory(base_path, base_path)

    def _walk_directory(self, directory: Path, base_path: Path) -> Iterator[Entry]:
        # One pending-children iterator per open directory, deepest last
        stack = [iter(self._list_directory(directory))]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                continue

            try:
                entry = Entry.from_path(child, base_path)
            except OSError as e:
                raise TraversalError("Cannot read entry", child, e) from e

            yield entry

            if entry.is_dir and not child.is_symlink():
                stack.append(iter(self._list_directory(child)))

    def _list_directory(self, directory: Path) -> list[Path]:
        """List the children of a directory sorted by name.

        Raises:
            TraversalError: If the directory cannot be read
        """
        try:
            with os.scandir(directory) as it:
                names = sorted(item.name for item in it)
        except OSError as e:
            raise TraversalError("Cannot read directory", directory, e) from e

        return [directory / name for name in names]
