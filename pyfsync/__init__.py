"""PyFSync - periodic one-way or two-way mirroring of directory trees."""

from .exceptions import FilesystemError, PathError, SyncError, TraversalError
from .sync import SyncEngine, SyncMode
from .utils import calculate_file_hash, format_size

__all__ = [
    "SyncEngine",
    "SyncMode",
    "SyncError",
    "FilesystemError",
    "PathError",
    "TraversalError",
    "calculate_file_hash",
    "format_size",
]
