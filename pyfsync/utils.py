"""Utility functions for pyfsync."""

import hashlib
from pathlib import Path
from typing import Union

# =============================================================================
# Constants
# =============================================================================

# Pause between two sync cycles (seconds)
DEFAULT_SYNC_INTERVAL: float = 10.0

# How often the quit command reader checks for input (seconds)
DEFAULT_POLL_INTERVAL: float = 1.0

# Read size used when hashing file contents (1 MB)
DEFAULT_HASH_CHUNK_SIZE: int = 1024 * 1024

# Literal line that requests shutdown
QUIT_COMMAND: str = "q"


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


# =============================================================================
# Hash calculation utilities
# =============================================================================


def calculate_file_hash(
    file_path: Union[str, Path], chunk_size: int = DEFAULT_HASH_CHUNK_SIZE
) -> str:
    """Calculate the SHA-256 digest of a file's contents.

    The file is read in fixed-size chunks so large files never have to fit
    in memory.

    Args:
        file_path: File to hash
        chunk_size: Number of bytes read per chunk

    Returns:
        Hex encoded digest

    Raises:
        OSError: If the file cannot be opened or read

    Examples:
        >>> calculate_file_hash("empty.txt")  # doctest: +SKIP
        'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
    """
    if chunk_size < 1:
        raise ValueError(f"Chunk size must be positive, got {chunk_size}")

    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            hasher.update(chunk)
    return hasher.hexdigest()
