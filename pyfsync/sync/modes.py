"""Sync modes: direction and deletion policy."""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class SyncMode(str, Enum):
    """How changes propagate between the two roots.

    Each mode is a (direction, delete) pair:

    - ``one``: source -> destination, delete extraneous destination entries
    - ``bi``: source -> destination, then destination -> source, deleting
    - ``one+no_delete``: source -> destination, keep extraneous entries
    - ``bi+no_delete``: both directions, keep extraneous entries
    """

    ONE_WAY = "one"
    BI_DIRECTIONAL = "bi"
    ONE_WAY_KEEP = "one+no_delete"
    BI_DIRECTIONAL_KEEP = "bi+no_delete"

    @property
    def is_bidirectional(self) -> bool:
        """Whether a second pass runs from destination back to source."""
        return self in (SyncMode.BI_DIRECTIONAL, SyncMode.BI_DIRECTIONAL_KEEP)

    @property
    def delete_extraneous(self) -> bool:
        """Whether entries missing from the pass source are removed."""
        return self in (SyncMode.ONE_WAY, SyncMode.BI_DIRECTIONAL)

    @classmethod
    def from_string(cls, value: str) -> "SyncMode":
        """Parse a mode string as given on the command line.

        Args:
            value: One of ``one``, ``bi``, ``one+no_delete``, ``bi+no_delete``

        Returns:
            Matching SyncMode

        Raises:
            ValueError: If the value is not a known mode
        """
        normalized = value.strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode

        logger.debug("Invalid sync mode: %r", value)
        valid = ", ".join(mode.value for mode in cls)
        raise ValueError(f"Invalid sync mode: {value!r} (expected one of: {valid})")

    def __str__(self) -> str:
        return self.value
