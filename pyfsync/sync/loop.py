"""Periodic run loop and cooperative shutdown.

The loop runs sync cycles back to back with a fixed pause in between until
a CancellationToken is cancelled. Cancellation comes from an OS signal
(see install_interrupt_handler) or from a ``q`` line on standard input
(see QuitCommandListener). A running cycle is never interrupted; the loop
only checks the token between cycles and around the pause.
"""

import logging
import signal
import sys
import threading
import time
from enum import Enum
from pathlib import Path
from typing import Any, Optional, TextIO

from ..exceptions import SyncError
from ..utils import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SYNC_INTERVAL,
    QUIT_COMMAND,
    format_size,
)
from .engine import SyncEngine
from .modes import SyncMode

logger = logging.getLogger(__name__)


class CancellationToken:
    """Shared stop flag, safe to set from signal handlers and other threads."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Sleep until cancelled or until ``timeout`` seconds have passed.

        Returns:
            True if the token is cancelled
        """
        return self._event.wait(timeout)


class RunState(str, Enum):
    """Lifecycle of a RunLoop."""

    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class RunLoop:
    """Runs sync cycles at a fixed interval until cancelled.

    A failed cycle is logged and counted, then the loop carries on with the
    next one. Only cancellation ends the loop (or ``max_cycles``).
    """

    def __init__(
        self,
        engine: SyncEngine,
        source_root: Path,
        destination_root: Path,
        mode: SyncMode,
        token: CancellationToken,
        interval: float = DEFAULT_SYNC_INTERVAL,
    ):
        """Initialize run loop.

        Args:
            engine: Sync engine invoked once per cycle
            source_root: Source directory
            destination_root: Destination directory
            mode: Sync mode passed to the engine
            token: Cancellation token checked between cycles
            interval: Pause between cycles in seconds
        """
        self.engine = engine
        self.source_root = source_root
        self.destination_root = destination_root
        self.mode = mode
        self.token = token
        self.interval = interval
        self.state = RunState.RUNNING
        self.cycles = 0
        self.failures = 0

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Run cycles until cancelled.

        Args:
            max_cycles: Stop after this many cycles (None runs forever)
        """
        self.state = RunState.RUNNING
        try:
            while not self.token.is_cancelled:
                self._run_cycle()

                if max_cycles is not None and self.cycles >= max_cycles:
                    break
                if self.token.is_cancelled:
                    break
                self.token.wait(self.interval)

            if self.token.is_cancelled:
                self.state = RunState.STOPPING
                logger.info("Stopping after %d cycle(s)", self.cycles)
        finally:
            self.state = RunState.STOPPED

    def _run_cycle(self) -> None:
        self.cycles += 1
        start = time.time()
        try:
            stats = self.engine.run(self.source_root, self.destination_root, self.mode)
        except SyncError as e:
            self.failures += 1
            logger.error(f"Synchronization failed: {e}")
            return

        elapsed = time.time() - start
        logger.debug(
            f"Cycle {self.cycles} finished in {elapsed:.2f}s: "
            f"{stats['created_dirs']} dir(s) created, "
            f"{stats['copied']} file(s) copied ({format_size(stats['bytes_copied'])}), "
            f"{stats['skipped']} unchanged, "
            f"{stats['deleted_files']} file(s) and "
            f"{stats['deleted_dirs']} dir(s) removed"
        )


class QuitCommandListener(threading.Thread):
    """Reads lines from a stream and cancels the token on ``q``.

    Runs as a daemon thread so a reader blocked on standard input never
    keeps the process alive. End of input stops the listener without
    cancelling anything.
    """

    def __init__(
        self,
        token: CancellationToken,
        stream: Optional[TextIO] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        super().__init__(name="pyfsync-quit-listener", daemon=True)
        self.token = token
        self.stream = stream if stream is not None else sys.stdin
        self.poll_interval = poll_interval

    def run(self) -> None:
        while not self.token.is_cancelled:
            line = self.stream.readline()
            if not line:
                logger.debug("Input closed, quit command unavailable")
                return

            if line.rstrip("\r\n") == QUIT_COMMAND:
                logger.info("Quit command received")
                self.token.cancel()
                return

            self.token.wait(self.poll_interval)


def install_interrupt_handler(
    token: CancellationToken,
    signals: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM),
) -> dict[int, Any]:
    """Cancel ``token`` when one of ``signals`` is received.

    Must be called from the main thread.

    Args:
        token: Token to cancel
        signals: Signals to handle

    Returns:
        Previous handlers keyed by signal number, for restore_signal_handlers

    Raises:
        ValueError: If called outside the main thread
    """

    def handler(signum: int, frame: Any) -> None:
        logger.info(f"Received signal {signum}, stopping after the current cycle")
        token.cancel()

    previous: dict[int, Any] = {}
    for sig in signals:
        previous[int(sig)] = signal.signal(sig, handler)
    return previous


def restore_signal_handlers(previous: dict[int, Any]) -> None:
    """Reinstall handlers returned by install_interrupt_handler."""
    for signum, handler in previous.items():
        if handler is not None:
            signal.signal(signum, handler)
