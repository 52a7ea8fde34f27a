"""Sync engine for pyfsync - tree walking, reconciliation and the run loop."""

from .comparator import FileComparator, SyncAction, SyncDecision
from .engine import SyncEngine
from .loop import (
    CancellationToken,
    QuitCommandListener,
    RunLoop,
    RunState,
    install_interrupt_handler,
    restore_signal_handlers,
)
from .modes import SyncMode
from .operations import SyncOperations
from .reconciler import Reconciler
from .scanner import DirectoryScanner, Entry, EntryKind

__all__ = [
    "SyncEngine",
    "SyncMode",
    "SyncOperations",
    "Reconciler",
    "DirectoryScanner",
    "Entry",
    "EntryKind",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "CancellationToken",
    "QuitCommandListener",
    "RunLoop",
    "RunState",
    "install_interrupt_handler",
    "restore_signal_handlers",
]
