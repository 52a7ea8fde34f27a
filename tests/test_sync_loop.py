"""Tests for the run loop and cancellation sources."""

import io
import os
import signal
import threading
import time
from pathlib import Path
from unittest.mock import Mock

import pytest

from pyfsync.exceptions import FilesystemError, TraversalError
from pyfsync.sync import SyncEngine, SyncMode
from pyfsync.sync.loop import (
    CancellationToken,
    QuitCommandListener,
    RunLoop,
    RunState,
    install_interrupt_handler,
    restore_signal_handlers,
)
from pyfsync.sync.reconciler import create_empty_stats


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_starts_uncancelled(self):
        assert not CancellationToken().is_cancelled

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()
        assert token.is_cancelled

    def test_wait_times_out(self):
        assert CancellationToken().wait(0.01) is False

    def test_wait_returns_when_cancelled_from_other_thread(self):
        token = CancellationToken()
        timer = threading.Timer(0.05, token.cancel)
        timer.start()
        try:
            start = time.monotonic()
            assert token.wait(10) is True
            assert time.monotonic() - start < 5
        finally:
            timer.cancel()


class TestRunLoop:
    """Tests for RunLoop."""

    @pytest.fixture
    def token(self):
        return CancellationToken()

    @pytest.fixture
    def mock_engine(self):
        """Create a mock sync engine returning empty statistics."""
        engine = Mock(spec=SyncEngine)
        engine.run.side_effect = lambda *args: create_empty_stats()
        return engine

    def _loop(self, engine, token, interval=0.0):
        return RunLoop(
            engine,
            Path("/src"),
            Path("/dst"),
            SyncMode.ONE_WAY,
            token,
            interval=interval,
        )

    def test_runs_until_cancelled(self, mock_engine, token):
        def run(*args):
            if mock_engine.run.call_count >= 3:
                token.cancel()
            return create_empty_stats()

        mock_engine.run.side_effect = run
        loop = self._loop(mock_engine, token)

        loop.run()

        assert loop.cycles == 3
        assert mock_engine.run.call_count == 3
        assert loop.state == RunState.STOPPED
        mock_engine.run.assert_called_with(Path("/src"), Path("/dst"), SyncMode.ONE_WAY)

    def test_no_cycle_when_cancelled_before_start(self, mock_engine, token):
        token.cancel()
        loop = self._loop(mock_engine, token)

        loop.run()

        mock_engine.run.assert_not_called()
        assert loop.state == RunState.STOPPED

    def test_running_cycle_finishes_after_cancel(self, mock_engine, token):
        """Cancellation during a cycle lets it complete and starts no other."""
        finished = []

        def run(*args):
            token.cancel()
            finished.append(True)
            return create_empty_stats()

        mock_engine.run.side_effect = run
        loop = self._loop(mock_engine, token, interval=60)

        start = time.monotonic()
        loop.run()

        assert finished == [True]
        assert loop.cycles == 1
        assert time.monotonic() - start < 5

    def test_failed_cycle_is_logged_and_loop_continues(
        self, mock_engine, token, caplog
    ):
        results = [FilesystemError("Failed to copy", "/dst/a.txt"), None]

        def run(*args):
            result = results.pop(0) if results else None
            if result is not None:
                raise result
            token.cancel()
            return create_empty_stats()

        mock_engine.run.side_effect = run
        loop = self._loop(mock_engine, token)

        loop.run()

        assert loop.cycles == 2
        assert loop.failures == 1
        errors = [r.message for r in caplog.records if r.levelname == "ERROR"]
        assert any("Synchronization failed" in m for m in errors)

    def test_traversal_error_does_not_stop_loop(self, mock_engine, token):
        calls = []

        def run(*args):
            calls.append(True)
            if len(calls) == 1:
                raise TraversalError("Cannot read directory", "/src/private")
            token.cancel()
            return create_empty_stats()

        mock_engine.run.side_effect = run
        loop = self._loop(mock_engine, token)

        loop.run()

        assert loop.cycles == 2
        assert loop.failures == 1

    def test_max_cycles(self, mock_engine, token):
        loop = self._loop(mock_engine, token)

        loop.run(max_cycles=2)

        assert loop.cycles == 2
        assert not token.is_cancelled
        assert loop.state == RunState.STOPPED

    def test_sleep_interrupted_by_cancel(self, mock_engine, token):
        """Shutdown does not wait out the full interval."""
        loop = self._loop(mock_engine, token, interval=60)
        timer = threading.Timer(0.05, token.cancel)
        timer.start()
        try:
            start = time.monotonic()
            loop.run()
            assert time.monotonic() - start < 5
        finally:
            timer.cancel()

        assert loop.cycles == 1

    def test_unexpected_error_propagates(self, mock_engine, token):
        mock_engine.run.side_effect = RuntimeError("bug")
        loop = self._loop(mock_engine, token)

        with pytest.raises(RuntimeError):
            loop.run()

        assert loop.state == RunState.STOPPED


class TestQuitCommandListener:
    """Tests for QuitCommandListener."""

    def test_quit_line_cancels(self):
        token = CancellationToken()
        listener = QuitCommandListener(token, io.StringIO("q\n"), poll_interval=0.01)

        listener.run()

        assert token.is_cancelled

    def test_other_lines_are_ignored(self):
        token = CancellationToken()
        stream = io.StringIO("hello\nquit\n q\nq\n")
        listener = QuitCommandListener(token, stream, poll_interval=0.001)

        listener.run()

        assert token.is_cancelled
        assert stream.read() == ""

    def test_windows_line_ending(self):
        token = CancellationToken()
        listener = QuitCommandListener(token, io.StringIO("q\r\n"), poll_interval=0.01)

        listener.run()

        assert token.is_cancelled

    def test_end_of_input_does_not_cancel(self):
        token = CancellationToken()
        listener = QuitCommandListener(
            token, io.StringIO("nothing\n"), poll_interval=0.001
        )

        listener.run()

        assert not token.is_cancelled

    def test_runs_as_daemon_thread(self):
        token = CancellationToken()
        listener = QuitCommandListener(token, io.StringIO("q\n"), poll_interval=0.01)

        assert listener.daemon
        listener.start()
        listener.join(timeout=5)

        assert not listener.is_alive()
        assert token.is_cancelled

    def test_stops_when_token_already_cancelled(self):
        token = CancellationToken()
        token.cancel()
        stream = io.StringIO("q\n")

        QuitCommandListener(token, stream).run()

        assert stream.read() == "q\n"


class TestInterruptHandler:
    """Tests for install_interrupt_handler."""

    def test_signal_cancels_token(self):
        token = CancellationToken()
        previous = install_interrupt_handler(token, signals=(signal.SIGINT,))
        try:
            handler = signal.getsignal(signal.SIGINT)
            handler(signal.SIGINT, None)
        finally:
            restore_signal_handlers(previous)

        assert token.is_cancelled

    def test_restore_reinstalls_previous_handler(self):
        original = signal.getsignal(signal.SIGINT)
        previous = install_interrupt_handler(CancellationToken())

        assert signal.getsignal(signal.SIGINT) is not original
        restore_signal_handlers(previous)

        assert signal.getsignal(signal.SIGINT) is original

    @pytest.mark.skipif(not hasattr(os, "kill"), reason="os.kill unavailable")
    def test_real_sigterm(self):
        token = CancellationToken()
        previous = install_interrupt_handler(token, signals=(signal.SIGTERM,))
        try:
            os.kill(os.getpid(), signal.SIGTERM)
            # The Python-level handler runs on the next bytecode boundary
            assert token.wait(5)
        finally:
            restore_signal_handlers(previous)

    def test_outside_main_thread_raises(self):
        errors = []

        def target():
            try:
                install_interrupt_handler(CancellationToken())
            except ValueError as e:
                errors.append(e)

        thread = threading.Thread(target=target)
        thread.start()
        thread.join()

        assert len(errors) == 1
