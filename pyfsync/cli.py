"""CLI interface for pyfsync."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .exceptions import TraversalError
from .output import OutputFormatter
from .sync import (
    CancellationToken,
    QuitCommandListener,
    RunLoop,
    SyncEngine,
    SyncMode,
    install_interrupt_handler,
    restore_signal_handlers,
)
from .utils import DEFAULT_POLL_INTERVAL, DEFAULT_SYNC_INTERVAL, QUIT_COMMAND

logger = logging.getLogger(__name__)


class SyncModeType(click.ParamType):
    """Click parameter type that parses a sync mode string."""

    name = "mode"

    def convert(
        self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]
    ) -> SyncMode:
        if isinstance(value, SyncMode):
            return value
        try:
            return SyncMode.from_string(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


def configure_logging(debug: bool) -> None:
    """Configure logging for the sync command.

    Args:
        debug: Enable debug output (skipped files, cycle statistics)
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("pyfsync").setLevel(level)


def _configure_logging_callback(ctx: Any, param: click.Parameter, value: bool) -> bool:
    # Eager, so logging is ready before MODE is converted
    configure_logging(value)
    return value


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.version_option()
@click.pass_context
def main(ctx: Any, quiet: bool) -> None:
    """PyFSync - Keep two directory trees in sync on a fixed schedule."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(quiet=quiet)


@main.command()
@click.argument("source", type=click.Path(path_type=Path))
@click.argument("destination", type=click.Path(path_type=Path))
@click.argument("mode", type=SyncModeType())
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=_configure_logging_callback,
    help="Enable debug logging output",
)
@click.option(
    "--interval",
    type=float,
    default=DEFAULT_SYNC_INTERVAL,
    envvar="PYFSYNC_INTERVAL",
    show_default=True,
    help="Seconds to wait between sync cycles",
)
@click.option(
    "--poll-interval",
    type=float,
    default=DEFAULT_POLL_INTERVAL,
    envvar="PYFSYNC_POLL_INTERVAL",
    show_default=True,
    help="Seconds between checks for the quit command",
)
@click.option("--once", is_flag=True, help="Run a single sync cycle and exit")
@click.pass_context
def sync(
    ctx: Any,
    source: Path,
    destination: Path,
    mode: SyncMode,
    interval: float,
    poll_interval: float,
    once: bool,
) -> None:
    """Mirror SOURCE onto DESTINATION until stopped.

    MODE selects direction and deletion policy:

    \b
      - one: source to destination, delete extra destination entries
      - bi: both directions, delete extra entries
      - one+no_delete: source to destination, never delete
      - bi+no_delete: both directions, never delete

    Type q and press Enter, or press Ctrl+C, to stop after the current cycle.

    Examples:

    \b
        pyfsync sync ~/Documents /mnt/backup/Documents one
        pyfsync sync ./notes ./notes-copy bi+no_delete --interval 30
        pyfsync sync ./data ./mirror one --once -d
    """
    out: OutputFormatter = ctx.obj["out"]

    if interval < 0:
        out.error("Interval cannot be negative")
        ctx.exit(1)
    if poll_interval <= 0:
        out.error("Poll interval must be positive")
        ctx.exit(1)

    engine = SyncEngine()
    try:
        engine.check_roots(source, destination)
    except TraversalError as e:
        out.error(str(e))
        ctx.exit(1)

    token = CancellationToken()
    try:
        previous_handlers = install_interrupt_handler(token)
    except ValueError as e:
        out.error(f"Cannot install interrupt handler: {e}")
        ctx.exit(1)

    out.info(f"Syncing: {source} -> {destination}")
    out.info(f"Mode: {mode.value}")

    loop = RunLoop(engine, source, destination, mode, token, interval=interval)
    try:
        if once:
            loop.run(max_cycles=1)
        else:
            out.info(f"Type '{QUIT_COMMAND}' and press Enter to stop")
            listener = QuitCommandListener(
                token,
                stream=click.get_text_stream("stdin"),
                poll_interval=poll_interval,
            )
            listener.start()
            loop.run()
    finally:
        restore_signal_handlers(previous_handlers)

    logger.debug(
        "Run loop finished: %d cycle(s), %d failure(s)", loop.cycles, loop.failures
    )

    if once:
        if loop.failures:
            out.error("Sync cycle failed")
            ctx.exit(1)
        out.success("Sync complete!")
    else:
        out.success(f"Sync stopped after {loop.cycles} cycle(s)")


if __name__ == "__main__":
    main()
