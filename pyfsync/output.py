"""Console output helpers for the command line interface."""

from typing import Any

from rich.console import Console
from rich.markup import escape


class OutputFormatter:
    """Formats user-facing messages for the terminal.

    Log records describe individual filesystem actions; this class is for
    the few messages addressed to the person running the command (startup
    banner, fatal errors, shutdown notice).
    """

    def __init__(self, quiet: bool = False):
        """Initialize output formatter.

        Args:
            quiet: Suppress informational and success messages
        """
        self.quiet = quiet
        self.console = Console(highlight=False, soft_wrap=True)
        self.error_console = Console(stderr=True, highlight=False, soft_wrap=True)

    def print(self, message: Any = "") -> None:
        if not self.quiet:
            self.console.print(escape(str(message)))

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(escape(str(message)))

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        self.error_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self.error_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
