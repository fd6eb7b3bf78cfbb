"""Console output for the command line interface."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fileops.types import Status


class Reporter:
    """Prints operation results with Rich markup."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize reporter.

        Args:
            console: Console to print to. Defaults to stdout.
        """
        self.console = console or Console()

    def show_success(self, message: str) -> None:
        """Show success message.

        Args:
            message: Success message.
        """
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def show_error(self, message: str) -> None:
        """Show error message.

        Args:
            message: Error message.
        """
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def show_warning(self, message: str) -> None:
        """Show warning message."""
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def show_info(self, message: str) -> None:
        """Show info message."""
        self.console.print(f"[blue]i[/blue] {escape(message)}")

    def show_status(self, action: str, status: Status) -> None:
        """Show the outcome of an operation.

        Args:
            action: Human readable description, e.g. "Copied a -> b".
            status: Result of the operation.
        """
        if status.ok:
            self.show_success(action)
        else:
            self.show_error(f"{action}: {status.value}")

    def show_lock_states(self, states: list[tuple[Path, Status]]) -> None:
        """Display a table of lock check results.

        Args:
            states: Pairs of checked path and is_file_opened status.
        """
        table = Table(title="Lock State")
        table.add_column("Path", style="cyan", overflow="fold")
        table.add_column("State", no_wrap=True)

        styles = {Status.NOT_OPEN: "green", Status.OPEN: "yellow"}
        for path, status in states:
            style = styles.get(status, "red")
            table.add_row(escape(str(path)), f"[{style}]{status.value}[/{style}]")

        self.console.print(table)
