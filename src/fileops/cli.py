"""CLI commands using Typer."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from fileops import __version__
from fileops.console import Reporter
from fileops.context import AppContext, create_context
from fileops.locking import is_file_opened, with_file_lock
from fileops.operations import (
    copy_tree,
    create_file_if_absent,
    delete_recursive,
    ensure_directory,
    read_text,
    rename,
    write_text,
)
from fileops.types import DestinationExistsError, ExistPolicy, Status
from fileops.validation import is_file_name_valid

app = typer.Typer(
    name="fileops",
    help="Filesystem utilities: copy, move, delete and lock files",
    no_args_is_help=True,
)

console = Console()
reporter = Reporter(console)

PolicyOption = Annotated[
    ExistPolicy,
    typer.Option("--policy", "-p", help="What to do if the destination exists"),
]

# Global options parsed by main(), applied to every command's context
_options: dict[str, int | None] = {"buffer_size": None}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"fileops v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    buffer_size: Annotated[
        int | None,
        typer.Option("--buffer-size", min=1, help="Copy buffer size in bytes"),
    ] = None,
) -> None:
    """Filesystem utilities: copy, move, delete and lock files."""
    configure_logging(verbose)
    _options["buffer_size"] = buffer_size


def _resolve_context(context: AppContext | None) -> AppContext:
    """Return the injected context, or build one from the global options."""
    return context or create_context(buffer_size=_options["buffer_size"])


def _finish(action: str, status: Status) -> None:
    """Report a status and exit non-zero if it is a failure."""
    reporter.show_status(action, status)
    if not status.ok:
        raise typer.Exit(1)


# ============================================================================
# Create and delete
# ============================================================================


@app.command("mkdir")
def make_directory(
    path: Annotated[Path, typer.Argument(help="Directory to create")],
    _context=None,
) -> None:
    """Create a directory and any missing parents."""
    ctx = _resolve_context(_context)
    _finish(f"Directory {path}", ensure_directory(path, fs=ctx.filesystem))


@app.command()
def touch(
    path: Annotated[Path, typer.Argument(help="File to create")],
    _context=None,
) -> None:
    """Create an empty file if it does not exist."""
    ctx = _resolve_context(_context)
    _finish(f"File {path}", create_file_if_absent(path, fs=ctx.filesystem))


@app.command("rm")
def remove(
    path: Annotated[Path, typer.Argument(help="File or directory to delete")],
    _context=None,
) -> None:
    """Delete a file or a directory tree."""
    ctx = _resolve_context(_context)
    if not ctx.filesystem.exists(path):
        reporter.show_warning(f"Nothing to delete at {path}")
        return
    if delete_recursive(path, fs=ctx.filesystem):
        reporter.show_success(f"Deleted {path}")
    else:
        reporter.show_error(f"Failed to delete {path}")
        raise typer.Exit(1)


# ============================================================================
# Copy and move
# ============================================================================


@app.command("cp")
def copy(
    source: Annotated[Path, typer.Argument(help="File or directory to copy")],
    destination: Annotated[Path, typer.Argument(help="Target path")],
    policy: PolicyOption = ExistPolicy.OVERWRITE,
    _context=None,
) -> None:
    """Copy a file or a directory tree."""
    ctx = _resolve_context(_context)
    try:
        status = copy_tree(
            source, destination, policy, fs=ctx.filesystem, buffer_size=ctx.buffer_size
        )
    except DestinationExistsError as e:
        reporter.show_error(str(e))
        raise typer.Exit(1) from e
    _finish(f"Copied {source} -> {destination}", status)


@app.command("mv")
def move(
    source: Annotated[Path, typer.Argument(help="File or directory to move")],
    destination: Annotated[Path, typer.Argument(help="Target path")],
    policy: PolicyOption = ExistPolicy.OVERWRITE,
    _context=None,
) -> None:
    """Move a file or directory, copying across volumes if needed."""
    ctx = _resolve_context(_context)
    try:
        status = rename(
            source, destination, policy, fs=ctx.filesystem, buffer_size=ctx.buffer_size
        )
    except DestinationExistsError as e:
        reporter.show_error(str(e))
        raise typer.Exit(1) from e
    _finish(f"Moved {source} -> {destination}", status)


# ============================================================================
# Text
# ============================================================================


@app.command("cat")
def show_text(
    path: Annotated[Path, typer.Argument(help="Text file to print")],
    _context=None,
) -> None:
    """Print a text file."""
    ctx = _resolve_context(_context)
    text = read_text(path, fs=ctx.filesystem)
    if text is None:
        reporter.show_error(f"Cannot read {path}")
        raise typer.Exit(1)
    console.print(text, end="", markup=False, highlight=False)


@app.command("write")
def write(
    path: Annotated[Path, typer.Argument(help="File to write")],
    text: Annotated[str, typer.Argument(help="Text content")],
    policy: PolicyOption = ExistPolicy.OVERWRITE,
    _context=None,
) -> None:
    """Write text to a file."""
    ctx = _resolve_context(_context)
    try:
        status = write_text(path, text, policy, fs=ctx.filesystem)
    except DestinationExistsError as e:
        reporter.show_error(str(e))
        raise typer.Exit(1) from e
    _finish(f"Wrote {path}", status)


# ============================================================================
# Locking
# ============================================================================


@app.command("is-open")
def is_open(
    paths: Annotated[list[Path], typer.Argument(help="Files to check")],
    _context=None,
) -> None:
    """Report whether files are locked by another process."""
    ctx = _resolve_context(_context)
    states = [(path, is_file_opened(path, fs=ctx.filesystem)) for path in paths]
    reporter.show_lock_states(states)
    if any(status is Status.LOCK_CHECK_FAILED for _, status in states):
        raise typer.Exit(1)


@app.command("lock")
def lock(
    path: Annotated[Path, typer.Argument(help="File to lock")],
    command: Annotated[list[str], typer.Argument(help="Command to run while locked")],
    _context=None,
) -> None:
    """Run a command while holding an exclusive lock on a file.

    Example: fileops lock data.db -- sqlite3 data.db .dump
    """
    ctx = _resolve_context(_context)
    returncodes: list[int] = []

    def run_locked(status: Status, locked_path: Path | None) -> None:
        if status is not Status.SUCCESS:
            return
        reporter.show_info(f"Locked {locked_path}")
        returncodes.append(subprocess.run(command, check=False).returncode)

    status = with_file_lock(path, run_locked, fs=ctx.filesystem)
    if not status.ok:
        _finish(f"Lock {path}", status)
    raise typer.Exit(returncodes[0] if returncodes else 0)


# ============================================================================
# Names
# ============================================================================


@app.command("check-name")
def check_name(
    name: Annotated[str, typer.Argument(help="Candidate file name")],
) -> None:
    """Check whether a string is usable as a file name."""
    if is_file_name_valid(name):
        reporter.show_success(f"'{name}' is a valid file name")
    else:
        reporter.show_error(f"'{name}' contains characters not allowed in file names")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
