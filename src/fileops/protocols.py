"""Protocol definitions for the filesystem seam.

Every operation in this package reaches the operating system through the
FileSystem protocol below. Designing to an interface enables:
- Easy substitution of test doubles (failing renames, failing deletes)
- A single place where raw syscalls live

All concrete implementations satisfy the protocol structurally (duck typing).
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for low-level filesystem calls.

    Methods raise OSError on failure; translating errors into statuses is the
    caller's job.
    """

    def exists(self, path: Path) -> bool:
        """Check if a path exists, without following a final symlink.

        Args:
            path: Path to check.

        Returns:
            True if something (including a dangling symlink) is at path.
        """
        ...

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory, following symlinks.

        Args:
            path: Path to check.

        Returns:
            True if path resolves to a directory.
        """
        ...

    def is_file(self, path: Path) -> bool:
        """Check if a path is a regular file, following symlinks."""
        ...

    def is_symlink(self, path: Path) -> bool:
        """Check if a path is a symbolic link."""
        ...

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory.

        Args:
            path: Path to create.
            parents: Create parent directories if needed.
            exist_ok: Don't raise if directory exists.
        """
        ...

    def create_file(self, path: Path) -> bool:
        """Atomically create an empty file.

        Args:
            path: Path of the new file.

        Returns:
            True if created, False if something already existed at path.
        """
        ...

    def list_dir(self, path: Path) -> list[Path]:
        """List the direct children of a directory.

        Args:
            path: Directory to list.

        Returns:
            Child paths in filesystem order.
        """
        ...

    def unlink(self, path: Path) -> None:
        """Remove a file or symlink."""
        ...

    def rmdir(self, path: Path) -> None:
        """Remove an empty directory."""
        ...

    def rename(self, source: Path, destination: Path) -> None:
        """Rename source to destination with a single OS call."""
        ...

    def open_read(self, path: Path) -> BinaryIO:
        """Open a file for binary reading."""
        ...

    def open_write(self, path: Path) -> BinaryIO:
        """Open a file for binary writing, truncating it."""
        ...

    def open_update(self, path: Path) -> BinaryIO:
        """Open an existing file for binary reading and writing."""
        ...

    def identity(self, path: Path) -> tuple[int, int]:
        """Return the (device, inode) pair of path, following symlinks."""
        ...
