"""Filesystem abstraction for testability.

This module provides the production implementation of the FileSystem
protocol. RealFileSystem wraps standard library os and pathlib calls.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO


class RealFileSystem:
    """Production filesystem implementation.

    Wraps standard library Path and os operations.
    Satisfies the FileSystem protocol structurally.
    """

    def exists(self, path: Path) -> bool:
        """Check if a path exists (dangling symlinks count)."""
        return os.path.lexists(path)

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        return path.is_dir()

    def is_file(self, path: Path) -> bool:
        """Check if a path is a regular file."""
        return path.is_file()

    def is_symlink(self, path: Path) -> bool:
        """Check if a path is a symbolic link."""
        return path.is_symlink()

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        path.mkdir(parents=parents, exist_ok=exist_ok)

    def create_file(self, path: Path) -> bool:
        """Create an empty file, failing if it exists."""
        try:
            path.touch(exist_ok=False)
        except FileExistsError:
            return False
        return True

    def list_dir(self, path: Path) -> list[Path]:
        """List directory children."""
        return list(path.iterdir())

    def unlink(self, path: Path) -> None:
        """Remove a file."""
        path.unlink()

    def rmdir(self, path: Path) -> None:
        """Remove an empty directory."""
        path.rmdir()

    def rename(self, source: Path, destination: Path) -> None:
        """Rename a file or directory."""
        os.rename(source, destination)

    def open_read(self, path: Path) -> BinaryIO:
        """Open a file for reading."""
        return open(path, "rb")

    def open_write(self, path: Path) -> BinaryIO:
        """Open a file for writing."""
        return open(path, "wb")

    def open_update(self, path: Path) -> BinaryIO:
        """Open an existing file for reading and writing."""
        return open(path, "r+b")

    def identity(self, path: Path) -> tuple[int, int]:
        """Return (st_dev, st_ino) of the resolved path."""
        st = path.stat()
        return st.st_dev, st.st_ino
