"""Shared test fixtures."""

from __future__ import annotations

import errno
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest

from fileops.filesystem import RealFileSystem


def snapshot(root: Path) -> dict[str, bytes | None]:
    """Map every path below root to its bytes (None for directories)."""
    result: dict[str, bytes | None] = {}
    for path in sorted(root.rglob("*")):
        key = path.relative_to(root).as_posix()
        result[key] = None if path.is_dir() else path.read_bytes()
    return result


# ============================================================================
# Filesystem Test Doubles
# ============================================================================


class CrossDeviceFileSystem(RealFileSystem):
    """Real filesystem whose rename always fails as if across volumes."""

    def __init__(self) -> None:
        self.rename_calls: list[tuple[Path, Path]] = []

    def rename(self, source: Path, destination: Path) -> None:
        self.rename_calls.append((source, destination))
        raise OSError(errno.EXDEV, "Invalid cross-device link")


class FailingUnlinkFileSystem(RealFileSystem):
    """Real filesystem that refuses to unlink files with a given name.

    Directory listings are sorted so sibling order is predictable.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.unlinked: list[str] = []

    def list_dir(self, path: Path) -> list[Path]:
        return sorted(super().list_dir(path))

    def unlink(self, path: Path) -> None:
        if path.name == self.name:
            raise PermissionError(errno.EACCES, "Permission denied", str(path))
        self.unlinked.append(path.name)
        super().unlink(path)


@pytest.fixture
def cross_device_fs() -> CrossDeviceFileSystem:
    """Filesystem that forces the rename fallback path."""
    return CrossDeviceFileSystem()


@pytest.fixture
def failing_unlink_fs() -> type[FailingUnlinkFileSystem]:
    """Factory for a filesystem that cannot unlink one file name."""
    return FailingUnlinkFileSystem


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock FileSystem for testing.

    The mock tracks all filesystem operations without touching real files.
    """
    fs = MagicMock()
    fs.exists.return_value = False
    fs.is_dir.return_value = False
    fs.is_symlink.return_value = False
    return fs


# ============================================================================
# Sample Tree Fixtures
# ============================================================================


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """Create a small binary file spanning several copy buffers."""
    path = tmp_path / "sample.bin"
    path.write_bytes(bytes(range(256)) * 100)
    return path


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a directory tree with files, nested and empty directories.

    Layout:
        tree/
            a.txt
            b.bin
            nested/
                c.txt
                deeper/
                    d.txt
            empty/
    """
    root = tmp_path / "tree"
    (root / "nested" / "deeper").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "a.txt").write_text("alpha")
    (root / "b.bin").write_bytes(b"\x00\x01\x02" * 5000)
    (root / "nested" / "c.txt").write_text("charlie")
    (root / "nested" / "deeper" / "d.txt").write_text("delta")
    return root



@pytest.fixture
def tree_snapshot() -> Callable[[Path], dict[str, bytes | None]]:
    """Function mapping every path below a root to its bytes."""
    return snapshot
