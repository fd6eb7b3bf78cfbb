"""Tests for copy_file and copy_tree."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import BinaryIO, Callable

import pytest

from fileops.filesystem import RealFileSystem
from fileops.operations import copy_file, copy_tree
from fileops.types import DestinationExistsError, ExistPolicy, Status


class TestCopyFile:
    """Tests for copy_file."""

    def test_copies_bytes(self, sample_file: Path, tmp_path: Path) -> None:
        """The copy is byte-identical to the source."""
        destination = tmp_path / "copy.bin"

        status = copy_file(sample_file, destination, ExistPolicy.OVERWRITE)

        assert status is Status.SUCCESS
        assert destination.read_bytes() == sample_file.read_bytes()

    def test_small_buffer(self, sample_file: Path, tmp_path: Path) -> None:
        """Copying works with a buffer much smaller than the file."""
        destination = tmp_path / "copy.bin"

        copy_file(sample_file, destination, buffer_size=7)

        assert destination.read_bytes() == sample_file.read_bytes()

    def test_creates_parent(self, sample_file: Path, tmp_path: Path) -> None:
        """Missing destination directories are created."""
        destination = tmp_path / "a" / "b" / "copy.bin"

        assert copy_file(sample_file, destination) is Status.SUCCESS
        assert destination.is_file()

    def test_missing_source(self, tmp_path: Path) -> None:
        """A missing source is NOT_FOUND and the destination is untouched."""
        destination = tmp_path / "dst.txt"
        destination.write_text("untouched")

        status = copy_file(tmp_path / "missing.txt", destination, ExistPolicy.OVERWRITE)

        assert status is Status.NOT_FOUND
        assert destination.read_text() == "untouched"

    def test_overwrite(self, tmp_path: Path) -> None:
        """OVERWRITE replaces the destination."""
        source = tmp_path / "src.txt"
        source.write_text("new")
        destination = tmp_path / "dst.txt"
        destination.write_text("old content that is longer")

        assert copy_file(source, destination, ExistPolicy.OVERWRITE) is Status.SUCCESS
        assert destination.read_text() == "new"

    def test_overwrite_replaces_directory(self, tmp_path: Path) -> None:
        """OVERWRITE deletes a directory standing at the destination."""
        source = tmp_path / "src.txt"
        source.write_text("new")
        destination = tmp_path / "dst"
        (destination / "inner").mkdir(parents=True)

        assert copy_file(source, destination) is Status.SUCCESS
        assert destination.read_text() == "new"

    def test_give_up(self, tmp_path: Path) -> None:
        """GIVE_UP succeeds without copying."""
        source = tmp_path / "src.txt"
        source.write_text("new")
        destination = tmp_path / "dst.txt"
        destination.write_text("old")

        assert copy_file(source, destination, ExistPolicy.GIVE_UP) is Status.SUCCESS
        assert destination.read_text() == "old"

    def test_fail_raises(self, tmp_path: Path) -> None:
        """FAIL raises a catchable FileExistsError subclass."""
        source = tmp_path / "src.txt"
        source.write_text("new")
        destination = tmp_path / "dst.txt"
        destination.write_text("old")

        with pytest.raises(FileExistsError):
            copy_file(source, destination, ExistPolicy.FAIL)

        assert destination.read_text() == "old"

    def test_parent_create_failed(self, tmp_path: Path) -> None:
        """A destination below a plain file cannot get a parent."""
        source = tmp_path / "src.txt"
        source.write_text("data")
        (tmp_path / "file.txt").touch()

        status = copy_file(source, tmp_path / "file.txt" / "sub" / "dst.txt")

        assert status is Status.PARENT_CREATE_FAILED

    def test_stream_open_failed(self, tmp_path: Path) -> None:
        """A source that cannot be opened leaves no destination behind."""
        source = tmp_path / "a_directory"
        source.mkdir()
        destination = tmp_path / "dst.txt"

        assert copy_file(source, destination) is Status.STREAM_OPEN_FAILED
        assert not destination.exists()

    def test_output_open_failed_closes_input(self, tmp_path: Path) -> None:
        """When only the destination cannot be opened, the source is closed."""

        class UnwritableFileSystem(RealFileSystem):
            def __init__(self) -> None:
                self.opened: list[BinaryIO] = []

            def open_read(self, path: Path) -> BinaryIO:
                stream = super().open_read(path)
                self.opened.append(stream)
                return stream

            def open_write(self, path: Path) -> BinaryIO:
                raise PermissionError("read-only volume")

        source = tmp_path / "src.txt"
        source.write_text("data")
        fs = UnwritableFileSystem()

        status = copy_file(source, tmp_path / "dst.txt", fs=fs)

        assert status is Status.STREAM_OPEN_FAILED
        assert len(fs.opened) == 1
        assert fs.opened[0].closed

    def test_onto_itself(self, tmp_path: Path) -> None:
        """Copying a file over itself keeps its content."""
        source = tmp_path / "src.txt"
        source.write_text("keep")

        assert copy_file(source, source, ExistPolicy.OVERWRITE) is Status.SUCCESS
        assert source.read_text() == "keep"

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
    def test_onto_symlink_to_itself(self, tmp_path: Path) -> None:
        """A destination symlink pointing at the source is not deleted."""
        source = tmp_path / "src.txt"
        source.write_text("keep")
        link = tmp_path / "link.txt"
        os.symlink(source, link)

        assert copy_file(source, link, ExistPolicy.OVERWRITE) is Status.SUCCESS
        assert source.read_text() == "keep"
        assert link.is_symlink()


class TestCopyTree:
    """Tests for copy_tree."""

    def test_copies_isomorphic_tree(
        self, sample_tree: Path, tmp_path: Path, tree_snapshot: Callable
    ) -> None:
        """Files, nested and empty directories are all reproduced."""
        destination = tmp_path / "copy"

        status = copy_tree(sample_tree, destination)

        assert status is Status.SUCCESS
        assert tree_snapshot(destination) == tree_snapshot(sample_tree)
        assert (destination / "empty").is_dir()

    def test_source_left_intact(
        self, sample_tree: Path, tmp_path: Path, tree_snapshot: Callable
    ) -> None:
        """Copying never modifies the source."""
        before = tree_snapshot(sample_tree)

        copy_tree(sample_tree, tmp_path / "copy")

        assert tree_snapshot(sample_tree) == before

    def test_missing_source(self, tmp_path: Path) -> None:
        """A missing source is NOT_FOUND."""
        assert copy_tree(tmp_path / "missing", tmp_path / "copy") is Status.NOT_FOUND
        assert not (tmp_path / "copy").exists()

    def test_existing_source_file(self, sample_file: Path, tmp_path: Path) -> None:
        """An existing plain file is copied, not reported as missing."""
        destination = tmp_path / "copy.bin"

        assert copy_tree(sample_file, destination) is Status.SUCCESS
        assert destination.read_bytes() == sample_file.read_bytes()

    def test_empty_directory(self, tmp_path: Path) -> None:
        """An empty source directory produces an empty destination."""
        source = tmp_path / "empty"
        source.mkdir()
        destination = tmp_path / "copy"

        assert copy_tree(source, destination) is Status.SUCCESS
        assert destination.is_dir()
        assert list(destination.iterdir()) == []

    def test_empty_directory_idempotent(self, tmp_path: Path) -> None:
        """Copying an empty directory twice succeeds both times."""
        source = tmp_path / "empty"
        source.mkdir()
        destination = tmp_path / "copy"

        assert copy_tree(source, destination) is Status.SUCCESS
        assert copy_tree(source, destination) is Status.SUCCESS

    def test_merge_with_give_up(self, sample_tree: Path, tmp_path: Path) -> None:
        """An existing destination directory is merged into."""
        destination = tmp_path / "copy"
        destination.mkdir()
        (destination / "a.txt").write_text("mine")
        (destination / "extra.txt").write_text("extra")

        status = copy_tree(sample_tree, destination, ExistPolicy.GIVE_UP)

        assert status is Status.SUCCESS
        assert (destination / "a.txt").read_text() == "mine"
        assert (destination / "extra.txt").read_text() == "extra"
        assert (destination / "nested" / "deeper" / "d.txt").read_text() == "delta"

    def test_merge_with_overwrite(self, sample_tree: Path, tmp_path: Path) -> None:
        """OVERWRITE replaces conflicting files and keeps unrelated ones."""
        destination = tmp_path / "copy"
        destination.mkdir()
        (destination / "a.txt").write_text("mine")
        (destination / "extra.txt").write_text("extra")

        copy_tree(sample_tree, destination, ExistPolicy.OVERWRITE)

        assert (destination / "a.txt").read_text() == "alpha"
        assert (destination / "extra.txt").read_text() == "extra"

    def test_fail_on_conflicting_file(self, sample_tree: Path, tmp_path: Path) -> None:
        """FAIL raises at the first conflicting file."""
        destination = tmp_path / "copy"
        destination.mkdir()
        (destination / "a.txt").write_text("mine")

        with pytest.raises(DestinationExistsError) as exc_info:
            copy_tree(sample_tree, destination, ExistPolicy.FAIL)

        assert exc_info.value.destination == destination / "a.txt"

    def test_fail_merges_into_existing_directory(
        self, sample_tree: Path, tmp_path: Path, tree_snapshot: Callable
    ) -> None:
        """FAIL does not object to an existing directory, only to files."""
        destination = tmp_path / "copy"
        destination.mkdir()

        assert copy_tree(sample_tree, destination, ExistPolicy.FAIL) is Status.SUCCESS
        assert tree_snapshot(destination) == tree_snapshot(sample_tree)

    def test_file_at_directory_destination_overwrite(
        self, sample_tree: Path, tmp_path: Path, tree_snapshot: Callable
    ) -> None:
        """OVERWRITE replaces a plain file standing where a directory goes."""
        destination = tmp_path / "copy"
        destination.write_text("in the way")

        assert copy_tree(sample_tree, destination) is Status.SUCCESS
        assert tree_snapshot(destination) == tree_snapshot(sample_tree)

    def test_file_at_directory_destination_give_up(
        self, sample_tree: Path, tmp_path: Path
    ) -> None:
        """GIVE_UP leaves a plain file standing where a directory goes."""
        destination = tmp_path / "copy"
        destination.write_text("in the way")

        assert copy_tree(sample_tree, destination, ExistPolicy.GIVE_UP) is Status.SUCCESS
        assert destination.read_text() == "in the way"

    def test_stops_at_first_failure(self, tmp_path: Path, failing_unlink_fs: Callable) -> None:
        """The first failing child's status is returned unchanged."""
        source = tmp_path / "src"
        source.mkdir()
        for name in ("a.txt", "b.txt", "c.txt"):
            (source / name).write_text(name)
        destination = tmp_path / "copy"
        destination.mkdir()
        (destination / "b.txt").write_text("cannot be deleted")

        status = copy_tree(source, destination, fs=failing_unlink_fs("b.txt"))

        assert status is Status.DELETE_FAILED
        assert (destination / "a.txt").read_text() == "a.txt"
        assert (destination / "b.txt").read_text() == "cannot be deleted"
        assert not (destination / "c.txt").exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
    def test_follows_symlinked_file(self, tmp_path: Path) -> None:
        """A symlink to a file is copied as a regular file."""
        source = tmp_path / "src"
        source.mkdir()
        target = tmp_path / "target.txt"
        target.write_text("linked")
        os.symlink(target, source / "link.txt")
        destination = tmp_path / "copy"

        assert copy_tree(source, destination) is Status.SUCCESS
        assert not (destination / "link.txt").is_symlink()
        assert (destination / "link.txt").read_text() == "linked"

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
    def test_symlink_cycle(self, tmp_path: Path) -> None:
        """A symlink back to an ancestor stops the copy."""
        source = tmp_path / "src"
        source.mkdir()
        (source / "file.txt").write_text("data")
        os.symlink(source, source / "loop")

        status = copy_tree(source, tmp_path / "copy")

        assert status is Status.COPY_FAILED

    def test_onto_itself(self, sample_tree: Path, tree_snapshot: Callable) -> None:
        """Copying a tree over itself leaves every file in place."""
        before = tree_snapshot(sample_tree)

        status = copy_tree(sample_tree, sample_tree, ExistPolicy.OVERWRITE)

        assert status is Status.SUCCESS
        assert tree_snapshot(sample_tree) == before
