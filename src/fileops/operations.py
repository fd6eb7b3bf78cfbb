"""Path-level file operations.

Every function here looks paths up fresh on each call and reports expected
failures as a Status instead of raising. The one deliberate exception is
ExistPolicy.FAIL, which raises DestinationExistsError when a destination is
already occupied.

Checks and the actions that follow them are not atomic; a concurrent process
can change the filesystem in between.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Callable

from fileops.filesystem import RealFileSystem
from fileops.locking import is_file_opened
from fileops.protocols import FileSystem
from fileops.streams import DEFAULT_BUFFER_SIZE, close_quietly, copy_stream, read_text_stream
from fileops.types import ClosePolicy, DestinationExistsError, ExistPolicy, Status

logger = logging.getLogger(__name__)


# ============================================================================
# Directories and files
# ============================================================================


def _parent_of(path: Path) -> Path | None:
    """Return the parent component of path, or None if it has none.

    A filesystem root and a bare relative name both have no parent.
    """
    if len(path.parts) <= 1:
        return None
    return path.parent


def ensure_directory(path: Path, *, fs: FileSystem | None = None) -> Status:
    """Create a directory (and its parents) if it does not exist.

    Args:
        path: Directory to ensure.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Returns:
        Status.SUCCESS if the directory exists or was created,
        Status.IS_FILE_CONFLICT if something other than a directory is there,
        Status.CREATE_FAILED if creation failed.
    """
    fs = fs or RealFileSystem()
    if fs.exists(path):
        return Status.SUCCESS if fs.is_dir(path) else Status.IS_FILE_CONFLICT

    try:
        fs.mkdir(path, parents=True, exist_ok=True)
    except OSError as e:
        logger.debug("Failed to create directory %s: %s", path, e)
        return Status.CREATE_FAILED
    return Status.SUCCESS


def ensure_parent_directory(path: Path, *, fs: FileSystem | None = None) -> Status:
    """Create the parent directory of path if it does not exist.

    Args:
        path: File or directory whose parent is needed.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Returns:
        Status.SUCCESS if the parent exists or was created,
        Status.NO_PARENT if path has no parent component,
        Status.CREATE_FAILED if creation failed.
    """
    fs = fs or RealFileSystem()
    parent = _parent_of(path)
    if parent is None:
        return Status.NO_PARENT
    if fs.exists(parent):
        return Status.SUCCESS

    try:
        fs.mkdir(parent, parents=True, exist_ok=True)
    except OSError as e:
        logger.debug("Failed to create parent directory %s: %s", parent, e)
        return Status.CREATE_FAILED
    return Status.SUCCESS


def create_file_if_absent(
    path: Path,
    on_created: Callable[[Path], None] | None = None,
    *,
    fs: FileSystem | None = None,
) -> Status:
    """Create an empty file if nothing exists at path.

    Args:
        path: File to create.
        on_created: Called with path only if this call created the file.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Returns:
        Status.SUCCESS if the file exists or was created,
        Status.PARENT_CREATE_FAILED if the parent could not be created,
        Status.CREATE_FAILED for any other failure.
    """
    fs = fs or RealFileSystem()
    if fs.exists(path):
        return Status.SUCCESS

    # A bare name has no parent and is created in the working directory
    if ensure_parent_directory(path, fs=fs) is Status.CREATE_FAILED:
        return Status.PARENT_CREATE_FAILED

    try:
        created = fs.create_file(path)
    except OSError:
        logger.exception("Failed to create file %s", path)
        return Status.CREATE_FAILED
    if not created:
        return Status.CREATE_FAILED

    if on_created is not None:
        on_created(path)
    return Status.SUCCESS


def delete_recursive(path: Path, *, fs: FileSystem | None = None) -> bool:
    """Delete a file, symlink or directory tree.

    Directories are emptied depth-first before being removed. Deletion stops
    at the first child that cannot be removed; its remaining siblings are
    left untouched. Symlinks are removed, never followed.

    Args:
        path: Path to delete. A missing path counts as deleted.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Returns:
        True if nothing exists at path afterwards.
    """
    fs = fs or RealFileSystem()
    if not fs.exists(path):
        return True

    try:
        if fs.is_symlink(path) or not fs.is_dir(path):
            fs.unlink(path)
            return True

        for child in fs.list_dir(path):
            if not delete_recursive(child, fs=fs):
                return False

        fs.rmdir(path)
    except OSError as e:
        logger.debug("Failed to delete %s: %s", path, e)
        return False
    return True


# ============================================================================
# Streams by path
# ============================================================================


def open_input(path: Path, *, fs: FileSystem | None = None) -> BinaryIO | None:
    """Open a file for binary reading, returning None on failure."""
    fs = fs or RealFileSystem()
    try:
        return fs.open_read(path)
    except OSError as e:
        logger.debug("Cannot open %s for reading: %s", path, e)
        return None


def open_output(path: Path, *, fs: FileSystem | None = None) -> BinaryIO | None:
    """Open a file for binary writing, creating its parent first.

    Returns:
        The open stream, or None if the parent or the file could not be
        created.
    """
    fs = fs or RealFileSystem()
    if ensure_parent_directory(path, fs=fs) is Status.CREATE_FAILED:
        return None
    try:
        return fs.open_write(path)
    except OSError as e:
        logger.debug("Cannot open %s for writing: %s", path, e)
        return None


# ============================================================================
# Copy and move
# ============================================================================


def _is_same_file(source: Path, destination: Path, fs: FileSystem) -> bool:
    """Check whether two existing paths lead to the same file."""
    if not (fs.exists(source) and fs.exists(destination)):
        return False
    try:
        return fs.identity(source) == fs.identity(destination)
    except OSError:
        # Dangling symlink
        return False


def _resolve_existing(
    destination: Path,
    policy: ExistPolicy,
    fs: FileSystem,
    source: Path | None = None,
) -> Status | None:
    """Apply an exist policy to an occupied destination.

    Args:
        source: When given and it is the same file as destination, nothing
            is deleted and the operation is already complete.

    Returns:
        None if the caller should proceed, otherwise the status to return.

    Raises:
        DestinationExistsError: If destination exists and policy is FAIL.
    """
    if not fs.exists(destination):
        return None

    if policy is ExistPolicy.GIVE_UP:
        logger.debug("Destination %s exists, giving up", destination)
        return Status.SUCCESS
    if policy is ExistPolicy.FAIL:
        raise DestinationExistsError(destination)

    if source is not None and _is_same_file(source, destination, fs):
        logger.debug("%s and %s are the same file, nothing to do", source, destination)
        return Status.SUCCESS

    if not delete_recursive(destination, fs=fs):
        return Status.DELETE_FAILED
    return None


def copy_file(
    source: Path,
    destination: Path,
    policy: ExistPolicy = ExistPolicy.OVERWRITE,
    *,
    fs: FileSystem | None = None,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> Status:
    """Copy a single file.

    Args:
        source: File to copy.
        destination: Target file path.
        policy: What to do if destination already exists.
        fs: Filesystem implementation (defaults to RealFileSystem).
        buffer_size: Size of the copy buffer.

    Returns:
        Status.SUCCESS, Status.NOT_FOUND, Status.DELETE_FAILED,
        Status.PARENT_CREATE_FAILED, Status.STREAM_OPEN_FAILED or
        Status.COPY_FAILED.

    Raises:
        DestinationExistsError: If destination exists and policy is FAIL.
    """
    fs = fs or RealFileSystem()
    if not fs.exists(source):
        return Status.NOT_FOUND

    resolved = _resolve_existing(destination, policy, fs, source)
    if resolved is not None:
        return resolved

    if ensure_parent_directory(destination, fs=fs) is Status.CREATE_FAILED:
        return Status.PARENT_CREATE_FAILED

    input_stream = open_input(source, fs=fs)
    output_stream = open_output(destination, fs=fs) if input_stream is not None else None
    if input_stream is None or output_stream is None:
        close_quietly(input_stream, output_stream)
        return Status.STREAM_OPEN_FAILED

    copied = copy_stream(
        input_stream,
        output_stream,
        ClosePolicy.CLOSE,
        ClosePolicy.CLOSE,
        buffer_size=buffer_size,
    )
    return Status.SUCCESS if copied else Status.COPY_FAILED


def copy_tree(
    source: Path,
    destination: Path,
    policy: ExistPolicy = ExistPolicy.OVERWRITE,
    *,
    fs: FileSystem | None = None,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> Status:
    """Copy a file or a directory tree.

    Files delegate to copy_file. Directories are copied child by child into
    ``destination / child.name``; an existing destination directory is merged
    into, with the policy applied to each file. Copying stops at the first
    child that fails and returns that child's status.

    Symlinked directories are followed. A symlink that leads back into a
    directory already being copied stops the copy with Status.COPY_FAILED.

    Args:
        source: File or directory to copy.
        destination: Target path.
        policy: What to do when a destination file already exists.
        fs: Filesystem implementation (defaults to RealFileSystem).
        buffer_size: Size of the copy buffer.

    Returns:
        Status.SUCCESS, Status.NOT_FOUND, Status.CREATE_FAILED,
        Status.COPY_FAILED, or any status returned by copy_file.

    Raises:
        DestinationExistsError: If a destination exists and policy is FAIL.
    """
    fs = fs or RealFileSystem()
    if not fs.exists(source):
        return Status.NOT_FOUND
    return _copy_tree(source, destination, policy, fs, buffer_size, frozenset())


def _copy_tree(
    source: Path,
    destination: Path,
    policy: ExistPolicy,
    fs: FileSystem,
    buffer_size: int,
    ancestors: frozenset[tuple[int, int]],
) -> Status:
    """Recursive step of copy_tree.

    Args:
        ancestors: Identities of the directories on the current branch.
    """
    if not fs.is_dir(source):
        return copy_file(source, destination, policy, fs=fs, buffer_size=buffer_size)

    try:
        identity = fs.identity(source)
        children = sorted(fs.list_dir(source))
    except OSError as e:
        logger.debug("Cannot read directory %s: %s", source, e)
        return Status.COPY_FAILED

    if identity in ancestors:
        logger.warning("Symlink cycle detected at %s", source)
        return Status.COPY_FAILED

    if fs.exists(destination) and not fs.is_dir(destination):
        resolved = _resolve_existing(destination, policy, fs, source)
        if resolved is not None:
            return resolved

    if not children:
        status = ensure_directory(destination, fs=fs)
        return Status.SUCCESS if status is Status.SUCCESS else Status.CREATE_FAILED

    branch = ancestors | {identity}
    for child in children:
        status = _copy_tree(child, destination / child.name, policy, fs, buffer_size, branch)
        if status is not Status.SUCCESS:
            return status

    return Status.SUCCESS


def _is_within(path: Path, directory: Path) -> bool:
    """Check whether path is directory itself or lies below it."""
    resolved = path.resolve()
    base = directory.resolve()
    return resolved == base or base in resolved.parents


def move_by_copy_then_delete(
    source: Path,
    destination: Path,
    *,
    fs: FileSystem | None = None,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> Status:
    """Move by copying source over destination, then deleting source.

    Returns:
        Status.SUCCESS, Status.COPY_FAILED if the copy did not complete, or
        Status.DELETE_FAILED if the source could not be removed afterwards.
    """
    fs = fs or RealFileSystem()
    if _is_within(destination, source):
        logger.warning("Cannot move %s into itself (%s)", source, destination)
        return Status.COPY_FAILED

    status = copy_tree(source, destination, ExistPolicy.OVERWRITE, fs=fs, buffer_size=buffer_size)
    if status is not Status.SUCCESS:
        logger.debug("Copy %s -> %s failed: %s", source, destination, status.value)
        return Status.COPY_FAILED

    if not delete_recursive(source, fs=fs):
        return Status.DELETE_FAILED
    return Status.SUCCESS


def rename(
    source: Path,
    destination: Path,
    policy: ExistPolicy = ExistPolicy.OVERWRITE,
    *,
    fs: FileSystem | None = None,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> Status:
    """Move source to destination.

    Tries a single OS rename first. If that fails and no other holder has
    the source locked, falls back to copying and then deleting the source,
    which also moves across volumes.

    Args:
        source: File or directory to move.
        destination: Target path.
        policy: What to do if destination already exists.
        fs: Filesystem implementation (defaults to RealFileSystem).
        buffer_size: Size of the copy buffer used by the fallback.

    Returns:
        Status.SUCCESS, Status.NOT_FOUND, Status.DELETE_FAILED,
        Status.PARENT_CREATE_FAILED, Status.FILE_BUSY or
        Status.COPY_THEN_DELETE_FAILED.

    Raises:
        DestinationExistsError: If destination exists and policy is FAIL.
    """
    fs = fs or RealFileSystem()
    if not fs.exists(source):
        return Status.NOT_FOUND

    resolved = _resolve_existing(destination, policy, fs, source)
    if resolved is not None:
        return resolved

    if ensure_parent_directory(destination, fs=fs) is Status.CREATE_FAILED:
        return Status.PARENT_CREATE_FAILED

    try:
        fs.rename(source, destination)
        return Status.SUCCESS
    except OSError as e:
        logger.debug("Rename %s -> %s failed, trying fallback: %s", source, destination, e)

    if is_file_opened(source, fs=fs) is Status.OPEN:
        return Status.FILE_BUSY

    status = move_by_copy_then_delete(source, destination, fs=fs, buffer_size=buffer_size)
    if status is not Status.SUCCESS:
        return Status.COPY_THEN_DELETE_FAILED
    return Status.SUCCESS


# ============================================================================
# Text
# ============================================================================


def read_text(
    path: Path,
    *,
    fs: FileSystem | None = None,
    encoding: str = "utf-8",
) -> str | None:
    """Read a whole text file.

    Returns:
        The file content, or None if path is missing, is not a regular file,
        or cannot be read or decoded.
    """
    fs = fs or RealFileSystem()
    if not fs.exists(path) or not fs.is_file(path):
        return None

    stream = open_input(path, fs=fs)
    if stream is None:
        return None
    return read_text_stream(stream, ClosePolicy.CLOSE, encoding=encoding)


def write_text(
    path: Path,
    text: str,
    policy: ExistPolicy = ExistPolicy.OVERWRITE,
    *,
    fs: FileSystem | None = None,
    encoding: str = "utf-8",
) -> Status:
    """Write text to a new file, applying policy if the file exists.

    Args:
        path: Target file.
        text: Content to write.
        policy: What to do if path already exists.
        fs: Filesystem implementation (defaults to RealFileSystem).
        encoding: Text encoding.

    Returns:
        Status.SUCCESS (also when the file exists and policy is GIVE_UP),
        Status.PARENT_CREATE_FAILED, Status.DELETE_FAILED,
        Status.CREATE_FAILED or Status.WRITE_FAILED.

    Raises:
        DestinationExistsError: If path exists and policy is FAIL.
    """
    fs = fs or RealFileSystem()
    if ensure_parent_directory(path, fs=fs) is Status.CREATE_FAILED:
        return Status.PARENT_CREATE_FAILED

    resolved = _resolve_existing(path, policy, fs)
    if resolved is not None:
        return resolved

    try:
        if not fs.create_file(path):
            return Status.CREATE_FAILED
    except OSError as e:
        logger.debug("Failed to create %s: %s", path, e)
        return Status.CREATE_FAILED

    try:
        with fs.open_write(path) as stream:
            stream.write(text.encode(encoding))
    except (OSError, UnicodeEncodeError):
        logger.exception("Failed to write %s", path)
        return Status.WRITE_FAILED
    return Status.SUCCESS
