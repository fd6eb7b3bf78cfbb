"""Advisory whole-file locking.

POSIX platforms use fcntl.flock(); Windows uses msvcrt.locking(). Locks are
advisory: only processes that also lock the file will observe them. Each
call opens its own handle, so two threads of one process contend for the
lock just like two processes do.
"""

from __future__ import annotations

import errno
import logging
import sys
import time
from pathlib import Path
from typing import IO, Callable

from fileops.filesystem import RealFileSystem
from fileops.protocols import FileSystem
from fileops.streams import close_quietly
from fileops.types import Status

logger = logging.getLogger(__name__)

# Handler invoked by with_file_lock: (status, path or None)
LockHandler = Callable[[Status, Path | None], None]

# msvcrt locks a byte range; this covers any realistic file size
_WINDOWS_LOCK_SPAN = 0x7FFFFFFF

# Windows LK_LOCK gives up after ten one-second retries
_WINDOWS_RETRY_DELAY = 0.1


class LockUnavailableError(OSError):
    """Another holder has the lock (non-blocking attempt only)."""

    pass


def _lock(handle: IO, blocking: bool) -> None:
    """Take an exclusive lock on the whole file behind handle.

    Raises:
        LockUnavailableError: If blocking is False and the lock is held.
        OSError: For any other locking failure.
    """
    if sys.platform == "win32":
        import msvcrt

        handle.seek(0)
        while True:
            try:
                msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, _WINDOWS_LOCK_SPAN)
                return
            except OSError as e:
                if e.errno not in (errno.EACCES, errno.EDEADLK):
                    raise
                if not blocking:
                    raise LockUnavailableError(e.errno, "File is locked") from e
                time.sleep(_WINDOWS_RETRY_DELAY)
    else:
        import fcntl

        flags = fcntl.LOCK_EX if blocking else fcntl.LOCK_EX | fcntl.LOCK_NB
        try:
            fcntl.flock(handle.fileno(), flags)
        except BlockingIOError as e:
            raise LockUnavailableError(e.errno, "File is locked") from e


def _unlock(handle: IO) -> None:
    """Release a lock taken by _lock()."""
    if sys.platform == "win32":
        import msvcrt

        handle.seek(0)
        msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, _WINDOWS_LOCK_SPAN)
    else:
        import fcntl

        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def is_file_opened(path: Path, *, fs: FileSystem | None = None) -> Status:
    """Check whether another holder has an exclusive lock on path.

    Tries once to lock the whole file in read-write mode and releases the
    lock immediately when it succeeds.

    Args:
        path: File to check.
        fs: Filesystem implementation (defaults to RealFileSystem).

    Returns:
        Status.NOT_OPEN if the lock was free, Status.OPEN if another holder
        has it, Status.LOCK_CHECK_FAILED for any other I/O error.
    """
    fs = fs or RealFileSystem()
    try:
        with fs.open_update(path) as handle:
            try:
                _lock(handle, blocking=False)
            except LockUnavailableError:
                logger.debug("Lock on %s is held elsewhere", path)
                return Status.OPEN
            _unlock(handle)
            return Status.NOT_OPEN
    except OSError as e:
        logger.debug("Lock check failed for %s: %s", path, e)
        return Status.LOCK_CHECK_FAILED


def with_file_lock(
    path: Path,
    on_acquired: LockHandler,
    *,
    fs: FileSystem | None = None,
) -> Status:
    """Run a handler while holding an exclusive lock on path.

    Blocks until the lock is granted. The handler is called exactly once:
    with (Status.SUCCESS, path) while the lock is held, or with the failure
    status and None if the lock could not be taken. The lock is released and
    the handle closed before returning, even if the handler raises.

    Args:
        path: Existing file to lock.
        on_acquired: Callback receiving (status, path).
        fs: Filesystem implementation (defaults to RealFileSystem).

    Returns:
        Status.SUCCESS if the handler ran and returned normally;
        Status.NOT_FOUND, Status.OPEN_FAILED or Status.LOCK_FAILED if the lock
        could not be taken; Status.HANDLER_FAILED if the handler raised.
    """
    fs = fs or RealFileSystem()

    if not fs.exists(path):
        return _notify(on_acquired, Status.NOT_FOUND, None)

    try:
        handle = fs.open_read(path)
    except OSError as e:
        logger.debug("Cannot open %s for locking: %s", path, e)
        return _notify(on_acquired, Status.OPEN_FAILED, None)

    try:
        try:
            _lock(handle, blocking=True)
        except OSError as e:
            logger.debug("Cannot lock %s: %s", path, e)
            return _notify(on_acquired, Status.LOCK_FAILED, None)

        try:
            return _notify(on_acquired, Status.SUCCESS, path)
        finally:
            try:
                _unlock(handle)
            except OSError as e:
                logger.warning("Failed to release lock on %s: %s", path, e)
    finally:
        close_quietly(handle)


def _notify(handler: LockHandler, status: Status, path: Path | None) -> Status:
    """Invoke a lock handler, converting its exceptions into a status.

    Returns:
        The given status, or Status.HANDLER_FAILED if the handler raised
        while reporting success.
    """
    try:
        handler(status, path)
    except Exception:
        logger.exception("Lock handler failed for status %s", status.value)
        if status is Status.SUCCESS:
            return Status.HANDLER_FAILED
    return status
