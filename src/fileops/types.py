"""Shared data types for file operations."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

__all__ = [
    "ClosePolicy",
    "DestinationExistsError",
    "ExistPolicy",
    "Status",
]


class ExistPolicy(str, Enum):
    """What to do when an operation's destination already exists."""

    OVERWRITE = "overwrite"
    GIVE_UP = "give-up"
    FAIL = "fail"


class ClosePolicy(Enum):
    """Whether a caller-supplied stream is closed after an operation."""

    CLOSE = "close"
    DO_NOT_CLOSE = "do-not-close"


class Status(Enum):
    """Result of a file operation.

    Each operation documents the subset of members it can return.
    """

    SUCCESS = "success"
    NOT_FOUND = "not-found"
    IS_FILE_CONFLICT = "is-file-conflict"
    NO_PARENT = "no-parent"
    CREATE_FAILED = "create-failed"
    PARENT_CREATE_FAILED = "parent-create-failed"
    DELETE_FAILED = "delete-failed"
    STREAM_OPEN_FAILED = "stream-open-failed"
    COPY_FAILED = "copy-failed"
    WRITE_FAILED = "write-failed"
    FILE_BUSY = "file-busy"
    COPY_THEN_DELETE_FAILED = "copy-then-delete-failed"
    NOT_OPEN = "not-open"
    OPEN = "open"
    LOCK_CHECK_FAILED = "lock-check-failed"
    OPEN_FAILED = "open-failed"
    LOCK_FAILED = "lock-failed"
    HANDLER_FAILED = "handler-failed"

    @property
    def ok(self) -> bool:
        """True if the status reports a successful outcome."""
        return self in (Status.SUCCESS, Status.NOT_OPEN)


class DestinationExistsError(FileExistsError):
    """Destination already exists and the policy is ExistPolicy.FAIL."""

    def __init__(self, destination: Path) -> None:
        """Initialize with the conflicting destination.

        Args:
            destination: Path that already exists.
        """
        super().__init__(f"The destination file already exists: {destination}")
        self.destination = destination
