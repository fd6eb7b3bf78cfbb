"""Application context for dependency injection.

This module separates object creation from object use, enabling testability
of CLI commands. The filesystem is typed by its Protocol so test doubles can
be injected without inheritance.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fileops.protocols import FileSystem
from fileops.streams import DEFAULT_BUFFER_SIZE


def _default_filesystem() -> FileSystem:
    """Create the default filesystem implementation."""
    from fileops.filesystem import RealFileSystem
    return RealFileSystem()


@dataclass
class AppContext:
    """Container for the dependencies and settings used by CLI commands.

    Attributes:
        filesystem: Filesystem implementation passed to every operation.
        buffer_size: Copy buffer size in bytes.
    """

    filesystem: FileSystem = field(default_factory=_default_filesystem)
    buffer_size: int = DEFAULT_BUFFER_SIZE

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {self.buffer_size}")


def create_context(buffer_size: int | None = None) -> AppContext:
    """Factory for application dependencies.

    Use this in production code. For tests, construct AppContext directly
    with test doubles.

    Args:
        buffer_size: Override the copy buffer size.

    Returns:
        Configured AppContext.
    """
    from fileops.filesystem import RealFileSystem

    return AppContext(
        filesystem=RealFileSystem(),
        buffer_size=DEFAULT_BUFFER_SIZE if buffer_size is None else buffer_size,
    )
