"""Stream copy helpers.

These functions work on already-open file objects. Close policies are
honored on every exit path.
"""

from __future__ import annotations

import io
import logging
from typing import IO, BinaryIO, TextIO

from fileops.types import ClosePolicy

logger = logging.getLogger(__name__)

# Size of the intermediate buffer used by copy_stream and copy_text
DEFAULT_BUFFER_SIZE = 8 * 1024


def close_quietly(*closeables: IO | None) -> None:
    """Close each object, ignoring None and logging close errors.

    Args:
        closeables: File objects or anything with a close() method.
    """
    for closeable in closeables:
        if closeable is None:
            continue
        try:
            closeable.close()
        except (OSError, ValueError) as e:
            logger.warning("Ignoring error while closing %r: %s", closeable, e)


def copy_stream(
    source: BinaryIO,
    dest: BinaryIO,
    close_source: ClosePolicy = ClosePolicy.CLOSE,
    close_dest: ClosePolicy = ClosePolicy.CLOSE,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> bool:
    """Copy every remaining byte of source into dest.

    Args:
        source: Readable binary stream.
        dest: Writable binary stream.
        close_source: Whether to close source afterwards.
        close_dest: Whether to close dest afterwards.
        buffer_size: Size of the intermediate buffer.

    Returns:
        True if all bytes were copied, False on any I/O failure.
    """
    try:
        while True:
            chunk = source.read(buffer_size)
            if not chunk:
                break
            dest.write(chunk)
        dest.flush()
        return True
    except (OSError, ValueError):
        logger.exception("Stream copy failed")
        return False
    finally:
        if close_source is ClosePolicy.CLOSE:
            close_quietly(source)
        if close_dest is ClosePolicy.CLOSE:
            close_quietly(dest)


def copy_text(
    reader: TextIO,
    writer: TextIO,
    close_reader: ClosePolicy = ClosePolicy.CLOSE,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> bool:
    """Copy every remaining character of reader into writer.

    The writer is never closed; callers usually still need its content.

    Returns:
        True on success, False on any I/O failure.
    """
    try:
        while True:
            chunk = reader.read(buffer_size)
            if not chunk:
                break
            writer.write(chunk)
        return True
    except (OSError, ValueError):
        logger.exception("Text copy failed")
        return False
    finally:
        if close_reader is ClosePolicy.CLOSE:
            close_quietly(reader)


def copy_bytes(
    source: BinaryIO,
    dest: BinaryIO,
    length: int,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> int:
    """Copy the next ``length`` bytes of source into dest.

    Neither stream is closed. Copying stops early at end of stream.

    Args:
        source: Readable binary stream.
        dest: Writable binary stream.
        length: Number of bytes to copy.
        buffer_size: Maximum size of a single read.

    Returns:
        Number of bytes actually copied.
    """
    if length < 0:
        raise ValueError(f"length must be non-negative, got {length}")
    copied = 0
    while copied < length:
        chunk = source.read(min(buffer_size, length - copied))
        if not chunk:
            break
        dest.write(chunk)
        copied += len(chunk)
    return copied


def read_text_stream(
    stream: BinaryIO,
    policy: ClosePolicy = ClosePolicy.CLOSE,
    encoding: str = "utf-8",
) -> str | None:
    """Read all remaining text from a binary stream.

    Returns:
        Decoded text, or None if reading failed.
    """
    reader = io.TextIOWrapper(stream, encoding=encoding, newline="")
    writer = io.StringIO(newline="")
    try:
        # Decode errors are ValueErrors and make copy_text report failure
        if not copy_text(reader, writer, ClosePolicy.DO_NOT_CLOSE):
            return None
        return writer.getvalue()
    finally:
        if policy is ClosePolicy.CLOSE:
            close_quietly(reader)
        else:
            # Leave the caller's stream open
            reader.detach()
        writer.close()
