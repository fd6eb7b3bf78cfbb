"""Filesystem utilities: copy, move, delete and lock files."""

__version__ = "0.1.0"

from fileops.locking import is_file_opened, with_file_lock
from fileops.operations import (
    copy_file,
    copy_tree,
    create_file_if_absent,
    delete_recursive,
    ensure_directory,
    ensure_parent_directory,
    move_by_copy_then_delete,
    open_input,
    open_output,
    read_text,
    rename,
    write_text,
)
from fileops.streams import (
    DEFAULT_BUFFER_SIZE,
    close_quietly,
    copy_bytes,
    copy_stream,
    copy_text,
    read_text_stream,
)
from fileops.types import ClosePolicy, DestinationExistsError, ExistPolicy, Status
from fileops.validation import is_file_name_valid

__all__ = [
    "__version__",
    "DEFAULT_BUFFER_SIZE",
    "ClosePolicy",
    "DestinationExistsError",
    "ExistPolicy",
    "Status",
    "close_quietly",
    "copy_bytes",
    "copy_file",
    "copy_stream",
    "copy_text",
    "copy_tree",
    "create_file_if_absent",
    "delete_recursive",
    "ensure_directory",
    "ensure_parent_directory",
    "is_file_name_valid",
    "is_file_opened",
    "move_by_copy_then_delete",
    "open_input",
    "open_output",
    "read_text",
    "read_text_stream",
    "rename",
    "with_file_lock",
    "write_text",
]
