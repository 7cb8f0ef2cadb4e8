"""Domain model for filesystem entries plus the disk gateway.

This package contains non-UI primitives:
- the ``FsEntry`` value snapshot with case-insensitive path identity
- the ``FileSystemGateway`` used for listing, census, and mutations
- text detection, line counting, and tolerant text loading
"""

from __future__ import annotations

from .fs import (
    IGNORED_DIR_NAMES,
    IGNORED_FILE_NAMES,
    FileSystemGateway,
    is_ignored_dir_name,
    is_ignored_file_name,
)
from .text import DEFAULT_MAX_READ_BYTES, FileTooLargeError, count_lines, is_text_file, read_text
from .types import NO_EXTENSION, FsEntry, extension_for, is_same_or_under, path_key

__all__ = [
    "FsEntry",
    "NO_EXTENSION",
    "extension_for",
    "is_same_or_under",
    "path_key",
    "FileSystemGateway",
    "IGNORED_DIR_NAMES",
    "IGNORED_FILE_NAMES",
    "is_ignored_dir_name",
    "is_ignored_file_name",
    "DEFAULT_MAX_READ_BYTES",
    "FileTooLargeError",
    "count_lines",
    "is_text_file",
    "read_text",
]
