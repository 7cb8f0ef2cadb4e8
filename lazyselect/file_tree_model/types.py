"""Domain datatypes for filesystem-backed file tree entries."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

NO_EXTENSION = "[no extension]"


def path_key(path: Path | str) -> str:
    """Return the case-insensitive identity key used for path comparisons."""
    return str(path).casefold()


def is_same_or_under(path: Path | str, ancestor: Path | str) -> bool:
    """Return whether ``path`` equals ``ancestor`` or lies below it (case-insensitive)."""
    key = path_key(path)
    ancestor_key = path_key(ancestor)
    if key == ancestor_key:
        return True
    prefix = ancestor_key if ancestor_key.endswith(os.sep) else ancestor_key + os.sep
    return key.startswith(prefix)


def extension_for(name: str) -> str:
    """Return the lower-cased extension label for a file name.

    The extension is the final dot suffix, so ``.gitignore`` is its own
    extension. Names without a usable suffix map to ``NO_EXTENSION``.
    """
    idx = name.rfind(".")
    if idx < 0 or idx == len(name) - 1:
        return NO_EXTENSION
    return name[idx:].lower()


@dataclass(frozen=True, eq=False)
class FsEntry:
    """Immutable snapshot of one file or directory.

    Equality and hashing use the case-insensitive path only, so two snapshots
    of the same path taken at different times are interchangeable in sets.
    """

    name: str
    path: Path
    is_dir: bool
    extension: str = ""
    line_count: int | None = None
    key: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", path_key(self.path))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FsEntry):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    @classmethod
    def for_path(cls, path: Path, is_dir: bool, line_count: int | None = None) -> FsEntry:
        """Build an entry for ``path`` deriving name and extension."""
        name = path.name or str(path)
        return cls(
            name=name,
            path=path,
            is_dir=is_dir,
            extension="" if is_dir else extension_for(name),
            line_count=line_count,
        )


__all__ = [
    "NO_EXTENSION",
    "FsEntry",
    "extension_for",
    "is_same_or_under",
    "path_key",
]
