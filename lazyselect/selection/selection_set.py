"""Canonical set of selected entries, keyed by case-insensitive path."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from ..file_tree_model import FsEntry, is_same_or_under, path_key


class SelectionSet:
    """Insertion-ordered set of ``FsEntry`` snapshots.

    Entries are plain values: the set may reference paths that are not
    materialized in the tree, and it never holds live nodes.
    """

    def __init__(self) -> None:
        self._entries: dict[str, FsEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FsEntry]:
        return iter(list(self._entries.values()))

    def __contains__(self, item: object) -> bool:
        if isinstance(item, FsEntry):
            return item.key in self._entries
        if isinstance(item, (str, Path)):
            return path_key(item) in self._entries
        return False

    def get(self, path: Path | str) -> FsEntry | None:
        return self._entries.get(path_key(path))

    def add(self, entry: FsEntry) -> bool:
        """Add ``entry``; returns ``False`` when its path was already selected."""
        if entry.key in self._entries:
            return False
        self._entries[entry.key] = entry
        return True

    def discard(self, item: FsEntry | Path | str) -> bool:
        key = item.key if isinstance(item, FsEntry) else path_key(item)
        return self._entries.pop(key, None) is not None

    def discard_under(self, path: Path | str) -> list[FsEntry]:
        """Remove ``path`` and every selected descendant; returns what was removed."""
        removed = [entry for entry in self._entries.values() if is_same_or_under(entry.path, path)]
        for entry in removed:
            del self._entries[entry.key]
        return removed

    def entries(self) -> list[FsEntry]:
        return list(self._entries.values())

    def paths(self) -> list[Path]:
        return [entry.path for entry in self._entries.values()]

    def clear(self) -> None:
        self._entries.clear()


__all__ = ["SelectionSet"]
