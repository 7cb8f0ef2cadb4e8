"""Clipboard of entries captured for a later paste."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from ..file_tree_model import FsEntry, is_same_or_under


class ClipboardMode(Enum):
    COPY = "copy"
    CUT = "cut"


def top_level_entries(entries: Iterable[FsEntry]) -> list[FsEntry]:
    """Drop entries that lie inside another directory of the same batch.

    A selected directory is pasted recursively, so its selected descendants
    would otherwise be pasted a second time next to it.
    """
    ordered = list(dict.fromkeys(entries))
    directories = [entry for entry in ordered if entry.is_dir]
    return [
        entry
        for entry in ordered
        if not any(
            directory.key != entry.key and is_same_or_under(entry.path, directory.path)
            for directory in directories
        )
    ]


class Clipboard:
    """Ordered snapshot list plus mode; independent of the selection once captured."""

    def __init__(self) -> None:
        self._entries: list[FsEntry] = []
        self.mode: ClipboardMode | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def is_cut(self) -> bool:
        return self.mode is ClipboardMode.CUT

    def entries(self) -> list[FsEntry]:
        return list(self._entries)

    def capture(self, entries: Iterable[FsEntry], mode: ClipboardMode) -> list[FsEntry]:
        self._entries = top_level_entries(entries)
        self.mode = mode if self._entries else None
        return self.entries()

    def discard(self, entries: Iterable[FsEntry]) -> None:
        """Drop ``entries``; an emptied clipboard forgets its mode."""
        dropped = {entry.key for entry in entries}
        self._entries = [entry for entry in self._entries if entry.key not in dropped]
        if not self._entries:
            self.mode = None

    def clear(self) -> None:
        self._entries = []
        self.mode = None


__all__ = ["Clipboard", "ClipboardMode", "top_level_entries"]
