"""Extension filter registry: per-extension enabled flag and recursive file count.

Counts come from one full scan per root load and are adjusted incrementally
by delete/rename/paste afterwards. Toggling ``enabled`` only changes what the
tree materializes; it never touches the selection.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .file_tree_model import NO_EXTENSION, FsEntry


def normalize_extension(extension: str) -> str:
    """Normalize an extension label; blank labels mean "no extension"."""
    stripped = extension.strip()
    if not stripped or stripped == NO_EXTENSION:
        return NO_EXTENSION
    lowered = stripped.lower()
    return lowered if lowered.startswith(".") else f".{lowered}"


@dataclass
class FilterItem:
    """One row of the filter panel."""

    extension: str
    count: int
    enabled: bool = True

    @property
    def display(self) -> str:
        return f"{self.extension} ({self.count})"


class FilterRegistry:
    """Sorted ``extension -> FilterItem`` table; zero-count rows are pruned."""

    def __init__(self) -> None:
        self._items: dict[str, FilterItem] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, extension: object) -> bool:
        return isinstance(extension, str) and normalize_extension(extension) in self._items

    def _resort(self) -> None:
        self._items = dict(sorted(self._items.items()))

    def items(self) -> list[FilterItem]:
        return list(self._items.values())

    def get(self, extension: str) -> FilterItem | None:
        return self._items.get(normalize_extension(extension))

    def count(self, extension: str) -> int:
        item = self.get(extension)
        return item.count if item is not None else 0

    def counts(self) -> dict[str, int]:
        return {extension: item.count for extension, item in self._items.items()}

    def clear(self) -> None:
        self._items.clear()

    def rebuild(self, counts: Mapping[str, int], preserve_enabled: bool = True) -> None:
        """Replace all counts with a fresh census.

        Extensions seen before keep their enabled flag when
        ``preserve_enabled`` is set; new extensions start enabled.
        """
        previous = {ext: item.enabled for ext, item in self._items.items()} if preserve_enabled else {}
        fresh: dict[str, FilterItem] = {}
        for raw_extension, count in counts.items():
            if count <= 0:
                continue
            extension = normalize_extension(raw_extension)
            existing = fresh.get(extension)
            if existing is not None:
                existing.count += count
                continue
            fresh[extension] = FilterItem(extension, count, previous.get(extension, True))
        self._items = fresh
        self._resort()

    def adjust_count(self, extension: str, delta: int) -> None:
        """Apply ``delta`` to one extension, inserting or pruning as needed."""
        if delta == 0:
            return
        extension = normalize_extension(extension)
        item = self._items.get(extension)
        if item is not None:
            item.count += delta
            if item.count <= 0:
                del self._items[extension]
            return
        if delta > 0:
            self._items[extension] = FilterItem(extension, delta, True)
            self._resort()

    def add_counts(self, counts: Mapping[str, int]) -> None:
        for extension, count in counts.items():
            self.adjust_count(extension, count)

    def subtract_counts(self, counts: Mapping[str, int]) -> None:
        for extension, count in counts.items():
            self.adjust_count(extension, -count)

    def set_enabled(self, extension: str, enabled: bool) -> bool:
        """Set one extension's flag; returns whether anything changed."""
        item = self.get(extension)
        if item is None or item.enabled == enabled:
            return False
        item.enabled = enabled
        return True

    def set_all_enabled(self, enabled: bool) -> bool:
        changed = False
        for item in self._items.values():
            if item.enabled != enabled:
                item.enabled = enabled
                changed = True
        return changed

    def disable_only(self, extensions: Iterable[str]) -> None:
        """Disable exactly ``extensions`` and enable everything else."""
        disabled = {normalize_extension(extension) for extension in extensions}
        for extension, item in self._items.items():
            item.enabled = extension not in disabled

    def disabled_extensions(self) -> list[str]:
        return [extension for extension, item in self._items.items() if not item.enabled]

    def active_extensions(self) -> frozenset[str] | None:
        """Return the extensions the tree may show, or ``None`` for "show every file".

        Filtering is inactive when nothing is disabled, and also when nothing
        is enabled: an empty filter shows everything.
        """
        enabled = frozenset(ext for ext, item in self._items.items() if item.enabled)
        if not enabled or len(enabled) == len(self._items):
            return None
        return enabled

    def is_visible(self, entry: FsEntry) -> bool:
        """Return whether ``entry`` passes the active filter (directories always do)."""
        if entry.is_dir:
            return True
        active = self.active_extensions()
        return active is None or entry.extension in active


__all__ = ["FilterItem", "FilterRegistry", "normalize_extension"]
