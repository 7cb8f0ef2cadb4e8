"""Engine facade wiring the tree, selection, filters and mutations together.

``SelectionEngine`` owns the four core structures (tree/view index,
selection set, filter registry, clipboard) and serializes every public
operation under one ``ControlLock``. Front ends talk only to this class.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from .errors import NotFoundError
from .file_tree_model import DEFAULT_MAX_READ_BYTES, FileSystemGateway, FsEntry
from .filter_registry import FilterItem, FilterRegistry, normalize_extension
from .observer import PresentationObserver
from .operations import Clipboard, DeleteReport, MutationCoordinator, PasteReport, RenameResult
from .runtime.control_lock import ControlLock
from .runtime.scan_scheduler import ExtensionScanScheduler
from .selection import CascadeMode, ChangeSet, SelectionCascade, SelectionSet
from .tree_model import Node, TreeModel, ViewIndex

logger = logging.getLogger(__name__)


class SelectionEngine:
    def __init__(
        self,
        observer: PresentationObserver | None = None,
        gateway: FileSystemGateway | None = None,
        background_scans: bool = False,
    ) -> None:
        self.observer = observer or PresentationObserver()
        self.gateway = gateway or FileSystemGateway()
        self.lock = ControlLock()
        self.registry = FilterRegistry()
        self.selection = SelectionSet()
        self.index = ViewIndex()
        self.clipboard = Clipboard()
        self.cascade = SelectionCascade(
            self.selection, self.index, self.gateway, self.registry, self.lock, self.observer
        )
        self.tree = TreeModel(
            self.gateway, self.registry, self.selection, self.index, self.cascade, self.observer
        )
        self.coordinator = MutationCoordinator(
            self.tree,
            self.selection,
            self.cascade,
            self.registry,
            self.gateway,
            self.clipboard,
            self.observer,
        )
        self._scanner = ExtensionScanScheduler(self.gateway.scan_extensions) if background_scans else None
        self._generation = 0

    # state
    @property
    def root(self) -> Node | None:
        return self.tree.root

    @property
    def root_path(self) -> Path | None:
        return self.tree.root_path

    @property
    def generation(self) -> int:
        """Counter bumped by every mutation; background results from older generations are stale."""
        return self._generation

    def node(self, path: Path | str) -> Node | None:
        with self.lock.held():
            return self.tree.node(path)

    def _resolve(self, item: Node | FsEntry | Path | str) -> Node:
        if isinstance(item, Node):
            return item
        path = item.path if isinstance(item, FsEntry) else Path(item)
        node = self.tree.node(path)
        if node is None:
            raise NotFoundError(path, "Not shown in the tree")
        return node

    def selected_entries(self) -> list[FsEntry]:
        with self.lock.held():
            return self.selection.entries()

    def is_selected(self, path: Path | str) -> bool:
        with self.lock.held():
            return path in self.selection

    def filters(self) -> list[FilterItem]:
        with self.lock.held():
            return self.registry.items()

    # tree
    def load_root(self, path: Path | str) -> Node:
        with self.lock.held():
            self._generation += 1
            root = self.tree.load_root(path, scan=self._scanner is None)
            if self._scanner is not None:
                self._scanner.schedule(root.path, self._generation)
            self.observer.filters_changed()
            self.observer.status(f"Loaded {root.path}")
            return root

    def reload(self) -> Node:
        with self.lock.held():
            self._generation += 1
            root = self.tree.reload()
            self.observer.filters_changed()
            return root

    def expand(self, item: Node | FsEntry | Path | str) -> Node:
        with self.lock.held():
            node = self._resolve(item)
            self.tree.expand(node)
            return node

    def collapse(self, item: Node | FsEntry | Path | str) -> Node:
        with self.lock.held():
            node = self._resolve(item)
            self.tree.collapse(node)
            return node

    def expand_all(self, item: Node | FsEntry | Path | str | None = None) -> int:
        with self.lock.held():
            return self.tree.expand_all(self._resolve(item) if item is not None else None)

    def collapse_all(self, item: Node | FsEntry | Path | str | None = None) -> None:
        with self.lock.held():
            self.tree.collapse_all(self._resolve(item) if item is not None else None)

    def refresh(self, item: Node | FsEntry | Path | str) -> Node:
        with self.lock.held():
            node = self._resolve(item)
            self.tree.refresh(node)
            return node

    # selection
    def toggle(
        self,
        item: Node | FsEntry | Path | str,
        target: bool | None = None,
        deep: bool = False,
    ) -> ChangeSet:
        """Toggle one node; ``target`` defaults to the inverse of its checked state."""
        with self.lock.held():
            node = self._resolve(item)
            if not node.is_interactive:
                return ChangeSet()
            value = (not node.checked) if target is None else target
            mode = CascadeMode.DEEP if deep else CascadeMode.SHALLOW
            return self.cascade.toggle(node, value, mode)

    def toggle_path(self, path: Path | str, target: bool, deep: bool = False) -> ChangeSet:
        return self.toggle(Path(path), target, deep)

    def clear_selection(self) -> ChangeSet:
        with self.lock.held():
            changes = self.cascade.clear_all()
            self.observer.status("Selection cleared")
            return changes

    # filters
    def _rematerialize_if(self, changed: bool) -> bool:
        if changed:
            self.tree.rematerialize()
            self.observer.filters_changed()
        return changed

    def set_filter_enabled(self, extension: str, enabled: bool) -> bool:
        with self.lock.held():
            return self._rematerialize_if(self.registry.set_enabled(extension, enabled))

    def set_all_filters_enabled(self, enabled: bool) -> bool:
        with self.lock.held():
            return self._rematerialize_if(self.registry.set_all_enabled(enabled))

    def show_only(self, extensions: Iterable[str]) -> bool:
        """Enable exactly ``extensions`` and disable every other known extension."""
        wanted = {normalize_extension(extension) for extension in extensions}
        with self.lock.held():
            before = self.registry.active_extensions()
            self.registry.disable_only(item.extension for item in self.registry.items() if item.extension not in wanted)
            return self._rematerialize_if(self.registry.active_extensions() != before)

    def disable_extensions(self, extensions: Iterable[str]) -> bool:
        with self.lock.held():
            before = self.registry.active_extensions()
            self.registry.disable_only(extensions)
            return self._rematerialize_if(self.registry.active_extensions() != before)

    # background census
    def apply_background_scans(self) -> bool:
        """Apply finished background scans on the calling (control) thread.

        A result computed before the latest mutation is discarded and the
        scan rescheduled. Returns whether the registry changed.
        """
        if self._scanner is None:
            return False
        with self.lock.held():
            results = self._scanner.drain_results()
            root_path = self.tree.root_path
            if not results or root_path is None:
                return False
            current = [
                result
                for result in results
                if result.request.root == root_path and result.request.generation == self._generation
            ]
            if not current:
                logger.debug("Discarding %d stale extension scan(s)", len(results))
                self._scanner.schedule(root_path, self._generation)
                return False
            latest = max(current, key=lambda result: result.request.request_id)
            before = self.registry.active_extensions()
            self.registry.rebuild(latest.counts, preserve_enabled=True)
            if self.registry.active_extensions() != before:
                self.tree.rematerialize()
            self.observer.filters_changed()
            return True

    def wait_for_background_scans(self, timeout: float | None = None) -> bool:
        if self._scanner is None:
            return True
        return self._scanner.wait_idle(timeout)

    # mutations
    def copy(self, entries: Sequence[FsEntry] | None = None) -> int:
        with self.lock.held():
            return self.coordinator.copy(entries)

    def cut(self, entries: Sequence[FsEntry] | None = None) -> int:
        with self.lock.held():
            return self.coordinator.cut(entries)

    def paste_target(self, focused: Path | str | None = None) -> Path:
        with self.lock.held():
            return self.coordinator.paste_target(focused)

    def paste(self, destination: Path | str | None = None) -> PasteReport:
        """Paste the clipboard into ``destination`` (default: the root)."""
        with self.lock.held():
            self._generation += 1
            target = Path(destination) if destination is not None else self.coordinator.paste_target()
            return self.coordinator.paste(target)

    def delete(self, entries: Sequence[FsEntry] | None = None) -> DeleteReport:
        with self.lock.held():
            self._generation += 1
            return self.coordinator.delete(entries)

    def rename(self, item: FsEntry | Path | str, new_name: str) -> RenameResult:
        with self.lock.held():
            self._generation += 1
            return self.coordinator.rename(item, new_name)

    # preview
    def read_text(self, path: Path | str, max_bytes: int = DEFAULT_MAX_READ_BYTES) -> str:
        return self.gateway.read_text(Path(path), max_bytes=max_bytes)


__all__ = ["SelectionEngine"]
