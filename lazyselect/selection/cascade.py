"""Two-phase selection cascade: apply a toggle downward, then settle ancestors.

Checked states follow one rule everywhere: files and unloaded directories
mirror their own selection membership, while a loaded directory is checked
exactly when it has visible children and all of them are selected. Settling
a directory writes that derived value back into its own membership, which
is what lets the change ripple up to its parent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..file_tree_model import FileSystemGateway, FsEntry
from ..filter_registry import FilterRegistry
from ..observer import PresentationObserver
from ..runtime.control_lock import ControlLock
from ..tree_model.node import Node, derive_checked
from ..tree_model.view_index import ViewIndex
from .selection_set import SelectionSet

logger = logging.getLogger(__name__)


class CascadeMode(Enum):
    SHALLOW = "shallow"
    DEEP = "deep"


@dataclass
class ChangeSet:
    """Net effect of one cascade: membership changes and final checked flags."""

    selected: list[FsEntry] = field(default_factory=list)
    deselected: list[FsEntry] = field(default_factory=list)
    checked: dict[Path, bool] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.selected or self.deselected or self.checked)

    def record_selected(self, entry: FsEntry) -> None:
        if entry in self.deselected:
            self.deselected.remove(entry)
        else:
            self.selected.append(entry)

    def record_deselected(self, entry: FsEntry) -> None:
        if entry in self.selected:
            self.selected.remove(entry)
        else:
            self.deselected.append(entry)

    def merge(self, other: ChangeSet) -> None:
        for entry in other.selected:
            self.record_selected(entry)
        for entry in other.deselected:
            self.record_deselected(entry)
        self.checked.update(other.checked)


class SelectionCascade:
    def __init__(
        self,
        selection: SelectionSet,
        index: ViewIndex,
        gateway: FileSystemGateway,
        registry: FilterRegistry,
        lock: ControlLock,
        observer: PresentationObserver | None = None,
    ) -> None:
        self.selection = selection
        self.index = index
        self.gateway = gateway
        self.registry = registry
        self.lock = lock
        self.observer = observer or PresentationObserver()

    def toggle(self, node: Node, target: bool, mode: CascadeMode = CascadeMode.SHALLOW) -> ChangeSet:
        """Set ``node`` to ``target`` and cascade down (per ``mode``) and up."""
        changes = ChangeSet()
        with self.lock.cascade() as entered:
            if not entered:
                logger.debug("Ignoring re-entrant toggle of %s", node.path)
                return changes
            self._set_member(node.entry, target, changes)
            if node.is_dir:
                touched = self._apply_downward(node, target, mode, changes)
                self._sync_touched(touched, target, changes)
            if node.is_dir and node.has_known_children:
                self._settle(node, changes)
            else:
                self._set_checked(node, target, changes)
            self._settle_ancestors(node, changes)
        logger.debug(
            "Toggled %s -> %s (%s): +%d -%d",
            node.path,
            target,
            mode.value,
            len(changes.selected),
            len(changes.deselected),
        )
        return changes

    def settle_from(self, node: Node) -> ChangeSet:
        """Re-derive ``node`` (when loaded) and every resolvable ancestor."""
        changes = ChangeSet()
        with self.lock.cascade() as entered:
            if not entered:
                return changes
            if node.is_dir and node.has_known_children:
                self._settle(node, changes)
            else:
                self._set_checked(node, node.entry in self.selection, changes)
            self._settle_ancestors(node, changes)
        return changes

    def settle_tree(self, root: Node) -> ChangeSet:
        """Settle every materialized node below ``root``, deepest first."""
        changes = ChangeSet()
        with self.lock.cascade() as entered:
            if not entered:
                return changes
            nodes = sorted(root.iter_subtree(), key=Node.depth, reverse=True)
            for node in nodes:
                if node.is_dir and node.has_known_children:
                    self._settle(node, changes)
                else:
                    self._set_checked(node, node.entry in self.selection, changes)
        return changes

    def restore(self, node: Node) -> ChangeSet:
        """Mark a freshly materialized ``node`` selected and settle its ancestors."""
        changes = ChangeSet()
        with self.lock.cascade() as entered:
            if not entered:
                return changes
            self._set_member(node.entry, True, changes)
            if node.is_dir and node.has_known_children:
                self._settle(node, changes)
            else:
                self._set_checked(node, True, changes)
            self._settle_ancestors(node, changes)
        return changes

    def deselect_under(self, path: Path) -> ChangeSet:
        """Drop ``path`` and its descendants from the selection, unchecking what is shown."""
        changes = ChangeSet()
        with self.lock.cascade() as entered:
            if not entered:
                return changes
            for entry in self.selection.discard_under(path):
                changes.record_deselected(entry)
            node = self.index.get(path)
            if node is not None:
                for current in node.iter_subtree():
                    self._set_checked(current, False, changes)
                self._settle_ancestors(node, changes)
        return changes

    def clear_all(self) -> ChangeSet:
        """Empty the selection and uncheck every materialized node."""
        changes = ChangeSet()
        with self.lock.cascade() as entered:
            if not entered:
                return changes
            for entry in self.selection.entries():
                changes.record_deselected(entry)
            self.selection.clear()
            for node in self.index:
                self._set_checked(node, False, changes)
        return changes

    def _apply_downward(self, node: Node, target: bool, mode: CascadeMode, changes: ChangeSet) -> list[FsEntry]:
        if mode is CascadeMode.DEEP:
            touched = self.gateway.walk_descendants(node.path)
        else:
            children, error = self.gateway.list_children(node.path, self.registry.active_extensions())
            if error is not None:
                logger.debug("Shallow toggle could not list %s: %s", node.path, error)
            touched = [child for child in children if not child.is_dir]
        for entry in touched:
            self._set_member(entry, target, changes)
        return touched

    def _sync_touched(self, touched: list[FsEntry], target: bool, changes: ChangeSet) -> None:
        loaded_dirs: list[Node] = []
        for entry in touched:
            node = self.index.get(entry.path)
            if node is None:
                continue
            if node.is_dir and node.has_known_children:
                loaded_dirs.append(node)
            else:
                self._set_checked(node, target, changes)
        for node in sorted(loaded_dirs, key=Node.depth, reverse=True):
            self._settle(node, changes)

    def _settle(self, node: Node, changes: ChangeSet) -> None:
        value = derive_checked(node, self.selection.__contains__)
        self._set_member(node.entry, value, changes)
        self._set_checked(node, value, changes)

    def _settle_ancestors(self, node: Node, changes: ChangeSet) -> None:
        for ancestor in node.ancestors():
            if not self.index.resolves(ancestor):
                break
            self._settle(ancestor, changes)

    def _set_member(self, entry: FsEntry, value: bool, changes: ChangeSet) -> None:
        if value:
            if self.selection.add(entry):
                changes.record_selected(entry)
        elif self.selection.discard(entry):
            changes.record_deselected(entry)

    def _set_checked(self, node: Node, value: bool, changes: ChangeSet) -> None:
        if node.checked == value:
            return
        node.checked = value
        changes.checked[node.path] = value
        self.observer.checked_changed(node, value)


__all__ = ["CascadeMode", "ChangeSet", "SelectionCascade"]
