"""Lazily materialized tree of nodes mirroring the filesystem under one root.

Only the root level and expanded directories hold live children. Every
materialized node is registered in the ``ViewIndex``; removing a subtree
from the tree always removes it from the index too.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import NotFoundError
from ..file_tree_model import FileSystemGateway, FsEntry, path_key
from ..filter_registry import FilterRegistry
from ..observer import PresentationObserver
from .node import Materialization, Node, derive_checked
from .view_index import ViewIndex

if TYPE_CHECKING:
    from ..selection import SelectionCascade, SelectionSet

logger = logging.getLogger(__name__)


class TreeModel:
    def __init__(
        self,
        gateway: FileSystemGateway,
        registry: FilterRegistry,
        selection: SelectionSet,
        index: ViewIndex,
        cascade: SelectionCascade,
        observer: PresentationObserver | None = None,
    ) -> None:
        self.gateway = gateway
        self.registry = registry
        self.selection = selection
        self.index = index
        self.cascade = cascade
        self.observer = observer or PresentationObserver()
        self.root: Node | None = None

    @property
    def root_path(self) -> Path | None:
        return self.root.path if self.root is not None else None

    def node(self, path: Path | str) -> Node | None:
        return self.index.get(path)

    def is_root(self, node: Node) -> bool:
        return self.root is not None and node is self.root

    def visible_children(self, node: Node) -> list[Node]:
        if node.state is not Materialization.LOADED:
            return []
        return list(node.children)

    def expanded_keys(self) -> set[str]:
        return {
            node.key
            for node in self.index
            if node.is_dir and node.expanded and node.state is Materialization.LOADED
        }

    # loading
    def _resolve_root(self, path: Path | str) -> Path:
        candidate = Path(path).expanduser()
        if not self.gateway.is_dir(candidate):
            raise NotFoundError(candidate, "Root is not a directory")
        return candidate.resolve()

    def load_root(self, path: Path | str, scan: bool = True) -> Node:
        """Load ``path`` as the new root, discarding selection and view state.

        With ``scan`` off the filter registry is left empty for a background
        census to fill in.
        """
        root_path = self._resolve_root(path)
        if scan:
            self.registry.rebuild(self.gateway.scan_extensions(root_path), preserve_enabled=False)
        else:
            self.registry.clear()
        self.selection.clear()
        logger.info("Loading root %s (%d extensions)", root_path, len(self.registry))
        return self._build(root_path, set())

    def reload(self) -> Node:
        """Full reload of the current root, keeping filters, expansion and live selection."""
        if self.root is None:
            raise NotFoundError(None, "No root loaded")
        expanded = self.expanded_keys()
        root_path = self._resolve_root(self.root.path)
        self.registry.rebuild(self.gateway.scan_extensions(root_path), preserve_enabled=True)
        for entry in self.selection.entries():
            if not self.gateway.exists(entry.path):
                self.selection.discard(entry)
        logger.info("Reloading root %s", root_path)
        root = self._build(root_path, expanded)
        self.cascade.settle_tree(root)
        return root

    def rematerialize(self) -> Node:
        """Rebuild the visible tree under the active filter; the selection is untouched."""
        if self.root is None:
            raise NotFoundError(None, "No root loaded")
        return self._build(self.root.path, self.expanded_keys())

    def _build(self, root_path: Path, expanded: set[str]) -> Node:
        if self.root is not None:
            self.root.detach_children()
        self.index.clear()
        root = Node.for_entry(FsEntry.for_path(root_path, True))
        root.expanded = True
        self.index.add(root)
        self.root = root
        self._materialize(root)

        pending = [root]
        while pending:
            current = pending.pop()
            for child in current.children:
                if child.is_dir and child.key in expanded:
                    child.expanded = True
                    self._materialize(child)
                    pending.append(child)

        for node in self.index:
            node.checked = derive_checked(node, self.selection.__contains__)
        self.observer.structure_changed(None)
        return root

    def _materialize(self, node: Node) -> None:
        node.state = Materialization.LOADING
        entries, error = self.gateway.list_children(node.path, self.registry.active_extensions())
        if error is not None:
            node.state = Materialization.DENIED
            node.expanded = False
            self.observer.node_materialized(node)
            return
        for entry in entries:
            child = Node.for_entry(entry)
            child.checked = entry in self.selection
            node.attach(child)
            self.index.add(child)
        node.state = Materialization.LOADED
        self.observer.node_materialized(node)

    # expansion
    def expand(self, node: Node) -> bool:
        """Expand ``node``; returns whether its children were materialized now.

        Once loaded, the directory's membership is settled to the state
        derived from its visible children, and its ancestors follow.
        """
        if not node.is_dir or not node.is_interactive:
            return False
        node.expanded = True
        if node.state is not Materialization.UNLOADED:
            return False
        self._materialize(node)
        self.cascade.settle_from(node)
        return True

    def collapse(self, node: Node) -> None:
        if node.is_dir and node.expanded:
            node.expanded = False
            self.observer.structure_changed(node)

    def expand_all(self, node: Node | None = None) -> int:
        """Recursively expand ``node`` (default: root); returns how many directories loaded."""
        start = node or self.root
        if start is None:
            return 0
        loaded = 0
        pending = [start]
        while pending:
            current = pending.pop()
            if self.expand(current):
                loaded += 1
            pending.extend(child for child in current.children if child.is_dir)
        self.observer.structure_changed(start)
        return loaded

    def collapse_all(self, node: Node | None = None) -> None:
        start = node or self.root
        if start is None:
            return
        for current in start.iter_subtree():
            if current.is_dir and current is not self.root:
                current.expanded = False
        self.observer.structure_changed(start)

    # refresh
    def refresh(self, node: Node) -> None:
        """Re-list ``node`` from disk, forgetting selection below it, and re-settle up to the root."""
        if not node.is_dir:
            return
        was_expanded = node.expanded
        for stale in self.index.remove_descendants(node.path):
            self.selection.discard(stale.entry)
        node.detach_children()
        node.state = Materialization.UNLOADED
        self._materialize(node)
        node.expanded = was_expanded and node.is_interactive
        self.cascade.settle_from(node)
        self.observer.structure_changed(node)

    def remove_subtree(self, path: Path | str) -> list[Node]:
        """Detach the node at ``path`` from its parent and drop it and its descendants from the index."""
        removed = self.index.remove_subtree(path)
        key = path_key(path)
        for node in removed:
            if node.key == key:
                parent = node.parent
                if parent is not None:
                    parent.remove_child(node)
                break
        return removed


__all__ = ["TreeModel"]
