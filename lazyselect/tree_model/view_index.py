"""Path-keyed index of every materialized node."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from ..file_tree_model import is_same_or_under, path_key
from .node import Node


class DuplicateNodeError(ValueError):
    """Raised when a second node is registered for an already indexed path."""


class ViewIndex:
    """Authoritative ``path -> Node`` map of what the tree currently shows.

    Keys are case-insensitive paths, so ``a.TXT`` and ``A.txt`` collide.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))

    def __contains__(self, path: object) -> bool:
        if isinstance(path, (str, Path)):
            return path_key(path) in self._nodes
        return False

    def add(self, node: Node) -> None:
        existing = self._nodes.get(node.key)
        if existing is not None and existing is not node:
            raise DuplicateNodeError(f"Node already indexed for {node.path}")
        self._nodes[node.key] = node

    def get(self, path: Path | str) -> Node | None:
        return self._nodes.get(path_key(path))

    def resolves(self, node: Node) -> bool:
        """Return whether ``node`` is the live node indexed for its path."""
        return self._nodes.get(node.key) is node

    def discard(self, path: Path | str) -> Node | None:
        return self._nodes.pop(path_key(path), None)

    def descendants_of(self, path: Path | str) -> list[Node]:
        """Return indexed nodes strictly below ``path``."""
        anchor = Path(path)
        anchor_key = path_key(anchor)
        return [
            node
            for key, node in self._nodes.items()
            if key != anchor_key and is_same_or_under(node.path, anchor)
        ]

    def remove_descendants(self, path: Path | str) -> list[Node]:
        removed = self.descendants_of(path)
        for node in removed:
            del self._nodes[node.key]
        return removed

    def remove_subtree(self, path: Path | str) -> list[Node]:
        """Remove ``path`` and everything indexed below it."""
        removed = self.remove_descendants(path)
        node = self.discard(path)
        if node is not None:
            removed.insert(0, node)
        return removed

    def paths(self) -> list[Path]:
        return [node.path for node in self._nodes.values()]

    def clear(self) -> None:
        self._nodes.clear()


__all__ = ["DuplicateNodeError", "ViewIndex"]
