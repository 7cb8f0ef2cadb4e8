"""Live tree nodes backing materialized filesystem entries."""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..file_tree_model import FsEntry


class NodeKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"


class Materialization(Enum):
    """Lazy-loading state of a directory node's children."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    DENIED = "denied"


@dataclass(eq=False)
class Node:
    """One materialized entry.

    Children are owned by this node's ``children`` list; the parent link is a
    weak reference so a node never keeps its parent alive.
    """

    entry: FsEntry
    state: Materialization = Materialization.UNLOADED
    checked: bool = False
    expanded: bool = False
    children: list[Node] = field(default_factory=list)
    _parent_ref: weakref.ReferenceType[Node] | None = field(default=None, repr=False)

    @classmethod
    def for_entry(cls, entry: FsEntry) -> Node:
        state = Materialization.UNLOADED if entry.is_dir else Materialization.LOADED
        return cls(entry=entry, state=state)

    @property
    def path(self) -> Path:
        return self.entry.path

    @property
    def key(self) -> str:
        return self.entry.key

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def is_dir(self) -> bool:
        return self.entry.is_dir

    @property
    def kind(self) -> NodeKind:
        return NodeKind.DIRECTORY if self.entry.is_dir else NodeKind.FILE

    @property
    def parent(self) -> Node | None:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def is_interactive(self) -> bool:
        """Denied directories render as disabled leaves."""
        return self.state is not Materialization.DENIED

    @property
    def has_known_children(self) -> bool:
        return self.state in (Materialization.LOADED, Materialization.DENIED)

    def attach(self, child: Node) -> None:
        child._parent_ref = weakref.ref(self)
        self.children.append(child)

    def detach_children(self) -> list[Node]:
        """Drop and return all children, clearing their parent links."""
        detached = self.children
        self.children = []
        for child in detached:
            child._parent_ref = None
        return detached

    def remove_child(self, child: Node) -> bool:
        for idx, existing in enumerate(self.children):
            if existing is child:
                del self.children[idx]
                child._parent_ref = None
                return True
        return False

    def ancestors(self) -> Iterator[Node]:
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def depth(self) -> int:
        return sum(1 for _ancestor in self.ancestors())

    def iter_subtree(self) -> Iterator[Node]:
        """Yield this node and every materialized descendant, depth-first."""
        stack = [self]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))


def derive_checked(node: Node, is_selected) -> bool:
    """Compute the checked state a node should display.

    Files and not-yet-loaded directories mirror their own membership. A
    loaded directory is checked only when it has at least one visible child
    and every visible child is selected; a denied directory has none.
    """
    if not node.is_dir or not node.has_known_children:
        return bool(is_selected(node.entry))
    if not node.children:
        return False
    return all(is_selected(child.entry) for child in node.children)


__all__ = ["Materialization", "Node", "NodeKind", "derive_checked"]
