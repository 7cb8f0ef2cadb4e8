"""Tree-model domain package.

This package contains the lazily materialized node hierarchy:
- ``Node`` with its materialization state and weak parent link
- the ``ViewIndex`` of materialized nodes
- ``TreeModel`` operations (load, expand, collapse, refresh, reload)
- plain-text row rendering
"""

from __future__ import annotations

from .node import Materialization, Node, NodeKind, derive_checked
from .rendering import checkbox_for, format_tree_row, iter_visible_rows, render_tree
from .tree import TreeModel
from .view_index import DuplicateNodeError, ViewIndex

__all__ = [
    "DuplicateNodeError",
    "Materialization",
    "Node",
    "NodeKind",
    "TreeModel",
    "ViewIndex",
    "checkbox_for",
    "derive_checked",
    "format_tree_row",
    "iter_visible_rows",
    "render_tree",
]
