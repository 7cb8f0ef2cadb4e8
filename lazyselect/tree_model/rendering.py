"""Formatting helpers for tree rows."""

from __future__ import annotations

from collections.abc import Iterator

from .node import Materialization, Node

DIR_COLOR = "\033[1;34m"
FILE_COLOR = "\033[38;5;250m"
DENIED_COLOR = "\033[2;31m"
COUNT_COLOR = "\033[2;38;5;245m"
RESET = "\033[0m"


def checkbox_for(node: Node) -> str:
    if not node.is_interactive:
        return "[!]"
    return "[x]" if node.checked else "[ ]"


def iter_visible_rows(root: Node) -> Iterator[tuple[Node, int]]:
    """Yield ``(node, depth)`` for the root and every node under an expanded directory."""
    stack: list[tuple[Node, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        if node.is_dir and node.expanded and node.state is Materialization.LOADED:
            stack.extend((child, depth + 1) for child in reversed(node.children))


def format_tree_row(node: Node, depth: int, show_line_counts: bool = True, color: bool = False) -> str:
    """Render one tree row as ``<indent><marker><checkbox> <name>``."""
    indent = "  " * depth
    if node.is_dir:
        name = f"{node.name}/"
        if not node.is_interactive:
            marker = "✕ "
            name_color = DENIED_COLOR
        else:
            marker = "▾ " if node.expanded and node.state is Materialization.LOADED else "▸ "
            name_color = DIR_COLOR
    else:
        name = node.name
        marker = "  "
        name_color = FILE_COLOR

    count_label = ""
    if show_line_counts and not node.is_dir and node.entry.line_count is not None:
        count_label = f" ({node.entry.line_count} lines)"

    if not color:
        return f"{indent}{marker}{checkbox_for(node)} {name}{count_label}"
    if count_label:
        count_label = f"{COUNT_COLOR}{count_label}{RESET}"
    return f"{indent}{marker}{checkbox_for(node)} {name_color}{name}{RESET}{count_label}"


def render_tree(root: Node, show_line_counts: bool = True, color: bool = False) -> list[str]:
    return [
        format_tree_row(node, depth, show_line_counts=show_line_counts, color=color)
        for node, depth in iter_visible_rows(root)
    ]


__all__ = ["checkbox_for", "format_tree_row", "iter_visible_rows", "render_tree"]
