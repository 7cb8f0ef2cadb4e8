"""Presentation callbacks used by the engine for notifications and decisions.

Subclass ``PresentationObserver`` and override what the front end cares
about. Every default is inert: notifications are ignored, deletes are
declined and paste conflicts are skipped.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .errors import OperationError
    from .file_tree_model import FsEntry
    from .tree_model.node import Node


class ConflictChoice(Enum):
    OVERWRITE = "overwrite"
    SKIP = "skip"
    CANCEL_ALL = "cancel_all"


class PresentationObserver:
    def node_materialized(self, node: Node) -> None:
        pass

    def checked_changed(self, node: Node, checked: bool) -> None:
        pass

    def structure_changed(self, node: Node | None) -> None:
        """``node`` is ``None`` when the whole tree was rebuilt."""

    def filters_changed(self) -> None:
        pass

    def status(self, message: str) -> None:
        pass

    def report_error(self, error: OperationError) -> None:
        pass

    def confirm_delete(self, entries: Sequence[FsEntry]) -> bool:
        return False

    def resolve_conflict(self, source: FsEntry, target: FsEntry) -> ConflictChoice:
        return ConflictChoice.SKIP


__all__ = ["ConflictChoice", "PresentationObserver"]
