"""Selection state and the checkbox cascade."""

from __future__ import annotations

from .cascade import CascadeMode, ChangeSet, SelectionCascade
from .selection_set import SelectionSet

__all__ = ["CascadeMode", "ChangeSet", "SelectionCascade", "SelectionSet"]
