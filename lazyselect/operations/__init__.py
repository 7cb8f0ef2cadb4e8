"""Clipboard and disk mutations coordinated with the tree and selection."""

from __future__ import annotations

from .clipboard import Clipboard, ClipboardMode, top_level_entries
from .coordinator import DeleteReport, MutationCoordinator, PasteReport, RenameResult
from .names import RESERVED_CHARACTERS, validate_new_name

__all__ = [
    "Clipboard",
    "ClipboardMode",
    "DeleteReport",
    "MutationCoordinator",
    "PasteReport",
    "RESERVED_CHARACTERS",
    "RenameResult",
    "top_level_entries",
    "validate_new_name",
]
