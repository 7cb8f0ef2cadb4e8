"""Validation of user-entered file and directory names."""

from __future__ import annotations

from pathlib import Path

from ..errors import EmptyNameError, ReservedCharacterError, UnchangedNameError

RESERVED_CHARACTERS = frozenset('<>:"/\\|?*')


def validate_new_name(current_name: str, new_name: str, path: Path | None = None) -> str:
    """Return the trimmed ``new_name`` or raise the matching ``InvalidNameError``.

    Changing only the letter case of a name is a valid rename.
    """
    name = new_name.strip()
    if not name:
        raise EmptyNameError(path, "Name cannot be empty")
    invalid = sorted({char for char in name if char in RESERVED_CHARACTERS or ord(char) < 32})
    if invalid or name in {".", ".."}:
        shown = " ".join(repr(char) for char in invalid) or name
        raise ReservedCharacterError(path, f"Name contains characters that are not allowed ({shown})")
    if name == current_name:
        raise UnchangedNameError(path, "Name is unchanged")
    return name


__all__ = ["RESERVED_CHARACTERS", "validate_new_name"]
