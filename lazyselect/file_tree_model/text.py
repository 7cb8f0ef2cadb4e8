"""Text-file detection, line counting, and tolerant text loading.

Known text extensions are checked first; anything else is asked of the
Pygments lexer registry, which recognizes most source and markup formats.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .types import NO_EXTENSION, extension_for

logger = logging.getLogger(__name__)

MAX_LINE_COUNT_BYTES = 10 * 1024 * 1024
DEFAULT_MAX_READ_BYTES = 5 * 1024 * 1024

TEXT_FILE_EXTENSIONS = frozenset(
    {
        ".txt", ".log", ".md", ".csv", ".tsv", ".rtf",
        ".html", ".htm", ".css", ".js", ".jsx", ".ts", ".tsx", ".json", ".xml",
        ".yaml", ".yml", ".svg", ".vue", ".svelte",
        ".config", ".ini", ".toml", ".conf", ".properties", ".env", ".editorconfig",
        ".csproj", ".sln", ".xaml", ".gradle", ".settings", ".props",
        ".bat", ".cmd", ".ps1", ".sh", ".bash", ".zsh", ".fish", ".py", ".rb",
        ".php", ".pl", ".lua", ".tcl",
        ".cs", ".java", ".c", ".cpp", ".h", ".hpp", ".go", ".rs", ".swift", ".kt",
        ".scala", ".dart", ".groovy", ".m", ".r", ".sql", ".vb", ".fs", ".pas",
        ".gitignore", ".dockerignore", ".gitattributes", ".readme", ".inf", ".tex",
    }
)
TEXT_FILE_NAMES = frozenset({"dockerfile", "license", "readme", "makefile"})

_PYGMENTS_READY = False
_PYGMENTS_GET_LEXER_FOR_FILENAME = None
_PYGMENTS_CLASS_NOT_FOUND: type[Exception] | None = None
_LEXER_VERDICTS: dict[str, bool] = {}


class FileTooLargeError(OSError):
    """Raised when a file exceeds the configured read limit."""

    def __init__(self, path: Path, size: int, limit: int) -> None:
        super().__init__(f"{path} is {size / 1024 / 1024:.2f} MB (limit {limit / 1024 / 1024:.2f} MB)")
        self.path = path
        self.size = size
        self.limit = limit


def _ensure_pygments_loaded() -> None:
    """Import and cache the Pygments lexer lookup on first use."""
    global _PYGMENTS_READY
    global _PYGMENTS_GET_LEXER_FOR_FILENAME
    global _PYGMENTS_CLASS_NOT_FOUND

    if _PYGMENTS_READY:
        return
    from pygments.lexers import get_lexer_for_filename
    from pygments.util import ClassNotFound

    _PYGMENTS_GET_LEXER_FOR_FILENAME = get_lexer_for_filename
    _PYGMENTS_CLASS_NOT_FOUND = ClassNotFound
    _PYGMENTS_READY = True


def _pygments_knows(name: str) -> bool:
    """Return whether Pygments has a lexer registered for ``name``."""
    folded = name.casefold()
    cached = _LEXER_VERDICTS.get(folded)
    if cached is not None:
        return cached
    _ensure_pygments_loaded()
    assert _PYGMENTS_GET_LEXER_FOR_FILENAME is not None
    assert _PYGMENTS_CLASS_NOT_FOUND is not None
    try:
        _PYGMENTS_GET_LEXER_FOR_FILENAME(name)
        verdict = True
    except _PYGMENTS_CLASS_NOT_FOUND:
        verdict = False
    _LEXER_VERDICTS[folded] = verdict
    return verdict


def is_text_file(path: Path) -> bool:
    """Return whether ``path`` likely names a text file, judging by its name only."""
    name = path.name
    extension = extension_for(name)
    if extension == NO_EXTENSION:
        lowered = name.lower()
        return lowered in TEXT_FILE_NAMES or lowered.endswith("rc")
    if extension in TEXT_FILE_EXTENSIONS:
        return True
    return _pygments_knows(name)


def count_lines(path: Path, size: int | None = None) -> int | None:
    """Count lines of a text file, or ``None`` for non-text, oversized, or unreadable files."""
    if not is_text_file(path):
        return None
    if size is None:
        try:
            size = path.stat().st_size
        except OSError:
            return None
    if size > MAX_LINE_COUNT_BYTES:
        return None
    try:
        with path.open("rb") as handle:
            return sum(1 for _line in handle)
    except OSError as exc:
        logger.debug("Could not count lines in %s: %s", path, exc)
        return None


def read_text(path: Path, max_bytes: int = DEFAULT_MAX_READ_BYTES) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics. Raises ``FileTooLargeError``
    above ``max_bytes`` and lets other ``OSError``s propagate.
    """
    size = path.stat().st_size
    if size > max_bytes:
        raise FileTooLargeError(path, size, max_bytes)
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


__all__ = [
    "DEFAULT_MAX_READ_BYTES",
    "FileTooLargeError",
    "MAX_LINE_COUNT_BYTES",
    "count_lines",
    "is_text_file",
    "read_text",
]
