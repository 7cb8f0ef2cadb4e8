"""Filesystem gateway: listing, recursive census, and disk mutations.

Every recursive walk skips the fixed folder ignore-list (``.git``,
``node_modules`` and friends) and ignored file names such as ``.DS_Store``.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections import Counter
from collections.abc import Iterable, Iterator
from pathlib import Path

from .text import DEFAULT_MAX_READ_BYTES, count_lines, read_text
from .types import FsEntry, extension_for

logger = logging.getLogger(__name__)

IGNORED_DIR_NAMES = frozenset(
    name.casefold()
    for name in (
        ".git",
        ".vs",
        ".vscode",
        ".idea",
        "bin",
        "obj",
        "node_modules",
        "__pycache__",
        "target",
        "build",
    )
)
IGNORED_FILE_NAMES = frozenset({".ds_store"})


def is_ignored_dir_name(name: str) -> bool:
    """Return whether a directory name is on the fixed ignore-list."""
    return name.casefold() in IGNORED_DIR_NAMES


def is_ignored_file_name(name: str) -> bool:
    """Return whether a file name is on the fixed ignore-list."""
    return name.casefold() in IGNORED_FILE_NAMES


def _scan_sorted(directory: Path) -> tuple[list[os.DirEntry[str]], list[os.DirEntry[str]]]:
    """Return ``(directories, files)`` of ``directory`` minus ignored names, each sorted by name.

    Raises the underlying ``OSError`` when the directory cannot be scanned.
    """
    directories: list[os.DirEntry[str]] = []
    files: list[os.DirEntry[str]] = []
    with os.scandir(directory) as entries:
        for child in entries:
            try:
                is_dir = child.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False
            if is_dir:
                if not is_ignored_dir_name(child.name):
                    directories.append(child)
            elif not is_ignored_file_name(child.name):
                files.append(child)
    directories.sort(key=lambda item: (item.name.lower(), item.name))
    files.sort(key=lambda item: (item.name.lower(), item.name))
    return directories, files


class FileSystemGateway:
    """Thin adapter over ``os``/``shutil`` used by the tree engine.

    ``count_lines`` controls whether listed text files carry a line count;
    tests and the background scanner turn it off to avoid reading contents.
    """

    def __init__(self, count_lines: bool = True) -> None:
        self.count_lines = count_lines

    # queries
    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def entry_for(self, path: Path) -> FsEntry | None:
        """Snapshot ``path`` as an entry, or ``None`` when it does not exist."""
        if not self.exists(path):
            return None
        return FsEntry.for_path(path, path.is_dir())

    def _file_entry(self, child: os.DirEntry[str]) -> FsEntry:
        path = Path(child.path)
        line_count: int | None = None
        if self.count_lines:
            try:
                size = child.stat(follow_symlinks=False).st_size
            except OSError:
                size = None
            line_count = count_lines(path, size) if size is not None else None
        return FsEntry(
            name=child.name,
            path=path,
            is_dir=False,
            extension=extension_for(child.name),
            line_count=line_count,
        )

    def list_children(
        self,
        directory: Path,
        allowed_extensions: frozenset[str] | None = None,
    ) -> tuple[list[FsEntry], Exception | None]:
        """List direct children, directories first, applying the extension filter to files.

        Returns ``(children, scan_error)``. ``scan_error`` is set only when
        access to ``directory`` is denied; a vanished or otherwise unreadable
        directory lists as empty. Of siblings whose names differ only by case,
        the first in sort order is kept and the rest are skipped.
        """
        try:
            directories, files = _scan_sorted(directory)
        except PermissionError as exc:
            logger.info("Access denied listing %s", directory)
            return [], exc
        except (FileNotFoundError, NotADirectoryError):
            logger.debug("Directory vanished before listing: %s", directory)
            return [], None
        except OSError as exc:
            logger.warning("Could not list %s: %s", directory, exc)
            return [], None

        children: list[FsEntry] = []
        seen: set[str] = set()
        for is_dir, group in ((True, directories), (False, files)):
            for child in group:
                folded = child.name.casefold()
                if folded in seen:
                    logger.warning("Skipping %s: its name differs from a sibling only by case", child.path)
                    continue
                seen.add(folded)
                if is_dir:
                    children.append(FsEntry(name=child.name, path=Path(child.path), is_dir=True))
                elif allowed_extensions is None or extension_for(child.name) in allowed_extensions:
                    children.append(self._file_entry(child))
        return children, None

    def iter_descendants(self, directory: Path) -> Iterator[FsEntry]:
        """Yield every descendant file and directory below ``directory``.

        Unreadable sub-directories are yielded but not descended into.
        """
        pending = [directory]
        while pending:
            current = pending.pop()
            try:
                directories, files = _scan_sorted(current)
            except OSError as exc:
                logger.debug("Skipping unreadable directory %s: %s", current, exc)
                continue
            for child in files:
                yield FsEntry(
                    name=child.name,
                    path=Path(child.path),
                    is_dir=False,
                    extension=extension_for(child.name),
                )
            for child in directories:
                yield FsEntry(name=child.name, path=Path(child.path), is_dir=True)
            pending.extend(Path(child.path) for child in reversed(directories))

    def walk_descendants(self, directory: Path) -> list[FsEntry]:
        """Return all descendants of ``directory`` regardless of any extension filter."""
        return list(self.iter_descendants(directory))

    def scan_extensions(self, root: Path) -> dict[str, int]:
        """Count files per extension under ``root``, recursively."""
        counts: Counter[str] = Counter()
        for entry in self.iter_descendants(root):
            if not entry.is_dir:
                counts[entry.extension] += 1
        return dict(counts)

    def count_extensions(self, path: Path, is_dir: bool | None = None) -> dict[str, int]:
        """Return the extension census of one file or a whole directory subtree."""
        if is_dir is None:
            is_dir = path.is_dir()
        if not is_dir:
            if is_ignored_file_name(path.name) or not self.exists(path):
                return {}
            return {extension_for(path.name): 1}
        return self.scan_extensions(path)

    def read_text(self, path: Path, max_bytes: int = DEFAULT_MAX_READ_BYTES) -> str:
        return read_text(path, max_bytes=max_bytes)

    # mutations
    def delete(self, path: Path, is_dir: bool) -> None:
        """Delete a file or a whole directory tree; a missing path is a no-op."""
        if is_dir:
            if path.is_dir():
                shutil.rmtree(path)
            return
        if self.exists(path):
            path.unlink()

    def rename(self, source: Path, target: Path) -> None:
        if not self.exists(source):
            raise FileNotFoundError(2, "Source not found", str(source))
        source.rename(target)

    def move(self, source: Path, target: Path) -> None:
        if not self.exists(source):
            raise FileNotFoundError(2, "Source not found", str(source))
        shutil.move(str(source), str(target))

    def copy(self, source: Path, target: Path, is_dir: bool) -> None:
        """Copy a file, or a directory recursively while skipping ignored names."""
        if not self.exists(source):
            raise FileNotFoundError(2, "Source not found", str(source))
        if not is_dir:
            shutil.copy2(source, target)
            return
        shutil.copytree(source, target, ignore=_copy_ignore, dirs_exist_ok=True)


def _copy_ignore(directory: str, names: Iterable[str]) -> set[str]:
    """``shutil.copytree`` ignore hook applying the fixed ignore-lists."""
    ignored: set[str] = set()
    for name in names:
        child = os.path.join(directory, name)
        if os.path.isdir(child) and not os.path.islink(child):
            if is_ignored_dir_name(name):
                ignored.add(name)
        elif is_ignored_file_name(name):
            ignored.add(name)
    return ignored


__all__ = [
    "FileSystemGateway",
    "IGNORED_DIR_NAMES",
    "IGNORED_FILE_NAMES",
    "is_ignored_dir_name",
    "is_ignored_file_name",
]
