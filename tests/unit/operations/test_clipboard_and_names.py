"""Tests for clipboard capture, rename validation and OS error classification."""

from __future__ import annotations

import errno
import unittest
from pathlib import Path

from lazyselect.errors import (
    AccessDeniedError,
    EmptyNameError,
    ErrorKind,
    InUseError,
    NameCollisionError,
    NotFoundError,
    OtherIOError,
    ReservedCharacterError,
    UnchangedNameError,
    classify_os_error,
)
from lazyselect.file_tree_model import FsEntry
from lazyselect.operations import Clipboard, ClipboardMode, top_level_entries, validate_new_name


def _entry(raw: str, is_dir: bool = False) -> FsEntry:
    return FsEntry.for_path(Path(raw), is_dir)


class ClipboardTests(unittest.TestCase):
    def test_capture_drops_entries_covered_by_a_captured_directory(self) -> None:
        entries = [
            _entry("/r/src/main.py"),
            _entry("/r/src", True),
            _entry("/r/srcs/other.py"),
            _entry("/r/a.py"),
        ]

        kept = top_level_entries(entries)

        self.assertEqual([entry.path for entry in kept], [Path("/r/src"), Path("/r/srcs/other.py"), Path("/r/a.py")])

    def test_clipboard_forgets_mode_once_emptied(self) -> None:
        clipboard = Clipboard()
        first = _entry("/r/a.py")
        second = _entry("/r/b.py")
        clipboard.capture([first, second], ClipboardMode.CUT)
        self.assertTrue(clipboard.is_cut)

        clipboard.discard([_entry("/R/A.PY")])
        self.assertEqual(clipboard.entries(), [second])
        self.assertTrue(clipboard.is_cut)

        clipboard.discard([second])
        self.assertFalse(clipboard)
        self.assertIsNone(clipboard.mode)

    def test_capturing_nothing_leaves_no_mode(self) -> None:
        clipboard = Clipboard()
        clipboard.capture([], ClipboardMode.COPY)
        self.assertIsNone(clipboard.mode)


class RenameValidationTests(unittest.TestCase):
    def test_returns_trimmed_name(self) -> None:
        self.assertEqual(validate_new_name("a.py", "  b.py "), "b.py")

    def test_case_only_change_is_allowed(self) -> None:
        self.assertEqual(validate_new_name("readme.md", "README.md"), "README.md")

    def test_each_violation_has_its_own_error(self) -> None:
        with self.assertRaises(EmptyNameError):
            validate_new_name("a.py", "")
        for bad in ("a<b", "a>b", 'a"b', "a|b", "a?b", "a*b", "a:b", "a\\b", "..", "x\x01"):
            with self.assertRaises(ReservedCharacterError, msg=bad):
                validate_new_name("a.py", bad)
        with self.assertRaises(UnchangedNameError):
            validate_new_name("a.py", "a.py")


class ClassifyOsErrorTests(unittest.TestCase):
    def test_maps_common_failures(self) -> None:
        path = Path("/r/a.py")
        self.assertIsInstance(classify_os_error(PermissionError(errno.EACCES, "denied"), path), AccessDeniedError)
        self.assertIsInstance(classify_os_error(FileNotFoundError(errno.ENOENT, "gone"), path), NotFoundError)
        self.assertIsInstance(classify_os_error(FileExistsError(errno.EEXIST, "exists"), path), NameCollisionError)
        self.assertIsInstance(classify_os_error(OSError(errno.EBUSY, "busy"), path), InUseError)
        self.assertIsInstance(classify_os_error(OSError(errno.EIO, "io"), path), OtherIOError)

    def test_windows_sharing_violation_is_in_use(self) -> None:
        exc = PermissionError(errno.EACCES, "used by another process")
        exc.winerror = 32  # type: ignore[attr-defined]

        error = classify_os_error(exc, Path("/r/a.py"))

        self.assertIsInstance(error, InUseError)
        self.assertEqual(error.kind, ErrorKind.IN_USE)
        self.assertEqual(error.path, Path("/r/a.py"))


if __name__ == "__main__":
    unittest.main()
