"""Tests for the shallow/deep checkbox cascade and its checked-state invariant."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from lazyselect.engine import SelectionEngine
from lazyselect.file_tree_model import FileSystemGateway
from lazyselect.observer import PresentationObserver
from lazyselect.selection import ChangeSet


def _write(path: Path, text: str = "x\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _build_sample(root: Path) -> None:
    _write(root / "dirA" / "f1.txt")
    _write(root / "dirA" / "f2.txt")
    _write(root / "dirB" / "f3.txt")
    _write(root / "top.md")


def _selected_names(engine: SelectionEngine) -> set[str]:
    return {entry.name for entry in engine.selection}


def _assert_checked_invariant(case: unittest.TestCase, engine: SelectionEngine) -> None:
    for node in engine.index:
        if node.is_dir and node.has_known_children:
            expected = bool(node.children) and all(child.entry in engine.selection for child in node.children)
        else:
            expected = node.entry in engine.selection
        case.assertEqual(node.checked, expected, f"checked mismatch for {node.path}")


class CascadeTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        _build_sample(self.root)
        self.engine = SelectionEngine(gateway=FileSystemGateway(count_lines=False))
        self.engine.load_root(self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_deep_select_root_selects_every_descendant(self) -> None:
        self.engine.toggle(self.root, True, deep=True)

        self.assertEqual(
            _selected_names(self.engine),
            {self.root.name, "dirA", "dirB", "f1.txt", "f2.txt", "f3.txt", "top.md"},
        )
        self.assertTrue(self.engine.root.checked)
        _assert_checked_invariant(self, self.engine)

    def test_shallow_select_root_adds_only_direct_files(self) -> None:
        self.engine.toggle(self.root, True)

        self.assertEqual(_selected_names(self.engine), {"top.md"})
        self.assertFalse(self.engine.root.checked)
        dir_a = self.engine.node(self.root / "dirA")
        dir_b = self.engine.node(self.root / "dirB")
        assert dir_a is not None and dir_b is not None
        self.assertFalse(dir_a.checked)
        self.assertFalse(dir_b.checked)
        _assert_checked_invariant(self, self.engine)

    def test_shallow_select_of_unloaded_directory_mirrors_membership(self) -> None:
        self.engine.toggle(self.root / "dirA", True)

        dir_a = self.engine.node(self.root / "dirA")
        assert dir_a is not None
        self.assertTrue(dir_a.checked)
        self.assertEqual(_selected_names(self.engine), {"dirA", "f1.txt", "f2.txt"})
        _assert_checked_invariant(self, self.engine)

        self.engine.expand(dir_a)
        self.assertTrue(dir_a.checked)
        _assert_checked_invariant(self, self.engine)

    def test_expanding_shallow_selected_directory_settles_its_membership(self) -> None:
        _write(self.root / "dirA" / "sub" / "g.txt")
        self.engine.reload()
        self.engine.toggle(self.root / "dirA", True)
        self.assertIn(self.root / "dirA", self.engine.selection)

        self.engine.expand(self.root / "dirA")

        dir_a = self.engine.node(self.root / "dirA")
        assert dir_a is not None
        self.assertFalse(dir_a.checked)
        self.assertNotIn(self.root / "dirA", self.engine.selection)
        self.assertEqual(_selected_names(self.engine), {"f1.txt", "f2.txt"})
        _assert_checked_invariant(self, self.engine)

        self.engine.toggle(self.root / "dirA" / "sub", True)
        self.assertTrue(dir_a.checked)
        self.assertEqual(_selected_names(self.engine), {"dirA", "f1.txt", "f2.txt", "sub", "g.txt"})
        _assert_checked_invariant(self, self.engine)

    def test_file_toggles_settle_parent_and_root(self) -> None:
        self.engine.expand(self.root / "dirA")
        dir_a = self.engine.node(self.root / "dirA")
        assert dir_a is not None

        self.engine.toggle(self.root / "dirA" / "f1.txt", True)
        self.assertFalse(dir_a.checked)

        self.engine.toggle(self.root / "dirA" / "f2.txt", True)
        self.assertTrue(dir_a.checked)
        self.assertIn(self.root / "dirA", self.engine.selection)
        _assert_checked_invariant(self, self.engine)

        self.engine.toggle(self.root / "dirA" / "f2.txt", False)
        self.assertFalse(dir_a.checked)
        self.assertNotIn(self.root / "dirA", self.engine.selection)
        _assert_checked_invariant(self, self.engine)

    def test_leaf_toggle_on_then_off_restores_previous_state(self) -> None:
        self.engine.expand(self.root / "dirA")
        self.engine.toggle(self.root / "dirA" / "f1.txt", True)
        self.engine.toggle(self.root / "dirB", True, deep=True)
        before_selection = set(self.engine.selection.paths())
        before_checked = {node.path: node.checked for node in self.engine.index}

        self.engine.toggle(self.root / "dirA" / "f2.txt", True)
        self.engine.toggle(self.root / "dirA" / "f2.txt", False)

        self.assertEqual(set(self.engine.selection.paths()), before_selection)
        self.assertEqual({node.path: node.checked for node in self.engine.index}, before_checked)

    def test_repeated_toggle_is_idempotent(self) -> None:
        self.engine.toggle(self.root / "dirA", True, deep=True)
        first = set(self.engine.selection.paths())

        changes = self.engine.toggle(self.root / "dirA", True, deep=True)

        self.assertFalse(changes)
        self.assertEqual(set(self.engine.selection.paths()), first)

    def test_deep_deselect_clears_descendants(self) -> None:
        self.engine.toggle(self.root, True, deep=True)
        self.engine.toggle(self.root, False, deep=True)

        self.assertEqual(len(self.engine.selection), 0)
        for node in self.engine.index:
            self.assertFalse(node.checked)

    def test_deep_select_with_expanded_empty_directory_leaves_root_unchecked(self) -> None:
        (self.root / "empty").mkdir()
        self.engine.reload()
        self.engine.expand(self.root / "empty")

        self.engine.toggle(self.root, True, deep=True)

        empty = self.engine.node(self.root / "empty")
        assert empty is not None
        self.assertFalse(empty.checked)
        self.assertFalse(self.engine.root.checked)
        self.assertIn(self.root / "dirA" / "f1.txt", self.engine.selection)
        _assert_checked_invariant(self, self.engine)

    def test_shallow_toggle_uses_active_filter_but_deep_ignores_it(self) -> None:
        _write(self.root / "dirA" / "notes.md")
        self.engine.reload()
        self.engine.show_only([".md"])

        self.engine.toggle(self.root / "dirA", True)
        self.assertEqual(_selected_names(self.engine), {"dirA", "notes.md"})

        self.engine.clear_selection()
        self.engine.toggle(self.root / "dirA", True, deep=True)
        self.assertEqual(_selected_names(self.engine), {"dirA", "notes.md", "f1.txt", "f2.txt"})

    def test_filter_change_never_mutates_selection(self) -> None:
        self.engine.toggle(self.root / "top.md", True)
        self.engine.expand(self.root / "dirA")
        self.engine.toggle(self.root / "dirA" / "f1.txt", True)
        before = set(self.engine.selection.paths())

        self.engine.set_filter_enabled(".txt", False)
        self.assertEqual(set(self.engine.selection.paths()), before)
        self.engine.set_filter_enabled(".txt", True)
        self.assertEqual(set(self.engine.selection.paths()), before)
        _assert_checked_invariant(self, self.engine)

    def test_change_set_reports_membership_and_checked_changes(self) -> None:
        changes = self.engine.toggle(self.root / "top.md", True)

        self.assertEqual([entry.name for entry in changes.selected], ["top.md"])
        self.assertEqual(changes.deselected, [])
        self.assertEqual(changes.checked, {self.root / "top.md": True})

    def test_clear_selection_unchecks_every_node(self) -> None:
        self.engine.expand(self.root / "dirA")
        self.engine.toggle(self.root, True, deep=True)

        changes = self.engine.clear_selection()

        self.assertEqual(len(self.engine.selection), 0)
        self.assertEqual(len(changes.deselected), 7)
        for node in self.engine.index:
            self.assertFalse(node.checked)


class EchoingObserver(PresentationObserver):
    def __init__(self) -> None:
        self.engine: SelectionEngine | None = None
        self.echo_results: list[ChangeSet] = []

    def checked_changed(self, node, checked: bool) -> None:
        assert self.engine is not None
        self.echo_results.append(self.engine.toggle(node, checked))


class CascadeReentrancyTests(unittest.TestCase):
    def test_toggle_requested_during_cascade_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _build_sample(root)
            observer = EchoingObserver()
            engine = SelectionEngine(observer=observer, gateway=FileSystemGateway(count_lines=False))
            observer.engine = engine
            engine.load_root(root)

            engine.toggle(root / "dirA", True, deep=True)

            self.assertTrue(observer.echo_results)
            self.assertTrue(all(not result for result in observer.echo_results))
            self.assertEqual(_selected_names(engine), {"dirA", "f1.txt", "f2.txt"})


if __name__ == "__main__":
    unittest.main()
