"""Tests for lazy materialization, refresh, reload and filtering of the tree model."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazyselect.engine import SelectionEngine
from lazyselect.errors import NotFoundError
from lazyselect.file_tree_model import FileSystemGateway, FsEntry
from lazyselect.tree_model import DuplicateNodeError, Materialization, Node, ViewIndex, render_tree


def _write(path: Path, text: str = "x\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _build_sample(root: Path) -> None:
    _write(root / "a.py")
    _write(root / "b.txt")
    _write(root / "readme")
    _write(root / "src" / "main.py")
    _write(root / "src" / "util.py")
    _write(root / "src" / "data.json")
    _write(root / "src" / "nested" / "deep.py")
    _write(root / "node_modules" / "pkg.js")
    (root / "empty").mkdir()


def _names(node: Node) -> list[str]:
    return [child.name for child in node.children]


def _assert_checked_invariant(case: unittest.TestCase, engine: SelectionEngine) -> None:
    for node in engine.index:
        if node.is_dir and node.has_known_children:
            expected = bool(node.children) and all(child.entry in engine.selection for child in node.children)
        else:
            expected = node.entry in engine.selection
        case.assertEqual(node.checked, expected, f"checked mismatch for {node.path}")


class TreeModelLoadTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        _build_sample(self.root)
        self.engine = SelectionEngine(gateway=FileSystemGateway(count_lines=False))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_load_root_materializes_only_first_level(self) -> None:
        root = self.engine.load_root(self.root)

        self.assertEqual(root.state, Materialization.LOADED)
        self.assertTrue(root.expanded)
        self.assertEqual(_names(root), ["empty", "src", "a.py", "b.txt", "readme"])
        src = self.engine.node(self.root / "src")
        assert src is not None
        self.assertEqual(src.state, Materialization.UNLOADED)
        self.assertEqual(src.children, [])
        self.assertIsNone(self.engine.node(self.root / "src" / "main.py"))
        self.assertEqual(len(self.engine.index), 6)

    def test_load_root_skips_ignored_folders_in_tree_and_census(self) -> None:
        self.engine.load_root(self.root)

        self.assertIsNone(self.engine.node(self.root / "node_modules"))
        counts = self.engine.registry.counts()
        self.assertEqual(counts, {".json": 1, ".py": 4, ".txt": 1, "[no extension]": 1})

    def test_load_root_rejects_missing_or_file_paths(self) -> None:
        with self.assertRaises(NotFoundError):
            self.engine.load_root(self.root / "missing")
        with self.assertRaises(NotFoundError):
            self.engine.load_root(self.root / "a.py")

    def test_load_new_root_clears_selection_and_index(self) -> None:
        self.engine.load_root(self.root)
        self.engine.toggle(self.root / "a.py", True)
        self.assertEqual(len(self.engine.selection), 1)

        self.engine.load_root(self.root / "src")

        self.assertEqual(len(self.engine.selection), 0)
        self.assertIsNone(self.engine.node(self.root / "a.py"))
        self.assertEqual(_names(self.engine.root), ["nested", "data.json", "main.py", "util.py"])

    def test_view_index_matches_materialized_nodes_exactly(self) -> None:
        root = self.engine.load_root(self.root)
        self.engine.expand(self.root / "src")
        self.engine.expand(self.root / "src" / "nested")

        live = {node.key for node in root.iter_subtree()}
        indexed = {node.key for node in self.engine.index}
        self.assertEqual(live, indexed)
        self.assertEqual(len(live), len(self.engine.index))


class TreeModelExpandTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        _build_sample(self.root)
        self.engine = SelectionEngine(gateway=FileSystemGateway(count_lines=False))
        self.engine.load_root(self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_expand_materializes_directories_first_then_files(self) -> None:
        src = self.engine.expand(self.root / "src")

        self.assertEqual(src.state, Materialization.LOADED)
        self.assertTrue(src.expanded)
        self.assertEqual(_names(src), ["nested", "data.json", "main.py", "util.py"])
        nested = self.engine.node(self.root / "src" / "nested")
        assert nested is not None
        self.assertEqual(nested.state, Materialization.UNLOADED)
        self.assertIs(nested.parent, src)

    def test_collapse_keeps_children_and_expand_does_not_relist(self) -> None:
        src = self.engine.expand(self.root / "src")
        children_before = list(src.children)

        self.engine.collapse(src)
        self.assertFalse(src.expanded)
        self.assertEqual(src.children, children_before)

        with mock.patch.object(self.engine.gateway, "list_children") as list_children:
            self.engine.expand(src)
        list_children.assert_not_called()
        self.assertTrue(src.expanded)
        self.assertEqual(src.children, children_before)

    def test_access_denied_directory_becomes_disabled_leaf(self) -> None:
        denied = self.root / "src"
        real_list_children = self.engine.gateway.list_children

        def list_children(directory: Path, allowed_extensions=None):
            if directory == denied:
                return [], PermissionError(13, "Permission denied", str(directory))
            return real_list_children(directory, allowed_extensions)

        with mock.patch.object(self.engine.gateway, "list_children", side_effect=list_children):
            node = self.engine.expand(denied)

        self.assertEqual(node.state, Materialization.DENIED)
        self.assertFalse(node.is_interactive)
        self.assertEqual(node.children, [])
        self.assertFalse(node.checked)
        self.assertFalse(self.engine.toggle(node, True))
        self.assertNotIn(denied, self.engine.selection)

    def test_expand_all_and_collapse_all(self) -> None:
        loaded = self.engine.expand_all()

        self.assertEqual(loaded, 3)
        deep = self.engine.node(self.root / "src" / "nested" / "deep.py")
        self.assertIsNotNone(deep)
        for node in self.engine.index:
            if node.is_dir:
                self.assertTrue(node.expanded)

        self.engine.collapse_all()
        root = self.engine.root
        for node in self.engine.index:
            if node.is_dir and node is not root:
                self.assertFalse(node.expanded)
        self.assertIsNotNone(self.engine.node(self.root / "src" / "nested" / "deep.py"))

    def test_visible_children_is_empty_until_loaded(self) -> None:
        src = self.engine.node(self.root / "src")
        assert src is not None
        self.assertEqual(self.engine.tree.visible_children(src), [])
        self.engine.expand(src)
        self.assertEqual(len(self.engine.tree.visible_children(src)), 4)


class TreeModelFilterTests(unittest.TestCase):
    def test_only_enabled_extensions_are_materialized(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "a.txt")
            _write(root / "b.md")
            engine = SelectionEngine(gateway=FileSystemGateway(count_lines=False))
            engine.load_root(root)

            engine.show_only([".txt"])

            self.assertEqual(_names(engine.root), ["a.txt"])
            item = engine.registry.get(".md")
            assert item is not None
            self.assertEqual(item.count, 1)
            self.assertFalse(item.enabled)

    def test_filter_change_keeps_selection_and_expansion(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _build_sample(root)
            engine = SelectionEngine(gateway=FileSystemGateway(count_lines=False))
            engine.load_root(root)
            engine.expand(root / "src")
            engine.toggle(root / "src" / "main.py", True)

            self.assertTrue(engine.set_filter_enabled(".py", False))

            self.assertIn(root / "src" / "main.py", engine.selection)
            self.assertIsNone(engine.node(root / "src" / "main.py"))
            src = engine.node(root / "src")
            assert src is not None
            self.assertTrue(src.expanded)
            self.assertEqual(_names(src), ["nested", "data.json"])
            _assert_checked_invariant(self, engine)

            engine.set_filter_enabled(".py", True)
            main = engine.node(root / "src" / "main.py")
            assert main is not None
            self.assertTrue(main.checked)
            _assert_checked_invariant(self, engine)

    def test_disabling_every_extension_shows_everything(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "a.txt")
            _write(root / "b.md")
            engine = SelectionEngine(gateway=FileSystemGateway(count_lines=False))
            engine.load_root(root)

            engine.set_all_filters_enabled(False)

            self.assertEqual(_names(engine.root), ["a.txt", "b.md"])


class TreeModelRefreshTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        _build_sample(self.root)
        self.engine = SelectionEngine(gateway=FileSystemGateway(count_lines=False))
        self.engine.load_root(self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_refresh_picks_up_new_files_and_keeps_expansion(self) -> None:
        src = self.engine.expand(self.root / "src")
        _write(self.root / "src" / "added.py")

        self.engine.refresh(src)

        self.assertTrue(src.expanded)
        self.assertIn("added.py", _names(src))
        self.assertIsNotNone(self.engine.node(self.root / "src" / "added.py"))

    def test_refresh_forgets_selection_of_materialized_descendants(self) -> None:
        src = self.engine.expand(self.root / "src")
        self.engine.toggle(self.root / "src" / "main.py", True)
        self.engine.toggle(self.root / "b.txt", True)

        self.engine.refresh(src)

        self.assertNotIn(self.root / "src" / "main.py", self.engine.selection)
        self.assertIn(self.root / "b.txt", self.engine.selection)
        _assert_checked_invariant(self, self.engine)

    def test_refresh_to_zero_visible_children_leaves_directory_unchecked(self) -> None:
        docs = self.root / "docs"
        _write(docs / "guide.md")
        self.engine.reload()
        self.engine.expand(docs)
        self.engine.toggle(docs / "guide.md", True)
        node = self.engine.node(docs)
        assert node is not None
        self.assertTrue(node.checked)

        (docs / "guide.md").unlink()
        self.engine.refresh(node)

        self.assertEqual(node.children, [])
        self.assertFalse(node.checked)
        self.assertNotIn(docs, self.engine.selection)

    def test_reload_keeps_live_selection_filters_and_expansion(self) -> None:
        self.engine.expand(self.root / "src")
        self.engine.toggle(self.root / "src" / "main.py", True)
        self.engine.toggle(self.root / "a.py", True)
        self.engine.set_filter_enabled(".json", False)
        (self.root / "a.py").unlink()

        self.engine.reload()

        self.assertIn(self.root / "src" / "main.py", self.engine.selection)
        self.assertNotIn(self.root / "a.py", self.engine.selection)
        src = self.engine.node(self.root / "src")
        assert src is not None
        self.assertTrue(src.expanded)
        self.assertEqual(_names(src), ["nested", "main.py", "util.py"])
        item = self.engine.registry.get(".json")
        assert item is not None
        self.assertFalse(item.enabled)
        self.assertEqual(self.engine.registry.count(".py"), 3)
        _assert_checked_invariant(self, self.engine)


class ViewIndexTests(unittest.TestCase):
    def test_duplicate_paths_are_rejected_case_insensitively(self) -> None:
        index = ViewIndex()
        index.add(Node.for_entry(FsEntry.for_path(Path("/r/a.txt"), False)))

        with self.assertRaises(DuplicateNodeError):
            index.add(Node.for_entry(FsEntry.for_path(Path("/r/A.TXT"), False)))

    def test_siblings_differing_only_by_case_materialize_once(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "README")
            _write(root / "readme")
            _write(root / "docs" / "Notes.md")
            _write(root / "docs" / "notes.md")
            if len(list(root.iterdir())) < 3:
                self.skipTest("filesystem is case-insensitive")
            engine = SelectionEngine(gateway=FileSystemGateway(count_lines=False))

            with self.assertLogs("lazyselect.file_tree_model.fs", level="WARNING"):
                engine.load_root(root)
                docs = engine.expand(root / "docs")

            self.assertEqual(_names(engine.root), ["docs", "README"])
            self.assertEqual(_names(docs), ["Notes.md"])
            self.assertEqual(len(engine.index), 4)

            engine.refresh(docs)
            self.assertEqual(_names(docs), ["Notes.md"])

    def test_remove_subtree_removes_node_and_descendants_only(self) -> None:
        index = ViewIndex()
        for raw, is_dir in (("/r/a", True), ("/r/a/x.txt", False), ("/r/ab", True), ("/r/ab/y.txt", False)):
            index.add(Node.for_entry(FsEntry.for_path(Path(raw), is_dir)))

        removed = index.remove_subtree(Path("/r/a"))

        self.assertEqual({node.path for node in removed}, {Path("/r/a"), Path("/r/a/x.txt")})
        self.assertEqual(set(index.paths()), {Path("/r/ab"), Path("/r/ab/y.txt")})


class TreeRenderingTests(unittest.TestCase):
    def test_render_tree_shows_checkboxes_and_expansion_markers(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _build_sample(root)
            engine = SelectionEngine(gateway=FileSystemGateway(count_lines=False))
            engine.load_root(root)
            engine.toggle(root / "a.py", True)

            lines = render_tree(engine.root)

            self.assertEqual(lines[0], f"▾ [ ] {root.name}/")
            self.assertIn("  ▸ [ ] src/", lines)
            self.assertIn("    [x] a.py", lines)
            self.assertIn("    [ ] b.txt", lines)


if __name__ == "__main__":
    unittest.main()
