"""Command-line front door for lazyselect.

Parses CLI options, loads the root directory into a ``SelectionEngine``,
applies extension filters and selections, then prints the visible tree with
its checkboxes. ``--preview`` prints one text file instead.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .engine import SelectionEngine
from .errors import OperationError
from .file_tree_model import DEFAULT_MAX_READ_BYTES, FileTooLargeError, is_same_or_under, read_text
from .observer import PresentationObserver
from .runtime.config import (
    add_saved_path,
    load_disabled_extensions,
    load_last_root,
    load_saved_paths,
    remove_saved_path,
    save_disabled_extensions,
    save_last_root,
)
from .runtime.logs import setup_logging
from .tree_model import render_tree

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


class ConsoleObserver(PresentationObserver):
    """Routes engine notifications to the log and errors to stderr."""

    def status(self, message: str) -> None:
        logger.info("%s", message)

    def report_error(self, error: OperationError) -> None:
        sys.stderr.write(f"lazyselect: {error}\n")


def _reveal(engine: SelectionEngine, path: Path) -> None:
    """Expand every directory between the root and ``path`` so it gets a node."""
    root_path = engine.root_path
    if root_path is None or not is_same_or_under(path, root_path):
        return
    current = root_path
    for part in path.relative_to(root_path).parts[:-1]:
        current = current / part
        if engine.node(current) is None:
            return
        engine.expand(current)


def _resolve_selection(root: Path, raw: str) -> Path:
    candidate = Path(raw).expanduser()
    if not candidate.is_absolute():
        candidate = root / candidate
    return candidate.resolve()


def _saved_path_named(name: str) -> Path | None:
    """Return the bookmarked directory labelled ``name`` unless ``name`` is itself a directory."""
    if Path(name).expanduser().is_dir():
        return None
    folded = name.casefold()
    for item in load_saved_paths():
        if item.label.casefold() == folded:
            return item.path
    return None


def render_filters(engine: SelectionEngine) -> list[str]:
    return [f"[{'x' if item.enabled else ' '}] {item.display}" for item in engine.filters()]


def main(default_path: Path | None = None) -> None:
    """Parse CLI arguments and print the selection tree for a root directory.

    Without a positional root the last loaded root from the config is used,
    then ``default_path`` (primarily for tests), then the current working
    directory.
    """
    parser = argparse.ArgumentParser(
        description="Browse a directory as a lazily loaded tree with extension filters and checkbox selection."
    )
    parser.add_argument("path", nargs="?", default=None, help="Root directory. Defaults to the last root or cwd.")
    parser.add_argument(
        "--only",
        metavar="EXT",
        action="append",
        default=[],
        help="Show only files with this extension (repeatable, e.g. --only .py).",
    )
    parser.add_argument(
        "--select",
        metavar="PATH",
        action="append",
        default=[],
        help="Check PATH (relative to the root) before printing (repeatable).",
    )
    parser.add_argument("--deep", action="store_true", help="Make --select include every descendant.")
    parser.add_argument("--expand-all", action="store_true", help="Expand every directory before printing.")
    parser.add_argument("--filters", action="store_true", help="Also print the extension filter table.")
    parser.add_argument(
        "--remember-filters",
        action="store_true",
        help="Save the extensions hidden by --only so later runs hide them too.",
    )
    parser.add_argument(
        "--save-path",
        metavar="NAME",
        nargs="?",
        const="",
        default=None,
        help="Bookmark the root directory, optionally under NAME.",
    )
    parser.add_argument("--forget-path", metavar="PATH", help="Remove PATH from the bookmarks and exit.")
    parser.add_argument("--saved", action="store_true", help="List bookmarked directories and exit.")
    parser.add_argument("--preview", metavar="FILE", help="Print the text of FILE and exit.")
    parser.add_argument(
        "--max-preview-bytes",
        type=_positive_int,
        default=DEFAULT_MAX_READ_BYTES,
        help="Refuse to preview files larger than this many bytes.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    args = parser.parse_args()

    setup_logging(verbose=args.verbose)

    if args.saved:
        lines = [f"{item.label}\t{item.path}" for item in load_saved_paths()]
        sys.stdout.write("".join(f"{line}\n" for line in lines) or "No saved paths\n")
        return

    if args.forget_path is not None:
        forget = Path(args.forget_path).expanduser().resolve()
        if not remove_saved_path(forget):
            raise SystemExit(f"Not a saved path: {forget}")
        sys.stdout.write(f"Forgot {forget}\n")
        return

    if args.preview is not None:
        preview_path = Path(args.preview)
        if not preview_path.is_file():
            raise SystemExit(f"File not found: {preview_path}")
        try:
            text = read_text(preview_path, max_bytes=args.max_preview_bytes)
        except FileTooLargeError as exc:
            raise SystemExit(f"File too large to preview: {exc}") from exc
        sys.stdout.write(text if text.endswith("\n") or not text else text + "\n")
        return

    if args.path is not None:
        root = _saved_path_named(args.path) or Path(args.path)
    else:
        root = load_last_root() or default_path or Path.cwd()
    if not root.is_dir():
        raise SystemExit(f"Directory not found: {root}")

    engine = SelectionEngine(observer=ConsoleObserver())
    engine.load_root(root)
    root_path = engine.root_path
    assert root_path is not None

    if args.only:
        engine.show_only(args.only)
        if args.remember_filters:
            save_disabled_extensions([item.extension for item in engine.filters() if not item.enabled])
    else:
        disabled = load_disabled_extensions()
        if disabled:
            engine.disable_extensions(disabled)

    if args.expand_all:
        engine.expand_all()

    for raw in args.select:
        target = _resolve_selection(root_path, raw)
        _reveal(engine, target)
        try:
            engine.toggle_path(target, True, deep=args.deep)
        except OperationError as exc:
            sys.stderr.write(f"lazyselect: cannot select {raw}: {exc}\n")

    color = sys.stdout.isatty() and not args.no_color
    root_node = engine.root
    assert root_node is not None
    lines = render_tree(root_node, color=color)
    if args.filters:
        lines.append("")
        lines.extend(render_filters(engine))
    selected = engine.selected_entries()
    if selected:
        lines.append("")
        lines.append(f"{len(selected)} selected")
    sys.stdout.write("\n".join(lines) + "\n")

    save_last_root(root_path)
    if args.save_path is not None:
        saved = add_saved_path(root_path, args.save_path or None)
        logger.info("Saved %s as %s", root_path, saved.label)


if __name__ == "__main__":
    main()
