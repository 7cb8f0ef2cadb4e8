"""Copy / cut / paste / delete / rename around each disk operation.

Each operation calls the gateway, then brings the tree, view index,
selection and filter counts back in line as one step, and finally refreshes
the affected parents. When a parent cannot be refreshed in place (it is the
root, or it is not materialized) the whole root is reloaded instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import (
    AccessDeniedError,
    NameCollisionError,
    NotFoundError,
    OperationError,
    SelfContainmentError,
    UnexpectedError,
    classify_os_error,
)
from ..file_tree_model import (
    FileSystemGateway,
    FsEntry,
    extension_for,
    is_ignored_dir_name,
    is_same_or_under,
    path_key,
)
from ..filter_registry import FilterRegistry
from ..observer import ConflictChoice, PresentationObserver
from ..selection import SelectionCascade, SelectionSet
from ..tree_model import Node, TreeModel
from .clipboard import Clipboard, ClipboardMode, top_level_entries
from .names import validate_new_name

logger = logging.getLogger(__name__)


@dataclass
class PasteReport:
    destination: Path
    mode: ClipboardMode | None = None
    pasted: list[FsEntry] = field(default_factory=list)
    skipped: list[FsEntry] = field(default_factory=list)
    errors: list[OperationError] = field(default_factory=list)
    cancelled: bool = False
    aborted: bool = False
    full_reload: bool = False


@dataclass
class DeleteReport:
    confirmed: bool = False
    deleted: list[FsEntry] = field(default_factory=list)
    errors: list[OperationError] = field(default_factory=list)
    aborted: bool = False
    full_reload: bool = False


@dataclass
class RenameResult:
    old_entry: FsEntry
    new_entry: FsEntry
    reselected: bool = False
    full_reload: bool = False


class _BatchAborted(Exception):
    pass


class MutationCoordinator:
    def __init__(
        self,
        tree: TreeModel,
        selection: SelectionSet,
        cascade: SelectionCascade,
        registry: FilterRegistry,
        gateway: FileSystemGateway,
        clipboard: Clipboard | None = None,
        observer: PresentationObserver | None = None,
    ) -> None:
        self.tree = tree
        self.selection = selection
        self.cascade = cascade
        self.registry = registry
        self.gateway = gateway
        self.clipboard = clipboard if clipboard is not None else Clipboard()
        self.observer = observer or PresentationObserver()

    # helpers
    def _within_root(self, path: Path) -> bool:
        root_path = self.tree.root_path
        return root_path is not None and is_same_or_under(path, root_path)

    def _counted(self, path: Path, is_dir: bool) -> bool:
        """Return whether the root census covers ``path``: inside the root and outside ignored folders."""
        root_path = self.tree.root_path
        if root_path is None or not is_same_or_under(path, root_path):
            return False
        parts = path.parts[len(root_path.parts):]
        folders = parts if is_dir else parts[:-1]
        return not any(is_ignored_dir_name(name) for name in folders)

    def _report(self, errors: list[OperationError], error: OperationError) -> None:
        logger.warning("%s", error)
        errors.append(error)
        self.observer.report_error(error)

    def _forget(self, path: Path) -> None:
        """Drop ``path`` and everything below it from the view and the selection."""
        self.tree.remove_subtree(path)
        self.selection.discard_under(path)

    def _selected_under(self, directory: Path) -> list[FsEntry]:
        return [entry for entry in self.selection if is_same_or_under(entry.path, directory)]

    def _reselect(self, entries: Iterable[FsEntry]) -> None:
        """Put back selections a parent refresh swept away, for entries still on disk."""
        for entry in entries:
            if entry in self.selection or not self.gateway.exists(entry.path):
                continue
            node = self.tree.node(entry.path)
            if node is not None:
                self.cascade.restore(node)
            else:
                self.selection.add(entry)

    def _full_reload(self, errors: list[OperationError]) -> None:
        try:
            self.tree.reload()
        except OperationError as exc:
            self._report(errors, exc)

    def _refresh_parents(self, parents: Iterable[Path], errors: list[OperationError]) -> bool:
        """Refresh each distinct parent, ancestors first; returns whether a full reload ran."""
        distinct = {path_key(path): path for path in parents if self._within_root(path)}
        if not distinct:
            return False
        for path in distinct.values():
            node = self.tree.node(path)
            if node is None or self.tree.is_root(node):
                logger.debug("Falling back to full reload for %s", path)
                self._full_reload(errors)
                return True
        for path in sorted(distinct.values(), key=lambda item: len(item.parts)):
            node = self.tree.node(path)
            if node is None:
                continue
            self.tree.refresh(node)
        return False

    # clipboard
    def copy(self, entries: Sequence[FsEntry] | None = None) -> int:
        captured = self.clipboard.capture(
            self.selection.entries() if entries is None else entries, ClipboardMode.COPY
        )
        self.observer.status(f"Copied {len(captured)} item(s) to the clipboard")
        return len(captured)

    def cut(self, entries: Sequence[FsEntry] | None = None) -> int:
        captured = self.clipboard.capture(
            self.selection.entries() if entries is None else entries, ClipboardMode.CUT
        )
        self.observer.status(f"Cut {len(captured)} item(s) to the clipboard")
        return len(captured)

    def paste_target(self, focused: Path | str | None = None) -> Path:
        """Return the destination directory for a paste given the focused path."""
        root_path = self.tree.root_path
        if root_path is None:
            raise NotFoundError(None, "No root loaded")
        if focused is None:
            return root_path
        focused_path = Path(focused)
        node = self.tree.node(focused_path)
        is_dir = node.is_dir if node is not None else self.gateway.is_dir(focused_path)
        if is_dir:
            return node.path if node is not None else focused_path
        return focused_path.parent

    # paste
    def paste(self, destination: Path | str) -> PasteReport:
        destination = Path(destination)
        report = PasteReport(destination=destination, mode=self.clipboard.mode)
        if not self.clipboard:
            self.observer.status("The clipboard is empty")
            return report
        if not self.gateway.is_dir(destination):
            raise NotFoundError(destination, "Paste destination is not a directory")

        is_cut = self.clipboard.is_cut
        marked: list[Path] = []
        vanished: list[FsEntry] = []
        for source in self.clipboard.entries():
            try:
                outcome = self._paste_one(source, destination, is_cut, report, marked)
            except _BatchAborted:
                report.cancelled = True
                break
            except Exception as exc:
                logger.exception("Unexpected failure pasting %s", source.path)
                self._report(report.errors, UnexpectedError(source.path, f"Unexpected error: {exc}"))
                report.aborted = True
                break
            if outcome is None:
                report.skipped.append(source)
            elif outcome:
                report.pasted.append(source)
            else:
                vanished.append(source)

        if is_cut:
            self.clipboard.discard([*report.pasted, *vanished])

        if report.aborted:
            self._full_reload(report.errors)
            report.full_reload = True
        else:
            report.full_reload = self._refresh_parents(marked, report.errors)

        verb = "Moved" if is_cut else "Pasted"
        if report.pasted:
            self.observer.status(f"{verb} {len(report.pasted)} item(s) into {destination.name or destination}")
        else:
            self.observer.status("Nothing was pasted")
        logger.info(
            "%s %d item(s) into %s (%d skipped, %d errors)",
            verb,
            len(report.pasted),
            destination,
            len(report.skipped),
            len(report.errors),
        )
        return report

    def _paste_one(
        self,
        source: FsEntry,
        destination: Path,
        is_cut: bool,
        report: PasteReport,
        marked: list[Path],
    ) -> bool | None:
        """Paste one item. Returns ``True`` when pasted, ``False`` when the
        source vanished, ``None`` when skipped."""
        target = destination / source.name
        if path_key(source.path) == path_key(target):
            return None
        if not self.gateway.exists(source.path):
            self._report(report.errors, NotFoundError(source.path, "Source no longer exists"))
            return False
        if source.is_dir and is_same_or_under(destination, source.path):
            action = "move" if is_cut else "copy"
            self._report(
                report.errors,
                SelfContainmentError(source.path, f"Cannot {action} a folder into itself"),
            )
            return None

        existing = self.gateway.entry_for(target)
        if existing is not None:
            choice = self.observer.resolve_conflict(source, existing)
            if choice is ConflictChoice.CANCEL_ALL:
                raise _BatchAborted()
            if choice is not ConflictChoice.OVERWRITE:
                return None
            if not self._overwrite(existing, report):
                return None

        try:
            if is_cut:
                census = self.gateway.count_extensions(source.path, source.is_dir)
                self.gateway.move(source.path, target)
            else:
                self.gateway.copy(source.path, target, source.is_dir)
                census = self.gateway.count_extensions(target, source.is_dir)
        except OSError as exc:
            self._report(report.errors, classify_os_error(exc, source.path))
            return None

        if is_cut:
            if self._counted(source.path, source.is_dir) and not self._counted(target, source.is_dir):
                self.registry.subtract_counts(census)
            elif self._counted(target, source.is_dir) and not self._counted(source.path, source.is_dir):
                self.registry.add_counts(census)
            self._forget(source.path)
            marked.append(source.path.parent)
        elif self._counted(target, source.is_dir):
            self.registry.add_counts(census)
        marked.append(destination)
        return True

    def _overwrite(self, existing: FsEntry, report: PasteReport) -> bool:
        census = self.gateway.count_extensions(existing.path, existing.is_dir)
        try:
            self.gateway.delete(existing.path, existing.is_dir)
        except OSError as exc:
            self._report(report.errors, classify_os_error(exc, existing.path))
            return False
        self._forget(existing.path)
        if self._counted(existing.path, existing.is_dir):
            self.registry.subtract_counts(census)
        return True

    # delete
    def delete(self, entries: Sequence[FsEntry] | None = None) -> DeleteReport:
        targets = top_level_entries(self.selection.entries() if entries is None else entries)
        report = DeleteReport()
        if not targets:
            return report
        if not self.observer.confirm_delete(targets):
            self.observer.status("Delete cancelled")
            return report
        report.confirmed = True

        root_path = self.tree.root_path
        removable: list[FsEntry] = []
        for target in targets:
            if root_path is not None and target.key == path_key(root_path):
                self._report(report.errors, AccessDeniedError(target.path, "Cannot delete the loaded root"))
            else:
                removable.append(target)
        for target in removable:
            self.cascade.deselect_under(target.path)

        parents: list[Path] = []
        for target in removable:
            try:
                self._delete_one(target, report, parents)
            except Exception as exc:
                logger.exception("Unexpected failure deleting %s", target.path)
                self._report(report.errors, UnexpectedError(target.path, f"Unexpected error: {exc}"))
                report.aborted = True
                break

        if report.aborted:
            self._full_reload(report.errors)
            report.full_reload = True
        else:
            report.full_reload = self._refresh_parents(parents, report.errors)

        self.observer.status(f"Deleted {len(report.deleted)} item(s)")
        logger.info("Deleted %d item(s), %d errors", len(report.deleted), len(report.errors))
        return report

    def _delete_one(self, target: FsEntry, report: DeleteReport, parents: list[Path]) -> None:
        census: dict[str, int] = {}
        if self._counted(target.path, target.is_dir):
            census = self.gateway.count_extensions(target.path, target.is_dir)
        try:
            self.gateway.delete(target.path, target.is_dir)
        except OSError as exc:
            self._report(report.errors, classify_os_error(exc, target.path))
            return
        self._forget(target.path)
        self.registry.subtract_counts(census)
        report.deleted.append(target)
        parents.append(target.path.parent)

    # rename
    def rename(self, item: FsEntry | Path | str, new_name: str) -> RenameResult:
        """Rename one entry in place.

        Validation failures raise before anything touches the disk. An OS
        failure reconciles the view and then raises the classified error.
        """
        if isinstance(item, FsEntry):
            entry = item
        else:
            found = self.gateway.entry_for(Path(item))
            if found is None:
                raise NotFoundError(Path(item), "No longer exists")
            entry = found

        name = validate_new_name(entry.name, new_name, entry.path)
        root_path = self.tree.root_path
        if root_path is not None and entry.key == path_key(root_path):
            raise AccessDeniedError(entry.path, "Cannot rename the loaded root")
        target = entry.path.with_name(name)
        if path_key(target) != entry.key and self.gateway.exists(target):
            raise NameCollisionError(target, "An item with that name already exists")
        if not self.gateway.exists(entry.path):
            raise NotFoundError(entry.path, "No longer exists")

        was_selected = entry in self.selection
        self._forget(entry.path)
        siblings = self._selected_under(entry.path.parent)
        try:
            self.gateway.rename(entry.path, target)
        except OSError as exc:
            error = classify_os_error(exc, entry.path)
            logger.warning("Rename of %s failed: %s", entry.path, error)
            self._refresh_parents([entry.path.parent], [])
            self._reselect(siblings)
            raise error from exc

        new_entry = FsEntry.for_path(target, entry.is_dir)
        old_extension = extension_for(entry.name)
        if not entry.is_dir and old_extension != new_entry.extension and self._counted(target, False):
            self.registry.adjust_count(old_extension, -1)
            self.registry.adjust_count(new_entry.extension, 1)
            self.observer.filters_changed()

        errors: list[OperationError] = []
        result = RenameResult(old_entry=entry, new_entry=new_entry)
        result.full_reload = self._refresh_parents([target.parent], errors)
        self._reselect(siblings)
        if was_selected:
            node: Node | None = self.tree.node(target)
            if node is not None:
                self.cascade.restore(node)
                result.reselected = True
        self.observer.status(f"Renamed {entry.name} to {name}")
        logger.info("Renamed %s -> %s", entry.path, target)
        return result


__all__ = ["DeleteReport", "MutationCoordinator", "PasteReport", "RenameResult"]
