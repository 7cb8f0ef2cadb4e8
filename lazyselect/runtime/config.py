"""Persistent JSON config helpers.

Stores the last loaded root, the saved-path shortcuts, and the extensions
the user turned off in the filter panel. Malformed or missing config
falls back to defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from platformdirs import user_config_dir

from ..file_tree_model import path_key

logger = logging.getLogger(__name__)

APP_NAME = "lazyselect"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


@dataclass(frozen=True)
class SavedPath:
    """A directory bookmarked for quick reloading."""

    path: Path
    display_name: str
    saved_at: str

    @property
    def label(self) -> str:
        return self.display_name or self.path.name or str(self.path)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except Exception as exc:
        logger.debug("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem and serialization errors are logged and otherwise ignored, so
    a read-only config directory never breaks the engine.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception as exc:
        logger.warning("Could not write config %s: %s", CONFIG_PATH, exc)


def load_last_root() -> Path | None:
    """Return the last loaded root when it is still an existing directory."""
    value = load_config().get("last_root")
    if not isinstance(value, str) or not value.strip():
        return None
    path = Path(value)
    return path if path.is_dir() else None


def save_last_root(root: Path | None) -> None:
    config = load_config()
    if root is None:
        config.pop("last_root", None)
    else:
        config["last_root"] = str(root)
    save_config(config)


def load_saved_paths() -> list[SavedPath]:
    """Load saved paths, newest first. Malformed rows are dropped."""
    value = load_config().get("saved_paths")
    if not isinstance(value, list):
        return []
    saved: list[SavedPath] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        raw_path = raw.get("path")
        if not isinstance(raw_path, str) or not raw_path:
            continue
        display_name = raw.get("display_name")
        saved_at = raw.get("saved_at")
        saved.append(
            SavedPath(
                path=Path(raw_path),
                display_name=display_name if isinstance(display_name, str) else "",
                saved_at=saved_at if isinstance(saved_at, str) else "",
            )
        )
    saved.sort(key=lambda item: item.saved_at, reverse=True)
    return saved


def _save_saved_paths(saved: list[SavedPath]) -> None:
    config = load_config()
    config["saved_paths"] = [
        {"path": str(item.path), "display_name": item.display_name, "saved_at": item.saved_at}
        for item in saved
    ]
    save_config(config)


def add_saved_path(path: Path, display_name: str | None = None) -> SavedPath:
    """Save ``path``; re-saving an existing path refreshes its timestamp and optionally its name."""
    now = datetime.now().isoformat(timespec="seconds")
    key = path_key(path)
    saved = load_saved_paths()
    existing = next((item for item in saved if path_key(item.path) == key), None)
    if existing is not None:
        name = display_name if display_name else existing.display_name
        saved.remove(existing)
    else:
        name = display_name or path.name or str(path)
    entry = SavedPath(path=path, display_name=name, saved_at=now)
    saved.insert(0, entry)
    _save_saved_paths(saved)
    return entry


def remove_saved_path(path: Path) -> bool:
    key = path_key(path)
    saved = load_saved_paths()
    kept = [item for item in saved if path_key(item.path) != key]
    if len(kept) == len(saved):
        return False
    _save_saved_paths(kept)
    return True


def load_disabled_extensions() -> list[str]:
    value = load_config().get("disabled_extensions")
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item.strip()]


def save_disabled_extensions(extensions: list[str]) -> None:
    config = load_config()
    config["disabled_extensions"] = sorted({item for item in extensions if item.strip()})
    save_config(config)


__all__ = [
    "CONFIG_PATH",
    "SavedPath",
    "add_saved_path",
    "load_config",
    "load_disabled_extensions",
    "load_last_root",
    "load_saved_paths",
    "remove_saved_path",
    "save_config",
    "save_disabled_extensions",
    "save_last_root",
]
