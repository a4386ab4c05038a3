"""Key-value persistence for favorites and the last sync time."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Hashable, Protocol

from eipbrowser.documents import Document
from eipbrowser.errors import StorageError
from eipbrowser.view import is_favorite, toggle_favorite

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorite_eips"
LAST_UPDATE_KEY = "last_update"


class Storage(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStorage:
    """In-process storage, used by tests and as a fallback."""

    def __init__(self, data: dict[str, Any] | None = None):
        self.data: dict[str, Any] = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value


class JsonFileStorage:
    """A single JSON object on disk, rewritten atomically on every set."""

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Could not read state file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("State file %s does not hold an object; ignoring it", self.path)
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", dir=self.path.parent, delete=False, encoding="utf-8", suffix=".tmp"
            ) as tmp:
                tmp_path = Path(tmp.name)
                json.dump(data, tmp, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError) as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Could not write {key!r} to {self.path}: {exc}") from exc


def load_favorites(storage: Storage) -> frozenset:
    """Read the favorites set; anything unusable becomes an empty set."""
    raw = storage.get(FAVORITES_KEY, [])
    if not isinstance(raw, (list, tuple, set, frozenset)):
        logger.warning("Ignoring malformed favorites value: %r", raw)
        return frozenset()
    return frozenset(item for item in raw if isinstance(item, (int, str)) and not isinstance(item, bool))


def load_last_update(storage: Storage) -> int:
    raw = storage.get(LAST_UPDATE_KEY, 0)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return 0
    return int(raw)


class Favorites:
    """The favorites set, persisted on every change."""

    def __init__(self, storage: Storage):
        self.storage = storage
        self.keys: frozenset = load_favorites(storage)

    def __contains__(self, key: Hashable) -> bool:
        return key in self.keys

    def __iter__(self):
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)

    def is_favorite(self, document: Document) -> bool:
        return is_favorite(document, self.keys)

    def toggle_key(self, key: Hashable) -> bool:
        """Toggle an arbitrary key; True when it is now a favorite."""
        self.keys = toggle_favorite(self.keys, key)
        self._persist()
        return key in self.keys

    def toggle(self, document: Document) -> bool:
        """Toggle a document; True when it is now a favorite.

        A document marked only through a legacy bare-number entry is
        unmarked by removing that number.
        """
        if document.id not in self.keys and document.number in self.keys:
            self.keys = toggle_favorite(self.keys, document.number)
        else:
            self.keys = toggle_favorite(self.keys, document.id)
        self._persist()
        return self.is_favorite(document)

    def _persist(self) -> None:
        # ints before strs so the file is stable across runs
        value = sorted(self.keys, key=lambda k: (isinstance(k, str), k))
        try:
            self.storage.set(FAVORITES_KEY, value)
        except StorageError as exc:
            logger.warning("Favorites not saved: %s", exc)
