"""Plain key-value store for non-sensitive settings, persisted as JSON."""

import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


class PlainStore:
    """Persists scalar settings (str, int, float, bool) to a JSON file.

    The file is read lazily on first access and kept in memory for the
    lifetime of the instance. Every ``set``/``remove`` writes the whole
    file back; use ``edit()`` to batch several changes into one write.
    A failed write is logged and the change is dropped, never raised.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._data: Optional[dict[str, Any]] = None

    @property
    def path(self) -> Path:
        return self._path

    # Loading / saving

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        if self._path.exists():
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError(f"expected a JSON object, got {type(data).__name__}")
                self._data = data
            except (json.JSONDecodeError, ValueError, OSError) as e:
                logger.warning(f"Could not load {self._path.name}, starting empty: {e}")
                self._data = {}
        else:
            self._data = {}

        return self._data

    def _save(self) -> bool:
        """Write the whole file back. Returns False if the write failed.

        On failure the pending in-memory changes are dropped, so reads
        keep matching what is on disk.
        """
        data = self._load()
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
            return True
        except OSError as e:
            logger.error(f"Failed to save {self._path.name}: {e}", exc_info=True)
            self._data = None
            return False
        finally:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                # Parent is not a directory; nothing was written
                logger.debug(f"Could not remove {tmp_path.name}", exc_info=True)

    # Contract: get / set / remove / clear

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._load()[key] = value
        self._save()

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save()

    def clear(self) -> None:
        self._data = {}
        self._save()

    def contains(self, key: str) -> bool:
        return key in self._load()

    @contextmanager
    def edit(self) -> Iterator["PlainStoreEditor"]:
        """Batch several writes into a single save.

        Changes are applied only if the block exits cleanly.
        """
        editor = PlainStoreEditor()
        yield editor

        data = self._load()
        if editor.cleared:
            data.clear()
        for key, value in editor.changes.items():
            if value is _MISSING:
                data.pop(key, None)
            else:
                data[key] = value
        self._save()

    # Typed readers. A stored value of the wrong type reads as the default.

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get(key, _MISSING)
        return value if isinstance(value, str) else default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key, _MISSING)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return default

    # Python ints are unbounded, so longs share the int reader.
    get_long = get_int

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.get(key, _MISSING)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, _MISSING)
        return value if isinstance(value, bool) else default


class PlainStoreEditor:
    """Pending changes collected inside ``PlainStore.edit()``."""

    def __init__(self):
        self.changes: dict[str, Any] = {}
        self.cleared = False

    def set(self, key: str, value: Any) -> "PlainStoreEditor":
        self.changes[key] = value
        return self

    def remove(self, key: str) -> "PlainStoreEditor":
        self.changes[key] = _MISSING
        return self

    def clear(self) -> "PlainStoreEditor":
        self.changes.clear()
        self.cleared = True
        return self
