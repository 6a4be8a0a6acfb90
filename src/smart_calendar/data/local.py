from __future__ import annotations

import threading
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Optional

import orjson

from ..core import DATABASE_FILE, DEFAULT_DATABASE_CONTENT, ensure_data_dir
from .store import COLLECTIONS, Record, StorageError


class JsonDocumentStore:
    """Single-file JSON document store used when Supabase is not configured."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = ensure_data_dir(path or DATABASE_FILE)
        self._cache: Dict[str, List[Record] | dict] | None = None
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def _load_raw(self) -> Dict[str, List[Record] | dict]:
        if self._cache is None:
            try:
                data = orjson.loads(self._path.read_bytes() or b"{}")
            except (OSError, orjson.JSONDecodeError) as exc:
                raise StorageError(f"Could not read local store at {self._path}: {exc}") from exc
            self._cache = {name: list(data.get(name, [])) for name in COLLECTIONS}
            self._cache["metadata"] = dict(data.get("metadata", DEFAULT_DATABASE_CONTENT["metadata"]))
        return self._cache

    def _persist(self) -> None:
        if self._cache is None:
            return
        payload = orjson.dumps(self._cache, option=orjson.OPT_INDENT_2)
        try:
            self._path.write_bytes(payload + b"\n")
        except OSError as exc:
            raise StorageError(f"Could not write local store at {self._path}: {exc}") from exc

    def _items(self, collection: str) -> List[Record]:
        if collection not in COLLECTIONS:
            raise StorageError(f"Unknown collection '{collection}'.")
        return self._load_raw()[collection]  # type: ignore[return-value]

    def fetch_all(self, collection: str, *, order_by: Optional[str] = None) -> List[Record]:
        with self._lock:
            items = deepcopy(self._items(collection))
        if order_by:
            items.sort(key=lambda item: (item.get(order_by) is None, item.get(order_by) or ""))
        return items

    def fetch(self, collection: str, record_id: str) -> Optional[Record]:
        with self._lock:
            for item in self._items(collection):
                if item.get("id") == record_id:
                    return deepcopy(item)
        return None

    def upsert(self, collection: str, record: Record) -> Record:
        with self._lock:
            items = self._items(collection)
            for idx, existing in enumerate(items):
                if existing.get("id") == record["id"]:
                    items[idx] = deepcopy(record)
                    break
            else:
                items.append(deepcopy(record))
            self._persist()
        return deepcopy(record)

    def delete(self, collection: str, record_id: str) -> bool:
        with self._lock:
            items = self._items(collection)
            for idx, item in enumerate(items):
                if item.get("id") == record_id:
                    del items[idx]
                    self._persist()
                    return True
        return False

    def clear(self, collection: str) -> None:
        with self._lock:
            self._items(collection).clear()
            self._persist()
