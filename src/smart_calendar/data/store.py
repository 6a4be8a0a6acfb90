from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

Record = Dict[str, Any]

COLLECTIONS = ("tasks", "events", "categories", "sync_state", "sessions")


class StorageError(RuntimeError):
    """Raised when the backing document store cannot complete an operation."""


class RecordNotFoundError(LookupError):
    """Raised when a record addressed by id does not exist."""

    def __init__(self, collection: str, record_id: str) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} record '{record_id}' not found.")


class DocumentStore(Protocol):
    """Minimal collection-of-records interface shared by every storage backend."""

    def fetch_all(self, collection: str, *, order_by: Optional[str] = None) -> List[Record]:
        ...

    def fetch(self, collection: str, record_id: str) -> Optional[Record]:
        ...

    def upsert(self, collection: str, record: Record) -> Record:
        ...

    def delete(self, collection: str, record_id: str) -> bool:
        ...

    def clear(self, collection: str) -> None:
        ...
