from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from ..config.settings import StorageSettings, SupabaseSettings
from .store import Record, StorageError


class SupabaseNotInitializedError(RuntimeError):
    """Raised when accessing the Supabase client before it can be created."""


def table_map(storage: StorageSettings) -> Dict[str, str]:
    return {
        "tasks": storage.tasks_table,
        "events": storage.events_table,
        "categories": storage.categories_table,
        "sync_state": storage.sync_state_table,
        "sessions": storage.sessions_table,
    }


@dataclass
class SupabaseGateway:
    """Document store backed by Supabase tables, one table per collection."""

    settings: SupabaseSettings
    tables: Dict[str, str] = field(default_factory=dict)
    _client: Optional[Client] = None

    def ensure_client(self) -> Client:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            raise SupabaseNotInitializedError("Supabase settings are missing URL or anon key.")
        self._client = create_client(self.settings.url, self.settings.anon_key)
        return self._client

    def table(self, collection: str):
        try:
            name = self.tables[collection]
        except KeyError as exc:
            raise StorageError(f"Unknown collection '{collection}'.") from exc
        return self.ensure_client().table(name)

    def _execute(self, query: Any, collection: str, action: str) -> List[Record]:
        try:
            response = query.execute()
        except (APIError, httpx.HTTPError) as exc:
            raise StorageError(f"Supabase {action} on '{collection}' failed: {exc}") from exc
        return list(response.data or [])

    def fetch_all(self, collection: str, *, order_by: Optional[str] = None) -> List[Record]:
        query = self.table(collection).select("*")
        if order_by:
            query = query.order(order_by, desc=False)
        return self._execute(query, collection, "select")

    def fetch(self, collection: str, record_id: str) -> Optional[Record]:
        records = self._execute(self.table(collection).select("*").eq("id", record_id).limit(1), collection, "select")
        return records[0] if records else None

    def upsert(self, collection: str, record: Record) -> Record:
        records = self._execute(self.table(collection).upsert(record, on_conflict="id"), collection, "upsert")
        return records[0] if records else record

    def delete(self, collection: str, record_id: str) -> bool:
        deleted = self._execute(self.table(collection).delete().eq("id", record_id), collection, "delete")
        return bool(deleted)

    def clear(self, collection: str) -> None:
        self._execute(self.table(collection).delete().neq("id", ""), collection, "delete")
