"""Data access layer."""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import AppSettings
from .local import JsonDocumentStore
from .store import DocumentStore, RecordNotFoundError, StorageError
from .supabase import SupabaseGateway, SupabaseNotInitializedError, table_map

logger = logging.getLogger(__name__)


def build_store(settings: AppSettings) -> DocumentStore:
    """Pick the configured storage backend."""

    backend = settings.storage.backend.lower()
    if backend == "supabase":
        logger.info("Using Supabase document store")
        return SupabaseGateway(settings.supabase, tables=table_map(settings.storage))
    if backend == "local":
        path = Path(settings.storage.local_path) if settings.storage.local_path else None
        store = JsonDocumentStore(path)
        logger.info("Using local document store at %s", store.path)
        return store
    raise ValueError(f"Unsupported storage backend: {settings.storage.backend}")


__all__ = [
    "DocumentStore",
    "JsonDocumentStore",
    "RecordNotFoundError",
    "StorageError",
    "SupabaseGateway",
    "SupabaseNotInitializedError",
    "build_store",
]
