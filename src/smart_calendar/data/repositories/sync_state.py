from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...domain import GoogleSession, SyncState
from ..store import DocumentStore

SYNC_COLLECTION = "sync_state"
SESSION_COLLECTION = "sessions"
SESSION_ID = "current"


@dataclass(slots=True)
class SyncStateRepository:
    store: DocumentStore

    def load(self, provider: str) -> SyncState:
        record = self.store.fetch(SYNC_COLLECTION, provider)
        if not record:
            return SyncState(provider=provider)
        return SyncState.from_record(record)

    def save(self, state: SyncState) -> SyncState:
        self.store.upsert(SYNC_COLLECTION, state.to_record())
        return state


@dataclass(slots=True)
class SessionRepository:
    store: DocumentStore

    def load(self) -> Optional[GoogleSession]:
        record = self.store.fetch(SESSION_COLLECTION, SESSION_ID)
        if not record:
            return None
        return GoogleSession.from_record(record)

    def save(self, session: GoogleSession) -> GoogleSession:
        self.store.upsert(SESSION_COLLECTION, session.to_record())
        return session

    def clear(self) -> None:
        self.store.delete(SESSION_COLLECTION, SESSION_ID)
