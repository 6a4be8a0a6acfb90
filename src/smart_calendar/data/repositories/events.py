from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ...domain import CalendarEvent
from ..store import DocumentStore

COLLECTION = "events"


@dataclass(slots=True)
class EventRepository:
    store: DocumentStore

    def list_all(self) -> List[CalendarEvent]:
        records = self.store.fetch_all(COLLECTION, order_by="start")
        events = [CalendarEvent.from_record(record) for record in records]
        return sorted(events, key=lambda event: event.start)

    def list_window(self, start: datetime, end: datetime) -> List[CalendarEvent]:
        return [event for event in self.list_all() if event.end >= start and event.start <= end]

    def get(self, event_id: str) -> Optional[CalendarEvent]:
        record = self.store.fetch(COLLECTION, event_id)
        if not record:
            return None
        return CalendarEvent.from_record(record)

    def find_by_remote_id(self, remote_id: str) -> Optional[CalendarEvent]:
        for event in self.list_all():
            if event.remote_id == remote_id:
                return event
        return None

    def upsert(self, event: CalendarEvent) -> CalendarEvent:
        saved = self.store.upsert(COLLECTION, event.to_record())
        return CalendarEvent.from_record(saved)

    def delete(self, event_id: str) -> bool:
        return self.store.delete(COLLECTION, event_id)
