from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import AppSettings, get_settings
from ..data import DocumentStore, build_store
from ..data.repositories import (
    CategoryRepository,
    EventRepository,
    SessionRepository,
    SyncStateRepository,
    TaskRepository,
)


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root for services to share settings, the store and repositories."""

    settings: AppSettings = field(default_factory=get_settings)
    store: Optional[DocumentStore] = None
    events: EventRepository = field(init=False)
    tasks: TaskRepository = field(init=False)
    categories: CategoryRepository = field(init=False)
    sync_state: SyncStateRepository = field(init=False)
    sessions: SessionRepository = field(init=False)

    def __post_init__(self) -> None:
        if self.store is None:
            self.store = build_store(self.settings)
        self.events = EventRepository(self.store)
        self.tasks = TaskRepository(self.store)
        self.categories = CategoryRepository(self.store)
        self.sync_state = SyncStateRepository(self.store)
        self.sessions = SessionRepository(self.store)

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.settings.ui.timezone)
