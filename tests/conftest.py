"""
Pytest configuration, factories and fakes shared by the test suite.

Architecture:
    - FakeRemoteCalendar: in-memory stand-in for the Google Calendar client
    - FakeSession: session with a toggleable authentication flag
    - Factories: build events, tasks and settings with sensible defaults
    - Fixtures: local JSON store, service context and repositories on tmp_path
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from itertools import count
from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest

from smart_calendar.config.settings import (
    AppSettings,
    GoogleCalendarSettings,
    LlmSettings,
    ServerSettings,
    StorageSettings,
    SupabaseSettings,
    SyncSettings,
    UiSettings,
)
from smart_calendar.data import JsonDocumentStore
from smart_calendar.domain import CalendarEvent, Priority, Task
from smart_calendar.services import ServiceContext
from smart_calendar.sync import AuthenticationExpiredError, RemoteApiError


# =============================================================================
# Time Utilities
# =============================================================================

FIXED_NOW = datetime(2025, 3, 12, 10, 30, tzinfo=timezone.utc)  # a Wednesday


def at(day: int, hour: int = 0, minute: int = 0, *, month: int = 3) -> datetime:
    return datetime(2025, month, day, hour, minute, tzinfo=timezone.utc)


class MutableClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


# =============================================================================
# Factories
# =============================================================================


_ids = count(1)


def make_event(**overrides) -> CalendarEvent:
    index = next(_ids)
    start = overrides.pop("start", at(12, 14))
    defaults = dict(
        id=f"evt-{index}",
        title=f"Event {index}",
        start=start,
        end=start + timedelta(hours=1),
        category_id="work",
    )
    defaults.update(overrides)
    return CalendarEvent(**defaults)


def make_task(**overrides) -> Task:
    index = next(_ids)
    defaults = dict(
        id=f"task-{index}",
        title=f"Task {index}",
        category_id="work",
        priority=Priority.MEDIUM,
        estimated_duration=30,
        created_at=FIXED_NOW,
    )
    defaults.update(overrides)
    return Task(**defaults)


def make_settings(
    tmp_path: Path,
    *,
    timezone_name: str = "UTC",
    llm_key: Optional[str] = None,
    propagate_remote_deletions: bool = True,
    cooldown_minutes: float = 5,
) -> AppSettings:
    return AppSettings(
        llm=LlmSettings(api_key=llm_key, model="gpt-4o-mini", base_url=None, organization=None, project=None),
        supabase=SupabaseSettings(url=None, anon_key=None),
        google=GoogleCalendarSettings(
            provider="google",
            base_url="https://calendar.test/calendar/v3",
            calendar_id="primary",
            default_category_id="work",
            request_timeout=30,
        ),
        sync=SyncSettings(
            cooldown=timedelta(minutes=cooldown_minutes),
            max_concurrency=4,
            propagate_remote_deletions=propagate_remote_deletions,
            auto_sync=False,
        ),
        storage=StorageSettings(
            backend="local",
            local_path=str(tmp_path / "calendar.json"),
            events_table="calendar_events",
            tasks_table="tasks",
            categories_table="task_categories",
            sync_state_table="sync_state",
            sessions_table="google_sessions",
        ),
        ui=UiSettings(timezone=timezone_name),
        server=ServerSettings(host="127.0.0.1", port=5000),
    )


# =============================================================================
# Fakes
# =============================================================================


class FakeRemoteCalendar:
    """In-memory remote calendar that records every call."""

    provider = "google"

    def __init__(self) -> None:
        self.events: Dict[str, CalendarEvent] = {}
        self.created: List[str] = []
        self.updated: List[str] = []
        self.deleted: List[str] = []
        self.list_calls = 0
        self.fail_create_for: Set[str] = set()
        self.expire_create_for: Set[str] = set()
        self.fail_update_for: Set[str] = set()
        self.list_error: Optional[Exception] = None
        self._next = count(1)

    def seed(self, remote_id: str, title: str, start: datetime, end: datetime, **extra) -> CalendarEvent:
        event = CalendarEvent(
            id=f"google-{remote_id}",
            title=title,
            start=start,
            end=end,
            is_remote=True,
            remote_id=remote_id,
            category_id=extra.pop("category_id", "work"),
            **extra,
        )
        self.events[remote_id] = event
        return event

    async def list_events(self, time_min: datetime, time_max: datetime) -> List[CalendarEvent]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return [event for event in self.events.values() if time_min <= event.start < time_max]

    async def create_event(self, event: CalendarEvent) -> CalendarEvent:
        if event.id in self.expire_create_for:
            raise AuthenticationExpiredError("token expired")
        if event.id in self.fail_create_for:
            raise RemoteApiError(status_code=500, body="boom")
        remote_id = f"r{next(self._next)}"
        self.created.append(event.id)
        self.events[remote_id] = replace(event, id=f"google-{remote_id}", is_remote=True, remote_id=remote_id)
        return replace(event, is_remote=True, remote_id=remote_id)

    async def update_event(self, event: CalendarEvent) -> CalendarEvent:
        if event.id in self.fail_update_for:
            raise RemoteApiError(status_code=500, body="boom")
        self.updated.append(event.id)
        self.events[event.remote_id] = replace(event, id=f"google-{event.remote_id}")
        return event

    async def delete_event(self, remote_id: str) -> None:
        self.deleted.append(remote_id)
        self.events.pop(remote_id, None)


class FakeSession:
    def __init__(self, authenticated: bool = True) -> None:
        self.authenticated = authenticated

    def is_authenticated(self) -> bool:
        return self.authenticated


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return make_settings(tmp_path)


@pytest.fixture
def store(tmp_path: Path) -> JsonDocumentStore:
    return JsonDocumentStore(tmp_path / "calendar.json")


@pytest.fixture
def context(settings: AppSettings, store: JsonDocumentStore) -> ServiceContext:
    return ServiceContext(settings=settings, store=store)


@pytest.fixture
def remote() -> FakeRemoteCalendar:
    return FakeRemoteCalendar()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()
