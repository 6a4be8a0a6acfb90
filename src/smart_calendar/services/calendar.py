from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple
from uuid import uuid4

from ..data import RecordNotFoundError
from ..domain import CalendarEvent, Task
from ..domain.models import utcnow
from .context import ServiceContext

logger = logging.getLogger(__name__)

DEFAULT_DROP_TIME = time(9, 0)


@dataclass(slots=True)
class CalendarService:
    context: ServiceContext

    def localize(self, value: datetime) -> datetime:
        """Interpret naive timestamps in the configured local zone.

        Sub-second precision is dropped; the provider keeps whole seconds.
        """

        value = value.replace(microsecond=0)
        if value.tzinfo is None:
            return value.replace(tzinfo=self.context.zone)
        return value

    def list_events(self) -> List[CalendarEvent]:
        return self.context.events.list_all()

    def list_between(self, start: datetime, end: datetime) -> List[CalendarEvent]:
        return self.context.events.list_window(self.localize(start), self.localize(end))

    def list_for_day(self, target_day: date) -> List[CalendarEvent]:
        zone = self.context.zone
        day_start = datetime.combine(target_day, time.min, tzinfo=zone)
        day_end = day_start + timedelta(days=1)
        return [
            event
            for event in self.context.events.list_window(day_start, day_end)
            if event.start < day_end and (event.end > day_start or event.start == day_start)
        ]

    def fetch(self, event_id: str) -> Optional[CalendarEvent]:
        return self.context.events.get(event_id)

    def require(self, event_id: str) -> CalendarEvent:
        event = self.fetch(event_id)
        if event is None:
            raise RecordNotFoundError("events", event_id)
        return event

    def upsert_event(
        self,
        *,
        event_id: Optional[str],
        title: str,
        start: datetime,
        end: datetime,
        category_id: Optional[str] = None,
        description: Optional[str] = None,
        all_day: bool = False,
        location: Optional[str] = None,
    ) -> CalendarEvent:
        if not title or not title.strip():
            raise ValueError("Event title must not be empty.")
        existing = self.fetch(event_id) if event_id else None
        now = utcnow()
        event = CalendarEvent(
            id=event_id or str(uuid4()),
            title=title.strip(),
            start=self.localize(start),
            end=self.localize(end),
            category_id=category_id,
            description=description,
            all_day=all_day,
            is_remote=existing.is_remote if existing else False,
            remote_id=existing.remote_id if existing else None,
            location=location,
            user_id=self._user_id(),
            created_at=existing.created_at if existing and existing.created_at else now,
            updated_at=now,
        )
        return self.context.events.upsert(event)

    def delete_event(self, event_id: str) -> bool:
        return self.context.events.delete(event_id)

    def move_event(self, event_id: str, start: datetime, end: datetime) -> CalendarEvent:
        event = self.require(event_id)
        moved = replace(event, start=self.localize(start), end=self.localize(end), updated_at=utcnow())
        logger.debug("Moved event %s to %s", event_id, moved.start.isoformat())
        return self.context.events.upsert(moved)

    def schedule_task(self, task_id: str, day: date, *, at: time = DEFAULT_DROP_TIME) -> Tuple[CalendarEvent, Task]:
        """Turn a task dropped on ``day`` into an event starting at ``at``.

        The event lasts the task's estimated duration and inherits its title,
        description and category. The task remembers when it was scheduled.
        """

        task = self.context.tasks.get(task_id)
        if task is None:
            raise RecordNotFoundError("tasks", task_id)
        start = datetime.combine(day, at, tzinfo=self.context.zone)
        end = start + timedelta(minutes=task.estimated_duration)
        event = self.upsert_event(
            event_id=None,
            title=task.title,
            start=start,
            end=end,
            category_id=task.category_id,
            description=task.description,
        )
        scheduled = self.context.tasks.upsert(replace(task, scheduled_date=start))
        logger.info("Scheduled task %s as event %s at %s", task.id, event.id, start.isoformat())
        return event, scheduled

    def _user_id(self) -> Optional[str]:
        session = self.context.sessions.load()
        return session.user_id if session else None
