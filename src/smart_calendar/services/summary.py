from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Any, Callable, Dict, Optional

from ..domain.models import utcnow
from ..llm import AssistantUnavailableError, ProductivityAssistant
from .context import ServiceContext

logger = logging.getLogger(__name__)

NO_CATEGORY = "None"
DEFAULT_TASK_MINUTES = 30
UNAVAILABLE_NARRATIVE = "Unable to generate AI summary at this time."


@dataclass(slots=True)
class WeeklyStats:
    week_start: datetime
    week_end: datetime
    completed_tasks: int
    total_tasks: int
    total_events: int
    completion_rate: int
    productive_hours: int
    top_category: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "completed_tasks": self.completed_tasks,
            "total_tasks": self.total_tasks,
            "total_events": self.total_events,
            "completion_rate": self.completion_rate,
            "productive_hours": self.productive_hours,
            "top_category": self.top_category,
        }


@dataclass(slots=True)
class SummaryService:
    context: ServiceContext
    assistant: Optional[ProductivityAssistant] = None
    clock: Callable[[], datetime] = field(default=utcnow)

    def current_week(self) -> tuple[datetime, datetime]:
        """Monday 00:00 through the following Monday 00:00 in the local zone."""

        today = self.clock().astimezone(self.context.zone).date()
        monday = today - timedelta(days=today.weekday())
        start = datetime.combine(monday, time.min, tzinfo=self.context.zone)
        return start, start + timedelta(days=7)

    def weekly_stats(self) -> WeeklyStats:
        week_start, week_end = self.current_week()
        week_tasks = [task for task in self.context.tasks.list_all() if week_start <= task.created_at < week_end]
        week_events = [event for event in self.context.events.list_all() if week_start <= event.start < week_end]
        completed = [task for task in week_tasks if task.completed]

        completion_rate = round(len(completed) / len(week_tasks) * 100) if week_tasks else 0
        minutes = sum(task.estimated_duration or DEFAULT_TASK_MINUTES for task in completed)

        names = {category.id: category.name for category in self.context.categories.list_all()}
        counts = Counter(names.get(task.category_id or "", task.category_id or NO_CATEGORY) for task in completed)
        top_category = counts.most_common(1)[0][0] if counts else NO_CATEGORY

        return WeeklyStats(
            week_start=week_start,
            week_end=week_end,
            completed_tasks=len(completed),
            total_tasks=len(week_tasks),
            total_events=len(week_events),
            completion_rate=completion_rate,
            productive_hours=round(minutes / 60),
            top_category=top_category,
        )

    def weekly_summary(self, *, include_narrative: bool = True) -> Dict[str, Any]:
        stats = self.weekly_stats()
        payload = stats.to_dict()
        if not include_narrative:
            return payload
        payload["narrative"] = self._narrative(payload)
        return payload

    def _narrative(self, stats: Dict[str, Any]) -> Optional[str]:
        if self.assistant is None or not self.assistant.is_available:
            return None
        try:
            return self.assistant.weekly_narrative(stats)
        except AssistantUnavailableError as exc:
            logger.warning("Weekly narrative unavailable: %s", exc)
            return UNAVAILABLE_NARRATIVE
