from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from ..domain import Priority, TaskSuggestion
from ..domain.models import utcnow
from ..llm import AssistantUnavailableError, ProductivityAssistant
from .context import ServiceContext

logger = logging.getLogger(__name__)

OFFLINE_SUGGESTIONS = (
    TaskSuggestion(
        title="Review weekly goals",
        description="Take 15 minutes to review and adjust your weekly objectives",
        category_id="personal",
        priority=Priority.MEDIUM,
        estimated_duration=15,
        reasoning="Regular goal review helps maintain focus and productivity",
    ),
    TaskSuggestion(
        title="Update project documentation",
        description="Document recent project progress and next steps",
        category_id="work",
        priority=Priority.HIGH,
        estimated_duration=45,
        reasoning="Keeping documentation current improves team collaboration",
    ),
    TaskSuggestion(
        title="Quick workout session",
        description="30-minute exercise or stretching session",
        category_id="health",
        priority=Priority.MEDIUM,
        estimated_duration=30,
        reasoning="Regular physical activity boosts energy and focus",
    ),
    TaskSuggestion(
        title="Learn something new",
        description="Spend time on a skill you've been wanting to develop",
        category_id="learning",
        priority=Priority.LOW,
        estimated_duration=60,
        reasoning="Continuous learning keeps you sharp and motivated",
    ),
)


def offline_suggestions(weekday: int) -> List[TaskSuggestion]:
    """The built-in list, rotated by weekday so consecutive days differ."""

    offset = weekday % len(OFFLINE_SUGGESTIONS)
    rotated = OFFLINE_SUGGESTIONS[offset:] + OFFLINE_SUGGESTIONS[:offset]
    return list(rotated)


@dataclass(slots=True)
class SuggestionService:
    context: ServiceContext
    assistant: Optional[ProductivityAssistant] = None
    clock: Callable[[], datetime] = field(default=utcnow)

    def recent_completed(self) -> List[str]:
        names = {category.id: category.name for category in self.context.categories.list_all()}
        completed = [task for task in self.context.tasks.list_all() if task.completed]
        completed.sort(key=lambda task: task.created_at)
        return [f"{task.title} ({names.get(task.category_id or '', task.category_id or 'none')})" for task in completed]

    def suggest(self, goals: Sequence[str] = ()) -> List[TaskSuggestion]:
        now = self.clock().astimezone(self.context.zone)
        current_day = now.strftime("%A")
        if self.assistant is None or not self.assistant.is_available:
            logger.debug("Language model unavailable, using offline suggestions")
            return offline_suggestions(now.weekday())
        try:
            return self.assistant.suggest_tasks(self.recent_completed(), current_day, goals)
        except AssistantUnavailableError as exc:
            logger.warning("Falling back to offline suggestions: %s", exc)
            return offline_suggestions(now.weekday())
