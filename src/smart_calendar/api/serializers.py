from __future__ import annotations

from typing import Any, Dict

from ..domain import CalendarEvent, GoogleSession, Task, TaskCategory, TaskSuggestion
from .models import CategoryPayload, EventPayload, SessionPayload, SuggestionPayload, TaskPayload


def serialize_category(category: TaskCategory) -> Dict[str, Any]:
    return CategoryPayload.from_domain(category).model_dump()


def serialize_event(event: CalendarEvent) -> Dict[str, Any]:
    return EventPayload.from_domain(event).model_dump()


def serialize_task(task: Task) -> Dict[str, Any]:
    return TaskPayload.from_domain(task).model_dump()


def serialize_suggestion(suggestion: TaskSuggestion) -> Dict[str, Any]:
    return SuggestionPayload.from_domain(suggestion).model_dump()


def serialize_session(session: GoogleSession) -> Dict[str, Any]:
    return SessionPayload.from_domain(session).model_dump()
