"""Domain models for tasks, calendar events and categories."""

from __future__ import annotations

from .defaults import DEFAULT_CATEGORY_SPECS, default_categories
from .enums import Priority, SyncStatus, SyncTrigger
from .models import CalendarEvent, GoogleSession, SyncState, Task, TaskCategory, TaskSuggestion

__all__ = [
    "CalendarEvent",
    "DEFAULT_CATEGORY_SPECS",
    "GoogleSession",
    "Priority",
    "SyncState",
    "SyncStatus",
    "SyncTrigger",
    "Task",
    "TaskCategory",
    "TaskSuggestion",
    "default_categories",
]
