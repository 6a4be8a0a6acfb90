"""Application services orchestrating data access and domain logic."""

from __future__ import annotations

from .auth import AuthService
from .calendar import CalendarService
from .categories import CategoryService
from .context import ServiceContext
from .suggestions import SuggestionService
from .summary import SummaryService, WeeklyStats
from .tasks import TaskService, filter_tasks, partition, sort_tasks

__all__ = [
    "AuthService",
    "CalendarService",
    "CategoryService",
    "ServiceContext",
    "SuggestionService",
    "SummaryService",
    "TaskService",
    "WeeklyStats",
    "filter_tasks",
    "partition",
    "sort_tasks",
]
