"""Repositories for first-class domain objects."""

from __future__ import annotations

from .categories import CategoryRepository, DuplicateCategoryError
from .events import EventRepository
from .sync_state import SessionRepository, SyncStateRepository
from .tasks import TaskRepository

__all__ = [
    "CategoryRepository",
    "DuplicateCategoryError",
    "EventRepository",
    "SessionRepository",
    "SyncStateRepository",
    "TaskRepository",
]
