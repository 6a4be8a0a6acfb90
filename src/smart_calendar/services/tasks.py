from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, List, Optional, Tuple
from uuid import uuid4

from ..data import RecordNotFoundError
from ..domain import Priority, Task
from .context import ServiceContext

logger = logging.getLogger(__name__)

SORT_KEYS = ("priority", "due_date", "created_at")


def filter_tasks(
    tasks: Iterable[Task],
    *,
    search: str = "",
    category_id: Optional[str] = None,
    show_completed: bool = False,
) -> List[Task]:
    """Sidebar filtering: case-insensitive search over title and description."""

    needle = search.strip().casefold()
    results: List[Task] = []
    for task in tasks:
        if needle:
            haystack = f"{task.title}\n{task.description or ''}".casefold()
            if needle not in haystack:
                continue
        if category_id and category_id != "all" and task.category_id != category_id:
            continue
        if task.completed and not show_completed:
            continue
        results.append(task)
    return results


def sort_tasks(tasks: Iterable[Task], *, by: str = "priority") -> List[Task]:
    if by == "priority":
        return sorted(tasks, key=lambda task: (task.priority.rank, task.created_at))
    if by == "due_date":
        # tasks without a due date go last
        return sorted(tasks, key=lambda task: (task.due_date is None, task.due_date or task.created_at))
    if by == "created_at":
        return sorted(tasks, key=lambda task: task.created_at, reverse=True)
    raise ValueError(f"Unsupported sort key '{by}'. Expected one of: {', '.join(SORT_KEYS)}")


def partition(tasks: Iterable[Task]) -> Tuple[List[Task], List[Task]]:
    incomplete: List[Task] = []
    completed: List[Task] = []
    for task in tasks:
        (completed if task.completed else incomplete).append(task)
    return incomplete, completed


@dataclass(slots=True)
class TaskService:
    context: ServiceContext

    def list_tasks(self) -> List[Task]:
        return self.context.tasks.list_all()

    def fetch(self, task_id: str) -> Optional[Task]:
        return self.context.tasks.get(task_id)

    def require(self, task_id: str) -> Task:
        task = self.fetch(task_id)
        if task is None:
            raise RecordNotFoundError("tasks", task_id)
        return task

    def upsert_task(
        self,
        *,
        task_id: Optional[str],
        title: str,
        category_id: Optional[str] = None,
        description: Optional[str] = None,
        priority: Priority | str = Priority.MEDIUM,
        estimated_duration: int = 30,
        due_date: Optional[datetime] = None,
        scheduled_date: Optional[datetime] = None,
        completed: bool = False,
    ) -> Task:
        existing = self.fetch(task_id) if task_id else None
        task = Task(
            id=task_id or str(uuid4()),
            title=title,
            category_id=category_id,
            description=description,
            priority=Priority(priority),
            estimated_duration=estimated_duration,
            due_date=due_date,
            scheduled_date=scheduled_date,
            completed=completed,
            user_id=self._user_id(),
        )
        if existing is not None:
            task.created_at = existing.created_at
        saved = self.context.tasks.upsert(task)
        logger.debug("Saved task %s", saved.id)
        return saved

    def delete_task(self, task_id: str) -> bool:
        return self.context.tasks.delete(task_id)

    def toggle_complete(self, task_id: str) -> Task:
        task = self.require(task_id)
        return self.context.tasks.upsert(replace(task, completed=not task.completed))

    def filter_tasks(
        self,
        *,
        search: str = "",
        category_id: Optional[str] = None,
        show_completed: bool = False,
        sort_by: str = "priority",
    ) -> List[Task]:
        matches = filter_tasks(
            self.list_tasks(),
            search=search,
            category_id=category_id,
            show_completed=show_completed,
        )
        return sort_tasks(matches, by=sort_by)

    def _user_id(self) -> Optional[str]:
        session = self.context.sessions.load()
        return session.user_id if session else None
