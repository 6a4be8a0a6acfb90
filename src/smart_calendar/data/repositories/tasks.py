from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ...domain import Task
from ..store import DocumentStore

COLLECTION = "tasks"


@dataclass(slots=True)
class TaskRepository:
    store: DocumentStore

    def list_all(self) -> List[Task]:
        records = self.store.fetch_all(COLLECTION, order_by="created_at")
        return [Task.from_record(record) for record in records]

    def get(self, task_id: str) -> Optional[Task]:
        record = self.store.fetch(COLLECTION, task_id)
        if not record:
            return None
        return Task.from_record(record)

    def upsert(self, task: Task) -> Task:
        saved = self.store.upsert(COLLECTION, task.to_record())
        return Task.from_record(saved)

    def delete(self, task_id: str) -> bool:
        return self.store.delete(COLLECTION, task_id)
