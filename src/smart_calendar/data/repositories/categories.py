from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...domain import TaskCategory
from ..store import DocumentStore

COLLECTION = "categories"


class DuplicateCategoryError(ValueError):
    """Raised when a category name collides with an existing category."""


@dataclass(slots=True)
class CategoryRepository:
    store: DocumentStore

    def list_all(self) -> list[TaskCategory]:
        records = self.store.fetch_all(COLLECTION, order_by="name")
        return [TaskCategory.from_record(record) for record in records]

    def get(self, category_id: str) -> Optional[TaskCategory]:
        record = self.store.fetch(COLLECTION, category_id)
        if not record:
            return None
        return TaskCategory.from_record(record)

    def find_by_name(self, name: str) -> Optional[TaskCategory]:
        wanted = name.strip().casefold()
        for category in self.list_all():
            if category.name.casefold() == wanted:
                return category
        return None

    def upsert(self, category: TaskCategory) -> TaskCategory:
        clash = self.find_by_name(category.name)
        if clash is not None and clash.id != category.id:
            raise DuplicateCategoryError(f"Category name '{category.name}' is already in use.")
        saved = self.store.upsert(COLLECTION, category.to_record())
        return TaskCategory.from_record(saved)

    def delete(self, category_id: str) -> bool:
        return self.store.delete(COLLECTION, category_id)
