from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from ..data import RecordNotFoundError
from ..domain import TaskCategory, default_categories
from .context import ServiceContext

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _slugify(name: str) -> str:
    return _SLUG_RE.sub("-", name.strip().lower()).strip("-")


@dataclass(slots=True)
class CategoryService:
    context: ServiceContext

    def list_categories(self) -> list[TaskCategory]:
        return self.context.categories.list_all()

    def fetch(self, category_id: str) -> Optional[TaskCategory]:
        return self.context.categories.get(category_id)

    def require(self, category_id: str) -> TaskCategory:
        category = self.fetch(category_id)
        if category is None:
            raise RecordNotFoundError("categories", category_id)
        return category

    def upsert_category(
        self,
        *,
        category_id: Optional[str],
        name: str,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> TaskCategory:
        identifier = category_id or _slugify(name) or str(uuid4())
        if category_id is None and self.fetch(identifier) is not None:
            identifier = str(uuid4())
        category = TaskCategory(id=identifier, name=name, color=color, icon=icon)
        return self.context.categories.upsert(category)

    def delete_category(self, category_id: str) -> bool:
        return self.context.categories.delete(category_id)

    def seed_defaults(self) -> list[TaskCategory]:
        """Insert the built-in categories when none exist yet."""

        existing = self.list_categories()
        if existing:
            return existing
        for category in default_categories():
            self.context.categories.upsert(category)
        logger.info("Seeded default categories")
        return self.list_categories()
