from __future__ import annotations

from typing import List

from .models import TaskCategory

DEFAULT_CATEGORY_SPECS = (
    ("work", "Work", "#3B82F6", "briefcase"),
    ("personal", "Personal", "#10B981", "user"),
    ("health", "Health", "#F59E0B", "heart"),
    ("learning", "Learning", "#8B5CF6", "book"),
    ("social", "Social", "#EF4444", "users"),
)

PRIORITY_COLORS = {
    "low": "#6B7280",
    "medium": "#F59E0B",
    "high": "#EF4444",
}


def default_categories() -> List[TaskCategory]:
    return [
        TaskCategory(id=identifier, name=name, color=color, icon=icon)
        for identifier, name, color, icon in DEFAULT_CATEGORY_SPECS
    ]
