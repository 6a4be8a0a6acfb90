from __future__ import annotations

from enum import Enum


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}[self]


class SyncTrigger(str, Enum):
    STARTUP = "startup"
    LOGIN = "login"
    CONNECTIVITY = "connectivity"
    TIMER = "timer"
    MANUAL = "manual"
    SHORTCUT = "shortcut"

    @property
    def bypasses_cooldown(self) -> bool:
        return self in (SyncTrigger.MANUAL, SyncTrigger.SHORTCUT, SyncTrigger.LOGIN)


class SyncStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"
