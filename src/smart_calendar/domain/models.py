from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from .enums import Priority


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive timestamps so that stored values always compare."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        return ensure_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))
    raise ValueError(f"Unsupported datetime value: {value!r}")


def _parse_optional_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return _parse_datetime(value)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(slots=True)
class TaskCategory:
    id: str
    name: str
    color: Optional[str] = None
    icon: Optional[str] = None

    def __post_init__(self) -> None:
        self.name = self.name.strip()
        if not self.name:
            raise ValueError("Category name must not be empty.")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TaskCategory":
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            color=record.get("color"),
            icon=record.get("icon"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
        }


@dataclass(slots=True)
class CalendarEvent:
    id: str
    title: str
    start: datetime
    end: datetime
    category_id: Optional[str] = None
    description: Optional[str] = None
    all_day: bool = False
    is_remote: bool = False
    remote_id: Optional[str] = None
    location: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.start = ensure_aware(self.start)
        self.end = ensure_aware(self.end)
        if self.end < self.start:
            raise ValueError("End date must be equal to or after start date.")

    def day_span(self) -> Tuple[date, date]:
        """Return ``(first_day, day_after_last)`` for all-day events.

        All-day end dates are exclusive, matching the provider wire format. A
        zero-length all-day event still covers its start day.
        """

        first = self.start.date()
        last = self.end.date()
        if last <= first:
            last = first + timedelta(days=1)
        return first, last

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CalendarEvent":
        return cls(
            id=str(record["id"]),
            title=str(record["title"]),
            start=_parse_datetime(record["start"]),
            end=_parse_datetime(record["end"]),
            category_id=record.get("category_id"),
            description=record.get("description"),
            all_day=bool(record.get("all_day", False)),
            is_remote=bool(record.get("is_remote", False)),
            remote_id=record.get("remote_id"),
            location=record.get("location"),
            user_id=record.get("user_id"),
            created_at=_parse_optional_datetime(record.get("created_at")),
            updated_at=_parse_optional_datetime(record.get("updated_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "category_id": self.category_id,
            "description": self.description,
            "all_day": self.all_day,
            "is_remote": self.is_remote,
            "remote_id": self.remote_id,
            "location": self.location,
            "user_id": self.user_id,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(slots=True)
class Task:
    id: str
    title: str
    category_id: Optional[str] = None
    description: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    estimated_duration: int = 30
    due_date: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None
    completed: bool = False
    created_at: datetime = field(default_factory=utcnow)
    user_id: Optional[str] = None

    def __post_init__(self) -> None:
        self.title = self.title.strip()
        if not self.title:
            raise ValueError("Task title must not be empty.")
        if isinstance(self.estimated_duration, bool) or not isinstance(self.estimated_duration, int):
            raise ValueError("estimated_duration must be an integer number of minutes.")
        if self.estimated_duration < 1:
            raise ValueError("estimated_duration must be positive.")
        self.priority = Priority(self.priority)
        self.created_at = ensure_aware(self.created_at)
        if self.due_date is not None:
            self.due_date = ensure_aware(self.due_date)
        if self.scheduled_date is not None:
            self.scheduled_date = ensure_aware(self.scheduled_date)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Task":
        return cls(
            id=str(record["id"]),
            title=str(record["title"]),
            category_id=record.get("category_id"),
            description=record.get("description"),
            priority=Priority(record.get("priority") or Priority.MEDIUM),
            estimated_duration=int(record.get("estimated_duration") or 30),
            due_date=_parse_optional_datetime(record.get("due_date")),
            scheduled_date=_parse_optional_datetime(record.get("scheduled_date")),
            completed=bool(record.get("completed", False)),
            created_at=_parse_optional_datetime(record.get("created_at")) or utcnow(),
            user_id=record.get("user_id"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category_id": self.category_id,
            "description": self.description,
            "priority": self.priority.value,
            "estimated_duration": self.estimated_duration,
            "due_date": _iso(self.due_date),
            "scheduled_date": _iso(self.scheduled_date),
            "completed": self.completed,
            "created_at": self.created_at.isoformat(),
            "user_id": self.user_id,
        }


@dataclass(slots=True)
class TaskSuggestion:
    title: str
    description: str
    category_id: str
    priority: Priority
    estimated_duration: int
    reasoning: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TaskSuggestion":
        duration = int(payload.get("estimatedDuration") or payload.get("estimated_duration") or 30)
        return cls(
            title=str(payload["title"]),
            description=str(payload.get("description") or ""),
            category_id=str(payload.get("category") or payload.get("category_id") or ""),
            priority=Priority(payload.get("priority") or Priority.MEDIUM),
            estimated_duration=max(duration, 1),
            reasoning=str(payload.get("reasoning") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "category_id": self.category_id,
            "priority": self.priority.value,
            "estimated_duration": self.estimated_duration,
            "reasoning": self.reasoning,
        }


@dataclass(slots=True)
class GoogleSession:
    user_id: str
    email: str
    access_token: str
    name: Optional[str] = None
    picture: Optional[str] = None
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utcnow()) >= self.expires_at

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "GoogleSession":
        return cls(
            user_id=str(record["user_id"]),
            email=str(record["email"]),
            access_token=str(record["access_token"]),
            name=record.get("name"),
            picture=record.get("picture"),
            expires_at=_parse_optional_datetime(record.get("expires_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": "current",
            "user_id": self.user_id,
            "email": self.email,
            "access_token": self.access_token,
            "name": self.name,
            "picture": self.picture,
            "expires_at": _iso(self.expires_at),
        }


@dataclass(slots=True)
class SyncState:
    provider: str
    last_synced_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "SyncState":
        return cls(
            provider=str(record["id"]),
            last_synced_at=_parse_optional_datetime(record.get("last_synced_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.provider, "last_synced_at": _iso(self.last_synced_at)}
