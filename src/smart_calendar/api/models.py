from __future__ import annotations

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain import CalendarEvent, GoogleSession, Priority, Task, TaskCategory, TaskSuggestion
from ..domain.defaults import PRIORITY_COLORS


class CategoryInput(BaseModel):
    name: str = Field(min_length=1)
    color: Optional[str] = Field(default=None)
    icon: Optional[str] = Field(default=None)


class CategoryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    color: Optional[str] = Field(default=None)
    icon: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, category: TaskCategory) -> "CategoryPayload":
        return cls(id=category.id, name=category.name, color=category.color, icon=category.icon)


class TaskInput(BaseModel):
    title: str = Field(min_length=1)
    category_id: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    priority: Priority = Field(default=Priority.MEDIUM)
    estimated_duration: int = Field(default=30, ge=1)
    due_date: Optional[datetime] = Field(default=None)
    scheduled_date: Optional[datetime] = Field(default=None)
    completed: bool = Field(default=False)


class TaskPayload(BaseModel):
    id: str
    title: str
    category_id: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    priority: str
    priority_color: str
    estimated_duration: int
    due_date: Optional[str] = Field(default=None)
    scheduled_date: Optional[str] = Field(default=None)
    completed: bool
    created_at: str

    @classmethod
    def from_domain(cls, task: Task) -> "TaskPayload":
        return cls(
            id=task.id,
            title=task.title,
            category_id=task.category_id,
            description=task.description,
            priority=task.priority.value,
            priority_color=PRIORITY_COLORS[task.priority.value],
            estimated_duration=task.estimated_duration,
            due_date=_iso(task.due_date),
            scheduled_date=_iso(task.scheduled_date),
            completed=task.completed,
            created_at=task.created_at.isoformat(),
        )


class EventInput(BaseModel):
    title: str = Field(min_length=1)
    start: datetime
    end: datetime
    category_id: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    all_day: bool = Field(default=False)
    location: Optional[str] = Field(default=None)


class EventPayload(BaseModel):
    id: str
    title: str
    start: str
    end: str
    category_id: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    all_day: bool
    is_remote: bool
    remote_id: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None)
    created_at: Optional[str] = Field(default=None)
    updated_at: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, event: CalendarEvent) -> "EventPayload":
        return cls(
            id=event.id,
            title=event.title,
            start=event.start.isoformat(),
            end=event.end.isoformat(),
            category_id=event.category_id,
            description=event.description,
            all_day=event.all_day,
            is_remote=event.is_remote,
            remote_id=event.remote_id,
            location=event.location,
            created_at=_iso(event.created_at),
            updated_at=_iso(event.updated_at),
        )


class MoveInput(BaseModel):
    start: datetime
    end: datetime


class ScheduleInput(BaseModel):
    day: date
    at: Optional[time] = Field(default=None)


class SuggestionInput(BaseModel):
    goals: List[str] = Field(default_factory=list)


class SuggestionPayload(BaseModel):
    title: str
    description: str
    category_id: str
    priority: str
    estimated_duration: int
    reasoning: str

    @classmethod
    def from_domain(cls, suggestion: TaskSuggestion) -> "SuggestionPayload":
        return cls(**suggestion.to_dict())


class SessionInput(BaseModel):
    user_id: str = Field(min_length=1)
    email: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    name: Optional[str] = Field(default=None)
    picture: Optional[str] = Field(default=None)
    expires_at: Optional[datetime] = Field(default=None)

    def to_domain(self) -> GoogleSession:
        return GoogleSession(
            user_id=self.user_id,
            email=self.email,
            access_token=self.access_token,
            name=self.name,
            picture=self.picture,
            expires_at=self.expires_at,
        )


class SessionPayload(BaseModel):
    user_id: str
    email: str
    name: Optional[str] = Field(default=None)
    picture: Optional[str] = Field(default=None)
    expires_at: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, session: GoogleSession) -> "SessionPayload":
        return cls(
            user_id=session.user_id,
            email=session.email,
            name=session.name,
            picture=session.picture,
            expires_at=_iso(session.expires_at),
        )


class SyncInput(BaseModel):
    shortcut: bool = Field(default=False)


class ConnectivityInput(BaseModel):
    online: bool


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
