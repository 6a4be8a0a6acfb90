"""Tests for domain models, enums and defaults."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from smart_calendar.domain import (
    CalendarEvent,
    GoogleSession,
    Priority,
    SyncTrigger,
    Task,
    TaskCategory,
    TaskSuggestion,
    default_categories,
)
from smart_calendar.domain.defaults import PRIORITY_COLORS
from tests.conftest import FIXED_NOW, at, make_event, make_task

pytestmark = pytest.mark.unit


class TestCalendarEvent:
    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValueError):
            CalendarEvent(id="e", title="Bad", start=at(12, 10), end=at(12, 9))

    def test_zero_length_event_is_allowed(self):
        event = CalendarEvent(id="e", title="Instant", start=at(12, 10), end=at(12, 10))
        assert event.start == event.end

    def test_naive_times_become_utc(self):
        event = CalendarEvent(id="e", title="Naive", start=datetime(2025, 3, 12, 9), end=datetime(2025, 3, 12, 10))
        assert event.start.tzinfo is not None
        assert event.start == at(12, 9)

    def test_day_span_uses_exclusive_end(self):
        event = make_event(start=at(12), end=at(14), all_day=True)
        assert event.day_span() == (date(2025, 3, 12), date(2025, 3, 14))

    def test_day_span_covers_start_day_for_zero_length(self):
        event = make_event(start=at(12), end=at(12), all_day=True)
        assert event.day_span() == (date(2025, 3, 12), date(2025, 3, 13))

    def test_record_round_trip(self):
        event = make_event(is_remote=True, remote_id="abc", location="Room 1", description="Notes")
        restored = CalendarEvent.from_record(event.to_record())
        assert restored == event


class TestTask:
    def test_defaults(self):
        task = Task(id="t", title="Plan")
        assert task.priority is Priority.MEDIUM
        assert task.estimated_duration == 30
        assert task.completed is False
        assert task.created_at.tzinfo is not None

    @pytest.mark.parametrize("duration", [0, -5, True])
    def test_invalid_duration_is_rejected(self, duration):
        with pytest.raises(ValueError):
            Task(id="t", title="Plan", estimated_duration=duration)

    def test_blank_title_is_rejected(self):
        with pytest.raises(ValueError):
            Task(id="t", title="   ")

    def test_string_priority_is_coerced(self):
        assert Task(id="t", title="Plan", priority="high").priority is Priority.HIGH

    def test_naive_due_date_is_made_aware(self):
        task = Task(id="t", title="Plan", due_date=datetime(2025, 3, 14, 17))
        assert task.due_date == datetime(2025, 3, 14, 17, tzinfo=timezone.utc)

    def test_record_round_trip(self):
        task = make_task(priority=Priority.HIGH, due_date=FIXED_NOW + timedelta(days=2), completed=True)
        assert Task.from_record(task.to_record()) == task


class TestCategoryAndDefaults:
    def test_name_is_stripped_and_required(self):
        assert TaskCategory(id="c", name="  Deep Work ").name == "Deep Work"
        with pytest.raises(ValueError):
            TaskCategory(id="c", name=" ")

    def test_default_categories(self):
        categories = {category.id: category for category in default_categories()}
        assert list(categories) == ["work", "personal", "health", "learning", "social"]
        assert categories["work"].color == "#3B82F6"
        assert categories["social"].icon == "users"

    def test_priority_colors_cover_every_priority(self):
        assert set(PRIORITY_COLORS) == {priority.value for priority in Priority}

    def test_priority_rank_orders_high_first(self):
        ranked = sorted(Priority, key=lambda priority: priority.rank)
        assert ranked == [Priority.HIGH, Priority.MEDIUM, Priority.LOW]


class TestSuggestionAndSession:
    def test_suggestion_accepts_camel_case_payload(self):
        suggestion = TaskSuggestion.from_payload(
            {
                "title": "Stretch",
                "description": "Ten minutes",
                "category": "health",
                "priority": "low",
                "estimatedDuration": 10,
                "reasoning": "Breaks help",
            }
        )
        assert suggestion.category_id == "health"
        assert suggestion.estimated_duration == 10
        assert suggestion.to_dict()["priority"] == "low"

    def test_session_expiry(self):
        session = GoogleSession(user_id="u", email="a@b.c", access_token="t", expires_at=FIXED_NOW)
        assert session.is_expired(FIXED_NOW)
        assert not session.is_expired(FIXED_NOW - timedelta(seconds=1))
        assert GoogleSession.from_record(session.to_record()) == session


class TestSyncTrigger:
    @pytest.mark.parametrize(
        "trigger,exempt",
        [
            (SyncTrigger.MANUAL, True),
            (SyncTrigger.SHORTCUT, True),
            (SyncTrigger.LOGIN, True),
            (SyncTrigger.STARTUP, False),
            (SyncTrigger.CONNECTIVITY, False),
            (SyncTrigger.TIMER, False),
        ],
    )
    def test_cooldown_exemptions(self, trigger, exempt):
        assert trigger.bypasses_cooldown is exempt
