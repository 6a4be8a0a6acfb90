"""Reconciliation of local events against a fresh remote snapshot.

A pass never writes local storage. It issues remote creates and updates
through the client and reports what happened so the orchestrator can apply
the result locally.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence

from ..domain import CalendarEvent
from .google import AuthenticationExpiredError, RemoteCalendarError

logger = logging.getLogger(__name__)


class RemoteCalendar(Protocol):
    async def create_event(self, event: CalendarEvent) -> CalendarEvent:
        ...

    async def update_event(self, event: CalendarEvent) -> CalendarEvent:
        ...


@dataclass(slots=True)
class SyncFailure:
    event_id: str
    operation: str
    message: str
    auth_expired: bool = False


@dataclass(slots=True)
class SyncOutcome:
    created: List[CalendarEvent] = field(default_factory=list)
    updated: List[CalendarEvent] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    imported: List[CalendarEvent] = field(default_factory=list)
    failures: List[SyncFailure] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.created or self.updated or self.deleted or self.imported)

    def summary(self) -> Dict[str, int]:
        return {
            "created": len(self.created),
            "updated": len(self.updated),
            "deleted": len(self.deleted),
            "imported": len(self.imported),
            "failed": len(self.failures),
        }


def schedule_differs(local: CalendarEvent, remote: CalendarEvent) -> bool:
    """True when title, start or end of the two events disagree.

    Timed events compare timestamps exactly. All-day events compare by
    calendar day because the provider only stores dates for them.
    """

    if local.title != remote.title:
        return True
    if local.all_day and remote.all_day:
        return local.day_span() != remote.day_span()
    if local.all_day != remote.all_day:
        return True
    return local.start != remote.start or local.end != remote.end


def _in_window(event: CalendarEvent, window: Optional[tuple[datetime, datetime]]) -> bool:
    if window is None:
        return True
    window_start, window_end = window
    return window_start <= event.start < window_end


class Reconciler:
    """Diff local events against the remote snapshot and push local intent."""

    def __init__(self, remote: RemoteCalendar, *, max_concurrency: int = 4) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._remote = remote
        self._max_concurrency = max_concurrency

    async def reconcile(
        self,
        local_events: Sequence[CalendarEvent],
        remote_events: Sequence[CalendarEvent],
        *,
        window: Optional[tuple[datetime, datetime]] = None,
    ) -> SyncOutcome:
        outcome = SyncOutcome()
        remote_by_id: Dict[str, CalendarEvent] = {
            event.remote_id: event for event in remote_events if event.remote_id
        }

        pending_creates = [event for event in local_events if not event.is_remote]
        mirrored = [event for event in local_events if event.is_remote and event.remote_id]

        await self._create_all(pending_creates, outcome)

        for local in mirrored:
            remote = remote_by_id.get(local.remote_id)  # type: ignore[arg-type]
            if remote is None:
                if _in_window(local, window):
                    outcome.deleted.append(local.remote_id)  # type: ignore[arg-type]
                continue
            if not schedule_differs(local, remote):
                continue
            try:
                updated = await self._remote.update_event(local)
            except (RemoteCalendarError, ValueError) as exc:
                self._record_failure(outcome, local, "update", exc)
                continue
            outcome.updated.append(updated)

        known_remote_ids = {event.remote_id for event in local_events if event.remote_id}
        known_remote_ids.update(event.remote_id for event in outcome.created if event.remote_id)
        outcome.imported = [
            event for event in remote_events if event.remote_id and event.remote_id not in known_remote_ids
        ]

        logger.info("Reconciliation finished: %s", outcome.summary())
        return outcome

    async def _create_all(self, events: Sequence[CalendarEvent], outcome: SyncOutcome) -> None:
        if not events:
            return
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _create(event: CalendarEvent) -> None:
            async with semaphore:
                try:
                    created = await self._remote.create_event(event)
                except (RemoteCalendarError, ValueError) as exc:
                    self._record_failure(outcome, event, "create", exc)
                    return
            outcome.created.append(created)

        await asyncio.gather(*(_create(event) for event in events))
        order = {event.id: index for index, event in enumerate(events)}
        outcome.created.sort(key=lambda event: order.get(event.id, len(order)))

    @staticmethod
    def _record_failure(outcome: SyncOutcome, event: CalendarEvent, operation: str, exc: Exception) -> None:
        auth_expired = isinstance(exc, AuthenticationExpiredError)
        logger.warning("Remote %s failed for event %s: %s", operation, event.id, exc)
        outcome.failures.append(
            SyncFailure(
                event_id=event.id,
                operation=operation,
                message=str(exc),
                auth_expired=auth_expired,
            )
        )
