from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, List, Optional, Protocol
from zoneinfo import ZoneInfo

from ..config.settings import SyncSettings
from ..data.repositories import EventRepository, SyncStateRepository
from ..domain import CalendarEvent, SyncStatus, SyncTrigger
from ..domain.models import utcnow
from .google import AuthenticationExpiredError, RemoteCalendarError
from .reconciler import Reconciler, SyncOutcome

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class SessionProbe(Protocol):
    def is_authenticated(self) -> bool:
        ...


class RemoteCalendarClient(Protocol):
    @property
    def provider(self) -> str:
        ...

    async def list_events(self, time_min: datetime, time_max: datetime) -> List[CalendarEvent]:
        ...

    async def create_event(self, event: CalendarEvent) -> CalendarEvent:
        ...

    async def update_event(self, event: CalendarEvent) -> CalendarEvent:
        ...

    async def delete_event(self, remote_id: str) -> None:
        ...


def _shift_month(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def sync_window(now: datetime, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """First day of the previous month through the end of the next month."""

    today = now.astimezone(zone).date()
    start = datetime.combine(_shift_month(today, -1), time.min, tzinfo=zone)
    end = datetime.combine(_shift_month(today, 2), time.min, tzinfo=zone)
    return start, end


@dataclass(slots=True)
class SyncReport:
    status: SyncStatus
    trigger: SyncTrigger
    reason: str = ""
    outcome: Optional[SyncOutcome] = None
    error: Optional[str] = None
    auth_expired: bool = False
    finished_at: Optional[datetime] = None
    failures: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "trigger": self.trigger.value,
            "reason": self.reason,
            "error": self.error,
            "auth_expired": self.auth_expired,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "counts": self.outcome.summary() if self.outcome else None,
            "failures": self.failures,
        }


class SyncOrchestrator:
    """Decides when to reconcile and applies each pass's outcome locally.

    Passes are mutually exclusive through a plain ``syncing`` flag. Automatic
    triggers respect the cooldown measured from the last completed pass;
    manual, shortcut and login triggers skip the cooldown but never run while
    another pass is in flight.
    """

    def __init__(
        self,
        *,
        client: RemoteCalendarClient,
        events: EventRepository,
        sync_state: SyncStateRepository,
        session: SessionProbe,
        settings: SyncSettings,
        timezone_name: str = "UTC",
        reconciler: Optional[Reconciler] = None,
        clock: Clock = utcnow,
    ) -> None:
        self._client = client
        self._events = events
        self._sync_state = sync_state
        self._session = session
        self._settings = settings
        self._zone = ZoneInfo(timezone_name)
        self._reconciler = reconciler or Reconciler(client, max_concurrency=settings.max_concurrency)
        self._clock = clock
        self._syncing = False
        self._online = True
        self._state = sync_state.load(client.provider)
        self.last_report: Optional[SyncReport] = None

    @property
    def syncing(self) -> bool:
        return self._syncing

    @property
    def online(self) -> bool:
        return self._online

    @property
    def last_synced_at(self) -> Optional[datetime]:
        return self._state.last_synced_at

    @property
    def state(self) -> str:
        return "syncing" if self._syncing else "idle"

    def cooldown_remaining(self) -> timedelta:
        if self._state.last_synced_at is None:
            return timedelta(0)
        elapsed = self._clock() - self._state.last_synced_at
        return max(self._settings.cooldown - elapsed, timedelta(0))

    def status(self) -> Dict[str, Any]:
        return {
            "state": self.state,
            "online": self._online,
            "authenticated": self._session.is_authenticated(),
            "last_synced_at": self.last_synced_at.isoformat() if self.last_synced_at else None,
            "cooldown_remaining_seconds": int(self.cooldown_remaining().total_seconds()),
            "last_report": self.last_report.to_dict() if self.last_report else None,
        }

    def _skip(self, trigger: SyncTrigger, reason: str) -> SyncReport:
        logger.debug("Skipping %s sync: %s", trigger.value, reason)
        return SyncReport(status=SyncStatus.SKIPPED, trigger=trigger, reason=reason)

    async def trigger(self, trigger: SyncTrigger) -> SyncReport:
        if self._syncing:
            return self._skip(trigger, "sync already in progress")
        if not self._session.is_authenticated():
            return self._skip(trigger, "not authenticated")
        if not self._online:
            return self._skip(trigger, "offline")
        if not trigger.bypasses_cooldown and self.cooldown_remaining() > timedelta(0):
            return self._skip(trigger, "cooldown active")

        self._syncing = True
        try:
            report = await self._run_pass(trigger)
        finally:
            self._syncing = False
        self.last_report = report
        return report

    async def _run_pass(self, trigger: SyncTrigger) -> SyncReport:
        window = sync_window(self._clock(), self._zone)
        logger.info("Starting %s sync for window %s - %s", trigger.value, window[0], window[1])
        try:
            remote_events = await self._client.list_events(*window)
        except AuthenticationExpiredError as exc:
            logger.warning("Sync aborted, authentication expired: %s", exc)
            return SyncReport(
                status=SyncStatus.FAILED,
                trigger=trigger,
                reason="authentication expired",
                error=str(exc),
                auth_expired=True,
            )
        except RemoteCalendarError as exc:
            logger.error("Sync aborted, remote listing failed: %s", exc)
            return SyncReport(status=SyncStatus.FAILED, trigger=trigger, reason="remote listing failed", error=str(exc))

        local_events = self._events.list_all()
        outcome = await self._reconciler.reconcile(local_events, remote_events, window=window)
        self.apply(outcome)

        finished_at = self._clock()
        self._state.last_synced_at = finished_at
        self._sync_state.save(self._state)
        logger.info("Sync finished at %s: %s", finished_at.isoformat(), outcome.summary())
        return SyncReport(
            status=SyncStatus.COMPLETED,
            trigger=trigger,
            outcome=outcome,
            auth_expired=any(failure.auth_expired for failure in outcome.failures),
            finished_at=finished_at,
            failures=[
                {"event_id": failure.event_id, "operation": failure.operation, "message": failure.message}
                for failure in outcome.failures
            ],
        )

    def apply(self, outcome: SyncOutcome) -> None:
        """Persist a reconciliation outcome to local storage."""

        if outcome.is_empty:
            logger.debug("Nothing to apply")
            return
        for event in (*outcome.created, *outcome.updated, *outcome.imported):
            self._events.upsert(event)

        if not outcome.deleted:
            return
        if not self._settings.propagate_remote_deletions:
            logger.info("Ignoring %d remote deletions (propagation disabled)", len(outcome.deleted))
            return
        for remote_id in outcome.deleted:
            event = self._events.find_by_remote_id(remote_id)
            if event is None:
                continue
            self._events.delete(event.id)
            logger.debug("Deleted local event %s removed remotely", event.id)

    async def on_startup(self) -> SyncReport:
        return await self.trigger(SyncTrigger.STARTUP)

    async def on_login(self) -> SyncReport:
        return await self.trigger(SyncTrigger.LOGIN)

    async def request_manual_sync(self, *, shortcut: bool = False) -> SyncReport:
        return await self.trigger(SyncTrigger.SHORTCUT if shortcut else SyncTrigger.MANUAL)

    async def set_online(self, online: bool) -> Optional[SyncReport]:
        """Record connectivity; a transition to online triggers a sync."""

        was_online = self._online
        self._online = online
        if online and not was_online:
            return await self.trigger(SyncTrigger.CONNECTIVITY)
        return None

    async def run_periodic(self, interval: Optional[timedelta] = None) -> None:
        period = (interval or self._settings.cooldown).total_seconds()
        while True:
            await asyncio.sleep(period)
            try:
                await self.trigger(SyncTrigger.TIMER)
            except Exception:  # noqa: BLE001
                logger.exception("Periodic sync pass failed")

    def _can_mirror(self) -> bool:
        return self._online and self._session.is_authenticated()

    async def mirror_save(self, event: CalendarEvent) -> CalendarEvent:
        """Push a single local edit to the remote calendar, best effort."""

        if not self._can_mirror():
            return event
        try:
            if event.is_remote and event.remote_id:
                return await self._client.update_event(event)
            created = await self._client.create_event(event)
        except RemoteCalendarError as exc:
            logger.warning("Could not mirror event %s to %s: %s", event.id, self._client.provider, exc)
            return event
        return self._events.upsert(created)

    async def mirror_delete(self, event: CalendarEvent) -> bool:
        if not (event.remote_id and self._can_mirror()):
            return False
        try:
            await self._client.delete_event(event.remote_id)
        except RemoteCalendarError as exc:
            logger.warning("Could not delete remote event %s: %s", event.remote_id, exc)
            return False
        return True
