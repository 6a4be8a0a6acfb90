"""Two-way synchronization with the external calendar provider."""

from __future__ import annotations

from .google import (
    AuthenticationExpiredError,
    GoogleCalendarClient,
    RemoteApiError,
    RemoteCalendarError,
)
from .orchestrator import SyncOrchestrator, SyncReport, sync_window
from .reconciler import Reconciler, SyncFailure, SyncOutcome

__all__ = [
    "AuthenticationExpiredError",
    "GoogleCalendarClient",
    "Reconciler",
    "RemoteApiError",
    "RemoteCalendarError",
    "SyncFailure",
    "SyncOrchestrator",
    "SyncOutcome",
    "SyncReport",
    "sync_window",
]
