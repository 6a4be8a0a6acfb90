"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    AppSettings,
    GoogleCalendarSettings,
    LlmSettings,
    StorageSettings,
    SupabaseSettings,
    SyncSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "GoogleCalendarSettings",
    "LlmSettings",
    "StorageSettings",
    "SupabaseSettings",
    "SyncSettings",
    "get_settings",
]
