from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class LlmSettings:
    api_key: Optional[str]
    model: str
    base_url: Optional[str]
    organization: Optional[str]
    project: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.model)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.api_key:
            missing.append("OPENAI_API_KEY")
        if not self.model:
            missing.append("OPENAI_MODEL")
        return missing


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str]
    anon_key: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


@dataclass(frozen=True)
class GoogleCalendarSettings:
    provider: str
    base_url: str
    calendar_id: str
    default_category_id: str
    request_timeout: float


@dataclass(frozen=True)
class SyncSettings:
    cooldown: timedelta
    max_concurrency: int
    propagate_remote_deletions: bool
    auto_sync: bool


@dataclass(frozen=True)
class StorageSettings:
    backend: str
    local_path: Optional[str]
    events_table: str
    tasks_table: str
    categories_table: str
    sync_state_table: str
    sessions_table: str


@dataclass(frozen=True)
class UiSettings:
    timezone: str


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int


@dataclass(frozen=True)
class AppSettings:
    llm: LlmSettings
    supabase: SupabaseSettings
    google: GoogleCalendarSettings
    sync: SyncSettings
    storage: StorageSettings
    ui: UiSettings
    server: ServerSettings


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _timedelta_from_env(name: str, default_minutes: float) -> timedelta:
    raw = os.getenv(name)
    if not raw:
        return timedelta(minutes=default_minutes)
    try:
        minutes = float(raw)
    except ValueError:
        return timedelta(minutes=default_minutes)
    return timedelta(minutes=minutes)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    llm = LlmSettings(
        api_key=os.getenv("OPENAI_API_KEY"),
        model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        base_url=os.getenv("OPENAI_BASE_URL"),
        organization=os.getenv("OPENAI_ORG"),
        project=os.getenv("OPENAI_PROJECT"),
    )

    supabase = SupabaseSettings(
        url=os.getenv("SUPABASE_URL"),
        anon_key=os.getenv("SUPABASE_ANON_KEY"),
    )

    google = GoogleCalendarSettings(
        provider=os.getenv("SMART_CALENDAR_PROVIDER", "google"),
        base_url=os.getenv("GOOGLE_CALENDAR_API_BASE_URL", "https://www.googleapis.com/calendar/v3"),
        calendar_id=os.getenv("GOOGLE_CALENDAR_ID", "primary"),
        default_category_id=os.getenv("SMART_CALENDAR_DEFAULT_CATEGORY", "work"),
        request_timeout=float(os.getenv("GOOGLE_CALENDAR_TIMEOUT_SECONDS", "30")),
    )

    sync = SyncSettings(
        cooldown=_timedelta_from_env("SMART_CALENDAR_SYNC_COOLDOWN_MINUTES", 5),
        max_concurrency=int(os.getenv("SMART_CALENDAR_SYNC_CONCURRENCY", "4")),
        propagate_remote_deletions=_bool_from_env("SMART_CALENDAR_PROPAGATE_DELETIONS", True),
        auto_sync=_bool_from_env("SMART_CALENDAR_AUTO_SYNC", True),
    )

    storage = StorageSettings(
        backend=os.getenv("SMART_CALENDAR_STORAGE", "supabase" if supabase.is_configured else "local"),
        local_path=os.getenv("SMART_CALENDAR_DATA_FILE"),
        events_table=os.getenv("SUPABASE_EVENTS_TABLE", "calendar_events"),
        tasks_table=os.getenv("SUPABASE_TASKS_TABLE", "tasks"),
        categories_table=os.getenv("SUPABASE_CATEGORIES_TABLE", "task_categories"),
        sync_state_table=os.getenv("SUPABASE_SYNC_STATE_TABLE", "sync_state"),
        sessions_table=os.getenv("SUPABASE_SESSIONS_TABLE", "google_sessions"),
    )

    ui = UiSettings(
        timezone=os.getenv("SMART_CALENDAR_TIMEZONE", "UTC"),
    )

    server = ServerSettings(
        host=os.getenv("SMART_CALENDAR_HOST", "127.0.0.1"),
        port=int(os.getenv("SMART_CALENDAR_PORT", "5000")),
    )

    return AppSettings(
        llm=llm,
        supabase=supabase,
        google=google,
        sync=sync,
        storage=storage,
        ui=ui,
        server=server,
    )
