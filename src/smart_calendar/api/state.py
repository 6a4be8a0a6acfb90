from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import httpx

from ..config import AppSettings, get_settings
from ..data import DocumentStore
from ..llm import ProductivityAssistant
from ..services import (
    AuthService,
    CalendarService,
    CategoryService,
    ServiceContext,
    SuggestionService,
    SummaryService,
    TaskService,
)
from ..sync import GoogleCalendarClient, SyncOrchestrator


@dataclass(slots=True)
class ApiState:
    """Wires storage, services, the provider client and the sync orchestrator."""

    settings: AppSettings = field(default_factory=get_settings)
    store: Optional[DocumentStore] = None
    http_client: Optional[httpx.AsyncClient] = None
    assistant: Optional[ProductivityAssistant] = None
    context: ServiceContext = field(init=False)
    auth: AuthService = field(init=False)
    calendar: CalendarService = field(init=False)
    categories: CategoryService = field(init=False)
    tasks: TaskService = field(init=False)
    summary: SummaryService = field(init=False)
    suggestions: SuggestionService = field(init=False)
    client: GoogleCalendarClient = field(init=False)
    sync: SyncOrchestrator = field(init=False)

    def __post_init__(self) -> None:
        self.context = ServiceContext(settings=self.settings, store=self.store)
        if self.assistant is None:
            self.assistant = ProductivityAssistant(settings=self.settings)
        self.auth = AuthService(self.context)
        self.auth.restore()
        self.calendar = CalendarService(self.context)
        self.categories = CategoryService(self.context)
        self.tasks = TaskService(self.context)
        self.summary = SummaryService(self.context, assistant=self.assistant)
        self.suggestions = SuggestionService(self.context, assistant=self.assistant)
        self.client = GoogleCalendarClient(
            self.settings.google,
            token_provider=self.auth.access_token,
            timezone_name=self.settings.ui.timezone,
            http_client=self.http_client,
        )
        self.sync = SyncOrchestrator(
            client=self.client,
            events=self.context.events,
            sync_state=self.context.sync_state,
            session=self.auth,
            settings=self.settings.sync,
            timezone_name=self.settings.ui.timezone,
        )

    async def aclose(self) -> None:
        await self.client.aclose()
