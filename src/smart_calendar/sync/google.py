"""Google Calendar REST client.

Translates between local :class:`CalendarEvent` objects and the provider's
event resources, attaches the bearer token and classifies failures:

- HTTP 401 (or no token at all) raises :class:`AuthenticationExpiredError`
- any other non-2xx raises :class:`RemoteApiError` with status and body
- transport failures raise :class:`RemoteCalendarError`
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote
from zoneinfo import ZoneInfo

import httpx

from ..config.settings import GoogleCalendarSettings
from ..domain import CalendarEvent

logger = logging.getLogger(__name__)

UNTITLED_EVENT = "Untitled Event"
MAX_RESULTS_PER_PAGE = 250

# Google exposes a fixed palette of event colors addressed by numeric id.
CATEGORY_COLOR_IDS: Dict[str, str] = {
    "work": "9",
    "personal": "10",
    "health": "5",
    "learning": "3",
    "social": "11",
}
COLOR_CATEGORY_IDS: Dict[str, str] = {color: category for category, color in CATEGORY_COLOR_IDS.items()}

TokenProvider = Callable[[], Optional[str]]


class RemoteCalendarError(RuntimeError):
    """Base error for remote calendar calls, also raised on transport failures."""


class AuthenticationExpiredError(RemoteCalendarError):
    """Raised when the provider rejects the bearer token or none is available."""


class RemoteApiError(RemoteCalendarError):
    """Raised when the provider answers with a non-2xx status other than 401."""

    def __init__(self, *, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Google Calendar API request failed ({status_code}): {body}")


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_boundary(payload: Any, zone: ZoneInfo) -> tuple[datetime, bool]:
    if not isinstance(payload, dict):
        raise ValueError("Google Calendar event is missing start/end payloads")
    date_time = payload.get("dateTime")
    if isinstance(date_time, str) and date_time:
        parsed = datetime.fromisoformat(date_time.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=zone)
        return parsed, False
    date_only = payload.get("date")
    if isinstance(date_only, str) and date_only:
        return datetime.combine(date.fromisoformat(date_only), time.min, tzinfo=zone), True
    raise ValueError("Google Calendar event is missing start/end dateTime or date values")


def remote_item_to_event(
    item: Dict[str, Any],
    *,
    provider: str,
    zone: ZoneInfo,
    default_category_id: str,
) -> CalendarEvent:
    """Map one provider event resource to the local event shape."""

    remote_id = item.get("id")
    if not isinstance(remote_id, str) or not remote_id:
        raise ValueError("Google Calendar event payload is missing a non-empty id")
    start, all_day = _parse_boundary(item.get("start"), zone)
    end, _ = _parse_boundary(item.get("end"), zone)
    if end < start:
        end = start
    return CalendarEvent(
        id=f"{provider}-{remote_id}",
        title=item.get("summary") or UNTITLED_EVENT,
        start=start,
        end=end,
        category_id=COLOR_CATEGORY_IDS.get(str(item.get("colorId")), default_category_id),
        description=item.get("description"),
        all_day=all_day,
        is_remote=True,
        remote_id=remote_id,
        location=item.get("location"),
    )


def build_event_body(event: CalendarEvent, *, timezone_name: str) -> Dict[str, Any]:
    """Build the provider JSON body used for both create and update."""

    body: Dict[str, Any] = {"summary": event.title}
    if event.description:
        body["description"] = event.description
    if event.location:
        body["location"] = event.location
    if event.all_day:
        first_day, day_after_last = event.day_span()
        body["start"] = {"date": first_day.isoformat()}
        body["end"] = {"date": day_after_last.isoformat()}
    else:
        body["start"] = {"dateTime": event.start.isoformat(), "timeZone": timezone_name}
        body["end"] = {"dateTime": event.end.isoformat(), "timeZone": timezone_name}
    color_id = CATEGORY_COLOR_IDS.get(event.category_id or "")
    if color_id:
        body["colorId"] = color_id
    return body


class GoogleCalendarClient:
    """Async client for one Google calendar, authenticated with a bearer token."""

    def __init__(
        self,
        settings: GoogleCalendarSettings,
        *,
        token_provider: TokenProvider,
        timezone_name: str = "UTC",
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings
        self._token_provider = token_provider
        self._timezone_name = timezone_name
        self._zone = ZoneInfo(timezone_name)
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=settings.request_timeout)

    @property
    def provider(self) -> str:
        return self._settings.provider

    def _events_path(self, remote_id: Optional[str] = None) -> str:
        calendar_id = quote(self._settings.calendar_id, safe="")
        path = f"/calendars/{calendar_id}/events"
        if remote_id is not None:
            path = f"{path}/{quote(remote_id, safe='')}"
        return path

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        token = self._token_provider()
        if not token:
            raise AuthenticationExpiredError("No Google access token is available; sign in again.")
        url = f"{self._settings.base_url.rstrip('/')}{path}"
        try:
            response = await self._http_client.request(
                method,
                url,
                params=params,
                json=json_body,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            raise RemoteCalendarError(f"Google Calendar request failed: {exc}") from exc

        if response.status_code == 401:
            raise AuthenticationExpiredError("Google Calendar rejected the access token (401).")
        if response.status_code < 200 or response.status_code >= 300:
            raise RemoteApiError(status_code=response.status_code, body=response.text)
        return response

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        response = await self._request(method, path, params=params, json_body=json_body)
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteApiError(status_code=response.status_code, body=response.text) from exc
        if not isinstance(payload, dict):
            raise RemoteApiError(status_code=response.status_code, body=response.text)
        return payload

    async def list_events(self, time_min: datetime, time_max: datetime) -> List[CalendarEvent]:
        params: Dict[str, Any] = {
            "timeMin": _rfc3339(time_min),
            "timeMax": _rfc3339(time_max),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": MAX_RESULTS_PER_PAGE,
        }
        events: List[CalendarEvent] = []
        while True:
            payload = await self._request_json("GET", self._events_path(), params=params)
            for item in payload.get("items") or []:
                if not isinstance(item, dict) or item.get("status") == "cancelled":
                    continue
                try:
                    events.append(
                        remote_item_to_event(
                            item,
                            provider=self.provider,
                            zone=self._zone,
                            default_category_id=self._settings.default_category_id,
                        )
                    )
                except ValueError as exc:
                    logger.warning("Skipping malformed remote event %s: %s", item.get("id"), exc)
            page_token = payload.get("nextPageToken")
            if not page_token:
                break
            params = {**params, "pageToken": page_token}
        logger.debug("Listed %d remote events between %s and %s", len(events), time_min, time_max)
        return events

    async def create_event(self, event: CalendarEvent) -> CalendarEvent:
        body = build_event_body(event, timezone_name=self._timezone_name)
        created = await self._request_json("POST", self._events_path(), json_body=body)
        remote_id = created.get("id")
        if not isinstance(remote_id, str) or not remote_id:
            raise RemoteApiError(status_code=200, body="Created event response is missing an id")
        return replace(event, is_remote=True, remote_id=remote_id)

    async def update_event(self, event: CalendarEvent) -> CalendarEvent:
        if not event.remote_id:
            raise ValueError(f"Event '{event.id}' has no remote id to update.")
        body = build_event_body(event, timezone_name=self._timezone_name)
        await self._request_json("PUT", self._events_path(event.remote_id), json_body=body)
        return event

    async def delete_event(self, remote_id: str) -> None:
        await self._request("DELETE", self._events_path(remote_id))

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()
