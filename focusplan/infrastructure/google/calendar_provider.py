"""
Google Calendar provider (Calendar API v3 over REST).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

import httpx

from focusplan.core.config import Settings
from focusplan.core.exceptions import CalendarTimeoutError, ExternalServiceError
from focusplan.core.logger import setup_logger
from focusplan.interfaces.calendar_provider import ICalendarProvider
from focusplan.models.calendar import BusyInterval, CalendarEventCreate
from focusplan.utils.datetime_utils import ensure_utc, local_day_bounds, local_day_start

logger = setup_logger(__name__)


class GoogleCalendarProvider(ICalendarProvider):
    """Google Calendar adapter.

    Busy time comes from the events list of a single calendar. Transparent
    ("free") and cancelled events are ignored; all-day events block the
    whole day.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not settings.GOOGLE_ACCESS_TOKEN:
            raise ValueError("GOOGLE_ACCESS_TOKEN must be set for the google calendar provider")
        self._settings = settings
        self._transport = transport
        base_url = settings.GOOGLE_CALENDAR_BASE_URL.rstrip("/")
        self._events_url = f"{base_url}/calendars/{settings.GOOGLE_CALENDAR_ID}/events"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._settings.CALENDAR_TIMEOUT_SECONDS,
            headers={"Authorization": f"Bearer {self._settings.GOOGLE_ACCESS_TOKEN}"},
            transport=self._transport,
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise CalendarTimeoutError(f"Google Calendar timed out: {method} {url}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Google Calendar request failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        raise ExternalServiceError(
            f"Google Calendar {action} failed with status {response.status_code}",
            details=response.text[:500],
        )

    @staticmethod
    def _parse_boundary(value: dict[str, Any], timezone: str) -> Optional[datetime]:
        if "dateTime" in value:
            return ensure_utc(datetime.fromisoformat(value["dateTime"].replace("Z", "+00:00")))
        if "date" in value:
            return local_day_start(date.fromisoformat(value["date"]), timezone)
        return None

    async def list_busy_intervals(
        self,
        user_id: str,
        day: date,
        timezone: str,
    ) -> list[BusyInterval]:
        day_start, day_end = local_day_bounds(day, timezone)
        params: dict[str, Any] = {
            "timeMin": ensure_utc(day_start).isoformat(),
            "timeMax": ensure_utc(day_end).isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": 250,
        }

        items: list[dict[str, Any]] = []
        while True:
            response = await self._request("GET", self._events_url, params=params)
            self._raise_for_status(response, "events.list")
            payload = response.json()
            items.extend(payload.get("items", []))
            page_token = payload.get("nextPageToken")
            if not page_token:
                break
            params["pageToken"] = page_token

        intervals = []
        for item in items:
            if item.get("status") == "cancelled" or item.get("transparency") == "transparent":
                continue
            start = self._parse_boundary(item.get("start", {}), timezone)
            end = self._parse_boundary(item.get("end", {}), timezone)
            if start is None or end is None:
                logger.warning(f"Skipping calendar event without times: {item.get('id')}")
                continue
            start = max(start, ensure_utc(day_start))
            end = min(end, ensure_utc(day_end))
            if end <= start:
                continue
            intervals.append(
                BusyInterval(
                    start=start,
                    end=end,
                    source="google",
                    event_id=item.get("id"),
                    summary=item.get("summary"),
                )
            )
        intervals.sort(key=lambda interval: (interval.start, interval.end))
        return intervals

    async def create_event(self, user_id: str, event: CalendarEventCreate) -> str:
        body = {
            "summary": event.summary,
            "description": event.description,
            "start": {"dateTime": ensure_utc(event.start).isoformat()},
            "end": {"dateTime": ensure_utc(event.end).isoformat()},
            "extendedProperties": {"private": dict(event.extended_private)},
        }
        response = await self._request("POST", self._events_url, json=body)
        self._raise_for_status(response, "events.insert")
        event_id = response.json().get("id")
        if not event_id:
            raise ExternalServiceError("Google Calendar returned an event without an id")
        return event_id

    async def delete_event(self, user_id: str, event_id: str) -> bool:
        response = await self._request("DELETE", f"{self._events_url}/{event_id}")
        # Already gone counts as deleted
        if response.status_code in (404, 410):
            return True
        self._raise_for_status(response, "events.delete")
        return True
