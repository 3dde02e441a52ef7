# cassius_core/calendars/providers.py
"""
Remote calendar providers.

A provider only reads: it returns the events that changed since the stored
sync cursor. Reconciliation against local appointments lives in services.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional
from urllib.parse import quote

import requests
from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

logger = logging.getLogger(__name__)


class CalendarProviderError(Exception):
    """Remote calendar call failed (transport or non-2xx response)."""


class SyncTokenExpired(CalendarProviderError):
    """Stored sync cursor rejected by the provider; a full resync is required."""


@dataclass(frozen=True)
class RemoteEvent:
    external_event_id: str
    status: str
    etag: str = ""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"


@dataclass(frozen=True)
class RemoteChanges:
    events: list[RemoteEvent] = field(default_factory=list)
    next_sync_token: str = ""


class CalendarProvider:
    name = "base"

    def fetch_changes(self, integration, *, sync_token: str = "") -> RemoteChanges:
        raise NotImplementedError


def _parse_event_time(value: dict | None) -> Optional[datetime]:
    if not value:
        return None
    if value.get("dateTime"):
        return parse_datetime(value["dateTime"])
    if value.get("date"):
        # all-day event: midnight in the server timezone
        day = parse_date(value["date"])
        if day is None:
            return None
        return timezone.make_aware(datetime.combine(day, time.min))
    return None


class GoogleCalendarProvider(CalendarProvider):
    """
    Google Calendar v3 events.list, incremental via syncToken.

    HTTP 410 means the token is gone: raise SyncTokenExpired and let the caller
    restart with an empty cursor.
    """
    name = "google"

    def __init__(self, *, api_base: str | None = None, timeout: int | None = None, session=None):
        self.api_base = (api_base or settings.GOOGLE_CALENDAR_API_BASE).rstrip("/")
        self.timeout = timeout or settings.GOOGLE_CALENDAR_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _events_url(self, calendar_id: str) -> str:
        return f"{self.api_base}/calendars/{quote(calendar_id, safe='')}/events"

    def _get_page(self, integration, params: dict) -> dict:
        url = self._events_url(integration.target_calendar_id)
        headers = {"Authorization": f"Bearer {integration.access_token}"}
        try:
            resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise CalendarProviderError(f"Google Calendar request failed: {exc}") from exc

        if resp.status_code == 410:
            raise SyncTokenExpired("Google Calendar sync token expired")
        if resp.status_code >= 400:
            raise CalendarProviderError(
                f"Google Calendar returned HTTP {resp.status_code}: {resp.text[:200]}"
            )
        return resp.json()

    def fetch_changes(self, integration, *, sync_token: str = "") -> RemoteChanges:
        events: list[RemoteEvent] = []
        params: dict = {"showDeleted": "true", "singleEvents": "true"}
        if sync_token:
            params["syncToken"] = sync_token

        while True:
            payload = self._get_page(integration, params)
            for item in payload.get("items", []):
                events.append(
                    RemoteEvent(
                        external_event_id=item["id"],
                        status=item.get("status", "confirmed"),
                        etag=item.get("etag", ""),
                        start=_parse_event_time(item.get("start")),
                        end=_parse_event_time(item.get("end")),
                    )
                )

            page_token = payload.get("nextPageToken")
            if not page_token:
                next_token = payload.get("nextSyncToken", "")
                break
            params = {**params, "pageToken": page_token}

        logger.debug(
            "Fetched %d change(s) from Google calendar %s",
            len(events),
            integration.target_calendar_id,
        )
        return RemoteChanges(events=events, next_sync_token=next_token)


_PROVIDERS = {
    GoogleCalendarProvider.name: GoogleCalendarProvider,
}


def get_provider(name: str) -> CalendarProvider:
    try:
        return _PROVIDERS[name]()
    except KeyError:
        raise CalendarProviderError(f"Unsupported calendar provider: {name}") from None
