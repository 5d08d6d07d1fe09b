"""
Cliente de Google Calendar para el sync.

- Credenciales: refresh token de una app OAuth (el intercambio inicial del
  token queda fuera de este paquete).
- Paginacion por nextPageToken hasta agotar.
- Instancias de eventos recurrentes expandidas, incluyendo canceladas.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from loguru import logger

from timesync.domain.entities.calendar_event import SourceEvent
from timesync.shared.constants.sync_constants import GCAL_PAGE_SIZE
from timesync.shared.exceptions.sync import CalendarApiException, CalendarAuthException

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def build_calendar_service(client_id: str, client_secret: str, refresh_token: str) -> Any:
    """
    Construye el servicio de Calendar v3 refrescando el access token al inicio.

    Un fallo de refresh es fatal: se levanta CalendarAuthException antes de
    tocar Notion.
    """
    creds = Credentials(
        token=None,
        refresh_token=refresh_token,
        token_uri=TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
        scopes=SCOPES,
    )
    try:
        creds.refresh(Request())
    except (RefreshError, TransportError) as e:
        raise CalendarAuthException(str(e)) from e

    return build("calendar", "v3", credentials=creds, cache_discovery=False)


class GoogleCalendarSource:
    """Fuente de eventos sobre events.list."""

    def __init__(self, service: Any, *, page_size: int = GCAL_PAGE_SIZE) -> None:
        self._service = service
        self._page_size = page_size

    def iter_events(self, calendar_id: str, *, time_min: str, time_max: str) -> Iterator[SourceEvent]:
        """
        Itera los eventos de la ventana en orden ascendente de inicio.
        """
        page_token: Optional[str] = None
        pages = 0
        while True:
            params = {
                "calendarId": calendar_id,
                "timeMin": time_min,
                "timeMax": time_max,
                "singleEvents": True,
                "orderBy": "startTime",
                "maxResults": self._page_size,
                "showDeleted": True,
            }
            if page_token:
                params["pageToken"] = page_token

            try:
                response = self._service.events().list(**params).execute()
            except (HttpError, RefreshError, TransportError, OSError) as e:
                raise CalendarApiException(calendar_id, str(e)) from e

            pages += 1
            items = response.get("items") or []
            logger.debug(f"Calendar {calendar_id}: pagina {pages} con {len(items)} eventos")
            for item in items:
                yield SourceEvent.from_google_event(item, calendar_id)

            page_token = response.get("nextPageToken")
            if not page_token:
                break
