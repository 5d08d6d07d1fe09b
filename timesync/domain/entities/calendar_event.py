"""
Evento de calendario (fuente, solo lectura).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class EventStatus(str, Enum):
    """Estados de evento que devuelve Google Calendar."""
    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SourceEvent:
    """
    Evento de Google Calendar con los campos que usa el sync.

    start/end son los valores `dateTime`; un evento de dia completo solo trae
    `date`, por lo que ambos quedan en None y el evento se descarta.
    """

    id: str
    calendar_id: str
    status: str
    summary: str
    description: str
    start: Optional[str]
    end: Optional[str]
    html_link: str

    @property
    def is_cancelled(self) -> bool:
        return self.status == EventStatus.CANCELLED.value

    @property
    def is_timed(self) -> bool:
        return bool(self.start) and bool(self.end)

    def event_key(self) -> str:
        """Clave estable del upsert: calendarId:eventId."""
        return f"{self.calendar_id}:{self.id}"

    @classmethod
    def from_google_event(cls, item: Dict[str, Any], calendar_id: str) -> "SourceEvent":
        """Construye el evento a partir de un item de events.list."""
        start = item.get("start") or {}
        end = item.get("end") or {}
        return cls(
            id=str(item.get("id") or ""),
            calendar_id=calendar_id,
            status=str(item.get("status") or EventStatus.CONFIRMED.value),
            summary=str(item.get("summary") or ""),
            description=str(item.get("description") or ""),
            start=start.get("dateTime") or None,
            end=end.get("dateTime") or None,
            html_link=str(item.get("htmlLink") or ""),
        )
