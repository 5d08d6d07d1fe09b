"""
Time entry: registro destino en Notion.

TimeEntry es lo que el sync calcula a partir de un evento; TimeEntrySnapshot
es lo que existe hoy en Notion (solo los campos necesarios para decidir si
hay que escribir).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class UpsertAction(str, Enum):
    """Resultado del upsert de un evento."""
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"        # Ya estaba al dia, sin write
    ARCHIVED = "archived"
    UNCHANGED = "unchanged"    # Cancelado sin registro o ya archivado


@dataclass(frozen=True)
class TimeEntry:
    """Valores calculados para un evento que califica."""

    event_key: str
    title: str
    start_iso: str
    duration_min: int
    type: str
    person_id: str
    deal_id: Optional[str]
    calendar_label: str
    link: str
    cancelled: bool = False


@dataclass
class TimeEntrySnapshot:
    """Estado actual de un time entry en Notion."""

    id: str
    archived: bool = False
    title: Optional[str] = None
    start_ts: Optional[int] = None
    duration_min: Optional[float] = None
    type: Optional[str] = None
    person_ids: List[str] = field(default_factory=list)
    deal_ids: List[str] = field(default_factory=list)
    source: Optional[str] = None
    calendar: Optional[str] = None
    link: Optional[str] = None
