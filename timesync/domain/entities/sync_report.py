"""
Contadores informativos de una corrida.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from timesync.domain.entities.time_entry import UpsertAction


@dataclass
class CalendarSyncStats:
    """Contadores de un calendario."""

    calendar_id: str
    label: str
    seen: int = 0
    dropped: int = 0
    unresolved: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    archived: int = 0
    unchanged: int = 0

    def record(self, action: UpsertAction) -> None:
        counter = action.value
        setattr(self, counter, getattr(self, counter) + 1)

    def summary(self) -> str:
        return (
            f"seen={self.seen} dropped={self.dropped} unresolved={self.unresolved} "
            f"created={self.created} updated={self.updated} skipped={self.skipped} "
            f"archived={self.archived} unchanged={self.unchanged}"
        )


@dataclass
class SyncReport:
    """Resultado agregado de la corrida."""

    time_min: str
    time_max: str
    calendars: List[CalendarSyncStats] = field(default_factory=list)

    def total(self, counter: str) -> int:
        return sum(getattr(stats, counter) for stats in self.calendars)

    def summary(self) -> str:
        counters = ("seen", "dropped", "unresolved", "created", "updated", "skipped", "archived", "unchanged")
        return " ".join(f"{name}={self.total(name)}" for name in counters)
