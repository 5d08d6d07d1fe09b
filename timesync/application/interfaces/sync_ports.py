"""
Contratos que usa el caso de uso de sync.

Este contrato existe para:
- Que el orquestador no dependa de Google ni de Notion directamente.
- Facilitar tests unitarios con fakes, sin red.
"""

from __future__ import annotations

from typing import Iterator, Optional, Protocol

from timesync.domain.entities.calendar_event import SourceEvent
from timesync.domain.entities.time_entry import TimeEntry, UpsertAction


class IdResolver(Protocol):
    """
    Resuelve una clave (handle o id de persona) a un id estable de Notion.

    Implementaciones:
    - Warm: un scan completo en prepare(); despues solo lookup en cache.
    - Lazy: query puntual por cada miss, cacheada (incluye "no encontrado").
    - Disabled (solo deals): siempre None.
    """

    def prepare(self) -> None:
        """Se llama una vez antes de procesar eventos."""
        ...

    def resolve(self, key: str) -> Optional[str]:
        ...


class CalendarEventSource(Protocol):
    """Fuente de eventos de calendario, paginada internamente."""

    def iter_events(self, calendar_id: str, *, time_min: str, time_max: str) -> Iterator[SourceEvent]:
        """Eventos en orden ascendente de inicio, instancias expandidas, incluye cancelados."""
        ...


class TimeEntryWriter(Protocol):
    """Motor de upsert de time entries."""

    def prime_existing_by_range(self, time_min: str, time_max: str) -> None:
        ...

    def upsert(self, entry: TimeEntry) -> UpsertAction:
        ...
