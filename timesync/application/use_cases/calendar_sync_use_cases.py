"""
Caso de uso: sync one-way Google Calendar -> Notion time entries.

Flujo por corrida:
- Calcula la ventana [now - days_back, now] en UTC.
- Prepara los resolvers (scan completo en modo warm) y precarga los time
  entries de la ventana.
- Por cada calendario, en orden, recorre los eventos paginados y por cada uno:
  filtro de calificacion -> persona -> deal -> upsert.

Todo es secuencial: un evento termina (incluido su write) antes de leer el
siguiente.
"""
from __future__ import annotations

import time
from datetime import datetime
from typing import List, Optional, Sequence

from loguru import logger

from timesync.application.interfaces.sync_ports import (
    CalendarEventSource,
    IdResolver,
    TimeEntryWriter,
)
from timesync.application.services.event_classifier import assess_event, build_title
from timesync.core.config import CalendarTarget
from timesync.domain.entities.calendar_event import SourceEvent
from timesync.domain.entities.sync_report import CalendarSyncStats, SyncReport
from timesync.domain.entities.time_entry import TimeEntry, UpsertAction
from timesync.shared.utils.datetime_utils import DateTimeUtils


class _DayProgress:
    """Log de avance por dia local (inicio del dia, fin con tiempo y cantidad)."""

    def __init__(self, tz_name: str) -> None:
        self._tz_name = tz_name
        self._day: Optional[str] = None
        self._started_at: Optional[float] = None
        self._events = 0

    def track(self, start_iso: str) -> None:
        day = DateTimeUtils.local_day(start_iso, self._tz_name)
        if day != self._day:
            self.finish()
            self._day = day
            self._started_at = time.monotonic()
            self._events = 0
            logger.info(f"Procesando dia: {day}")
        self._events += 1

    def finish(self) -> None:
        if self._day is None or self._started_at is None:
            return
        elapsed = time.monotonic() - self._started_at
        logger.info(f"Dia terminado: {self._day} en {elapsed:.2f}s (eventos: {self._events})")
        self._day = None
        self._started_at = None


class CalendarSyncUseCase:
    """
    Orquestador del sync para una lista fija de calendarios.

    Una instancia por corrida: los resolvers y el motor de upsert traen sus
    caches y se descartan al terminar.
    """

    def __init__(
        self,
        *,
        calendar_source: CalendarEventSource,
        people_resolver: IdResolver,
        deal_resolver: IdResolver,
        time_entries: TimeEntryWriter,
        calendars: Sequence[CalendarTarget],
        min_duration_minutes: int = 3,
        skip_slots: bool = True,
        require_handle_or_billable: bool = True,
        prefetch_time_entries: bool = True,
        timezone_name: str = "Europe/Vilnius",
    ) -> None:
        self._source = calendar_source
        self._people = people_resolver
        self._deals = deal_resolver
        self._time_entries = time_entries
        self._calendars: List[CalendarTarget] = list(calendars)
        self._min_duration = min_duration_minutes
        self._skip_slots = skip_slots
        self._require_handle_or_billable = require_handle_or_billable
        self._prefetch = prefetch_time_entries
        self._tz_name = timezone_name

    def run(self, days_back: int, *, now: Optional[datetime] = None) -> SyncReport:
        time_min, time_max = DateTimeUtils.sync_window(days_back, now)

        self._people.prepare()
        self._deals.prepare()
        if self._prefetch:
            self._time_entries.prime_existing_by_range(time_min, time_max)

        logger.info(f"Ventana de sync: {time_min} .. {time_max}")
        logger.info("Calendarios: " + ", ".join(f"{c.label}({c.calendar_id})" for c in self._calendars))

        report = SyncReport(time_min=time_min, time_max=time_max)
        for target in self._calendars:
            report.calendars.append(self._sync_calendar(target, time_min, time_max))

        logger.info(f"Sync completado. {report.summary()}")
        return report

    def _sync_calendar(self, target: CalendarTarget, time_min: str, time_max: str) -> CalendarSyncStats:
        logger.info(f"--- Calendario: {target.label} ({target.calendar_id}) ---")
        stats = CalendarSyncStats(calendar_id=target.calendar_id, label=target.label)
        progress = _DayProgress(self._tz_name)

        for event in self._source.iter_events(target.calendar_id, time_min=time_min, time_max=time_max):
            stats.seen += 1
            if event.is_timed:
                progress.track(event.start)
            self.process_event(event, target, stats)

        progress.finish()
        logger.info(f"Calendario {target.label}: {stats.summary()}")
        return stats

    def process_event(
        self,
        event: SourceEvent,
        target: CalendarTarget,
        stats: CalendarSyncStats,
    ) -> Optional[UpsertAction]:
        """Procesa un evento; retorna None si se descarto antes del upsert."""
        assessment = assess_event(
            event,
            min_duration_minutes=self._min_duration,
            skip_slots=self._skip_slots,
            require_handle_or_billable=self._require_handle_or_billable,
        )
        if not assessment.qualifies:
            stats.dropped += 1
            logger.debug(f"DROP ({assessment.drop_reason.value}) eventId={event.id}")
            return None

        person_id = self._people.resolve(assessment.handle)
        if not person_id:
            stats.unresolved += 1
            logger.warning(f"SKIP (unknown tg=@{assessment.handle}) eventId={event.id} summary=\"{event.summary}\"")
            return None

        deal_id = self._deals.resolve(person_id)

        entry = TimeEntry(
            event_key=event.event_key(),
            title=build_title(assessment.handle, assessment.type),
            start_iso=event.start,
            duration_min=assessment.duration_min,
            type=assessment.type,
            person_id=person_id,
            deal_id=deal_id,
            calendar_label=target.label,
            link=event.html_link,
            cancelled=event.is_cancelled,
        )
        action = self._time_entries.upsert(entry)
        stats.record(action)
        return action
