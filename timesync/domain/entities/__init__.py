"""
Entidades del dominio.
"""
from timesync.domain.entities.calendar_event import EventStatus, SourceEvent
from timesync.domain.entities.time_entry import (
    TimeEntry,
    TimeEntrySnapshot,
    UpsertAction,
)
from timesync.domain.entities.sync_report import CalendarSyncStats, SyncReport

__all__ = [
    "EventStatus",
    "SourceEvent",
    "TimeEntry",
    "TimeEntrySnapshot",
    "UpsertAction",
    "CalendarSyncStats",
    "SyncReport",
]
