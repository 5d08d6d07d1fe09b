"""
Upsert de time entries en Notion, idempotente por event key.

Diseño (resumen):
- Opcionalmente precarga los time entries de la ventana de sync, indexados
  por event key, para no hacer una query por evento.
- Por evento: busca el registro existente, compara contra los valores
  calculados y decide create / update / skip / archive.
- Un evento cancelado solo puede archivar; nunca crea.

Estrategia de idempotencia:
- Un registro al dia no genera write (Notion limita el ritmo de llamadas).
- Lo creado o actualizado en la corrida se refleja en el indice local, asi
  un segundo avistamiento del mismo evento es un skip.
"""

from __future__ import annotations

from typing import Dict, Optional

from loguru import logger

from timesync.core.config import TimeEntryProperties
from timesync.domain.entities.time_entry import TimeEntry, TimeEntrySnapshot, UpsertAction
from timesync.shared.utils.datetime_utils import DateTimeUtils

from .notion_client import NotionClient
from .properties import (
    Date,
    NotionPage,
    Number,
    PropertyValue,
    Relation,
    RichText,
    Select,
    Title,
    Url,
    relation_equals,
)


class TimeEntriesSync:
    """
    Motor de reconciliacion de la base de time entries.

    Una instancia por corrida: el indice por event key vive solo en memoria.
    """

    def __init__(
        self,
        notion: NotionClient,
        time_db_id: str,
        props: TimeEntryProperties,
        *,
        source_tag: str = "gcal",
    ) -> None:
        self._notion = notion
        self._time_db_id = time_db_id
        self._props = props
        self._source_tag = source_tag
        self._existing_by_event_key: Dict[str, Optional[TimeEntrySnapshot]] = {}
        self._prefetched = False

    def prime_existing_by_range(self, time_min: str, time_max: str) -> None:
        """Indexa por event key los time entries con inicio dentro de la ventana."""
        self._existing_by_event_key = {}
        self._prefetched = True

        payload = {
            "filter": {
                "and": [
                    {"property": self._props.start, "date": {"on_or_after": time_min}},
                    {"property": self._props.start, "date": {"on_or_before": time_max}},
                ]
            }
        }
        for page in self._notion.iter_query(self._time_db_id, payload):
            event_key = RichText.decode(page, self._props.event_key)
            if not event_key:
                continue
            self._existing_by_event_key[event_key] = self.snapshot_from_page(page)

        logger.info(f"Time entries precargados en la ventana: {len(self._existing_by_event_key)}")

    def upsert(self, entry: TimeEntry) -> UpsertAction:
        existing = self.find_by_event_key(entry.event_key)

        if entry.cancelled:
            if existing is None or existing.archived:
                return UpsertAction.UNCHANGED
            self._notion.archive_page(existing.id)
            existing.archived = True
            logger.info(f"ARCHIVED {entry.event_key}")
            return UpsertAction.ARCHIVED

        props = self.build_properties(entry)

        if existing is None:
            created = self._notion.create_page(self._time_db_id, props)
            if created.id:
                self._existing_by_event_key[entry.event_key] = self.snapshot_from_entry(created.id, entry)
            logger.info(f"CREATED {entry.event_key}")
            return UpsertAction.CREATED

        if existing.archived:
            # TODO: definir con producto si un evento que vuelve a estar activo debe desarchivar su time entry
            logger.warning(
                f"Time entry {existing.id} archivado pero el evento {entry.event_key} sigue activo; "
                f"se compara sin tocar el flag de archivado"
            )

        if self.is_up_to_date(existing, entry):
            logger.info(f"SKIP {entry.event_key}")
            return UpsertAction.SKIPPED

        self._notion.update_page(existing.id, props)
        refreshed = self.snapshot_from_entry(existing.id, entry)
        refreshed.archived = existing.archived
        if entry.deal_id is None:
            refreshed.deal_ids = list(existing.deal_ids)
        self._existing_by_event_key[entry.event_key] = refreshed
        logger.info(f"UPDATED {entry.event_key}")
        return UpsertAction.UPDATED

    def find_by_event_key(self, event_key: str) -> Optional[TimeEntrySnapshot]:
        if self._prefetched and event_key in self._existing_by_event_key:
            return self._existing_by_event_key[event_key]

        snapshot = self._fetch_by_event_key(event_key)
        if self._prefetched:
            self._existing_by_event_key[event_key] = snapshot
        return snapshot

    def _fetch_by_event_key(self, event_key: str) -> Optional[TimeEntrySnapshot]:
        result = self._notion.query_database(
            self._time_db_id,
            {
                "page_size": 1,
                "filter": {
                    "property": self._props.event_key,
                    "rich_text": {"equals": event_key},
                },
            },
        )
        if not result.results:
            return None
        return self.snapshot_from_page(result.results[0])

    def build_properties(self, entry: TimeEntry) -> Dict[str, PropertyValue]:
        """Set completo de propiedades; el deal solo si hay uno resuelto."""
        props: Dict[str, PropertyValue] = {
            self._props.name: Title(entry.title),
            self._props.start: Date(entry.start_iso),
            self._props.duration: Number(entry.duration_min),
            self._props.type: Select(entry.type),
            self._props.person_rel: Relation.of(entry.person_id),
            self._props.source: Select(self._source_tag),
            self._props.event_key: RichText(entry.event_key),
            self._props.calendar: Select(entry.calendar_label),
            self._props.link: Url(entry.link),
        }
        if entry.deal_id:
            props[self._props.deal_rel] = Relation.of(entry.deal_id)
        return props

    def is_up_to_date(self, existing: TimeEntrySnapshot, entry: TimeEntry) -> bool:
        """
        True si ningun campo comparado difiere.

        - El inicio se compara como instante absoluto al segundo.
        - La duracion se compara exacta (45.9 en Notion no es 45).
        - Las relaciones se comparan como sets.
        - El deal solo se compara si la pasada actual resolvio uno: un deal ya
          enlazado nunca vuelve stale al registro por no resolverse ahora.
        """
        if existing.title != entry.title:
            return False
        if existing.start_ts != DateTimeUtils.to_epoch_seconds(entry.start_iso):
            return False
        if existing.duration_min is None or existing.duration_min != float(entry.duration_min):
            return False
        if existing.type != entry.type:
            return False
        if existing.source != self._source_tag:
            return False
        if existing.calendar != entry.calendar_label:
            return False
        if (existing.link or "") != (entry.link or ""):
            return False
        if not relation_equals(existing.person_ids, [entry.person_id]):
            return False
        if entry.deal_id and not relation_equals(existing.deal_ids, [entry.deal_id]):
            return False
        return True

    def snapshot_from_page(self, page: NotionPage) -> TimeEntrySnapshot:
        return TimeEntrySnapshot(
            id=page.id,
            archived=page.archived,
            title=Title.decode(page, self._props.name),
            start_ts=DateTimeUtils.to_epoch_seconds(Date.decode(page, self._props.start)),
            duration_min=Number.decode(page, self._props.duration),
            type=Select.decode(page, self._props.type),
            person_ids=Relation.decode(page, self._props.person_rel),
            deal_ids=Relation.decode(page, self._props.deal_rel),
            source=Select.decode(page, self._props.source),
            calendar=Select.decode(page, self._props.calendar),
            link=Url.decode(page, self._props.link),
        )

    def snapshot_from_entry(self, page_id: str, entry: TimeEntry) -> TimeEntrySnapshot:
        return TimeEntrySnapshot(
            id=page_id,
            archived=False,
            title=entry.title,
            start_ts=DateTimeUtils.to_epoch_seconds(entry.start_iso),
            duration_min=float(entry.duration_min),
            type=entry.type,
            person_ids=[entry.person_id],
            deal_ids=[entry.deal_id] if entry.deal_id else [],
            source=self._source_tag,
            calendar=entry.calendar_label,
            link=entry.link or None,
        )
