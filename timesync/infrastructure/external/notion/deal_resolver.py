"""
Resolucion id de persona -> deal activo (el mas reciente por fecha de inicio).

Si el despliegue no configura base de deals se usa DisabledDealResolver y el
time entry se escribe sin relacion de deal.

El filtro por etapa es opcional: sin propiedad de etapa configurada la
clausula se omite por completo.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from timesync.core.config import DealProperties

from .notion_client import NotionClient
from .properties import Relation


class DisabledDealResolver:
    """Sin base de deals: nunca hay deal."""

    def prepare(self) -> None:
        return None

    def resolve(self, key: str) -> Optional[str]:
        return None


class _DealQueryMixin:
    _props: DealProperties

    def _stage_clause(self) -> Optional[Dict[str, Any]]:
        if not self._props.stage or not self._props.active_stages:
            return None
        return {
            "or": [
                {"property": self._props.stage, "select": {"equals": stage}}
                for stage in self._props.active_stages
            ]
        }

    def _sorts(self) -> List[Dict[str, str]]:
        return [{"property": self._props.start_date, "direction": "descending"}]


class WarmDealResolver(_DealQueryMixin):
    """
    Scan completo ordenado por fecha de inicio descendente: el primer deal que
    aparece para una persona es el mas reciente y nunca se sobreescribe.
    """

    def __init__(self, notion: NotionClient, deals_db_id: str, props: DealProperties) -> None:
        self._notion = notion
        self._deals_db_id = deals_db_id
        self._props = props
        self._cache: Dict[str, str] = {}
        self._warmed = False

    def prepare(self) -> None:
        if self._warmed:
            return

        payload: Dict[str, Any] = {"sorts": self._sorts()}
        stage_clause = self._stage_clause()
        if stage_clause:
            payload["filter"] = stage_clause

        for page in self._notion.iter_query(self._deals_db_id, payload):
            for person_id in Relation.decode(page, self._props.person_rel):
                self._cache.setdefault(person_id, page.id)

        self._warmed = True
        logger.info(f"Cache de deals lista: {len(self._cache)} personas con deal")

    def resolve(self, key: str) -> Optional[str]:
        return self._cache.get(key)


class LazyDealResolver(_DealQueryMixin):
    """Query filtrada por persona (y etapa, si aplica) en cada miss."""

    def __init__(self, notion: NotionClient, deals_db_id: str, props: DealProperties) -> None:
        self._notion = notion
        self._deals_db_id = deals_db_id
        self._props = props
        self._cache: Dict[str, Optional[str]] = {}

    def prepare(self) -> None:
        return None

    def resolve(self, key: str) -> Optional[str]:
        if key in self._cache:
            return self._cache[key]

        clauses: List[Dict[str, Any]] = [
            {"property": self._props.person_rel, "relation": {"contains": key}},
        ]
        stage_clause = self._stage_clause()
        if stage_clause:
            clauses.append(stage_clause)

        result = self._notion.query_database(
            self._deals_db_id,
            {
                "page_size": 20,
                "filter": {"and": clauses},
                "sorts": self._sorts(),
            },
        )
        deal_id = result.first_id()
        self._cache[key] = deal_id
        return deal_id
