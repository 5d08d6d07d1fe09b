"""
Resolucion handle -> id de pagina de persona en Notion.

Dos modos con la misma interfaz (prepare/resolve):
- WarmPeopleResolver: lee toda la tabla de personas una vez; un miss es None
  sin ir a la red. Puede quedar desactualizado si alguien se agrega durante
  la corrida.
- LazyPeopleResolver: por cada handle nuevo consulta Notion con variantes de
  mayusculas/minusculas y cachea el resultado (tambien el "no encontrado").
"""

from __future__ import annotations

from typing import Dict, List, Optional

from loguru import logger

from timesync.application.services.event_classifier import parse_contact_handles

from .notion_client import NotionClient
from .properties import NotionPage, RichText


def contact_handles_from_page(page: NotionPage, contact_property: str) -> List[str]:
    text = RichText.decode(page, contact_property)
    if not text:
        return []
    return parse_contact_handles(text)


class WarmPeopleResolver:
    """Cache completo de handles construido con un scan de la tabla."""

    def __init__(self, notion: NotionClient, people_db_id: str, contact_property: str) -> None:
        self._notion = notion
        self._people_db_id = people_db_id
        self._contact_property = contact_property
        self._cache: Dict[str, str] = {}
        self._warmed = False

    def prepare(self) -> None:
        if self._warmed:
            return

        pages = 0
        for page in self._notion.iter_query(self._people_db_id):
            pages += 1
            for handle in contact_handles_from_page(page, self._contact_property):
                # Gana el primer registro visto para cada handle
                self._cache.setdefault(handle, page.id)

        self._warmed = True
        logger.info(f"Cache de personas lista: {len(self._cache)} handles en {pages} registros")

    def resolve(self, key: str) -> Optional[str]:
        return self._cache.get(key)


class LazyPeopleResolver:
    """Query puntual por handle, memoizada durante la corrida."""

    def __init__(self, notion: NotionClient, people_db_id: str, contact_property: str) -> None:
        self._notion = notion
        self._people_db_id = people_db_id
        self._contact_property = contact_property
        self._cache: Dict[str, Optional[str]] = {}

    def prepare(self) -> None:
        return None

    def resolve(self, key: str) -> Optional[str]:
        if key in self._cache:
            return self._cache[key]

        person_id = None
        for variant in self._variants(key):
            result = self._notion.query_database(
                self._people_db_id,
                {
                    "page_size": 5,
                    "filter": {
                        "property": self._contact_property,
                        "rich_text": {"contains": variant},
                    },
                },
            )
            person_id = result.first_id()
            if person_id:
                break

        self._cache[key] = person_id
        return person_id

    @staticmethod
    def _variants(handle: str) -> List[str]:
        variants: List[str] = []
        for candidate in (handle, f"@{handle}", handle.upper(), f"@{handle.upper()}"):
            if candidate not in variants:
                variants.append(candidate)
        return variants
