"""
Cliente minimo de la API REST de Notion (sin SDKs externos).

Requisitos cubiertos:
- requests
- paginacion por start_cursor / has_more
- ritmo fijo: un delay minimo antes de CADA llamada (Notion limita ~3 req/s)
- 429: un unico reintento tras un backoff fijo; el segundo 429 es fatal
- cualquier otro no-2xx es fatal de inmediato (con metodo, path, status y body)

Las llamadas son secuenciales y bloqueantes: nunca hay mas de un request en
vuelo.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Iterator, Mapping, Optional

import requests
from loguru import logger

from timesync.shared.constants.sync_constants import NOTION_SCAN_PAGE_SIZE
from timesync.shared.exceptions.sync import NotionApiError, NotionRateLimitError

from .properties import NotionPage, NotionQueryResult, PropertyValue, encode_properties


class NotionClient:
    """
    Cliente HTTP de Notion. Expone query/create/update/archive y un generator
    que recorre todas las paginas de una query.
    """

    def __init__(
        self,
        token: str,
        *,
        api_version: str = "2022-06-28",
        min_delay_ms: int = 350,
        retry_delay_ms: int = 1200,
        timeout_s: int = 30,
        base_url: str = "https://api.notion.com/v1/",
        session: Optional[requests.Session] = None,
    ) -> None:
        self._token = token
        self._api_version = api_version
        self._min_delay_ms = min_delay_ms
        self._retry_delay_ms = retry_delay_ms
        self._timeout_s = timeout_s
        self._base_url = base_url.rstrip("/") + "/"
        self._session = session or requests.Session()

    def query_database(self, database_id: str, payload: Mapping[str, Any]) -> NotionQueryResult:
        data = self.request("POST", f"databases/{database_id}/query", dict(payload))
        return NotionQueryResult.from_api(data)

    def iter_query(
        self,
        database_id: str,
        payload: Optional[Mapping[str, Any]] = None,
        *,
        page_size: int = NOTION_SCAN_PAGE_SIZE,
    ) -> Iterator[NotionPage]:
        """
        Itera todas las paginas de una query (filtros y sorts en payload).

        - Maneja paginacion por 'start_cursor'
        """
        cursor: Optional[str] = None
        while True:
            body: Dict[str, Any] = dict(payload or {})
            body["page_size"] = page_size
            if cursor:
                body["start_cursor"] = cursor

            result = self.query_database(database_id, body)
            yield from result.results

            cursor = result.next_cursor
            if not result.has_more or not cursor:
                break

    def create_page(self, database_id: str, properties: Mapping[str, PropertyValue]) -> NotionPage:
        data = self.request(
            "POST",
            "pages",
            {
                "parent": {"database_id": database_id},
                "properties": encode_properties(properties),
            },
        )
        return NotionPage.from_api(data)

    def update_page(self, page_id: str, properties: Mapping[str, PropertyValue]) -> NotionPage:
        """Reemplaza las propiedades listadas (no es un diff parcial)."""
        data = self.request("PATCH", f"pages/{page_id}", {"properties": encode_properties(properties)})
        return NotionPage.from_api(data)

    def archive_page(self, page_id: str) -> NotionPage:
        data = self.request("PATCH", f"pages/{page_id}", {"archived": True})
        return NotionPage.from_api(data)

    def request(self, method: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Request HTTP con ritmo fijo y un unico reintento para 429.

        Estrategia:
        - Siempre duerme min_delay antes de llamar.
        - 429: duerme retry_delay y reintenta una sola vez.
        - Otro no-2xx, o 429 en el reintento: NotionApiError (aborta la corrida).
        """
        self._sleep_ms(self._min_delay_ms)
        resp = self._send(method, path, payload)

        if resp.status_code == 429:
            logger.warning(f"Notion rate limit en {method} {path}; reintentando en {self._retry_delay_ms} ms")
            self._sleep_ms(self._retry_delay_ms)
            resp = self._send(method, path, payload)
            if resp.status_code == 429:
                raise NotionRateLimitError(method, path, resp.text)

        if not 200 <= resp.status_code < 300:
            raise NotionApiError(method, path, resp.status_code, resp.text)

        if not resp.content:
            return {}
        return resp.json()

    def _send(self, method: str, path: str, payload: Dict[str, Any]) -> requests.Response:
        try:
            return self._session.request(
                method=method,
                url=self._base_url + path,
                json=payload,
                headers=self._headers(),
                timeout=self._timeout_s,
            )
        except requests.RequestException as e:
            raise NotionApiError(method, path, None, str(e)) from e

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Notion-Version": self._api_version,
            "Content-Type": "application/json",
        }

    @staticmethod
    def _sleep_ms(ms: int) -> None:
        if ms > 0:
            time.sleep(ms / 1000)
