"""
Fakes en memoria para los tests.

FakeNotionClient hereda del cliente real y solo reemplaza `request`: las
queries, la paginacion y el parseo de paginas pasan por el codigo de
produccion, pero contra un almacen en memoria.
"""
from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import Any, Dict, Iterator, List, Mapping, Optional
from unittest.mock import MagicMock

from timesync.domain.entities.calendar_event import SourceEvent
from timesync.infrastructure.external.notion.notion_client import NotionClient
from timesync.infrastructure.external.notion.properties import PropertyValue, encode_properties
from timesync.shared.utils.datetime_utils import DateTimeUtils

TIME_DB = "db-time"
PEOPLE_DB = "db-people"
DEALS_DB = "db-deals"


def api_page(page_id: str, props: Mapping[str, PropertyValue], *, archived: bool = False) -> Dict[str, Any]:
    """Pagina con el shape que devuelve la API (incluye plain_text)."""
    properties = encode_properties(props)
    for value in properties.values():
        for kind in ("title", "rich_text"):
            for item in value.get(kind, []):
                item["plain_text"] = item["text"]["content"]
    return {"object": "page", "id": page_id, "archived": archived, "properties": properties}


def _plain(items: Any) -> str:
    if not isinstance(items, list):
        return ""
    return "".join(i.get("plain_text") or (i.get("text") or {}).get("content", "") for i in items)


def _matches(page: Dict[str, Any], flt: Optional[Dict[str, Any]]) -> bool:
    if not flt:
        return True
    if "and" in flt:
        return all(_matches(page, clause) for clause in flt["and"])
    if "or" in flt:
        return any(_matches(page, clause) for clause in flt["or"])

    prop = page["properties"].get(flt["property"]) or {}
    if "rich_text" in flt:
        text = _plain(prop.get("rich_text") or prop.get("title"))
        cond = flt["rich_text"]
        if "equals" in cond:
            return text == cond["equals"]
        return cond["contains"] in text
    if "relation" in flt:
        ids = [item["id"] for item in prop.get("relation") or []]
        return flt["relation"]["contains"] in ids
    if "select" in flt:
        return (prop.get("select") or {}).get("name") == flt["select"]["equals"]
    if "date" in flt:
        start = DateTimeUtils.to_epoch_seconds((prop.get("date") or {}).get("start"))
        if start is None:
            return False
        cond = flt["date"]
        if "on_or_after" in cond and start < DateTimeUtils.to_epoch_seconds(cond["on_or_after"]):
            return False
        if "on_or_before" in cond and start > DateTimeUtils.to_epoch_seconds(cond["on_or_before"]):
            return False
        return True
    return True


def _date_key(page: Dict[str, Any], prop_name: str) -> int:
    prop = page["properties"].get(prop_name) or {}
    ts = DateTimeUtils.to_epoch_seconds((prop.get("date") or {}).get("start"))
    return ts if ts is not None else -(2**62)


class FakeNotionClient(NotionClient):
    """Notion en memoria que registra cada llamada."""

    def __init__(self) -> None:
        super().__init__("test-token", min_delay_ms=0, retry_delay_ms=0, session=MagicMock())
        self.calls: List[tuple] = []
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self._next_id = 0

    def add_page(self, database_id: str, page: Dict[str, Any]) -> None:
        self.tables.setdefault(database_id, []).append(page)

    def request(self, method: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((method, path, copy.deepcopy(payload)))

        if method == "POST" and path.startswith("databases/") and path.endswith("/query"):
            return self._query(path.split("/")[1], payload)

        if method == "POST" and path == "pages":
            self._next_id += 1
            page = {
                "object": "page",
                "id": f"page-{self._next_id}",
                "archived": False,
                "properties": copy.deepcopy(payload["properties"]),
            }
            self.add_page(payload["parent"]["database_id"], page)
            return copy.deepcopy(page)

        if method == "PATCH" and path.startswith("pages/"):
            page = self._find(path.split("/")[1])
            if "archived" in payload:
                page["archived"] = payload["archived"]
            page["properties"].update(copy.deepcopy(payload.get("properties") or {}))
            return copy.deepcopy(page)

        raise AssertionError(f"llamada inesperada: {method} {path}")

    def _query(self, database_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        pages = [p for p in self.tables.get(database_id, []) if _matches(p, payload.get("filter"))]
        for sort in reversed(payload.get("sorts") or []):
            pages.sort(key=lambda p: _date_key(p, sort["property"]), reverse=sort["direction"] == "descending")

        start = int(payload.get("start_cursor") or 0)
        end = start + int(payload.get("page_size", 100))
        has_more = end < len(pages)
        return {
            "object": "list",
            "results": copy.deepcopy(pages[start:end]),
            "has_more": has_more,
            "next_cursor": str(end) if has_more else None,
        }

    def _find(self, page_id: str) -> Dict[str, Any]:
        for pages in self.tables.values():
            for page in pages:
                if page["id"] == page_id:
                    return page
        raise AssertionError(f"pagina inexistente: {page_id}")

    # Helpers de aserciones
    def queries(self, database_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            payload for method, path, payload in self.calls
            if path.endswith("/query") and (database_id is None or path == f"databases/{database_id}/query")
        ]

    def creates(self) -> List[Dict[str, Any]]:
        return [payload for method, path, payload in self.calls if method == "POST" and path == "pages"]

    def updates(self) -> List[tuple]:
        return [(path, payload) for method, path, payload in self.calls if method == "PATCH" and "properties" in payload]

    def archives(self) -> List[str]:
        return [path for method, path, payload in self.calls if method == "PATCH" and payload.get("archived")]

    def writes(self) -> List[tuple]:
        return [call for call in self.calls if not call[1].endswith("/query")]


class FakeCalendarSource:
    """Fuente de eventos en memoria, por calendario."""

    def __init__(self, events_by_calendar: Optional[Dict[str, List[SourceEvent]]] = None) -> None:
        self.events_by_calendar = events_by_calendar or {}
        self.requests: List[tuple] = []

    def iter_events(self, calendar_id: str, *, time_min: str, time_max: str) -> Iterator[SourceEvent]:
        self.requests.append((calendar_id, time_min, time_max))
        yield from self.events_by_calendar.get(calendar_id, [])


def make_event(
    event_id: str = "evt1",
    *,
    summary: str = "Mentoring @alice_99",
    description: str = "",
    start: Optional[str] = "2025-03-10T10:00:00+02:00",
    minutes: int = 45,
    end: Optional[str] = None,
    status: str = "confirmed",
    calendar_id: str = "primary",
    html_link: str = "https://calendar.google.com/event?eid=evt1",
) -> SourceEvent:
    if end is None and start is not None:
        end = (datetime.fromisoformat(start) + timedelta(minutes=minutes)).isoformat()
    return SourceEvent(
        id=event_id,
        calendar_id=calendar_id,
        status=status,
        summary=summary,
        description=description,
        start=start,
        end=end,
        html_link=html_link,
    )
