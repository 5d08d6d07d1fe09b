"""
Tipos de propiedades de Notion (title, rich_text, date, number, select, url,
relation) con encode/decode explicitos, y las paginas/resultados de query ya
parseados.

Se mantienen libres de I/O para poder testearlos facilmente.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Union


def _plain_text(items: Any) -> Optional[str]:
    """Concatena plain_text de una lista de rich text; None si queda vacio."""
    if not isinstance(items, list):
        return None
    text = ""
    for item in items:
        if not isinstance(item, dict):
            continue
        plain = item.get("plain_text")
        if plain is None:
            plain = (item.get("text") or {}).get("content", "")
        text += str(plain or "")
    return text or None


def _text_items(text: str) -> List[Dict[str, Any]]:
    return [{"type": "text", "text": {"content": text}}]


@dataclass(frozen=True)
class NotionPage:
    """Pagina de Notion (registro de una base de datos)."""

    id: str
    archived: bool = False
    properties: Dict[str, Any] = field(default_factory=dict)

    def prop(self, name: str) -> Optional[Dict[str, Any]]:
        value = self.properties.get(name)
        return value if isinstance(value, dict) else None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "NotionPage":
        return cls(
            id=str(payload.get("id") or ""),
            archived=bool(payload.get("archived", False)),
            properties=dict(payload.get("properties") or {}),
        )


@dataclass(frozen=True)
class NotionQueryResult:
    """Una pagina de resultados de databases/{id}/query."""

    results: List[NotionPage]
    next_cursor: Optional[str] = None
    has_more: bool = False

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "NotionQueryResult":
        pages = [
            NotionPage.from_api(raw)
            for raw in payload.get("results") or []
            if isinstance(raw, dict) and raw.get("id")
        ]
        return cls(
            results=pages,
            next_cursor=payload.get("next_cursor") or None,
            has_more=bool(payload.get("has_more", False)),
        )

    def first_id(self) -> Optional[str]:
        return self.results[0].id if self.results else None


class PropertyValue:
    """
    Valor tipado de una propiedad de Notion.

    kind es la clave del shape de Notion ("title", "date", ...).
    """

    kind: ClassVar[str] = ""

    def encode(self) -> Dict[str, Any]:
        raise NotImplementedError

    @classmethod
    def _raw(cls, page: NotionPage, name: str) -> Any:
        prop = page.prop(name)
        if prop is None:
            return None
        return prop.get(cls.kind)


@dataclass(frozen=True)
class Title(PropertyValue):
    text: str
    kind: ClassVar[str] = "title"

    def encode(self) -> Dict[str, Any]:
        return {"title": _text_items(self.text)}

    @classmethod
    def decode(cls, page: NotionPage, name: str) -> Optional[str]:
        return _plain_text(cls._raw(page, name))


@dataclass(frozen=True)
class RichText(PropertyValue):
    text: str
    kind: ClassVar[str] = "rich_text"

    def encode(self) -> Dict[str, Any]:
        return {"rich_text": _text_items(self.text)}

    @classmethod
    def decode(cls, page: NotionPage, name: str) -> Optional[str]:
        return _plain_text(cls._raw(page, name))


@dataclass(frozen=True)
class Date(PropertyValue):
    start: str
    kind: ClassVar[str] = "date"

    def encode(self) -> Dict[str, Any]:
        return {"date": {"start": self.start}}

    @classmethod
    def decode(cls, page: NotionPage, name: str) -> Optional[str]:
        raw = cls._raw(page, name)
        if not isinstance(raw, dict):
            return None
        return raw.get("start") or None


@dataclass(frozen=True)
class Number(PropertyValue):
    value: Union[int, float]
    kind: ClassVar[str] = "number"

    def encode(self) -> Dict[str, Any]:
        return {"number": self.value}

    @classmethod
    def decode(cls, page: NotionPage, name: str) -> Optional[float]:
        raw = cls._raw(page, name)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            return None
        return float(raw)


@dataclass(frozen=True)
class Select(PropertyValue):
    name: str
    kind: ClassVar[str] = "select"

    def encode(self) -> Dict[str, Any]:
        return {"select": {"name": self.name}}

    @classmethod
    def decode(cls, page: NotionPage, name: str) -> Optional[str]:
        raw = cls._raw(page, name)
        if not isinstance(raw, dict):
            return None
        return raw.get("name")


@dataclass(frozen=True)
class Url(PropertyValue):
    url: str
    kind: ClassVar[str] = "url"

    def encode(self) -> Dict[str, Any]:
        return {"url": self.url}

    @classmethod
    def decode(cls, page: NotionPage, name: str) -> Optional[str]:
        raw = cls._raw(page, name)
        return str(raw) if raw else None


@dataclass(frozen=True)
class Relation(PropertyValue):
    """Lista de ids relacionados. Se escribe en orden, se compara como set."""

    ids: tuple
    kind: ClassVar[str] = "relation"

    def encode(self) -> Dict[str, Any]:
        return {"relation": [{"id": page_id} for page_id in self.ids]}

    @classmethod
    def of(cls, *ids: str) -> "Relation":
        return cls(ids=tuple(ids))

    @classmethod
    def decode(cls, page: NotionPage, name: str) -> List[str]:
        raw = cls._raw(page, name)
        if not isinstance(raw, list):
            return []
        ids = []
        for item in raw:
            if isinstance(item, dict) and item.get("id"):
                ids.append(str(item["id"]))
        return ids


def encode_properties(properties: Mapping[str, PropertyValue]) -> Dict[str, Any]:
    """Mapa nombre -> shape de Notion, listo para el payload de la API."""
    return {name: value.encode() for name, value in properties.items()}


def normalize_relation_ids(ids: Iterable[Any]) -> List[str]:
    """Ids como string, sin vacios ni duplicados, ordenados."""
    return sorted({str(page_id) for page_id in ids if page_id is not None and str(page_id) != ""})


def relation_equals(existing_ids: Iterable[Any], expected_ids: Iterable[Any]) -> bool:
    """Igualdad de relaciones como set: no importa el orden ni los duplicados."""
    return normalize_relation_ids(existing_ids) == normalize_relation_ids(expected_ids)
