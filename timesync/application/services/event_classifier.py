"""
Clasificacion y atribucion de eventos de calendario.

Funciones puras, sin I/O: se pueden testear sin mocks.

Convenciones en el texto libre de un evento:
- @handle en summary o description -> persona a la que se atribuye el evento
- billable=1 en description -> evento facturable
- slot=1 en description, o la palabra "slot" en summary -> slot vacio
- type=<tag> en description -> fuerza el tipo del time entry
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple

from timesync.domain.entities.calendar_event import SourceEvent
from timesync.shared.constants.sync_constants import DEFAULT_TYPE_TAG
from timesync.shared.utils.datetime_utils import DateTimeUtils

_HANDLE_RE = re.compile(r"@([a-zA-Z0-9_]{3,})")
_VALID_HANDLE_RE = re.compile(r"^[a-z0-9_]{3,}$")
_CONTACT_SPLIT_RE = re.compile(r"[\s,;]+")
_BILLABLE_RE = re.compile(r"\bbillable\s*=\s*1\b", re.IGNORECASE)
_SLOT_FLAG_RE = re.compile(r"\bslot\s*=\s*1\b", re.IGNORECASE)
_SLOT_WORD_RE = re.compile(r"\bslot\b", re.IGNORECASE)
_TYPE_OVERRIDE_RE = re.compile(r"\btype\s*=\s*([a-zA-Z0-9_-]+)\b", re.IGNORECASE)

# El orden de las categorias es el desempate: gana la primera que matchea.
# No reordenar ni recortar, es el contrato de clasificacion.
TYPE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("review", ("review", "ревью", "code review", "pr")),
    ("session", ("session", "сессия", "занятие", "менторинг")),
    ("mock", ("mock", "мок", "interview", "интервью", "собес")),
    ("call", ("call", "созвон", "sync", "синк")),
    ("group", ("group", "групп", "группа")),
    ("admin", ("admin", "организац", "орг", "invoice", "счет", "договор")),
    ("prep", ("prep", "подготов", "plan", "план")),
    ("chat", ("chat", "чат", "перепис")),
)


class DropReason(str, Enum):
    """Motivo por el que un evento no genera time entry."""
    ALL_DAY = "all_day"
    THROWAWAY_SLOT = "throwaway_slot"
    NO_HANDLE_OR_BILLABLE = "no_handle_or_billable"
    BILLABLE_WITHOUT_HANDLE = "billable_without_handle"
    TOO_SHORT = "too_short"
    MALFORMED = "malformed"


def normalize_handle(raw: str) -> Optional[str]:
    """
    Normaliza un handle: quita '@' iniciales y pasa a minusculas.

    Retorna None si el resultado no es un handle valido (^[a-z0-9_]{3,}$).
    """
    value = raw.strip().lstrip("@").lower()
    if not _VALID_HANDLE_RE.match(value):
        return None
    return value


def extract_handle(summary: str, description: str) -> Optional[str]:
    """Primer @handle del summary, y si no hay, de la description."""
    match = _HANDLE_RE.search(f"{summary}\n{description}")
    if not match:
        return None
    return match.group(1).lower()


def parse_contact_handles(text: str) -> List[str]:
    """
    Handles embebidos en la propiedad de contacto de una persona.

    Si hay tokens con '@' se usan solo esos; si no, se parte el texto por
    espacios, comas y punto y coma. Sin duplicados, en orden de aparicion.
    """
    text = text.strip()
    if not text:
        return []

    candidates = _HANDLE_RE.findall(text) or [c for c in _CONTACT_SPLIT_RE.split(text) if c]

    handles: List[str] = []
    for candidate in candidates:
        handle = normalize_handle(candidate)
        if handle and handle not in handles:
            handles.append(handle)
    return handles


def is_billable(description: str) -> bool:
    return bool(_BILLABLE_RE.search(description))


def is_throwaway_slot(summary: str, description: str) -> bool:
    return bool(_SLOT_FLAG_RE.search(description)) or bool(_SLOT_WORD_RE.search(summary))


def classify_type(summary: str, description: str) -> str:
    """
    Tipo del time entry.

    type=<tag> en la description gana siempre; si no, se busca en la tabla de
    keywords (substring, en minusculas) y por defecto es "session".
    """
    override = _TYPE_OVERRIDE_RE.search(description)
    if override:
        return override.group(1).lower()

    haystack = f"{summary} {description}".lower()
    for type_tag, keywords in TYPE_KEYWORDS:
        if any(keyword in haystack for keyword in keywords):
            return type_tag
    return DEFAULT_TYPE_TAG


def type_categories() -> List[str]:
    """Todos los tags que puede devolver la tabla de keywords."""
    return [type_tag for type_tag, _ in TYPE_KEYWORDS]


def duration_minutes(start_iso: str, end_iso: str) -> Optional[int]:
    """round((end - start) / 60) sobre instantes absolutos, redondeo half-up."""
    start_ts = DateTimeUtils.to_epoch_seconds(start_iso)
    end_ts = DateTimeUtils.to_epoch_seconds(end_iso)
    if start_ts is None or end_ts is None:
        return None
    minutes = Decimal(end_ts - start_ts) / Decimal(60)
    return int(minutes.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def build_title(handle: str, type_tag: str) -> str:
    return f"@{handle} — {type_tag}"


@dataclass(frozen=True)
class EventAssessment:
    """Resultado del filtro de calificacion de un evento."""

    handle: Optional[str] = None
    billable: bool = False
    slot: bool = False
    type: Optional[str] = None
    duration_min: Optional[int] = None
    drop_reason: Optional[DropReason] = None

    @property
    def qualifies(self) -> bool:
        return self.drop_reason is None


def assess_event(
    event: SourceEvent,
    *,
    min_duration_minutes: int = 3,
    skip_slots: bool = True,
    require_handle_or_billable: bool = True,
) -> EventAssessment:
    """
    Aplica el filtro de calificacion, en orden:

    1. Evento con hora de inicio y fin (los de dia completo se descartan).
    2. Slot sin billable ni handle -> descartado.
    3. Sin handle ni billable -> descartado.
    4. Sin handle, aunque sea billable -> descartado (no se puede atribuir).
    5. Duracion menor al minimo -> descartado como ruido.
    """
    if not event.is_timed:
        return EventAssessment(drop_reason=DropReason.ALL_DAY)

    handle = extract_handle(event.summary, event.description)
    billable = is_billable(event.description)
    slot = is_throwaway_slot(event.summary, event.description)
    flags: Dict[str, object] = {"handle": handle, "billable": billable, "slot": slot}

    if skip_slots and slot and not billable and not handle:
        return EventAssessment(drop_reason=DropReason.THROWAWAY_SLOT, **flags)
    if require_handle_or_billable and not handle and not billable:
        return EventAssessment(drop_reason=DropReason.NO_HANDLE_OR_BILLABLE, **flags)
    if not handle:
        return EventAssessment(drop_reason=DropReason.BILLABLE_WITHOUT_HANDLE, **flags)

    duration = duration_minutes(event.start, event.end)
    if duration is None:
        return EventAssessment(drop_reason=DropReason.MALFORMED, **flags)
    if duration < min_duration_minutes:
        return EventAssessment(drop_reason=DropReason.TOO_SHORT, duration_min=duration, **flags)

    return EventAssessment(
        type=classify_type(event.summary, event.description),
        duration_min=duration,
        **flags,
    )
