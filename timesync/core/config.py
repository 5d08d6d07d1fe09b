"""
Configuracion central del sync.
Lee variables de entorno (y .env si existe) y expone los valores por defecto
del despliegue, incluyendo el mapeo de nombres de propiedades de Notion.
"""
from dataclasses import dataclass
from typing import List, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from timesync.shared.constants.sync_constants import DEFAULT_DAYS_BACK, ResolverMode
from timesync.shared.exceptions.sync import ConfigurationException


@dataclass(frozen=True)
class CalendarTarget:
    """Calendario a sincronizar y la etiqueta que se escribe en Notion."""
    calendar_id: str
    label: str


@dataclass(frozen=True)
class TimeEntryProperties:
    """Nombres de las columnas de la base de time entries."""
    name: str
    start: str
    duration: str
    type: str
    person_rel: str
    deal_rel: str
    source: str
    event_key: str
    calendar: str
    link: str


@dataclass(frozen=True)
class DealProperties:
    """
    Nombres de las columnas de la base de deals.

    stage vacio (None) significa que el despliegue no filtra por etapa.
    """
    person_rel: str
    start_date: str
    stage: Optional[str]
    active_stages: List[str]


class Settings(BaseSettings):
    """
    Clase de configuracion del sync.
    Lee variables de entorno y proporciona valores por defecto.

    Obligatorias (ver validate_required):
    - GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REFRESH_TOKEN
    - NOTION_TOKEN, NOTION_DB_TIME_ENTRIES_ID, NOTION_DB_PEOPLE_ID
    """

    # Google Calendar
    GOOGLE_CLIENT_ID: str = Field(default="")
    GOOGLE_CLIENT_SECRET: str = Field(default="")
    GOOGLE_REFRESH_TOKEN: str = Field(default="")

    # Notion
    NOTION_TOKEN: str = Field(default="")
    NOTION_DB_TIME_ENTRIES_ID: str = Field(default="")
    NOTION_DB_PEOPLE_ID: str = Field(default="")
    NOTION_DB_DEALS_ID: str = Field(default="")
    NOTION_API_VERSION: str = Field(default="2022-06-28")
    NOTION_MIN_DELAY_MS: int = Field(default=350)
    NOTION_RETRY_DELAY_MS: int = Field(default=1200)
    NOTION_TIMEOUT_S: int = Field(default=30)

    # Calendarios (el personal siempre se incluye)
    CALENDAR_ID_PERSONAL: str = Field(default="primary")
    CALENDAR_ID_CROSS_MOCKS: str = Field(default="")
    CALENDAR_LABEL_PERSONAL: str = Field(default="personal")
    CALENDAR_LABEL_CROSS_MOCKS: str = Field(default="cross-mocks")

    # Reglas del sync
    SYNC_DAYS_BACK: int = Field(default=DEFAULT_DAYS_BACK)
    SYNC_TIMEZONE: str = Field(default="Europe/Vilnius")
    MIN_DURATION_MINUTES: int = Field(default=3)
    SKIP_SLOTS: bool = Field(default=True)
    REQUIRE_HANDLE_OR_BILLABLE: bool = Field(default=True)
    RESOLVER_MODE: ResolverMode = Field(default=ResolverMode.WARM)
    PREFETCH_TIME_ENTRIES: bool = Field(default=True)
    SOURCE_TAG: str = Field(default="gcal")

    # People
    PEOPLE_PROP_TG: str = Field(default="tg")

    # Deals (stage vacio = sin filtro por etapa)
    DEALS_PROP_PERSON_REL: str = Field(default="Person")
    DEALS_PROP_STAGE: str = Field(default="")
    DEALS_PROP_START_DATE: str = Field(default="Start date")
    DEALS_ACTIVE_STAGES: str = Field(default="Started,Active")

    # Time entries
    TIME_PROP_NAME: str = Field(default="Name")
    TIME_PROP_START: str = Field(default="Start")
    TIME_PROP_DURATION_MIN: str = Field(default="Duration (min)")
    TIME_PROP_TYPE: str = Field(default="Type")
    TIME_PROP_PERSON_REL: str = Field(default="Person")
    TIME_PROP_DEAL_REL: str = Field(default="Deals")
    TIME_PROP_SOURCE: str = Field(default="Source")
    TIME_PROP_GCAL_EVENTKEY: str = Field(default="GCal Event Key")
    TIME_PROP_CALENDAR: str = Field(default="Calendar")
    TIME_PROP_LINK: str = Field(default="Link")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env

    @classmethod
    def load(cls, **overrides) -> "Settings":
        """
        Construye Settings desde entorno/.env.

        Un valor que no se puede parsear (p.ej. SYNC_DAYS_BACK=abc) se reporta
        como ConfigurationException, igual que una variable faltante.
        """
        try:
            return cls(**overrides)
        except ValidationError as e:
            invalid = [".".join(str(part) for part in error["loc"]) for error in e.errors()]
            raise ConfigurationException(invalid=invalid) from e

    def validate_required(self) -> None:
        """Falla al inicio si falta cualquier credencial o id obligatorio."""
        required = (
            "GOOGLE_CLIENT_ID",
            "GOOGLE_CLIENT_SECRET",
            "GOOGLE_REFRESH_TOKEN",
            "NOTION_TOKEN",
            "NOTION_DB_TIME_ENTRIES_ID",
            "NOTION_DB_PEOPLE_ID",
        )
        missing = [name for name in required if not getattr(self, name).strip()]
        if missing:
            raise ConfigurationException(missing)

    @property
    def deals_enabled(self) -> bool:
        return bool(self.NOTION_DB_DEALS_ID.strip())

    def calendars(self) -> List[CalendarTarget]:
        """
        Lista ordenada de calendarios: personal siempre, cross-mocks solo si
        tiene id.
        """
        targets = [
            CalendarTarget(
                calendar_id=self.CALENDAR_ID_PERSONAL.strip() or "primary",
                label=self.CALENDAR_LABEL_PERSONAL,
            )
        ]
        cross_mocks = self.CALENDAR_ID_CROSS_MOCKS.strip()
        if cross_mocks:
            targets.append(CalendarTarget(calendar_id=cross_mocks, label=self.CALENDAR_LABEL_CROSS_MOCKS))
        return targets

    def effective_days_back(self, days: Optional[int] = None) -> int:
        """Dias hacia atras: <= 0 usa el default y nunca baja de 1."""
        value = self.SYNC_DAYS_BACK if days is None else days
        if value <= 0:
            value = DEFAULT_DAYS_BACK
        return max(1, value)

    def time_entry_properties(self) -> TimeEntryProperties:
        return TimeEntryProperties(
            name=self.TIME_PROP_NAME,
            start=self.TIME_PROP_START,
            duration=self.TIME_PROP_DURATION_MIN,
            type=self.TIME_PROP_TYPE,
            person_rel=self.TIME_PROP_PERSON_REL,
            deal_rel=self.TIME_PROP_DEAL_REL,
            source=self.TIME_PROP_SOURCE,
            event_key=self.TIME_PROP_GCAL_EVENTKEY,
            calendar=self.TIME_PROP_CALENDAR,
            link=self.TIME_PROP_LINK,
        )

    def deal_properties(self) -> DealProperties:
        stages = [s.strip() for s in self.DEALS_ACTIVE_STAGES.split(",") if s.strip()]
        return DealProperties(
            person_rel=self.DEALS_PROP_PERSON_REL,
            start_date=self.DEALS_PROP_START_DATE,
            stage=self.DEALS_PROP_STAGE.strip() or None,
            active_stages=stages,
        )
