"""
Constructor "oficial" del pipeline a partir de Settings.

Elige un unico modo de resolucion (warm o lazy) para personas y deals, y
arma el cliente de Notion con el ritmo configurado.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from timesync.application.interfaces.sync_ports import IdResolver
from timesync.application.use_cases.calendar_sync_use_cases import CalendarSyncUseCase
from timesync.core.config import Settings
from timesync.shared.constants.sync_constants import ResolverMode

from .google_calendar.calendar_client import GoogleCalendarSource, build_calendar_service
from .notion.deal_resolver import DisabledDealResolver, LazyDealResolver, WarmDealResolver
from .notion.notion_client import NotionClient
from .notion.people_resolver import LazyPeopleResolver, WarmPeopleResolver
from .notion.time_entries_sync import TimeEntriesSync


def build_notion_client(settings: Settings) -> NotionClient:
    return NotionClient(
        settings.NOTION_TOKEN,
        api_version=settings.NOTION_API_VERSION,
        min_delay_ms=settings.NOTION_MIN_DELAY_MS,
        retry_delay_ms=settings.NOTION_RETRY_DELAY_MS,
        timeout_s=settings.NOTION_TIMEOUT_S,
    )


def build_resolvers(settings: Settings, notion: NotionClient) -> Tuple[IdResolver, IdResolver]:
    """(people, deals) en el modo configurado; deals deshabilitado sin base."""
    mode = ResolverMode(settings.RESOLVER_MODE)

    if mode is ResolverMode.WARM:
        people: IdResolver = WarmPeopleResolver(notion, settings.NOTION_DB_PEOPLE_ID, settings.PEOPLE_PROP_TG)
    else:
        people = LazyPeopleResolver(notion, settings.NOTION_DB_PEOPLE_ID, settings.PEOPLE_PROP_TG)

    if not settings.deals_enabled:
        deals: IdResolver = DisabledDealResolver()
    elif mode is ResolverMode.WARM:
        deals = WarmDealResolver(notion, settings.NOTION_DB_DEALS_ID, settings.deal_properties())
    else:
        deals = LazyDealResolver(notion, settings.NOTION_DB_DEALS_ID, settings.deal_properties())

    return people, deals


def build_from_settings(
    settings: Settings,
    *,
    notion: Optional[NotionClient] = None,
    calendar_service: Optional[Any] = None,
) -> CalendarSyncUseCase:
    """
    Arma el caso de uso completo.

    Valida la configuracion obligatoria antes de cualquier llamada de red.
    """
    settings.validate_required()

    notion = notion or build_notion_client(settings)
    if calendar_service is None:
        calendar_service = build_calendar_service(
            settings.GOOGLE_CLIENT_ID,
            settings.GOOGLE_CLIENT_SECRET,
            settings.GOOGLE_REFRESH_TOKEN,
        )

    people, deals = build_resolvers(settings, notion)
    time_entries = TimeEntriesSync(
        notion,
        settings.NOTION_DB_TIME_ENTRIES_ID,
        settings.time_entry_properties(),
        source_tag=settings.SOURCE_TAG,
    )

    return CalendarSyncUseCase(
        calendar_source=GoogleCalendarSource(calendar_service),
        people_resolver=people,
        deal_resolver=deals,
        time_entries=time_entries,
        calendars=settings.calendars(),
        min_duration_minutes=settings.MIN_DURATION_MINUTES,
        skip_slots=settings.SKIP_SLOTS,
        require_handle_or_billable=settings.REQUIRE_HANDLE_OR_BILLABLE,
        prefetch_time_entries=settings.PREFETCH_TIME_ENTRIES,
        timezone_name=settings.SYNC_TIMEZONE,
    )
