"""
Tests de Settings, del armado del pipeline y del CLI.
"""
from unittest.mock import MagicMock

import pytest

from fakes import FakeNotionClient
from timesync.application.use_cases import CalendarSyncUseCase
from timesync.core.config import CalendarTarget, Settings
from timesync.infrastructure.external import sync_builder
from timesync.infrastructure.external.notion.deal_resolver import (
    DisabledDealResolver,
    LazyDealResolver,
    WarmDealResolver,
)
from timesync.infrastructure.external.notion.people_resolver import LazyPeopleResolver, WarmPeopleResolver
from timesync.shared.constants.sync_constants import ResolverMode
from timesync.shared.exceptions.sync import ConfigurationException

REQUIRED = dict(
    GOOGLE_CLIENT_ID="cid",
    GOOGLE_CLIENT_SECRET="secret",
    GOOGLE_REFRESH_TOKEN="refresh",
    NOTION_TOKEN="ntn",
    NOTION_DB_TIME_ENTRIES_ID="db-time",
    NOTION_DB_PEOPLE_ID="db-people",
)


def _settings(**overrides) -> Settings:
    values = dict(
        REQUIRED,
        NOTION_DB_DEALS_ID="",
        CALENDAR_ID_PERSONAL="primary",
        CALENDAR_ID_CROSS_MOCKS="",
        SYNC_DAYS_BACK=90,
        RESOLVER_MODE="warm",
        DEALS_PROP_STAGE="",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    """Tests de la configuracion."""

    def test_personal_calendar_only_by_default(self):
        assert _settings().calendars() == [CalendarTarget("primary", "personal")]

    def test_cross_mocks_calendar_when_configured(self):
        settings = _settings(CALENDAR_ID_CROSS_MOCKS="mocks@group.calendar.google.com")
        assert settings.calendars() == [
            CalendarTarget("primary", "personal"),
            CalendarTarget("mocks@group.calendar.google.com", "cross-mocks"),
        ]

    def test_blank_personal_calendar_falls_back_to_primary(self):
        assert _settings(CALENDAR_ID_PERSONAL="  ").calendars()[0].calendar_id == "primary"

    def test_validate_required_lists_missing(self):
        settings = _settings(NOTION_TOKEN="", GOOGLE_REFRESH_TOKEN=" ")

        with pytest.raises(ConfigurationException) as exc_info:
            settings.validate_required()

        assert exc_info.value.missing == ["GOOGLE_REFRESH_TOKEN", "NOTION_TOKEN"]
        assert exc_info.value.error_code == "CONFIG_ERROR"

    def test_unparseable_value_is_configuration_error(self):
        with pytest.raises(ConfigurationException) as exc_info:
            Settings.load(_env_file=None, SYNC_DAYS_BACK="abc")

        assert exc_info.value.invalid == ["SYNC_DAYS_BACK"]
        assert exc_info.value.missing == []
        assert exc_info.value.error_code == "CONFIG_ERROR"

    def test_validate_required_ok(self):
        _settings().validate_required()

    @pytest.mark.parametrize("days,expected", [(None, 90), (7, 7), (0, 90), (-3, 90)])
    def test_effective_days_back(self, days, expected):
        assert _settings().effective_days_back(days) == expected

    def test_non_positive_configured_days_use_default(self):
        assert _settings(SYNC_DAYS_BACK=0).effective_days_back() == 90

    def test_deal_properties(self):
        props = _settings(DEALS_PROP_STAGE="Stage", DEALS_ACTIVE_STAGES=" Started , Active ,,").deal_properties()
        assert props.stage == "Stage"
        assert props.active_stages == ["Started", "Active"]

    def test_deal_stage_blank_means_no_filter(self):
        assert _settings().deal_properties().stage is None

    def test_resolver_mode_from_string(self):
        assert _settings(RESOLVER_MODE="lazy").RESOLVER_MODE is ResolverMode.LAZY

    def test_time_entry_properties_defaults(self):
        props = _settings().time_entry_properties()
        assert props.event_key == "GCal Event Key"
        assert props.duration == "Duration (min)"
        assert props.deal_rel == "Deals"


class TestSyncBuilder:
    """Tests del armado del pipeline."""

    def test_warm_resolvers(self):
        people, deals = sync_builder.build_resolvers(_settings(NOTION_DB_DEALS_ID="db-deals"), FakeNotionClient())
        assert isinstance(people, WarmPeopleResolver)
        assert isinstance(deals, WarmDealResolver)

    def test_lazy_resolvers(self):
        settings = _settings(NOTION_DB_DEALS_ID="db-deals", RESOLVER_MODE="lazy")
        people, deals = sync_builder.build_resolvers(settings, FakeNotionClient())
        assert isinstance(people, LazyPeopleResolver)
        assert isinstance(deals, LazyDealResolver)

    def test_deals_disabled_without_database(self):
        _, deals = sync_builder.build_resolvers(_settings(), FakeNotionClient())
        assert isinstance(deals, DisabledDealResolver)

    def test_missing_config_fails_before_any_client(self, monkeypatch):
        build_calendar = MagicMock()
        monkeypatch.setattr(sync_builder, "build_calendar_service", build_calendar)

        with pytest.raises(ConfigurationException):
            sync_builder.build_from_settings(_settings(NOTION_DB_PEOPLE_ID=""))
        build_calendar.assert_not_called()

    def test_builds_use_case(self, monkeypatch):
        build_calendar = MagicMock(return_value=MagicMock())
        monkeypatch.setattr(sync_builder, "build_calendar_service", build_calendar)

        use_case = sync_builder.build_from_settings(_settings(), notion=FakeNotionClient())

        assert isinstance(use_case, CalendarSyncUseCase)
        build_calendar.assert_called_once_with("cid", "secret", "refresh")


class TestCli:
    """Tests del entrypoint de linea de comandos."""

    @pytest.fixture
    def cli(self):
        from scripts import sync_gcal_to_notion
        return sync_gcal_to_notion

    def test_config_error_exits_non_zero(self, cli, monkeypatch):
        monkeypatch.setattr(cli, "build_from_settings", MagicMock(side_effect=ConfigurationException(["NOTION_TOKEN"])))
        assert cli.main([]) == 1

    def test_success_passes_days_and_overrides(self, cli, monkeypatch):
        use_case = MagicMock()
        use_case.run.return_value.summary.return_value = "created=1"
        build = MagicMock(return_value=use_case)
        monkeypatch.setattr(cli, "build_from_settings", build)

        assert cli.main(["--days", "5", "--resolver", "lazy", "--no-prefetch"]) == 0

        settings = build.call_args.args[0]
        assert settings.RESOLVER_MODE is ResolverMode.LAZY
        assert settings.PREFETCH_TIME_ENTRIES is False
        use_case.run.assert_called_once_with(5)

    def test_unparseable_env_value_exits_non_zero(self, cli, monkeypatch):
        monkeypatch.setenv("SYNC_DAYS_BACK", "abc")
        build = MagicMock()
        monkeypatch.setattr(cli, "build_from_settings", build)

        assert cli.main([]) == 1
        build.assert_not_called()
