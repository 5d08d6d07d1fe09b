"""
Configuración de fixtures para pytest.
"""
import pytest

from fakes import FakeNotionClient
from timesync.core.config import DealProperties, TimeEntryProperties


@pytest.fixture
def notion() -> FakeNotionClient:
    return FakeNotionClient()


@pytest.fixture
def time_props() -> TimeEntryProperties:
    return TimeEntryProperties(
        name="Name",
        start="Start",
        duration="Duration (min)",
        type="Type",
        person_rel="Person",
        deal_rel="Deals",
        source="Source",
        event_key="GCal Event Key",
        calendar="Calendar",
        link="Link",
    )


@pytest.fixture
def deal_props() -> DealProperties:
    return DealProperties(person_rel="Person", start_date="Start date", stage=None, active_stages=["Started", "Active"])
