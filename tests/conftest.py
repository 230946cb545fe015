"""
Shared fixtures: a fixed reference instant and services backed by the mock store.
"""

import copy
import json

import pendulum
import pytest

from agendafinder.adapters.mock_record_store import DATA_FILE, MockRecordStore
from agendafinder.config import AppConfig
from agendafinder.services.availability import AvailabilityService
from agendafinder.services.bookings import BookingService

TZ = "America/Sao_Paulo"


@pytest.fixture
def now():
    """Monday 2024-06-10, 08:00 in Sao Paulo."""
    return pendulum.datetime(2024, 6, 10, 8, 0, tz=TZ)


@pytest.fixture
def sample_tables():
    with open(DATA_FILE, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def store(sample_tables):
    return MockRecordStore(copy.deepcopy(sample_tables))


@pytest.fixture
def config():
    return AppConfig()


@pytest.fixture
def availability(store, config):
    return AvailabilityService.from_config(store, config)


@pytest.fixture
def bookings(availability, config):
    return BookingService(availability, statuses=config.statuses)
