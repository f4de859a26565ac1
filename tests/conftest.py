"""Shared test fixtures for runecache tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from runecache.core.contracts.auth import User
from runecache.core.contracts.catalog import CatalogItem
from tests.fakes.catalog import FakeClock, make_item


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_items() -> list[CatalogItem]:
    """Three stones; item 2 (Lund) lies outside the Uppland box used by tests."""
    return [
        make_item(1, latitude=59.86, longitude=17.64, found_location="Uppsala domkyrka", parish="Uppsala"),
        make_item(2, latitude=55.70, longitude=13.19, found_location="Lund", parish="Lund"),
        make_item(3, latitude=59.33, longitude=18.07, found_location="Stockholm", parish="Solna"),
    ]


@pytest.fixture
def confirmed_user() -> User:
    return User(id="user-1", email="ada@example.com", email_confirmed_at=datetime(2024, 1, 1, tzinfo=UTC))


@pytest.fixture
def other_user() -> User:
    return User(id="user-2", email="bo@example.com", email_confirmed_at=datetime(2024, 2, 1, tzinfo=UTC))


@pytest.fixture
def unconfirmed_user() -> User:
    return User(id="user-3", email="cy@example.com")
