"""
- Pin the daily seed and the game date so secrets are predictable
- Give every test fresh in-memory stores
- Override the FastAPI dependencies so routes use all of the above
- Provide a client fixture (TestClient(app)) that already has the overrides applied
"""
import os
import pytest

from fastapi.testclient import TestClient

# Ensure the app never depends on a developer's local settings
os.environ.setdefault("APP_ENV", "test")

from codle.main import (
    app,
    get_daily_seed,
    get_daily_store,
    get_duel_store,
    get_game_date,
    get_gridlink_store,
)
from codle.store import DailyStore, DuelStore, GridLinkStore

TEST_SEED = "test-seed"
TEST_DATE = "2026-10-19"

@pytest.fixture
def seed() -> str:
    return TEST_SEED

@pytest.fixture
def date() -> str:
    return TEST_DATE

@pytest.fixture
def daily_store() -> DailyStore:
    return DailyStore()

@pytest.fixture
def duel_store() -> DuelStore:
    return DuelStore()

@pytest.fixture
def gridlink_store() -> GridLinkStore:
    return GridLinkStore()

@pytest.fixture(autouse=True)
def override_deps(daily_store, duel_store, gridlink_store):
    """Force the app to use the pinned seed/date and this test's stores."""
    app.dependency_overrides[get_daily_seed] = lambda: TEST_SEED
    app.dependency_overrides[get_game_date] = lambda: TEST_DATE
    app.dependency_overrides[get_daily_store] = lambda: daily_store
    app.dependency_overrides[get_duel_store] = lambda: duel_store
    app.dependency_overrides[get_gridlink_store] = lambda: gridlink_store
    yield
    app.dependency_overrides.clear()

@pytest.fixture
def client():
    return TestClient(app)
