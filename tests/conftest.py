# ---------------------------------------------------------------------------
# Tests configuration
# ---------------------------------------------------------------------------

from datetime import datetime

import pytest

from prefscope.core.connection import DuckDBConnection
from prefscope.core.records import OrderRecord, PreferenceRecord, Snapshot
from prefscope.core.store import DuckDBRecordStore, InMemoryRecordStore
from prefscope.datasets import generate_orders, generate_preference_updates


def pref(id, email, interests, frequency="weekly", day=1):
    ts = datetime(2024, 1, day, 9, 0, 0)
    return PreferenceRecord(id, email, frozenset(interests), frequency, ts, ts)


def order(id, email, category, amount=1000, status="completed", day=10):
    return OrderRecord(id, f"ORD-{id}", email, amount, category, "usd", status, datetime(2024, 1, day, 12, 0, 0))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def conn():
    """In-memory DuckDB connection for each test."""
    db = DuckDBConnection()  # :memory:
    yield db
    db.close()


@pytest.fixture
def scenario_store():
    """
    a@x.com likes Tech, b@x.com likes Tech and Travel.
    One completed order: a@x.com bought Electronics for 100.00.
    """
    return InMemoryRecordStore(
        preferences=[
            pref(1, "a@x.com", {"Tech"}),
            pref(2, "b@x.com", {"Tech", "Travel"}, day=2),
        ],
        orders=[order(1, "a@x.com", "Electronics", amount=10000)],
    )


@pytest.fixture
def shop_store():
    """
    Storefront with known signals.

    ana: Tech, Travel (later Tech, Travel, Home) -> Electronics 120.00
    ben: Tech, Fitness                           -> Electronics 45.00, Sports 20.00 (pending)
    cy:  Tech, Travel, Fitness                   -> Sports 30.00, Electronics 90.00
    dee: Fashion, Home                           -> Home 25.00, Fashion 80.00
    eve: Fitness                                 -> Sports 15.00
    """
    return InMemoryRecordStore(
        preferences=[
            pref(1, "ana@shop.com", {"Tech", "Travel"}, day=1),
            pref(2, "ben@shop.com", {"Tech", "Fitness"}, day=2),
            pref(3, "cy@shop.com", {"Tech", "Travel", "Fitness"}, "daily", day=3),
            pref(4, "dee@shop.com", {"Fashion", "Home"}, "monthly", day=4),
            pref(5, "eve@shop.com", {"Fitness"}, day=5),
            pref(6, "ana@shop.com", {"Tech", "Travel", "Home"}, day=20),
        ],
        orders=[
            order(1, "ana@shop.com", "Electronics", 12000, day=10),
            order(2, "ben@shop.com", "Electronics", 4500, day=11),
            order(3, "cy@shop.com", "Sports", 3000, day=12),
            order(4, "cy@shop.com", "Electronics", 9000, day=13),
            order(5, "dee@shop.com", "Home", 2500, day=14),
            order(6, "dee@shop.com", "Fashion", 8000, day=15),
            order(7, "eve@shop.com", "Sports", 1500, day=16),
            order(8, "ben@shop.com", "Sports", 2000, status="pending", day=17),
        ],
    )


@pytest.fixture
def shop_snapshot(shop_store):
    return Snapshot.of(shop_store.fetch_all_preferences(), shop_store.fetch_all_orders())


@pytest.fixture
def scenario_snapshot(scenario_store):
    return Snapshot.of(scenario_store.fetch_all_preferences(), scenario_store.fetch_all_orders())


@pytest.fixture
def preferences_df():
    return generate_preference_updates()


@pytest.fixture
def orders_df():
    return generate_orders()


@pytest.fixture
def duckdb_store(conn):
    return DuckDBRecordStore(conn)


@pytest.fixture
def prefscope_instance(preferences_df, orders_df):
    """Prefscope instance with the storefront dataset loaded."""
    from prefscope.api import Prefscope
    db = Prefscope()
    db.load_preferences(preferences_df)
    db.load_orders(orders_df)
    yield db
    db.close()
