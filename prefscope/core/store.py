from __future__ import annotations
import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Protocol, Sequence

import duckdb

from prefscope.core.connection import DuckDBConnection
from prefscope.core.records import COMPLETED, OrderRecord, PreferenceRecord, Snapshot, interest_set, naive_utc, normalize_email
from prefscope.exceptions import SnapshotLookupError

logger = logging.getLogger(__name__)

CATEGORIES = ("Electronics", "Fashion", "Home", "Beauty", "Sports")

PREFERENCES_TABLE = "preference_updates"
ORDERS_TABLE = "orders"

_PREFERENCE_COLUMNS = "id, email, interests, frequency, created_at, updated_at"
_ORDER_COLUMNS = "id, order_id, email, amount_cents, currency, category, status, created_at"


class RecordStore(Protocol):
    def fetch_all_preferences(self) -> Sequence[PreferenceRecord]: ...
    def fetch_all_orders(self) -> Sequence[OrderRecord]: ...


def read_snapshot(store: RecordStore, completed_status: str = COMPLETED) -> Snapshot:
    """Reads both streams once; any store failure aborts the whole computation."""
    try:
        preferences = store.fetch_all_preferences()
        orders = store.fetch_all_orders()
    except Exception as e:
        logger.exception("Snapshot lookup failed for %r", store)
        raise SnapshotLookupError(f"Snapshot lookup failed: {e}") from e
    snapshot = Snapshot.of(preferences, orders, completed_status)
    logger.debug("Read snapshot with %d preference records and %d orders", len(snapshot.preferences), len(snapshot.orders))
    return snapshot


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_order_id() -> str:
    return f"ORD-{uuid.uuid4().hex[:8].upper()}"


def _check_limit(limit: int):
    if limit <= 0: raise ValueError(f"limit must be positive, got {limit}")


def _check_category(category: str, catalog: Optional[Sequence[str]]):
    if catalog is not None and category not in catalog:
        raise ValueError(f"Category must be one of: {', '.join(catalog)}")


def create_tables(conn: DuckDBConnection):
    conn.execute(f"CREATE SEQUENCE IF NOT EXISTS seq_{PREFERENCES_TABLE}_id START 1")
    conn.execute(f"CREATE SEQUENCE IF NOT EXISTS seq_{ORDERS_TABLE}_id START 1")
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {PREFERENCES_TABLE} (
            id BIGINT DEFAULT nextval('seq_{PREFERENCES_TABLE}_id'),
            email VARCHAR NOT NULL,
            interests VARCHAR[] NOT NULL,
            frequency VARCHAR NOT NULL,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL
        )
    """)
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {ORDERS_TABLE} (
            id BIGINT DEFAULT nextval('seq_{ORDERS_TABLE}_id'),
            order_id VARCHAR NOT NULL UNIQUE,
            email VARCHAR NOT NULL,
            amount_cents BIGINT NOT NULL CHECK (amount_cents >= 0),
            currency VARCHAR NOT NULL DEFAULT 'usd',
            category VARCHAR NOT NULL,
            status VARCHAR NOT NULL DEFAULT 'completed',
            created_at TIMESTAMP NOT NULL
        )
    """)
    conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{PREFERENCES_TABLE}_email ON {PREFERENCES_TABLE}(email)")
    conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{ORDERS_TABLE}_email ON {ORDERS_TABLE}(email)")


class InMemoryRecordStore:
    def __init__(
        self,
        preferences: Iterable[PreferenceRecord] = (),
        orders: Iterable[OrderRecord] = (),
        catalog: Optional[Sequence[str]] = None,
    ):
        self._preferences: List[PreferenceRecord] = list(preferences)
        self._orders: List[OrderRecord] = list(orders)
        self.catalog = catalog

    def fetch_all_preferences(self) -> Sequence[PreferenceRecord]:
        return tuple(self._preferences)

    def fetch_all_orders(self) -> Sequence[OrderRecord]:
        return tuple(self._orders)

    def add_preference(self, email: str, interests: Iterable[str], frequency: str = "weekly", created_at: Optional[datetime] = None) -> PreferenceRecord:
        ts = naive_utc(created_at) or _now()
        record = PreferenceRecord(len(self._preferences) + 1, email, interest_set(interests), frequency, ts, ts)
        self._preferences.append(record)
        return record

    def add_order(
        self,
        email: str,
        amount_cents: int,
        category: str,
        order_id: Optional[str] = None,
        currency: str = "usd",
        status: str = COMPLETED,
        created_at: Optional[datetime] = None,
    ) -> OrderRecord:
        _check_category(category, self.catalog)
        order_id = order_id or _new_order_id()
        if any(o.order_id == order_id for o in self._orders): raise ValueError(f"Duplicate order_id: {order_id}")
        record = OrderRecord(len(self._orders) + 1, order_id, email, amount_cents, category, currency, status, created_at or _now())
        self._orders.append(record)
        return record

    def __repr__(self) -> str:
        return f"InMemoryRecordStore(preferences={len(self._preferences)}, orders={len(self._orders)})"


class DuckDBRecordStore:
    """Preference and order history kept in two DuckDB tables."""

    def __init__(self, conn: DuckDBConnection, catalog: Optional[Sequence[str]] = CATEGORIES):
        self.conn = conn
        self.catalog = catalog
        create_tables(conn)

    @staticmethod
    def _preference(row: dict) -> PreferenceRecord:
        return PreferenceRecord(row["id"], row["email"], frozenset(row["interests"] or ()), row["frequency"], row["created_at"], row["updated_at"])

    @staticmethod
    def _order(row: dict) -> OrderRecord:
        return OrderRecord(row["id"], row["order_id"], row["email"], row["amount_cents"], row["category"], row["currency"], row["status"], row["created_at"])

    def add_preference(self, email: str, interests: Iterable[str], frequency: str = "weekly", created_at: Optional[datetime] = None) -> PreferenceRecord:
        ts = naive_utc(created_at) or _now()
        tokens = sorted(interest_set(interests))
        row = self.conn.execute(
            f"INSERT INTO {PREFERENCES_TABLE} (email, interests, frequency, created_at, updated_at) VALUES (?, CAST(? AS VARCHAR[]), ?, ?, ?) RETURNING id",
            [normalize_email(email), tokens, frequency, ts, ts],
        ).fetchone()
        return PreferenceRecord(row[0], email, frozenset(tokens), frequency, ts, ts)

    def add_order(
        self,
        email: str,
        amount_cents: int,
        category: str,
        order_id: Optional[str] = None,
        currency: str = "usd",
        status: str = COMPLETED,
        created_at: Optional[datetime] = None,
    ) -> OrderRecord:
        _check_category(category, self.catalog)
        if amount_cents < 0: raise ValueError(f"amount_cents must be non-negative, got {amount_cents}")
        order_id, ts = order_id or _new_order_id(), naive_utc(created_at) or _now()
        try:
            row = self.conn.execute(
                f"INSERT INTO {ORDERS_TABLE} (order_id, email, amount_cents, currency, category, status, created_at) VALUES (?, ?, ?, ?, ?, ?, ?) RETURNING id",
                [order_id, normalize_email(email), amount_cents, currency, category, status, ts],
            ).fetchone()
        except duckdb.ConstraintException as e:
            raise ValueError(f"Duplicate order_id: {order_id}") from e
        return OrderRecord(row[0], order_id, email, amount_cents, category, currency, status, ts)

    def fetch_all_preferences(self) -> List[PreferenceRecord]:
        rows = self.conn.fetch_rows(f"SELECT {_PREFERENCE_COLUMNS} FROM {PREFERENCES_TABLE} ORDER BY created_at DESC, id DESC")
        return [self._preference(r) for r in rows]

    def fetch_all_orders(self) -> List[OrderRecord]:
        rows = self.conn.fetch_rows(f"SELECT {_ORDER_COLUMNS} FROM {ORDERS_TABLE} ORDER BY created_at DESC, id DESC")
        return [self._order(r) for r in rows]

    def latest_preference(self, email: str) -> Optional[PreferenceRecord]:
        rows = self.conn.fetch_rows(
            f"SELECT {_PREFERENCE_COLUMNS} FROM {PREFERENCES_TABLE} WHERE email = ? ORDER BY created_at DESC, id DESC LIMIT 1",
            [normalize_email(email)],
        )
        return self._preference(rows[0]) if rows else None

    def recent_preferences(self, limit: int = 10) -> List[PreferenceRecord]:
        _check_limit(limit)
        rows = self.conn.fetch_rows(f"SELECT {_PREFERENCE_COLUMNS} FROM {PREFERENCES_TABLE} ORDER BY created_at DESC, id DESC LIMIT ?", [limit])
        return [self._preference(r) for r in rows]

    def recent_orders(self, limit: int = 10) -> List[OrderRecord]:
        _check_limit(limit)
        rows = self.conn.fetch_rows(f"SELECT {_ORDER_COLUMNS} FROM {ORDERS_TABLE} ORDER BY created_at DESC, id DESC LIMIT ?", [limit])
        return [self._order(r) for r in rows]

    def orders_for(self, email: str) -> List[OrderRecord]:
        rows = self.conn.fetch_rows(
            f"SELECT {_ORDER_COLUMNS} FROM {ORDERS_TABLE} WHERE email = ? ORDER BY created_at DESC, id DESC",
            [normalize_email(email)],
        )
        return [self._order(r) for r in rows]

    def __repr__(self) -> str:
        return f"DuckDBRecordStore(conn={self.conn!r})"
