from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import duckdb
import narwhals as nw

from prefscope.core.connection import DuckDBConnection
from prefscope.core.store import ORDERS_TABLE, PREFERENCES_TABLE, create_tables

logger = logging.getLogger(__name__)

_TMP_PREFERENCES = "_tmp_preferences"
_TMP_ORDERS = "_tmp_orders"


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _schema_names(df) -> list:
    try: return list(df.collect_schema().names())
    except AttributeError: return list(df.columns)


def _register_df_source(conn: DuckDBConnection, tmp_name: str, source: Any, columns: Dict[str, str], required: Sequence[str]) -> Dict[str, str]:
    try: df = nw.from_native(source)
    except TypeError as e: raise ValueError(f"Unsupported source type: {type(source).__name__}") from e
    names = _schema_names(df)
    missing = [columns[k] for k in required if columns[k] not in names]
    if missing: raise ValueError(f"Missing columns: {missing}")
    present = {std: col for std, col in columns.items() if col in names}
    df = df.select([nw.col(col).alias(std) for std, col in present.items()])
    if isinstance(df, nw.LazyFrame): df = df.collect()
    conn.register(tmp_name, df.to_arrow())
    return {std: std for std in present}


def _register_file_source(conn: DuckDBConnection, tmp_name: str, source: Union[str, Path], columns: Dict[str, str], required: Sequence[str]) -> Dict[str, str]:
    p = str(source)
    if p.endswith(".csv"): conn.execute(f"CREATE OR REPLACE TEMP TABLE {tmp_name} AS SELECT * FROM read_csv_auto('{p}')")
    elif p.endswith(".parquet"): conn.execute(f"CREATE OR REPLACE TEMP TABLE {tmp_name} AS SELECT * FROM read_parquet('{p}')")
    else: raise ValueError("Unsupported file type")
    names = conn.query(f"SELECT * FROM {tmp_name} LIMIT 0").column_names
    missing = [columns[k] for k in required if columns[k] not in names]
    if missing:
        _drop_tmp(conn, tmp_name)
        raise ValueError(f"Missing columns: {missing}")
    return {std: col for std, col in columns.items() if col in names}


def _register_source(conn, tmp_name, source, columns, required) -> Dict[str, str]:
    if isinstance(source, (str, Path)): return _register_file_source(conn, tmp_name, source, columns, required)
    return _register_df_source(conn, tmp_name, source, columns, required)


def _drop_tmp(conn: DuckDBConnection, tmp_name: str, source: Any = None):
    if source is None or isinstance(source, (str, Path)): conn.execute(f"DROP TABLE IF EXISTS {tmp_name}")
    else: conn.unregister(tmp_name)


def _warn_dropped(conn: DuckDBConnection, tmp_name: str, where: str, kind: str):
    dropped = conn.execute(f"SELECT COUNT(*) FROM {tmp_name} WHERE NOT ({where})").fetchone()[0]
    if dropped: logger.warning("Skipped %d %s rows with missing key columns", dropped, kind)


def _interests_sql(conn: DuckDBConnection, tmp_name: str, col: str, delimiter: str) -> str:
    kind = conn.column_type(tmp_name, col) or "VARCHAR"
    if kind.endswith("[]"): return f"CAST({col} AS VARCHAR[])"
    pattern = r"\s*" + re.escape(delimiter) + r"\s*"
    text = f"trim(CAST({col} AS VARCHAR))"
    return f"CASE WHEN {text} = '' THEN []::VARCHAR[] ELSE regexp_split_to_array({text}, '{pattern}') END"


def _table_count(conn: DuckDBConnection, table_name: str) -> int:
    return conn.execute(f"SELECT COUNT(*) FROM {table_name}").fetchone()[0]


def load_preferences(
    conn: DuckDBConnection,
    source: Any,
    email_col: str = "email",
    interests_col: str = "interests",
    frequency_col: str = "frequency",
    created_col: str = "created_at",
    delimiter: str = "|",
    default_frequency: str = "weekly",
) -> int:
    """Appends preference rows from a DataFrame or a .csv/.parquet file; returns the table's row count."""
    create_tables(conn)
    columns = {"email": email_col, "interests": interests_col, "frequency": frequency_col, "created_at": created_col}
    cols = {std: _quote(c) for std, c in _register_source(conn, _TMP_PREFERENCES, source, columns, ["email", "interests"]).items()}
    try:
        where = f"{cols['email']} IS NOT NULL AND {cols['interests']} IS NOT NULL"
        _warn_dropped(conn, _TMP_PREFERENCES, where, "preference")
        frequency = f"coalesce(CAST({cols['frequency']} AS VARCHAR), '{default_frequency}')" if "frequency" in cols else f"'{default_frequency}'"
        created = f"coalesce(CAST({cols['created_at']} AS TIMESTAMP), now()::TIMESTAMP)" if "created_at" in cols else "now()::TIMESTAMP"
        conn.execute(f"""
            INSERT INTO {PREFERENCES_TABLE} (email, interests, frequency, created_at, updated_at)
            SELECT lower(trim(CAST({cols['email']} AS VARCHAR))),
                   {_interests_sql(conn, _TMP_PREFERENCES, cols['interests'], delimiter)},
                   {frequency}, {created}, {created}
            FROM {_TMP_PREFERENCES}
            WHERE {where}
        """)
    finally:
        _drop_tmp(conn, _TMP_PREFERENCES, source)
    return _table_count(conn, PREFERENCES_TABLE)


def _check_catalog(conn: DuckDBConnection, category_col: str, catalog: Optional[Sequence[str]]):
    if catalog is None: return
    rows = conn.execute(f"SELECT DISTINCT CAST({category_col} AS VARCHAR) FROM {_TMP_ORDERS} WHERE {category_col} IS NOT NULL").fetchall()
    unknown = sorted(r[0] for r in rows if r[0] not in catalog)
    if unknown: raise ValueError(f"Unknown categories {unknown}; category must be one of: {', '.join(catalog)}")


def load_orders(
    conn: DuckDBConnection,
    source: Any,
    order_id_col: str = "order_id",
    email_col: str = "email",
    amount_col: str = "amount_cents",
    category_col: str = "category",
    currency_col: str = "currency",
    status_col: str = "status",
    created_col: str = "created_at",
    catalog: Optional[Sequence[str]] = None,
) -> int:
    """Appends order rows; missing order ids are generated, duplicates raise ValueError."""
    create_tables(conn)
    columns = {
        "order_id": order_id_col, "email": email_col, "amount_cents": amount_col, "category": category_col,
        "currency": currency_col, "status": status_col, "created_at": created_col,
    }
    cols = {std: _quote(c) for std, c in _register_source(conn, _TMP_ORDERS, source, columns, ["email", "amount_cents", "category"]).items()}
    try:
        _check_catalog(conn, cols["category"], catalog)
        where = f"{cols['email']} IS NOT NULL AND {cols['amount_cents']} IS NOT NULL AND {cols['category']} IS NOT NULL"
        _warn_dropped(conn, _TMP_ORDERS, where, "order")
        generated = "'ORD-' || upper(substr(replace(CAST(uuid() AS VARCHAR), '-', ''), 1, 8))"
        order_id = f"coalesce(CAST({cols['order_id']} AS VARCHAR), {generated})" if "order_id" in cols else generated
        currency = f"coalesce(CAST({cols['currency']} AS VARCHAR), 'usd')" if "currency" in cols else "'usd'"
        status = f"coalesce(CAST({cols['status']} AS VARCHAR), 'completed')" if "status" in cols else "'completed'"
        created = f"coalesce(CAST({cols['created_at']} AS TIMESTAMP), now()::TIMESTAMP)" if "created_at" in cols else "now()::TIMESTAMP"
        try:
            conn.execute(f"""
                INSERT INTO {ORDERS_TABLE} (order_id, email, amount_cents, currency, category, status, created_at)
                SELECT {order_id}, lower(trim(CAST({cols['email']} AS VARCHAR))), CAST({cols['amount_cents']} AS BIGINT),
                       {currency}, CAST({cols['category']} AS VARCHAR), {status}, {created}
                FROM {_TMP_ORDERS}
                WHERE {where}
            """)
        except duckdb.ConstraintException as e:
            raise ValueError(f"Order rows violate store constraints (duplicate order_id or negative amount): {e}") from e
    finally:
        _drop_tmp(conn, _TMP_ORDERS, source)
    return _table_count(conn, ORDERS_TABLE)
