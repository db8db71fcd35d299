from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import duckdb
import pyarrow as pa

Params = Optional[Union[list, dict]]


class DuckDBConnection:
    """
    The DuckDB database holding the preference and order tables.

    Reads come back as Arrow tables (``query``) or as lists of row dicts
    (``fetch_rows``, used to rebuild records). DataFrames staged for ingestion are
    attached with ``register`` and detached again with ``unregister``.
    """

    def __init__(
        self,
        database: Union[str, Path] = ":memory:",
        memory_limit: Optional[str] = None,
        threads: Optional[int] = None,
    ):
        self._database = str(database)
        self.conn = duckdb.connect(self._database)
        settings = {"memory_limit": f"'{memory_limit}'" if memory_limit else None, "threads": threads}
        for name, value in settings.items():
            if value: self.conn.execute(f"SET {name}={value}")

    def execute(self, query: str, params: Params = None) -> duckdb.DuckDBPyConnection:
        return self.conn.execute(query, params)

    def query(self, query: str, params: Params = None) -> pa.Table:
        result = self.execute(query, params).arrow()
        return result.read_all() if hasattr(result, "read_all") else result

    def fetch_rows(self, query: str, params: Params = None) -> List[Dict[str, Any]]:
        return self.query(query, params).to_pylist()

    def table_exists(self, table_name: str) -> bool:
        """True for tables, temp tables and registered DataFrames alike."""
        try:
            self.conn.execute(f"SELECT 1 FROM {table_name} LIMIT 0")
        except duckdb.Error:
            return False
        return True

    def column_type(self, table_name: str, column_name: str) -> Optional[str]:
        # typeof needs a row; an empty staging table reports None
        row = self.conn.execute(f"SELECT typeof({column_name}) FROM {table_name} LIMIT 1").fetchone()
        return row[0] if row else None

    def register(self, name: str, df: Any):
        self.conn.register(name, df)

    def unregister(self, name: str):
        self.conn.unregister(name)

    def close(self):
        self.conn.close()

    def __enter__(self) -> DuckDBConnection:
        return self

    def __exit__(self, *_):
        self.close()

    def __repr__(self) -> str:
        return f"DuckDBConnection(database={self._database!r})"
