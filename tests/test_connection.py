"""Tests for DuckDB connection management."""

from unittest.mock import MagicMock, patch

import pandas as pd
import pyarrow as pa

from prefscope.core.connection import DuckDBConnection


class TestDuckDBConnection:

    def test_in_memory_connection(self):
        conn = DuckDBConnection()
        assert conn.execute("SELECT 42 AS answer").fetchone()[0] == 42
        conn.close()

    def test_context_manager(self):
        with DuckDBConnection() as conn:
            assert conn.execute("SELECT 1+1").fetchone()[0] == 2

    def test_query_returns_arrow(self):
        with DuckDBConnection() as conn:
            table = conn.query("SELECT 1 AS a, 'x' AS b")
            assert table.column_names == ["a", "b"]
            assert table.to_pylist() == [{"a": 1, "b": "x"}]

    def test_fetch_rows(self):
        with DuckDBConnection() as conn:
            rows = conn.fetch_rows("SELECT ? AS x, ['a', 'b'] AS tags", [10])
            assert rows == [{"x": 10, "tags": ["a", "b"]}]

    def test_table_exists(self):
        with DuckDBConnection() as conn:
            assert conn.table_exists("missing_table") is False
            conn.execute("CREATE TABLE t (x INT)")
            assert conn.table_exists("t") is True

    def test_column_type(self):
        with DuckDBConnection() as conn:
            conn.execute("CREATE TABLE t AS SELECT ['a'] AS tags, 'a|b' AS raw")
            assert conn.column_type("t", "tags") == "VARCHAR[]"
            assert conn.column_type("t", "raw") == "VARCHAR"
            conn.execute("CREATE TABLE empty (x INT)")
            assert conn.column_type("empty", "x") is None

    def test_register_and_unregister(self):
        with DuckDBConnection() as conn:
            conn.register("my_df", pd.DataFrame({"x": [1, 2, 3]}))
            assert conn.query("SELECT SUM(x) AS s FROM my_df").to_pylist()[0]["s"] == 6
            conn.unregister("my_df")
            assert conn.table_exists("my_df") is False

    def test_settings(self):
        DuckDBConnection(memory_limit="512MB").close()
        with DuckDBConnection(threads=1) as conn:
            assert str(conn.execute("SELECT current_setting('threads')").fetchone()[0]) == "1"

    def test_repr(self):
        with DuckDBConnection() as conn:
            assert ":memory:" in repr(conn)

    def test_persistent_database(self, tmp_path):
        db_path = str(tmp_path / "prefs.duckdb")
        with DuckDBConnection(database=db_path) as conn:
            conn.execute("CREATE TABLE t (v INT)")
            conn.execute("INSERT INTO t VALUES (99)")
        with DuckDBConnection(database=db_path) as conn:
            assert conn.execute("SELECT v FROM t").fetchone()[0] == 99

    def test_query_accepts_table_result(self):
        with DuckDBConnection() as conn:
            mock_result = MagicMock()
            table = pa.Table.from_pydict({"a": [1]})
            mock_result.arrow.return_value = table
            with patch.object(conn, "execute", return_value=mock_result):
                assert conn.query("SELECT 1") == table
