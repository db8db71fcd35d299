"""Tests for DataFrame and file ingestion into the record store."""

import pandas as pd
import pytest

from prefscope.core.ingestion import load_orders, load_preferences
from prefscope.core.store import CATEGORIES, DuckDBRecordStore


class TestLoadPreferences:

    def test_basic_load(self, conn, preferences_df):
        count = load_preferences(conn, preferences_df)
        assert count == len(preferences_df)
        assert conn.table_exists("preference_updates")

    def test_interests_split(self, conn, preferences_df):
        load_preferences(conn, preferences_df)
        records = DuckDBRecordStore(conn).fetch_all_preferences()
        cy = next(r for r in records if r.email == "cy@shop.com")
        assert cy.interests == {"Tech", "Travel", "Fitness"}
        assert cy.frequency == "daily"

    def test_custom_columns_and_delimiter(self, conn):
        df = pd.DataFrame({
            "customer": [" Ana@Shop.com", "ben@shop.com"],
            "tags": ["Tech, Travel", "Home"],
        })
        load_preferences(conn, df, email_col="customer", interests_col="tags", delimiter=",")
        records = {r.email: r for r in DuckDBRecordStore(conn).fetch_all_preferences()}
        assert records["ana@shop.com"].interests == {"Tech", "Travel"}
        assert records["ben@shop.com"].frequency == "weekly"

    def test_empty_interest_string(self, conn):
        load_preferences(conn, pd.DataFrame({"email": ["a@x.com"], "interests": [""]}))
        assert DuckDBRecordStore(conn).fetch_all_preferences()[0].interests == frozenset()

    def test_null_rows_skipped(self, conn, caplog):
        df = pd.DataFrame({"email": ["a@x.com", None], "interests": ["Tech", "Home"]})
        with caplog.at_level("WARNING", logger="prefscope.core.ingestion"):
            count = load_preferences(conn, df)
        assert count == 1
        assert "Skipped 1 preference rows" in caplog.text

    def test_append_mode(self, conn, preferences_df):
        load_preferences(conn, preferences_df)
        assert load_preferences(conn, preferences_df) == 2 * len(preferences_df)

    def test_created_at_kept(self, conn, preferences_df):
        load_preferences(conn, preferences_df)
        latest = DuckDBRecordStore(conn).latest_preference("ana@shop.com")
        assert latest.interests == {"Tech", "Travel", "Home"}
        assert latest.created_at == pd.Timestamp("2024-02-01 09:00:00").to_pydatetime()

    def test_polars_list_column(self, conn):
        pl = pytest.importorskip("polars")
        df = pl.DataFrame({"email": ["a@x.com"], "interests": [["Tech", "Travel"]]})
        load_preferences(conn, df)
        assert DuckDBRecordStore(conn).fetch_all_preferences()[0].interests == {"Tech", "Travel"}

    def test_polars_lazy(self, conn):
        pl = pytest.importorskip("polars")
        lazy = pl.DataFrame({"email": ["a@x.com"], "interests": ["Tech|Home"]}).lazy()
        assert load_preferences(conn, lazy) == 1

    def test_csv_file(self, conn, tmp_path, preferences_df):
        path = tmp_path / "prefs.csv"
        preferences_df.to_csv(path, index=False)
        assert load_preferences(conn, path) == len(preferences_df)
        ana = DuckDBRecordStore(conn).latest_preference("ana@shop.com")
        assert ana.interests == {"Tech", "Travel", "Home"}

    def test_parquet_file(self, conn, tmp_path, preferences_df):
        path = tmp_path / "prefs.parquet"
        preferences_df.to_parquet(path)
        assert load_preferences(conn, str(path)) == len(preferences_df)

    def test_unsupported_file_type(self, conn, tmp_path):
        with pytest.raises(ValueError, match="Unsupported file type"):
            load_preferences(conn, tmp_path / "prefs.txt")

    def test_missing_columns(self, conn):
        with pytest.raises(ValueError, match="Missing columns"):
            load_preferences(conn, pd.DataFrame({"email": ["a@x.com"]}))

    def test_missing_columns_in_file(self, conn, tmp_path):
        path = tmp_path / "bad.csv"
        pd.DataFrame({"who": ["a@x.com"]}).to_csv(path, index=False)
        with pytest.raises(ValueError, match="Missing columns"):
            load_preferences(conn, path)
        assert not conn.table_exists("_tmp_preferences")

    def test_non_dataframe_source(self, conn):
        with pytest.raises(ValueError, match="Unsupported source type"):
            load_preferences(conn, 123)


class TestLoadOrders:

    def test_basic_load(self, conn, orders_df):
        assert load_orders(conn, orders_df) == len(orders_df)
        orders = {o.order_id: o for o in DuckDBRecordStore(conn).fetch_all_orders()}
        assert orders["O8"].status == "pending"
        assert orders["O1"].amount_cents == 12000

    def test_defaults_and_generated_ids(self, conn):
        df = pd.DataFrame({"email": ["A@x.com", "b@x.com"], "amount_cents": [100, 250], "category": ["Home", "Beauty"]})
        load_orders(conn, df)
        orders = DuckDBRecordStore(conn).fetch_all_orders()
        assert {o.email for o in orders} == {"a@x.com", "b@x.com"}
        assert all(o.order_id.startswith("ORD-") for o in orders)
        assert len({o.order_id for o in orders}) == 2
        assert all(o.currency == "usd" and o.status == "completed" for o in orders)

    def test_duplicate_order_ids(self, conn, orders_df):
        load_orders(conn, orders_df)
        with pytest.raises(ValueError, match="store constraints"):
            load_orders(conn, orders_df)

    def test_negative_amount(self, conn):
        df = pd.DataFrame({"email": ["a@x.com"], "amount_cents": [-1], "category": ["Home"]})
        with pytest.raises(ValueError):
            load_orders(conn, df)

    def test_catalog_check(self, conn):
        df = pd.DataFrame({"email": ["a@x.com"], "amount_cents": [100], "category": ["Groceries"]})
        with pytest.raises(ValueError, match="Unknown categories"):
            load_orders(conn, df, catalog=CATEGORIES)
        assert load_orders(conn, df) == 1

    def test_renamed_columns(self, conn):
        df = pd.DataFrame({"buyer": ["a@x.com"], "cents": [500], "cat": ["Sports"], "ref": ["R-1"]})
        load_orders(conn, df, email_col="buyer", amount_col="cents", category_col="cat", order_id_col="ref")
        [o] = DuckDBRecordStore(conn).fetch_all_orders()
        assert (o.order_id, o.amount_cents, o.category) == ("R-1", 500, "Sports")

    def test_csv_file(self, conn, tmp_path, orders_df):
        path = tmp_path / "orders.csv"
        orders_df.to_csv(path, index=False)
        assert load_orders(conn, path) == len(orders_df)
