from __future__ import annotations
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Union
import pyarrow as pa
from prefscope.config import EngineConfig
from prefscope.core.connection import DuckDBConnection
from prefscope.core.ingestion import load_orders, load_preferences
from prefscope.core.records import OrderRecord, PreferenceRecord
from prefscope.core.results import (
    CENTRALITY_SCHEMA, ITEMSET_SCHEMA, RECOMMENDATION_SCHEMA, SEGMENT_SCHEMA, to_table,
)
from prefscope.core.store import CATEGORIES, DuckDBRecordStore
from prefscope.recommenders.engine import RecommendationEngine

_COUNTS_SCHEMA = pa.schema([("key", pa.string()), ("count", pa.int64())])


def _counts_table(counts: Dict[str, int]) -> pa.Table:
    rows = [{"key": k, "count": v} for k, v in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]
    if not rows: return pa.Table.from_batches([], schema=_COUNTS_SCHEMA)
    return pa.Table.from_pylist(rows, schema=_COUNTS_SCHEMA)


class Prefscope:
    """Preference/order store plus the recommendation engine running over it."""

    def __init__(
        self,
        database: Union[str, Path] = ":memory:",
        memory_limit: Optional[str] = None,
        threads: Optional[int] = None,
        catalog: Optional[Sequence[str]] = CATEGORIES,
        config: Optional[EngineConfig] = None,
        **overrides: Any,
    ) -> None:
        self.conn = DuckDBConnection(database=database, memory_limit=memory_limit, threads=threads)
        self.store = DuckDBRecordStore(self.conn, catalog=catalog)
        self.engine = RecommendationEngine(self.store, config=config, **overrides)

    def load_preferences(self, source: Any, **kwargs) -> int:
        return load_preferences(self.conn, source, **kwargs)

    def load_orders(self, source: Any, **kwargs) -> int:
        kwargs.setdefault("catalog", self.store.catalog)
        return load_orders(self.conn, source, **kwargs)

    def add_preference(self, email: str, interests: Iterable[str], frequency: str = "weekly", created_at: Optional[datetime] = None) -> PreferenceRecord:
        return self.store.add_preference(email, interests, frequency=frequency, created_at=created_at)

    def add_order(self, email: str, amount_cents: int, category: str, **kwargs) -> OrderRecord:
        return self.store.add_order(email, amount_cents, category, **kwargs)

    def recommend(self, email: str, n: int = 5) -> pa.Table:
        return to_table(self.engine.recommend(email, k=n), RECOMMENDATION_SCHEMA)

    def frequent_itemsets(self, min_support: float = 0.05) -> pa.Table:
        return to_table(self.engine.mine_frequent_itemsets(min_support), ITEMSET_SCHEMA)

    def segment_opportunities(self) -> pa.Table:
        return to_table(self.engine.list_segment_opportunities(), SEGMENT_SCHEMA)

    def interest_centrality(self) -> pa.Table:
        return to_table(self.engine.rank_interest_centrality(), CENTRALITY_SCHEMA)

    def full_report(self, email: str) -> Dict[str, Any]:
        report = self.engine.full_report(email)
        return {
            "email": report.email,
            "recommendations": to_table(report.recommendations, RECOMMENDATION_SCHEMA),
            "segment_opportunities": to_table(report.segment_opportunities, SEGMENT_SCHEMA),
            "frequent_patterns": to_table(report.frequent_patterns, ITEMSET_SCHEMA),
            "interest_centrality": to_table(report.interest_centrality, CENTRALITY_SCHEMA),
        }

    def preference_stats(self) -> Dict[str, Any]:
        stats = self.engine.preference_stats()
        stats["interest_counts"] = _counts_table(stats["interest_counts"])
        stats["frequency_counts"] = _counts_table(stats["frequency_counts"])
        return stats

    def order_stats(self) -> Dict[str, Any]:
        stats = self.engine.order_stats()
        stats["category_counts"] = _counts_table(stats["category_counts"])
        stats["category_revenue"] = _counts_table(stats["category_revenue"])
        return stats

    def sql(self, query: str) -> pa.Table: return self.conn.query(query)
    def close(self): self.conn.close()
    def __enter__(self): return self
    def __exit__(self, *_): self.close()
    def __repr__(self) -> str: return f"Prefscope(database={self.conn._database!r})"
