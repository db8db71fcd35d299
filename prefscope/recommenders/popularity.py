from __future__ import annotations
from collections import Counter
from datetime import timedelta
from typing import Iterable, List, Optional, Tuple

from prefscope.core.records import Snapshot
from prefscope.core.results import Recommendation

POPULAR_REASON = "Popular category"


class PopularityRecommender:
    def __init__(self, snapshot: Snapshot, strategy: str = "global", window_days: int = 30):
        if strategy not in ["global", "trending"]:
            raise ValueError(f"Unknown strategy: {strategy}")
        if window_days <= 0: raise ValueError("window_days must be positive")
        self.snapshot = snapshot
        self.strategy = strategy
        self.window_days = window_days
        self._ranking: Optional[List[Tuple[str, int]]] = None

    def _orders(self):
        orders = self.snapshot.completed_orders()
        if self.strategy == "global": return orders
        stamped = [o for o in orders if o.created_at is not None]
        if not stamped: return []
        cutoff = max(o.created_at for o in stamped) - timedelta(days=self.window_days)
        return [o for o in stamped if o.created_at >= cutoff]

    def fit(self) -> PopularityRecommender:
        counts = Counter(o.category for o in self._orders())
        self._ranking = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return self

    def ranking(self) -> List[Tuple[str, int]]:
        if self._ranking is None: self.fit()
        return list(self._ranking)

    def recommend(self, n: int = 10, exclude_items: Optional[Iterable[str]] = None) -> List[Recommendation]:
        if n <= 0: raise ValueError(f"n must be positive, got {n}")
        excluded = set(exclude_items or ())
        ranked = [(c, count) for c, count in self.ranking() if c not in excluded]
        return [Recommendation(c, float(count), POPULAR_REASON) for c, count in ranked[:n]]
