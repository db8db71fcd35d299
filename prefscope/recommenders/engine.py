from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from prefscope.config import EngineConfig
from prefscope.core.records import Snapshot, normalize_email
from prefscope.core.results import CentralityScore, FrequentItemset, FullReport, Recommendation, SegmentOpportunity
from prefscope.core.store import RecordStore, read_snapshot
from prefscope.mining.centrality import InterestCentrality
from prefscope.mining.cooccurrence import CoOccurrenceIndex
from prefscope.mining.frequent_itemsets import FrequentItemsets
from prefscope.mining.segments import build_segments
from prefscope.recommenders.popularity import PopularityRecommender
from prefscope.stats import order_stats, preference_stats
from prefscope.structures.topk import BoundedTopK

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """
    Recommendations, frequent patterns, segments and interest centrality over a record store.

    Every public call reads the store once and rebuilds all derived structures from
    that snapshot; nothing is cached between calls.
    """

    def __init__(self, store: RecordStore, config: Optional[EngineConfig] = None, **overrides: Any):
        if config is not None and overrides: raise ValueError("Pass either config or keyword overrides, not both")
        self.store = store
        self.config = config or EngineConfig.from_kwargs(**overrides)

    def snapshot(self) -> Snapshot:
        return read_snapshot(self.store, self.config.completed_status)

    def recommend(self, email: str, k: int = 5) -> List[Recommendation]:
        if k <= 0: raise ValueError(f"k must be positive, got {k}")
        return self._recommend(self.snapshot(), email, k)

    def mine_frequent_itemsets(self, min_support: float = 0.05) -> List[FrequentItemset]:
        if not (0 <= min_support <= 1): raise ValueError("min_support must be in [0, 1]")
        return FrequentItemsets(self.snapshot(), min_support=min_support).fit()

    def list_segment_opportunities(self) -> List[SegmentOpportunity]:
        return self._segments(self.snapshot())

    def rank_interest_centrality(self) -> List[CentralityScore]:
        return InterestCentrality(self.snapshot()).rank()

    def full_report(self, email: str) -> FullReport:
        cfg = self.config
        snapshot = self.snapshot()
        return FullReport(
            email=normalize_email(email),
            recommendations=self._recommend(snapshot, email, cfg.report_recommendations),
            segment_opportunities=self._segments(snapshot),
            frequent_patterns=FrequentItemsets(snapshot, min_support=cfg.report_min_support).fit()[:cfg.report_patterns],
            interest_centrality=InterestCentrality(snapshot).rank()[:cfg.report_centrality],
        )

    def preference_stats(self) -> Dict[str, Any]:
        return preference_stats(self.snapshot())

    def order_stats(self) -> Dict[str, Any]:
        return order_stats(self.snapshot())

    def _segments(self, snapshot: Snapshot) -> List[SegmentOpportunity]:
        cfg = self.config
        return build_segments(
            snapshot.profiles(),
            FrequentItemsets(snapshot, min_support=cfg.segment_min_support).fit(),
            high_value_threshold_cents=cfg.high_value_threshold_cents,
            diverse_interest_min=cfg.diverse_interest_min,
            limit=cfg.segment_limit,
        )

    def _recommend(self, snapshot: Snapshot, email: str, k: int) -> List[Recommendation]:
        email = normalize_email(email)
        popularity = PopularityRecommender(snapshot).fit()
        own = [pref for pref in snapshot.preferences if pref.email == email]
        if not own:
            logger.debug("No preference record for %r, using popularity ranking", email)
            return popularity.recommend(n=k)
        interests = set().union(*(pref.interests for pref in own))

        index = CoOccurrenceIndex.build(snapshot)
        scores: Dict[str, float] = {}
        reasons: Dict[str, str] = {}
        for interest in sorted(interests):
            for category, count in sorted(index.categories_for(interest).items()):
                scores[category] = scores.get(category, 0) + count
                reasons.setdefault(category, f"{interest} buyers often purchase {category}")

        bought = {o.category for o in snapshot.completed_orders() if o.email == email}
        top = BoundedTopK(k)
        for category, score in scores.items():
            top.insert(category, score if category in bought else score * self.config.exploration_boost)
        results = [Recommendation(c, round(score, 2), reasons[c]) for c, score in top.drain()]

        if len(results) < k:
            present = {r.category for r in results}
            results += popularity.recommend(n=k, exclude_items=present)[:k - len(results)]
        return results
