from __future__ import annotations
import logging
import math
from collections import Counter
from itertools import combinations
from typing import List, Optional, Tuple

from prefscope.core.records import Snapshot
from prefscope.core.results import (
    FrequentItemset, INTEREST_CATEGORY_PAIR, INTEREST_PAIR, ITEMSET_KINDS, SINGLE_INTEREST,
)

logger = logging.getLogger(__name__)


def _ratio(count: int, total: int) -> float:
    return count / total if total else 0.0


def min_count_for(total_transactions: int, min_support: float) -> int:
    return max(1, math.floor(total_transactions * min_support))


class FrequentItemsets:
    """
    Single interests, interest pairs and interest-category pairs above a support floor.

    Only completed orders are counted, but the frequency floor is taken over every
    transaction (preference records plus orders of any status). Reported support of
    interest itemsets is relative to preference records and that of interest-category
    pairs to all orders.
    """

    def __init__(self, snapshot: Snapshot, min_support: float = 0.05, max_len: Optional[int] = None):
        if not (0 <= min_support <= 1): raise ValueError("min_support must be in [0, 1]")
        if max_len is not None and max_len < 1: raise ValueError("max_len must be at least 1")
        self.snapshot = snapshot
        self.min_support = min_support
        self.max_len = max_len
        self.min_count_ = 0

    def _count_singles(self) -> Counter:
        return Counter(i for pref in self.snapshot.preferences for i in pref.interests)

    def _count_pairs(self) -> Counter:
        return Counter(pair for pref in self.snapshot.preferences for pair in combinations(sorted(pref.interests), 2))

    def _count_cross(self, orders) -> Counter:
        current = self.snapshot.current_interests_by_email()
        return Counter((interest, order.category) for order in orders for interest in current.get(order.email, ()))

    @staticmethod
    def _sort_key(itemset: FrequentItemset) -> Tuple:
        return (-itemset.support, ITEMSET_KINDS.index(itemset.kind), itemset.items)

    def fit(self) -> List[FrequentItemset]:
        orders = self.snapshot.completed_orders()
        n_prefs, n_orders = len(self.snapshot.preferences), len(self.snapshot.orders)
        total = n_prefs + n_orders
        if total == 0: return []
        self.min_count_ = min_count = min_count_for(total, self.min_support)

        results = [FrequentItemset((i,), _ratio(c, n_prefs), SINGLE_INTEREST, c) for i, c in self._count_singles().items() if c >= min_count]
        if self.max_len is None or self.max_len >= 2:
            results += [FrequentItemset(p, _ratio(c, n_prefs), INTEREST_PAIR, c) for p, c in self._count_pairs().items() if c >= min_count]
            results += [FrequentItemset(p, _ratio(c, n_orders), INTEREST_CATEGORY_PAIR, c) for p, c in self._count_cross(orders).items() if c >= min_count]

        logger.debug("Mined %d frequent itemsets from %d transactions (min_count=%d)", len(results), total, min_count)
        return sorted(results, key=self._sort_key)
