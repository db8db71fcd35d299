from __future__ import annotations
from typing import Callable, Dict, Iterable, List

from prefscope.core.records import EmailProfile
from prefscope.core.results import FrequentItemset, INTEREST_CATEGORY_PAIR, INTEREST_PAIR, SegmentOpportunity

HIGH_VALUE = "High-Value Customers"
DIVERSE_INTERESTS = "Diverse Interest Profile"


def _count(profiles: Iterable[EmailProfile], pred: Callable[[EmailProfile], bool]) -> int:
    return sum(1 for p in profiles if pred(p))


def _from_itemset(itemset: FrequentItemset, profiles: List[EmailProfile]) -> SegmentOpportunity:
    a, b = itemset.items
    if itemset.kind == INTEREST_PAIR:
        size = _count(profiles, lambda p: a in p.interests and b in p.interests)
        return SegmentOpportunity(
            f"{a} + {b} Enthusiasts",
            (f'pref_interests contains "{a}"', f'pref_interests contains "{b}"'),
            size, itemset.support,
        )
    size = _count(profiles, lambda p: a in p.interests and b in p.categories)
    return SegmentOpportunity(
        f"{a} Fans who buy {b}",
        (f'pref_interests contains "{a}"', f'last_purchase_category = "{b}"'),
        size, itemset.support,
    )


def build_segments(
    profiles: Dict[str, EmailProfile],
    itemsets: Iterable[FrequentItemset],
    high_value_threshold_cents: int = 10000,
    diverse_interest_min: int = 3,
    limit: int = 10,
) -> List[SegmentOpportunity]:
    """Segments from frequent pairs plus the spend and interest-breadth heuristics, largest first."""
    known = list(profiles.values())
    total = max(1, len(known))
    segments = [_from_itemset(s, known) for s in itemsets if s.kind in (INTEREST_PAIR, INTEREST_CATEGORY_PAIR) and len(s.items) == 2]

    high_value = _count(known, lambda p: p.spent_cents >= high_value_threshold_cents)
    if high_value:
        threshold = f"{high_value_threshold_cents / 100:g}"
        segments.append(SegmentOpportunity(HIGH_VALUE, (f"total_spent >= {threshold}",), high_value, high_value / total))

    diverse = _count(known, lambda p: len(p.interests) >= diverse_interest_min)
    if diverse:
        segments.append(SegmentOpportunity(DIVERSE_INTERESTS, (f"pref_interests.length >= {diverse_interest_min}",), diverse, diverse / total))

    segments.sort(key=lambda s: (-s.estimated_size, -s.confidence, s.name))
    return segments[:limit]
