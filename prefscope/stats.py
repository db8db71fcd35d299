"""
Aggregate counters over a snapshot: preference activity and completed-order revenue.
"""
from __future__ import annotations
from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from prefscope.core.records import Snapshot


def _most_common(counts: Counter) -> Optional[str]:
    if not counts: return None
    return min(counts.items(), key=lambda kv: (-kv[1], kv[0]))[0]


def preference_stats(snapshot: Snapshot) -> Dict[str, Any]:
    interests = Counter(i for pref in snapshot.preferences for i in pref.interests)
    frequencies = Counter(pref.frequency for pref in snapshot.preferences)
    return {
        "total_updates": len(snapshot.preferences),
        "unique_emails": len({pref.email for pref in snapshot.preferences}),
        "interest_counts": dict(interests),
        "frequency_counts": dict(frequencies),
        "most_popular_interest": _most_common(interests),
        "most_popular_frequency": _most_common(frequencies),
    }


def order_stats(snapshot: Snapshot) -> Dict[str, Any]:
    completed = snapshot.completed_orders()
    revenue = sum(o.amount_cents for o in completed)
    category_counts: Counter = Counter()
    category_revenue: Counter = Counter()
    for order in completed:
        category_counts[order.category] += 1
        category_revenue[order.category] += order.amount_cents
    avg = int((Decimal(revenue) / len(completed)).quantize(Decimal(1), rounding=ROUND_HALF_UP)) if completed else 0
    return {
        "total_orders": len(completed),
        "total_revenue_cents": revenue,
        "unique_customers": len({o.email for o in snapshot.orders}),
        "avg_order_value_cents": avg,
        "category_counts": dict(category_counts),
        "category_revenue": dict(category_revenue),
    }
