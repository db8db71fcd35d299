"""
prefscope.datasets.scaling — Randomized customer bases for benchmarking.
"""
from __future__ import annotations
import numpy as np
import pandas as pd
from typing import Optional, Sequence, Tuple

INTERESTS = ("Tech", "Travel", "Fitness", "Fashion", "Home", "Beauty", "Outdoors", "Gaming")
CATEGORIES = ("Electronics", "Fashion", "Home", "Beauty", "Sports")
FREQUENCIES = ("daily", "weekly", "monthly")


def generate_customer_snapshot(
    n_customers: int = 1_000,
    max_interests: int = 4,
    orders_per_customer: float = 2.0,
    interests: Sequence[str] = INTERESTS,
    categories: Sequence[str] = CATEGORIES,
    seed: Optional[int] = 42,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Generate preference updates and orders for ``n_customers`` customers.

    Every customer declares between one and ``max_interests`` interests; the
    number of orders per customer is Poisson distributed around
    ``orders_per_customer``. Each interest leans toward one category so the
    co-occurrence signal is recoverable.

    Returns
    -------
    (pd.DataFrame, pd.DataFrame)
        Preferences (``email``, ``interests``, ``frequency``, ``created_at``) and
        orders (``order_id``, ``email``, ``amount_cents``, ``category``, ``status``,
        ``created_at``).

    Example
    -------
    >>> from prefscope.datasets import generate_customer_snapshot
    >>> prefs, orders = generate_customer_snapshot(n_customers=100)
    >>> len(prefs)
    100
    """
    rng = np.random.default_rng(seed)
    base = pd.Timestamp("2024-01-01")
    affinity = {interest: categories[i % len(categories)] for i, interest in enumerate(interests)}

    pref_rows, order_rows = [], []
    for c in range(n_customers):
        email = f"customer{c}@example.com"
        k = int(rng.integers(1, max_interests + 1))
        chosen = sorted(rng.choice(interests, size=min(k, len(interests)), replace=False).tolist())
        created = base + pd.Timedelta(minutes=int(rng.integers(0, 60 * 24 * 90)))
        pref_rows.append((email, "|".join(chosen), str(rng.choice(FREQUENCIES)), created))

        for j in range(int(rng.poisson(orders_per_customer))):
            # 70% of purchases follow an interest's preferred category
            if rng.random() < 0.7: category = affinity[str(rng.choice(chosen))]
            else: category = str(rng.choice(categories))
            order_rows.append((
                f"ORD-{c}-{j}", email, int(rng.integers(500, 20_000)), category, "completed",
                created + pd.Timedelta(days=int(rng.integers(1, 30))),
            ))

    prefs = pd.DataFrame(pref_rows, columns=["email", "interests", "frequency", "created_at"])
    orders = pd.DataFrame(order_rows, columns=["order_id", "email", "amount_cents", "category", "status", "created_at"])
    return prefs, orders
