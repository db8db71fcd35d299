"""
prefscope.datasets — Synthetic preference and order data.

Each generator produces ready-to-load ``pd.DataFrame`` objects whose columns match
the defaults of ``load_preferences`` / ``load_orders``.

- **retail**: a small storefront with known interest/category signals
- **scaling**: randomized customer bases for benchmarking
"""

from .retail import generate_preference_updates, generate_orders
from .scaling import generate_customer_snapshot

__all__ = [
    "generate_preference_updates",
    "generate_orders",
    "generate_customer_snapshot",
]
