"""
prefscope.datasets.retail — A small storefront with deliberate patterns.

- Tech shoppers buy Electronics (ana, ben, cy)
- Tech + Travel is the most common interest pair
- dee is the only Fashion/Home customer; eve only follows Fitness
- ana updates preferences once, adding Home
"""
from __future__ import annotations
import pandas as pd


def generate_preference_updates() -> pd.DataFrame:
    """
    Preference declarations, one row per update.

    Columns: ``email``, ``interests`` (``|``-delimited), ``frequency``, ``created_at``

    Returns
    -------
    pd.DataFrame
        6 rows across 5 customers.
    """
    rows = [
        ("ana@shop.com", "Tech|Travel", "weekly", "2024-01-01 09:00:00"),
        ("ben@shop.com", "Tech|Fitness", "weekly", "2024-01-02 09:00:00"),
        ("cy@shop.com", "Tech|Travel|Fitness", "daily", "2024-01-03 09:00:00"),
        ("dee@shop.com", "Fashion|Home", "monthly", "2024-01-04 09:00:00"),
        ("eve@shop.com", "Fitness", "weekly", "2024-01-05 09:00:00"),
        ("ana@shop.com", "Tech|Travel|Home", "weekly", "2024-02-01 09:00:00"),
    ]
    return pd.DataFrame(rows, columns=["email", "interests", "frequency", "created_at"])


def generate_orders() -> pd.DataFrame:
    """
    Orders placed by the customers of ``generate_preference_updates``.

    Columns: ``order_id``, ``email``, ``amount_cents``, ``currency``, ``category``,
    ``status``, ``created_at``

    Returns
    -------
    pd.DataFrame
        8 rows, 7 of them completed.
    """
    rows = [
        ("O1", "ana@shop.com", 12000, "Electronics", "completed", "2024-01-10 12:00:00"),
        ("O2", "ben@shop.com", 4500, "Electronics", "completed", "2024-01-11 12:00:00"),
        ("O3", "cy@shop.com", 3000, "Sports", "completed", "2024-01-12 12:00:00"),
        ("O4", "cy@shop.com", 9000, "Electronics", "completed", "2024-01-13 12:00:00"),
        ("O5", "dee@shop.com", 2500, "Home", "completed", "2024-01-14 12:00:00"),
        ("O6", "dee@shop.com", 8000, "Fashion", "completed", "2024-01-15 12:00:00"),
        ("O7", "eve@shop.com", 1500, "Sports", "completed", "2024-01-16 12:00:00"),
        ("O8", "ben@shop.com", 2000, "Sports", "pending", "2024-01-17 12:00:00"),
    ]
    df = pd.DataFrame(rows, columns=["order_id", "email", "amount_cents", "category", "status", "created_at"])
    df.insert(3, "currency", "usd")
    return df
