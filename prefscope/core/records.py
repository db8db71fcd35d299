from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

COMPLETED = "completed"


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def naive_utc(ts: Optional[datetime]) -> Optional[datetime]:
    """Aware timestamps become naive UTC; naive ones are taken to be UTC already."""
    if ts is None or ts.tzinfo is None: return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def interest_set(interests: Iterable[str]) -> FrozenSet[str]:
    if isinstance(interests, str): interests = [interests]
    return frozenset(i for i in interests if i)


@dataclass(frozen=True)
class PreferenceRecord:
    """One preference declaration. Several per email form that customer's history."""
    id: int
    email: str
    interests: FrozenSet[str]
    frequency: str = "weekly"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "email", normalize_email(self.email))
        object.__setattr__(self, "interests", interest_set(self.interests))
        object.__setattr__(self, "created_at", naive_utc(self.created_at))
        object.__setattr__(self, "updated_at", naive_utc(self.updated_at))

    @property
    def recency_key(self) -> Tuple[datetime, int]:
        return (self.created_at or datetime.min, self.id)


@dataclass(frozen=True)
class OrderRecord:
    id: int
    order_id: str
    email: str
    amount_cents: int
    category: str
    currency: str = "usd"
    status: str = COMPLETED
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.amount_cents < 0: raise ValueError(f"amount_cents must be non-negative, got {self.amount_cents}")
        object.__setattr__(self, "email", normalize_email(self.email))
        object.__setattr__(self, "created_at", naive_utc(self.created_at))


@dataclass
class EmailProfile:
    """Per-customer aggregate rebuilt for every computation."""
    email: str
    interests: Set[str] = field(default_factory=set)
    categories: Set[str] = field(default_factory=set)
    spent_cents: int = 0


@dataclass(frozen=True)
class Snapshot:
    """Both record streams as read once for a single computation."""
    preferences: Tuple[PreferenceRecord, ...] = ()
    orders: Tuple[OrderRecord, ...] = ()
    completed_status: str = COMPLETED

    @classmethod
    def of(cls, preferences: Iterable[PreferenceRecord], orders: Iterable[OrderRecord], completed_status: str = COMPLETED) -> Snapshot:
        return cls(tuple(preferences), tuple(orders), completed_status)

    @property
    def is_empty(self) -> bool:
        return not self.preferences and not self.orders

    def completed_orders(self) -> List[OrderRecord]:
        return [o for o in self.orders if o.status == self.completed_status]

    def interests_by_email(self) -> Dict[str, Set[str]]:
        """Union of interests across every preference record of each email."""
        lookup: Dict[str, Set[str]] = {}
        for pref in self.preferences:
            lookup.setdefault(pref.email, set()).update(pref.interests)
        return lookup

    def current_interests_by_email(self) -> Dict[str, FrozenSet[str]]:
        """Interests of the latest preference record of each email."""
        latest: Dict[str, PreferenceRecord] = {}
        for pref in self.preferences:
            seen = latest.get(pref.email)
            if seen is None or pref.recency_key > seen.recency_key:
                latest[pref.email] = pref
        return {email: pref.interests for email, pref in latest.items()}

    def profiles(self) -> Dict[str, EmailProfile]:
        profiles: Dict[str, EmailProfile] = {}
        for pref in self.preferences:
            profiles.setdefault(pref.email, EmailProfile(pref.email)).interests.update(pref.interests)
        for order in self.completed_orders():
            profile = profiles.setdefault(order.email, EmailProfile(order.email))
            profile.categories.add(order.category)
            profile.spent_cents += order.amount_cents
        return profiles
