from __future__ import annotations
import logging
from typing import Dict, List, Set

from prefscope.core.records import Snapshot
from prefscope.core.results import CentralityScore

logger = logging.getLogger(__name__)


class InterestCentrality:
    """Normalized degree of each interest in the interest <-> {customer, category} graph."""

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot

    def adjacency(self) -> Dict[str, Set[str]]:
        adj: Dict[str, Set[str]] = {}
        for pref in self.snapshot.preferences:
            for interest in pref.interests:
                adj.setdefault(interest, set()).add(f"email:{pref.email}")
        current = self.snapshot.current_interests_by_email()
        for order in self.snapshot.completed_orders():
            for interest in current.get(order.email, ()):
                adj.setdefault(interest, set()).add(f"category:{order.category}")
        return adj

    def rank(self) -> List[CentralityScore]:
        adj = self.adjacency()
        max_connections = max([1] + [len(c) for c in adj.values()])
        scores = [CentralityScore(i, len(c) / max_connections, len(c)) for i, c in adj.items()]
        logger.debug("Ranked %d interests (max degree %d)", len(scores), max_connections)
        return sorted(scores, key=lambda s: (-s.centrality, s.interest))
