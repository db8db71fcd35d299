from __future__ import annotations
import logging
from collections import defaultdict
from typing import Dict, Iterator, Tuple

from prefscope.core.records import Snapshot

logger = logging.getLogger(__name__)


class CoOccurrenceIndex:
    """interest -> category -> number of completed orders by buyers holding the interest."""

    def __init__(self, matrix: Dict[str, Dict[str, int]]):
        self._matrix = matrix

    @classmethod
    def build(cls, snapshot: Snapshot) -> CoOccurrenceIndex:
        interests_by_email = snapshot.interests_by_email()
        matrix: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for order in snapshot.completed_orders():
            for interest in interests_by_email.get(order.email, ()):
                matrix[interest][order.category] += 1
        logger.debug("Built co-occurrence index over %d interests", len(matrix))
        return cls({interest: dict(cats) for interest, cats in matrix.items()})

    def __len__(self) -> int:
        return len(self._matrix)

    def __contains__(self, interest: str) -> bool:
        return interest in self._matrix

    def count(self, interest: str, category: str) -> int:
        return self._matrix.get(interest, {}).get(category, 0)

    def categories_for(self, interest: str) -> Dict[str, int]:
        return dict(self._matrix.get(interest, {}))

    def items(self) -> Iterator[Tuple[str, str, int]]:
        for interest in sorted(self._matrix):
            for category in sorted(self._matrix[interest]):
                yield interest, category, self._matrix[interest][category]

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {interest: dict(cats) for interest, cats in self._matrix.items()}
