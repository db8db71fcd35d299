from __future__ import annotations
import heapq
import itertools
from typing import Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class BoundedTopK(Generic[T]):
    """
    Keeps the ``k`` highest-priority values seen in a stream.

    Backed by a size-``k`` min-heap, so ``insert`` is O(log k) and ``drain`` is
    O(k log k). A new value replaces the retained minimum only when its priority
    is strictly greater. Among equal priorities the earlier insert is kept and
    drained first; values themselves are never compared.
    """

    def __init__(self, k: int):
        if k <= 0: raise ValueError(f"k must be positive, got {k}")
        self.k = k
        self._heap: List[Tuple[float, int, T]] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def peek(self) -> Optional[Tuple[T, float]]:
        if not self._heap: return None
        priority, _, value = self._heap[0]
        return value, priority

    def insert(self, value: T, priority: float) -> bool:
        # negated sequence: among equal priorities the latest insert sits at the heap top
        entry = (priority, -next(self._seq), value)
        if len(self._heap) < self.k:
            heapq.heappush(self._heap, entry)
            return True
        if priority > self._heap[0][0]:
            heapq.heapreplace(self._heap, entry)
            return True
        return False

    def drain(self) -> List[Tuple[T, float]]:
        out = []
        while self._heap:
            priority, _, value = heapq.heappop(self._heap)
            out.append((value, priority))
        out.reverse()
        return out
