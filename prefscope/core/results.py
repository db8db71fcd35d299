from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Tuple
import pyarrow as pa

SINGLE_INTEREST = "single-interest"
INTEREST_PAIR = "interest-pair"
INTEREST_CATEGORY_PAIR = "interest-category-pair"
ITEMSET_KINDS = (SINGLE_INTEREST, INTEREST_PAIR, INTEREST_CATEGORY_PAIR)


@dataclass(frozen=True)
class Recommendation:
    category: str
    score: float
    reason: str


@dataclass(frozen=True)
class FrequentItemset:
    items: Tuple[str, ...]
    support: float
    kind: str
    count: int = 0

    @property
    def itemset(self) -> str:
        return "|".join(self.items)


@dataclass(frozen=True)
class SegmentOpportunity:
    name: str
    criteria: Tuple[str, ...]
    estimated_size: int
    confidence: float


@dataclass(frozen=True)
class CentralityScore:
    interest: str
    centrality: float
    connections: int


@dataclass(frozen=True)
class FullReport:
    email: str
    recommendations: List[Recommendation] = field(default_factory=list)
    segment_opportunities: List[SegmentOpportunity] = field(default_factory=list)
    frequent_patterns: List[FrequentItemset] = field(default_factory=list)
    interest_centrality: List[CentralityScore] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


RECOMMENDATION_SCHEMA = pa.schema([("category", pa.string()), ("score", pa.float64()), ("reason", pa.string())])
ITEMSET_SCHEMA = pa.schema([
    ("itemset", pa.string()), ("items", pa.list_(pa.string())), ("support", pa.float64()),
    ("kind", pa.string()), ("count", pa.int64()), ("length", pa.int32()),
])
SEGMENT_SCHEMA = pa.schema([
    ("name", pa.string()), ("criteria", pa.list_(pa.string())),
    ("estimated_size", pa.int64()), ("confidence", pa.float64()),
])
CENTRALITY_SCHEMA = pa.schema([("interest", pa.string()), ("centrality", pa.float64()), ("connections", pa.int64())])


def _rows(results: Iterable[Any]) -> List[Dict[str, Any]]:
    rows = []
    for r in results:
        row = asdict(r)
        for key, value in row.items():
            if isinstance(value, tuple): row[key] = list(value)
        if isinstance(r, FrequentItemset): row.update(itemset=r.itemset, length=len(r.items))
        rows.append(row)
    return rows


def to_table(results: Iterable[Any], schema: pa.Schema) -> pa.Table:
    rows = _rows(results)
    if not rows: return pa.Table.from_batches([], schema=schema)
    return pa.Table.from_pylist(rows, schema=schema)
