from .api import Prefscope
from .config import EngineConfig
from .exceptions import SnapshotLookupError
from .core.connection import DuckDBConnection
from .core.records import PreferenceRecord, OrderRecord, EmailProfile, Snapshot
from .core.results import Recommendation, FrequentItemset, SegmentOpportunity, CentralityScore, FullReport
from .core.store import RecordStore, InMemoryRecordStore, DuckDBRecordStore, read_snapshot
from .structures.topk import BoundedTopK
from .mining.cooccurrence import CoOccurrenceIndex
from .mining.frequent_itemsets import FrequentItemsets
from .mining.centrality import InterestCentrality
from .recommenders.popularity import PopularityRecommender
from .recommenders.engine import RecommendationEngine
from .datasets import (
    generate_preference_updates,
    generate_orders,
    generate_customer_snapshot,
)

def load(preferences=None, orders=None, **kwargs) -> Prefscope:
    engine = Prefscope(**kwargs)
    if preferences is not None: engine.load_preferences(preferences)
    if orders is not None: engine.load_orders(orders)
    return engine

def connect(database=":memory:", **kwargs) -> Prefscope:
    return Prefscope(database=database, **kwargs)

__all__ = [
    "Prefscope",
    "load",
    "connect",
    "EngineConfig",
    "SnapshotLookupError",
    "DuckDBConnection",
    "PreferenceRecord",
    "OrderRecord",
    "EmailProfile",
    "Snapshot",
    "Recommendation",
    "FrequentItemset",
    "SegmentOpportunity",
    "CentralityScore",
    "FullReport",
    "RecordStore",
    "InMemoryRecordStore",
    "DuckDBRecordStore",
    "read_snapshot",
    "BoundedTopK",
    "CoOccurrenceIndex",
    "FrequentItemsets",
    "InterestCentrality",
    "PopularityRecommender",
    "RecommendationEngine",
    # Datasets
    "generate_preference_updates",
    "generate_orders",
    "generate_customer_snapshot",
]
