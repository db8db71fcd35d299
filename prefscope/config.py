from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, Dict

from prefscope.core.records import COMPLETED


@dataclass(frozen=True)
class EngineConfig:
    exploration_boost: float = 1.5
    completed_status: str = COMPLETED
    high_value_threshold_cents: int = 10000
    diverse_interest_min: int = 3
    segment_min_support: float = 0.05
    segment_limit: int = 10
    report_recommendations: int = 5
    report_min_support: float = 0.05
    report_patterns: int = 10
    report_centrality: int = 5

    def __post_init__(self):
        if self.exploration_boost < 0: raise ValueError("exploration_boost must be non-negative")
        if self.high_value_threshold_cents < 0: raise ValueError("high_value_threshold_cents must be non-negative")
        for name in ("diverse_interest_min", "segment_limit", "report_recommendations", "report_patterns", "report_centrality"):
            if getattr(self, name) <= 0: raise ValueError(f"{name} must be positive")
        for name in ("segment_min_support", "report_min_support"):
            if not (0 <= getattr(self, name) <= 1): raise ValueError(f"{name} must be in [0, 1]")

    @classmethod
    def from_kwargs(cls, **kwargs: Any) -> EngineConfig:
        known = {f.name for f in fields(cls)}
        unknown = set(kwargs) - known
        if unknown: raise ValueError(f"Unknown config options: {sorted(unknown)}")
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
