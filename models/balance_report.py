from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass
class DistributionRow:
    """
    One shot-type bucket measured against its ideal share of the dataset.
    Percentages are in [0, 100].
    """
    bucket: str
    count: int
    actual_pct: float
    ideal_pct: float
    target_low: float
    target_high: float
    delta_pct: float     # actual - ideal
    in_range: bool
    stars: int           # 0..5
    needed_diff: int     # >0 add images, <0 excess images, 0 in range


@dataclass
class BalanceReport:
    total_detected: int
    rows: List[DistributionRow] = field(default_factory=list)
    overall_stars: float = 0.0
    overall_grade: str = "E"

    def row(self, bucket: str) -> DistributionRow:
        for r in self.rows:
            if r.bucket == bucket:
                return r
        raise KeyError(bucket)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
