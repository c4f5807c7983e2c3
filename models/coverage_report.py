from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class Badge(str, Enum):
    SUFFICIENT = "sufficient"
    PARTIAL = "partial"
    MISSING = "missing"


@dataclass
class CoverageRow:
    value: str
    count: int
    badge: Badge
    needed: int   # images still required to reach the sufficiency threshold


@dataclass
class OverRepresentationFlag:
    dimension: str
    value: str
    pct: int
    suggestion: str


@dataclass
class CoverageReport:
    """
    Per-value counts for the five orthogonal dimensions plus advice.
    `per_dimension` maps dimension -> value -> row, rows in category order.
    """
    total_detected: int
    per_dimension: Dict[str, Dict[str, CoverageRow]] = field(default_factory=dict)
    coverage_pct: Dict[str, float] = field(default_factory=dict)
    overall_orthogonal_pct: int = 0
    flags: List[OverRepresentationFlag] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_detected": self.total_detected,
            "per_dimension": {
                dim: {
                    value: {"count": row.count, "badge": row.badge.value, "needed": row.needed}
                    for value, row in rows.items()
                }
                for dim, rows in self.per_dimension.items()
            },
            "coverage_pct": dict(self.coverage_pct),
            "overall_orthogonal_pct": self.overall_orthogonal_pct,
            "flags": [
                {"dimension": f.dimension, "value": f.value, "pct": f.pct, "suggestion": f.suggestion}
                for f in self.flags
            ],
            "recommendations": list(self.recommendations),
        }
