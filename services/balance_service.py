import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from models.balance_report import BalanceReport, DistributionRow
from models.image_slot import AnnotatedImage
from models.metadata import ShotType


@dataclass(frozen=True)
class BucketTarget:
    name: str
    members: Tuple[ShotType, ...]
    ideal_pct: int
    low: int
    high: int


# Ideal percentages double as weights for the overall score and sum to 100.
BUCKET_TARGETS: Tuple[BucketTarget, ...] = (
    BucketTarget("close", (ShotType.CLOSE, ShotType.EXTREME_CLOSE), ideal_pct=45, low=40, high=50),
    BucketTarget("medium", (ShotType.MEDIUM,), ideal_pct=25, low=20, high=30),
    BucketTarget("wide", (ShotType.WIDE,), ideal_pct=30, low=20, high=30),
)

# (max |delta|, stars) checked in order once a bucket is outside its range.
STAR_STEPS: Tuple[Tuple[float, int], ...] = ((5, 4), (10, 3), (20, 2), (30, 1))

# (min overall stars, grade) checked in order.
GRADE_STEPS: Tuple[Tuple[float, str], ...] = (
    (4.5, "A+"),
    (4.0, "A"),
    (3.5, "B"),
    (2.5, "C"),
    (1.5, "D"),
)
LOWEST_GRADE = "E"


def stars_for(actual_pct: float, delta_pct: float, low: float, high: float) -> int:
    if low <= actual_pct <= high:
        return 5
    distance = abs(delta_pct)
    for max_distance, stars in STAR_STEPS:
        if distance <= max_distance:
            return stars
    return 0


def needed_diff_for(actual_pct: float, low: float, high: float, total: int) -> int:
    """
    Signed image count that moves the bucket onto the nearest edge of its range.
    """
    if actual_pct < low:
        # round() strips float noise such as 2.0000000000000004 before ceil
        return math.ceil(round((low - actual_pct) / 100 * total, 9))
    if actual_pct > high:
        return -math.ceil(round((actual_pct - high) / 100 * total, 9))
    return 0


def grade_for(overall_stars: float) -> str:
    for min_stars, grade in GRADE_STEPS:
        if overall_stars >= min_stars:
            return grade
    return LOWEST_GRADE


class BalanceService:
    """
    Scores how close the shot-type mix of a dataset is to the ideal
    close / medium / wide split. Pure: reads its input, keeps no state.
    """

    def __init__(self, targets: Tuple[BucketTarget, ...] = BUCKET_TARGETS):
        self.targets = targets

    @staticmethod
    def detected(images: Iterable[Optional[AnnotatedImage]]) -> List[AnnotatedImage]:
        return [img for img in images if img is not None and img.is_detected]

    def score(self, images: Iterable[Optional[AnnotatedImage]]) -> BalanceReport:
        """
        Args:
            images: annotated images; empty slots (None) and images without a shot type are ignored.

        Returns:
            BalanceReport with one row per bucket, the ideal-weighted star average and its letter grade.
        """
        detected = self.detected(images)
        total = len(detected)

        rows: List[DistributionRow] = []
        weighted = 0
        for target in self.targets:
            count = sum(1 for img in detected if img.metadata.shot_type in target.members)
            actual_pct = 100 * count / total if total else 0.0
            delta_pct = actual_pct - target.ideal_pct
            stars = stars_for(actual_pct, delta_pct, target.low, target.high)
            weighted += stars * target.ideal_pct

            rows.append(DistributionRow(
                bucket=target.name,
                count=count,
                actual_pct=actual_pct,
                ideal_pct=target.ideal_pct,
                target_low=target.low,
                target_high=target.high,
                delta_pct=delta_pct,
                in_range=target.low <= actual_pct <= target.high,
                stars=stars,
                needed_diff=needed_diff_for(actual_pct, target.low, target.high, total),
            ))

        # Integer sum first so e.g. 4/4/4 stars gives exactly 4.0.
        overall_stars = weighted / 100
        return BalanceReport(
            total_detected=total,
            rows=rows,
            overall_stars=overall_stars,
            overall_grade=grade_for(overall_stars),
        )


def score_balance(images: Iterable[Optional[AnnotatedImage]]) -> BalanceReport:
    return BalanceService().score(images)
