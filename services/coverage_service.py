import math
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type

from models.coverage_report import Badge, CoverageReport, CoverageRow, OverRepresentationFlag
from models.image_slot import AnnotatedImage
from models.metadata import Action, Angle, Environment, Lighting, Mood, Category

SUFFICIENT_COUNT = 3

NO_METADATA_MESSAGE = "No images with metadata. Generate or add metadata first."
SOLID_COVERAGE_MESSAGE = "Coverage looks solid. Maintain balance while adding new concepts."


class Dimension:
    def __init__(self, key: str, label: str, enum: Type[Category],
                 getter: Callable[[AnnotatedImage], Category]):
        self.key = key
        self.label = label
        self.enum = enum
        self.getter = getter

    @property
    def values(self) -> List[str]:
        return [member.value for member in self.enum.categories()]


# Recommendation order follows this tuple.
DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension("angle", "Angles", Angle, lambda im: im.metadata.angle),
    Dimension("lighting", "Lighting", Lighting, lambda im: im.metadata.lighting),
    Dimension("environment", "Environment", Environment, lambda im: im.metadata.environment),
    Dimension("action", "Action", Action, lambda im: im.metadata.action),
    Dimension("mood", "Mood", Mood, lambda im: im.metadata.mood),
)

DOMINANT_SHARE_PCT = 50     # lighting / environment
FRONTAL_SHARE_PCT = 60
STAND_SHARE_PCT = 70


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def badge_for(count: int) -> Badge:
    if count >= SUFFICIENT_COUNT:
        return Badge.SUFFICIENT
    if count >= 1:
        return Badge.PARTIAL
    return Badge.MISSING


def needed_for(count: int) -> int:
    return max(0, SUFFICIENT_COUNT - count)


class CoverageService:
    """
    Checks that the five orthogonal dimensions (angle, lighting, environment,
    action, mood) each have enough samples per value, flags dominant values
    and turns the gaps into ordered recommendations.
    """

    def __init__(self, dimensions: Tuple[Dimension, ...] = DIMENSIONS):
        self.dimensions = dimensions

    @staticmethod
    def tally(dimension: Dimension, images: List[AnnotatedImage]) -> Dict[str, int]:
        counts = {value: 0 for value in dimension.values}
        for im in images:
            value = dimension.getter(im).value
            if value in counts:
                counts[value] += 1
        return counts

    @staticmethod
    def build_rows(counts: Dict[str, int]) -> Dict[str, CoverageRow]:
        return {
            value: CoverageRow(value=value, count=count, badge=badge_for(count), needed=needed_for(count))
            for value, count in counts.items()
        }

    def score(self, images: Iterable[Optional[AnnotatedImage]]) -> CoverageReport:
        detected = [im for im in images if im is not None and im.is_detected]
        total = len(detected)

        counts = {dim.key: self.tally(dim, detected) for dim in self.dimensions}
        per_dimension = {key: self.build_rows(c) for key, c in counts.items()}

        if total == 0:
            return CoverageReport(
                total_detected=0,
                per_dimension=per_dimension,
                coverage_pct={dim.key: 0.0 for dim in self.dimensions},
                overall_orthogonal_pct=0,
                recommendations=[NO_METADATA_MESSAGE],
            )

        coverage_pct: Dict[str, float] = {}
        for dim in self.dimensions:
            covered = sum(1 for c in counts[dim.key].values() if c >= SUFFICIENT_COUNT)
            coverage_pct[dim.key] = 100 * covered / len(dim.values)
        overall = round_half_up(sum(coverage_pct.values()) / len(coverage_pct))

        flags = self.over_representation(counts, total)

        recommendations: List[str] = []
        for dim in self.dimensions:
            recommendations.extend(self.gap_recommendations(dim, counts[dim.key]))
        recommendations.extend(flag.suggestion for flag in flags)
        if not recommendations:
            recommendations.append(SOLID_COVERAGE_MESSAGE)

        return CoverageReport(
            total_detected=total,
            per_dimension=per_dimension,
            coverage_pct=coverage_pct,
            overall_orthogonal_pct=overall,
            flags=flags,
            recommendations=recommendations,
        )

    @staticmethod
    def gap_recommendations(dimension: Dimension, counts: Dict[str, int]) -> List[str]:
        recs = []
        misses = [v for v, c in counts.items() if c == 0]
        lows = [v for v, c in counts.items() if 0 < c < SUFFICIENT_COUNT]
        if misses:
            recs.append(f"{dimension.label}: missing {', '.join(misses)} → add {SUFFICIENT_COUNT} each.")
        if lows:
            parts = ", ".join(f"{v} (+{needed_for(counts[v])})" for v in lows)
            recs.append(f"{dimension.label}: under-represented {parts}")
        return recs

    def over_representation(self, counts: Dict[str, Dict[str, int]], total: int) -> List[OverRepresentationFlag]:
        """
        Advisory flags, in the order lighting, environment, angle, action.
        Shares are whole percentages of the detected images.
        """
        def share(count: int) -> int:
            return round_half_up(count / total * 100)

        def weaker(dim_counts: Dict[str, int], skip: str) -> List[str]:
            return [v for v, c in dim_counts.items() if v != skip and c < SUFFICIENT_COUNT]

        flags: List[OverRepresentationFlag] = []

        lighting = counts.get("lighting", {})
        for value, count in lighting.items():
            pct = share(count)
            if pct > DOMINANT_SHARE_PCT:
                alternatives = weaker(lighting, value) or [v for v in lighting if v != value]
                flags.append(OverRepresentationFlag(
                    "lighting", value, pct,
                    f"Too many {value} shots ({pct}%) → add {'/'.join(alternatives)} lighting",
                ))

        environment = counts.get("environment", {})
        for value, count in environment.items():
            pct = share(count)
            if pct > DOMINANT_SHARE_PCT:
                alternatives = weaker(environment, value) or [v for v in environment if v != value]
                flags.append(OverRepresentationFlag(
                    "environment", value, pct,
                    f"{value} dominates ({pct}%) → add {'/'.join(alternatives)}",
                ))

        angle = counts.get("angle", {})
        if angle:
            pct = share(angle.get(Angle.FRONTAL.value, 0))
            under = weaker(angle, Angle.FRONTAL.value)
            if pct > FRONTAL_SHARE_PCT and under:
                flags.append(OverRepresentationFlag(
                    "angle", Angle.FRONTAL.value, pct,
                    f"Frontal {pct}% & other angles low → add {'/'.join(under)}",
                ))

        action = counts.get("action", {})
        if action:
            pct = share(action.get(Action.STAND.value, 0))
            diversify = weaker(action, Action.STAND.value)
            if pct > STAND_SHARE_PCT and diversify:
                flags.append(OverRepresentationFlag(
                    "action", Action.STAND.value, pct,
                    f"Stand {pct}% → add {'/'.join(diversify)}",
                ))

        return flags


def score_coverage(images: Iterable[Optional[AnnotatedImage]]) -> CoverageReport:
    return CoverageService().score(images)
