import pytest

from models.coverage_report import Badge
from models.metadata import Action, Angle, Environment, Lighting, Mood
from services.coverage_service import (
    NO_METADATA_MESSAGE,
    SOLID_COVERAGE_MESSAGE,
    CoverageService,
    badge_for,
    score_coverage,
)


def uniform(make_slot, n, **fields):
    fields.setdefault("shot", "close")
    return [make_slot(**fields) for _ in range(n)]


def balanced_dataset(make_slot, n=24):
    angles = [v.value for v in Angle.categories()]
    lightings = [v.value for v in Lighting.categories()]
    environments = [v.value for v in Environment.categories()]
    actions = [v.value for v in Action.categories()]
    moods = [v.value for v in Mood.categories()]
    return [
        make_slot(
            shot="medium",
            angle=angles[i % len(angles)],
            lighting=lightings[i % len(lightings)],
            environment=environments[i % len(environments)],
            action=actions[i % len(actions)],
            mood=moods[i % len(moods)],
        )
        for i in range(n)
    ]


@pytest.mark.parametrize("count, badge, needed", [
    (0, Badge.MISSING, 3),
    (1, Badge.PARTIAL, 2),
    (2, Badge.PARTIAL, 1),
    (3, Badge.SUFFICIENT, 0),
])
def test_badge_boundaries(make_slot, count, badge, needed):
    assert badge_for(count) is badge

    images = uniform(make_slot, count, lighting="night") + uniform(make_slot, 5, lighting="studio")
    row = score_coverage(images).per_dimension["lighting"]["night"]
    assert row.count == count
    assert row.badge is badge
    assert row.needed == needed


def test_no_detected_images_short_circuits(make_slot):
    report = score_coverage([make_slot(angle="frontal"), None])

    assert report.total_detected == 0
    assert report.recommendations == [NO_METADATA_MESSAGE]
    assert report.flags == []
    assert report.overall_orthogonal_pct == 0
    assert all(row.badge is Badge.MISSING for row in report.per_dimension["angle"].values())


def test_rows_follow_category_order(make_slot):
    report = score_coverage(uniform(make_slot, 1))
    assert list(report.per_dimension["angle"]) == [
        "frontal", "three-quarter", "profile", "back", "low-angle", "high-angle",
    ]
    assert list(report.per_dimension) == ["angle", "lighting", "environment", "action", "mood"]


def test_monotonous_dataset(make_slot):
    images = uniform(
        make_slot, 4,
        angle="frontal", lighting="daylight", environment="neutral", mood="neutral", action="stand",
    )
    report = score_coverage(images)

    assert report.coverage_pct["lighting"] == 20
    assert report.coverage_pct["mood"] == 12.5
    assert report.overall_orthogonal_pct == 16
    assert report.recommendations == [
        "Angles: missing three-quarter, profile, back, low-angle, high-angle → add 3 each.",
        "Lighting: missing indoor, night, sunset, studio → add 3 each.",
        "Environment: missing indoor, outdoor, nature, city, sky → add 3 each.",
        "Action: missing sit, walk, gesture, hold-object, interact, none → add 3 each.",
        "Mood: missing smiling, serious, surprised, dreamy, stern, relaxed, contemplative → add 3 each.",
        "Too many daylight shots (100%) → add indoor/night/sunset/studio lighting",
        "neutral dominates (100%) → add indoor/outdoor/nature/city/sky",
        "Frontal 100% & other angles low → add three-quarter/profile/back/low-angle/high-angle",
        "Stand 100% → add sit/walk/gesture/hold-object/interact/none",
    ]
    assert [(f.dimension, f.value, f.pct) for f in report.flags] == [
        ("lighting", "daylight", 100),
        ("environment", "neutral", 100),
        ("angle", "frontal", 100),
        ("action", "stand", 100),
    ]


def test_under_represented_values_list_missing_counts(make_slot):
    images = uniform(make_slot, 2, angle="frontal") + uniform(make_slot, 1, angle="profile")
    angle_recs = [r for r in score_coverage(images).recommendations if r.startswith("Angles")]

    assert angle_recs == [
        "Angles: missing three-quarter, back, low-angle, high-angle → add 3 each.",
        "Angles: under-represented frontal (+1), profile (+2)",
    ]


def test_frontal_share_at_threshold_is_not_flagged(make_slot):
    # 6 of 10 frontal is exactly 60%
    images = uniform(make_slot, 6, angle="frontal") + uniform(make_slot, 4, angle="profile")
    flags = score_coverage(images).flags
    assert not [f for f in flags if f.dimension == "angle"]


def test_stand_flag_needs_a_weaker_action(make_slot):
    images = uniform(make_slot, 8, action="stand") + uniform(make_slot, 2, action="sit")
    flags = [f for f in score_coverage(images).flags if f.dimension == "action"]

    assert len(flags) == 1
    assert flags[0].pct == 80
    assert flags[0].suggestion == "Stand 80% → add sit/walk/gesture/hold-object/interact/none"


def test_solid_coverage(make_slot):
    report = score_coverage(balanced_dataset(make_slot))

    assert report.total_detected == 24
    assert report.overall_orthogonal_pct == 100
    assert report.flags == []
    assert report.recommendations == [SOLID_COVERAGE_MESSAGE]


def test_scoring_is_idempotent(make_slot):
    images = balanced_dataset(make_slot, n=10)
    service = CoverageService()
    assert service.score(images).to_dict() == service.score(images).to_dict()
