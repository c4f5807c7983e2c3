import pytest

from services.balance_service import BalanceService, grade_for, needed_diff_for, score_balance, stars_for


def shots(make_slot, close=0, medium=0, wide=0, extreme=0, unset=0):
    return (
        [make_slot(shot="close") for _ in range(close)]
        + [make_slot(shot="medium") for _ in range(medium)]
        + [make_slot(shot="wide") for _ in range(wide)]
        + [make_slot(shot="extreme-close") for _ in range(extreme)]
        + [make_slot() for _ in range(unset)]
    )


def test_ten_five_five_scores_a_plus(make_slot):
    report = score_balance(shots(make_slot, close=10, medium=5, wide=5))

    assert report.total_detected == 20
    assert [r.actual_pct for r in report.rows] == [50, 25, 25]
    assert all(r.in_range and r.stars == 5 and r.needed_diff == 0 for r in report.rows)
    assert report.overall_stars == 5
    assert report.overall_grade == "A+"


def test_bucket_counts_add_up_to_detected_total(make_slot):
    report = score_balance(shots(make_slot, close=7, medium=3, wide=4, extreme=2, unset=5))

    assert report.total_detected == 16
    assert sum(r.count for r in report.rows) == report.total_detected
    assert sum(r.actual_pct for r in report.rows) == pytest.approx(100)


def test_extreme_close_counts_as_close(make_slot):
    report = score_balance(shots(make_slot, close=1, extreme=3))
    assert report.row("close").count == 4


def test_empty_slots_and_unset_shot_types_are_ignored(make_slot):
    images = shots(make_slot, close=9, medium=5, wide=6, unset=4) + [None, None]
    report = score_balance(images)

    assert report.total_detected == 20
    assert report.row("close").actual_pct == 45


def test_only_close_images(make_slot):
    report = score_balance(shots(make_slot, close=10))
    close, medium, wide = report.rows

    assert close.stars == 0 and close.needed_diff == -5
    assert medium.stars == 1 and medium.needed_diff == 2
    assert wide.stars == 1 and wide.needed_diff == 2
    assert report.overall_stars == pytest.approx(0.55)
    assert report.overall_grade == "E"


def test_empty_input_never_raises():
    report = score_balance([])

    assert report.total_detected == 0
    assert all(r.count == 0 and r.actual_pct == 0 and r.needed_diff == 0 for r in report.rows)
    assert [r.stars for r in report.rows] == [0, 1, 1]


def test_scoring_is_idempotent(make_slot):
    images = shots(make_slot, close=3, medium=8, wide=1)
    service = BalanceService()
    assert service.score(images) == service.score(images)


@pytest.mark.parametrize("actual, expected", [
    (25, 5), (20, 5), (30, 5),
    (33, 4), (35, 4),
    (36, 3), (40, 3),
    (19, 2), (50, 2), (10, 2),
    (51, 1), (60, 1), (0, 1),
    (61, 0), (100, 0),
])
def test_stars_for_wide_bucket(actual, expected):
    assert stars_for(actual, actual - 30, 20, 30) == expected


def test_stars_never_increase_with_distance():
    deltas = [i / 2 for i in range(0, 120)]
    stars = [stars_for(30 + d, d, 20, 30) for d in deltas]
    assert stars == sorted(stars, reverse=True)


def test_needed_diff_moves_to_nearest_edge():
    assert needed_diff_for(10, 20, 30, 10) == 1
    assert needed_diff_for(35, 20, 30, 20) == -1
    assert needed_diff_for(25, 20, 30, 20) == 0
    # 10% of 20 images is exactly 2, not 3
    assert needed_diff_for(30, 40, 50, 20) == 2


@pytest.mark.parametrize("stars, grade", [
    (5, "A+"), (4.5, "A+"), (4.49, "A"), (4, "A"), (3.5, "B"),
    (3.4, "C"), (2.5, "C"), (2, "D"), (1.5, "D"), (1.4, "E"), (0, "E"),
])
def test_grade_thresholds(stars, grade):
    assert grade_for(stars) == grade


def test_report_serializes(make_slot):
    data = score_balance(shots(make_slot, close=2, medium=1)).to_dict()
    assert data["total_detected"] == 3
    assert [r["bucket"] for r in data["rows"]] == ["close", "medium", "wide"]
