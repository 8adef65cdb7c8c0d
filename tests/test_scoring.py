import pytest

from fieldroute.models.domain import Job, TimeWindowSpec
from fieldroute.services.routing.models import TravelEstimate, TravelMatrix
from fieldroute.services.routing.scoring import compare_routes, leg_minutes, score_route


def _matrix(nodes, minutes):
    cells = [
        [TravelEstimate(duration_minutes=minutes[row][col], distance_miles=1.0, source="provider") for col in range(len(nodes))]
        for row in range(len(nodes))
    ]
    return TravelMatrix(nodes=tuple(nodes), cells=cells)


def test_empty_route_scores_zero():
    score = score_route([], 480)

    assert score.total == 0
    assert score.arrivals == []
    assert score.end_minute == 480


def test_single_flexible_job_is_non_negative():
    score = score_route([Job(job_id="J1")], 480)

    assert score.total >= 0
    assert score.total_travel_time == 15
    assert score.arrivals[0].arrival_time == "08:15"
    assert score.end_minute == 480 + 15 + 60 + 15


def test_missing_leg_uses_default_but_zero_leg_is_kept():
    matrix = _matrix(["__start__", "J1"], [[0, 0], [0, 0]])

    assert leg_minutes(matrix, "__start__", "J1") == 0
    assert leg_minutes(matrix, "__start__", "J9") == 15
    assert leg_minutes(None, "__start__", "J1") == 15


def test_traffic_duration_is_preferred():
    cell = TravelEstimate(duration_minutes=10, distance_miles=3.0, source="provider", duration_in_traffic_minutes=25)
    matrix = TravelMatrix(nodes=("__start__", "J1"), cells=[[None, cell], [None, None]])

    assert score_route([Job(job_id="J1")], 480, matrix).total_travel_time == 25


def test_breakdown_applies_weights():
    jobs = [
        Job(job_id="A", urgency="emergency"),
        Job(job_id="B", urgency="emergency", time_window=TimeWindowSpec(type="hard", start=480, end=500)),
    ]
    matrix = _matrix(["__start__", "A", "B"], [[0, 10, 10], [10, 0, 10], [10, 10, 0]])

    score = score_route(jobs, 480, matrix)

    # B arrives at 480 + 10 + 60 + 15 + 10 = 575, 75 minutes late on a hard window.
    assert score.total_time_window_penalty == 375
    assert score.breakdown == {"travel_time": 20, "time_window_penalty": 750, "urgency_score": 15}
    assert score.total == pytest.approx(785)


def test_compare_routes_recommends_better_order():
    jobs = [Job(job_id="A"), Job(job_id="B", urgency="emergency")]

    comparison = compare_routes(jobs, list(reversed(jobs)), 480)

    assert comparison.recommendation == "B"
    assert comparison.order_b == ["B", "A"]
    assert comparison.total_score_improvement == pytest.approx(13.5)
    assert comparison.time_saved_minutes == 0
