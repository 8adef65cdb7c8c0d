import random

import pytest

from fieldroute.models.domain import Job, Location, TimeWindowSpec
from fieldroute.services.routing.models import TravelEstimate, TravelMatrix
from fieldroute.services.routing.optimizer import (
    build_route_matrix,
    nearest_neighbor_with_time_windows,
    optimize_route,
    or_opt_improve,
    two_opt_improve,
)
from fieldroute.services.routing.scoring import score_route
from fieldroute.services.routing.travel import TravelTimeEstimator


def _line_matrix(job_ids, spacing=10):
    """Stops evenly spaced along a line, start node at position 0."""
    nodes = ("__start__", *job_ids)
    cells = [
        [
            TravelEstimate(duration_minutes=abs(row - col) * spacing, distance_miles=abs(row - col) * 5.0, source="provider")
            for col in range(len(nodes))
        ]
        for row in range(len(nodes))
    ]
    return TravelMatrix(nodes=nodes, cells=cells)


def test_emergency_job_is_moved_first():
    jobs = [Job(job_id="A", urgency="standard"), Job(job_id="B", urgency="emergency")]

    result = optimize_route(jobs, start_minute=480)

    assert [job.job_id for job in result.route] == ["B", "A"]
    assert result.optimized_order == ["B", "A"]


def test_or_opt_relocates_urgent_job_forward():
    jobs = [Job(job_id="A", urgency="standard"), Job(job_id="B", urgency="emergency")]

    improved = or_opt_improve(jobs, 480)

    assert [job.job_id for job in improved] == ["B", "A"]


def test_two_job_optimal_route_is_unchanged():
    jobs = [Job(job_id="A"), Job(job_id="B")]
    matrix = _line_matrix(["A", "B"])

    assert [job.job_id for job in two_opt_improve(jobs, 480, matrix)] == ["A", "B"]
    assert [job.job_id for job in or_opt_improve(jobs, 480, matrix)] == ["A", "B"]


def test_two_opt_untangles_line():
    ids = ["J1", "J2", "J3", "J4", "J5"]
    by_id = {job_id: Job(job_id=job_id) for job_id in ids}
    matrix = _line_matrix(ids)
    tangled = [by_id[job_id] for job_id in ["J1", "J4", "J3", "J2", "J5"]]

    improved = two_opt_improve(tangled, 480, matrix)

    assert [job.job_id for job in improved] == ids


def test_two_opt_with_zero_iterations_keeps_route():
    ids = ["J1", "J2", "J3", "J4", "J5"]
    by_id = {job_id: Job(job_id=job_id) for job_id in ids}
    tangled = [by_id[job_id] for job_id in ["J1", "J4", "J3", "J2", "J5"]]

    improved = two_opt_improve(tangled, 480, _line_matrix(ids), max_iterations=0)

    assert [job.job_id for job in improved] == ["J1", "J4", "J3", "J2", "J5"]


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_local_search_never_regresses(seed):
    rng = random.Random(seed)
    ids = [f"J{index}" for index in range(6)]
    urgencies = ["emergency", "urgent", "standard", "flexible"]
    jobs = [Job(job_id=job_id, urgency=rng.choice(urgencies), estimated_duration=rng.choice([30, 60, 90])) for job_id in ids]
    rng.shuffle(jobs)
    matrix = _line_matrix(ids, spacing=rng.randint(5, 20))
    before = score_route(jobs, 480, matrix).total

    after_two_opt = two_opt_improve(jobs, 480, matrix)
    after_or_opt = or_opt_improve(after_two_opt, 480, matrix)

    assert score_route(after_two_opt, 480, matrix).total <= before
    assert score_route(after_or_opt, 480, matrix).total <= score_route(after_two_opt, 480, matrix).total
    assert sorted(job.job_id for job in after_or_opt) == sorted(ids)


def test_nearest_neighbor_respects_hard_window():
    jobs = [
        Job(job_id="late", time_window=TimeWindowSpec(type="hard", start=720, end=780)),
        Job(job_id="now", time_window=TimeWindowSpec(type="hard", start=480, end=520)),
    ]

    route = nearest_neighbor_with_time_windows(jobs, 480)

    assert [job.job_id for job in route] == ["now", "late"]


def test_optimize_empty_route():
    result = optimize_route([], start_minute=540)

    assert result.route == []
    assert result.score == 0
    assert result.end_minute == 540
    assert result.improvement_percent == 0


def test_optimize_route_reports_arrivals_and_improvement():
    start = Location(lat=40.0, lng=-74.0)
    jobs = [
        Job(job_id="far", location=Location(lat=40.2, lng=-74.0)),
        Job(job_id="near", location=Location(lat=40.05, lng=-74.0)),
    ]

    result = optimize_route(jobs, start_location=start, start_minute=480, estimator=TravelTimeEstimator())

    assert result.optimized_order == ["near", "far"]
    assert [arrival.job_id for arrival in result.arrivals] == ["near", "far"]
    assert result.improvement_percent >= 0
    assert set(result.initial_order) == {"far", "near"}


def test_duplicate_job_ids_are_rejected():
    with pytest.raises(ValueError):
        build_route_matrix([Job(job_id="A"), Job(job_id="A")], None)
