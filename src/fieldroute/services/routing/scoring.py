"""Route scoring. Lower totals are better."""

from __future__ import annotations

from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Job
from ..timeutils import minutes_to_time_str
from .models import (
    DEFAULT_WEIGHTS,
    START_NODE,
    Arrival,
    RouteComparison,
    RouteScore,
    RouteWeights,
    TravelMatrix,
    job_ids,
)
from .time_windows import parse_time_window, time_window_penalty


def leg_minutes(matrix: Optional[TravelMatrix], origin: str, destination: str) -> float:
    """Matrix duration for a leg; traffic-adjusted when the provider supplied it."""
    if matrix is not None:
        cell = matrix.get(origin, destination)
        if cell is not None:
            return cell.effective_minutes
    return settings.default_leg_minutes


def score_route(
    route: Sequence[Job],
    start_minute: float,
    matrix: Optional[TravelMatrix] = None,
    weights: RouteWeights = DEFAULT_WEIGHTS,
    start_node: str = START_NODE,
) -> RouteScore:
    if not route:
        return RouteScore(
            total=0.0,
            breakdown={},
            total_travel_time=0.0,
            total_time_window_penalty=0.0,
            total_urgency_score=0.0,
            arrivals=[],
            end_minute=start_minute,
        )

    total_travel = 0.0
    total_penalty = 0.0
    total_urgency = 0.0
    clock = float(start_minute)
    previous = start_node
    arrivals: list[Arrival] = []

    for position, job in enumerate(route):
        travel = leg_minutes(matrix, previous, job.job_id)
        total_travel += travel
        arrival = clock + travel

        penalty = time_window_penalty(arrival, parse_time_window(job))
        total_penalty += penalty
        # Later positions cost more for heavier urgency.
        total_urgency += position * job.urgency_weight

        arrivals.append(
            Arrival(
                job_id=job.job_id,
                arrival_minute=arrival,
                arrival_time=minutes_to_time_str(arrival),
                travel_minutes=travel,
                window_penalty=penalty,
            )
        )
        clock = arrival + job.estimated_duration + settings.buffer_minutes
        previous = job.job_id

    breakdown = {
        "travel_time": total_travel * weights.travel_time,
        "time_window_penalty": total_penalty * weights.time_window,
        "urgency_score": total_urgency * weights.urgency,
    }
    return RouteScore(
        total=sum(breakdown.values()),
        breakdown=breakdown,
        total_travel_time=total_travel,
        total_time_window_penalty=total_penalty,
        total_urgency_score=total_urgency,
        arrivals=arrivals,
        end_minute=clock,
    )


def compare_routes(
    route_a: Sequence[Job],
    route_b: Sequence[Job],
    start_minute: float,
    matrix: Optional[TravelMatrix] = None,
    weights: RouteWeights = DEFAULT_WEIGHTS,
) -> RouteComparison:
    """Side-by-side scoring of two orderings of the same work."""
    score_a = score_route(route_a, start_minute, matrix, weights)
    score_b = score_route(route_b, start_minute, matrix, weights)

    improvement = score_a.total - score_b.total
    percent = round(improvement / score_a.total * 100, 1) if score_a.total > 0 else 0.0
    return RouteComparison(
        order_a=job_ids(route_a),
        order_b=job_ids(route_b),
        score_a=score_a,
        score_b=score_b,
        time_saved_minutes=round(score_a.total_travel_time - score_b.total_travel_time),
        time_window_improved=score_a.total_time_window_penalty > score_b.total_time_window_penalty,
        total_score_improvement=improvement,
        percent_improvement=percent,
        recommendation="B" if score_b.total < score_a.total else "A",
    )
