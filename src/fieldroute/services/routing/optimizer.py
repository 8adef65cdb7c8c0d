"""Single-route optimization: time-window-aware construction plus 2-opt and or-opt local search.

Every candidate move is judged by re-scoring the full route with
:func:`score_route`. Routes are short (a working day for one technician), so the
quadratic neighbourhoods stay cheap and the scores stay directly comparable with
what callers see in the final result.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Job, Location
from .models import DEFAULT_WEIGHTS, START_NODE, RouteResult, RouteWeights, TravelMatrix, job_ids
from .scoring import leg_minutes, score_route
from .time_windows import parse_time_window, time_window_penalty
from .travel import TravelTimeEstimator

URGENCY_CONSTRUCTION_BONUS = 10

logger = logging.getLogger(__name__)


def build_route_matrix(
    jobs: Sequence[Job],
    start_location: Location | None,
    estimator: TravelTimeEstimator | None = None,
    extra_nodes: Sequence[tuple[str, Location | None]] = (),
    departure_time=None,
) -> TravelMatrix:
    """One matrix request covering the start point, every job and any extra origins."""
    ids = [job.job_id for job in jobs]
    if len(set(ids)) != len(ids):
        raise ValueError("Job ids must be unique within a routing request.")
    estimator = estimator or TravelTimeEstimator()
    nodes = [(START_NODE, start_location), *extra_nodes, *((job.job_id, job.location) for job in jobs)]
    return estimator.build_matrix(nodes, departure_time=departure_time)


def nearest_neighbor_with_time_windows(
    jobs: Sequence[Job],
    start_minute: float,
    matrix: Optional[TravelMatrix] = None,
    weights: RouteWeights = DEFAULT_WEIGHTS,
    start_node: str = START_NODE,
) -> list[Job]:
    """Greedy construction; urgency earns a flat bonus instead of a full re-score."""
    remaining = list(jobs)
    route: list[Job] = []
    clock = float(start_minute)
    current = start_node

    while remaining:
        best_position = 0
        best_cost = float("inf")
        for position, job in enumerate(remaining):
            travel = leg_minutes(matrix, current, job.job_id)
            penalty = time_window_penalty(clock + travel, parse_time_window(job))
            cost = (
                travel * weights.travel_time
                + penalty * weights.time_window
                - job.urgency_weight * URGENCY_CONSTRUCTION_BONUS
            )
            if cost < best_cost:
                best_cost = cost
                best_position = position

        chosen = remaining.pop(best_position)
        travel = leg_minutes(matrix, current, chosen.job_id)
        clock += travel + chosen.estimated_duration + settings.buffer_minutes
        current = chosen.job_id
        route.append(chosen)

    return route


def two_opt_improve(
    route: Sequence[Job],
    start_minute: float,
    matrix: Optional[TravelMatrix] = None,
    weights: RouteWeights = DEFAULT_WEIGHTS,
    max_iterations: int | None = None,
    start_node: str = START_NODE,
) -> list[Job]:
    """Reverse segments [i+1..j] while that lowers the route score."""
    best = list(route)
    if len(best) < 3:
        return best

    max_iterations = settings.two_opt_max_iterations if max_iterations is None else max_iterations
    best_score = score_route(best, start_minute, matrix, weights, start_node).total
    improved = True
    iterations = 0

    while improved and iterations < max_iterations:
        improved = False
        iterations += 1
        for i in range(len(best) - 1):
            for j in range(i + 2, len(best)):
                candidate = best[: i + 1] + best[i + 1 : j + 1][::-1] + best[j + 1 :]
                candidate_score = score_route(candidate, start_minute, matrix, weights, start_node).total
                if candidate_score < best_score:
                    best = candidate
                    best_score = candidate_score
                    improved = True

    return best


def or_opt_improve(
    route: Sequence[Job],
    start_minute: float,
    matrix: Optional[TravelMatrix] = None,
    weights: RouteWeights = DEFAULT_WEIGHTS,
    tolerance: float | None = None,
    start_node: str = START_NODE,
) -> list[Job]:
    """Relocate single jobs; the scan restarts from the top after every accepted move."""
    best = list(route)
    if len(best) < 2:
        return best

    tolerance = settings.or_opt_tolerance if tolerance is None else tolerance
    best_score = score_route(best, start_minute, matrix, weights, start_node).total
    improved = True

    while improved:
        improved = False
        for i in range(len(best)):
            for j in range(len(best) + 1):
                if j == i or j == i + 1:
                    continue
                candidate = best[:i] + best[i + 1 :]
                candidate.insert(j - 1 if j > i else j, best[i])
                candidate_score = score_route(candidate, start_minute, matrix, weights, start_node).total
                if candidate_score < best_score - tolerance:
                    best = candidate
                    best_score = candidate_score
                    improved = True
                    break
            if improved:
                break

    return best


def optimize_route(
    jobs: Sequence[Job],
    start_location: Location | None = None,
    start_minute: float | None = None,
    matrix: Optional[TravelMatrix] = None,
    weights: RouteWeights = DEFAULT_WEIGHTS,
    estimator: TravelTimeEstimator | None = None,
) -> RouteResult:
    """Construct, then improve, one technician's route for the day."""
    start_minute = settings.default_start_minute if start_minute is None else start_minute
    if not jobs:
        return RouteResult(
            route=[],
            total_travel_time=0.0,
            total_time_window_penalty=0.0,
            arrivals=[],
            end_minute=start_minute,
            score=0.0,
            score_breakdown={},
            improvement_percent=0.0,
            initial_order=[],
            optimized_order=[],
        )

    if matrix is None:
        matrix = build_route_matrix(jobs, start_location, estimator)

    initial = nearest_neighbor_with_time_windows(jobs, start_minute, matrix, weights)
    initial_score = score_route(initial, start_minute, matrix, weights)

    improved = two_opt_improve(initial, start_minute, matrix, weights)
    improved = or_opt_improve(improved, start_minute, matrix, weights)
    final_score = score_route(improved, start_minute, matrix, weights)

    improvement = 0.0
    if initial_score.total > 0:
        improvement = round((initial_score.total - final_score.total) / initial_score.total * 100, 1)

    logger.info(
        f"Optimized route of {len(jobs)} jobs: score {initial_score.total:.1f} -> {final_score.total:.1f}, "
        f"travel {final_score.total_travel_time:.0f} min"
    )
    return RouteResult(
        route=improved,
        total_travel_time=final_score.total_travel_time,
        total_time_window_penalty=final_score.total_time_window_penalty,
        arrivals=final_score.arrivals,
        end_minute=final_score.end_minute,
        score=final_score.total,
        score_breakdown=final_score.breakdown,
        improvement_percent=improvement,
        initial_order=job_ids(initial),
        optimized_order=job_ids(improved),
    )
