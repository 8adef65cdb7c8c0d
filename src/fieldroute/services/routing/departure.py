"""Traffic-aware departure time selection for an already-ordered route."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Sequence

from ...config import settings
from ...models.domain import Job, Location
from ..timeutils import minutes_to_time, minutes_to_time_str, resolve_timezone
from .models import DEFAULT_WEIGHTS, START_NODE, DepartureOption, DepartureSelection, RouteWeights
from .optimizer import build_route_matrix
from .scoring import score_route
from .travel import TravelTimeEstimator

logger = logging.getLogger(__name__)


def find_best_departure_time(
    route: Sequence[Job],
    start_location: Location | None,
    day: date,
    estimator: TravelTimeEstimator | None = None,
    departure_options: Sequence[int] | None = None,
    weights: RouteWeights = DEFAULT_WEIGHTS,
) -> DepartureSelection:
    default_minute = settings.default_start_minute
    if not route:
        return DepartureSelection(best_minute=default_minute, best_time=minutes_to_time_str(default_minute), results=[])

    estimator = estimator or TravelTimeEstimator()
    options = tuple(departure_options or settings.departure_options)
    zone = resolve_timezone()
    results: list[DepartureOption] = []

    for minute in options:
        departure = datetime.combine(day, minutes_to_time(minute), tzinfo=zone)
        matrix = build_route_matrix(route, start_location, estimator, departure_time=departure)
        score = score_route(route, minute, matrix, weights)

        free_flow = 0.0
        previous = START_NODE
        for job in route:
            cell = matrix.get(previous, job.job_id)
            if cell is not None:
                free_flow += cell.duration_minutes
            previous = job.job_id

        results.append(
            DepartureOption(
                departure_minute=minute,
                departure_time=minutes_to_time_str(minute),
                total_travel_time=free_flow,
                total_travel_time_in_traffic=score.total_travel_time,
                score=score.total,
                end_minute=score.end_minute,
                end_time=minutes_to_time_str(score.end_minute),
            )
        )

    results.sort(key=lambda option: option.score)
    best = results[0]
    logger.info(f"Best departure {best.departure_time} for {len(route)} jobs (score {best.score:.1f})")
    return DepartureSelection(best_minute=best.departure_minute, best_time=best.departure_time, results=results)
