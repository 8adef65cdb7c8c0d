"""Re-sequence one worker's committed day and propose new start/end times."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, time
from typing import List, Optional

from ...config import settings
from ...models.domain import Job, Worker
from ..routing.models import DEFAULT_WEIGHTS, RouteWeights, job_ids
from ..routing.optimizer import build_route_matrix, optimize_route
from ..routing.scoring import score_route
from ..routing.travel import TravelTimeEstimator
from ..timeutils import minutes_to_time, to_minutes
from .directory import JobStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProposedEntry:
    job_id: str
    worker_id: str
    date: date
    start: time
    end: time


@dataclass(slots=True)
class DayScheduleOptimization:
    optimized: bool
    message: str
    original_order: List[str] = field(default_factory=list)
    optimized_order: List[str] = field(default_factory=list)
    new_schedule: List[ProposedEntry] = field(default_factory=list)
    original_travel_time: float = 0.0
    optimized_travel_time: float = 0.0
    estimated_time_saved: float = 0.0
    overruns_working_hours: bool = False


def _day_start_minute(worker: Worker, day: date) -> int:
    hours = worker.hours_for(day)
    if hours is not None and hours.available and hours.start is not None:
        return to_minutes(hours.start)
    return settings.default_start_minute


def _day_end_minute(worker: Worker, day: date) -> Optional[int]:
    hours = worker.hours_for(day)
    if hours is None or hours.end is None:
        return None
    return to_minutes(hours.end)


def optimize_worker_schedule(
    worker: Worker,
    day: date,
    job_store: JobStore,
    *,
    estimator: TravelTimeEstimator | None = None,
    weights: RouteWeights = DEFAULT_WEIGHTS,
) -> DayScheduleOptimization:
    """Optimize the worker's open jobs for `day` from their home base.

    Nothing is written back; callers apply ``new_schedule`` to their own store.
    """
    jobs = job_store.get_jobs_by_date(day, worker_id=worker.worker_id)
    if len(jobs) <= 1:
        return DayScheduleOptimization(optimized=False, message="Not enough jobs to optimize")

    original = sorted(jobs, key=lambda job: job.scheduled_start or time.min)
    start_location = worker.home_base or next((job.location for job in original if job.location), None)
    start_minute = _day_start_minute(worker, day)

    matrix = build_route_matrix(original, start_location, estimator)
    before = score_route(original, start_minute, matrix, weights)
    result = optimize_route(original, start_location, start_minute, matrix=matrix, weights=weights)

    durations = {job.job_id: job.estimated_duration for job in original}
    schedule: list[ProposedEntry] = []
    for arrival in result.arrivals:
        start = math.ceil(arrival.arrival_minute)
        schedule.append(
            ProposedEntry(
                job_id=arrival.job_id,
                worker_id=worker.worker_id,
                date=day,
                start=minutes_to_time(start),
                end=minutes_to_time(start + durations[arrival.job_id]),
            )
        )

    day_end = _day_end_minute(worker, day)
    last_end = math.ceil(result.arrivals[-1].arrival_minute) + durations[result.arrivals[-1].job_id]
    saved = round(before.total_travel_time - result.total_travel_time, 1)
    logger.info(
        f"Re-sequenced {len(jobs)} jobs for {worker.worker_id} on {day.isoformat()}: "
        f"travel {before.total_travel_time:.0f} -> {result.total_travel_time:.0f} min"
    )
    return DayScheduleOptimization(
        optimized=True,
        message="Schedule optimized" if saved > 0 else "Current order is already efficient",
        original_order=job_ids(original),
        optimized_order=result.optimized_order,
        new_schedule=schedule,
        original_travel_time=before.total_travel_time,
        optimized_travel_time=result.total_travel_time,
        estimated_time_saved=saved,
        overruns_working_hours=day_end is not None and last_end > day_end,
    )
