"""Time slot generation and best-slot search across the team."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Literal, Optional

from ...config import settings
from ...models.domain import Job, TimeSlot, Worker
from ..routing.travel import TravelTimeEstimator
from ..timeutils import minutes_to_time, to_minutes
from .constraints import ConstraintEvaluation, ConstraintIssue, evaluate_constraints, is_qualified
from .directory import JobStore, WorkerDirectory

ScheduleResult = Literal["success", "no_eligible_workers", "no_available_slots"]

MAX_ALTERNATIVES = 3

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SlotRecommendation:
    worker_id: str
    worker_name: str
    date: date
    start: str
    end: str
    score: int
    warnings: List[ConstraintIssue] = field(default_factory=list)


@dataclass(slots=True)
class SlotSearchResult:
    success: bool
    result: ScheduleResult
    message: str
    recommendation: Optional[SlotRecommendation] = None
    alternatives: List[SlotRecommendation] = field(default_factory=list)


def generate_time_slots(
    worker: Worker,
    day: date,
    duration_minutes: int,
    interval_minutes: int | None = None,
) -> list[TimeSlot]:
    """Start times every `interval_minutes` that fit entirely inside the day's working hours."""
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")
    interval = interval_minutes or settings.slot_interval_minutes
    hours = worker.hours_for(day)
    if hours is None or not hours.available or hours.start is None or hours.end is None:
        return []

    first, last = to_minutes(hours.start), to_minutes(hours.end)
    return [
        TimeSlot(date=day, start=minutes_to_time(start), end=minutes_to_time(start + duration_minutes))
        for start in range(first, last - duration_minutes + 1, interval)
    ]


def _recommendation(worker: Worker, slot: TimeSlot, evaluation: ConstraintEvaluation) -> SlotRecommendation:
    return SlotRecommendation(
        worker_id=worker.worker_id,
        worker_name=worker.name,
        date=slot.date,
        start=f"{slot.start:%H:%M}",
        end=f"{slot.end:%H:%M}",
        score=evaluation.score,
        warnings=list(evaluation.warnings),
    )


def find_best_time_slot(
    job: Job,
    day: date,
    directory: WorkerDirectory,
    job_store: JobStore,
    preferred_worker_id: Optional[str] = None,
    *,
    estimator: TravelTimeEstimator | None = None,
    now: datetime | None = None,
) -> SlotSearchResult:
    team = directory.get_workers(active_only=True)
    existing_jobs = job_store.get_jobs_by_date(day)
    today = (now or datetime.now()).date()

    if preferred_worker_id is not None:
        team.sort(key=lambda worker: worker.worker_id != preferred_worker_id)

    eligible = [worker for worker in team if is_qualified(job, worker, today)]
    if not eligible:
        return SlotSearchResult(
            success=False,
            result="no_eligible_workers",
            message="No active worker has the required skills and certifications",
        )

    estimator = estimator or TravelTimeEstimator()
    candidates: list[tuple[Worker, TimeSlot, ConstraintEvaluation]] = []
    for worker in eligible:
        for slot in generate_time_slots(worker, day, job.estimated_duration):
            evaluation = evaluate_constraints(
                job, worker, slot, existing_jobs, estimator=estimator, directory=directory, now=now
            )
            if evaluation.can_schedule:
                candidates.append((worker, slot, evaluation))

    if not candidates:
        return SlotSearchResult(
            success=False,
            result="no_available_slots",
            message="No available time slots found for any eligible worker",
        )

    # Stable sort keeps the preferred worker and earlier slots ahead on equal scores.
    candidates.sort(key=lambda candidate: candidate[2].score, reverse=True)
    best_worker, best_slot, best_evaluation = candidates[0]
    logger.info(
        f"Best slot for job {job.job_id}: {best_worker.worker_id} {best_slot.start:%H:%M} "
        f"(score {best_evaluation.score}, {len(candidates)} candidates)"
    )
    return SlotSearchResult(
        success=True,
        result="success",
        message="Slot found",
        recommendation=_recommendation(best_worker, best_slot, best_evaluation),
        alternatives=[
            _recommendation(worker, slot, evaluation)
            for worker, slot, evaluation in candidates[1 : 1 + MAX_ALTERNATIVES]
        ],
    )
