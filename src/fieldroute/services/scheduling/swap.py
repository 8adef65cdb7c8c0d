"""What-if simulation of exchanging two workers' assignments for a day."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Dict, List, Optional, Sequence

from ...models.domain import Job, Location, TimeSlot, Worker
from ..routing.travel import TravelTimeEstimator
from .constraints import ConstraintEvaluation, ConstraintIssue, eligibility_issues, evaluate_constraints
from .directory import JobStore, check_worker_availability

WORKDAY_MINUTES = 480

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SwapMetrics:
    worker_a_travel_time: float
    worker_b_travel_time: float
    worker_a_utilization: int
    worker_b_utilization: int

    @property
    def total_travel_time(self) -> float:
        return self.worker_a_travel_time + self.worker_b_travel_time


@dataclass(slots=True)
class SwapViolation:
    worker_id: str
    job_id: str
    evaluation: ConstraintEvaluation


@dataclass(slots=True)
class SwapSimulation:
    can_swap: bool
    reason: Optional[str] = None
    violations: List[SwapViolation] = field(default_factory=list)
    current_metrics: Optional[SwapMetrics] = None
    swapped_metrics: Optional[SwapMetrics] = None
    savings: Dict[str, float] = field(default_factory=dict)
    swap_recommended: bool = False
    recommendation: str = ""


def calculate_total_travel_time(
    jobs: Sequence[Job],
    estimator: TravelTimeEstimator | None = None,
    start: Location | None = None,
) -> float:
    """Travel between consecutive jobs in start-time order, plus the leg from `start` when given.

    Legs without locations are skipped.
    """
    if not jobs:
        return 0.0
    estimator = estimator or TravelTimeEstimator()
    ordered = sorted(jobs, key=lambda job: job.scheduled_start or time.min)
    total = 0.0
    if start is not None and ordered[0].location is not None:
        total += estimator.estimate(start, ordered[0].location).duration_minutes
    for current, following in zip(ordered, ordered[1:]):
        if current.location is not None and following.location is not None:
            total += estimator.estimate(current.location, following.location).duration_minutes
    return total


def calculate_utilization(jobs: Sequence[Job], workday_minutes: int = WORKDAY_MINUTES) -> int:
    if not jobs:
        return 0
    booked = sum(job.estimated_duration for job in jobs)
    return round(booked / workday_minutes * 100)


def _evaluate_untimed(job: Job, worker: Worker, day: date, now: datetime | None) -> ConstraintEvaluation:
    """Slot-free checks for a job booked on a day without start/end times."""
    violations = eligibility_issues(job, worker, (now or datetime.now()).date())
    availability = check_worker_availability(worker, day)
    if not availability.available:
        violations.insert(0, ConstraintIssue("availability", availability.reason or "Worker unavailable", "blocking"))
    if violations:
        return ConstraintEvaluation(
            can_schedule=False, score=0, violations=violations, summary=f"Cannot schedule: {violations[0].message}"
        )
    return ConstraintEvaluation(can_schedule=True, score=100, summary="All constraints satisfied")


def _evaluate_takeover(
    worker: Worker,
    incoming: Sequence[Job],
    day: date,
    estimator: TravelTimeEstimator,
    now: datetime | None,
) -> list[SwapViolation]:
    """Evaluate each incoming job for `worker`, who hands its own jobs over in the swap."""
    reassigned = [replace(job, assigned_worker_id=worker.worker_id) for job in incoming]
    blocked: list[SwapViolation] = []
    for job in reassigned:
        if job.scheduled_start is None or job.scheduled_end is None:
            evaluation = _evaluate_untimed(job, worker, job.scheduled_date or day, now)
        else:
            slot = TimeSlot(date=job.scheduled_date or day, start=job.scheduled_start, end=job.scheduled_end)
            others = [other for other in reassigned if other.job_id != job.job_id]
            evaluation = evaluate_constraints(job, worker, slot, others, estimator=estimator, now=now)
        if not evaluation.can_schedule:
            blocked.append(SwapViolation(worker_id=worker.worker_id, job_id=job.job_id, evaluation=evaluation))
    return blocked


def simulate_swap(
    worker_a: Worker,
    worker_b: Worker,
    day: date,
    job_store: JobStore,
    *,
    estimator: TravelTimeEstimator | None = None,
    now: datetime | None = None,
) -> SwapSimulation:
    if worker_a.worker_id == worker_b.worker_id:
        raise ValueError("Swap requires two different workers.")

    estimator = estimator or TravelTimeEstimator()
    jobs_a = job_store.get_jobs_by_date(day, worker_id=worker_a.worker_id)
    jobs_b = job_store.get_jobs_by_date(day, worker_id=worker_b.worker_id)

    violations = _evaluate_takeover(worker_a, jobs_b, day, estimator, now) + _evaluate_takeover(
        worker_b, jobs_a, day, estimator, now
    )
    if violations:
        logger.info(
            f"Swap {worker_a.worker_id}<->{worker_b.worker_id} on {day.isoformat()} blocked by "
            f"{len(violations)} job(s)"
        )
        return SwapSimulation(can_swap=False, reason="Constraint violations would occur", violations=violations)

    current = SwapMetrics(
        worker_a_travel_time=calculate_total_travel_time(jobs_a, estimator, worker_a.home_base),
        worker_b_travel_time=calculate_total_travel_time(jobs_b, estimator, worker_b.home_base),
        worker_a_utilization=calculate_utilization(jobs_a),
        worker_b_utilization=calculate_utilization(jobs_b),
    )
    swapped = SwapMetrics(
        worker_a_travel_time=calculate_total_travel_time(jobs_b, estimator, worker_a.home_base),
        worker_b_travel_time=calculate_total_travel_time(jobs_a, estimator, worker_b.home_base),
        worker_a_utilization=calculate_utilization(jobs_b),
        worker_b_utilization=calculate_utilization(jobs_a),
    )

    saved = current.total_travel_time - swapped.total_travel_time
    percent = round((1 - swapped.total_travel_time / current.total_travel_time) * 100) if current.total_travel_time else 0
    recommended = swapped.total_travel_time < current.total_travel_time
    return SwapSimulation(
        can_swap=True,
        current_metrics=current,
        swapped_metrics=swapped,
        savings={"travel_time_minutes": saved, "travel_time_percent": percent},
        swap_recommended=recommended,
        recommendation=(
            "Swap recommended - reduces total travel time"
            if recommended
            else "Keep current assignments - swap would not reduce travel time"
        ),
    )
