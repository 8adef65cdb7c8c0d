"""Scheduling orchestration service."""

from __future__ import annotations

from ...schemas.scheduling import (
    BestSlotRequest,
    BestSlotResponse,
    DayOptimizeRequest,
    DayOptimizeResponse,
    EvaluateRequest,
    EvaluationResponse,
    SwapRequest,
    SwapResponse,
)
from ..routing.models import DEFAULT_WEIGHTS
from ..routing.travel import default_estimator
from .constraints import evaluate_constraints
from .day_plan import optimize_worker_schedule
from .directory import InMemoryJobStore, InMemoryWorkerDirectory
from .slots import find_best_time_slot
from .swap import simulate_swap


def evaluate_assignment(payload: EvaluateRequest) -> EvaluationResponse:
    evaluation = evaluate_constraints(
        payload.job.to_domain(),
        payload.worker.to_domain(),
        payload.slot.to_domain(),
        [job.to_domain() for job in payload.existing_jobs],
        estimator=default_estimator(),
        now=payload.now,
    )
    return EvaluationResponse.model_validate(evaluation)


def find_slot(payload: BestSlotRequest) -> BestSlotResponse:
    directory = InMemoryWorkerDirectory(worker.to_domain() for worker in payload.workers)
    job_store = InMemoryJobStore([job.to_domain() for job in payload.jobs])
    if payload.preferred_worker_id and directory.get_worker(payload.preferred_worker_id) is None:
        raise ValueError(f"Preferred worker '{payload.preferred_worker_id}' not found.")

    result = find_best_time_slot(
        payload.job.to_domain(),
        payload.date,
        directory,
        job_store,
        payload.preferred_worker_id,
        estimator=default_estimator(),
        now=payload.now,
    )
    return BestSlotResponse.model_validate(result)


def swap_workers(payload: SwapRequest) -> SwapResponse:
    directory = InMemoryWorkerDirectory(worker.to_domain() for worker in payload.workers)
    worker_a = directory.get_worker(payload.worker_a_id)
    worker_b = directory.get_worker(payload.worker_b_id)
    if worker_a is None or worker_b is None:
        missing = payload.worker_a_id if worker_a is None else payload.worker_b_id
        raise ValueError(f"Worker '{missing}' not found.")

    simulation = simulate_swap(
        worker_a,
        worker_b,
        payload.date,
        InMemoryJobStore([job.to_domain() for job in payload.jobs]),
        estimator=default_estimator(),
        now=payload.now,
    )
    return SwapResponse.model_validate(simulation)


def optimize_day(payload: DayOptimizeRequest) -> DayOptimizeResponse:
    worker = payload.worker.to_domain()
    plan = optimize_worker_schedule(
        worker,
        payload.date,
        InMemoryJobStore([job.to_domain() for job in payload.jobs]),
        estimator=default_estimator(),
        weights=payload.weights.to_domain() if payload.weights else DEFAULT_WEIGHTS,
    )
    return DayOptimizeResponse.model_validate(plan)
