"""Routing orchestration service."""

from __future__ import annotations

import logging
from typing import Sequence

from ...config import settings
from ...models.domain import Job
from ...schemas.jobs import JobModel, JobSummaryModel
from ...schemas.routing import (
    ArrivalModel,
    DepartureOptionModel,
    DepartureRequest,
    DepartureResponse,
    DispatchRequest,
    DispatchResponse,
    OptimizeRouteRequest,
    RouteResultModel,
    RouteWeightsModel,
    WorkerRouteModel,
)
from ..timeutils import minutes_to_time_str, to_minutes
from .departure import find_best_departure_time
from .dispatcher import multi_vehicle_optimize
from .models import DEFAULT_WEIGHTS, DispatchOptions, RouteWeights
from .optimizer import optimize_route
from .travel import default_estimator

logger = logging.getLogger(__name__)


def _parse_start_minute(value: int | str | None) -> int:
    if value is None:
        return settings.default_start_minute
    minute = to_minutes(value)
    if minute is None or not 0 <= minute < 24 * 60:
        raise ValueError(f"Invalid start time '{value}'. Use 'HH:MM' or minutes since midnight.")
    return minute


def _weights(model: RouteWeightsModel | None) -> RouteWeights:
    return model.to_domain() if model else DEFAULT_WEIGHTS


def _to_jobs(models: Sequence[JobModel]) -> list[Job]:
    jobs = [model.to_domain() for model in models]
    seen: set[str] = set()
    for job in jobs:
        if job.job_id in seen:
            raise ValueError(f"Duplicate job id '{job.job_id}'.")
        seen.add(job.job_id)
    return jobs


def _summaries(jobs: Sequence[Job]) -> list[JobSummaryModel]:
    return [JobSummaryModel.model_validate(job) for job in jobs]


def optimize_single_route(payload: OptimizeRouteRequest) -> RouteResultModel:
    jobs = _to_jobs(payload.jobs)
    start_minute = _parse_start_minute(payload.start_time)
    result = optimize_route(
        jobs,
        start_location=payload.start_location.to_domain() if payload.start_location else None,
        start_minute=start_minute,
        weights=_weights(payload.weights),
        estimator=default_estimator(),
    )
    return RouteResultModel(
        route=_summaries(result.route),
        total_travel_time=result.total_travel_time,
        total_time_window_penalty=result.total_time_window_penalty,
        arrivals=[ArrivalModel.model_validate(arrival) for arrival in result.arrivals],
        end_time=minutes_to_time_str(result.end_minute),
        score=result.score,
        score_breakdown=result.score_breakdown,
        improvement_percent=result.improvement_percent,
        initial_order=result.initial_order,
        optimized_order=result.optimized_order,
    )


def dispatch_jobs(payload: DispatchRequest) -> DispatchResponse:
    jobs = _to_jobs(payload.jobs)
    workers = [model.to_domain() for model in payload.workers]
    if len({worker.worker_id for worker in workers}) != len(workers):
        raise ValueError("Worker ids must be unique.")

    options = DispatchOptions(
        weights=_weights(payload.weights),
        max_jobs_per_worker=payload.max_jobs_per_worker,
        balance_workload=payload.balance_workload,
    )
    plan = multi_vehicle_optimize(
        jobs,
        workers,
        start_location=payload.start_location.to_domain() if payload.start_location else None,
        start_minute=_parse_start_minute(payload.start_time),
        options=options,
        estimator=default_estimator(),
        today=payload.date,
    )

    assignments = {
        key: WorkerRouteModel(
            worker_id=route.worker.worker_id if route.worker else None,
            worker_name=route.worker.name if route.worker else None,
            jobs=_summaries(route.jobs),
            total_travel_time=route.total_travel_time,
            score=route.score,
            arrivals=[ArrivalModel.model_validate(arrival) for arrival in route.arrivals],
            end_time=minutes_to_time_str(route.end_minute),
        )
        for key, route in plan.assignments.items()
    }
    return DispatchResponse(assignments=assignments, unassigned=_summaries(plan.unassigned), stats=plan.stats)


def select_departure(payload: DepartureRequest) -> DepartureResponse:
    jobs = _to_jobs(payload.jobs)
    options = None
    if payload.departure_options:
        options = [_parse_start_minute(option) for option in payload.departure_options]

    selection = find_best_departure_time(
        jobs,
        payload.start_location.to_domain() if payload.start_location else None,
        payload.date,
        estimator=default_estimator(),
        departure_options=options,
        weights=_weights(payload.weights),
    )
    return DepartureResponse(
        best_minute=selection.best_minute,
        best_time=selection.best_time,
        results=[DepartureOptionModel.model_validate(option) for option in selection.results],
    )
