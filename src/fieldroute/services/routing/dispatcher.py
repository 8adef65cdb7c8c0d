"""Multi-worker dispatch: cheapest insertion with workload balancing, then per-route local search."""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Optional, Sequence

from ...config import settings
from ...models.domain import Job, Location, Worker
from ..scheduling.constraints import is_qualified
from .models import (
    START_NODE,
    AssignmentPlan,
    DispatchOptions,
    TravelMatrix,
    WorkerRoute,
    worker_node,
)
from .optimizer import build_route_matrix, optimize_route, or_opt_improve, two_opt_improve
from .scoring import score_route
from .time_windows import WINDOW_STRICTNESS, parse_time_window
from .travel import TravelTimeEstimator

SINGLE_ROUTE_KEY = "single"
DEFAULT_PREFERRED_MINUTE = 720
BALANCE_SCALE = 10

logger = logging.getLogger(__name__)


def dispatch_priority(job: Job) -> tuple[float, int, int]:
    """Sort key: heavier urgency, then stricter windows, then earlier preferred time."""
    window = parse_time_window(job)
    preferred = window.preferred if window.preferred is not None else DEFAULT_PREFERRED_MINUTE
    return (-job.urgency_weight, WINDOW_STRICTNESS[window.type], preferred)


def _start_node_for(worker: Worker, matrix: TravelMatrix) -> str:
    node = worker_node(worker.worker_id)
    return node if worker.home_base is not None and node in matrix else START_NODE


def multi_vehicle_optimize(
    jobs: Sequence[Job],
    workers: Sequence[Worker],
    start_location: Location | None = None,
    start_minute: float | None = None,
    matrix: Optional[TravelMatrix] = None,
    options: DispatchOptions | None = None,
    *,
    estimator: TravelTimeEstimator | None = None,
    today: date | None = None,
) -> AssignmentPlan:
    options = options or DispatchOptions()
    weights = options.weights
    start_minute = settings.default_start_minute if start_minute is None else start_minute

    if not jobs:
        return AssignmentPlan(assignments={}, unassigned=[], stats={})

    if not workers:
        result = optimize_route(jobs, start_location, start_minute, matrix, weights, estimator)
        route = WorkerRoute(
            worker=None,
            jobs=result.route,
            total_travel_time=result.total_travel_time,
            score=result.score,
            arrivals=result.arrivals,
            end_minute=result.end_minute,
        )
        return AssignmentPlan(
            assignments={SINGLE_ROUTE_KEY: route},
            unassigned=[],
            stats={
                "total_travel_time": result.total_travel_time,
                "total_jobs": len(result.route),
                "unassigned_count": 0,
                "workers_used": 1,
            },
        )

    if matrix is None:
        homes = [(worker_node(worker.worker_id), worker.home_base) for worker in workers if worker.home_base is not None]
        matrix = build_route_matrix(jobs, start_location, estimator, extra_nodes=homes)

    capacity = settings.max_jobs_per_worker if options.max_jobs_per_worker is None else options.max_jobs_per_worker
    average_jobs = len(jobs) / len(workers)
    today = today or date.today()

    routes: Dict[str, WorkerRoute] = {worker.worker_id: WorkerRoute(worker=worker, jobs=[]) for worker in workers}
    start_nodes = {worker.worker_id: _start_node_for(worker, matrix) for worker in workers}
    unassigned: list[Job] = []

    for job in sorted(jobs, key=dispatch_priority):
        best_worker: Optional[str] = None
        best_position = 0
        best_cost = float("inf")

        for worker in workers:
            route = routes[worker.worker_id]
            if len(route.jobs) >= capacity:
                continue
            if not is_qualified(job, worker, today):
                continue

            for position in range(len(route.jobs) + 1):
                candidate = route.jobs[:position] + [job] + route.jobs[position:]
                cost = score_route(candidate, start_minute, matrix, weights, start_nodes[worker.worker_id]).total
                if options.balance_workload:
                    cost += abs(len(candidate) - average_jobs) * weights.workload_balance * BALANCE_SCALE
                if cost < best_cost:
                    best_cost = cost
                    best_worker = worker.worker_id
                    best_position = position

        if best_worker is None:
            unassigned.append(job)
            continue
        route = routes[best_worker]
        route.jobs = route.jobs[:best_position] + [job] + route.jobs[best_position:]
        route.score = best_cost

    for worker_id, route in routes.items():
        if not route.jobs:
            continue
        start_node = start_nodes[worker_id]
        if len(route.jobs) > 1:
            improved = two_opt_improve(route.jobs, start_minute, matrix, weights, start_node=start_node)
            route.jobs = or_opt_improve(improved, start_minute, matrix, weights, start_node=start_node)
        final = score_route(route.jobs, start_minute, matrix, weights, start_node)
        route.total_travel_time = final.total_travel_time
        route.score = final.total
        route.arrivals = final.arrivals
        route.end_minute = final.end_minute

    plan = AssignmentPlan(
        assignments=routes,
        unassigned=unassigned,
        stats={
            "total_travel_time": sum(route.total_travel_time for route in routes.values()),
            "total_jobs": sum(len(route.jobs) for route in routes.values()),
            "unassigned_count": len(unassigned),
            "workers_used": sum(1 for route in routes.values() if route.jobs),
        },
    )
    logger.info(
        f"Dispatched {plan.stats['total_jobs']} of {len(jobs)} jobs across "
        f"{plan.stats['workers_used']}/{len(workers)} workers ({len(unassigned)} unassigned)"
    )
    return plan
