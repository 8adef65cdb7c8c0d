"""Worker directory and job store collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, Optional, Protocol, Sequence

from ...models.domain import Job, Worker
from ..timeutils import weekday_name


@dataclass(slots=True, frozen=True)
class Availability:
    available: bool
    reason: Optional[str] = None


def check_worker_availability(
    worker: Worker,
    day: date,
    start: Optional[time] = None,
    end: Optional[time] = None,
) -> Availability:
    if not worker.is_active:
        return Availability(False, "Worker is inactive")

    for period in worker.time_off:
        if period.start_date <= day <= period.end_date:
            return Availability(False, f"Time off: {period.reason}")

    day_name = weekday_name(day)
    hours = worker.hours_for(day)
    if hours is None or not hours.available:
        return Availability(False, f"Not scheduled to work on {day_name}")

    if start is not None and hours.start is not None and start < hours.start:
        return Availability(False, f"Starts before working hours ({hours.start:%H:%M})")
    if end is not None and hours.end is not None and end > hours.end:
        return Availability(False, f"Ends after working hours ({hours.end:%H:%M})")

    return Availability(True)


class WorkerDirectory(Protocol):
    def get_workers(self, active_only: bool = True) -> list[Worker]:
        ...

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        ...

    def check_availability(
        self, worker: Worker, day: date, start: Optional[time] = None, end: Optional[time] = None
    ) -> Availability:
        ...


class JobStore(Protocol):
    def get_jobs_by_date(
        self, day: date, worker_id: Optional[str] = None, include_completed: bool = False
    ) -> list[Job]:
        ...

    def get_unscheduled_jobs(self) -> list[Job]:
        ...


class InMemoryWorkerDirectory:
    """Directory over a fixed worker list supplied by the caller."""

    def __init__(self, workers: Iterable[Worker]) -> None:
        self._workers = {worker.worker_id: worker for worker in workers}

    def get_workers(self, active_only: bool = True) -> list[Worker]:
        return [worker for worker in self._workers.values() if worker.is_active or not active_only]

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        return self._workers.get(worker_id)

    def check_availability(
        self, worker: Worker, day: date, start: Optional[time] = None, end: Optional[time] = None
    ) -> Availability:
        return check_worker_availability(worker, day, start, end)


class InMemoryJobStore:
    """Read-only job store over a caller-supplied snapshot."""

    def __init__(self, jobs: Sequence[Job]) -> None:
        self._jobs = list(jobs)

    def get_jobs_by_date(
        self, day: date, worker_id: Optional[str] = None, include_completed: bool = False
    ) -> list[Job]:
        jobs = []
        for job in self._jobs:
            if job.scheduled_date != day or job.status == "cancelled":
                continue
            if job.status == "completed" and not include_completed:
                continue
            if worker_id is not None and job.assigned_worker_id != worker_id:
                continue
            jobs.append(job)
        return jobs

    def get_unscheduled_jobs(self) -> list[Job]:
        return [job for job in self._jobs if job.status == "unscheduled"]
