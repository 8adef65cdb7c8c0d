"""Constraint evaluation for a job / worker / time slot combination."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Literal, Optional, Sequence

from ...config import settings
from ...models.domain import CLOSED_STATUSES, Job, TimeSlot, Worker
from ..routing.models import TravelEstimate
from ..routing.travel import TravelTimeEstimator
from ..timeutils import to_minutes
from .directory import WorkerDirectory, check_worker_availability

ConstraintType = Literal["skill", "certification", "availability", "travel_time", "parts", "sla", "workload"]
Severity = Literal["blocking", "warning", "info"]

TRAVEL_SHORTFALL_DEDUCTION = 15
SLA_PROXIMITY_DEDUCTION = 10
WORKLOAD_DEDUCTION_PER_JOB = 5


@dataclass(slots=True)
class ConstraintIssue:
    type: ConstraintType
    message: str
    severity: Severity
    details: Any = None
    conflicting_job_id: Optional[str] = None


@dataclass(slots=True)
class ConstraintEvaluation:
    can_schedule: bool
    score: int
    violations: List[ConstraintIssue] = field(default_factory=list)
    warnings: List[ConstraintIssue] = field(default_factory=list)
    summary: str = ""
    travel_from_previous: Optional[TravelEstimate] = None


def missing_skills(job: Job, worker: Worker) -> list[str]:
    return [skill for skill in job.required_skills if skill not in worker.skills]


def certification_gaps(job: Job, worker: Worker, today: date) -> tuple[list[str], list[str]]:
    """(missing, expired) certification ids required by the job."""
    missing: list[str] = []
    expired: list[str] = []
    for cert_id in job.required_certifications:
        cert = worker.certification(cert_id)
        if cert is None:
            missing.append(cert_id)
        elif cert.expires_at is not None and cert.expires_at < today:
            expired.append(cert_id)
    return missing, expired


def eligibility_issues(job: Job, worker: Worker, today: date) -> list[ConstraintIssue]:
    """Blocking skill and certification issues; independent of any time slot."""
    issues: list[ConstraintIssue] = []
    skills_missing = missing_skills(job, worker)
    if skills_missing:
        issues.append(
            ConstraintIssue("skill", f"Missing skills: {', '.join(skills_missing)}", "blocking", details=skills_missing)
        )

    certs_missing, certs_expired = certification_gaps(job, worker, today)
    if certs_missing:
        issues.append(
            ConstraintIssue(
                "certification",
                f"Missing certifications: {', '.join(certs_missing)}",
                "blocking",
                details=certs_missing,
            )
        )
    if certs_expired:
        issues.append(
            ConstraintIssue(
                "certification",
                f"Expired certifications: {', '.join(certs_expired)}",
                "blocking",
                details=certs_expired,
            )
        )
    return issues


def is_qualified(job: Job, worker: Worker, today: date | None = None) -> bool:
    """Skills held and every required certification present and current."""
    return not eligibility_issues(job, worker, today or date.today())


def worker_jobs_on_date(worker: Worker, day: date, existing_jobs: Sequence[Job]) -> list[Job]:
    return [
        job
        for job in existing_jobs
        if job.assigned_worker_id == worker.worker_id
        and job.scheduled_date == day
        and job.status not in CLOSED_STATUSES
    ]


def _overlaps(slot: TimeSlot, job: Job) -> bool:
    if job.scheduled_start is None or job.scheduled_end is None:
        return False
    return slot.start < job.scheduled_end and slot.end > job.scheduled_start


def evaluate_constraints(
    job: Job,
    worker: Worker,
    slot: TimeSlot,
    existing_jobs: Sequence[Job] = (),
    *,
    estimator: TravelTimeEstimator | None = None,
    directory: WorkerDirectory | None = None,
    now: datetime | None = None,
) -> ConstraintEvaluation:
    violations: list[ConstraintIssue] = []
    warnings: list[ConstraintIssue] = []
    score = 100
    today = (now or datetime.now()).date()

    availability = (
        directory.check_availability(worker, slot.date, slot.start, slot.end)
        if directory is not None
        else check_worker_availability(worker, slot.date, slot.start, slot.end)
    )
    if not availability.available:
        violations.append(ConstraintIssue("availability", availability.reason or "Worker unavailable", "blocking"))
        score = 0

    ineligible = eligibility_issues(job, worker, today)
    if ineligible:
        violations.extend(ineligible)
        score = 0

    day_jobs = worker_jobs_on_date(worker, slot.date, existing_jobs)
    for other in day_jobs:
        if other.job_id != job.job_id and _overlaps(slot, other):
            violations.append(
                ConstraintIssue(
                    "availability",
                    f"Conflicts with job {other.label} ({other.scheduled_start:%H:%M}-{other.scheduled_end:%H:%M})",
                    "blocking",
                    conflicting_job_id=other.job_id,
                )
            )
            score = 0

    travel: Optional[TravelEstimate] = None
    if job.location is not None:
        earlier = [
            other
            for other in day_jobs
            if other.job_id != job.job_id and other.scheduled_end is not None and other.scheduled_end <= slot.start
        ]
        if earlier:
            previous = max(earlier, key=lambda other: other.scheduled_end)
            if previous.location is not None:
                travel = (estimator or TravelTimeEstimator()).estimate(previous.location, job.location)
                gap = to_minutes(slot.start) - to_minutes(previous.scheduled_end)
                if travel.duration_minutes > gap:
                    warnings.append(
                        ConstraintIssue(
                            "travel_time",
                            f"Tight travel time: {travel.duration_minutes:g} min needed, {gap} min available",
                            "warning",
                            details={"required": travel.duration_minutes, "available": gap},
                        )
                    )
                    score -= TRAVEL_SHORTFALL_DEDUCTION
                job.travel_time_from_previous = travel

    if job.sla_deadline is not None:
        if slot.date > job.sla_deadline:
            violations.append(
                ConstraintIssue("sla", f"Scheduled after SLA deadline ({job.sla_deadline.isoformat()})", "blocking")
            )
            score = 0
        else:
            days_left = (job.sla_deadline - slot.date).days
            if days_left <= 1:
                warnings.append(
                    ConstraintIssue(
                        "sla",
                        f"SLA deadline is {'today' if days_left == 0 else 'tomorrow'}",
                        "warning",
                        details={"days_until_deadline": days_left},
                    )
                )
                score -= SLA_PROXIMITY_DEDUCTION

    threshold = settings.workload_warning_threshold
    if len(day_jobs) >= threshold:
        warnings.append(
            ConstraintIssue("workload", f"Worker already has {len(day_jobs)} jobs scheduled", "warning")
        )
        score -= WORKLOAD_DEDUCTION_PER_JOB * (len(day_jobs) - (threshold - 1))

    if job.required_parts:
        warnings.append(
            ConstraintIssue(
                "parts",
                f"Parts required: {', '.join(job.required_parts)} - verify availability",
                "info",
                details=list(job.required_parts),
            )
        )

    blocked = any(issue.severity == "blocking" for issue in violations)
    if blocked:
        summary = f"Cannot schedule: {violations[0].message}"
    elif warnings:
        summary = f"Can schedule with {len(warnings)} warning(s)"
    else:
        summary = "All constraints satisfied"

    return ConstraintEvaluation(
        can_schedule=not blocked,
        score=max(0, score),
        violations=violations,
        warnings=warnings,
        summary=summary,
        travel_from_previous=travel,
    )
