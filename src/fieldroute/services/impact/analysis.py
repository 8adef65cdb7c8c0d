"""Impact analysis for cancelling or rescheduling a committed job."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Literal, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from ...models.domain import ACTIVE_STATUSES, CLOSED_STATUSES, Job, WorkingHours
from ..timeutils import is_same_day, local_date, local_naive, resolve_timezone, weekday_name

ImpactSeverity = Literal["none", "low", "medium", "high"]
WarningSeverity = Literal["warning", "medium", "high"]

REOPTIMIZE_MIN_JOBS = 3


@dataclass(slots=True)
class ImpactWarning:
    type: str
    severity: WarningSeverity
    message: str
    affected_dates: List[date] = field(default_factory=list)


@dataclass(slots=True)
class JobRef:
    job_id: str
    title: Optional[str]
    customer: Optional[str]
    time: Optional[str]


@dataclass(slots=True)
class RouteImpact:
    has_impact: bool = False
    previous_job: Optional[JobRef] = None
    next_job: Optional[JobRef] = None
    gap_created: bool = False
    estimated_time_recovered: int = 0


@dataclass(slots=True)
class ScheduleImpact:
    warnings: List[ImpactWarning] = field(default_factory=list)
    affected_jobs: List[Job] = field(default_factory=list)
    route_impact: RouteImpact = field(default_factory=RouteImpact)
    severity: ImpactSeverity = "none"
    summary: str = "No impact detected"
    same_day_job_count: int = 0
    target_date: Optional[date] = None


@dataclass(slots=True)
class ScheduleConflict:
    job: Job
    overlap_minutes: int


@dataclass(slots=True)
class RescheduleImpact(ScheduleImpact):
    new_date_conflicts: List[ScheduleConflict] = field(default_factory=list)
    new_day_job_count: int = 0
    has_conflicts: bool = False
    working_hours_conflict: bool = False
    recommendation: str = ""


@dataclass(slots=True)
class ImpactDisplaySummary:
    title: str
    message: str
    bullet_points: List[str]
    severity: ImpactSeverity


@dataclass(slots=True)
class ReoptimizationSuggestion:
    should_reoptimize: bool
    reason: str
    job_count: int = 0
    potential_savings: Optional[str] = None


def _job_ref(job: Job) -> JobRef:
    return JobRef(
        job_id=job.job_id,
        title=job.title,
        customer=job.customer_name,
        time=f"{job.scheduled_start:%H:%M}" if job.scheduled_start else None,
    )


def _plural(count: int, noun: str = "job") -> str:
    return f"{count} other {noun}{'s' if count != 1 else ''}"


def _rank_severity(warnings: Sequence[ImpactWarning]) -> ImpactSeverity:
    if any(warning.severity == "high" for warning in warnings):
        return "high"
    if any(warning.severity == "medium" for warning in warnings):
        return "medium"
    return "low"


def _same_day_route(target: Job, all_jobs: Sequence[Job], target_at: datetime, zone: ZoneInfo) -> list[Job]:
    jobs = []
    for job in all_jobs:
        if job.job_id == target.job_id or job.status not in ACTIVE_STATUSES:
            continue
        if target.assigned_worker_id and job.assigned_worker_id != target.assigned_worker_id:
            continue
        if is_same_day(job.scheduled_at, target_at, zone):
            jobs.append(job)
    return sorted(jobs, key=lambda job: job.scheduled_at)


def analyze_cancellation_impact(
    target: Job | None,
    all_jobs: Sequence[Job] | None,
    *,
    tz: str | ZoneInfo | None = None,
    today: date | None = None,
) -> ScheduleImpact:
    if target is None or all_jobs is None:
        return ScheduleImpact()

    target_at = target.scheduled_at
    if target_at is None:
        return ScheduleImpact(summary="Job is not scheduled")

    zone = resolve_timezone(tz)
    target_day = local_date(target_at, zone)
    today = today or datetime.now(zone).date()

    same_day = _same_day_route(target, all_jobs, target_at, zone)
    previous_job = None
    next_job = None
    for job in same_day:
        if job.scheduled_at < target_at:
            previous_job = job
        elif job.scheduled_at > target_at:
            next_job = job
            break

    route_impact = RouteImpact()
    affected: list[Job] = []
    if previous_job or next_job:
        route_impact = RouteImpact(
            has_impact=True,
            previous_job=_job_ref(previous_job) if previous_job else None,
            next_job=_job_ref(next_job) if next_job else None,
            gap_created=previous_job is not None and next_job is not None,
            estimated_time_recovered=target.estimated_duration,
        )
        affected = list(same_day)

    warnings: list[ImpactWarning] = []
    if target.is_multi_day:
        warnings.append(
            ImpactWarning(
                type="multi_day",
                severity="warning",
                message=(
                    f"This is a multi-day job spanning {len(target.multi_day_dates)} days. "
                    "Cancelling will free up all blocked days."
                ),
                affected_dates=list(target.multi_day_dates),
            )
        )
    if target_day == today:
        warnings.append(
            ImpactWarning(
                type="same_day",
                severity="high",
                message="This job is scheduled for today. Cancelling may disrupt the current route.",
            )
        )
    if len(same_day) > 1:
        warnings.append(
            ImpactWarning(
                type="route_impact",
                severity="medium",
                message=f"This change affects a route with {_plural(len(same_day))} on this day.",
            )
        )

    summary = "Minimal impact"
    if same_day:
        summary = f"Affects {_plural(len(same_day))} on this day's route"
    if target.is_multi_day:
        summary += f" (multi-day: {len(target.multi_day_dates)} days)"

    return ScheduleImpact(
        warnings=warnings,
        affected_jobs=affected,
        route_impact=route_impact,
        severity=_rank_severity(warnings),
        summary=summary,
        same_day_job_count=len(same_day),
        target_date=target_day,
    )


def analyze_reschedule_impact(
    job: Job,
    new_start: datetime,
    all_jobs: Sequence[Job],
    working_hours: Mapping[str, WorkingHours] | None = None,
    *,
    tz: str | ZoneInfo | None = None,
    today: date | None = None,
) -> RescheduleImpact:
    zone = resolve_timezone(tz)
    original = analyze_cancellation_impact(job, all_jobs, tz=zone, today=today)

    start = local_naive(new_start, zone)
    end = start + timedelta(minutes=job.estimated_duration)

    new_day_jobs = [
        other
        for other in all_jobs
        if other.job_id != job.job_id
        and other.status not in CLOSED_STATUSES
        and (not job.assigned_worker_id or other.assigned_worker_id == job.assigned_worker_id)
        and is_same_day(other.scheduled_at, start, zone)
    ]

    conflicts: list[ScheduleConflict] = []
    for other in new_day_jobs:
        other_start = other.scheduled_at
        other_end = other_start + timedelta(minutes=other.estimated_duration)
        if end <= other_start or start >= other_end:
            continue
        overlap = min(end, other_end) - max(start, other_start)
        conflicts.append(ScheduleConflict(job=other, overlap_minutes=int(overlap.total_seconds() // 60)))

    warnings = list(original.warnings)
    day_name = weekday_name(start.date())
    hours = (working_hours or {}).get(day_name)
    day_off = hours is not None and not hours.available
    if day_off:
        warnings.append(ImpactWarning(type="day_off", severity="high", message=f"{day_name} is configured as a day off."))

    if conflicts:
        recommendation = "Consider choosing a different time to avoid conflicts"
    elif day_off:
        recommendation = "New date falls on a day off; confirm before moving the job"
    else:
        recommendation = "New time slot is available"

    return RescheduleImpact(
        warnings=warnings,
        affected_jobs=original.affected_jobs,
        route_impact=original.route_impact,
        severity=_rank_severity(warnings) if warnings or original.target_date is not None else "none",
        summary=original.summary,
        same_day_job_count=original.same_day_job_count,
        target_date=original.target_date,
        new_date_conflicts=conflicts,
        new_day_job_count=len(new_day_jobs),
        has_conflicts=bool(conflicts),
        working_hours_conflict=day_off,
        recommendation=recommendation,
    )


def get_impact_display_summary(impact: ScheduleImpact | None) -> ImpactDisplaySummary:
    """Title, message and bullet points for a confirmation dialog."""
    if impact is None:
        return ImpactDisplaySummary(
            title="Confirm Action",
            message="No significant impact detected.",
            bullet_points=[],
            severity="low",
        )

    bullets: list[str] = []
    if impact.same_day_job_count > 0:
        bullets.append(f"{_plural(impact.same_day_job_count)} on this day's route")
    if impact.route_impact.gap_created:
        bullets.append("This will create a gap in the route")
    recovered = impact.route_impact.estimated_time_recovered
    if recovered > 0:
        hours, minutes = divmod(recovered, 60)
        bullets.append(f"~{hours}h {minutes}m will be freed up" if hours else f"~{minutes}m will be freed up")
    for warning in impact.warnings:
        if warning.type == "multi_day":
            bullets.append(f"Multi-day job: {len(warning.affected_dates) or 'multiple'} days affected")
        elif warning.type == "same_day":
            bullets.append("This job is scheduled for today")

    titles = {"high": "Warning: Significant Impact", "medium": "Notice: Route Impact"}
    return ImpactDisplaySummary(
        title=titles.get(impact.severity, "Confirm Action"),
        message=impact.summary,
        bullet_points=bullets,
        severity=impact.severity,
    )


def suggest_route_reoptimization(cancelled: Job, remaining: Sequence[Job] | None) -> ReoptimizationSuggestion:
    if not remaining or len(remaining) < 2:
        return ReoptimizationSuggestion(should_reoptimize=False, reason="Not enough jobs to optimize")

    worth_it = len(remaining) >= REOPTIMIZE_MIN_JOBS
    return ReoptimizationSuggestion(
        should_reoptimize=worth_it,
        reason=(
            f"Cancelling {cancelled.label} leaves {len(remaining)} stops; re-optimizing may shorten the route"
            if worth_it
            else "Route is simple enough, no re-optimization needed"
        ),
        job_count=len(remaining),
        potential_savings="10-20 minutes" if worth_it else None,
    )
