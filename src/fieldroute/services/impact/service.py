"""Impact analysis orchestration service."""

from __future__ import annotations

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ...schemas.impact import (
    CancellationRequest,
    CancellationResponse,
    DisplaySummaryModel,
    ReoptimizationModel,
    RescheduleImpactModel,
    RescheduleRequest,
    RescheduleResponse,
    ScheduleImpactModel,
)
from ...schemas.jobs import working_hours_to_domain
from ..timeutils import resolve_timezone
from .analysis import (
    analyze_cancellation_impact,
    analyze_reschedule_impact,
    get_impact_display_summary,
    suggest_route_reoptimization,
)


def _zone(name: str | None) -> ZoneInfo:
    try:
        return resolve_timezone(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone '{name}'.") from exc


def cancellation_impact(payload: CancellationRequest) -> CancellationResponse:
    job = payload.job.to_domain()
    all_jobs = [other.to_domain() for other in payload.jobs]
    impact = analyze_cancellation_impact(job, all_jobs, tz=_zone(payload.timezone), today=payload.today)
    remaining = [other for other in impact.affected_jobs if other.job_id != job.job_id]
    return CancellationResponse(
        impact=ScheduleImpactModel.model_validate(impact),
        display=DisplaySummaryModel.model_validate(get_impact_display_summary(impact)),
        reoptimization=ReoptimizationModel.model_validate(suggest_route_reoptimization(job, remaining)),
    )


def reschedule_impact(payload: RescheduleRequest) -> RescheduleResponse:
    impact = analyze_reschedule_impact(
        payload.job.to_domain(),
        payload.new_start,
        [other.to_domain() for other in payload.jobs],
        working_hours_to_domain(payload.working_hours) if payload.working_hours else None,
        tz=_zone(payload.timezone),
        today=payload.today,
    )
    return RescheduleResponse(
        impact=RescheduleImpactModel.model_validate(impact),
        display=DisplaySummaryModel.model_validate(get_impact_display_summary(impact)),
    )
