"""Impact analysis request/response schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .jobs import JobModel, JobSummaryModel, WorkingHoursModel


class CancellationRequest(BaseModel):
    job: JobModel
    jobs: List[JobModel] = Field(default_factory=list, description="Current calendar snapshot.")
    timezone: Optional[str] = Field(default=None, description="IANA zone for same-day comparisons.")
    today: Optional[date] = None


class RescheduleRequest(BaseModel):
    job: JobModel
    new_start: datetime
    jobs: List[JobModel] = Field(default_factory=list)
    working_hours: Optional[Dict[str, WorkingHoursModel]] = None
    timezone: Optional[str] = None
    today: Optional[date] = None


class ImpactWarningModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    severity: str
    message: str
    affected_dates: List[date]


class JobRefModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    job_id: str
    title: Optional[str] = None
    customer: Optional[str] = None
    time: Optional[str] = None


class RouteImpactModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    has_impact: bool
    previous_job: Optional[JobRefModel] = None
    next_job: Optional[JobRefModel] = None
    gap_created: bool
    estimated_time_recovered: int


class ScheduleImpactModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    warnings: List[ImpactWarningModel]
    affected_jobs: List[JobSummaryModel]
    route_impact: RouteImpactModel
    severity: str
    summary: str
    same_day_job_count: int
    target_date: Optional[date] = None


class ScheduleConflictModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    job: JobSummaryModel
    overlap_minutes: int


class RescheduleImpactModel(ScheduleImpactModel):
    new_date_conflicts: List[ScheduleConflictModel]
    new_day_job_count: int
    has_conflicts: bool
    working_hours_conflict: bool
    recommendation: str


class DisplaySummaryModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: str
    message: str
    bullet_points: List[str]
    severity: str


class ReoptimizationModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    should_reoptimize: bool
    reason: str
    job_count: int
    potential_savings: Optional[str] = None


class CancellationResponse(BaseModel):
    impact: ScheduleImpactModel
    display: DisplaySummaryModel
    reoptimization: ReoptimizationModel


class RescheduleResponse(BaseModel):
    impact: RescheduleImpactModel
    display: DisplaySummaryModel
