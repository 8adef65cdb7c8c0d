"""Scheduling request/response schemas."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import TimeSlot
from .jobs import JobModel, WorkerModel
from .routing import RouteWeightsModel


class TimeSlotModel(BaseModel):
    date: dt.date
    start: dt.time
    end: dt.time

    def to_domain(self) -> TimeSlot:
        if self.end <= self.start:
            raise ValueError("Slot end must be after slot start.")
        return TimeSlot(date=self.date, start=self.start, end=self.end)


class EvaluateRequest(BaseModel):
    job: JobModel
    worker: WorkerModel
    slot: TimeSlotModel
    existing_jobs: List[JobModel] = Field(default_factory=list)
    now: Optional[dt.datetime] = Field(default=None, description="Reference time for SLA and certification checks.")


class BestSlotRequest(BaseModel):
    job: JobModel
    date: dt.date
    workers: List[WorkerModel]
    jobs: List[JobModel] = Field(default_factory=list, description="Jobs already on the calendar.")
    preferred_worker_id: Optional[str] = None
    now: Optional[dt.datetime] = None


class SwapRequest(BaseModel):
    worker_a_id: str
    worker_b_id: str
    date: dt.date
    workers: List[WorkerModel]
    jobs: List[JobModel] = Field(default_factory=list)
    now: Optional[dt.datetime] = None


class TravelEstimateModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    duration_minutes: float
    distance_miles: float
    source: str
    duration_in_traffic_minutes: Optional[float] = None


class ConstraintIssueModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    message: str
    severity: str
    details: Any = None
    conflicting_job_id: Optional[str] = None


class EvaluationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    can_schedule: bool
    score: int
    violations: List[ConstraintIssueModel]
    warnings: List[ConstraintIssueModel]
    summary: str
    travel_from_previous: Optional[TravelEstimateModel] = None


class SlotRecommendationModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    worker_id: str
    worker_name: str
    date: dt.date
    start: str
    end: str
    score: int
    warnings: List[ConstraintIssueModel]


class BestSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool
    result: str
    message: str
    recommendation: Optional[SlotRecommendationModel] = None
    alternatives: List[SlotRecommendationModel]


class SwapMetricsModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    worker_a_travel_time: float
    worker_b_travel_time: float
    worker_a_utilization: int
    worker_b_utilization: int
    total_travel_time: float


class SwapViolationModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    worker_id: str
    job_id: str
    evaluation: EvaluationResponse


class SwapResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    can_swap: bool
    reason: Optional[str] = None
    violations: List[SwapViolationModel]
    current_metrics: Optional[SwapMetricsModel] = None
    swapped_metrics: Optional[SwapMetricsModel] = None
    savings: Dict[str, float]
    swap_recommended: bool
    recommendation: str


class DayOptimizeRequest(BaseModel):
    worker: WorkerModel
    date: dt.date
    jobs: List[JobModel] = Field(default_factory=list, description="Calendar snapshot; only the worker's open jobs for the day are used.")
    weights: Optional[RouteWeightsModel] = None


class ProposedEntryModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    job_id: str
    worker_id: str
    date: dt.date
    start: dt.time
    end: dt.time


class DayOptimizeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    optimized: bool
    message: str
    original_order: List[str]
    optimized_order: List[str]
    new_schedule: List[ProposedEntryModel]
    original_travel_time: float
    optimized_travel_time: float
    estimated_time_saved: float
    overruns_working_hours: bool
