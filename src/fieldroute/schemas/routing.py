"""Routing request/response schemas."""

from __future__ import annotations

import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..services.routing.models import RouteWeights
from .jobs import JobModel, JobSummaryModel, LocationModel, WorkerModel


class RouteWeightsModel(BaseModel):
    travel_time: float = Field(1.0, ge=0)
    time_window: float = Field(2.0, ge=0)
    urgency: float = Field(1.5, ge=0)
    workload_balance: float = Field(0.5, ge=0)
    skill_match: float = Field(0.3, ge=0)

    def to_domain(self) -> RouteWeights:
        return RouteWeights(**self.model_dump())


class OptimizeRouteRequest(BaseModel):
    jobs: List[JobModel]
    start_location: Optional[LocationModel] = None
    start_time: int | str | None = Field(
        default=None,
        description="Route start as 'HH:MM' or minutes since midnight (defaults to 08:00).",
    )
    weights: Optional[RouteWeightsModel] = None


class DispatchRequest(BaseModel):
    jobs: List[JobModel]
    workers: List[WorkerModel] = Field(default_factory=list)
    start_location: Optional[LocationModel] = None
    start_time: int | str | None = None
    date: Optional[dt.date] = Field(default=None, description="Service day; certification expiry is checked against it.")
    weights: Optional[RouteWeightsModel] = None
    max_jobs_per_worker: Optional[int] = Field(None, ge=1)
    balance_workload: bool = True


class DepartureRequest(BaseModel):
    jobs: List[JobModel] = Field(..., description="Route in visiting order.")
    start_location: Optional[LocationModel] = None
    date: dt.date
    departure_options: Optional[List[int | str]] = None
    weights: Optional[RouteWeightsModel] = None


class ArrivalModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    job_id: str
    arrival_minute: float
    arrival_time: str
    travel_minutes: float
    window_penalty: float


class RouteResultModel(BaseModel):
    route: List[JobSummaryModel]
    total_travel_time: float
    total_time_window_penalty: float
    arrivals: List[ArrivalModel]
    end_time: Optional[str] = None
    score: float
    score_breakdown: Dict[str, float]
    improvement_percent: float
    initial_order: List[str]
    optimized_order: List[str]


class WorkerRouteModel(BaseModel):
    worker_id: Optional[str] = None
    worker_name: Optional[str] = None
    jobs: List[JobSummaryModel]
    total_travel_time: float
    score: float
    arrivals: List[ArrivalModel]
    end_time: Optional[str] = None


class DispatchResponse(BaseModel):
    assignments: Dict[str, WorkerRouteModel]
    unassigned: List[JobSummaryModel]
    stats: Dict[str, float]


class DepartureOptionModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    departure_minute: int
    departure_time: str
    total_travel_time: float
    total_travel_time_in_traffic: float
    score: float
    end_minute: float
    end_time: str


class DepartureResponse(BaseModel):
    best_minute: int
    best_time: str
    results: List[DepartureOptionModel]
