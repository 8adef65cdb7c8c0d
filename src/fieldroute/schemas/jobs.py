"""Job and worker payloads shared by every endpoint."""

from __future__ import annotations

from datetime import date, time
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import (
    Certification,
    Job,
    Location,
    TimeOff,
    TimeWindowSpec,
    Worker,
    WorkingHours,
)


class LocationModel(BaseModel):
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = None

    def to_domain(self) -> Location:
        return Location(lat=self.lat, lng=self.lng, address=self.address)


class TimeWindowModel(BaseModel):
    type: Literal["hard", "soft", "flexible"] = "soft"
    start: int | str | None = Field(None, description="Minutes since midnight or 'HH:MM'.")
    end: int | str | None = None
    preferred: int | str | None = None


class JobModel(BaseModel):
    job_id: str
    location: Optional[LocationModel] = None
    estimated_duration: int = Field(60, ge=1)
    urgency: str = "standard"
    time_window: Optional[TimeWindowModel] = None
    scheduled_time: Optional[time] = Field(None, description="Fixed appointment time.")
    time_preference: Optional[Literal["morning", "afternoon"]] = None
    required_skills: List[str] = Field(default_factory=list)
    required_certifications: List[str] = Field(default_factory=list)
    sla_deadline: Optional[date] = None
    required_parts: List[str] = Field(default_factory=list)
    status: Literal["unscheduled", "scheduled", "in_progress", "completed", "cancelled"] = "unscheduled"
    assigned_worker_id: Optional[str] = None
    scheduled_date: Optional[date] = None
    scheduled_start: Optional[time] = None
    scheduled_end: Optional[time] = None
    job_number: Optional[str] = None
    title: Optional[str] = None
    customer_name: Optional[str] = None
    multi_day_dates: List[date] = Field(default_factory=list)

    def to_domain(self) -> Job:
        window = None
        if self.time_window is not None:
            window = TimeWindowSpec(
                type=self.time_window.type,
                start=self.time_window.start,
                end=self.time_window.end,
                preferred=self.time_window.preferred,
            )
        return Job(
            job_id=self.job_id,
            location=self.location.to_domain() if self.location else None,
            estimated_duration=self.estimated_duration,
            urgency=self.urgency,
            time_window=window,
            scheduled_time=self.scheduled_time,
            time_preference=self.time_preference,
            required_skills=tuple(self.required_skills),
            required_certifications=tuple(self.required_certifications),
            sla_deadline=self.sla_deadline,
            required_parts=tuple(self.required_parts),
            status=self.status,
            assigned_worker_id=self.assigned_worker_id,
            scheduled_date=self.scheduled_date,
            scheduled_start=self.scheduled_start,
            scheduled_end=self.scheduled_end,
            job_number=self.job_number,
            title=self.title,
            customer_name=self.customer_name,
            multi_day_dates=tuple(self.multi_day_dates),
        )


class CertificationModel(BaseModel):
    cert_id: str
    expires_at: Optional[date] = None


class WorkingHoursModel(BaseModel):
    start: Optional[time] = None
    end: Optional[time] = None
    available: bool = True

    def to_domain(self) -> WorkingHours:
        return WorkingHours(start=self.start, end=self.end, available=self.available)


class TimeOffModel(BaseModel):
    start_date: date
    end_date: date
    reason: str = "time off"


class WorkerModel(BaseModel):
    worker_id: str
    name: str = ""
    skills: List[str] = Field(default_factory=list)
    certifications: List[CertificationModel] = Field(default_factory=list)
    working_hours: Dict[str, WorkingHoursModel] = Field(
        default_factory=dict,
        description="Keyed by lower-case weekday name (monday..sunday).",
    )
    home_base: Optional[LocationModel] = None
    is_active: bool = True
    time_off: List[TimeOffModel] = Field(default_factory=list)

    def to_domain(self) -> Worker:
        return Worker(
            worker_id=self.worker_id,
            name=self.name,
            skills=frozenset(self.skills),
            certifications=tuple(Certification(cert.cert_id, cert.expires_at) for cert in self.certifications),
            working_hours=working_hours_to_domain(self.working_hours),
            home_base=self.home_base.to_domain() if self.home_base else None,
            is_active=self.is_active,
            time_off=tuple(TimeOff(off.start_date, off.end_date, off.reason) for off in self.time_off),
        )


def working_hours_to_domain(hours: Dict[str, WorkingHoursModel] | None) -> Dict[str, WorkingHours]:
    return {day.lower(): value.to_domain() for day, value in (hours or {}).items()}


class JobSummaryModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    job_id: str
    job_number: Optional[str] = None
    title: Optional[str] = None
    customer_name: Optional[str] = None
    urgency: str
    estimated_duration: int
    status: str
    assigned_worker_id: Optional[str] = None
    scheduled_date: Optional[date] = None
    scheduled_start: Optional[time] = None
