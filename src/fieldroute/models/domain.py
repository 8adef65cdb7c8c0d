"""Domain models for jobs, workers and their schedules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import TYPE_CHECKING, Literal, Mapping, Optional

if TYPE_CHECKING:
    from ..services.routing.models import TravelEstimate

Urgency = Literal["emergency", "urgent", "standard", "flexible"]
JobStatus = Literal["unscheduled", "scheduled", "in_progress", "completed", "cancelled"]
WindowType = Literal["hard", "soft", "flexible"]

URGENCY_WEIGHTS: Mapping[str, float] = {
    "emergency": 10,
    "urgent": 5,
    "standard": 1,
    "flexible": 0.5,
}

ACTIVE_STATUSES = frozenset({"scheduled", "in_progress"})
CLOSED_STATUSES = frozenset({"completed", "cancelled"})

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(slots=True, frozen=True)
class Location:
    """A service address; coordinates are optional (no geocoding is done)."""

    lat: Optional[float] = None
    lng: Optional[float] = None
    address: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    def as_query(self) -> str:
        if self.has_coordinates:
            return f"{self.lat},{self.lng}"
        return self.address or ""


@dataclass(slots=True, frozen=True)
class TimeWindowSpec:
    """Explicit scheduling window as captured on the job (times or minute offsets)."""

    type: WindowType = "soft"
    start: time | str | int | None = None
    end: time | str | int | None = None
    preferred: time | str | int | None = None


@dataclass(slots=True)
class Job:
    """A unit of field work. Read-only to the optimizer except for display caches."""

    job_id: str
    location: Optional[Location] = None
    estimated_duration: int = 60
    urgency: str = "standard"
    time_window: Optional[TimeWindowSpec] = None
    scheduled_time: Optional[time] = None
    time_preference: Optional[Literal["morning", "afternoon"]] = None
    required_skills: tuple[str, ...] = ()
    required_certifications: tuple[str, ...] = ()
    sla_deadline: Optional[date] = None
    required_parts: tuple[str, ...] = ()
    status: JobStatus = "unscheduled"
    assigned_worker_id: Optional[str] = None
    scheduled_date: Optional[date] = None
    scheduled_start: Optional[time] = None
    scheduled_end: Optional[time] = None
    job_number: Optional[str] = None
    title: Optional[str] = None
    customer_name: Optional[str] = None
    multi_day_dates: tuple[date, ...] = ()
    travel_time_from_previous: Optional["TravelEstimate"] = field(default=None, compare=False)

    @property
    def urgency_weight(self) -> float:
        return URGENCY_WEIGHTS.get(self.urgency or "standard", 1)

    @property
    def is_multi_day(self) -> bool:
        return len(self.multi_day_dates) > 1

    @property
    def scheduled_at(self) -> Optional[datetime]:
        """Committed start as a naive local datetime, or None when unscheduled."""
        if self.scheduled_date is None:
            return None
        return datetime.combine(self.scheduled_date, self.scheduled_start or time(0, 0))

    @property
    def label(self) -> str:
        return self.job_number or self.job_id


@dataclass(slots=True, frozen=True)
class Certification:
    cert_id: str
    expires_at: Optional[date] = None


@dataclass(slots=True, frozen=True)
class WorkingHours:
    start: Optional[time] = None
    end: Optional[time] = None
    available: bool = True


@dataclass(slots=True, frozen=True)
class TimeOff:
    start_date: date
    end_date: date
    reason: str = "time off"


@dataclass(slots=True)
class Worker:
    """A schedulable technician / vehicle."""

    worker_id: str
    name: str = ""
    skills: frozenset[str] = frozenset()
    certifications: tuple[Certification, ...] = ()
    working_hours: Mapping[str, WorkingHours] = field(default_factory=dict)
    home_base: Optional[Location] = None
    is_active: bool = True
    time_off: tuple[TimeOff, ...] = ()

    def certification(self, cert_id: str) -> Optional[Certification]:
        for cert in self.certifications:
            if cert.cert_id == cert_id:
                return cert
        return None

    def hours_for(self, day: date) -> Optional[WorkingHours]:
        return self.working_hours.get(WEEKDAYS[day.weekday()])


@dataclass(slots=True, frozen=True)
class TimeSlot:
    """Candidate placement for a job on a worker's calendar."""

    date: date
    start: time
    end: time
