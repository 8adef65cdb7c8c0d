"""Time window resolution and arrival penalties."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...models.domain import Job, WindowType
from ..timeutils import to_minutes

MORNING_WINDOW = (480, 720, 540)
AFTERNOON_WINDOW = (720, 1020, 840)
APPOINTMENT_EARLY_MINUTES = 15
APPOINTMENT_LATE_MINUTES = 30

HARD_EARLY_RATE = 2.0
SOFT_EARLY_RATE = 0.5
HARD_LATE_RATE = 5.0
SOFT_LATE_RATE = 1.0
PREFERRED_BONUS_RATE = 0.1

WINDOW_STRICTNESS = {"hard": 0, "soft": 1, "flexible": 2}


@dataclass(slots=True, frozen=True)
class TimeWindow:
    type: WindowType
    start: Optional[int] = None
    end: Optional[int] = None
    preferred: Optional[int] = None


FLEXIBLE_WINDOW = TimeWindow(type="flexible")


def parse_time_window(job: Job) -> TimeWindow:
    """Resolve a job's scheduling preference: explicit window, appointment, coarse preference, flexible."""
    if job.time_window is not None:
        declared = job.time_window
        return TimeWindow(
            type=declared.type or "soft",
            start=to_minutes(declared.start),
            end=to_minutes(declared.end),
            preferred=to_minutes(declared.preferred),
        )

    appointment = to_minutes(job.scheduled_time)
    if appointment is not None:
        return TimeWindow(
            type="hard",
            start=appointment - APPOINTMENT_EARLY_MINUTES,
            end=appointment + APPOINTMENT_LATE_MINUTES,
            preferred=appointment,
        )

    if job.time_preference == "morning":
        start, end, preferred = MORNING_WINDOW
        return TimeWindow(type="soft", start=start, end=end, preferred=preferred)
    if job.time_preference == "afternoon":
        start, end, preferred = AFTERNOON_WINDOW
        return TimeWindow(type="soft", start=start, end=end, preferred=preferred)

    return FLEXIBLE_WINDOW


def time_window_penalty(arrival_minute: float, window: TimeWindow) -> float:
    """Penalty for arriving at `arrival_minute`; negative inside the window near the preferred time."""
    if window.type == "flexible":
        return 0.0
    if window.start is None or window.end is None:
        return 0.0

    if arrival_minute < window.start:
        early = window.start - arrival_minute
        return early * (HARD_EARLY_RATE if window.type == "hard" else SOFT_EARLY_RATE)

    if arrival_minute > window.end:
        late = arrival_minute - window.end
        return late * (HARD_LATE_RATE if window.type == "hard" else SOFT_LATE_RATE)

    if window.preferred is not None:
        return -abs(arrival_minute - window.preferred) * PREFERRED_BONUS_RATE

    return 0.0
