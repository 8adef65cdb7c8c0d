from datetime import date, datetime, time

from fieldroute.models.domain import Certification, Job, Location, TimeOff, TimeSlot, Worker, WorkingHours
from fieldroute.services.scheduling.constraints import evaluate_constraints
from fieldroute.services.scheduling.directory import InMemoryWorkerDirectory, check_worker_availability

MONDAY = date(2024, 1, 1)
NOW = datetime(2023, 12, 28, 9, 0)
HOURS = {"monday": WorkingHours(start=time(8, 0), end=time(17, 0))}


def _worker(worker_id: str = "W1", **kwargs) -> Worker:
    kwargs.setdefault("working_hours", HOURS)
    return Worker(worker_id=worker_id, name="Pat", **kwargs)


def _slot(start: time = time(9, 0), end: time = time(10, 0), day: date = MONDAY) -> TimeSlot:
    return TimeSlot(date=day, start=start, end=end)


def _booked(job_id: str, start: time, end: time, worker_id: str = "W1", **kwargs) -> Job:
    return Job(
        job_id=job_id,
        status="scheduled",
        assigned_worker_id=worker_id,
        scheduled_date=MONDAY,
        scheduled_start=start,
        scheduled_end=end,
        **kwargs,
    )


def test_missing_skill_blocks_with_single_violation():
    job = Job(job_id="J1", required_skills=("hvac",))

    evaluation = evaluate_constraints(job, _worker(skills=frozenset({"plumbing"})), _slot(), now=NOW)

    assert evaluation.can_schedule is False
    assert evaluation.score == 0
    assert [violation.type for violation in evaluation.violations] == ["skill"]
    assert evaluation.summary.startswith("Cannot schedule")


def test_clean_assignment_scores_full_marks():
    evaluation = evaluate_constraints(Job(job_id="J1"), _worker(), _slot(), now=NOW)

    assert evaluation.can_schedule is True
    assert evaluation.score == 100
    assert evaluation.summary == "All constraints satisfied"


def test_missing_and_expired_certifications_are_separate_violations():
    job = Job(job_id="J1", required_certifications=("gas", "electrical"))
    worker = _worker(certifications=(Certification("gas", expires_at=date(2023, 6, 30)),))

    evaluation = evaluate_constraints(job, worker, _slot(), now=NOW)

    messages = [violation.message for violation in evaluation.violations]
    assert evaluation.can_schedule is False
    assert messages == ["Missing certifications: electrical", "Expired certifications: gas"]


def test_certification_expiring_later_is_accepted():
    job = Job(job_id="J1", required_certifications=("gas",))
    worker = _worker(certifications=(Certification("gas", expires_at=date(2024, 6, 30)),))

    assert evaluate_constraints(job, worker, _slot(), now=NOW).can_schedule is True


def test_overlapping_job_is_a_conflict():
    existing = [_booked("B1", time(9, 30), time(10, 30)), _booked("other", time(9, 0), time(10, 0), worker_id="W2")]

    evaluation = evaluate_constraints(Job(job_id="J1"), _worker(), _slot(), existing, now=NOW)

    assert evaluation.can_schedule is False
    assert [violation.conflicting_job_id for violation in evaluation.violations] == ["B1"]


def test_adjacent_jobs_do_not_conflict():
    existing = [_booked("B1", time(8, 0), time(9, 0)), _booked("B2", time(10, 0), time(11, 0))]

    evaluation = evaluate_constraints(Job(job_id="J1"), _worker(), _slot(), existing, now=NOW)

    assert evaluation.can_schedule is True


def test_outside_working_hours_is_unavailable():
    evaluation = evaluate_constraints(Job(job_id="J1"), _worker(), _slot(time(16, 30), time(17, 30)), now=NOW)

    assert evaluation.can_schedule is False
    assert evaluation.violations[0].type == "availability"


def test_tight_travel_is_a_warning_and_recorded_on_job():
    previous = _booked("B1", time(8, 0), time(8, 55), location=Location(lat=40.0, lng=-74.0))
    job = Job(job_id="J1", location=Location(lat=40.2, lng=-74.0))

    evaluation = evaluate_constraints(job, _worker(), _slot(), [previous], now=NOW)

    assert evaluation.can_schedule is True
    assert [warning.type for warning in evaluation.warnings] == ["travel_time"]
    assert evaluation.score == 85
    assert job.travel_time_from_previous is evaluation.travel_from_previous
    assert evaluation.travel_from_previous.source == "haversine"


def test_sla_deadline_rules():
    late = evaluate_constraints(Job(job_id="J1", sla_deadline=date(2023, 12, 31)), _worker(), _slot(), now=NOW)
    close = evaluate_constraints(Job(job_id="J2", sla_deadline=date(2024, 1, 2)), _worker(), _slot(), now=NOW)

    assert late.can_schedule is False
    assert late.violations[0].type == "sla"
    assert close.can_schedule is True
    assert close.warnings[0].message == "SLA deadline is tomorrow"
    assert close.score == 90


def test_heavy_workload_reduces_score():
    existing = [_booked(f"B{hour}", time(hour, 0), time(hour, 30)) for hour in (8, 10, 11, 12, 13, 14, 15)]

    evaluation = evaluate_constraints(Job(job_id="J1"), _worker(), _slot(), existing, now=NOW)

    assert evaluation.can_schedule is True
    assert evaluation.warnings[0].type == "workload"
    assert evaluation.score == 100 - 5 * (7 - 5)


def test_required_parts_are_informational():
    evaluation = evaluate_constraints(Job(job_id="J1", required_parts=("compressor",)), _worker(), _slot(), now=NOW)

    assert evaluation.can_schedule is True
    assert evaluation.score == 100
    assert evaluation.warnings[0].severity == "info"


def test_availability_checks():
    worker = _worker(time_off=(TimeOff(date(2023, 12, 31), date(2024, 1, 2), reason="vacation"),))

    assert check_worker_availability(worker, MONDAY).reason == "Time off: vacation"
    assert check_worker_availability(_worker(is_active=False), MONDAY).available is False
    assert check_worker_availability(_worker(), date(2024, 1, 2)).reason == "Not scheduled to work on tuesday"
    assert InMemoryWorkerDirectory([_worker()]).check_availability(_worker(), MONDAY).available is True
