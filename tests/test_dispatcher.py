from datetime import date, time

from fieldroute.models.domain import Certification, Job, Location, Worker, WorkingHours
from fieldroute.services.routing.dispatcher import SINGLE_ROUTE_KEY, dispatch_priority, multi_vehicle_optimize
from fieldroute.services.routing.models import DispatchOptions

SERVICE_DAY = date(2024, 1, 1)
HOURS = {"monday": WorkingHours(start=time(8, 0), end=time(17, 0))}


def _job(job_id: str, lat: float | None = None, lng: float | None = None, **kwargs) -> Job:
    location = Location(lat=lat, lng=lng) if lat is not None else None
    return Job(job_id=job_id, location=location, **kwargs)


def _worker(worker_id: str, skills=(), lat: float | None = None, lng: float | None = None, **kwargs) -> Worker:
    home = Location(lat=lat, lng=lng) if lat is not None else None
    return Worker(worker_id=worker_id, name=worker_id.upper(), skills=frozenset(skills), working_hours=HOURS, home_base=home, **kwargs)


def _assigned_ids(plan) -> list[str]:
    return sorted(job.job_id for route in plan.assignments.values() for job in route.jobs)


def test_every_job_is_assigned_or_unassigned_exactly_once():
    jobs = [
        _job("J1", 40.00, -74.00),
        _job("J2", 40.01, -74.01, required_skills=("hvac",)),
        _job("J3", 40.30, -74.30, urgency="emergency"),
        _job("J4", 40.31, -74.31, required_skills=("roofing",)),
        _job("J5", 40.02, -74.02, urgency="flexible"),
    ]
    workers = [_worker("w1", skills=("hvac",), lat=40.0, lng=-74.0), _worker("w2", lat=40.3, lng=-74.3)]

    plan = multi_vehicle_optimize(jobs, workers, start_minute=480, today=SERVICE_DAY)

    unassigned = [job.job_id for job in plan.unassigned]
    assert sorted(_assigned_ids(plan) + unassigned) == sorted(job.job_id for job in jobs)
    assert unassigned == ["J4"]
    assert "J2" in [job.job_id for job in plan.assignments["w1"].jobs]
    assert plan.stats["total_jobs"] == 4
    assert plan.stats["unassigned_count"] == 1


def test_workers_without_required_certification_are_skipped():
    jobs = [_job("J1", required_certifications=("gas-safe",))]
    workers = [
        _worker("expired", certifications=(Certification("gas-safe", expires_at=date(2023, 12, 31)),)),
        _worker("current", certifications=(Certification("gas-safe", expires_at=date(2025, 1, 1)),)),
    ]

    plan = multi_vehicle_optimize(jobs, workers, today=SERVICE_DAY)

    assert [job.job_id for job in plan.assignments["current"].jobs] == ["J1"]
    assert plan.assignments["expired"].jobs == []


def test_capacity_limit_leaves_overflow_unassigned():
    jobs = [_job(f"J{index}") for index in range(5)]
    workers = [_worker("w1"), _worker("w2")]

    plan = multi_vehicle_optimize(jobs, workers, options=DispatchOptions(max_jobs_per_worker=2), today=SERVICE_DAY)

    assert plan.assigned_count() == 4
    assert len(plan.unassigned) == 1
    assert all(len(route.jobs) <= 2 for route in plan.assignments.values())


def test_zero_capacity_leaves_every_job_unassigned():
    jobs = [_job("J1"), _job("J2")]

    plan = multi_vehicle_optimize(jobs, [_worker("w1")], options=DispatchOptions(max_jobs_per_worker=0), today=SERVICE_DAY)

    assert plan.assigned_count() == 0
    assert [job.job_id for job in plan.unassigned] == ["J1", "J2"]


def test_balancing_spreads_identical_jobs():
    jobs = [_job(f"J{index}") for index in range(4)]
    workers = [_worker("w1"), _worker("w2")]

    plan = multi_vehicle_optimize(jobs, workers, today=SERVICE_DAY)

    assert [len(route.jobs) for route in plan.assignments.values()] == [2, 2]
    assert plan.stats["workers_used"] == 2


def test_no_workers_falls_back_to_single_route():
    jobs = [_job("A"), _job("B", urgency="emergency")]

    plan = multi_vehicle_optimize(jobs, [])

    assert list(plan.assignments) == [SINGLE_ROUTE_KEY]
    assert [job.job_id for job in plan.assignments[SINGLE_ROUTE_KEY].jobs] == ["B", "A"]
    assert plan.unassigned == []


def test_no_jobs_gives_empty_plan():
    plan = multi_vehicle_optimize([], [_worker("w1")])

    assert plan.assignments == {}
    assert plan.unassigned == []


def test_dispatch_priority_orders_urgency_then_strictness():
    emergency = _job("E", urgency="emergency")
    appointment = _job("H", scheduled_time=time(9, 0))
    morning = _job("M", time_preference="morning")
    flexible = _job("F")

    ordered = sorted([flexible, morning, appointment, emergency], key=dispatch_priority)

    assert [job.job_id for job in ordered] == ["E", "H", "M", "F"]
