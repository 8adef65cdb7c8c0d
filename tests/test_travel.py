import pytest

from fieldroute.models.domain import Job, Location
from fieldroute.services.geospatial import haversine_km, haversine_miles, location_distance_miles
from fieldroute.services.routing.models import TravelEstimate
from fieldroute.services.routing.optimizer import optimize_route
from fieldroute.services.routing.travel import TravelTimeEstimator

NYC = Location(lat=40.7128, lng=-74.0060)
BROOKLYN = Location(lat=40.6782, lng=-73.9442)


class StaticProvider:
    def __init__(self, cell=None, error=None):
        self.cell = cell
        self.error = error
        self.calls = []

    def get_distance_matrix(self, origins, destinations, departure_time=None):
        self.calls.append((list(origins), list(destinations), departure_time))
        if self.error is not None:
            raise self.error
        return [[self.cell for _ in destinations] for _ in origins]


def test_haversine_known_distance():
    miles = haversine_miles(40.7128, -74.0060, 40.6782, -73.9442)
    assert miles == pytest.approx(4.0, abs=0.2)
    assert haversine_km(40.7128, -74.0060, 40.6782, -73.9442) == pytest.approx(miles * 1.609, rel=0.01)
    assert location_distance_miles(NYC, Location(address="Somewhere")) is None


def test_haversine_estimate_uses_average_speed():
    estimator = TravelTimeEstimator()

    estimate = estimator.estimate(NYC, BROOKLYN)

    miles = haversine_miles(NYC.lat, NYC.lng, BROOKLYN.lat, BROOKLYN.lng)
    assert estimate.source == "haversine"
    assert estimate.duration_minutes == round(miles / 30 * 60)
    assert estimate.distance_miles == round(miles, 1)


def test_missing_coordinates_use_default_estimate():
    estimate = TravelTimeEstimator().estimate(NYC, Location(address="12 Main St"))

    assert estimate == TravelEstimate(duration_minutes=30, distance_miles=15.0, source="default")


def test_provider_estimate_wins_when_available():
    cell = TravelEstimate(duration_minutes=12, distance_miles=4.0, source="provider", duration_in_traffic_minutes=18)
    estimator = TravelTimeEstimator(provider=StaticProvider(cell=cell))

    estimate = estimator.estimate(NYC, BROOKLYN)

    assert estimate is cell
    assert estimate.effective_minutes == 18


def test_provider_failure_falls_back_without_raising():
    provider = StaticProvider(error=ConnectionError("down"))
    estimator = TravelTimeEstimator(provider=provider)

    estimate = estimator.estimate(NYC, BROOKLYN)

    assert estimate.source == "haversine"
    assert len(provider.calls) == 1


def test_build_matrix_keys_cells_by_node_id():
    estimator = TravelTimeEstimator()

    matrix = estimator.build_matrix([("__start__", NYC), ("J1", BROOKLYN), ("J2", None)])

    assert matrix.get("J1", "J1").duration_minutes == 0
    assert matrix.get("__start__", "J1").source == "haversine"
    assert matrix.get("J1", "J2").source == "default"
    assert matrix.get("J1", "unknown") is None
    assert "J2" in matrix


def test_build_matrix_skips_provider_with_a_single_routable_location():
    provider = StaticProvider(cell=TravelEstimate(5, 1.0, "provider"))
    estimator = TravelTimeEstimator(provider=provider)

    estimator.build_matrix([("__start__", None), ("J1", NYC)])

    assert provider.calls == []


def test_build_matrix_queries_provider_for_routable_nodes_only():
    provider = StaticProvider(cell=TravelEstimate(7, 2.0, "provider"))
    estimator = TravelTimeEstimator(provider=provider)

    matrix = estimator.build_matrix(
        [("__start__", None), ("J1", NYC), ("J2", Location(address="")), ("J3", BROOKLYN)]
    )

    assert len(provider.calls) == 1
    origins, destinations, _ = provider.calls[0]
    assert origins == [NYC, BROOKLYN]
    assert destinations == [NYC, BROOKLYN]
    assert matrix.get("J1", "J3").source == "provider"
    assert matrix.get("J3", "J1").duration_minutes == 7
    assert matrix.get("__start__", "J1").source == "default"
    assert matrix.get("J1", "J2").source == "default"


def test_optimize_route_without_start_location_still_uses_provider():
    provider = StaticProvider(cell=TravelEstimate(9, 3.0, "provider"))
    estimator = TravelTimeEstimator(provider=provider)
    jobs = [Job(job_id="J1", location=NYC), Job(job_id="J2", location=BROOKLYN)]

    result = optimize_route(jobs, start_location=None, start_minute=480, estimator=estimator)

    assert len(provider.calls) == 1
    assert result.arrivals[1].travel_minutes == 9


def test_build_matrix_uses_one_provider_call():
    provider = StaticProvider(cell=TravelEstimate(7, 2.0, "provider"))
    estimator = TravelTimeEstimator(provider=provider)

    matrix = estimator.build_matrix([("__start__", NYC), ("J1", BROOKLYN), ("J2", NYC)])

    assert len(provider.calls) == 1
    assert matrix.get("J1", "J2").duration_minutes == 7
    assert matrix.get("J2", "J2").duration_minutes == 0
