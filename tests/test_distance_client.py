from datetime import datetime, timezone

import httpx
import pytest

from fieldroute.models.domain import Location
from fieldroute.services.routing.distance_client import DistanceMatrixClient, check_health

BASE_URL = "https://distance.example.test/matrix"
A = Location(lat=40.7128, lng=-74.0060)
B = Location(lat=40.6782, lng=-73.9442)
C = Location(address="1 Main St, Springfield")


def _element(seconds: int, meters: int, traffic_seconds: int | None = None) -> dict:
    element = {"status": "OK", "duration": {"value": seconds}, "distance": {"value": meters}}
    if traffic_seconds is not None:
        element["duration_in_traffic"] = {"value": traffic_seconds}
    return element


def _client(handler, **kwargs) -> DistanceMatrixClient:
    return DistanceMatrixClient(
        base_url=BASE_URL,
        api_key="secret",
        backoff_seconds=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_matrix_request_and_parsing():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "rows": [
                    {"elements": [_element(0, 0), _element(610, 3219, traffic_seconds=900)]},
                    {"elements": [_element(590, 3300), {"status": "ZERO_RESULTS"}]},
                ],
            },
        )

    departure = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
    matrix = _client(handler).get_distance_matrix([A, C], [A, B], departure_time=departure)

    params = seen[0].url.params
    assert params["origins"] == "40.7128,-74.006|1 Main St, Springfield"
    assert params["units"] == "imperial"
    assert params["key"] == "secret"
    assert params["departure_time"] == str(int(departure.timestamp()))

    assert matrix[0][1].duration_minutes == 11
    assert matrix[0][1].duration_in_traffic_minutes == 15
    assert matrix[0][1].distance_miles == pytest.approx(2.0, abs=0.01)
    assert matrix[0][1].source == "provider"
    assert matrix[1][1] is None


def test_large_requests_are_chunked():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        origins = request.url.params["origins"].split("|")
        destinations = request.url.params["destinations"].split("|")
        calls.append((len(origins), len(destinations)))
        rows = [{"elements": [_element(60, 1609) for _ in destinations]} for _ in origins]
        return httpx.Response(200, json={"status": "OK", "rows": rows})

    locations = [Location(lat=40.0 + index / 100, lng=-74.0) for index in range(3)]
    matrix = _client(handler, max_locations_per_request=2).get_distance_matrix(locations, locations)

    assert sorted(calls) == [(1, 1), (1, 2), (2, 1), (2, 2)]
    assert all(cell.duration_minutes == 1 for row in matrix for cell in row)


def test_non_ok_status_raises_value_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "REQUEST_DENIED", "error_message": "bad key"})

    with pytest.raises(ValueError):
        _client(handler).get_distance_matrix([A], [B])


def test_server_errors_are_retried_then_raised():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(503)

    with pytest.raises(httpx.HTTPStatusError):
        _client(handler, max_retries=2).get_distance_matrix([A], [B])
    assert len(attempts) == 3


def test_connection_failures_become_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ConnectionError):
        _client(handler, max_retries=1).get_distance_matrix([A], [B])


def test_missing_url_is_rejected(monkeypatch: pytest.MonkeyPatch):
    from fieldroute.config import settings

    monkeypatch.setattr(settings, "distance_provider_url", None)
    with pytest.raises(ValueError):
        DistanceMatrixClient()


def test_check_health():
    def healthy(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "OK", "rows": [{"elements": [_element(600, 5000)]}]})

    def failing(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    assert check_health(BASE_URL, transport=httpx.MockTransport(healthy)) is True
    assert check_health(BASE_URL, transport=httpx.MockTransport(failing)) is False
