"""HTTP client for a Distance Matrix travel-time provider."""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime
from typing import Optional, Protocol, Sequence

import httpx

from ...config import settings
from ...models.domain import Location
from .models import TravelEstimate

METERS_PER_MILE = 1609.34
# Distance Matrix APIs cap elements per request; 25 origins x 25 destinations is the common limit.
DEFAULT_MAX_LOCATIONS_PER_REQUEST = 25

logger = logging.getLogger(__name__)


class TravelTimeProvider(Protocol):
    """Capability used by the estimator; implementations may raise on any failure."""

    def get_distance_matrix(
        self,
        origins: Sequence[Location],
        destinations: Sequence[Location],
        departure_time: Optional[datetime] = None,
    ) -> list[list[Optional[TravelEstimate]]]:
        ...


class DistanceMatrixClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        max_locations_per_request: int = DEFAULT_MAX_LOCATIONS_PER_REQUEST,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.distance_provider_url
        if not self.base_url:
            raise ValueError("Distance provider URL is not configured.")
        self.api_key = api_key if api_key is not None else settings.distance_provider_api_key
        self.timeout = timeout if timeout is not None else settings.distance_provider_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.distance_provider_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.distance_provider_backoff_seconds
        )
        self.max_locations_per_request = max_locations_per_request
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self._transport,
        )

    def _request(self, params: dict) -> dict:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(self.base_url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    status = data.get("status")
                    if status != "OK":
                        raise ValueError(f"Distance provider returned status {status}: {data.get('error_message')}")
                    return data
                except httpx.HTTPStatusError:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Distance provider timed out after {self.max_retries} retries: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Distance provider timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.ConnectError, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to connect to distance provider at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Distance provider network error, retrying in {wait_time:.1f}s: {e}")
                    time.sleep(wait_time)
        finally:
            client.close()

    def _matrix_block(
        self,
        origins: Sequence[Location],
        destinations: Sequence[Location],
        departure_time: Optional[datetime],
    ) -> list[list[Optional[TravelEstimate]]]:
        params = {
            "origins": "|".join(location.as_query() for location in origins),
            "destinations": "|".join(location.as_query() for location in destinations),
            "units": "imperial",
        }
        if self.api_key:
            params["key"] = self.api_key
        if departure_time is not None:
            params["departure_time"] = str(int(departure_time.timestamp()))

        data = self._request(params)
        rows = data.get("rows") or []
        if len(rows) != len(origins):
            raise ValueError(f"Distance provider returned {len(rows)} rows for {len(origins)} origins.")
        return [[_parse_element(element) for element in row.get("elements", [])] for row in rows]

    def get_distance_matrix(
        self,
        origins: Sequence[Location],
        destinations: Sequence[Location],
        departure_time: Optional[datetime] = None,
    ) -> list[list[Optional[TravelEstimate]]]:
        """Matrix of estimates [origin][destination], chunked to the provider's element limit."""
        if not origins or not destinations:
            return [[] for _ in origins]

        size = self.max_locations_per_request
        matrix: list[list[Optional[TravelEstimate]]] = [[None] * len(destinations) for _ in origins]
        for row_start in range(0, len(origins), size):
            origin_chunk = origins[row_start : row_start + size]
            for col_start in range(0, len(destinations), size):
                destination_chunk = destinations[col_start : col_start + size]
                block = self._matrix_block(origin_chunk, destination_chunk, departure_time)
                for local_row, block_row in enumerate(block):
                    for local_col, cell in enumerate(block_row[: len(destination_chunk)]):
                        matrix[row_start + local_row][col_start + local_col] = cell
        return matrix


def _parse_element(element: dict) -> Optional[TravelEstimate]:
    if element.get("status") != "OK":
        return None
    duration = element.get("duration") or {}
    distance = element.get("distance") or {}
    if "value" not in duration or "value" not in distance:
        return None
    in_traffic = element.get("duration_in_traffic")
    return TravelEstimate(
        duration_minutes=math.ceil(duration["value"] / 60),
        distance_miles=distance["value"] / METERS_PER_MILE,
        source="provider",
        duration_in_traffic_minutes=math.ceil(in_traffic["value"] / 60) if in_traffic else None,
    )


def check_health(base_url: str | None = None, transport: httpx.BaseTransport | None = None) -> bool:
    """Probe the provider with a single two-point request."""
    base = base_url or settings.distance_provider_url
    if not base:
        return False
    try:
        client = DistanceMatrixClient(base_url=base, max_retries=0, timeout=5.0, transport=transport)
        matrix = client.get_distance_matrix(
            [Location(lat=40.7128, lng=-74.0060)],
            [Location(lat=40.7306, lng=-73.9352)],
        )
        return bool(matrix and matrix[0] and matrix[0][0] is not None)
    except (httpx.HTTPError, ConnectionError, ValueError):
        return False
