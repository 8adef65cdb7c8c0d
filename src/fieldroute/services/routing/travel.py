"""Travel time estimation with provider, haversine and fixed fallbacks."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Location
from ..geospatial import location_distance_miles
from .distance_client import DistanceMatrixClient, TravelTimeProvider
from .models import TravelEstimate, TravelMatrix

logger = logging.getLogger(__name__)

ZERO_LEG = TravelEstimate(duration_minutes=0, distance_miles=0.0, source="haversine")


class TravelTimeEstimator:
    """Answers leg durations; never raises for provider trouble."""

    def __init__(
        self,
        provider: TravelTimeProvider | None = None,
        average_speed_mph: float | None = None,
        fallback_minutes: int | None = None,
        fallback_miles: float | None = None,
    ) -> None:
        self.provider = provider
        self.average_speed_mph = average_speed_mph or settings.average_speed_mph
        self.fallback_minutes = fallback_minutes if fallback_minutes is not None else settings.fallback_travel_minutes
        self.fallback_miles = fallback_miles if fallback_miles is not None else settings.fallback_travel_miles

    def fallback(self, origin: Location | None, destination: Location | None) -> TravelEstimate:
        miles = location_distance_miles(origin, destination)
        if miles is None:
            return TravelEstimate(
                duration_minutes=self.fallback_minutes,
                distance_miles=self.fallback_miles,
                source="default",
            )
        return TravelEstimate(
            duration_minutes=round(miles / self.average_speed_mph * 60),
            distance_miles=round(miles, 1),
            source="haversine",
        )

    def estimate(
        self,
        origin: Location | None,
        destination: Location | None,
        departure_time: Optional[datetime] = None,
    ) -> TravelEstimate:
        estimate = self.fallback(origin, destination)
        if self.provider is None or origin is None or destination is None:
            return estimate
        try:
            matrix = self.provider.get_distance_matrix([origin], [destination], departure_time=departure_time)
        except Exception as exc:
            logger.warning(f"Distance provider failed for single leg, using {estimate.source} estimate: {exc}")
            return estimate
        cell = matrix[0][0] if matrix and matrix[0] else None
        return cell or estimate

    def build_matrix(
        self,
        nodes: Sequence[tuple[str, Location | None]],
        departure_time: Optional[datetime] = None,
    ) -> TravelMatrix:
        """Full pairwise matrix in one provider request over the routable nodes.

        Nodes without a usable location are left out of the request; their cells,
        and any cell the provider leaves empty, fall back individually.
        """
        node_ids = tuple(node_id for node_id, _ in nodes)
        locations = [location for _, location in nodes]

        # node index -> row/column in the provider response
        routable = [index for index, location in enumerate(locations) if location is not None and location.as_query()]
        positions = {index: position for position, index in enumerate(routable)}

        provided: list[list[Optional[TravelEstimate]]] | None = None
        if self.provider is not None and len(routable) > 1:
            queried = [locations[index] for index in routable]
            try:
                provided = self.provider.get_distance_matrix(queried, queried, departure_time=departure_time)
            except Exception as exc:
                logger.warning(
                    f"Distance provider unavailable for {len(queried)} locations, using fallback estimates: {exc}"
                )
                provided = None

        cells: list[list[Optional[TravelEstimate]]] = []
        for row, origin in enumerate(locations):
            row_cells: list[Optional[TravelEstimate]] = []
            for column, destination in enumerate(locations):
                if row == column:
                    row_cells.append(ZERO_LEG)
                    continue
                row_cells.append(
                    self._provided_cell(provided, positions.get(row), positions.get(column))
                    or self.fallback(origin, destination)
                )
            cells.append(row_cells)
        return TravelMatrix(nodes=node_ids, cells=cells)

    @staticmethod
    def _provided_cell(
        provided: list[list[Optional[TravelEstimate]]] | None,
        row: int | None,
        column: int | None,
    ) -> Optional[TravelEstimate]:
        if provided is None or row is None or column is None:
            return None
        if row >= len(provided) or column >= len(provided[row]):
            return None
        return provided[row][column]


def default_estimator() -> TravelTimeEstimator:
    """Estimator backed by the configured distance provider, or pure fallbacks when none is set."""
    provider = DistanceMatrixClient() if settings.distance_provider_url else None
    return TravelTimeEstimator(provider=provider)
