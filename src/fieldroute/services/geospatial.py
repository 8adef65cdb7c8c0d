"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Location

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_MILES = 3959.0


def _central_angle(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    return EARTH_RADIUS_KM * _central_angle(lat1, lon1, lat2, lon2)


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in statute miles."""

    return EARTH_RADIUS_MILES * _central_angle(lat1, lon1, lat2, lon2)


def location_distance_miles(origin: Location | None, destination: Location | None) -> float | None:
    """Haversine miles between two locations, or None when either lacks coordinates."""

    if origin is None or destination is None:
        return None
    if not (origin.has_coordinates and destination.has_coordinates):
        return None
    return haversine_miles(origin.lat, origin.lng, destination.lat, destination.lng)
