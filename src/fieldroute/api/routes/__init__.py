"""Route group exports."""

from . import health, impact, routes, schedule

__all__ = ["health", "routes", "schedule", "impact"]
