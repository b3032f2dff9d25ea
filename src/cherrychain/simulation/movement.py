"""Great-circle movement -- containers follow a fixed route as a function of trip progress.

Position is re-derived from progress every tick rather than integrated from
the previous position, so repeated application never accumulates drift.

Interpolation is spherical linear ("slerp") between the route endpoints:

    cos(d) = sin(phi1)·sin(phi2) + cos(phi1)·cos(phi2)·cos(dlambda)
    a = sin((1 - t)·d) / sin(d)
    b = sin(t·d) / sin(d)
    p = a·S_xyz + b·E_xyz   -> back to lat/lon via atan2

Progress is derived from the simulation clock:
``t = min(sim_time / journey_duration, 1.0)``.  Past t=1 the container
sits at the route end.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .entity import ContainerEntity, Position

# 30 simulated days
JOURNEY_DURATION = 30.0 * 24.0 * 3600.0

# Below this angular separation (radians) the endpoints are treated as one point
COINCIDENT_THRESHOLD = 0.0001

EARTH_RADIUS_KM = 6371.0

# Valparaíso region, Chile -> Shanghai region, China
CHILE = Position(lat=-33.0, lon=-71.0)
CHINA = Position(lat=31.0, lon=121.0)


@dataclass(frozen=True)
class Route:
    """A fixed great-circle voyage shared by every container in a world."""

    start: Position
    end: Position
    duration: float = JOURNEY_DURATION  # simulated seconds

    @property
    def distance_km(self) -> float:
        return angular_distance(self.start, self.end) * EARTH_RADIUS_KM

    def to_dict(self) -> dict:
        return {
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "duration": self.duration,
            "distance_km": self.distance_km,
        }


DEFAULT_ROUTE = Route(start=CHILE, end=CHINA)


def angular_distance(start: Position, end: Position) -> float:
    """Central angle between two positions in radians.

    The cosine is clamped to [-1, 1] so identical and antipodal points
    never push acos out of its domain.
    """
    phi1 = math.radians(start.lat)
    phi2 = math.radians(end.lat)
    d_lambda = math.radians(end.lon) - math.radians(start.lon)
    cos_d = math.sin(phi1) * math.sin(phi2) + math.cos(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return math.acos(max(-1.0, min(1.0, cos_d)))


def interpolate_great_circle(start: Position, end: Position, t: float) -> Position:
    """Point at fraction *t* of the way along the great circle from *start* to *end*."""
    phi1 = math.radians(start.lat)
    lambda1 = math.radians(start.lon)
    phi2 = math.radians(end.lat)
    lambda2 = math.radians(end.lon)

    d = angular_distance(start, end)
    if d < COINCIDENT_THRESHOLD:
        return start

    sin_d = math.sin(d)
    a = math.sin((1.0 - t) * d) / sin_d
    b = math.sin(t * d) / sin_d

    x = a * math.cos(phi1) * math.cos(lambda1) + b * math.cos(phi2) * math.cos(lambda2)
    y = a * math.cos(phi1) * math.sin(lambda1) + b * math.cos(phi2) * math.sin(lambda2)
    z = a * math.sin(phi1) + b * math.sin(phi2)

    lat = math.degrees(math.atan2(z, math.sqrt(x * x + y * y)))
    lon = math.degrees(math.atan2(y, x))
    return Position(lat=lat, lon=lon)


def journey_progress(sim_time: float, duration: float = JOURNEY_DURATION) -> float:
    """Trip progress in [0, 1] after *sim_time* simulated seconds."""
    if duration <= 0.0:
        return 1.0
    return max(0.0, min(sim_time / duration, 1.0))


class MovementSystem:
    """Places each container on the route according to trip progress."""

    def __init__(self, route: Route = DEFAULT_ROUTE) -> None:
        self.route = route

    def progress(self, sim_time: float) -> float:
        return journey_progress(sim_time, self.route.duration)

    def update(self, entity: ContainerEntity, progress: float) -> None:
        entity.position = interpolate_great_circle(self.route.start, self.route.end, progress)
