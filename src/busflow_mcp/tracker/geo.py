"""Geographic primitives and compass bearing calculation."""

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Point:
    lat: float
    lng: float

    def is_finite(self) -> bool:
        return math.isfinite(self.lat) and math.isfinite(self.lng)


def bearing(previous: Optional[Point], next_point: Point, fallback: float = 0.0) -> float:
    """
    Initial great-circle bearing from one point to another.

    Args:
        previous: The last confirmed position, or None if there is none.
        next_point: The newly confirmed position.
        fallback: Heading returned when there is no movement to measure.

    Returns:
        Compass heading in degrees, in the range [0, 360).
    """
    if previous is None or previous == next_point:
        return fallback

    lat1 = math.radians(previous.lat)
    lat2 = math.radians(next_point.lat)
    delta_lng = math.radians(next_point.lng - previous.lng)

    y = math.sin(delta_lng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(delta_lng)

    heading = math.degrees(math.atan2(y, x))
    # -0.0 and tiny negatives round to 360.0 without the modulo
    return (heading + 360.0) % 360.0
