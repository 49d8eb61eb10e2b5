"""Tracked vehicle state owned by the entity registry."""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

from .geo import Point


class EntityView(BaseModel):
    """Read-only projection of a tracked vehicle handed to renderers."""

    vehicle_id: str
    route_id: str
    lat: float
    lng: float
    heading: float
    label: Optional[str] = None
    color: Optional[str] = None
    tweening: bool = False


@dataclass
class TrackedEntity:
    id: str
    route_id: str
    current_position: Point
    target_position: Point
    heading: float = 0.0
    last_seen_at: Optional[float] = None
    active_animation_handle: Optional[int] = None
    label: Optional[str] = None

    @property
    def is_tweening(self) -> bool:
        return self.active_animation_handle is not None

    def view(self, color: Optional[str] = None) -> EntityView:
        return EntityView(
            vehicle_id=self.id,
            route_id=self.route_id,
            lat=self.current_position.lat,
            lng=self.current_position.lng,
            heading=self.heading,
            label=self.label,
            color=color,
            tweening=self.is_tweening,
        )
