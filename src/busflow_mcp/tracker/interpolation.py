"""Frame-driven position tweening for tracked vehicles."""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .entities import TrackedEntity
from .geo import Point

logger = logging.getLogger(__name__)

DEFAULT_TWEEN_DURATION_MS = 1500.0


@dataclass
class Tween:
    handle: int
    entity: TrackedEntity
    start: Point
    target: Point
    started_at: float
    duration: float

    def fraction(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        elapsed = max(now - self.started_at, 0.0)
        return min(elapsed / self.duration, 1.0)

    def position_at(self, fraction: float) -> Point:
        # Linear in lat/lng space; consecutive fixes are close together.
        return Point(
            self.start.lat + (self.target.lat - self.start.lat) * fraction,
            self.start.lng + (self.target.lng - self.start.lng) * fraction,
        )


class InterpolationDriver:
    """
    Moves each entity's ``current_position`` toward its ``target_position``.

    The driver is the only writer of ``current_position`` while a tween is
    running and the only owner of ``active_animation_handle``. It is advanced
    by ``tick`` on the frame cadence, independently of feed arrivals.
    """

    def __init__(self, duration_ms: float = DEFAULT_TWEEN_DURATION_MS):
        self.duration_ms = duration_ms
        self._tweens: Dict[str, Tween] = {}
        self._handles = itertools.count(1)

    def __len__(self) -> int:
        return len(self._tweens)

    def is_tweening(self, entity_id: str) -> bool:
        return entity_id in self._tweens

    def start(self, entity: TrackedEntity, now: float) -> Optional[int]:
        """
        Begin a tween from the entity's current position to its target.

        Any running tween for the entity is cancelled first and its partial
        progress discarded.

        Returns:
            The new animation handle, or None if the entity is already at its target.
        """
        target = entity.target_position
        self.cancel(entity)

        start = entity.current_position
        if start == target:
            return None

        tween = Tween(
            handle=next(self._handles),
            entity=entity,
            start=start,
            target=target,
            started_at=now,
            duration=self.duration_ms,
        )
        self._tweens[entity.id] = tween
        entity.active_animation_handle = tween.handle
        logger.debug(f"Tween {tween.handle} started for {entity.id}: {start} -> {target}")
        return tween.handle

    def cancel(self, entity: TrackedEntity) -> bool:
        """Drop the entity's running tween, if any. Returns True if one was running."""
        tween = self._tweens.pop(entity.id, None)
        entity.active_animation_handle = None
        return tween is not None

    def tick(self, now: float) -> int:
        """
        Advance every running tween to ``now``.

        Returns:
            Number of tweens still running after this tick.
        """
        for entity_id, tween in list(self._tweens.items()):
            entity = tween.entity
            if entity.active_animation_handle != tween.handle:
                # Handle was replaced or cleared outside the driver
                del self._tweens[entity_id]
                continue

            fraction = tween.fraction(now)
            position = tween.position_at(fraction)

            if not position.is_finite():
                logger.warning(f"Non-finite interpolated position for {entity_id}; snapping to target")
                self._finish(tween)
            elif fraction >= 1.0:
                self._finish(tween)
            else:
                entity.current_position = position

        return len(self._tweens)

    def _finish(self, tween: Tween) -> None:
        entity = tween.entity
        entity.current_position = entity.target_position
        entity.active_animation_handle = None
        self._tweens.pop(entity.id, None)
