"""In-memory registry of tracked vehicles."""

import logging
from typing import Dict, Iterator, List, Optional, Set

from .entities import TrackedEntity
from .geo import Point, bearing
from .interpolation import InterpolationDriver
from .validation import ValidatedRecord

logger = logging.getLogger(__name__)


class EntityRegistry:
    """
    Maps vehicle identities to tracked state.

    Owns creation, update and eviction of entities. Position motion between
    feed updates is delegated to the InterpolationDriver.
    """

    def __init__(self, driver: InterpolationDriver):
        self.driver = driver
        self._entities: Dict[str, TrackedEntity] = {}

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, vehicle_id: object) -> bool:
        return vehicle_id in self._entities

    def __iter__(self) -> Iterator[TrackedEntity]:
        return iter(list(self._entities.values()))

    def get(self, vehicle_id: str) -> Optional[TrackedEntity]:
        return self._entities.get(vehicle_id)

    def ids(self) -> List[str]:
        return sorted(self._entities)

    def apply(self, record: ValidatedRecord, now: float) -> Optional[TrackedEntity]:
        """Reconcile a validated feed record."""
        return self.reconcile(record.vehicle_id, record.route_id, record.position, now, label=record.label)

    def reconcile(
        self,
        vehicle_id: str,
        route_id: str,
        position: Point,
        now: float,
        label: Optional[str] = None,
    ) -> Optional[TrackedEntity]:
        """
        Create or update the entity for ``vehicle_id`` from a confirmed fix.

        Heading is measured from the entity's last confirmed position, not
        from where the tween currently has it.

        Returns:
            The tracked entity, or None if the position was not finite.
        """
        if not position.is_finite():
            logger.warning(f"Ignoring non-finite position for {vehicle_id}: {position}")
            return None

        entity = self._entities.get(vehicle_id)
        if entity is None:
            entity = TrackedEntity(
                id=vehicle_id,
                route_id=route_id,
                current_position=position,
                target_position=position,
                heading=bearing(None, position),
                last_seen_at=now,
                label=label,
            )
            self._entities[vehicle_id] = entity
            logger.info(f"Tracking vehicle {vehicle_id} on route {route_id}")
            return entity

        entity.heading = bearing(entity.target_position, position, fallback=entity.heading)
        entity.target_position = position
        entity.route_id = route_id
        if label is not None:
            entity.label = label
        if entity.last_seen_at is None or now > entity.last_seen_at:
            entity.last_seen_at = now

        self.driver.start(entity, now)
        return entity

    def evict(self, vehicle_id: str) -> bool:
        """Cancel the entity's tween and remove it. Returns True if it existed."""
        entity = self._entities.get(vehicle_id)
        if entity is None:
            return False
        self.driver.cancel(entity)
        del self._entities[vehicle_id]
        return True

    def sweep(self, now: float, grace_period: float) -> Set[str]:
        """
        Evict every entity not confirmed within ``grace_period`` of ``now``.

        Returns:
            The ids of the evicted entities.
        """
        evicted = set()
        for entity in list(self._entities.values()):
            if entity.last_seen_at is None:
                logger.warning(f"Evicting {entity.id}: no last-seen timestamp")
            elif now - entity.last_seen_at > grace_period:
                logger.info(f"Evicting {entity.id}: idle {(now - entity.last_seen_at) / 1000:.0f}s")
            else:
                continue
            self.evict(entity.id)
            evicted.add(entity.id)
        return evicted
