"""Live tracker service: feed cadence and frame cadence on one event loop."""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from ..config import TrackerSettings
from ..ingest.live_feed import LiveFeedClient
from ..palette import color_for
from .cycle import CycleReport, ReconciliationCycle
from .entities import EntityView
from .interpolation import InterpolationDriver
from .registry import EntityRegistry

logger = logging.getLogger(__name__)

FrameListener = Callable[[List[EntityView]], Any]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class LiveTracker:
    """
    Runs the reconciliation cycle on the feed cadence and the interpolation
    driver on the frame cadence.

    Both loops share one event loop; every mutation happens inside a single
    synchronous step, so no locking is needed.
    """

    def __init__(
        self,
        settings: Optional[TrackerSettings] = None,
        feed: Optional[LiveFeedClient] = None,
        clock: Callable[[], float] = monotonic_ms,
    ):
        self.settings = settings or TrackerSettings()
        self.feed = feed or LiveFeedClient(
            self.settings.feed_url,
            feed_format=self.settings.feed_format,
            timeout_s=self.settings.request_timeout_s,
        )
        self.clock = clock
        self.driver = InterpolationDriver(duration_ms=self.settings.tween_duration_ms)
        self.registry = EntityRegistry(self.driver)
        self.cycle = ReconciliationCycle(self.registry, grace_period_ms=self.settings.grace_period_ms)
        self.cycles_run = 0
        self._listeners: List[FrameListener] = []
        self._tasks: List[asyncio.Task] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def add_listener(self, listener: FrameListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: FrameListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def start(self):
        """Start the feed and frame loops."""
        if self._running:
            return

        await self.feed.open()
        self._running = True
        self._tasks = [
            asyncio.create_task(self._feed_loop()),
            asyncio.create_task(self._frame_loop()),
        ]
        logger.info(
            f"Live tracker started: feed every {self.settings.feed_interval_ms:.0f}ms, "
            f"frames every {self.settings.frame_interval_ms:.0f}ms"
        )

    async def stop(self):
        """Stop both loops and release the feed session."""
        self._running = False
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        await self.feed.close()
        logger.info("Live tracker stopped")

    async def poll_once(self) -> CycleReport:
        """Fetch one batch and reconcile it."""
        batch = await self.feed.fetch_batch()
        report = self.cycle.run_cycle(batch, self.clock())
        self.cycles_run += 1
        self._publish()
        return report

    def frame_once(self) -> int:
        """Advance interpolation to the current time. Returns tweens still running."""
        remaining = self.driver.tick(self.clock())
        self._publish()
        return remaining

    def views(self, route_id: Optional[str] = None) -> List[EntityView]:
        views = []
        for entity in self.registry:
            if route_id is not None and entity.route_id != route_id:
                continue
            views.append(entity.view(color=color_for(entity.route_id)))
        views.sort(key=lambda v: v.vehicle_id)
        return views

    def status(self) -> Dict[str, Any]:
        last = self.cycle.last_report
        return {
            "running": self._running,
            "feed_url": self.settings.feed_url,
            "feed_format": self.settings.feed_format,
            "tracked_vehicles": len(self.registry),
            "tweening_vehicles": len(self.driver),
            "cycles_run": self.cycles_run,
            "last_cycle": last.summary() if last else None,
        }

    def _publish(self):
        if not self._listeners:
            return
        views = self.views()
        for listener in list(self._listeners):
            try:
                listener(views)
            except Exception as e:
                logger.error(f"Frame listener {listener!r} failed: {e}", exc_info=True)

    async def _feed_loop(self):
        interval = self.settings.feed_interval_ms / 1000.0
        while self._running:
            try:
                await self.poll_once()
            except Exception as e:
                logger.error(f"An exception occurred while reconciling the live feed: {e}", exc_info=True)

            await asyncio.sleep(interval)

    async def _frame_loop(self):
        interval = self.settings.frame_interval_ms / 1000.0
        while self._running:
            try:
                self.frame_once()
            except Exception as e:
                logger.error(f"An exception occurred while advancing tweens: {e}", exc_info=True)

            await asyncio.sleep(interval)
