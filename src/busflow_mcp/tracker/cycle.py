"""One reconciliation pass per fetched feed batch."""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Set

from .registry import EntityRegistry
from .validation import Rejection, validate_record

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    now: float
    received: int = 0
    skipped: bool = False
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    rejections: List[Rejection] = field(default_factory=list)
    evicted: Set[str] = field(default_factory=set)

    @property
    def accepted(self) -> int:
        return len(self.created) + len(self.updated)

    @property
    def rejected(self) -> int:
        return len(self.rejections)

    def summary(self) -> dict:
        return {
            "now": self.now,
            "received": self.received,
            "skipped": self.skipped,
            "created": len(self.created),
            "updated": len(self.updated),
            "rejected": self.rejected,
            "evicted": sorted(self.evicted),
        }


class ReconciliationCycle:
    """Validates a batch, feeds the registry, then runs the eviction sweep."""

    def __init__(self, registry: EntityRegistry, grace_period_ms: float):
        self.registry = registry
        self.grace_period_ms = grace_period_ms
        self.last_report: Optional[CycleReport] = None
        self._previous_batch: List[Any] = []

    def run_cycle(self, raw_batch: Optional[Sequence[Any]], now: float) -> CycleReport:
        """
        Reconcile one feed batch at time ``now`` (milliseconds).

        A missing batch (transport failure), an empty batch, or a batch equal
        to the previous one skips reconciliation; the sweep still runs.
        """
        if raw_batch is None:
            batch: List[Any] = []
        elif isinstance(raw_batch, (list, tuple)):
            batch = list(raw_batch)
        else:
            logger.warning(f"Ignoring feed payload of type {type(raw_batch).__name__}")
            batch = []

        report = CycleReport(now=now, received=len(batch))

        if not batch:
            report.skipped = True
            logger.debug("Empty batch; running eviction only")
        elif batch == self._previous_batch:
            report.skipped = True
            logger.warning("Same vehicle data received, skipping update")
        else:
            self._reconcile(batch, now, report)

        self._previous_batch = copy.deepcopy(batch)

        report.evicted = self.registry.sweep(now, self.grace_period_ms)
        self.last_report = report
        logger.debug(
            f"Cycle at {now:.0f}: {report.accepted} accepted, {report.rejected} rejected, "
            f"{len(report.evicted)} evicted, {len(self.registry)} tracked"
        )
        return report

    def _reconcile(self, batch: List[Any], now: float, report: CycleReport) -> None:
        for record in batch:
            result = validate_record(record)
            if isinstance(result, Rejection):
                logger.debug(f"Rejected record ({result.reason}) for {result.vehicle_id or 'UNKNOWN'}: {result.detail}")
                report.rejections.append(result)
                continue

            existed = result.vehicle_id in self.registry
            entity = self.registry.apply(result, now)
            if entity is None:
                continue
            if existed:
                report.updated.append(entity.id)
            else:
                report.created.append(entity.id)
