"""Runtime settings for the live tracker."""

import logging
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

# TransitLive (Regina) live bus endpoint
DEFAULT_FEED_URL = "https://transitlive.com/json/updatedBuses.js"

ENV_PREFIX = "BUSFLOW_"


class TrackerSettings(BaseModel):
    feed_url: str = DEFAULT_FEED_URL
    feed_format: Literal["json", "gtfs-rt"] = "json"
    feed_interval_ms: float = Field(default=10_000, gt=0)
    grace_period_ms: float = Field(default=60_000, gt=0)
    tween_duration_ms: float = Field(default=1_500, gt=0)
    frame_interval_ms: float = Field(default=50, gt=0)
    request_timeout_s: float = Field(default=30, gt=0)

    @model_validator(mode="after")
    def _check_cadence(self) -> "TrackerSettings":
        if self.grace_period_ms < 3 * self.feed_interval_ms:
            logger.warning(
                f"Grace period {self.grace_period_ms:.0f}ms is under three feed intervals "
                f"({self.feed_interval_ms:.0f}ms); active vehicles may be evicted between fetches"
            )
        if self.tween_duration_ms > self.feed_interval_ms:
            logger.warning(
                f"Tween duration {self.tween_duration_ms:.0f}ms exceeds the feed interval; "
                "motion will restart before tweens finish"
            )
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TrackerSettings":
        """Build settings from ``BUSFLOW_*`` environment variables."""
        if environ is None:
            environ = os.environ

        values = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw.strip():
                values[name] = raw.strip()
        return cls(**values)
