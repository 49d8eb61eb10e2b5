"""FastMCP server for BusFlow live bus tracking."""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP

from .config import TrackerSettings
from .tools.live_vehicles import live_vehicles
from .tools.route_colors import route_color
from .tools.tracker_status import tracker_status
from .tracker.service import LiveTracker

# Configure logging for cloud environment
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

SERVER_NAME = "busflow-mcp"
SERVER_VERSION = "0.1.0"

# Initialize FastMCP server
mcp = FastMCP(SERVER_NAME, version=SERVER_VERSION)

# Global tracker, started lazily
tracker = LiveTracker(TrackerSettings.from_env())
initialized = False


async def ensure_initialized():
    """Lazy start of the live tracker."""
    global initialized
    if not initialized:
        logger.info("Starting live tracker...")
        try:
            await tracker.start()
            logger.info("Live tracking started successfully")
        except Exception as e:
            logger.warning(f"Live tracker failed to start: {e} - continuing without live data")

        initialized = True
        logger.info("Server initialization completed")


def _is_cloud_environment() -> bool:
    """Detect if running in FastMCP Cloud or similar environment."""
    return bool(
        os.environ.get('FASTMCP_CLOUD') or
        os.environ.get('LAMBDA_RUNTIME_DIR') or
        os.environ.get('AWS_LAMBDA_FUNCTION_NAME')
    )


def health_payload() -> Dict[str, Any]:
    """Health summary; skips tracker details in cloud pre-flight."""
    payload = {
        "status": "healthy",
        "server": SERVER_NAME,
        "version": SERVER_VERSION,
        "server_time": datetime.now(timezone.utc).isoformat(),
    }
    if _is_cloud_environment():
        payload["environment"] = "cloud"
        return payload

    payload.update({
        "environment": "local",
        "initialized": initialized,
        "tracker_running": tracker.running,
        "tracked_vehicles": len(tracker.registry),
    })
    return payload


@mcp.tool
async def live_vehicles_tool(route_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Get the smoothed live position of every tracked bus.

    Args:
        route_id: Optional route ID to filter by (if None, returns all)

    Returns:
        List of vehicles with ID, route, coordinates, heading, and color
    """
    await ensure_initialized()
    return await live_vehicles(tracker, route_id)


@mcp.tool
async def route_color_tool(route_id: str) -> Dict[str, Any]:
    """Get the display color assigned to a route.

    Args:
        route_id: The route ID (e.g., "7")
    """
    return await route_color(route_id)


@mcp.tool
async def tracker_status_tool() -> Dict[str, Any]:
    """Get live tracker status: vehicle counts, feed settings, and last cycle."""
    await ensure_initialized()
    return await tracker_status(tracker)


@mcp.tool
async def health_check() -> Dict[str, Any]:
    """Fast health check that never waits on the live feed."""
    return health_payload()


# FastMCP Cloud entry point
server = mcp


def main():
    """Entry point for CLI usage via pyproject.toml scripts."""
    mcp.run()


if __name__ == "__main__":
    mcp.run()
