"""MCP tool for inspecting the live tracker."""

from typing import Any, Dict

from ..tracker.service import LiveTracker


async def tracker_status(tracker: LiveTracker) -> Dict[str, Any]:
    """
    Summarise tracker state.
    
    Returns:
        Feed settings, tracked/tweening counts, and the last cycle's outcome.
    """
    status = tracker.status()
    status["grace_period_ms"] = tracker.settings.grace_period_ms
    status["tween_duration_ms"] = tracker.settings.tween_duration_ms
    
    routes: Dict[str, int] = {}
    for view in tracker.views():
        routes[view.route_id] = routes.get(view.route_id, 0) + 1
    status["vehicles_by_route"] = dict(sorted(routes.items()))
    
    return status
