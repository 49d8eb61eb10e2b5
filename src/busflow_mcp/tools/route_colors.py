"""MCP tool for looking up a route's map color."""

from typing import Any, Dict

from ..palette import color_for


async def route_color(route_id: str) -> Dict[str, Any]:
    """Return the stable display color assigned to a route."""
    return {"route_id": str(route_id), "color": color_for(route_id)}
