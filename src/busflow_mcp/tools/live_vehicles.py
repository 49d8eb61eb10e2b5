"""MCP tool for getting live, interpolated vehicle positions."""

from typing import Any, Dict, List, Optional

from ..tracker.service import LiveTracker


async def live_vehicles(tracker: LiveTracker, route_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Get the current displayed position of every tracked vehicle.
    
    Args:
        tracker: The running live tracker.
        route_id: Optional route ID to filter by (if None, returns all).
    
    Returns:
        List of vehicles with ID, route, coordinates, heading, and color.
    """
    vehicles = []
    
    for view in tracker.views(route_id):
        vehicles.append({
            "vehicle_id": view.vehicle_id,
            "route_id": view.route_id,
            "label": view.label,
            "lat": view.lat,
            "lon": view.lng,
            "heading": round(view.heading, 1),
            "color": view.color,
            "moving": view.tweening,
        })
    
    return vehicles
