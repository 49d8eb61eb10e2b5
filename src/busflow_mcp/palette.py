"""Stable route-to-colour assignment for map presentation."""

from typing import Dict

# High-contrast, readable colours for bus routes
HIGH_CONTRAST_COLORS = [
    "#FF5733", "#33FF57", "#3357FF", "#FF33A8", "#FFD700", "#FF8C00", "#8A2BE2",
    "#20B2AA", "#DC143C", "#00FA9A", "#FF4500", "#7FFF00", "#1E90FF", "#FF1493",
    "#32CD32", "#9932CC", "#4682B4", "#DAA520", "#FF6347", "#40E0D0",
]

_route_colors: Dict[str, str] = {}


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _route_hash(route_id: str) -> int:
    """String hash (h * 31 + c) using JavaScript 32-bit shift semantics."""
    h = 0
    for ch in route_id:
        h = ord(ch) + (_to_int32(_to_int32(h) << 5) - h)
    return h


def color_for(route_id) -> str:
    """Return the memoised colour for a route id."""
    key = str(route_id)
    color = _route_colors.get(key)
    if color is None:
        color = HIGH_CONTRAST_COLORS[abs(_route_hash(key)) % len(HIGH_CONTRAST_COLORS)]
        _route_colors[key] = color
    return color
