"""Validation of raw live-feed records into well-formed vehicle fixes."""

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from .geo import Point

MISSING_IDENTITY = "missing-identity"
MISSING_ROUTE = "missing-route"
MALFORMED_COORDINATES = "malformed-coordinates"


class ValidatedRecord(BaseModel):
    vehicle_id: str
    route_id: str
    latitude: float
    longitude: float
    label: Optional[str] = None

    @property
    def position(self) -> Point:
        return Point(self.latitude, self.longitude)


@dataclass(frozen=True)
class Rejection:
    reason: str
    vehicle_id: Optional[str] = None
    detail: str = ""


def _properties(record: Mapping[str, Any]) -> Mapping[str, Any]:
    props = record.get("properties")
    return props if isinstance(props, Mapping) else {}


def _coerce_label(value: Any) -> Optional[str]:
    """Coerce an identifier-like value to a string; blank values count as missing."""
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _coerce_coordinate(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _raw_coordinates(record: Mapping[str, Any]) -> Any:
    geometry = record.get("geometry")
    if isinstance(geometry, Mapping) and "coordinates" in geometry:
        return geometry["coordinates"]
    return record.get("coords")


def validate_record(record: Any) -> Union[ValidatedRecord, Rejection]:
    """
    Validate one raw feed record.

    Accepts the live feed shape ``{"properties": {"b", "r", "line"},
    "geometry": {"coordinates": [lng, lat]}}`` as well as the flat
    ``{"id", "route", "coords"}`` form.

    Returns:
        A ValidatedRecord with latitude/longitude in (lat, lng) order, or a
        Rejection naming the first rule the record failed.
    """
    if not isinstance(record, Mapping):
        return Rejection(MISSING_IDENTITY, detail=f"record is {type(record).__name__}")

    props = _properties(record)

    vehicle_id = _coerce_label(props.get("b", record.get("id")))
    if vehicle_id is None:
        return Rejection(MISSING_IDENTITY)

    route_id = _coerce_label(props.get("r", record.get("route")))
    if route_id is None:
        return Rejection(MISSING_ROUTE, vehicle_id=vehicle_id)

    coords = _raw_coordinates(record)
    if isinstance(coords, (str, bytes)) or not isinstance(coords, (list, tuple)) or len(coords) != 2:
        return Rejection(MALFORMED_COORDINATES, vehicle_id=vehicle_id, detail=repr(coords))

    longitude = _coerce_coordinate(coords[0])
    latitude = _coerce_coordinate(coords[1])
    if longitude is None or latitude is None:
        return Rejection(MALFORMED_COORDINATES, vehicle_id=vehicle_id, detail=repr(coords))

    return ValidatedRecord(
        vehicle_id=vehicle_id,
        route_id=route_id,
        latitude=latitude,
        longitude=longitude,
        label=_coerce_label(props.get("line")),
    )
