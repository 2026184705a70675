"""
Great-circle distance and geography-point helpers.

Locations are plain mappings with ``lat`` and ``lng`` keys (degrees), the
shape the API returns and the UI sends.
"""

from __future__ import annotations

import math
import re
import struct
from typing import Any, Mapping, Optional, Tuple

EARTH_RADIUS_M = 6371008.8  # mean Earth radius

_POINT_RE = re.compile(
    r"^\s*(?:SRID=\d+;)?\s*POINT\s*\(\s*([-+0-9.eE]+)\s+([-+0-9.eE]+)\s*\)\s*$",
    re.IGNORECASE,
)
_EWKB_POINT_TYPE = 1
_EWKB_SRID_FLAG = 0x20000000


def haversine_m(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """Haversine great-circle distance in metres between two lat/lng points."""
    p1 = math.radians(a["lat"])
    p2 = math.radians(b["lat"])
    dphi = p2 - p1
    dl = math.radians(b["lng"] - a["lng"])
    h = math.sin(dphi / 2.0) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2.0) ** 2
    # Rounding can push h a hair above 1 for antipodal points.
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, h)))


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"


def parse_geography_point(value: Any) -> Optional[dict]:
    """
    Turn a stored geography value into ``{"lat": ..., "lng": ...}``.

    Accepts WKT (``POINT(13.395 52.5021)``, optionally with an ``SRID=4326;``
    prefix), a GeoJSON point, or a mapping that already has lat/lng.
    Returns None for empty or unparseable values.
    """
    if not value:
        return None
    if isinstance(value, str):
        match = _POINT_RE.match(value)
        if not match:
            return _parse_ewkb_point(value)
        return {"lng": float(match.group(1)), "lat": float(match.group(2))}
    if isinstance(value, Mapping):
        if "lat" in value and "lng" in value:
            return {"lat": float(value["lat"]), "lng": float(value["lng"])}
        coords = value.get("coordinates")
        if value.get("type") == "Point" and coords and len(coords) >= 2:
            return {"lng": float(coords[0]), "lat": float(coords[1])}
    return None


def to_geography_point(location: Mapping[str, float]) -> str:
    """WKT point in PostGIS axis order (longitude first)."""
    return f"POINT({location['lng']} {location['lat']})"


def bounding_box(
    center: Mapping[str, float], radius_m: float
) -> Tuple[float, float, float, float]:
    """
    Return ``(min_lat, max_lat, min_lng, max_lng)`` enclosing a circle.

    The box is only a pre-filter; callers still check ``haversine_m``.
    """
    dlat = math.degrees(radius_m / EARTH_RADIUS_M)
    min_lat = max(-90.0, center["lat"] - dlat)
    max_lat = min(90.0, center["lat"] + dlat)
    cos_lat = math.cos(math.radians(center["lat"]))
    if cos_lat < 1e-9 or max_lat >= 90.0 or min_lat <= -90.0:
        return min_lat, max_lat, -180.0, 180.0
    dlng = math.degrees(radius_m / (EARTH_RADIUS_M * cos_lat))
    if dlng >= 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, center["lng"] - dlng, center["lng"] + dlng


def in_bounding_box(
    location: Mapping[str, float], box: Tuple[float, float, float, float]
) -> bool:
    min_lat, max_lat, min_lng, max_lng = box
    if not min_lat <= location["lat"] <= max_lat:
        return False
    lng = location["lng"]
    # Boxes near the antimeridian extend past +/-180.
    return any(min_lng <= candidate <= max_lng for candidate in (lng, lng - 360.0, lng + 360.0))


def _parse_ewkb_point(value: str) -> Optional[dict]:
    """Hex (E)WKB point, the form PostgREST returns for geography columns."""
    try:
        raw = bytes.fromhex(value.strip())
    except ValueError:
        return None
    if len(raw) < 21:
        return None
    order = "<" if raw[0] == 1 else ">"
    (geom_type,) = struct.unpack(order + "I", raw[1:5])
    offset = 5
    if geom_type & _EWKB_SRID_FLAG:
        offset += 4
    if geom_type & 0xFFFF != _EWKB_POINT_TYPE or len(raw) < offset + 16:
        return None
    lng, lat = struct.unpack(order + "dd", raw[offset:offset + 16])
    return {"lat": lat, "lng": lng}
