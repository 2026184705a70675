"""
Proximity and open-status ranking of food centers.

A center's score is its haversine distance from the user plus a fixed
penalty per open-status step (open now, hours unknown, closed now). Lower
scores rank first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from mealmap_shared.geo import haversine_m, parse_geography_point
from mealmap_shared.hours import is_open_at
from mealmap_shared.types import AVAILABILITY_STATUSES

OPEN_STATUS_PENALTY_M = 2000.0

OPEN_NOW = 0
HOURS_UNKNOWN = 1
CLOSED_NOW = 2

_STATUS_COLORS = {item["value"]: item["color"] for item in AVAILABILITY_STATUSES}


@dataclass
class RankedFoodCenter:
    center: Mapping[str, Any]
    distance_m: Optional[float]
    open_now: Optional[bool]
    score: float


def center_location(center: Mapping[str, Any]) -> Optional[dict]:
    location = parse_geography_point(center.get("location"))
    if location is None and center.get("lat") is not None and center.get("lng") is not None:
        location = {"lat": float(center["lat"]), "lng": float(center["lng"])}
    return location


def open_status_score(center: Mapping[str, Any], when: datetime) -> int:
    state = is_open_at(center.get("operating_hours"), when)
    if state is None:
        return HOURS_UNKNOWN
    return OPEN_NOW if state else CLOSED_NOW


def score_food_center(
    center: Mapping[str, Any], origin: Mapping[str, float], when: datetime
) -> float:
    """Distance plus open-status penalty; infinite when the center has no location."""
    location = center_location(center)
    if location is None:
        return float("inf")
    penalty = OPEN_STATUS_PENALTY_M * open_status_score(center, when)
    return haversine_m(origin, location) + penalty


def rank_food_centers(
    centers: Iterable[Mapping[str, Any]],
    origin: Optional[Mapping[str, float]],
    when: Optional[datetime] = None,
) -> list[RankedFoodCenter]:
    when = when or datetime.now()
    ranked: list[RankedFoodCenter] = []
    for center in centers:
        open_now = is_open_at(center.get("operating_hours"), when)
        location = center_location(center)
        if origin is None or location is None:
            ranked.append(
                RankedFoodCenter(center, None, open_now, float("inf"))
            )
            continue
        distance = haversine_m(origin, location)
        penalty = OPEN_STATUS_PENALTY_M * open_status_score(center, when)
        ranked.append(RankedFoodCenter(center, distance, open_now, distance + penalty))

    if origin is None:
        return ranked
    # sorted() is stable, so ties keep their incoming order.
    return sorted(
        ranked,
        key=lambda item: (
            item.score,
            item.distance_m if item.distance_m is not None else float("inf"),
            str(item.center.get("name") or "").lower(),
        ),
    )


def sort_by_distance(
    centers: Iterable[Mapping[str, Any]],
    origin: Optional[Mapping[str, float]],
    when: Optional[datetime] = None,
) -> list[Mapping[str, Any]]:
    """Centers ordered by score; the original order when there is no origin."""
    return [item.center for item in rank_food_centers(centers, origin, when)]


def availability_color(status: Optional[str]) -> str:
    return _STATUS_COLORS.get(status or "", "gray")
