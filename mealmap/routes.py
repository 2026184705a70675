"""
HTTP routes for the meal map API.

Handlers validate input, pass through to the configured DbClient and shape
the rows into response models.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query

from mealmap.config import get_settings
from mealmap.db import DbClient, FoodCenterFilters
from mealmap.dependencies import get_db_client, get_geocoder
from mealmap.errors import backend_errors
from mealmap.geocoding import NominatimClient
from mealmap.schemas import (
    AvailabilityUpdate,
    AvailabilityUpdateCreate,
    FoodCenter,
    FoodCenterCreate,
    FoodCenterUpdate,
    HealthResponse,
    MessagesResponse,
    NearbyFoodCenter,
    OptionsResponse,
    Profile,
    Review,
    ReviewCreate,
    UserAddress,
    UserReport,
    UserReportCreate,
)
from mealmap_shared.i18n import load_messages, resolve_locale
from mealmap_shared.ranking import rank_food_centers
from mealmap_shared.types import (
    AVAILABILITY_STATUSES,
    DEFAULT_MAP_CENTER,
    DIETARY_RESTRICTIONS,
    FOOD_CENTER_TYPES,
    LANGUAGES,
)

logger = logging.getLogger(__name__)

router = APIRouter()
health_router = APIRouter()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _now() -> datetime:
    """Wall-clock time in the zone opening hours are recorded in."""
    return _utcnow().astimezone(ZoneInfo(get_settings().timezone))


def _split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_verified(value: Optional[str]) -> Optional[bool]:
    if value == "true":
        return True
    if value == "false":
        return False
    return None


@health_router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="OK")


@router.get("/food-centers", response_model=list[FoodCenter])
def list_food_centers(
    type: Optional[str] = Query(None),
    dietary_restrictions: Optional[str] = Query(
        None, description="Comma-separated; matches centers offering any of them"
    ),
    city: Optional[str] = Query(None),
    verified: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    db: DbClient = Depends(get_db_client),
):
    """
    List food centers, newest first.

    When both ``lat`` and ``lng`` are given the list is ranked by distance
    and open status instead, and each item carries ``distance_meters``.
    """
    if (lat is None) != (lng is None):
        missing = "lng" if lng is None else "lat"
        raise HTTPException(
            status_code=400,
            detail=[
                {
                    "loc": ["query", missing],
                    "msg": "lat and lng must be provided together",
                    "type": "missing",
                }
            ],
        )
    filters = FoodCenterFilters(
        type=type or None,
        dietary_restrictions=_split_csv(dietary_restrictions),
        city=city or None,
        verified=_parse_verified(verified),
        search=search or None,
    )
    with backend_errors("fetch food centers"):
        rows = db.list_food_centers(filters)
        origin = {"lat": lat, "lng": lng} if lat is not None else None
        results = []
        for item in rank_food_centers(rows, origin, _now()):
            center = dict(item.center)
            center["distance_meters"] = item.distance_m
            center["open_now"] = item.open_now
            results.append(FoodCenter(**center))
        return results


@router.get("/food-centers/nearby", response_model=list[NearbyFoodCenter])
def nearby_food_centers(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_meters: Optional[float] = Query(None, gt=0, le=100_000),
    db: DbClient = Depends(get_db_client),
):
    radius = radius_meters or get_settings().nearby_default_radius_m
    with backend_errors("fetch nearby food centers"):
        rows = db.get_nearby_food_centers(lat, lng, radius)
        return [NearbyFoodCenter(**row) for row in rows]


@router.get("/food-centers/{food_center_id}", response_model=FoodCenter)
def get_food_center(food_center_id: str, db: DbClient = Depends(get_db_client)):
    with backend_errors("fetch food center"):
        row = db.get_food_center(food_center_id)
        if not row:
            raise HTTPException(status_code=404, detail="Food center not found")
        return FoodCenter(**row)


@router.post("/food-centers", response_model=FoodCenter, status_code=201)
def create_food_center(
    payload: FoodCenterCreate, db: DbClient = Depends(get_db_client)
):
    with backend_errors("create food center"):
        row = db.create_food_center(payload.model_dump(mode="json"))
        logger.info("Created food center %s", row.get("id"))
        return FoodCenter(**row)


@router.put("/food-centers/{food_center_id}", response_model=FoodCenter)
def update_food_center(
    food_center_id: str,
    payload: FoodCenterUpdate,
    db: DbClient = Depends(get_db_client),
):
    updates = payload.model_dump(mode="json", exclude_unset=True)
    with backend_errors("update food center"):
        row = db.update_food_center(food_center_id, updates)
        if not row:
            raise HTTPException(status_code=404, detail="Food center not found")
        return FoodCenter(**row)


@router.get("/availability/{food_center_id}", response_model=list[AvailabilityUpdate])
def list_availability_updates(
    food_center_id: str, db: DbClient = Depends(get_db_client)
):
    limit = get_settings().availability_history_limit
    with backend_errors("fetch availability updates"):
        rows = db.list_availability_updates(food_center_id, limit=limit)
        return [AvailabilityUpdate(**row) for row in rows]


@router.post("/availability", response_model=AvailabilityUpdate, status_code=201)
def create_availability_update(
    payload: AvailabilityUpdateCreate, db: DbClient = Depends(get_db_client)
):
    with backend_errors("create availability update"):
        row = db.create_availability_update(payload.model_dump(mode="json"))
        return AvailabilityUpdate(**row)


@router.get("/reviews/{food_center_id}", response_model=list[Review])
def list_reviews(food_center_id: str, db: DbClient = Depends(get_db_client)):
    with backend_errors("fetch reviews"):
        return [Review(**row) for row in db.list_reviews(food_center_id)]


@router.post("/reviews", response_model=Review, status_code=201)
def create_review(payload: ReviewCreate, db: DbClient = Depends(get_db_client)):
    with backend_errors("create review"):
        row = db.create_review(payload.model_dump(mode="json"))
        return Review(**row)


@router.post("/reports", response_model=UserReport, status_code=201)
def create_report(payload: UserReportCreate, db: DbClient = Depends(get_db_client)):
    with backend_errors("create report"):
        row = db.create_user_report(payload.model_dump(mode="json"))
        return UserReport(**row)


@router.get("/profiles/{user_id}", response_model=Profile)
def get_profile(user_id: str, db: DbClient = Depends(get_db_client)):
    with backend_errors("fetch profile"):
        row = db.get_profile(user_id)
        if not row:
            raise HTTPException(status_code=404, detail="Profile not found")
        return Profile(**row)


@router.get("/options", response_model=OptionsResponse)
def options():
    return OptionsResponse(
        food_center_types=list(FOOD_CENTER_TYPES),
        dietary_restrictions=list(DIETARY_RESTRICTIONS),
        availability_statuses=list(AVAILABILITY_STATUSES),
        languages=list(LANGUAGES),
        default_map_center=DEFAULT_MAP_CENTER,
    )


@router.get("/messages/{locale}", response_model=MessagesResponse)
def messages(locale: str):
    resolved = resolve_locale(locale, default=get_settings().default_locale)
    return MessagesResponse(locale=resolved, messages=load_messages(resolved))


@router.get("/geocode/reverse", response_model=UserAddress)
def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    geocoder: NominatimClient = Depends(get_geocoder),
):
    return UserAddress(**geocoder.reverse(lat, lng).as_dict())
