"""
DbClient backed by the managed Supabase platform.

Table reads and writes go through PostgREST via the ``supabase`` client;
nearby search calls the ``get_nearby_food_centers`` PostGIS function.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client

from mealmap.db import DbError, FoodCenterFilters
from mealmap_shared.geo import haversine_m, parse_geography_point, to_geography_point

logger = logging.getLogger(__name__)

FOOD_CENTERS = "food_centers"
AVAILABILITY_UPDATES = "availability_updates"
REVIEWS = "reviews"
USER_REPORTS = "user_reports"
PROFILES = "profiles"
NEARBY_RPC = "get_nearby_food_centers"


def normalize_food_center(row: dict) -> dict:
    """Return the row with ``location`` as ``{"lat", "lng"}``."""
    item = dict(row)
    location = parse_geography_point(item.get("location"))
    lat = item.pop("lat", None)
    lng = item.pop("lng", None)
    if location is None and lat is not None and lng is not None:
        location = {"lat": float(lat), "lng": float(lng)}
    item["location"] = location
    return item


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so ``text`` matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SupabaseDbClient:
    def __init__(self, url: str, key: str, client: Optional[Client] = None):
        if client is None:
            if not url or not key:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY are required")
            client = create_client(url, key)
        self.client = client

    def _execute(self, query: Any, action: str) -> list[dict]:
        try:
            response = query.execute()
        except APIError as exc:
            logger.error("Supabase %s failed: %s", action, exc.message)
            raise DbError(f"Failed to {action}") from exc
        data = response.data
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    def _insert_one(self, table: str, values: dict, action: str) -> dict:
        rows = self._execute(self.client.table(table).insert([values]), action)
        if not rows:
            raise DbError(f"Failed to {action}: no row returned")
        return rows[0]

    def list_food_centers(
        self, filters: Optional[FoodCenterFilters] = None
    ) -> list[dict]:
        filters = filters or FoodCenterFilters()
        query = (
            self.client.table(FOOD_CENTERS)
            .select("*")
            .order("created_at", desc=True)
        )
        if filters.type:
            query = query.eq("type", filters.type)
        if filters.city:
            query = query.eq("city", filters.city)
        if filters.verified is not None:
            query = query.eq("verified", filters.verified)
        if filters.dietary_restrictions:
            query = query.overlaps("dietary_restrictions", filters.dietary_restrictions)
        if filters.search:
            query = query.ilike("name", f"%{escape_like(filters.search)}%")
        rows = self._execute(query, "fetch food centers")
        return [normalize_food_center(row) for row in rows]

    def get_food_center(self, food_center_id: str) -> Optional[dict]:
        query = self.client.table(FOOD_CENTERS).select("*").eq("id", food_center_id).limit(1)
        rows = self._execute(query, "fetch food center")
        return normalize_food_center(rows[0]) if rows else None

    def create_food_center(self, data: dict) -> dict:
        values = dict(data)
        values["location"] = to_geography_point(data["location"])
        row = self._insert_one(FOOD_CENTERS, values, "create food center")
        return normalize_food_center(row)

    def update_food_center(self, food_center_id: str, updates: dict) -> Optional[dict]:
        values = dict(updates)
        if "location" in values:
            values["location"] = to_geography_point(values["location"])
        query = self.client.table(FOOD_CENTERS).update(values).eq("id", food_center_id)
        rows = self._execute(query, "update food center")
        return normalize_food_center(rows[0]) if rows else None

    def get_nearby_food_centers(
        self, lat: float, lng: float, radius_meters: float = 5000
    ) -> list[dict]:
        query = self.client.rpc(
            NEARBY_RPC, {"lat": lat, "lng": lng, "radius_meters": radius_meters}
        )
        origin = {"lat": lat, "lng": lng}
        results = []
        for row in self._execute(query, "fetch nearby food centers"):
            item = normalize_food_center(row)
            if item.get("distance_meters") is None and item["location"]:
                item["distance_meters"] = haversine_m(origin, item["location"])
            results.append(item)
        results.sort(
            key=lambda r: float("inf")
            if r.get("distance_meters") is None
            else r["distance_meters"]
        )
        return results

    def create_availability_update(self, data: dict) -> dict:
        values = dict(data)
        values["notes"] = values.get("notes") or ""
        return self._insert_one(
            AVAILABILITY_UPDATES, values, "create availability update"
        )

    def list_availability_updates(
        self, food_center_id: str, limit: int = 10
    ) -> list[dict]:
        query = (
            self.client.table(AVAILABILITY_UPDATES)
            .select("*")
            .eq("food_center_id", food_center_id)
            .order("created_at", desc=True)
            .limit(limit)
        )
        return self._execute(query, "fetch availability updates")

    def create_review(self, data: dict) -> dict:
        values = dict(data)
        values["helpful_count"] = 0
        return self._insert_one(REVIEWS, values, "create review")

    def list_reviews(self, food_center_id: str) -> list[dict]:
        query = (
            self.client.table(REVIEWS)
            .select("*, profiles(full_name)")
            .eq("food_center_id", food_center_id)
            .order("created_at", desc=True)
        )
        return self._execute(query, "fetch reviews")

    def create_user_report(self, data: dict) -> dict:
        values = dict(data)
        values["food_center_id"] = values.get("food_center_id") or ""
        values["reporter_id"] = values.get("reporter_id") or ""
        return self._insert_one(USER_REPORTS, values, "create report")

    def get_profile(self, user_id: str) -> Optional[dict]:
        query = self.client.table(PROFILES).select("*").eq("id", user_id).limit(1)
        rows = self._execute(query, "fetch profile")
        return rows[0] if rows else None

    def save_profile(self, profile: dict) -> dict:
        rows = self._execute(
            self.client.table(PROFILES).upsert(profile), "save profile"
        )
        if not rows:
            raise DbError("Failed to save profile: no row returned")
        return rows[0]
