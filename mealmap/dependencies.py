"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from mealmap.config import get_settings
from mealmap.db import DbClient, InMemoryDbClient, SqlDbClient
from mealmap.geocoding import NominatimClient

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_geocoder: NominatimClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so state persists across requests.

    Precedence: explicit in-memory toggle, then a direct database URL, then
    the Supabase REST API, then in-memory.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _db_client = InMemoryDbClient()
    elif settings.database_url:
        _db_client = SqlDbClient(settings.database_url)
    elif settings.supabase_url and settings.supabase_key:
        from mealmap.supabase_db import SupabaseDbClient

        _db_client = SupabaseDbClient(settings.supabase_url, settings.supabase_key)
    else:
        logger.warning("No database configured; using in-memory storage")
        _db_client = InMemoryDbClient()
    return _db_client


def get_geocoder() -> NominatimClient:
    global _geocoder
    if _geocoder:
        return _geocoder
    settings = get_settings()
    _geocoder = NominatimClient(
        settings.nominatim_base_url,
        user_agent=settings.nominatim_user_agent,
        timeout=settings.geocode_timeout_seconds,
    )
    return _geocoder
