"""
Reverse geocoding against a Nominatim endpoint.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from mealmap_shared.address import UserAddress, parse_nominatim_address

logger = logging.getLogger(__name__)


class NominatimClient:
    def __init__(
        self,
        base_url: str,
        *,
        user_agent: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def reverse(self, lat: float, lng: float) -> UserAddress:
        """
        Address for a coordinate pair.

        Failures are logged and answered with the placeholder address so the
        map can still show the user's position.
        """
        params = {
            "format": "json",
            "lat": lat,
            "lon": lng,
            "zoom": 18,
            "addressdetails": 1,
        }
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Reverse geocoding failed for (%s, %s): %s", lat, lng, exc)
            return UserAddress()
        if not isinstance(payload, dict):
            return UserAddress()
        return parse_nominatim_address(payload)
