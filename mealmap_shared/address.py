"""
Turn Nominatim reverse-geocoding payloads into a short display address.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Mapping

DEFAULT_STREET = "Current Location"
UNKNOWN = "Unknown"
KNOWN_CITIES = ("Berlin", "Hamburg", "München", "Köln")

_POSTCODE_RE = re.compile(r"^\d{5}$")


@dataclass
class UserAddress:
    address: str = DEFAULT_STREET
    city: str = UNKNOWN
    country: str = UNKNOWN

    def as_dict(self) -> dict:
        return asdict(self)


def _from_details(addr: Mapping[str, Any]) -> UserAddress:
    street = DEFAULT_STREET
    if addr.get("road"):
        house_number = addr.get("house_number")
        street = f"{addr['road']} {house_number.upper()}" if house_number else addr["road"]
    elif addr.get("suburb"):
        street = addr["suburb"]

    city_parts: list[str] = []
    if addr.get("district"):
        city_parts.append(addr["district"])
    elif addr.get("suburb") and addr["suburb"] != street:
        city_parts.append(addr["suburb"])

    city_name = addr.get("city") or addr.get("town") or addr.get("village")
    postcode = addr.get("postcode")
    if postcode and city_name:
        city_parts.append(f"{postcode} {city_name}")
    elif postcode:
        city_parts.append(postcode)
    elif city_name:
        city_parts.append(city_name)

    return UserAddress(
        address=street,
        city=", ".join(city_parts),
        country=addr.get("country") or UNKNOWN,
    )


def _from_display_name(display_name: str) -> UserAddress:
    parts = display_name.split(", ")
    postcode = ""
    city_name = ""
    district = ""
    for part in parts[1:-1]:
        if _POSTCODE_RE.match(part):
            postcode = part
        elif part in KNOWN_CITIES:
            city_name = part
        elif len(part) > 2 and not postcode and not city_name:
            # Later matches win, so the last plain token before the
            # postcode/city is kept.
            district = part

    city_parts: list[str] = []
    if district:
        city_parts.append(district)
    if postcode and city_name:
        city_parts.append(f"{postcode} {city_name}")
    elif postcode:
        city_parts.append(postcode)
    elif city_name:
        city_parts.append(city_name)

    return UserAddress(
        address=parts[0] or DEFAULT_STREET,
        city=", ".join(city_parts),
        country=parts[-1] or UNKNOWN,
    )


def parse_nominatim_address(payload: Mapping[str, Any]) -> UserAddress:
    if payload.get("address"):
        return _from_details(payload["address"])
    if payload.get("display_name"):
        return _from_display_name(payload["display_name"])
    return UserAddress()
