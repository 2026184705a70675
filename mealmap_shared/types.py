"""
Enumerations and option lists shared by the API and the UI.
"""

from __future__ import annotations

from enum import Enum


class FoodCenterType(str, Enum):
    FOOD_BANK = "food_bank"
    COMMUNITY_KITCHEN = "community_kitchen"
    SOUP_KITCHEN = "soup_kitchen"
    MOBILE_UNIT = "mobile_unit"
    PANTRY = "pantry"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    LIMITED = "limited"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class ReportStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserRole(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


FOOD_CENTER_TYPES = (
    {"value": "food_bank", "label": "Food Bank"},
    {"value": "community_kitchen", "label": "Community Kitchen"},
    {"value": "soup_kitchen", "label": "Soup Kitchen"},
    {"value": "mobile_unit", "label": "Mobile Unit"},
    {"value": "pantry", "label": "Pantry"},
)

DIETARY_RESTRICTIONS = (
    {"value": "vegetarian", "label": "Vegetarian"},
    {"value": "vegan", "label": "Vegan"},
    {"value": "halal", "label": "Halal"},
    {"value": "kosher", "label": "Kosher"},
    {"value": "gluten_free", "label": "Gluten Free"},
    {"value": "dairy_free", "label": "Dairy Free"},
    {"value": "nut_free", "label": "Nut Free"},
)

AVAILABILITY_STATUSES = (
    {"value": "available", "label": "Available", "color": "green"},
    {"value": "limited", "label": "Limited", "color": "yellow"},
    {"value": "unavailable", "label": "Unavailable", "color": "red"},
    {"value": "unknown", "label": "Unknown", "color": "gray"},
)

LANGUAGES = (
    {"value": "en", "label": "English"},
    {"value": "de", "label": "Deutsch"},
    {"value": "fr", "label": "Français"},
    {"value": "es", "label": "Español"},
    {"value": "ar", "label": "العربية"},
    {"value": "tr", "label": "Türkçe"},
)

# Berlin
DEFAULT_MAP_CENTER = {"lat": 52.52, "lng": 13.405}
