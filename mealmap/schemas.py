"""
Pydantic schemas for the meal map API.

Request models carry the form constraints; response models are permissive
mirrors of the stored rows.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    EmailStr,
    Field,
    HttpUrl,
    TypeAdapter,
    model_validator,
)

from mealmap_shared.types import AvailabilityStatus, FoodCenterType, ReportStatus

TIME_PATTERN = r"^(([01]\d|2[0-3]):[0-5]\d|24:00)$"

WeekdayKey = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]

_http_url = TypeAdapter(HttpUrl)


def _check_url(value: str) -> str:
    # Validate as a URL but keep the submitted string untouched.
    _http_url.validate_python(value)
    return value


WebsiteUrl = Annotated[str, AfterValidator(_check_url)]


class Location(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class DayHours(BaseModel):
    open: str = Field(..., pattern=TIME_PATTERN)
    close: str = Field(..., pattern=TIME_PATTERN)


class FoodCenterCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: FoodCenterType
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    website: Optional[WebsiteUrl] = None
    location: Location
    operating_hours: Optional[dict[WeekdayKey, DayHours]] = None
    dietary_restrictions: Optional[list[str]] = None
    contact_person: Optional[str] = None
    languages_spoken: Optional[list[str]] = None
    capacity: Optional[float] = Field(default=None, ge=0)
    current_availability: AvailabilityStatus = AvailabilityStatus.UNKNOWN
    verified: bool = False
    created_by: Optional[str] = None


_NOT_NULLABLE = (
    "name",
    "type",
    "address",
    "city",
    "country",
    "location",
    "current_availability",
    "verified",
)


class FoodCenterUpdate(BaseModel):
    """Partial update: every field optional, constraints as on create."""

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    type: Optional[FoodCenterType] = None
    address: Optional[str] = Field(default=None, min_length=1)
    city: Optional[str] = Field(default=None, min_length=1)
    country: Optional[str] = Field(default=None, min_length=1)
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    website: Optional[WebsiteUrl] = None
    location: Optional[Location] = None
    operating_hours: Optional[dict[WeekdayKey, DayHours]] = None
    dietary_restrictions: Optional[list[str]] = None
    contact_person: Optional[str] = None
    languages_spoken: Optional[list[str]] = None
    capacity: Optional[float] = Field(default=None, ge=0)
    current_availability: Optional[AvailabilityStatus] = None
    verified: Optional[bool] = None
    created_by: Optional[str] = None

    @model_validator(mode="after")
    def _reject_nulls(self) -> "FoodCenterUpdate":
        for name in _NOT_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} may be omitted but not null")
        return self


class FoodCenter(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    type: str
    address: str
    city: str
    country: str
    postal_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    location: Optional[Location] = None
    operating_hours: Optional[dict[str, dict[str, str]]] = None
    dietary_restrictions: Optional[list[str]] = None
    contact_person: Optional[str] = None
    languages_spoken: Optional[list[str]] = None
    capacity: Optional[float] = None
    current_availability: str = AvailabilityStatus.UNKNOWN.value
    verified: bool = False
    created_by: Optional[str] = None
    created_at: str
    updated_at: str
    distance_meters: Optional[float] = None
    open_now: Optional[bool] = None


class NearbyFoodCenter(BaseModel):
    id: str
    name: str
    location: Optional[Location] = None
    current_availability: str
    distance_meters: Optional[float] = None


class AvailabilityUpdateCreate(BaseModel):
    food_center_id: str = Field(..., min_length=1)
    status: AvailabilityStatus
    notes: Optional[str] = None
    reported_by: Optional[str] = None


class AvailabilityUpdate(BaseModel):
    id: str
    food_center_id: str
    status: str
    notes: Optional[str] = None
    reported_by: Optional[str] = None
    created_at: str


class ReviewCreate(BaseModel):
    food_center_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ReviewerProfile(BaseModel):
    full_name: Optional[str] = None


class Review(BaseModel):
    id: str
    food_center_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    helpful_count: int = 0
    created_at: str
    updated_at: str
    profiles: Optional[ReviewerProfile] = None


class UserReportCreate(BaseModel):
    food_center_id: Optional[str] = None
    reporter_id: Optional[str] = None
    type: str = Field(..., min_length=1)
    content: dict[str, Any]
    status: ReportStatus = ReportStatus.PENDING


class UserReport(BaseModel):
    id: str
    food_center_id: Optional[str] = None
    reporter_id: Optional[str] = None
    type: str
    content: dict[str, Any]
    status: str
    moderated_by: Optional[str] = None
    moderated_at: Optional[str] = None
    created_at: str


class Profile(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = "user"
    preferred_language: str = "en"
    created_at: str
    updated_at: str


class UserAddress(BaseModel):
    address: str
    city: str
    country: str


class OptionItem(BaseModel):
    value: str
    label: str
    color: Optional[str] = None


class OptionsResponse(BaseModel):
    food_center_types: list[OptionItem]
    dietary_restrictions: list[OptionItem]
    availability_statuses: list[OptionItem]
    languages: list[OptionItem]
    default_map_center: Location


class MessagesResponse(BaseModel):
    locale: str
    messages: dict[str, Any]


class HealthResponse(BaseModel):
    status: Literal["OK"]


class ErrorResponse(BaseModel):
    error: Any
