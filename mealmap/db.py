"""
Database abstraction for the managed Postgres backend and an in-memory test
implementation.

Rows cross this boundary as plain dicts shaped like the API records:
food centers carry ``location`` as ``{"lat": ..., "lng": ...}``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Protocol

from sqlalchemy import (
    ARRAY,
    JSON,
    Boolean,
    Column,
    Float,
    Integer,
    String,
    create_engine,
    select,
)
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from mealmap_shared.geo import (
    bounding_box,
    haversine_m,
    in_bounding_box,
    parse_geography_point,
    to_geography_point,
)
from mealmap_shared.types import AvailabilityStatus, ReportStatus, UserRole


class DbError(Exception):
    """Raised when the backing database rejects or fails a request."""


@dataclass
class FoodCenterFilters:
    type: Optional[str] = None
    dietary_restrictions: List[str] = field(default_factory=list)
    city: Optional[str] = None
    verified: Optional[bool] = None
    search: Optional[str] = None

    def matches(self, row: dict) -> bool:
        if self.type and row.get("type") != self.type:
            return False
        if self.city and row.get("city") != self.city:
            return False
        if self.verified is not None and bool(row.get("verified")) != self.verified:
            return False
        if self.dietary_restrictions:
            offered = set(row.get("dietary_restrictions") or [])
            if not offered.intersection(self.dietary_restrictions):
                return False
        if self.search:
            if self.search.lower() not in (row.get("name") or "").lower():
                return False
        return True


class DbClient(Protocol):
    """Interface for database access."""

    def list_food_centers(
        self, filters: Optional[FoodCenterFilters] = None
    ) -> list[dict]:
        ...

    def get_food_center(self, food_center_id: str) -> Optional[dict]:
        ...

    def create_food_center(self, data: dict) -> dict:
        ...

    def update_food_center(self, food_center_id: str, updates: dict) -> Optional[dict]:
        ...

    def get_nearby_food_centers(
        self, lat: float, lng: float, radius_meters: float = 5000
    ) -> list[dict]:
        ...

    def create_availability_update(self, data: dict) -> dict:
        ...

    def list_availability_updates(
        self, food_center_id: str, limit: int = 10
    ) -> list[dict]:
        ...

    def create_review(self, data: dict) -> dict:
        ...

    def list_reviews(self, food_center_id: str) -> list[dict]:
        ...

    def create_user_report(self, data: dict) -> dict:
        ...

    def get_profile(self, user_id: str) -> Optional[dict]:
        ...

    def save_profile(self, profile: dict) -> dict:
        ...


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def build_food_center(data: dict) -> dict:
    """Fill backend-owned fields for a new food center row."""
    now = utc_now_iso()
    row = {
        "description": None,
        "postal_code": None,
        "phone": None,
        "email": None,
        "website": None,
        "operating_hours": None,
        "dietary_restrictions": None,
        "contact_person": None,
        "languages_spoken": None,
        "capacity": None,
        "current_availability": AvailabilityStatus.UNKNOWN.value,
        "verified": False,
        "created_by": None,
    }
    row.update(data)
    row["location"] = dict(data["location"])
    row["id"] = new_id()
    row["created_at"] = now
    row["updated_at"] = now
    return row


def build_availability_update(data: dict) -> dict:
    row = {"reported_by": None}
    row.update(data)
    row["notes"] = data.get("notes") or ""
    row["id"] = new_id()
    row["created_at"] = utc_now_iso()
    return row


def build_review(data: dict) -> dict:
    now = utc_now_iso()
    row = {"comment": None}
    row.update(data)
    row["helpful_count"] = 0
    row["id"] = new_id()
    row["created_at"] = now
    row["updated_at"] = now
    return row


def build_user_report(data: dict) -> dict:
    row = {
        "status": ReportStatus.PENDING.value,
        "moderated_by": None,
        "moderated_at": None,
    }
    row.update(data)
    row["food_center_id"] = data.get("food_center_id") or ""
    row["reporter_id"] = data.get("reporter_id") or ""
    row["id"] = new_id()
    row["created_at"] = utc_now_iso()
    return row


def newest_first(rows: Iterable[dict]) -> list[dict]:
    # Reversing first keeps later inserts ahead when timestamps tie.
    return sorted(reversed(list(rows)), key=lambda r: r["created_at"], reverse=True)


def nearby(rows: Iterable[dict], lat: float, lng: float, radius_meters: float) -> list[dict]:
    """Rows within ``radius_meters`` of the point, nearest first, with distance."""
    origin = {"lat": lat, "lng": lng}
    box = bounding_box(origin, radius_meters)
    results = []
    for row in rows:
        location = row.get("location")
        if not location or not in_bounding_box(location, box):
            continue
        distance = haversine_m(origin, location)
        if distance <= radius_meters:
            results.append(
                {
                    "id": row["id"],
                    "name": row["name"],
                    "location": dict(location),
                    "current_availability": row.get("current_availability"),
                    "distance_meters": distance,
                }
            )
    results.sort(key=lambda r: r["distance_meters"])
    return results


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.food_centers: Dict[str, dict] = {}
        self.availability_updates: Dict[str, dict] = {}
        self.reviews: Dict[str, dict] = {}
        self.user_reports: Dict[str, dict] = {}
        self.profiles: Dict[str, dict] = {}

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.food_centers.clear()
        self.availability_updates.clear()
        self.reviews.clear()
        self.user_reports.clear()
        self.profiles.clear()

    def list_food_centers(
        self, filters: Optional[FoodCenterFilters] = None
    ) -> list[dict]:
        filters = filters or FoodCenterFilters()
        rows = [row for row in self.food_centers.values() if filters.matches(row)]
        return [dict(row) for row in newest_first(rows)]

    def get_food_center(self, food_center_id: str) -> Optional[dict]:
        row = self.food_centers.get(food_center_id)
        return dict(row) if row else None

    def create_food_center(self, data: dict) -> dict:
        row = build_food_center(data)
        self.food_centers[row["id"]] = row
        return dict(row)

    def update_food_center(self, food_center_id: str, updates: dict) -> Optional[dict]:
        row = self.food_centers.get(food_center_id)
        if not row:
            return None
        row.update(updates)
        row["updated_at"] = utc_now_iso()
        return dict(row)

    def get_nearby_food_centers(
        self, lat: float, lng: float, radius_meters: float = 5000
    ) -> list[dict]:
        return nearby(self.food_centers.values(), lat, lng, radius_meters)

    def create_availability_update(self, data: dict) -> dict:
        row = build_availability_update(data)
        self.availability_updates[row["id"]] = row
        return dict(row)

    def list_availability_updates(
        self, food_center_id: str, limit: int = 10
    ) -> list[dict]:
        rows = [
            row
            for row in self.availability_updates.values()
            if row["food_center_id"] == food_center_id
        ]
        return [dict(row) for row in newest_first(rows)[:limit]]

    def create_review(self, data: dict) -> dict:
        row = build_review(data)
        self.reviews[row["id"]] = row
        return dict(row)

    def list_reviews(self, food_center_id: str) -> list[dict]:
        rows = [
            row for row in self.reviews.values() if row["food_center_id"] == food_center_id
        ]
        results = []
        for row in newest_first(rows):
            profile = self.profiles.get(row["user_id"])
            item = dict(row)
            item["profiles"] = {"full_name": profile.get("full_name")} if profile else None
            results.append(item)
        return results

    def create_user_report(self, data: dict) -> dict:
        row = build_user_report(data)
        self.user_reports[row["id"]] = row
        return dict(row)

    def get_profile(self, user_id: str) -> Optional[dict]:
        profile = self.profiles.get(user_id)
        return dict(profile) if profile else None

    def save_profile(self, profile: dict) -> dict:
        now = utc_now_iso()
        existing = self.profiles.get(profile["id"], {})
        row = {
            "full_name": None,
            "avatar_url": None,
            "role": UserRole.USER.value,
            "preferred_language": "en",
            "created_at": now,
        }
        row.update(existing)
        row.update(profile)
        row["updated_at"] = now
        self.profiles[row["id"]] = row
        return dict(row)


class SqlDbClient:
    """
    SQLAlchemy-backed implementation over the managed database's own tables.
    Accepts any SQLAlchemy URL (the managed Postgres connection string, or
    SQLite for tests); missing tables are created with the same layout.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def list_food_centers(
        self, filters: Optional[FoodCenterFilters] = None
    ) -> list[dict]:
        filters = filters or FoodCenterFilters()
        with self.Session() as session:
            stmt = select(FoodCenterRow).order_by(FoodCenterRow.created_at.desc())
            if filters.type:
                stmt = stmt.where(FoodCenterRow.type == filters.type)
            if filters.city:
                stmt = stmt.where(FoodCenterRow.city == filters.city)
            if filters.verified is not None:
                stmt = stmt.where(FoodCenterRow.verified == filters.verified)
            rows = session.execute(stmt).scalars().all()
            # JSON array overlap and name search run in Python so the same
            # query works on SQLite.
            results = (row.to_dict() for row in rows)
            return [item for item in results if filters.matches(item)]

    def get_food_center(self, food_center_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = self._food_center_row(session, food_center_id)
            return row.to_dict() if row else None

    def create_food_center(self, data: dict) -> dict:
        values = build_food_center(data)
        with self.Session() as session:
            row = FoodCenterRow.from_dict(values)
            session.add(row)
            session.commit()
            session.refresh(row)
            return row.to_dict()

    def update_food_center(self, food_center_id: str, updates: dict) -> Optional[dict]:
        with self.Session() as session:
            row = self._food_center_row(session, food_center_id)
            if not row:
                return None
            row.apply(updates)
            row.updated_at = utc_now_iso()
            session.commit()
            session.refresh(row)
            return row.to_dict()

    def get_nearby_food_centers(
        self, lat: float, lng: float, radius_meters: float = 5000
    ) -> list[dict]:
        # Location is an opaque geography value here, so the distance filter
        # runs in Python.
        with self.Session() as session:
            rows = session.execute(select(FoodCenterRow)).scalars().all()
            return nearby((row.to_dict() for row in rows), lat, lng, radius_meters)

    def create_availability_update(self, data: dict) -> dict:
        values = build_availability_update(data)
        with self.Session() as session:
            row = AvailabilityUpdateRow(**values)
            session.add(row)
            session.commit()
            session.refresh(row)
            return row.to_dict()

    def list_availability_updates(
        self, food_center_id: str, limit: int = 10
    ) -> list[dict]:
        with self.Session() as session:
            stmt = (
                select(AvailabilityUpdateRow)
                .where(AvailabilityUpdateRow.food_center_id == food_center_id)
                .order_by(AvailabilityUpdateRow.created_at.desc())
                .limit(limit)
            )
            return [row.to_dict() for row in session.execute(stmt).scalars().all()]

    def create_review(self, data: dict) -> dict:
        values = build_review(data)
        with self.Session() as session:
            row = ReviewRow(**values)
            session.add(row)
            session.commit()
            session.refresh(row)
            return row.to_dict()

    def list_reviews(self, food_center_id: str) -> list[dict]:
        with self.Session() as session:
            stmt = (
                select(ReviewRow, ProfileRow)
                .outerjoin(ProfileRow, ProfileRow.id == ReviewRow.user_id)
                .where(ReviewRow.food_center_id == food_center_id)
                .order_by(ReviewRow.created_at.desc())
            )
            results = []
            for review, profile in session.execute(stmt).all():
                item = review.to_dict()
                item["profiles"] = (
                    {"full_name": profile.full_name} if profile is not None else None
                )
                results.append(item)
            return results

    def create_user_report(self, data: dict) -> dict:
        values = build_user_report(data)
        with self.Session() as session:
            row = UserReportRow(**values)
            session.add(row)
            session.commit()
            session.refresh(row)
            return row.to_dict()

    def get_profile(self, user_id: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(ProfileRow, user_id)
            return row.to_dict() if row else None

    def save_profile(self, profile: dict) -> dict:
        now = utc_now_iso()
        with self.Session() as session:
            row = session.get(ProfileRow, profile["id"])
            if row is None:
                row = ProfileRow(
                    id=profile["id"],
                    email=profile.get("email", ""),
                    role=UserRole.USER.value,
                    preferred_language="en",
                    created_at=now,
                )
                session.add(row)
            for key, value in profile.items():
                if key in ProfileRow.__table__.columns.keys() and key != "id":
                    setattr(row, key, value)
            row.updated_at = now
            session.commit()
            session.refresh(row)
            return row.to_dict()

    def _food_center_row(
        self, session: Session, food_center_id: str
    ) -> Optional["FoodCenterRow"]:
        stmt = select(FoodCenterRow).where(FoodCenterRow.id == food_center_id)
        return session.execute(stmt).scalar_one_or_none()


Base = declarative_base()

# text[] on the managed Postgres database, JSON elsewhere.
StringList = JSON().with_variant(ARRAY(String), "postgresql")


def _plain(value):
    # Postgres hands back timestamptz columns as datetimes.
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class _RowMixin:
    def to_dict(self) -> dict:
        return {
            column.name: _plain(getattr(self, column.name))
            for column in self.__table__.columns
        }


class FoodCenterRow(_RowMixin, Base):
    """
    Mirrors the managed ``food_centers`` table. ``location`` is a geography
    column; it is written as ``POINT(lng lat)`` and read back as WKT or hex
    EWKB.
    """

    __tablename__ = "food_centers"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    type = Column(String, nullable=False, index=True)
    address = Column(String, nullable=False)
    city = Column(String, nullable=False, index=True)
    country = Column(String, nullable=False)
    postal_code = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    website = Column(String, nullable=True)
    location = Column(String, nullable=False)
    operating_hours = Column(JSON, nullable=True)
    dietary_restrictions = Column(StringList, nullable=True)
    contact_person = Column(String, nullable=True)
    languages_spoken = Column(StringList, nullable=True)
    capacity = Column(Float, nullable=True)
    current_availability = Column(String, nullable=False, default="unknown")
    verified = Column(Boolean, nullable=False, default=False)
    created_by = Column(String, nullable=True)
    created_at = Column(String, nullable=False, index=True)
    updated_at = Column(String, nullable=False)

    @classmethod
    def from_dict(cls, values: dict) -> "FoodCenterRow":
        row = cls()
        row.apply(values)
        return row

    def apply(self, values: dict) -> None:
        columns = self.__table__.columns.keys()
        for key, value in values.items():
            if key == "location":
                self.location = to_geography_point(value)
            elif key in columns:
                setattr(self, key, value)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["location"] = parse_geography_point(self.location)
        return data


class AvailabilityUpdateRow(_RowMixin, Base):
    __tablename__ = "availability_updates"

    id = Column(String, primary_key=True)
    food_center_id = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    reported_by = Column(String, nullable=True)
    created_at = Column(String, nullable=False)


class ReviewRow(_RowMixin, Base):
    __tablename__ = "reviews"

    id = Column(String, primary_key=True)
    food_center_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(String, nullable=True)
    helpful_count = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)


class UserReportRow(_RowMixin, Base):
    __tablename__ = "user_reports"

    id = Column(String, primary_key=True)
    food_center_id = Column(String, nullable=True)
    reporter_id = Column(String, nullable=True)
    type = Column(String, nullable=False)
    content = Column(JSON, nullable=False)
    status = Column(String, nullable=False, default="pending")
    moderated_by = Column(String, nullable=True)
    moderated_at = Column(String, nullable=True)
    created_at = Column(String, nullable=False)


class ProfileRow(_RowMixin, Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")
    preferred_language = Column(String, nullable=False, default="en")
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
