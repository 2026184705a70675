import os
import tempfile
import unittest

from sqlalchemy import create_engine, text

from mealmap.db import FoodCenterFilters, SqlDbClient


def food_center(**overrides):
    data = {
        "name": "Suppenküche Nord",
        "type": "soup_kitchen",
        "address": "Müllerstraße 10",
        "city": "Berlin",
        "country": "Germany",
        "location": {"lat": 52.55, "lng": 13.35},
        "operating_hours": {"tue": {"open": "12:00", "close": "14:00"}},
        "dietary_restrictions": ["vegan"],
    }
    data.update(overrides)
    return data


class SqlDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL client logic.
    """

    def setUp(self):
        self.db = SqlDbClient("sqlite+pysqlite:///:memory:")

    def test_create_and_get_food_center(self):
        created = self.db.create_food_center(food_center())
        self.assertEqual(created["location"], {"lat": 52.55, "lng": 13.35})
        self.assertEqual(created["current_availability"], "unknown")
        self.assertFalse(created["verified"])
        self.assertEqual(created["dietary_restrictions"], ["vegan"])
        self.assertNotIn("seq", created)

        fetched = self.db.get_food_center(created["id"])
        self.assertEqual(fetched, created)
        self.assertIsNone(self.db.get_food_center("missing"))

    def test_list_food_centers_filters(self):
        self.db.create_food_center(food_center(name="A", verified=True))
        self.db.create_food_center(
            food_center(name="B", type="pantry", dietary_restrictions=["halal"])
        )
        self.db.create_food_center(food_center(name="C", city="Potsdam"))

        names = lambda rows: [row["name"] for row in rows]
        self.assertEqual(names(self.db.list_food_centers()), ["C", "B", "A"])
        self.assertEqual(
            names(self.db.list_food_centers(FoodCenterFilters(type="pantry"))), ["B"]
        )
        self.assertEqual(
            names(self.db.list_food_centers(FoodCenterFilters(verified=False))),
            ["C", "B"],
        )
        self.assertEqual(
            names(
                self.db.list_food_centers(
                    FoodCenterFilters(dietary_restrictions=["halal", "kosher"])
                )
            ),
            ["B"],
        )
        self.assertEqual(
            names(self.db.list_food_centers(FoodCenterFilters(city="Potsdam"))), ["C"]
        )

    def test_update_food_center(self):
        created = self.db.create_food_center(food_center())
        updated = self.db.update_food_center(
            created["id"],
            {"location": {"lat": 52.4, "lng": 13.1}, "verified": True},
        )
        self.assertEqual(updated["location"], {"lat": 52.4, "lng": 13.1})
        self.assertTrue(updated["verified"])
        self.assertEqual(updated["name"], created["name"])
        self.assertIsNone(self.db.update_food_center("missing", {"name": "x"}))

    def test_nearby_food_centers(self):
        near = self.db.create_food_center(food_center(location={"lat": 52.52, "lng": 13.41}))
        self.db.create_food_center(food_center(location={"lat": 48.14, "lng": 11.58}))

        results = self.db.get_nearby_food_centers(52.52, 13.405, 1000)
        self.assertEqual([row["id"] for row in results], [near["id"]])
        self.assertLess(results[0]["distance_meters"], 1000)
        self.assertEqual(
            set(results[0]), {"id", "name", "location", "current_availability", "distance_meters"}
        )

    def test_availability_updates_latest_first_with_limit(self):
        for i in range(4):
            self.db.create_availability_update(
                {"food_center_id": "fc-1", "status": "limited", "notes": f"n{i}"}
            )
        self.db.create_availability_update(
            {"food_center_id": "fc-2", "status": "available", "notes": None}
        )

        rows = self.db.list_availability_updates("fc-1", limit=3)
        self.assertEqual([row["notes"] for row in rows], ["n3", "n2", "n1"])
        other = self.db.list_availability_updates("fc-2")
        self.assertEqual(other[0]["notes"], "")

    def test_reviews_join_profile(self):
        self.db.save_profile({"id": "u1", "email": "u1@mail.de", "full_name": "Grace"})
        self.db.create_review({"food_center_id": "fc", "user_id": "u1", "rating": 4})
        self.db.create_review({"food_center_id": "fc", "user_id": "anon", "rating": 2})

        rows = self.db.list_reviews("fc")
        self.assertEqual(len(rows), 2)
        by_user = {row["user_id"]: row for row in rows}
        self.assertEqual(by_user["u1"]["profiles"], {"full_name": "Grace"})
        self.assertIsNone(by_user["anon"]["profiles"])
        self.assertEqual(by_user["u1"]["helpful_count"], 0)

    def test_user_report_defaults(self):
        report = self.db.create_user_report(
            {"type": "wrong_address", "content": {"address": "Elsewhere 2"}}
        )
        self.assertEqual(report["status"], "pending")
        self.assertEqual(report["food_center_id"], "")
        self.assertEqual(report["reporter_id"], "")
        self.assertEqual(report["content"], {"address": "Elsewhere 2"})

    def test_save_profile_upserts(self):
        first = self.db.save_profile({"id": "u9", "email": "u9@mail.de"})
        self.assertEqual(first["role"], "user")
        second = self.db.save_profile({"id": "u9", "full_name": "Updated"})
        self.assertEqual(second["full_name"], "Updated")
        self.assertEqual(second["email"], "u9@mail.de")
        self.assertEqual(self.db.get_profile("u9")["full_name"], "Updated")


MANAGED_FOOD_CENTERS_DDL = """
CREATE TABLE food_centers (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    type TEXT NOT NULL,
    address TEXT NOT NULL,
    city TEXT NOT NULL,
    country TEXT NOT NULL,
    postal_code TEXT,
    phone TEXT,
    email TEXT,
    website TEXT,
    location TEXT NOT NULL,
    operating_hours JSON,
    dietary_restrictions JSON,
    contact_person TEXT,
    languages_spoken JSON,
    capacity FLOAT,
    current_availability TEXT NOT NULL,
    verified BOOLEAN NOT NULL,
    created_by TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class ExistingSchemaTests(unittest.TestCase):
    """The client reads tables that already exist in the managed database."""

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.url = f"sqlite+pysqlite:///{os.path.join(tmp.name, 'managed.db')}"
        engine = create_engine(self.url)
        with engine.begin() as conn:
            conn.execute(text(MANAGED_FOOD_CENTERS_DDL))
            conn.execute(
                text(
                    "INSERT INTO food_centers (id, name, type, address, city, country, "
                    "location, dietary_restrictions, current_availability, verified, "
                    "created_at, updated_at) VALUES ('fc-1', 'Tafel Mitte', 'food_bank', "
                    "'Invalidenstraße 1', 'Berlin', 'Germany', "
                    "'SRID=4326;POINT(13.405 52.52)', '[\"vegan\"]', 'available', 1, "
                    "'2024-01-01T10:00:00+00:00', '2024-01-01T10:00:00+00:00')"
                )
            )
        engine.dispose()

    def test_reads_rows_written_by_the_backend(self):
        db = SqlDbClient(self.url)
        rows = db.list_food_centers()
        self.assertEqual([row["id"] for row in rows], ["fc-1"])
        self.assertEqual(rows[0]["location"], {"lat": 52.52, "lng": 13.405})
        self.assertEqual(rows[0]["dietary_restrictions"], ["vegan"])

        nearby = db.get_nearby_food_centers(52.52, 13.41, 1000)
        self.assertEqual([row["id"] for row in nearby], ["fc-1"])

    def test_writes_location_as_wkt(self):
        db = SqlDbClient(self.url)
        created = db.create_food_center(food_center(location={"lat": 52.4, "lng": 13.1}))
        engine = create_engine(self.url)
        with engine.connect() as conn:
            stored = conn.execute(
                text("SELECT location FROM food_centers WHERE id = :id"),
                {"id": created["id"]},
            ).scalar_one()
        engine.dispose()
        self.assertEqual(stored, "POINT(13.1 52.4)")
        self.assertEqual(db.get_food_center(created["id"])["location"], {"lat": 52.4, "lng": 13.1})


if __name__ == "__main__":
    unittest.main()
