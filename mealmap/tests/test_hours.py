import unittest
from datetime import datetime

from mealmap_shared.hours import format_operating_hours, is_open_at, parse_hhmm, weekday_key

MONDAY = datetime(2024, 1, 1, 10, 0)
WEEKDAY_HOURS = {
    "mon": {"open": "09:00", "close": "17:00"},
    "fri": {"open": "22:00", "close": "02:00"},
}


class OpeningHoursTests(unittest.TestCase):
    def test_weekday_key(self):
        self.assertEqual(weekday_key(MONDAY), "mon")
        self.assertEqual(weekday_key(datetime(2024, 1, 7)), "sun")

    def test_parse_hhmm(self):
        self.assertEqual(parse_hhmm("09:30"), 570)
        self.assertEqual(parse_hhmm("24:00"), 1440)
        self.assertIsNone(parse_hhmm("24:30"))
        self.assertIsNone(parse_hhmm("9am"))
        self.assertIsNone(parse_hhmm(None))

    def test_unknown_when_no_hours(self):
        self.assertIsNone(is_open_at(None, MONDAY))
        self.assertIsNone(is_open_at({}, MONDAY))

    def test_open_window_is_half_open(self):
        self.assertTrue(is_open_at(WEEKDAY_HOURS, MONDAY.replace(hour=9)))
        self.assertTrue(is_open_at(WEEKDAY_HOURS, MONDAY.replace(hour=16, minute=59)))
        self.assertFalse(is_open_at(WEEKDAY_HOURS, MONDAY.replace(hour=17)))
        self.assertFalse(is_open_at(WEEKDAY_HOURS, MONDAY.replace(hour=8, minute=59)))

    def test_closed_on_days_without_entry(self):
        tuesday = datetime(2024, 1, 2, 10, 0)
        self.assertFalse(is_open_at(WEEKDAY_HOURS, tuesday))

    def test_overnight_window(self):
        friday_late = datetime(2024, 1, 5, 23, 0)
        saturday_early = datetime(2024, 1, 6, 1, 30)
        saturday_later = datetime(2024, 1, 6, 3, 0)
        self.assertTrue(is_open_at(WEEKDAY_HOURS, friday_late))
        self.assertTrue(is_open_at(WEEKDAY_HOURS, saturday_early))
        self.assertFalse(is_open_at(WEEKDAY_HOURS, saturday_later))

    def test_midnight_close(self):
        hours = {"mon": {"open": "18:00", "close": "24:00"}}
        self.assertTrue(is_open_at(hours, MONDAY.replace(hour=23, minute=59)))
        self.assertFalse(is_open_at(hours, datetime(2024, 1, 2, 0, 30)))

    def test_malformed_times_count_as_closed(self):
        hours = {"mon": {"open": "9am", "close": "5pm"}}
        self.assertFalse(is_open_at(hours, MONDAY))

    def test_format_operating_hours(self):
        self.assertEqual(format_operating_hours(None, MONDAY), "Hours not specified")
        self.assertEqual(
            format_operating_hours(WEEKDAY_HOURS, datetime(2024, 1, 2)), "Closed today"
        )
        self.assertEqual(format_operating_hours(WEEKDAY_HOURS, MONDAY), "09:00 - 17:00")


if __name__ == "__main__":
    unittest.main()
