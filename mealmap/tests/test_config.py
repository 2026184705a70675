import unittest

from pydantic import ValidationError

from mealmap.config import Settings


class SettingsTests(unittest.TestCase):
    def test_timezone_defaults_to_berlin(self):
        self.assertEqual(Settings(timezone="Europe/Berlin").timezone, "Europe/Berlin")
        self.assertEqual(Settings.model_fields["timezone"].default, "Europe/Berlin")

    def test_unknown_timezone_is_rejected(self):
        with self.assertRaises(ValidationError):
            Settings(timezone="Mars/Olympus_Mons")


if __name__ == "__main__":
    unittest.main()
