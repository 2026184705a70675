import unittest

from mealmap_shared.address import UserAddress, parse_nominatim_address


class NominatimAddressTests(unittest.TestCase):
    def test_structured_address(self):
        payload = {
            "address": {
                "road": "Karl-Marx-Allee",
                "house_number": "1a",
                "suburb": "Friedrichshain",
                "city": "Berlin",
                "postcode": "10243",
                "country": "Deutschland",
            }
        }
        self.assertEqual(
            parse_nominatim_address(payload),
            UserAddress(
                address="Karl-Marx-Allee 1A",
                city="Friedrichshain, 10243 Berlin",
                country="Deutschland",
            ),
        )

    def test_suburb_used_as_street(self):
        payload = {"address": {"suburb": "Mitte", "city": "Berlin", "country": "Deutschland"}}
        result = parse_nominatim_address(payload)
        self.assertEqual(result.address, "Mitte")
        self.assertEqual(result.city, "Berlin")

    def test_district_preferred_over_suburb(self):
        payload = {
            "address": {
                "road": "Turmstraße",
                "district": "Moabit",
                "suburb": "Mitte",
                "town": "Berlin",
            }
        }
        result = parse_nominatim_address(payload)
        self.assertEqual(result.city, "Moabit, Berlin")
        self.assertEqual(result.country, "Unknown")

    def test_display_name_fallback(self):
        payload = {"display_name": "Alexanderplatz 1, Mitte, 10178, Berlin, Deutschland"}
        self.assertEqual(
            parse_nominatim_address(payload),
            UserAddress(
                address="Alexanderplatz 1",
                city="Mitte, 10178 Berlin",
                country="Deutschland",
            ),
        )

    def test_empty_payload(self):
        result = parse_nominatim_address({})
        self.assertEqual(
            result.as_dict(),
            {"address": "Current Location", "city": "Unknown", "country": "Unknown"},
        )


if __name__ == "__main__":
    unittest.main()
