import unittest

from pydantic import ValidationError

from windwidget.errors import ConfigurationError
from windwidget.models import (
    Credentials,
    DataStatus,
    WindReading,
    degrees_to_cardinal,
    knots_to_beaufort,
)


def _reading(**overrides):
    fields = dict(
        location_name="Pier",
        times=["2024-01-20T16:55", "2024-01-20T17:00"],
        speeds=[10.0, 12.0],
        directions=[80.0, 90.0],
        gusts=[14.0, 16.0],
    )
    fields.update(overrides)
    return WindReading(**fields)


class TestBeaufort(unittest.TestCase):
    def test_scale_boundaries(self):
        cases = [
            (0.0, 0), (0.9, 0), (1.0, 1), (3.9, 1), (4.0, 2), (6.9, 2),
            (7.0, 3), (10.9, 3), (11.0, 4), (16.9, 4), (17.0, 5),
            (22.0, 6), (28.0, 7), (34.0, 8), (41.0, 9), (48.0, 10),
            (56.0, 11), (63.9, 11), (64.0, 12), (120.0, 12),
        ]
        for knots, force in cases:
            with self.subTest(knots=knots):
                self.assertEqual(knots_to_beaufort(knots), force)

    def test_negative_speed_is_calm(self):
        self.assertEqual(knots_to_beaufort(-3.0), 0)


class TestCardinal(unittest.TestCase):
    def test_sectors(self):
        cases = [
            (0.0, "N"), (22.4, "N"), (22.5, "NE"), (67.4, "NE"), (67.5, "E"),
            (90.0, "E"), (135.0, "SE"), (180.0, "S"), (225.0, "SW"),
            (270.0, "W"), (315.0, "NW"), (337.4, "NW"), (337.5, "N"), (359.9, "N"),
        ]
        for degrees, point in cases:
            with self.subTest(degrees=degrees):
                self.assertEqual(degrees_to_cardinal(degrees), point)


class TestWindReading(unittest.TestCase):
    def test_current_values_default_to_series_tail(self):
        r = _reading()
        self.assertEqual((r.current_speed, r.current_direction, r.current_gust), (12.0, 90.0, 16.0))
        self.assertEqual(r.status, DataStatus.LIVE)

    def test_explicit_current_values_win(self):
        r = _reading(current_speed=11.2, current_direction=72.0, current_gust=15.7)
        self.assertEqual(r.current_speed, 11.2)
        self.assertEqual(r.direction_cardinal, "E")
        self.assertEqual(r.beaufort, 4)

    def test_empty_series_defaults_current_to_zero(self):
        r = _reading(times=[], speeds=[], directions=[], gusts=[])
        self.assertEqual(r.current_speed, 0.0)
        self.assertEqual(r.max_speed, 0.0)
        self.assertEqual(r.max_gust, 0.0)

    def test_series_length_mismatch_rejected(self):
        with self.assertRaises(ValidationError):
            _reading(gusts=[14.0])

    def test_direction_out_of_range_rejected(self):
        with self.assertRaises(ValidationError):
            _reading(directions=[80.0, 360.0])
        with self.assertRaises(ValidationError):
            _reading(current_direction=-1.0)

    def test_negative_speed_rejected(self):
        with self.assertRaises(ValidationError):
            _reading(speeds=[-1.0, 2.0])

    def test_with_status_returns_copy(self):
        r = _reading()
        stale = r.with_status(DataStatus.STALE)
        self.assertEqual(stale.status, DataStatus.STALE)
        self.assertEqual(r.status, DataStatus.LIVE)
        self.assertEqual(stale.speeds, r.speeds)

    def test_reading_is_frozen(self):
        r = _reading()
        with self.assertRaises(ValidationError):
            r.current_speed = 3.0

    def test_maxima(self):
        r = _reading()
        self.assertEqual(r.max_speed, 12.0)
        self.assertEqual(r.max_gust, 16.0)

    def test_json_round_trip_keeps_status(self):
        r = _reading(status=DataStatus.DEMO, last_updated_millis=123)
        again = WindReading.model_validate_json(r.model_dump_json())
        self.assertEqual(again, r)

    def test_str_summary(self):
        self.assertEqual(str(_reading()), "Pier: 12.0kts E (gust 16.0) [live, 2 pts]")


class TestCredentials(unittest.TestCase):
    def test_is_configured(self):
        self.assertTrue(Credentials(application_key="a", api_key="b", mac_address="c").is_configured)
        self.assertFalse(Credentials(application_key="a", api_key="b").is_configured)

    def test_require_configured_names_missing_fields(self):
        with self.assertRaises(ConfigurationError) as ctx:
            Credentials(application_key="a").require_configured()
        self.assertIn("api_key", str(ctx.exception))
        self.assertIn("mac_address", str(ctx.exception))
        self.assertNotIn("application_key", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
