from __future__ import annotations

import unittest
from datetime import date, datetime, timedelta, timezone

from carecast.age import baby_age_days
from carecast.norms import (
    DEFAULT_GUIDANCE,
    DEFAULT_INTERVAL_HOURS,
    age_based_interval,
    age_guidance,
    overdue_threshold,
    overdue_threshold_description,
    typical_feeding_amount_ml,
    typical_feeding_duration,
    typical_sleep_duration,
)
from carecast.schemas import ActivityFamily


class AgeResolverTests(unittest.TestCase):
    def test_unknown_birth_date(self):
        self.assertIsNone(baby_age_days(None, datetime(2024, 6, 1, tzinfo=timezone.utc)))

    def test_floors_to_whole_days(self):
        birth = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)
        reference = birth + timedelta(days=4, hours=23, minutes=59)
        self.assertEqual(baby_age_days(birth, reference), 4)

    def test_accepts_plain_dates(self):
        self.assertEqual(baby_age_days(date(2024, 5, 1), datetime(2024, 5, 11, 6, tzinfo=timezone.utc)), 10)

    def test_reference_before_birth_clamps_to_zero(self):
        self.assertEqual(baby_age_days(date(2024, 6, 10), datetime(2024, 6, 1, tzinfo=timezone.utc)), 0)


class NormsTests(unittest.TestCase):
    def test_newborn_diaper_interval(self):
        self.assertEqual(age_based_interval(ActivityFamily.DIAPER, 5), 2.0)

    def test_band_edges_are_inclusive(self):
        self.assertEqual(age_based_interval(ActivityFamily.FEEDING, 7), 2.5)
        self.assertEqual(age_based_interval(ActivityFamily.FEEDING, 8), 3.0)

    def test_open_ended_last_band(self):
        self.assertEqual(age_based_interval(ActivityFamily.SLEEP, 2000), 5.0)

    def test_unknown_age_falls_back_to_defaults(self):
        for family in ActivityFamily:
            self.assertEqual(age_based_interval(family, None), DEFAULT_INTERVAL_HOURS)
            self.assertEqual(age_guidance(family, None), DEFAULT_GUIDANCE)
        self.assertEqual(DEFAULT_INTERVAL_HOURS, 3.0)

    def test_overdue_thresholds_relax_with_age(self):
        self.assertEqual(overdue_threshold(ActivityFamily.DIAPER, 7), 30)
        self.assertEqual(overdue_threshold(ActivityFamily.DIAPER, 91), 90)
        self.assertEqual(overdue_threshold(ActivityFamily.FEEDING, 45), 30)
        self.assertEqual(overdue_threshold(ActivityFamily.SLEEP, None), 20)
        self.assertEqual(overdue_threshold(ActivityFamily.PUMPING, 80), 45)

    def test_threshold_description(self):
        text = overdue_threshold_description(ActivityFamily.FEEDING, 3)
        self.assertEqual(text, "Marked overdue after 15 minutes because newborns need frequent care")

    def test_quick_log_defaults(self):
        self.assertEqual(typical_feeding_duration(None), 20)
        self.assertEqual(typical_feeding_duration(20), 25)
        self.assertEqual(typical_feeding_amount_ml(1), 45)
        self.assertEqual(typical_feeding_amount_ml(None), 120)
        self.assertEqual(typical_sleep_duration(120), 75)


if __name__ == "__main__":
    unittest.main()
