"""Tests for reminder trigger time calculation."""

from datetime import date, datetime

from freezegun import freeze_time

from domains.reminders.trigger import compute_trigger


class TestComputeTrigger:
    """Trigger = due date minus lead days, at 09:00 local."""

    @freeze_time("2025-03-01 12:00:00")
    def test_rent_scenario(self):
        """Rent due 10 March, 2 days lead, added 1 March fires 8 March 09:00."""
        assert compute_trigger(datetime(2025, 3, 10), 2) == datetime(2025, 3, 8, 9, 0)

    @freeze_time("2025-03-09 08:00:00")
    def test_trigger_already_passed(self):
        """Same entry added on 9 March has no valid trigger."""
        assert compute_trigger(datetime(2025, 3, 10), 2) is None

    def test_time_of_day_pinned(self):
        """Due time of day is discarded in favour of 09:00."""
        now = datetime(2025, 1, 1)
        trigger = compute_trigger(datetime(2025, 2, 15, 23, 45, 30, 123), 3, now=now)
        assert trigger == datetime(2025, 2, 12, 9, 0, 0, 0)

    def test_zero_lead_days(self):
        now = datetime(2025, 3, 10, 8, 59)
        assert compute_trigger(datetime(2025, 3, 10, 18, 0), 0, now=now) == datetime(2025, 3, 10, 9, 0)

    def test_trigger_equal_to_now_is_rejected(self):
        now = datetime(2025, 3, 8, 9, 0)
        assert compute_trigger(datetime(2025, 3, 10), 2, now=now) is None

    def test_one_second_before_trigger(self):
        now = datetime(2025, 3, 8, 8, 59, 59)
        assert compute_trigger(datetime(2025, 3, 10), 2, now=now) == datetime(2025, 3, 8, 9, 0)

    def test_default_lead_time(self):
        now = datetime(2025, 3, 1)
        assert compute_trigger(datetime(2025, 3, 10), None, now=now) == datetime(2025, 3, 9, 9, 0)
        assert compute_trigger(datetime(2025, 3, 10), now=now) == datetime(2025, 3, 9, 9, 0)

    def test_crosses_month_and_leap_day(self):
        now = datetime(2024, 1, 1)
        assert compute_trigger(datetime(2024, 3, 1), 1, now=now) == datetime(2024, 2, 29, 9, 0)

    def test_accepts_iso_string_and_date(self):
        now = datetime(2025, 3, 1)
        assert compute_trigger("2025-03-10", 2, now=now) == datetime(2025, 3, 8, 9, 0)
        assert compute_trigger(date(2025, 3, 10), 2, now=now) == datetime(2025, 3, 8, 9, 0)

    def test_negative_lead_clamped_to_zero(self):
        now = datetime(2025, 3, 1)
        assert compute_trigger(datetime(2025, 3, 10), -4, now=now) == datetime(2025, 3, 10, 9, 0)

    def test_unreadable_date_has_no_trigger(self):
        assert compute_trigger("not a date", 1, now=datetime(2025, 3, 1)) is None
        assert compute_trigger(None, 1, now=datetime(2025, 3, 1)) is None

    def test_lead_time_before_year_one_has_no_trigger(self):
        now = datetime(2025, 3, 1)
        assert compute_trigger(datetime(2025, 3, 10), 800000, now=now) is None
        assert compute_trigger(datetime(2025, 3, 10), 10**12, now=now) is None
        assert compute_trigger(datetime(2025, 3, 10), float("inf"), now=now) is None
