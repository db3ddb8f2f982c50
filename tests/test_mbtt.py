"""
test_mbtt.py
============

Minimum base turnaround after long-haul trips.

Run: python -m pytest tests/test_mbtt.py -v
"""

import itertools

from frms_models.data_models import DaysAwayCategory, CreditedHoursCategory
from frms_core.mbtt import calculate_mbtt, calculate_mbtt_for_trip, OVER_18_HOURS_REASON
from frms_core.engine import FRMSEngine


DAYS = list(DaysAwayCategory)
HOURS = list(CreditedHoursCategory)


class TestMBTTCategories:
    """Picker categories mapped onto the FD9 scales."""

    def test_single_day_trip_is_hours(self):
        result = calculate_mbtt(DaysAwayCategory.ONE, CreditedHoursCategory.UP_TO_20)
        assert result.local_nights == 0
        assert result.rest_hours == 12.0
        assert result.description == "12 hours"

    def test_single_day_not_above_long_trip(self):
        short = calculate_mbtt(DaysAwayCategory.ONE, CreditedHoursCategory.UP_TO_20)
        long = calculate_mbtt(DaysAwayCategory.OVER_TWELVE, CreditedHoursCategory.UP_TO_20)
        assert short.rank <= long.rank

    def test_monotone_in_days_away(self):
        for hours in HOURS:
            ranks = [calculate_mbtt(days, hours).rank for days in DAYS]
            assert ranks == sorted(ranks), f"credited {hours.value}"

    def test_monotone_in_credited_hours(self):
        for days in DAYS:
            ranks = [calculate_mbtt(days, hours).rank for hours in HOURS]
            assert ranks == sorted(ranks), f"days away {days.value}"

    def test_over_18_adds_a_night(self):
        for days, hours in itertools.product(DAYS, HOURS):
            base = calculate_mbtt(days, hours)
            extended = calculate_mbtt(days, hours, had_duty_over_18_hours=True)
            assert extended.rank > base.rank
            assert extended.local_nights == base.local_nights + 1
            assert OVER_18_HOURS_REASON in extended.reason

    def test_single_day_with_long_duty(self):
        result = calculate_mbtt(DaysAwayCategory.ONE, CreditedHoursCategory.UP_TO_20,
                                had_duty_over_18_hours=True)
        assert result.description == "1 local night"
        assert result.rest_hours is None


class TestMBTTForTrip:
    """Continuous inputs from an actual trip."""

    def test_credited_hours_raise_the_requirement(self):
        result = calculate_mbtt_for_trip(7, 45.0)
        assert result.local_nights == 3
        assert result.description == "3 local nights"
        assert "Credited hours > 40 hrs" in result.reason

    def test_trip_length_dominates(self):
        result = calculate_mbtt_for_trip(13, 10.0)
        assert result.local_nights == 4
        assert result.reason == "Trip length > 12 days"

    def test_short_trip(self):
        assert calculate_mbtt_for_trip(0.5, 8.0).description == "12 hours"


class TestEngineMBTT:

    def test_short_haul_has_no_mbtt(self):
        engine = FRMSEngine("A320/B737")
        assert engine.mbtt(DaysAwayCategory.FIVE_TO_EIGHT, CreditedHoursCategory.OVER_20) is None

    def test_long_haul_mbtt(self):
        engine = FRMSEngine("A380/A330/B787")
        result = engine.mbtt(DaysAwayCategory.FIVE_TO_EIGHT, CreditedHoursCategory.OVER_20)
        assert result.local_nights == 2
