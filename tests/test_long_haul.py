"""
test_long_haul.py
=================

Long-haul (A380/A330/B787) next-duty limits:
- Part A: duty limit rows by complement, facility and sign-on window
- Part B: rest facility validation
- Part C: expected duty bands, restrictions and earliest sign-on

Run: python -m pytest tests/test_long_haul.py -v
"""

import pytest
from datetime import date, datetime, time, timedelta
import pytz

from frms_models.data_models import (
    DutyRecord, LongHaulParameters, CrewComplement, FRMSLimitType, RestFacilityClass,
    LongHaulSignOnWindow,
)
from frms_core.parameters import (
    InvalidRestFacilityError, valid_rest_facilities, validate_rest_facility,
)
from frms_core.fleet_tables import (
    LH_DEADHEAD_LIMITS, DEADHEAD_DUTY_BANDS, RELEVANT_SECTOR_MBTT_NOTE,
)
from frms_core.long_haul import long_haul_duty_rows, base_duty_row
from frms_core.engine import FRMSEngine


# ============================================================================
# HELPERS
# ============================================================================

UTC = pytz.utc
HOME_TZ = 'Australia/Sydney'
SYD = pytz.timezone(HOME_TZ)
DAY = date(2025, 6, 16)


def local(day, hour, minute=0):
    return SYD.localize(datetime.combine(day, time(hour, minute))).astimezone(UTC)


def make_record(day, sign_on_hour=8, duty_hours=14.0, flight_hours=12.0,
                crew=CrewComplement.THREE_PILOT):
    sign_on = local(day, sign_on_hour)
    return DutyRecord.from_times(
        sign_on, sign_on + timedelta(hours=duty_hours), HOME_TZ,
        sectors=1, flight_time_hours=flight_hours,
        fleet_id="A380/A330/B787", crew_complement=crew,
    )


def lh_params(crew, limit_type, facility=RestFacilityClass.NONE, **kwargs):
    return LongHaulParameters(crew_complement=crew, limit_type=limit_type,
                              rest_facility=facility, **kwargs)


@pytest.fixture
def engine():
    return FRMSEngine("A380/A330/B787")


# ============================================================================
# PART A: DUTY LIMIT ROWS
# ============================================================================

class TestDutyRows:
    """Rows filtered to the current selections."""

    def test_four_pilot_two_class_1_includes_extended_row(self):
        rows = long_haul_duty_rows(CrewComplement.FOUR_PILOT, FRMSLimitType.OPERATIONAL,
                                   RestFacilityClass.TWO_CLASS_1)
        assert len(rows) == 2
        assert rows[0].max_duty_hours == 20.0
        assert rows[1].max_duty_hours == 21.0
        assert "FD3.4" in rows[1].label

    def test_other_four_pilot_facilities_single_row(self):
        rows = long_haul_duty_rows(CrewComplement.FOUR_PILOT, FRMSLimitType.OPERATIONAL,
                                   RestFacilityClass.TWO_CLASS_2)
        assert len(rows) == 1
        assert rows[0].max_duty_hours == 16.0

    def test_two_pilot_planning_window_filter(self):
        rows = long_haul_duty_rows(CrewComplement.TWO_PILOT, FRMSLimitType.PLANNING,
                                   sign_on_window=LongHaulSignOnWindow.W0800_1359)
        assert len(rows) == 2, "The 0800-1359 window has a standard and a day-pattern row"
        assert sorted(r.max_duty_hours for r in rows) == [11.0, 12.0]

        rows = long_haul_duty_rows(CrewComplement.TWO_PILOT, FRMSLimitType.PLANNING,
                                   sign_on_window=LongHaulSignOnWindow.W1600_0459)
        assert len(rows) == 1
        assert rows[0].max_duty_hours == 10.0

    def test_two_pilot_planning_without_window_lists_all(self):
        rows = long_haul_duty_rows(CrewComplement.TWO_PILOT, FRMSLimitType.PLANNING)
        assert len(rows) == 5

    def test_limit_type_changes_values(self):
        planning = long_haul_duty_rows(CrewComplement.THREE_PILOT, FRMSLimitType.PLANNING,
                                       RestFacilityClass.CLASS_1)
        operational = long_haul_duty_rows(CrewComplement.THREE_PILOT, FRMSLimitType.OPERATIONAL,
                                          RestFacilityClass.CLASS_1)
        assert planning[0].max_duty_hours == 14.0
        assert operational[0].max_duty_hours == 18.0

    def test_note_replaces_flight_time(self):
        row = long_haul_duty_rows(CrewComplement.THREE_PILOT, FRMSLimitType.OPERATIONAL,
                                  RestFacilityClass.CLASS_2)[0]
        assert row.flight_time_display == row.flight_time_note
        assert "14 hrs total on flight deck" in row.flight_time_display

        row = long_haul_duty_rows(CrewComplement.TWO_PILOT, FRMSLimitType.PLANNING,
                                  sign_on_window=LongHaulSignOnWindow.W0500_0759)[0]
        assert row.flight_time_display == "8.0 hrs"

    def test_base_duty_row_discretion(self):
        row = base_duty_row(CrewComplement.TWO_PILOT, RestFacilityClass.NONE)
        assert row.max_duty_hours == 11.0
        assert row.max_duty_discretion_hours == 12.0


# ============================================================================
# PART B: REST FACILITIES
# ============================================================================

class TestRestFacilities:
    """Selectable facilities depend on crew complement and limit type."""

    def test_passenger_seat_only_four_pilot_operational(self):
        seat = RestFacilityClass.SEAT_IN_PASSENGER_COMPARTMENT
        for crew in CrewComplement:
            for limit_type in FRMSLimitType:
                allowed = seat in valid_rest_facilities(crew, limit_type)
                expected = (crew == CrewComplement.FOUR_PILOT
                            and limit_type == FRMSLimitType.OPERATIONAL)
                assert allowed == expected, f"{crew.value}/{limit_type.value}"

    def test_two_pilot_has_no_facility(self):
        assert valid_rest_facilities(CrewComplement.TWO_PILOT, FRMSLimitType.PLANNING) == \
            (RestFacilityClass.NONE,)

    def test_invalid_facility_raises(self, engine):
        with pytest.raises(InvalidRestFacilityError):
            validate_rest_facility(CrewComplement.THREE_PILOT, FRMSLimitType.PLANNING,
                                   RestFacilityClass.TWO_CLASS_1)
        with pytest.raises(InvalidRestFacilityError):
            engine.next_duty_long_haul(
                [], local(DAY, 8),
                lh_params(CrewComplement.FOUR_PILOT, FRMSLimitType.PLANNING,
                          RestFacilityClass.SEAT_IN_PASSENGER_COMPARTMENT))

    def test_invalid_facility_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_rest_facility(CrewComplement.TWO_PILOT, FRMSLimitType.OPERATIONAL,
                                   RestFacilityClass.CLASS_1)


# ============================================================================
# PART C: NEXT DUTY
# ============================================================================

class TestLongHaulNextDuty:
    """Full next-duty picture through the engine."""

    def test_four_pilot_operational(self, engine):
        limits = engine.next_duty_long_haul(
            [], local(DAY, 8),
            lh_params(CrewComplement.FOUR_PILOT, FRMSLimitType.OPERATIONAL,
                      RestFacilityClass.TWO_CLASS_1, expected_duty_band="> 18"))
        assert len(limits.rows) == 2
        assert [b.label for b in limits.expected_duty_bands] == ["≤ 16", "> 16 ≤ 18", "> 18"]
        assert limits.selected_duty_band.label == "> 18"
        assert limits.rest_requirements.pre_duty[0].rest_hours == 22.0
        assert limits.rest_requirements.post_duty[0].rest_hours == 27.0
        assert limits.valid_rest_facilities[0] == RestFacilityClass.SEAT_IN_PASSENGER_COMPARTMENT

    def test_relevant_sector_information(self, engine):
        limits = engine.next_duty_long_haul(
            [], local(DAY, 8),
            lh_params(CrewComplement.FOUR_PILOT, FRMSLimitType.OPERATIONAL,
                      RestFacilityClass.TWO_CLASS_1))
        assert "SYD-DFW" in limits.relevant_sectors
        assert [r.rest_hours for r in limits.relevant_sector_inbound_rest] == [36.0, 22.0]
        assert RELEVANT_SECTOR_MBTT_NOTE in limits.restrictions

        limits = engine.next_duty_long_haul(
            [], local(DAY, 8),
            lh_params(CrewComplement.THREE_PILOT, FRMSLimitType.OPERATIONAL, RestFacilityClass.CLASS_1))
        assert limits.relevant_sectors == ()

    def test_default_band_is_first(self, engine):
        limits = engine.next_duty_long_haul(
            [], local(DAY, 8),
            lh_params(CrewComplement.THREE_PILOT, FRMSLimitType.PLANNING, RestFacilityClass.CLASS_2))
        assert limits.selected_duty_band.label == "≤ 12"

    def test_deadheading_uses_separate_tables(self, engine):
        limits = engine.next_duty_long_haul(
            [], local(DAY, 8),
            lh_params(CrewComplement.TWO_PILOT, FRMSLimitType.PLANNING, deadheading=True))
        assert limits.rows == LH_DEADHEAD_LIMITS
        assert limits.expected_duty_bands == DEADHEAD_DUTY_BANDS
        assert limits.rest_requirements.deadheading
        assert limits.rest_requirements.post_duty[0].rest_hours == 11.0

    def test_earliest_sign_on_after_augmented_duty(self, engine):
        previous = make_record(DAY, sign_on_hour=6, duty_hours=17.0, crew=CrewComplement.FOUR_PILOT)
        limits = engine.next_duty_long_haul(
            [previous], local(DAY + timedelta(days=1), 8),
            lh_params(CrewComplement.FOUR_PILOT, FRMSLimitType.OPERATIONAL,
                      RestFacilityClass.TWO_CLASS_2))
        assert limits.minimum_rest_hours == 24.0
        assert limits.earliest_sign_on == previous.sign_off_utc + timedelta(hours=24)
        assert "Previous duty exceeded 12 hours" in limits.restrictions

    def test_seven_day_flight_restriction(self, engine):
        records = [make_record(DAY - timedelta(days=d), duty_hours=10.0, flight_hours=9.0)
                   for d in (1, 3, 5)]
        limits = engine.next_duty_long_haul(
            records, local(DAY, 20),
            lh_params(CrewComplement.THREE_PILOT, FRMSLimitType.PLANNING, RestFacilityClass.CLASS_1))
        assert "Limited by 7-day flight time limit" in limits.restrictions

    def test_back_of_clock_restriction_string(self, engine):
        previous = make_record(DAY, sign_on_hour=22, duty_hours=8.0, crew=CrewComplement.TWO_PILOT)
        limits = engine.next_duty_long_haul(
            [previous], local(DAY + timedelta(days=1), 12),
            lh_params(CrewComplement.TWO_PILOT, FRMSLimitType.OPERATIONAL))
        assert ("Back-of-clock operation: next duty in Australia limited to after 1000LT"
                in limits.restrictions)

    def test_maximum_next_duty_long_haul(self, engine):
        result = engine.maximum_next_duty(
            [], local(DAY, 8), FRMSLimitType.OPERATIONAL,
            CrewComplement.THREE_PILOT, RestFacilityClass.CLASS_1)
        assert result.max_duty_hours == 18.0
        assert result.max_flight_hours == 14.0
        assert result.max_sectors == 2
        assert len(result.sign_on_limits) == 1

    def test_maximum_next_duty_two_pilot_uses_discretion(self, engine):
        operational = engine.maximum_next_duty([], local(DAY, 8), FRMSLimitType.OPERATIONAL)
        planning = engine.maximum_next_duty([], local(DAY, 8), FRMSLimitType.PLANNING)
        assert operational.max_duty_hours == 12.0
        assert planning.max_duty_hours == 11.0
        assert operational.max_sectors == 4
