"""
test_logbook_parser.py
======================

Rebuilding duty records from logbook sectors:
- Part A: sign-on / sign-off reconstruction
- Part B: grouping sectors into duties
- Part C: malformed rows

Run: python -m pytest tests/test_logbook_parser.py -v
"""

import pytest
from datetime import date, datetime, timedelta
import pytz

from frms_models.data_models import CrewComplement
from frms_core.parameters import get_fleet_configuration
from frms_core.aggregator import TimeWindowAggregator
from frms_parsers.logbook_parser import LogbookParser, LogbookSector, is_australian_airport


# ============================================================================
# HELPERS
# ============================================================================

UTC = pytz.utc
DAY = "16/06/2025"


def utc(day, hour, minute=0):
    return UTC.localize(datetime(2025, 6, day, hour, minute))


def sector(out_time, in_time, block=1.5, day=DAY, **kwargs):
    row = {
        "date": day,
        "flight_number": kwargs.pop("flight_number", "QF401"),
        "from_airport": kwargs.pop("from_airport", "SYD"),
        "to_airport": kwargs.pop("to_airport", "MEL"),
        "out_time": out_time,
        "in_time": in_time,
        "block_time_hours": block,
        "captain_name": "Smith",
        "fo_name": "Jones",
    }
    row.update(kwargs)
    return row


@pytest.fixture
def short_haul():
    return LogbookParser(get_fleet_configuration("A320/B737"))


@pytest.fixture
def long_haul():
    return LogbookParser(get_fleet_configuration("A380/A330/B787"))


# ============================================================================
# PART A: SIGN-ON / SIGN-OFF
# ============================================================================

class TestSectorDuty:
    """Sign-on 60 min before departure, sign-off after arrival per fleet."""

    def test_short_haul_margins(self, short_haul):
        records, _ = short_haul.group_into_duties([
            sector("01:05", "03:00", scheduled_departure="0100"),
        ])
        assert len(records) == 1
        assert records[0].sign_on_utc == utc(16, 0, 0), "Sign-on uses STD when logged"
        assert records[0].sign_off_utc == utc(16, 3, 15)

    def test_long_haul_sign_off_margin(self, long_haul):
        records, _ = long_haul.group_into_duties([sector("0100", "0300")])
        assert records[0].sign_on_utc == utc(16, 0, 0)
        assert records[0].sign_off_utc == utc(16, 3, 30)

    def test_arrival_after_midnight(self, short_haul):
        records, _ = short_haul.group_into_duties([sector("2200", "0130", block=3.5)])
        assert records[0].sign_off_utc == utc(17, 1, 45)
        assert records[0].duty_time_hours == pytest.approx(4.75)

    def test_domestic_positioning_first_of_day(self, short_haul):
        records, _ = short_haul.group_into_duties([
            sector("0100", "0230", block=0.0, is_positioning=True),
        ])
        assert records[0].sign_on_utc == utc(16, 0, 30)
        assert records[0].is_positioning
        assert records[0].is_deadheading

    def test_international_positioning_keeps_full_margin(self, short_haul):
        records, _ = short_haul.group_into_duties([
            sector("0100", "0400", block=0.0, is_positioning=True, to_airport="AKL"),
        ])
        assert records[0].sign_on_utc == utc(16, 0, 0)

    def test_scheduled_times_only(self, short_haul):
        records, _ = short_haul.group_into_duties([
            sector("", "", scheduled_departure="0200", scheduled_arrival="0330"),
        ])
        assert records[0].sign_on_utc == utc(16, 1, 0)
        assert records[0].sign_off_utc == utc(16, 3, 45)

    def test_simulator_without_times(self, short_haul):
        records, _ = short_haul.group_into_duties([
            sector("", "", block=0.0, sim_time_hours=4.0, flight_number="SIM"),
        ])
        assert records[0].is_simulator
        assert records[0].sign_on_utc == utc(16, 0, 0)
        assert records[0].duty_time_hours == pytest.approx(5.5)
        assert records[0].flight_time_hours == pytest.approx(4.0)

    def test_australian_airports(self):
        assert is_australian_airport("SYD")
        assert is_australian_airport("per")
        assert not is_australian_airport("AKL")
        assert not is_australian_airport("")


# ============================================================================
# PART B: GROUPING
# ============================================================================

class TestGrouping:
    """Sectors within 3 hours on the same local day form one duty."""

    def test_two_sectors_one_duty(self, short_haul):
        records, skipped = short_haul.group_into_duties([
            sector("0300", "0430", night_time_hours=0.5),
            sector("0000", "0130"),
        ])
        assert skipped == 0
        assert len(records) == 1
        duty = records[0]
        assert duty.sectors == 2
        assert duty.flight_time_hours == pytest.approx(3.0)
        assert duty.night_time_hours == pytest.approx(0.5)
        assert duty.sign_on_utc == utc(15, 23, 0)
        assert duty.sign_off_utc == utc(16, 4, 45)
        # 0900 Sydney on the 16th
        assert duty.date == date(2025, 6, 16)
        assert duty.fleet_id == "A320/B737"

    def test_short_turnaround_stays_one_duty(self, short_haul):
        records, _ = short_haul.group_into_duties([
            sector("0000", "0130"),
            sector("0215", "0345"),
        ])
        assert len(records) == 1, "A 45 minute turnaround is one duty"
        duty = records[0]
        assert duty.sectors == 2
        assert duty.sign_on_utc == utc(15, 23, 0)
        assert duty.sign_off_utc == utc(16, 4, 0)
        assert duty.duty_time_hours == pytest.approx(5.0)
        assert duty.flight_time_hours == pytest.approx(3.0)

        totals = TimeWindowAggregator(get_fleet_configuration("A320/B737")).aggregate(
            records, date(2025, 6, 16))
        assert totals.duty_time_7_days.hours == pytest.approx(5.0)

    def test_long_gap_splits_duties(self, short_haul):
        records, _ = short_haul.group_into_duties([
            sector("0000", "0130"),
            sector("0600", "0730"),
        ])
        assert len(records) == 2
        assert records[0].sign_on_utc < records[1].sign_on_utc

    def test_crew_complement_from_names(self, long_haul):
        records, _ = long_haul.group_into_duties([
            sector("0100", "1300", block=12.0, so1_name="Brown"),
        ])
        assert records[0].crew_complement == CrewComplement.THREE_PILOT

    def test_four_names_is_four_pilot(self):
        row = LogbookSector.model_validate(
            sector("0100", "1300", so1_name="Brown", so2_name="Green"))
        assert row.crew_count == 4
        assert row.crew_complement == CrewComplement.FOUR_PILOT

    def test_as_of_filters_unfinished_duties(self, short_haul):
        rows = [sector("0000", "0130"), sector("0500", "0630", day="17/06/2025")]
        records, _ = short_haul.group_into_duties(rows, as_of=utc(17, 3, 0))
        assert len(records) == 1
        assert records[0].date == date(2025, 6, 16)

    def test_naive_as_of_is_utc(self, short_haul):
        rows = [sector("0000", "0130")]
        records, _ = short_haul.group_into_duties(rows, as_of=datetime(2025, 6, 16, 1, 0))
        assert records == []


# ============================================================================
# PART C: MALFORMED ROWS
# ============================================================================

class TestMalformedRows:
    """Bad rows are skipped and counted, never raised."""

    def test_invalid_date_skipped_and_counted(self, short_haul):
        records, skipped = short_haul.group_into_duties([
            sector("0000", "0130"),
            sector("0300", "0430", day="2025-06-16"),
        ])
        assert len(records) == 1
        assert skipped == 1

    def test_validation_error_counted(self, short_haul):
        records, skipped = short_haul.group_into_duties([
            sector("0000", "0130"),
            sector("0300", "0430", block="abc"),
        ])
        assert len(records) == 1
        assert skipped == 1

    def test_unparseable_times_counted(self, short_haul):
        records, skipped = short_haul.group_into_duties([sector("25:00", "0130")])
        assert records == []
        assert skipped == 1

    def test_zero_time_sector_ignored_silently(self, short_haul):
        records, skipped = short_haul.group_into_duties([
            sector("0000", "0130", block=0.0),
        ])
        assert records == []
        assert skipped == 0

    def test_sector_models_accepted(self, short_haul):
        rows = [LogbookSector.model_validate(sector("0000", "0130"))]
        records, skipped = short_haul.group_into_duties(rows)
        assert len(records) == 1
        assert skipped == 0
