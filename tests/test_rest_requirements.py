"""
test_rest_requirements.py
=========================

Pre/post-duty rest tables and the two-pilot extension formula.

Run: python -m pytest tests/test_rest_requirements.py -v
"""

import itertools

import pytest

from frms_models.data_models import (
    CrewComplement, FRMSLimitType, RestScenario, DutyHoursBand,
)
from frms_core.bands import BandTable, find_band
from frms_core.fleet_tables import EXPECTED_DUTY_BANDS, OPERATING_REST_TABLES
from frms_core.rest_requirements import (
    RestRequirementCalculator, expected_duty_bands, select_duty_band,
    two_pilot_extension_rest_hours, long_haul_minimum_rest,
)


def scenario(crew, limit_type, label, deadheading=False, duty_hours=None):
    band = select_duty_band(expected_duty_bands(crew, limit_type, deadheading), label)
    return RestScenario(crew_complement=crew, limit_type=limit_type, duty_band=band,
                        deadheading=deadheading, duty_hours=duty_hours)


class TestExtensionFormula:
    """rest = 10 + ceil(excess minutes / 15) for two-pilot operational duty over 11 hrs."""

    def test_eleven_forty(self):
        assert two_pilot_extension_rest_hours(11 + 40 / 60) == 13.0

    def test_eleven_exactly(self):
        assert two_pilot_extension_rest_hours(11.0) == 10.0

    def test_partial_increment_rounds_up(self):
        assert two_pilot_extension_rest_hours(11 + 1 / 60) == 11.0
        assert two_pilot_extension_rest_hours(11.25) == 11.0
        assert two_pilot_extension_rest_hours(11 + 16 / 60) == 12.0
        assert two_pilot_extension_rest_hours(12.0) == 14.0

    def test_formula_row_resolved_with_duty_hours(self):
        calc = RestRequirementCalculator()
        result = calc.calculate(scenario(CrewComplement.TWO_PILOT, FRMSLimitType.OPERATIONAL,
                                         "> 11 ≤ 12", duty_hours=11 + 40 / 60))
        assert result.post_duty[0].rest_hours == 13.0
        assert result.post_duty[0].formula is not None

    def test_formula_row_without_duty_hours(self):
        calc = RestRequirementCalculator()
        result = calc.calculate(scenario(CrewComplement.TWO_PILOT, FRMSLimitType.OPERATIONAL,
                                         "> 11 ≤ 12"))
        row = result.post_duty[0]
        assert row.rest_hours is None
        assert row.rest_display == row.formula

    def test_minimum_rest_uses_formula(self):
        assert long_haul_minimum_rest(11 + 40 / 60, CrewComplement.TWO_PILOT,
                                      FRMSLimitType.OPERATIONAL) == 13.0
        assert long_haul_minimum_rest(10.0, CrewComplement.TWO_PILOT,
                                      FRMSLimitType.OPERATIONAL) == 10.0
        assert long_haul_minimum_rest(13.0, CrewComplement.TWO_PILOT,
                                      FRMSLimitType.OPERATIONAL) == 24.0


class TestRestTables:
    """Band lookup for each complement and limit type."""

    def setup_method(self):
        self.calc = RestRequirementCalculator()

    def test_two_pilot_operational_pre_duty(self):
        result = self.calc.calculate(scenario(CrewComplement.TWO_PILOT, FRMSLimitType.OPERATIONAL, "≤ 11"))
        assert [r.rest_hours for r in result.pre_duty] == [10.0, None]
        assert result.pre_duty[-1].band_label == "Within a 7 day period"

    def test_three_pilot_planning_post_duty(self):
        result = self.calc.calculate(scenario(CrewComplement.THREE_PILOT, FRMSLimitType.PLANNING, "> 12"))
        assert [r.rest_hours for r in result.post_duty] == [22.0, 32.0]
        assert result.post_duty[0].condition == "acclimated crew"

    def test_four_pilot_planning_bands(self):
        hours = {}
        for label in ("≤ 12", "> 12 ≤ 14", "> 14 ≤ 16", "> 16"):
            result = self.calc.calculate(scenario(CrewComplement.FOUR_PILOT, FRMSLimitType.PLANNING, label))
            hours[label] = [r.rest_hours for r in result.post_duty]
        assert hours["≤ 12"] == [12.0, 18.0]
        assert hours["> 12 ≤ 14"] == [22.0, 32.0]
        assert hours["> 16"] == [22.0, 32.0, 48.0]

    def test_deadheading_table(self):
        result = self.calc.calculate(scenario(CrewComplement.THREE_PILOT, FRMSLimitType.OPERATIONAL,
                                              "> 12", deadheading=True))
        assert result.deadheading
        assert [r.rest_hours for r in result.pre_duty] == [12.0, 18.0]
        assert [r.rest_hours for r in result.post_duty] == [18.0]

    def test_unknown_band_label_falls_back(self):
        bands = expected_duty_bands(CrewComplement.THREE_PILOT, FRMSLimitType.OPERATIONAL)
        assert select_duty_band(bands, "no such band") == bands[0]

    def test_band_from_duty_hours(self):
        bands = expected_duty_bands(CrewComplement.FOUR_PILOT, FRMSLimitType.OPERATIONAL)
        assert select_duty_band(bands, duty_hours=17.0).label == "> 16 ≤ 18"

    def test_every_band_has_rows(self):
        calc = RestRequirementCalculator()
        for crew, limit_type in itertools.product(CrewComplement, FRMSLimitType):
            for band in expected_duty_bands(crew, limit_type):
                result = calc.calculate(RestScenario(crew, limit_type, band))
                assert result.pre_duty, f"{crew.value}/{limit_type.value} {band.label} pre"
                assert result.post_duty, f"{crew.value}/{limit_type.value} {band.label} post"


class TestBands:
    """Band tables are ordered, contiguous and non-overlapping."""

    def test_overlapping_bands_rejected(self):
        with pytest.raises(ValueError):
            BandTable([
                (DutyHoursBand("≤ 12", upper=12.0), 1),
                (DutyHoursBand("> 11", lower=11.0), 2),
            ])

    def test_unbounded_band_must_be_last(self):
        with pytest.raises(ValueError):
            BandTable([
                (DutyHoursBand("> 12", lower=12.0), 1),
                (DutyHoursBand("≤ 12", upper=12.0), 2),
            ])

    def test_band_boundaries(self):
        bands = EXPECTED_DUTY_BANDS[(CrewComplement.TWO_PILOT, FRMSLimitType.OPERATIONAL)]
        assert find_band(bands, 11.0).label == "≤ 11"
        assert find_band(bands, 11.01).label == "> 11 ≤ 12"
        assert find_band(bands, 12.0).label == "> 11 ≤ 12"
        assert find_band(bands, 12.01).label == "> 12"

    def test_post_tables_cover_all_durations(self):
        for (crew, limit_type), (_, post) in OPERATING_REST_TABLES.items():
            for hours in (0.5, 8.0, 11.0, 12.0, 14.0, 16.0, 18.0, 22.0):
                assert post.bands.lookup(hours) is not None, f"{crew.value}/{limit_type.value} {hours}"
