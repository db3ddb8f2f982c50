"""
test_disruption.py
==================

FD10.2.1 disruption rest: three clauses, the largest binds, plus the
timezone adjustment.

Run: python -m pytest tests/test_disruption.py -v
"""

import pytest

from frms_models.data_models import CrewComplement, DisruptionScenario
from frms_core.disruption import calculate_disruption_rest, timezone_adjustment
from frms_core.engine import FRMSEngine


def disruption(duty, crew=CrewComplement.TWO_PILOT, tz=0.0, next_over_16=False):
    return calculate_disruption_rest(DisruptionScenario(
        previous_duty_hours=duty, tz_difference_hours=tz,
        next_duty_over_16=next_over_16, crew_complement=crew,
    ))


class TestClauses:

    def test_two_pilot_proportional_clause(self):
        result = disruption(14.0)
        assert result.clause_i.value == 12.0
        assert result.clause_ii.value == pytest.approx(15.0)
        assert result.clause_iii.value is None
        assert result.selected_clause.clause == "(ii)"
        assert result.final_hours == pytest.approx(15.0)

    def test_two_pilot_short_duty(self):
        result = disruption(10.0)
        assert result.clause_i.value == 10.0
        assert result.clause_ii.display == "N/A"
        assert result.final_hours == 10.0

    def test_clause_iii_never_applies_to_two_pilots(self):
        result = disruption(14.0, next_over_16=True)
        assert result.clause_iii.value is None
        assert "Clause (iii) does not apply to two-pilot operations" in result.notes

    def test_four_pilot_long_duty(self):
        result = disruption(17.0, crew=CrewComplement.FOUR_PILOT)
        assert result.clause_i.value == 24.0
        assert result.clause_ii.value == pytest.approx(19.5)
        assert result.clause_iii.value is None
        assert result.selected_clause.clause == "(i)"
        assert result.final_hours == 24.0

    def test_tie_selects_first_clause(self):
        result = disruption(17.0, crew=CrewComplement.THREE_PILOT, next_over_16=True)
        assert result.clause_iii.value == 24.0
        assert result.clause_i.is_selected
        assert not result.clause_iii.is_selected
        assert sum(c.is_selected for c in result.clauses) == 1

    def test_selected_never_below_standard(self):
        for crew in CrewComplement:
            for duty in (0.0, 8.0, 11.5, 12.0, 13.0, 16.5, 20.0):
                result = disruption(duty, crew=crew)
                assert result.selected_hours >= result.clause_i.value


class TestTimezoneAdjustment:

    def test_adjustment_beyond_three_hours(self):
        assert timezone_adjustment(5.0) == 2.0
        assert timezone_adjustment(3.0) == 0.0

    def test_negative_difference_adds_nothing(self):
        assert timezone_adjustment(-5.0) == 0.0
        result = disruption(14.0, tz=-5.0)
        assert result.timezone_adjustment_hours == 0.0
        assert result.final_hours == pytest.approx(15.0)
        assert not result.notes

    def test_adjustment_added_to_final(self):
        result = disruption(14.0, tz=5.0)
        assert result.timezone_adjustment_hours == 2.0
        assert result.final_hours == pytest.approx(17.0)
        assert result.notes


class TestInvalidInput:

    def test_missing_or_negative_duty(self):
        assert disruption(None) is None
        assert disruption(-1.0) is None

    def test_engine_passthrough(self):
        engine = FRMSEngine("A380/A330/B787")
        result = engine.disruption_rest(DisruptionScenario(previous_duty_hours=13.0))
        assert result.final_hours == pytest.approx(13.5)
