"""
Disruption Rest Calculator
==========================

Minimum rest after a disrupted long-haul duty. Three independent clauses
are evaluated and the largest one binds:

    (i)   standard:      2P 12 hrs if duty > 11 else 10 hrs
                         3P/4P 24 hrs if duty > 16 else 12 hrs
    (ii)  proportional:  12 + 1.5 × (duty − 12), only when duty > 12
    (iii) next duty:     24 hrs when the next duty may exceed 16 hrs
                         (augmented crews only)

    final = max(i, ii, iii) + max(0, timezone difference − 3)

References: FD10.2.1
"""

from typing import Optional
import logging

from frms_models.data_models import (
    CrewComplement, ClauseValue, DisruptionRestResult, DisruptionScenario,
)

logger = logging.getLogger(__name__)

TIMEZONE_ALLOWANCE_HOURS = 3.0


def standard_rest(previous_duty_hours: float, crew_complement: CrewComplement) -> float:
    """Clause (i)"""
    if crew_complement == CrewComplement.TWO_PILOT:
        return 12.0 if previous_duty_hours > 11 else 10.0
    return 24.0 if previous_duty_hours > 16 else 12.0


def proportional_rest(previous_duty_hours: float) -> Optional[float]:
    """Clause (ii); None below 12 hours of duty"""
    if previous_duty_hours <= 12:
        return None
    return 12.0 + 1.5 * (previous_duty_hours - 12.0)


def next_duty_rest(next_duty_over_16: bool, crew_complement: CrewComplement) -> Optional[float]:
    """Clause (iii); never applies to a two-pilot crew"""
    if not next_duty_over_16 or not crew_complement.is_augmented:
        return None
    return 24.0


def timezone_adjustment(tz_difference_hours: float) -> float:
    """One hour for each hour of timezone difference beyond 3"""
    return max(0.0, tz_difference_hours - TIMEZONE_ALLOWANCE_HOURS)


def calculate_disruption_rest(scenario: DisruptionScenario) -> Optional[DisruptionRestResult]:
    """
    Evaluate all three clauses for a disruption scenario.

    Returns None when the previous duty length is missing or negative.
    """
    duty = scenario.previous_duty_hours
    if duty is None or duty < 0:
        logger.warning(f"Disruption rest needs a non-negative previous duty, got {duty!r}")
        return None

    complement = scenario.crew_complement
    values = [
        standard_rest(duty, complement),
        proportional_rest(duty),
        next_duty_rest(scenario.next_duty_over_16, complement),
    ]
    selected = max(v for v in values if v is not None)
    selected_index = next(i for i, v in enumerate(values) if v == selected)

    if complement == CrewComplement.TWO_PILOT:
        clause_i_text = "2 pilots: 12 hrs if duty > 11 hrs, otherwise 10 hrs"
    else:
        clause_i_text = "3/4 pilots: 24 hrs if duty > 16 hrs, otherwise 12 hrs"
    descriptions = [
        clause_i_text,
        "12 hrs + 1.5 × duty in excess of 12 hrs",
        "24 hrs if next duty may exceed 16 hrs (augmented crew)",
    ]
    clauses = [
        ClauseValue(clause=name, description=text, value=value, is_selected=(i == selected_index))
        for i, (name, text, value) in enumerate(zip(("(i)", "(ii)", "(iii)"), descriptions, values))
    ]

    adjustment = timezone_adjustment(scenario.tz_difference_hours)
    notes = []
    if adjustment > 0:
        notes.append(
            f"+{adjustment:.1f} hrs for {scenario.tz_difference_hours:.1f} hrs timezone difference"
        )
    if complement == CrewComplement.TWO_PILOT and scenario.next_duty_over_16:
        notes.append("Clause (iii) does not apply to two-pilot operations")

    result = DisruptionRestResult(
        clause_i=clauses[0],
        clause_ii=clauses[1],
        clause_iii=clauses[2],
        selected_hours=selected,
        timezone_adjustment_hours=adjustment,
        final_hours=selected + adjustment,
        notes=tuple(notes),
    )
    logger.debug(
        f"Disruption rest after {duty:.1f}h ({complement.value}): clause "
        f"{result.selected_clause.clause} {selected:.1f}h, final {result.final_hours:.1f}h"
    )
    return result
