"""
Rest Requirement Calculator
===========================

Minimum pre-duty and post-duty rest for a crew complement, limit type and
expected duty-hour band, from the operating or deadheading rest tables.

Two-pilot operational duty of more than 11 and up to 12 hours is the one
place a formula replaces the table:

    rest = 10 + ceil(excess_minutes / 15)

References: FD3.1 (planning), FD10.1 (operational), FD18.1 / FD28.1 (short-haul)
"""

from typing import Optional, Tuple
import logging
import math

from frms_models.data_models import (
    CrewComplement, FRMSLimitType, DutyHoursBand, DutyRecord, RestScenario,
    RestRequirementRow, RestRequirements, RestCalculationBreakdown,
)
from frms_core.bands import find_band
from frms_core.fleet_tables import (
    OPERATING_REST_TABLES, DEADHEAD_REST_TABLES, EXPECTED_DUTY_BANDS,
    DEADHEAD_DUTY_BANDS, TWO_PILOT_EXTENSION_BAND,
    RELEVANT_SECTOR_POST_DUTY_REST_HOURS, RestTable, SH_MIN_REST_HOURS,
    SH_REDUCED_REST_CONDITIONS, SH_AUGMENTED_LONG_DUTY_REST_HOURS,
)
from frms_core.parameters import FleetConfiguration

logger = logging.getLogger(__name__)


# ============================================================================
# BANDS & FORMULA
# ============================================================================

def expected_duty_bands(crew_complement: CrewComplement, limit_type: FRMSLimitType,
                        deadheading: bool = False) -> Tuple[DutyHoursBand, ...]:
    """Ordered duty-hour bands offered for the rest lookup"""
    if deadheading:
        return DEADHEAD_DUTY_BANDS
    return EXPECTED_DUTY_BANDS[(crew_complement, limit_type)]


def select_duty_band(bands: Tuple[DutyHoursBand, ...], label: Optional[str] = None,
                     duty_hours: Optional[float] = None) -> DutyHoursBand:
    """Band by label, else the band containing duty_hours, else the first band"""
    if label is not None:
        for band in bands:
            if band.label == label:
                return band
        logger.warning(f"Unknown duty band '{label}', using '{bands[0].label}'")
    if duty_hours is not None:
        band = find_band(bands, duty_hours)
        if band is not None:
            return band
    return bands[0]


def two_pilot_extension_rest_hours(duty_hours: float) -> float:
    """
    Post-duty rest after two-pilot operational duty beyond 11 hours:
    10 hours plus 1 hour for each 15 minutes or part thereof over 11 hours.
    """
    # Rounded so 11h40m entered as 11.6667 is 40 minutes, not 40.00002
    excess_minutes = max(0.0, round((duty_hours - 11.0) * 60.0, 6))
    return 10.0 + math.ceil(excess_minutes / 15.0)


# ============================================================================
# TABLE LOOKUP
# ============================================================================

def _rows_for(table: RestTable, band: DutyHoursBand) -> Tuple[RestRequirementRow, ...]:
    rows = table.bands.lookup(band.representative_hours) or ()
    return tuple(rows) + table.general_rows


class RestRequirementCalculator:
    """Pure lookup of pre/post-duty rest rows"""

    def tables_for(self, crew_complement: CrewComplement, limit_type: FRMSLimitType,
                   deadheading: bool) -> Tuple[RestTable, RestTable]:
        if deadheading:
            return DEADHEAD_REST_TABLES
        return OPERATING_REST_TABLES[(crew_complement, limit_type)]

    def calculate(self, scenario: RestScenario) -> RestRequirements:
        pre_table, post_table = self.tables_for(
            scenario.crew_complement, scenario.limit_type, scenario.deadheading
        )
        pre_rows = _rows_for(pre_table, scenario.duty_band)
        post_rows = tuple(
            self._apply_formula(row, scenario) for row in _rows_for(post_table, scenario.duty_band)
        )
        return RestRequirements(
            pre_duty=pre_rows,
            post_duty=post_rows,
            duty_band=scenario.duty_band,
            deadheading=scenario.deadheading,
        )

    @staticmethod
    def _apply_formula(row: RestRequirementRow, scenario: RestScenario) -> RestRequirementRow:
        """Resolve the extension formula when the actual duty length is known"""
        if row.formula is None or scenario.duty_hours is None:
            return row
        if not TWO_PILOT_EXTENSION_BAND.contains(scenario.duty_hours):
            return row
        return RestRequirementRow(
            band_label=row.band_label,
            rest_hours=two_pilot_extension_rest_hours(scenario.duty_hours),
            condition=row.condition,
            formula=row.formula,
        )


# ============================================================================
# MINIMUM REST AFTER A DUTY
# ============================================================================

def short_haul_rest_breakdown(duty_hours: float, limit_type: FRMSLimitType,
                              augmented: bool = False) -> RestCalculationBreakdown:
    """FD18.1 / FD28.1: MAX(duty, 10) up to 12 hrs, then 12 + 1.5 × excess"""
    if duty_hours <= 12.0:
        base = max(duty_hours, SH_MIN_REST_HOURS)
        formula = f"MAX({duty_hours:.1f}, {SH_MIN_REST_HOURS:.1f}) hours"
        additional = 0.0
        total = base
    else:
        excess = duty_hours - 12.0
        base = 12.0
        additional = 1.5 * excess
        total = base + additional
        formula = f"12 + (1.5 × {excess:.1f}) = {total:.1f} hours"

    if augmented and duty_hours > 16.0 and total < SH_AUGMENTED_LONG_DUTY_REST_HOURS:
        total = SH_AUGMENTED_LONG_DUTY_REST_HOURS
        formula = f"{formula}; {SH_AUGMENTED_LONG_DUTY_REST_HOURS:.0f} hours after augmented duty > 16 hours"

    reduced = limit_type == FRMSLimitType.OPERATIONAL and duty_hours <= 10.0
    return RestCalculationBreakdown(
        previous_duty_hours=duty_hours,
        is_over_12_hours=duty_hours > 12.0,
        base_rest_hours=base,
        formula=formula,
        additional_rest_hours=additional,
        total_rest_hours=total,
        reduced_rest_available=reduced,
        reduced_rest_conditions=SH_REDUCED_REST_CONDITIONS if reduced else None,
    )


def long_haul_minimum_rest(duty_hours: float, crew_complement: CrewComplement,
                           limit_type: FRMSLimitType) -> float:
    """
    Least post-duty rest the tables allow after a long-haul duty.
    Conditional rows count; the caller shows the conditions alongside.
    """
    if (crew_complement == CrewComplement.TWO_PILOT
            and limit_type == FRMSLimitType.OPERATIONAL
            and TWO_PILOT_EXTENSION_BAND.contains(duty_hours)):
        return two_pilot_extension_rest_hours(duty_hours)

    if crew_complement.is_augmented and duty_hours > 18.0:
        return RELEVANT_SECTOR_POST_DUTY_REST_HOURS

    _, post_table = OPERATING_REST_TABLES[(crew_complement, limit_type)]
    rows = post_table.bands.lookup(duty_hours) or ()
    hours = [row.rest_hours for row in rows if row.rest_hours is not None]
    if not hours:
        logger.warning(
            f"No post-duty rest row for {crew_complement.value} {limit_type.value} "
            f"after {duty_hours:.1f}h, using 12h"
        )
        return 12.0
    return min(hours)


def minimum_rest_after_duty(record: DutyRecord, fleet: FleetConfiguration,
                            limit_type: FRMSLimitType) -> float:
    """Minimum rest owed after `record` under the fleet's rules"""
    if fleet.is_long_haul:
        return long_haul_minimum_rest(record.duty_time_hours, record.crew_complement, limit_type)
    return short_haul_rest_breakdown(
        record.duty_time_hours, limit_type, record.crew_complement.is_augmented
    ).total_rest_hours
