"""
Long-Haul Next Duty Limits (A380/A330/B787)
===========================================

Table view of long-haul duty limits for the selected crew complement,
limit type and rest facility, plus the expected-duty band feeding the rest
requirement lookup.

References: FD3.1 (planning), FD3.4 (relevant sectors), FD10.1 (operational)
"""

from datetime import datetime
from typing import List, Optional, Tuple
import logging

from frms_models.data_models import (
    DutyRecord, CumulativeTotals, LongHaulParameters, LongHaulNextDutyLimits,
    SignOnTimeRange, CrewComplement, FRMSLimitType, RestFacilityClass, RestScenario,
    DutyHoursBand,
)
from frms_core.parameters import (
    FleetConfiguration, ComplianceThresholds, valid_rest_facilities, validate_rest_facility,
)
from frms_core.fleet_tables import (
    LH_DUTY_LIMITS, LH_EXTENDED_DUTY_ROWS, LH_DEADHEAD_LIMITS, RELEVANT_SECTORS,
    RELEVANT_SECTOR_INBOUND_ROWS, RELEVANT_SECTOR_MBTT_NOTE,
)
from frms_core.compliance import FRMSComplianceValidator
from frms_core.rest_requirements import (
    RestRequirementCalculator, expected_duty_bands, select_duty_band,
)
from frms_core.restrictions import (
    earliest_sign_on_after, is_back_of_clock, LONG_HAUL_BACK_OF_CLOCK_RESTRICTION,
)

logger = logging.getLogger(__name__)


def long_haul_duty_rows(crew_complement: CrewComplement, limit_type: FRMSLimitType,
                        rest_facility: RestFacilityClass = RestFacilityClass.NONE,
                        sign_on_window=None) -> Tuple[SignOnTimeRange, ...]:
    """
    Rows of the duty limit table that apply to the selections.

    Two-pilot rows are filtered by sign-on window (planning only); augmented
    rows by rest facility, with four-pilot two-class-1 also getting the FD3.4
    extended duty row.
    """
    table = LH_DUTY_LIMITS[limit_type][crew_complement]

    if crew_complement == CrewComplement.TWO_PILOT:
        if limit_type == FRMSLimitType.PLANNING and sign_on_window is not None:
            return tuple(row for row in table if row.sign_on_window == sign_on_window)
        return table

    rows = [row for row in table if row.rest_facility == rest_facility]
    if (crew_complement == CrewComplement.FOUR_PILOT
            and rest_facility == RestFacilityClass.TWO_CLASS_1):
        rows.extend(LH_EXTENDED_DUTY_ROWS[limit_type])
    return tuple(rows)


def base_duty_row(crew_complement: CrewComplement,
                  rest_facility: RestFacilityClass) -> Optional[SignOnTimeRange]:
    """FD10.1 row holding the planned and discretionary duty limits for a selection"""
    rows = long_haul_duty_rows(crew_complement, FRMSLimitType.OPERATIONAL, rest_facility)
    return rows[0] if rows else None


def involves_relevant_sector(rows: Tuple[SignOnTimeRange, ...], band: DutyHoursBand) -> bool:
    """FD3.4 applies to the extended row and to any expected duty over 18 hours"""
    extended = {row.label for limit_rows in LH_EXTENDED_DUTY_ROWS.values() for row in limit_rows}
    if any(row.label in extended for row in rows):
        return True
    return band.lower is not None and band.lower >= 18.0


class LongHaulLimitCalculator:
    """Next-duty limits for the A380/A330/B787 fleet"""

    def __init__(self, fleet: FleetConfiguration, thresholds: ComplianceThresholds = None):
        self.fleet = fleet
        self.thresholds = thresholds or ComplianceThresholds()
        self.validator = FRMSComplianceValidator(fleet, self.thresholds)
        self.rest_calculator = RestRequirementCalculator()

    def restrictions(self, totals: CumulativeTotals,
                     previous_duty: Optional[DutyRecord]) -> List[str]:
        restrictions = []
        if previous_duty is not None:
            if previous_duty.duty_time_hours > 12:
                restrictions.append("Previous duty exceeded 12 hours")
            if is_back_of_clock(previous_duty, self.fleet):
                restrictions.append(LONG_HAUL_BACK_OF_CLOCK_RESTRICTION)
        restrictions.extend(self.validator.cumulative_restrictions(totals))
        return restrictions

    def calculate(self, totals: CumulativeTotals, previous_duty: Optional[DutyRecord],
                  params: LongHaulParameters) -> LongHaulNextDutyLimits:
        """
        Raises InvalidRestFacilityError when the facility is not offered for
        the crew complement and limit type.
        """
        complement, limit_type = params.crew_complement, params.limit_type
        validate_rest_facility(complement, limit_type, params.rest_facility)

        if params.deadheading:
            rows = LH_DEADHEAD_LIMITS
        else:
            rows = long_haul_duty_rows(complement, limit_type, params.rest_facility,
                                       params.sign_on_window)

        bands = expected_duty_bands(complement, limit_type, params.deadheading)
        band = select_duty_band(bands, params.expected_duty_band)
        rest = self.rest_calculator.calculate(RestScenario(
            crew_complement=complement,
            limit_type=limit_type,
            duty_band=band,
            deadheading=params.deadheading,
        ))

        earliest: Optional[datetime] = None
        minimum_rest: Optional[float] = None
        if previous_duty is not None and previous_duty.sign_off_utc is not None:
            minimum_rest, earliest, _ = earliest_sign_on_after(previous_duty, self.fleet, limit_type)

        restrictions = self.restrictions(totals, previous_duty)
        relevant = not params.deadheading and involves_relevant_sector(tuple(rows), band)
        if relevant:
            restrictions.append(RELEVANT_SECTOR_MBTT_NOTE)
        logger.debug(
            f"Long-haul limits for {complement.value}/{limit_type.value}/"
            f"{params.rest_facility.value}: {len(rows)} row(s), band {band.label}"
        )

        return LongHaulNextDutyLimits(
            crew_complement=complement,
            limit_type=limit_type,
            rest_facility=params.rest_facility,
            rows=tuple(rows),
            valid_rest_facilities=valid_rest_facilities(complement, limit_type),
            expected_duty_bands=bands,
            selected_duty_band=band,
            rest_requirements=rest,
            restrictions=tuple(restrictions),
            earliest_sign_on=earliest,
            minimum_rest_hours=minimum_rest,
            relevant_sectors=RELEVANT_SECTORS if relevant else (),
            relevant_sector_inbound_rest=RELEVANT_SECTOR_INBOUND_ROWS if relevant else (),
        )
