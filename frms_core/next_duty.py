"""
Maximum Next Duty
=================

Fleet-independent summary of the largest next duty a pilot may be given:
baseline duty/flight/sector limits for the crew complement and rest
facility, reduced by whatever headroom remains under the rolling
cumulative ceilings.

Short-haul two-pilot baselines are the night window (most restrictive);
the short-haul calculator gives the full per-window picture.
"""

from datetime import datetime
from typing import List, Optional, Tuple
import logging

from frms_models.data_models import (
    DutyRecord, CumulativeTotals, MaximumNextDuty, CrewComplement, FRMSLimitType,
    RestFacilityClass, ShortHaulStartWindow,
)
from frms_core.parameters import FleetConfiguration, ComplianceThresholds, ConsecutiveDutyLimits
from frms_core.fleet_tables import (
    SH_TWO_PILOT_DUTY_LIMITS, SH_FLIGHT_TIME_MULTI_SECTOR, SH_AUGMENTED_FLIGHT_TIME,
)
from frms_core.compliance import FRMSComplianceValidator
from frms_core.restrictions import (
    earliest_sign_on_after, is_back_of_clock, LONG_HAUL_BACK_OF_CLOCK_RESTRICTION,
)
from frms_core.short_haul import short_haul_augmented_limit
from frms_core.long_haul import base_duty_row, long_haul_duty_rows

logger = logging.getLogger(__name__)

DEFAULT_MINIMUM_REST_HOURS = 12.0
AUGMENTED_FLIGHT_DECK_HOURS = 14.0
SHORT_HAUL_MAX_SECTORS = 6


def _remaining(hours: Optional[float], limit: Optional[float]) -> Optional[float]:
    if limit is None:
        return None
    return limit - (hours or 0.0)


class MaximumNextDutyCalculator:
    """Baseline limits clamped by remaining cumulative headroom"""

    def __init__(self, fleet: FleetConfiguration, thresholds: ComplianceThresholds = None):
        self.fleet = fleet
        self.thresholds = thresholds or ComplianceThresholds()
        self.validator = FRMSComplianceValidator(fleet, self.thresholds)

    def base_limits(self, crew_complement: CrewComplement, rest_facility: RestFacilityClass,
                    limit_type: FRMSLimitType) -> Tuple[float, float, int]:
        """(max duty, max flight, max sectors) before cumulative headroom"""
        if not self.fleet.is_long_haul:
            augmented = short_haul_augmented_limit(crew_complement, rest_facility)
            if augmented is None:
                duty = SH_TWO_PILOT_DUTY_LIMITS[limit_type][ShortHaulStartWindow.NIGHT][0]
                return duty, SH_FLIGHT_TIME_MULTI_SECTOR, SHORT_HAUL_MAX_SECTORS
            return augmented.max_duty_hours, SH_AUGMENTED_FLIGHT_TIME, augmented.max_sectors

        row = base_duty_row(crew_complement, rest_facility)
        if row is None:
            raise ValueError(
                f"No long-haul duty limit for {crew_complement.value} with {rest_facility.value}"
            )
        if limit_type == FRMSLimitType.OPERATIONAL and row.max_duty_discretion_hours is not None:
            duty = row.max_duty_discretion_hours
        else:
            duty = row.max_duty_hours
        flight = row.max_flight_hours if row.max_flight_hours is not None else AUGMENTED_FLIGHT_DECK_HOURS
        sectors = 4 if crew_complement == CrewComplement.TWO_PILOT else 2
        return duty, flight, sectors

    def previous_duty_restrictions(self, previous_duty: DutyRecord,
                                   totals: CumulativeTotals) -> List[str]:
        restrictions = []
        if previous_duty.duty_time_hours > 12:
            restrictions.append("Previous duty exceeded 12 hours")

        if self.fleet.is_long_haul:
            if is_back_of_clock(previous_duty, self.fleet):
                restrictions.append(LONG_HAUL_BACK_OF_CLOCK_RESTRICTION)
            return restrictions

        limits = self.fleet.consecutive_limits or ConsecutiveDutyLimits()
        if totals.streak_value('consecutive_duties') >= limits.max_consecutive_duties:
            restrictions.append(f"Maximum {limits.max_consecutive_duties} consecutive duty days reached")
        if totals.streak_value('duty_days_in_11_days') >= limits.max_duty_days_in_11_days:
            restrictions.append(
                f"Maximum {limits.max_duty_days_in_11_days} duty days in 11-day period reached"
            )
        if totals.streak_value('consecutive_early_starts') >= limits.max_consecutive_early_starts:
            restrictions.append(
                f"Maximum {limits.max_consecutive_early_starts} consecutive early starts reached"
            )
        if totals.streak_value('consecutive_late_nights') >= limits.max_consecutive_late_nights:
            restrictions.append("Late night operations limit approaching")
        return restrictions

    def calculate(self, totals: CumulativeTotals, previous_duty: Optional[DutyRecord],
                  limit_type: FRMSLimitType,
                  crew_complement: CrewComplement = CrewComplement.TWO_PILOT,
                  rest_facility: RestFacilityClass = RestFacilityClass.NONE) -> MaximumNextDuty:
        fleet = self.fleet
        max_duty, max_flight, max_sectors = self.base_limits(crew_complement, rest_facility, limit_type)

        restrictions: List[str] = []
        minimum_rest = DEFAULT_MINIMUM_REST_HOURS
        earliest: Optional[datetime] = None
        if previous_duty is not None and previous_duty.sign_off_utc is not None:
            minimum_rest, earliest, _ = earliest_sign_on_after(previous_duty, fleet, limit_type)
            restrictions.extend(self.previous_duty_restrictions(previous_duty, totals))

        flight_headroom = [
            _remaining(totals.flight_time_window.hours, fleet.max_flight_time_window),
            _remaining(totals.flight_time_7_days.hours, fleet.max_flight_time_7_days),
        ]
        duty_headroom = [
            _remaining(totals.duty_time_7_days.hours, fleet.max_duty_time_7_days),
            _remaining(totals.duty_time_14_days.hours, fleet.max_duty_time_14_days),
        ]
        max_flight = max(0.0, min([max_flight] + [h for h in flight_headroom if h is not None]))
        max_duty = max(0.0, min([max_duty] + [h for h in duty_headroom if h is not None]))

        restrictions.extend(self.validator.cumulative_restrictions(totals))

        sign_on_limits = ()
        if fleet.is_long_haul:
            sign_on_limits = long_haul_duty_rows(crew_complement, limit_type, rest_facility)

        logger.debug(
            f"Maximum next duty ({fleet.fleet_id}, {crew_complement.value}, {limit_type.value}): "
            f"duty {max_duty:.1f}h, flight {max_flight:.1f}h, {max_sectors} sectors"
        )

        return MaximumNextDuty(
            max_duty_hours=max_duty,
            max_flight_hours=max_flight,
            max_sectors=max_sectors,
            minimum_rest_hours=minimum_rest,
            earliest_sign_on=earliest,
            limit_type=limit_type,
            restrictions=tuple(restrictions),
            sign_on_limits=sign_on_limits,
        )
