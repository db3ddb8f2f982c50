"""
Short-Haul Next Duty Limits (A320/B737)
=======================================

Next-duty picture for the short-haul fleet:
- earliest sign-on from the minimum rest owed after the previous duty
- sign-on window selection with sector-banded duty ceilings
- back-of-clock, late-night and consecutive-duty restriction overlays
- what-if checking of a proposed duty

References: FD12.2 (consecutive duties), FD13 / FD23 (duty limits),
FD18.1 / FD28.1 (rest)
"""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple
import logging
import pytz

from frms_models.data_models import (
    DutyRecord, CumulativeTotals, NextDutyParameters, FRMSLimitType,
    CrewComplement, RestFacilityClass,
    DutyTimeWindow, BackOfClockRestriction, LateNightStatus, ConsecutiveDutyStatus,
    PatternEndRequirement, ShortHaulNextDutyLimits, WhatIfScenario, WhatIfResult,
    ComplianceStatus,
)
from frms_core.parameters import (
    FleetConfiguration, ComplianceThresholds, ConsecutiveDutyLimits,
)
from frms_core.bands import find_band
from frms_core.fleet_tables import (
    SH_START_WINDOWS, SH_TWO_PILOT_DUTY_LIMITS, SH_MAX_FLIGHT_TIME,
    SH_FLIGHT_TIME_DESCRIPTION, SH_FLIGHT_TIME_SINGLE_SECTOR, SH_FLIGHT_TIME_MULTI_SECTOR,
    SH_FLIGHT_TIME_DARKNESS, SH_DARKNESS_THRESHOLD_HOURS, SH_AUGMENTED_FLIGHT_TIME,
    SH_AUGMENTED_SCREENED_SEAT, SH_AUGMENTED_PASSENGER_SEAT,
    SH_SPECIAL_SCENARIOS,
    ShortHaulAugmentedLimit,
)
from frms_core.aggregator import as_utc
from frms_core.restrictions import back_of_clock_restriction
from frms_core.compliance import FRMSComplianceValidator
from frms_core.rest_requirements import short_haul_rest_breakdown

logger = logging.getLogger(__name__)


def short_haul_max_flight_time(sectors: int, darkness_hours: float = 0.0) -> float:
    """FD13.3 / FD23.3 flight time ceiling"""
    if darkness_hours > SH_DARKNESS_THRESHOLD_HOURS:
        return SH_FLIGHT_TIME_DARKNESS
    if sectors > 1:
        return SH_FLIGHT_TIME_MULTI_SECTOR
    return SH_FLIGHT_TIME_SINGLE_SECTOR


def short_haul_augmented_limit(crew_complement: CrewComplement,
                               rest_facility: RestFacilityClass) -> Optional[ShortHaulAugmentedLimit]:
    """Augmented crew ceilings; None for a two-pilot crew"""
    if crew_complement == CrewComplement.TWO_PILOT:
        return None
    if crew_complement == CrewComplement.FOUR_PILOT:
        return SH_AUGMENTED_SCREENED_SEAT
    if rest_facility == RestFacilityClass.CLASS_1:
        return SH_AUGMENTED_SCREENED_SEAT
    return SH_AUGMENTED_PASSENGER_SEAT


def late_night_recovery_option(consecutive_late_nights: int) -> str:
    if consecutive_late_nights >= 4:
        return "Require ≥24 hours off before day duty"
    if consecutive_late_nights >= 2:
        return "Continue on late night operations"
    return "No restriction"


class ShortHaulLimitCalculator:
    """Next-duty limits for the A320/B737 fleet"""

    def __init__(self, fleet: FleetConfiguration, thresholds: ComplianceThresholds = None):
        self.fleet = fleet
        self.thresholds = thresholds or ComplianceThresholds()
        self.limits = fleet.consecutive_limits or ConsecutiveDutyLimits()
        self.tz = pytz.timezone(fleet.home_base_timezone)
        self.validator = FRMSComplianceValidator(fleet, self.thresholds)

    # ========================================================================
    # WINDOWS
    # ========================================================================

    def _minute_of_day(self, instant: datetime) -> int:
        local = as_utc(instant).astimezone(self.tz)
        return local.hour * 60 + local.minute

    def build_windows(self, limit_type: FRMSLimitType,
                      earliest_sign_on: datetime) -> Tuple[DutyTimeWindow, ...]:
        minute = self._minute_of_day(earliest_sign_on)
        windows = []
        for band, window in SH_START_WINDOWS:
            sectors_1_4, sectors_5, sectors_6 = SH_TWO_PILOT_DUTY_LIMITS[limit_type][window]
            windows.append(DutyTimeWindow(
                window=window,
                band=band,
                limit_type=limit_type,
                max_duty_1_to_4_sectors=sectors_1_4,
                max_duty_5_sectors=sectors_5,
                max_duty_6_sectors=sectors_6,
                max_flight_time_hours=SH_MAX_FLIGHT_TIME[limit_type],
                flight_time_description=SH_FLIGHT_TIME_DESCRIPTION[limit_type],
                is_currently_available=band.contains(minute),
            ))
        return tuple(windows)

    def window_for(self, windows: Tuple[DutyTimeWindow, ...], sign_on: datetime) -> DutyTimeWindow:
        """
        Window containing the sign-on's local time, else the next window to
        open after it.
        """
        minute = self._minute_of_day(sign_on)
        band = find_band([w.band for w in windows], minute)
        if band is not None:
            return next(w for w in windows if w.band == band)
        later = sorted((w for w in windows if w.band.start_minute > minute),
                       key=lambda w: w.band.start_minute)
        if later:
            return later[0]
        return min(windows, key=lambda w: w.band.start_minute)

    # ========================================================================
    # OVERLAYS
    # ========================================================================

    def back_of_clock_restriction(self, previous_duty: DutyRecord,
                                  earliest_sign_on: datetime) -> Optional[BackOfClockRestriction]:
        return back_of_clock_restriction(previous_duty, earliest_sign_on, self.fleet)

    def late_night_status(self, totals: CumulativeTotals,
                          late_night_duty_hours: float) -> Optional[LateNightStatus]:
        consecutive = totals.streak_value('consecutive_late_nights')
        if consecutive <= 0:
            return None
        return LateNightStatus(
            consecutive_late_nights=consecutive,
            max_consecutive_late_nights=self.limits.max_consecutive_late_nights,
            duty_hours_in_7_nights=late_night_duty_hours,
            max_duty_hours_in_7_nights=self.limits.max_late_night_duty_hours_7_nights,
            can_use_5_night_exception=self.limits.can_use_5_night_exception,
            recovery_option=late_night_recovery_option(consecutive),
        )

    def consecutive_duty_status(self, totals: CumulativeTotals) -> ConsecutiveDutyStatus:
        limits = self.limits
        duties = totals.streak_value('consecutive_duties')
        in_11 = totals.streak_value('duty_days_in_11_days')
        early = totals.streak_value('consecutive_early_starts')

        flags = []
        if duties >= limits.max_consecutive_duties:
            flags.append(f"Maximum {limits.max_consecutive_duties} consecutive duty days reached")
        if in_11 >= limits.max_duty_days_in_11_days:
            flags.append(f"Maximum {limits.max_duty_days_in_11_days} duty days in 11-day period reached")
        if early >= limits.max_consecutive_early_starts:
            flags.append(f"Maximum {limits.max_consecutive_early_starts} consecutive early starts reached")

        return ConsecutiveDutyStatus(
            consecutive_duties=duties,
            max_consecutive_duties=limits.max_consecutive_duties,
            duty_days_in_11_days=in_11,
            max_duty_days_in_11_days=limits.max_duty_days_in_11_days,
            consecutive_early_starts=early,
            max_consecutive_early_starts=limits.max_consecutive_early_starts,
            flags=tuple(flags),
        )

    @staticmethod
    def pattern_end_requirement(totals: CumulativeTotals) -> PatternEndRequirement:
        if totals.streak_value('consecutive_duties') >= 3:
            return PatternEndRequirement(15.0, "3-4 day pattern")
        return PatternEndRequirement(12.0, "1-2 day pattern")

    # ========================================================================
    # NEXT DUTY
    # ========================================================================

    def calculate(self, totals: CumulativeTotals, previous_duty: Optional[DutyRecord],
                  params: NextDutyParameters,
                  late_night_duty_hours: float = 0.0) -> ShortHaulNextDutyLimits:
        limit_type = params.limit_type
        restrictions: List[str] = []

        breakdown = None
        minimum_rest = 0.0
        earliest = as_utc(params.as_of)
        back_of_clock = None

        if previous_duty is not None and previous_duty.sign_off_utc is not None:
            breakdown = short_haul_rest_breakdown(
                previous_duty.duty_time_hours, limit_type,
                previous_duty.crew_complement.is_augmented,
            )
            minimum_rest = breakdown.total_rest_hours
            earliest = as_utc(previous_duty.sign_off_utc) + timedelta(
                minutes=round(minimum_rest * 60)
            )
            if previous_duty.duty_time_hours > 12:
                restrictions.append("Previous duty exceeded 12 hours")

            back_of_clock = self.back_of_clock_restriction(previous_duty, earliest)
            if back_of_clock is not None and back_of_clock.is_active:
                earliest = back_of_clock.restricted_until
                restrictions.append(back_of_clock.reason)

        windows = self.build_windows(limit_type, earliest)
        selected = self.window_for(windows, earliest)

        consecutive = self.consecutive_duty_status(totals)
        restrictions.extend(consecutive.flags)

        late_night = self.late_night_status(totals, late_night_duty_hours)
        if late_night is not None and late_night.consecutive_late_nights >= late_night.max_consecutive_late_nights:
            restrictions.append("Late night operations limit approaching")

        restrictions.extend(self.validator.cumulative_restrictions(totals))

        augmented = short_haul_augmented_limit(params.crew_complement, params.rest_facility)

        logger.debug(
            f"Short-haul next duty: earliest {earliest.isoformat()}, window {selected.time_range}, "
            f"{len(restrictions)} restriction(s)"
        )

        return ShortHaulNextDutyLimits(
            limit_type=limit_type,
            earliest_sign_on=earliest,
            minimum_rest_hours=minimum_rest,
            windows=windows,
            selected_window=selected,
            consecutive_duty_status=consecutive,
            back_of_clock=back_of_clock,
            late_night=late_night,
            rest_breakdown=breakdown,
            pattern_end=self.pattern_end_requirement(totals),
            restrictions=tuple(restrictions),
            augmented_max_duty_hours=augmented.max_duty_hours if augmented else None,
            augmented_max_flight_hours=SH_AUGMENTED_FLIGHT_TIME if augmented else None,
            augmented_max_sectors=augmented.max_sectors if augmented else None,
            special_scenarios=SH_SPECIAL_SCENARIOS,
        )

    # ========================================================================
    # WHAT-IF
    # ========================================================================

    def check_what_if(self, scenario: WhatIfScenario, limits: ShortHaulNextDutyLimits,
                      totals: CumulativeTotals) -> WhatIfResult:
        """Check a proposed duty against the next-duty limits and cumulative ceilings"""
        violations: List[str] = []
        warnings: List[str] = []

        window = self.window_for(limits.windows, scenario.proposed_sign_on)

        if as_utc(scenario.proposed_sign_on) < limits.earliest_sign_on:
            earliest_local = limits.earliest_sign_on.astimezone(self.tz)
            violations.append(f"Sign-on before earliest allowed: {earliest_local.strftime('%d %b %H%M')}")

        sectors = scenario.estimated_sectors
        duty = scenario.estimated_duty_hours
        max_duty = window.max_duty(sectors)
        if max_duty is None:
            violations.append(f"No duty limit for {sectors} sectors")
        elif duty > max_duty:
            violations.append(f"Duty time {duty:.1f}h exceeds max {max_duty:.1f}h for {sectors} sectors")
        elif duty > max_duty * self.thresholds.warning_threshold:
            warnings.append(f"Duty time approaching limit ({duty:.1f}h of {max_duty:.1f}h)")

        max_flight = short_haul_max_flight_time(sectors, scenario.darkness_hours)
        if scenario.estimated_flight_hours > max_flight:
            violations.append(
                f"Flight time {scenario.estimated_flight_hours:.1f}h exceeds max {max_flight:.1f}h"
            )

        violations.extend(self.validator.cumulative_breaches(
            totals, duty, scenario.estimated_flight_hours
        ))

        status = limits.consecutive_duty_status
        if status.consecutive_duties >= status.max_consecutive_duties:
            violations.append(
                f"Maximum {status.max_consecutive_duties} consecutive duty days already reached"
            )
        if status.duty_days_in_11_days >= status.max_duty_days_in_11_days:
            violations.append(
                f"Maximum {status.max_duty_days_in_11_days} duty days in 11-day period already reached"
            )

        if violations:
            result_status = ComplianceStatus.VIOLATION
        elif warnings:
            result_status = ComplianceStatus.WARNING
        else:
            result_status = ComplianceStatus.COMPLIANT

        return WhatIfResult(
            scenario=scenario,
            status=result_status,
            applicable_window=window,
            violations=tuple(violations),
            warnings=tuple(warnings),
        )
