"""
Minimum Base Turnaround Time (MBTT)
===================================

Rest required at home base after a long-haul trip, graduated by trip
length, credited flight hours and whether any duty exceeded 18 hours.

The result is the larger of the two scales, so it never falls as either
input grows. A duty over 18 hours adds one local night on top.

References: FD9 (MBTT), FD3.4.2 (relevant sectors)
"""

from typing import Dict, Optional
import logging

from frms_models.data_models import MBTTResult, DaysAwayCategory, CreditedHoursCategory
from frms_core.bands import require_exhaustive
from frms_core.fleet_tables import (
    MBTT_DAYS_AWAY_NIGHTS, MBTT_CREDITED_HOURS_NIGHTS, MBTT_SINGLE_DAY_REST_HOURS,
)

logger = logging.getLogger(__name__)


# Representative values for the picker categories
DAYS_AWAY_REPRESENTATIVE: Dict[DaysAwayCategory, float] = {
    DaysAwayCategory.ONE: 1.0,
    DaysAwayCategory.TWO_TO_FOUR: 3.0,
    DaysAwayCategory.FIVE_TO_EIGHT: 6.0,
    DaysAwayCategory.NINE_TO_TWELVE: 10.0,
    DaysAwayCategory.OVER_TWELVE: 13.0,
}

CREDITED_HOURS_REPRESENTATIVE: Dict[CreditedHoursCategory, float] = {
    CreditedHoursCategory.UP_TO_20: 15.0,
    CreditedHoursCategory.OVER_20: 25.0,
    CreditedHoursCategory.OVER_40: 50.0,
    CreditedHoursCategory.OVER_60: 70.0,
}

require_exhaustive(DAYS_AWAY_REPRESENTATIVE, DaysAwayCategory, "DAYS_AWAY_REPRESENTATIVE")
require_exhaustive(CREDITED_HOURS_REPRESENTATIVE, CreditedHoursCategory, "CREDITED_HOURS_REPRESENTATIVE")

OVER_18_HOURS_REASON = "Duty > 18 hrs: +1 local night"


def _describe(local_nights: int, rest_hours: Optional[float]) -> str:
    if local_nights == 0:
        return f"{rest_hours:.0f} hours"
    return f"{local_nights} local night{'s' if local_nights > 1 else ''}"


def calculate_mbtt_for_trip(days_away: float, credited_hours: float,
                            had_duty_over_18_hours: bool = False) -> MBTTResult:
    """
    MBTT from the actual trip length (days) and credited flight hours.

    Single-day trips owe MBTT_SINGLE_DAY_REST_HOURS; anything longer is
    expressed in local nights.
    """
    days_away = max(days_away, 0.0)
    credited_hours = max(credited_hours, 0.0)

    reasons = []
    nights = MBTT_DAYS_AWAY_NIGHTS.lookup(days_away) or 0
    days_band = MBTT_DAYS_AWAY_NIGHTS.band_for(days_away)
    if days_band is not None:
        reasons.append(f"Trip length {days_band.label}")

    hours_nights = MBTT_CREDITED_HOURS_NIGHTS.lookup(credited_hours) or 0
    if hours_nights > nights:
        nights = hours_nights
        reasons.append(f"Credited hours {MBTT_CREDITED_HOURS_NIGHTS.band_for(credited_hours).label}")

    if had_duty_over_18_hours:
        nights += 1
        reasons.append(OVER_18_HOURS_REASON)

    rest_hours = MBTT_SINGLE_DAY_REST_HOURS if nights == 0 else None
    result = MBTTResult(
        local_nights=nights,
        rest_hours=rest_hours,
        description=_describe(nights, rest_hours),
        reason=" • ".join(reasons),
    )
    logger.debug(
        f"MBTT for {days_away:g} day(s), {credited_hours:g} credited hrs"
        f"{' (duty > 18h)' if had_duty_over_18_hours else ''}: {result.description}"
    )
    return result


def calculate_mbtt(days_away: DaysAwayCategory, credited_hours: CreditedHoursCategory,
                   had_duty_over_18_hours: bool = False) -> MBTTResult:
    """MBTT for the picker categories, via their representative values"""
    return calculate_mbtt_for_trip(
        DAYS_AWAY_REPRESENTATIVE[days_away],
        CREDITED_HOURS_REPRESENTATIVE[credited_hours],
        had_duty_over_18_hours,
    )
