"""
Next-Duty Restrictions
======================

Restrictions shared by both fleets: the earliest sign-on owed after the
previous duty and the back-of-clock floor on it.
"""

from datetime import datetime, time, timedelta
from typing import Optional, Tuple

import pytz

from frms_models.data_models import (
    DutyRecord, FRMSLimitType, OperationTimeClass, BackOfClockRestriction,
)
from frms_core.parameters import FleetConfiguration
from frms_core.aggregator import as_utc, classify_operation_time
from frms_core.rest_requirements import minimum_rest_after_duty

BACK_OF_CLOCK_REASON = "Previous duty included ≥2 hours between 0100-0459"
BACK_OF_CLOCK_APPLIES_TO = "Australia only"
LONG_HAUL_BACK_OF_CLOCK_RESTRICTION = (
    "Back-of-clock operation: next duty in Australia limited to after 1000LT"
)


def is_back_of_clock(duty: DutyRecord, fleet: FleetConfiguration) -> bool:
    if duty.sign_on_utc is None or duty.sign_off_utc is None:
        return False
    time_class = classify_operation_time(
        duty.sign_on_utc, duty.sign_off_utc, fleet.home_base_timezone, fleet.time_of_day
    )
    return time_class == OperationTimeClass.BACK_OF_CLOCK


def back_of_clock_restriction(previous_duty: DutyRecord, earliest_sign_on: datetime,
                              fleet: FleetConfiguration) -> Optional[BackOfClockRestriction]:
    """
    After a back-of-clock duty the next sign-on is no earlier than 1000 local
    on the earliest sign-on's day. is_active is set when the floor moves it.
    """
    if not is_back_of_clock(previous_duty, fleet):
        return None
    tz = pytz.timezone(fleet.home_base_timezone)
    local_day = as_utc(earliest_sign_on).astimezone(tz).date()
    floor = tz.localize(datetime.combine(
        local_day, time(fleet.time_of_day.back_of_clock_floor_hour)
    )).astimezone(pytz.utc)
    return BackOfClockRestriction(
        is_active=as_utc(earliest_sign_on) < floor,
        restricted_until=floor,
        reason=BACK_OF_CLOCK_REASON,
        applies_to=BACK_OF_CLOCK_APPLIES_TO,
    )


def earliest_sign_on_after(previous_duty: DutyRecord, fleet: FleetConfiguration,
                           limit_type: FRMSLimitType
                           ) -> Tuple[float, datetime, Optional[BackOfClockRestriction]]:
    """(minimum rest hours, earliest sign-on UTC, back-of-clock restriction)"""
    minimum_rest = minimum_rest_after_duty(previous_duty, fleet, limit_type)
    earliest = as_utc(previous_duty.sign_off_utc) + timedelta(minutes=round(minimum_rest * 60))
    restriction = back_of_clock_restriction(previous_duty, earliest, fleet)
    if restriction is not None and restriction.is_active:
        earliest = restriction.restricted_until
    return minimum_rest, earliest, restriction
