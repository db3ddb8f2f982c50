"""
data_models.py - FRMS Data Structures
=====================================

Records, enumerations, band descriptors and result value objects shared by
the FRMS compliance engine.

Everything here is immutable: duty records are produced by the ingestion
side and only read by the engine, and every calculator returns frozen
result objects.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple, Union
from enum import Enum
import pytz


# ============================================================================
# ENUMS
# ============================================================================

class FRMSFleet(Enum):
    """Fleet groupings covered by the FRMS rule tables"""
    A320_B737 = "A320/B737"            # Short-haul narrow-body
    A380_A330_B787 = "A380/A330/B787"  # Long-haul wide-body

    @property
    def is_long_haul(self) -> bool:
        return self is FRMSFleet.A380_A330_B787


class CrewComplement(Enum):
    """Number of pilots rostered on the duty"""
    TWO_PILOT = "two_pilot"
    THREE_PILOT = "three_pilot"
    FOUR_PILOT = "four_pilot"

    @property
    def pilot_count(self) -> int:
        return {"two_pilot": 2, "three_pilot": 3, "four_pilot": 4}[self.value]

    @property
    def is_augmented(self) -> bool:
        return self is not CrewComplement.TWO_PILOT

    @classmethod
    def from_crew_count(cls, count: int) -> 'CrewComplement':
        """Infer the complement from the number of named pilots on a sector"""
        if count >= 4:
            return cls.FOUR_PILOT
        if count == 3:
            return cls.THREE_PILOT
        return cls.TWO_PILOT


class RestFacilityClass(Enum):
    """
    In-flight crew rest accommodation.
    Only a subset is legal for a given crew complement and limit type,
    see frms_core.parameters.valid_rest_facilities().
    """
    NONE = "none"
    CLASS_1 = "class_1"                                  # Bunk, fully enclosed
    CLASS_2 = "class_2"                                  # Reclining seat, screened
    TWO_CLASS_1 = "two_class_1"
    ONE_CLASS_1_ONE_CLASS_2 = "one_class_1_one_class_2"
    TWO_CLASS_2 = "two_class_2"
    SEAT_IN_PASSENGER_COMPARTMENT = "seat_in_passenger_compartment"


class FRMSLimitType(Enum):
    """Planning (rostering) ceilings vs. operational (on the day) ceilings"""
    PLANNING = "planning"
    OPERATIONAL = "operational"


class ComplianceStatus(Enum):
    """Three-state compliance classification. Derived, never persisted."""
    COMPLIANT = "compliant"
    WARNING = "warning"
    VIOLATION = "violation"

    @property
    def severity(self) -> int:
        return {"compliant": 0, "warning": 1, "violation": 2}[self.value]


class OperationTimeClass(Enum):
    """Time-of-day classification of a duty in home base local time"""
    DAY = "day"
    LATE_NIGHT = "late_night"          # >30 min between 2300-0530
    BACK_OF_CLOCK = "back_of_clock"    # >=2 hrs between 0100-0459

    @property
    def is_late_night(self) -> bool:
        return self is not OperationTimeClass.DAY


class ShortHaulStartWindow(Enum):
    """Short-haul local start time windows (FD13.1 / FD23.1)"""
    EARLY = "0500-1459"
    AFTERNOON = "1500-1959"
    NIGHT = "2000-0459"

    @property
    def display_name(self) -> str:
        return {
            "0500-1459": "Early Morning",
            "1500-1959": "Afternoon",
            "2000-0459": "Night",
        }[self.value]


class LongHaulSignOnWindow(Enum):
    """Two-pilot long-haul planning sign-on windows (FD3.1)"""
    W0500_0759 = "0500-0759"
    W0800_1359 = "0800-1359"
    W1400_1559 = "1400-1559"
    W1600_0459 = "1600-0459"


class DaysAwayCategory(Enum):
    """Trip length picker categories for MBTT"""
    ONE = "1"
    TWO_TO_FOUR = "2-4"
    FIVE_TO_EIGHT = "5-8"
    NINE_TO_TWELVE = "9-12"
    OVER_TWELVE = ">12"


class CreditedHoursCategory(Enum):
    """Credited flight hours picker categories for MBTT"""
    UP_TO_20 = "<=20"
    OVER_20 = ">20"
    OVER_40 = ">40"
    OVER_60 = ">60"


# ============================================================================
# BAND DESCRIPTORS
# ============================================================================

@dataclass(frozen=True)
class DutyHoursBand:
    """
    Duty-hour interval (lower, upper], either side may be open.
    e.g. "> 14 ≤ 16" is DutyHoursBand("> 14 ≤ 16", 14.0, 16.0)
    """
    label: str
    lower: Optional[float] = None   # exclusive
    upper: Optional[float] = None   # inclusive

    def contains(self, hours: float) -> bool:
        if self.lower is not None and hours <= self.lower:
            return False
        if self.upper is not None and hours > self.upper:
            return False
        return True

    @property
    def representative_hours(self) -> float:
        """A duty length inside the band, used to probe other tables"""
        if self.upper is not None:
            return self.upper
        if self.lower is not None:
            return self.lower + 0.5
        return 0.0


@dataclass(frozen=True)
class TimeOfDayBand:
    """
    Local time-of-day interval in minutes after midnight, both ends inclusive.
    Wraps past midnight when end_minute < start_minute (e.g. 2000-0459).
    """
    label: str
    start_minute: int
    end_minute: int

    def contains(self, minute_of_day: int) -> bool:
        if self.end_minute < self.start_minute:
            return minute_of_day >= self.start_minute or minute_of_day <= self.end_minute
        return self.start_minute <= minute_of_day <= self.end_minute

    @property
    def wraps_midnight(self) -> bool:
        return self.end_minute < self.start_minute


# ============================================================================
# DUTY RECORDS & CUMULATIVE TOTALS
# ============================================================================

@dataclass(frozen=True)
class DutyRecord:
    """
    One completed duty period as supplied by the logbook.

    `date` is the calendar day of sign-on in the home base timezone. It may
    arrive as a string ("dd/mm/YYYY" or ISO) from older data; the aggregator
    parses it and excludes the record when it cannot.
    """
    date: Union[date, str, None]
    sign_on_utc: Optional[datetime]
    sign_off_utc: Optional[datetime]
    sectors: int
    flight_time_hours: float
    duty_time_hours: float
    fleet_id: str = FRMSFleet.A320_B737.value
    is_positioning: bool = False
    is_simulator: bool = False
    night_time_hours: float = 0.0
    crew_complement: CrewComplement = CrewComplement.TWO_PILOT

    @classmethod
    def from_times(cls, sign_on_utc: datetime, sign_off_utc: datetime,
                   home_timezone: str, sectors: int = 1,
                   flight_time_hours: float = 0.0, **kwargs) -> 'DutyRecord':
        """Build a record, deriving the duty date and duty time from the instants"""
        tz = pytz.timezone(home_timezone)
        duty_hours = (sign_off_utc - sign_on_utc).total_seconds() / 3600
        return cls(
            date=sign_on_utc.astimezone(tz).date(),
            sign_on_utc=sign_on_utc,
            sign_off_utc=sign_off_utc,
            sectors=sectors,
            flight_time_hours=flight_time_hours,
            duty_time_hours=duty_hours,
            **kwargs
        )

    @property
    def is_deadheading(self) -> bool:
        return self.is_positioning and self.flight_time_hours == 0


@dataclass(frozen=True)
class WindowTotal:
    """
    Rolling-window sum paired with its ceiling.
    hours is None when no usable records exist ("no data available"),
    which is distinct from 0.0 hours flown.
    """
    window_days: int
    hours: Optional[float]
    limit: Optional[float]
    status: Optional[ComplianceStatus]
    is_complete: bool = True   # False when the record history starts inside the window

    @property
    def has_data(self) -> bool:
        return self.hours is not None

    @property
    def remaining_hours(self) -> Optional[float]:
        if self.hours is None or self.limit is None:
            return None
        return self.limit - self.hours

    @property
    def percentage_used(self) -> Optional[float]:
        if self.hours is None or not self.limit:
            return None
        return self.hours / self.limit * 100


@dataclass(frozen=True)
class StreakCounter:
    """Consecutive-duty counter with its fleet ceiling"""
    value: int
    limit: Optional[int]
    status: ComplianceStatus = ComplianceStatus.COMPLIANT


@dataclass(frozen=True)
class CumulativeTotals:
    """Immutable snapshot of rolling totals as of a home base calendar day"""
    as_of: date
    flight_time_7_days: WindowTotal
    flight_time_window: WindowTotal        # 28 or 30 days, fleet dependent
    flight_time_365_days: WindowTotal
    duty_time_7_days: WindowTotal
    duty_time_14_days: WindowTotal
    days_off_in_window: Optional[int]
    consecutive_duties: Optional[StreakCounter] = None
    consecutive_early_starts: Optional[StreakCounter] = None
    consecutive_late_nights: Optional[StreakCounter] = None
    duty_days_in_11_days: Optional[StreakCounter] = None
    excluded_record_count: int = 0
    included_record_count: int = 0

    @property
    def has_data(self) -> bool:
        return self.included_record_count > 0

    @property
    def window_totals(self) -> Tuple[WindowTotal, ...]:
        return (self.flight_time_7_days, self.flight_time_window,
                self.flight_time_365_days, self.duty_time_7_days,
                self.duty_time_14_days)

    @property
    def streak_counters(self) -> Tuple[StreakCounter, ...]:
        counters = (self.consecutive_duties, self.consecutive_early_starts,
                    self.consecutive_late_nights, self.duty_days_in_11_days)
        return tuple(c for c in counters if c is not None)

    def streak_value(self, name: str) -> int:
        """Counter value or 0 when the fleet does not track it"""
        counter = getattr(self, name)
        return counter.value if counter is not None else 0


# ============================================================================
# SCENARIO PARAMETERS (caller selections)
# ============================================================================

@dataclass(frozen=True)
class NextDutyParameters:
    """Selections for the next-duty calculation"""
    as_of: datetime
    limit_type: FRMSLimitType = FRMSLimitType.PLANNING
    crew_complement: CrewComplement = CrewComplement.TWO_PILOT
    rest_facility: RestFacilityClass = RestFacilityClass.NONE


@dataclass(frozen=True)
class LongHaulParameters:
    """Selections for the long-haul table view"""
    crew_complement: CrewComplement
    limit_type: FRMSLimitType
    rest_facility: RestFacilityClass = RestFacilityClass.NONE
    sign_on_window: Optional[LongHaulSignOnWindow] = None   # two-pilot planning only
    deadheading: bool = False
    expected_duty_band: Optional[str] = None                # band label, default first band


@dataclass(frozen=True)
class RestScenario:
    """Inputs to the rest requirement lookup"""
    crew_complement: CrewComplement
    limit_type: FRMSLimitType
    duty_band: DutyHoursBand
    deadheading: bool = False
    duty_hours: Optional[float] = None   # actual duty length, for the formula band


@dataclass(frozen=True)
class DisruptionScenario:
    """Inputs to the FD10.2.1 disruption rest calculation"""
    previous_duty_hours: Optional[float]
    tz_difference_hours: float = 0.0
    next_duty_over_16: bool = False
    crew_complement: CrewComplement = CrewComplement.TWO_PILOT


@dataclass(frozen=True)
class WhatIfScenario:
    """A proposed short-haul duty to check against the current limits"""
    proposed_sign_on: datetime
    estimated_duty_hours: float
    estimated_flight_hours: float
    estimated_sectors: int = 1
    darkness_hours: float = 0.0


# ============================================================================
# NEXT-DUTY RESULTS
# ============================================================================

@dataclass(frozen=True)
class DutyTimeWindow:
    """Short-haul sign-on window with its sector-banded ceilings"""
    window: ShortHaulStartWindow
    band: TimeOfDayBand
    limit_type: FRMSLimitType
    max_duty_1_to_4_sectors: float
    max_duty_5_sectors: float
    max_duty_6_sectors: float
    max_flight_time_hours: float
    flight_time_description: str
    is_currently_available: bool = False

    @property
    def time_range(self) -> str:
        return self.window.value

    @property
    def display_name(self) -> str:
        return self.window.display_name

    def max_duty(self, sectors: int) -> Optional[float]:
        """Duty ceiling for a sector count, None outside 1-6 sectors"""
        if sectors < 1 or sectors > 6:
            return None
        if sectors <= 4:
            return self.max_duty_1_to_4_sectors
        if sectors == 5:
            return self.max_duty_5_sectors
        return self.max_duty_6_sectors


@dataclass(frozen=True)
class SignOnTimeRange:
    """
    Long-haul duty limit row for the active limit type.
    When flight_time_note is set it replaces the numeric flight time display.
    """
    label: str
    max_duty_hours: float
    max_flight_hours: Optional[float] = None
    rest_facility: Optional[RestFacilityClass] = None
    max_duty_discretion_hours: Optional[float] = None
    pre_rest_hours: Optional[float] = None
    post_rest_hours: Optional[float] = None
    sector_limit: Optional[str] = None
    flight_time_note: Optional[str] = None
    requirements: Optional[str] = None
    sign_on_window: Optional[LongHaulSignOnWindow] = None

    @property
    def flight_time_display(self) -> str:
        if self.flight_time_note:
            return self.flight_time_note
        if self.max_flight_hours is None:
            return "N/A"
        return f"{self.max_flight_hours:.1f} hrs"


@dataclass(frozen=True)
class BackOfClockRestriction:
    """Floor on the next sign-on after a duty through 0100-0459 local"""
    is_active: bool
    restricted_until: Optional[datetime]
    reason: str
    applies_to: str


@dataclass(frozen=True)
class LateNightStatus:
    consecutive_late_nights: int
    max_consecutive_late_nights: int
    duty_hours_in_7_nights: float
    max_duty_hours_in_7_nights: float
    can_use_5_night_exception: bool
    recovery_option: str

    @property
    def status(self) -> ComplianceStatus:
        if (self.consecutive_late_nights >= self.max_consecutive_late_nights
                or self.duty_hours_in_7_nights >= self.max_duty_hours_in_7_nights):
            return ComplianceStatus.VIOLATION
        if self.consecutive_late_nights >= self.max_consecutive_late_nights - 1:
            return ComplianceStatus.WARNING
        return ComplianceStatus.COMPLIANT


@dataclass(frozen=True)
class ConsecutiveDutyStatus:
    consecutive_duties: int
    max_consecutive_duties: int
    duty_days_in_11_days: int
    max_duty_days_in_11_days: int
    consecutive_early_starts: int
    max_consecutive_early_starts: int
    flags: Tuple[str, ...] = ()

    @property
    def has_active_restrictions(self) -> bool:
        return len(self.flags) > 0


@dataclass(frozen=True)
class RestCalculationBreakdown:
    """How the short-haul minimum rest was arrived at"""
    previous_duty_hours: float
    is_over_12_hours: bool
    base_rest_hours: float
    formula: str
    additional_rest_hours: float
    total_rest_hours: float
    reduced_rest_available: bool = False
    reduced_rest_conditions: Optional[str] = None


@dataclass(frozen=True)
class PatternEndRequirement:
    minimum_rest_hours: float
    description: str


@dataclass(frozen=True)
class SpecialScenarioRules:
    """Reference text for short-haul duties adjacent to non-flying days"""
    simulator: Tuple[str, ...]
    days_off: Tuple[str, ...]
    annual_leave: Tuple[str, ...]
    reserve: Tuple[str, ...]
    deadheading: Tuple[str, ...]
    deadheading_absolute_maximum_hours: float = 16.0


@dataclass(frozen=True)
class ShortHaulNextDutyLimits:
    """Short-haul next-duty picture"""
    limit_type: FRMSLimitType
    earliest_sign_on: datetime
    minimum_rest_hours: float
    windows: Tuple[DutyTimeWindow, ...]
    selected_window: DutyTimeWindow
    consecutive_duty_status: ConsecutiveDutyStatus
    back_of_clock: Optional[BackOfClockRestriction] = None
    late_night: Optional[LateNightStatus] = None
    rest_breakdown: Optional[RestCalculationBreakdown] = None
    pattern_end: Optional[PatternEndRequirement] = None
    restrictions: Tuple[str, ...] = ()
    augmented_max_duty_hours: Optional[float] = None
    augmented_max_flight_hours: Optional[float] = None
    augmented_max_sectors: Optional[int] = None
    special_scenarios: Optional[SpecialScenarioRules] = None

    @property
    def active_overlays(self) -> List[str]:
        """Names of the restriction overlays currently in force"""
        active = []
        if self.back_of_clock is not None and self.back_of_clock.is_active:
            active.append("back_of_clock")
        if self.late_night is not None and self.late_night.status != ComplianceStatus.COMPLIANT:
            active.append("late_night")
        if self.consecutive_duty_status.has_active_restrictions:
            active.append("consecutive_duty")
        return active


@dataclass(frozen=True)
class RestRequirementRow:
    """One threshold-banded rest line"""
    band_label: str
    rest_hours: Optional[float]
    condition: Optional[str] = None
    formula: Optional[str] = None

    @property
    def rest_display(self) -> str:
        if self.rest_hours is None:
            return self.formula or "Refer to conditions"
        return f"{self.rest_hours:g} hrs"


@dataclass(frozen=True)
class RestRequirements:
    pre_duty: Tuple[RestRequirementRow, ...]
    post_duty: Tuple[RestRequirementRow, ...]
    duty_band: DutyHoursBand
    deadheading: bool = False


@dataclass(frozen=True)
class LongHaulNextDutyLimits:
    """Long-haul table view for the current selections"""
    crew_complement: CrewComplement
    limit_type: FRMSLimitType
    rest_facility: RestFacilityClass
    rows: Tuple[SignOnTimeRange, ...]
    valid_rest_facilities: Tuple[RestFacilityClass, ...]
    expected_duty_bands: Tuple[DutyHoursBand, ...]
    selected_duty_band: DutyHoursBand
    rest_requirements: RestRequirements
    restrictions: Tuple[str, ...] = ()
    earliest_sign_on: Optional[datetime] = None
    minimum_rest_hours: Optional[float] = None
    # FD3.4, filled when the selection involves a relevant sector
    relevant_sectors: Tuple[str, ...] = ()
    relevant_sector_inbound_rest: Tuple[RestRequirementRow, ...] = ()


@dataclass(frozen=True)
class MaximumNextDuty:
    """Base next-duty ceilings clamped by remaining cumulative hours"""
    max_duty_hours: float
    max_flight_hours: float
    max_sectors: int
    minimum_rest_hours: float
    earliest_sign_on: Optional[datetime]
    limit_type: FRMSLimitType
    restrictions: Tuple[str, ...] = ()
    sign_on_limits: Tuple[SignOnTimeRange, ...] = ()


@dataclass(frozen=True)
class WhatIfResult:
    scenario: WhatIfScenario
    status: ComplianceStatus
    applicable_window: DutyTimeWindow
    violations: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def is_compliant(self) -> bool:
        return not self.violations


@dataclass(frozen=True)
class ComplianceCheckResult:
    status: ComplianceStatus
    messages: Tuple[str, ...] = ()


# ============================================================================
# MBTT & DISRUPTION RESULTS
# ============================================================================

@dataclass(frozen=True)
class MBTTResult:
    """
    Minimum base turnaround: either a number of hours (single-day trips)
    or a number of local nights at home base.
    """
    local_nights: int
    rest_hours: Optional[float]
    description: str
    reason: str = ""

    @property
    def rank(self) -> Tuple[int, float]:
        """Ordering key: any local night outranks an hours-only requirement"""
        return (self.local_nights, self.rest_hours or 0.0)


@dataclass(frozen=True)
class ClauseValue:
    """One FD10.2.1 clause. value None means the clause does not apply (N/A)."""
    clause: str
    description: str
    value: Optional[float]
    is_selected: bool = False

    @property
    def display(self) -> str:
        return "N/A" if self.value is None else f"{self.value:.1f} hrs"


@dataclass(frozen=True)
class DisruptionRestResult:
    clause_i: ClauseValue
    clause_ii: ClauseValue
    clause_iii: ClauseValue
    selected_hours: float
    timezone_adjustment_hours: float
    final_hours: float
    notes: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def clauses(self) -> Tuple[ClauseValue, ...]:
        return (self.clause_i, self.clause_ii, self.clause_iii)

    @property
    def selected_clause(self) -> ClauseValue:
        return next(c for c in self.clauses if c.is_selected)
