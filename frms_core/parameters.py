"""
Configuration & Parameters for the FRMS Engine
==============================================

Configuration dataclasses and fleet reference data:
- ComplianceThresholds: warning threshold for the compliance classifier
- TimeOfDayThresholds: early start / late night / back-of-clock definitions
- ConsecutiveDutyLimits: short-haul streak ceilings (FD12.2)
- FleetConfiguration: per-fleet rolling windows and ceilings
- EngineConfig: master configuration container

Fleet configurations are static and shared read-only between callers.

References: FRMS FD3 / FD10 (long-haul), FD12 / FD13 / FD23 (short-haul)
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple, Union
import itertools
import logging

import airportsdata
import pytz

from frms_models.data_models import (
    FRMSFleet, CrewComplement, RestFacilityClass, FRMSLimitType,
)

logger = logging.getLogger(__name__)

# Module-level load (cached)
_IATA_DB = airportsdata.load('IATA')

DEFAULT_HOME_BASE = 'SYD'
DEFAULT_HOME_TIMEZONE = 'Australia/Sydney'


# ============================================================================
# ERRORS
# ============================================================================

class MissingFleetConfigurationError(KeyError):
    """No FleetConfiguration exists for the requested fleet identifier"""


class InvalidRestFacilityError(ValueError):
    """Rest facility is not legal for the crew complement and limit type"""


# ============================================================================
# THRESHOLDS
# ============================================================================

@dataclass
class ComplianceThresholds:
    """Compliance classifier configuration"""

    # Fraction of a ceiling at which a total is flagged as a warning
    warning_threshold: float = 0.9

    def __post_init__(self):
        if not 0.0 < self.warning_threshold <= 1.0:
            raise ValueError(
                f"warning_threshold must be in (0, 1], got {self.warning_threshold}"
            )


@dataclass(frozen=True)
class TimeOfDayThresholds:
    """Local time-of-day definitions, evaluated in the home base timezone"""

    # Early start: sign-on before 0700 local
    early_start_before_hour: int = 7

    # Late night: more than 30 min of duty between 2300-0530 local
    late_night_start: Tuple[int, int] = (23, 0)
    late_night_end: Tuple[int, int] = (5, 30)
    late_night_min_minutes: int = 30

    # Back of clock: at least 2 hrs of duty between 0100-0459 local
    back_of_clock_start: Tuple[int, int] = (1, 0)
    back_of_clock_end: Tuple[int, int] = (5, 0)
    back_of_clock_min_minutes: int = 120

    # Next sign-on floor after a back-of-clock duty (Australia)
    back_of_clock_floor_hour: int = 10


@dataclass(frozen=True)
class ConsecutiveDutyLimits:
    """Short-haul consecutive duty ceilings (FD12.2)"""
    max_consecutive_duties: int = 6
    max_duty_days_in_11_days: int = 9
    max_consecutive_early_starts: int = 4
    max_consecutive_late_nights: int = 4
    max_late_night_duty_hours_7_nights: float = 40.0
    can_use_5_night_exception: bool = True


# ============================================================================
# FLEET CONFIGURATION
# ============================================================================

@dataclass(frozen=True)
class FleetConfiguration:
    """Rolling windows and statutory ceilings for one fleet"""

    fleet: FRMSFleet
    flight_time_window_days: int
    max_flight_time_window: float
    max_flight_time_365_days: float
    max_flight_time_7_days: Optional[float] = None
    max_duty_time_7_days: float = 60.0
    max_duty_time_14_days: float = 100.0
    consecutive_limits: Optional[ConsecutiveDutyLimits] = None

    home_base: str = DEFAULT_HOME_BASE
    home_base_timezone: str = DEFAULT_HOME_TIMEZONE

    # Duty reconstruction from sector times
    sign_on_minutes_before_departure: int = 60
    sign_off_minutes_after_arrival: int = 15

    time_of_day: TimeOfDayThresholds = field(default_factory=TimeOfDayThresholds)

    @property
    def fleet_id(self) -> str:
        return self.fleet.value

    @property
    def is_long_haul(self) -> bool:
        return self.fleet.is_long_haul

    @property
    def tz(self):
        return pytz.timezone(self.home_base_timezone)

    def for_home_base(self, home_base: str) -> 'FleetConfiguration':
        """Copy of this configuration based at another airport"""
        code = home_base.upper()
        return replace(self, home_base=code,
                       home_base_timezone=resolve_home_base_timezone(code))


SHORT_HAUL_CONFIGURATION = FleetConfiguration(
    fleet=FRMSFleet.A320_B737,
    flight_time_window_days=28,
    max_flight_time_window=100.0,
    max_flight_time_365_days=1000.0,
    max_flight_time_7_days=None,
    consecutive_limits=ConsecutiveDutyLimits(),
    sign_off_minutes_after_arrival=15,
)

LONG_HAUL_CONFIGURATION = FleetConfiguration(
    fleet=FRMSFleet.A380_A330_B787,
    flight_time_window_days=30,
    max_flight_time_window=100.0,
    max_flight_time_365_days=900.0,
    max_flight_time_7_days=30.0,
    consecutive_limits=None,
    sign_off_minutes_after_arrival=30,
)

FLEET_CONFIGURATIONS: Dict[FRMSFleet, FleetConfiguration] = {
    FRMSFleet.A320_B737: SHORT_HAUL_CONFIGURATION,
    FRMSFleet.A380_A330_B787: LONG_HAUL_CONFIGURATION,
}


def resolve_home_base_timezone(home_base: str) -> str:
    """IANA timezone of a home base IATA code, Sydney when unknown"""
    entry = _IATA_DB.get(home_base.upper())
    if entry and entry.get('tz'):
        return entry['tz']
    logger.warning(
        f"Home base '{home_base}' not found in airportsdata ({len(_IATA_DB)} entries). "
        f"Using {DEFAULT_HOME_TIMEZONE}."
    )
    return DEFAULT_HOME_TIMEZONE


def resolve_fleet(fleet_id: Union[str, FRMSFleet]) -> FRMSFleet:
    """
    Map a fleet identifier to its FRMS fleet group.

    Accepts the group value ("A380/A330/B787"), the enum name, or a single
    aircraft type in the group ("B787").
    """
    if isinstance(fleet_id, FRMSFleet):
        return fleet_id
    key = (fleet_id or '').strip().upper()
    for fleet in FRMSFleet:
        if key in (fleet.value, fleet.name) or key in fleet.value.split('/'):
            return fleet
    raise MissingFleetConfigurationError(f"No FRMS fleet configuration for '{fleet_id}'")


def get_fleet_configuration(fleet_id: Union[str, FRMSFleet],
                            home_base: Optional[str] = None) -> FleetConfiguration:
    """
    Look up the configuration for a fleet.

    Raises MissingFleetConfigurationError for unknown fleets: that is a data
    error at the call site, not a runtime condition.
    """
    fleet = resolve_fleet(fleet_id)
    config = FLEET_CONFIGURATIONS.get(fleet)
    if config is None:
        raise MissingFleetConfigurationError(f"No FRMS fleet configuration for '{fleet_id}'")
    if home_base and home_base.upper() != config.home_base:
        return config.for_home_base(home_base)
    return config


# ============================================================================
# REST FACILITY SELECTION
# ============================================================================

VALID_REST_FACILITIES: Dict[Tuple[CrewComplement, FRMSLimitType], Tuple[RestFacilityClass, ...]] = {
    (CrewComplement.TWO_PILOT, FRMSLimitType.PLANNING): (RestFacilityClass.NONE,),
    (CrewComplement.TWO_PILOT, FRMSLimitType.OPERATIONAL): (RestFacilityClass.NONE,),
    (CrewComplement.THREE_PILOT, FRMSLimitType.PLANNING): (
        RestFacilityClass.CLASS_2,
        RestFacilityClass.CLASS_1,
    ),
    (CrewComplement.THREE_PILOT, FRMSLimitType.OPERATIONAL): (
        RestFacilityClass.CLASS_2,
        RestFacilityClass.CLASS_1,
    ),
    (CrewComplement.FOUR_PILOT, FRMSLimitType.PLANNING): (
        RestFacilityClass.TWO_CLASS_2,
        RestFacilityClass.ONE_CLASS_1_ONE_CLASS_2,
        RestFacilityClass.TWO_CLASS_1,
    ),
    (CrewComplement.FOUR_PILOT, FRMSLimitType.OPERATIONAL): (
        RestFacilityClass.SEAT_IN_PASSENGER_COMPARTMENT,
        RestFacilityClass.TWO_CLASS_2,
        RestFacilityClass.ONE_CLASS_1_ONE_CLASS_2,
        RestFacilityClass.TWO_CLASS_1,
    ),
}

for _key in itertools.product(CrewComplement, FRMSLimitType):
    if _key not in VALID_REST_FACILITIES:
        raise ValueError(f"VALID_REST_FACILITIES has no entry for {_key}")


def valid_rest_facilities(crew_complement: CrewComplement,
                          limit_type: FRMSLimitType) -> Tuple[RestFacilityClass, ...]:
    """Rest facilities that may be selected, in display order"""
    return VALID_REST_FACILITIES[(crew_complement, limit_type)]


def validate_rest_facility(crew_complement: CrewComplement,
                           limit_type: FRMSLimitType,
                           rest_facility: RestFacilityClass) -> RestFacilityClass:
    if rest_facility not in valid_rest_facilities(crew_complement, limit_type):
        raise InvalidRestFacilityError(
            f"{rest_facility.value} is not a valid rest facility for "
            f"{crew_complement.value} {limit_type.value} duty"
        )
    return rest_facility


def default_rest_facility(crew_complement: CrewComplement,
                          limit_type: FRMSLimitType) -> RestFacilityClass:
    return valid_rest_facilities(crew_complement, limit_type)[0]


# ============================================================================
# MASTER CONFIGURATION
# ============================================================================

@dataclass
class EngineConfig:
    """Master configuration container"""
    compliance: ComplianceThresholds = field(default_factory=ComplianceThresholds)
    fleets: Dict[FRMSFleet, FleetConfiguration] = field(
        default_factory=lambda: dict(FLEET_CONFIGURATIONS)
    )

    @classmethod
    def default_config(cls) -> 'EngineConfig':
        return cls()

    @classmethod
    def conservative_config(cls) -> 'EngineConfig':
        """Flags totals earlier, at 80% of each ceiling"""
        return cls(compliance=ComplianceThresholds(warning_threshold=0.8))

    def fleet_configuration(self, fleet_id: Union[str, FRMSFleet],
                            home_base: Optional[str] = None) -> FleetConfiguration:
        fleet = resolve_fleet(fleet_id)
        config = self.fleets.get(fleet)
        if config is None:
            raise MissingFleetConfigurationError(f"No FRMS fleet configuration for '{fleet_id}'")
        if home_base and home_base.upper() != config.home_base:
            return config.for_home_base(home_base)
        return config
