"""
FRMS Rule Tables
================

Static regulatory tables, built once at import:
- Short-haul sign-on windows and sector-banded duty limits (FD13.1 / FD23.1)
- Short-haul flight time and augmented crew limits (FD13.3-13.4 / FD23.3-23.4)
- Long-haul duty limit rows, planning (FD3.1) and operational (FD10.1)
- Rest requirement tables, operating and deadheading
- Expected duty-hour bands per crew complement and limit type
- Relevant sectors (FD3.4) and MBTT scales (FD9)

Every duty-hour table is a BandTable, so ordering and non-overlap are
checked when this module is imported.
"""

from dataclasses import dataclass
from typing import Dict, Tuple
import itertools

from frms_models.data_models import (
    CrewComplement, FRMSLimitType, RestFacilityClass, ShortHaulStartWindow,
    LongHaulSignOnWindow, DutyHoursBand, RestRequirementRow, SignOnTimeRange,
    SpecialScenarioRules,
)
from frms_core.bands import BandTable, hhmm_band, require_exhaustive


# ============================================================================
# SHORT-HAUL (A320/B737)
# ============================================================================

SH_START_WINDOWS: BandTable = BandTable([
    (hhmm_band(ShortHaulStartWindow.EARLY.value, 500, 1459), ShortHaulStartWindow.EARLY),
    (hhmm_band(ShortHaulStartWindow.AFTERNOON.value, 1500, 1959), ShortHaulStartWindow.AFTERNOON),
    (hhmm_band(ShortHaulStartWindow.NIGHT.value, 2000, 459), ShortHaulStartWindow.NIGHT),
])

# Max duty hours for (1-4 sectors, 5 sectors, 6 sectors)
SH_TWO_PILOT_DUTY_LIMITS: Dict[FRMSLimitType, Dict[ShortHaulStartWindow, Tuple[float, float, float]]] = {
    FRMSLimitType.OPERATIONAL: {              # FD23.1
        ShortHaulStartWindow.EARLY: (14.0, 13.0, 12.0),
        ShortHaulStartWindow.AFTERNOON: (13.0, 12.0, 11.0),
        ShortHaulStartWindow.NIGHT: (12.0, 12.0, 11.0),
    },
    FRMSLimitType.PLANNING: {                 # FD13.1, 5 and 6 sectors share a column
        ShortHaulStartWindow.EARLY: (12.0, 11.0, 11.0),
        ShortHaulStartWindow.AFTERNOON: (11.0, 10.0, 10.0),
        ShortHaulStartWindow.NIGHT: (10.0, 10.0, 10.0),
    },
}

SH_FLIGHT_TIME_SINGLE_SECTOR = 10.5
SH_FLIGHT_TIME_MULTI_SECTOR = 10.0
SH_FLIGHT_TIME_DARKNESS = 9.5
SH_DARKNESS_THRESHOLD_HOURS = 7.0
SH_AUGMENTED_FLIGHT_TIME = 10.5

SH_MAX_FLIGHT_TIME: Dict[FRMSLimitType, float] = {
    FRMSLimitType.OPERATIONAL: 10.5,
    FRMSLimitType.PLANNING: 10.0,
}

SH_FLIGHT_TIME_DESCRIPTION: Dict[FRMSLimitType, str] = {
    FRMSLimitType.OPERATIONAL: "10.5 hrs (1 Sector) or 10 hrs (Multi Sectors) or 9.5hrs (> 7 hrs night)",
    FRMSLimitType.PLANNING: "10 hrs (9.5 hrs if >7 hrs night)",
}


@dataclass(frozen=True)
class ShortHaulAugmentedLimit:
    """Augmented crew limit (FD13.1 / FD23.1), same for planning and operational"""
    rest_facility: str
    max_duty_hours: float
    max_sectors: int
    sector_note: str = ""


SH_AUGMENTED_SCREENED_SEAT = ShortHaulAugmentedLimit(
    rest_facility="Separate screened seat",
    max_duty_hours=16.0,
    max_sectors=2,
    sector_note="Max 2 sectors if duty period exceeds 14 hrs",
)
SH_AUGMENTED_PASSENGER_SEAT = ShortHaulAugmentedLimit(
    rest_facility="Passenger compartment seat",
    max_duty_hours=14.0,
    max_sectors=6,
)

SH_MIN_REST_HOURS = 10.0
SH_REDUCED_REST_HOURS = 9.0
SH_REDUCED_REST_CONDITIONS = f"{SH_REDUCED_REST_HOURS:g} hours if rest includes 2200-0600 local time"
SH_AUGMENTED_LONG_DUTY_REST_HOURS = 24.0

SH_SPECIAL_SCENARIOS = SpecialScenarioRules(
    simulator=(
        "Sign-off ≤2000 day before simulator (Australia)",
        "12 hrs rest before simulator",
        "Cannot have 2 duty periods in same 24-hour period (Australia)",
    ),
    days_off=(
        "Complete ≤2230 local (previous day)",
        "Earliest sign-on 0500 local",
        "Minimum 36 hrs",
        "May extend to 2300 local for operational disruptions",
    ),
    annual_leave=(
        "Latest duty end: 2000 (day before) - Australia, 1800 (≥7 days) - NZ",
        "Earliest duty start: 0800 (day after) - Australia only",
    ),
    reserve=(
        "After callout: MAX(12 hours, actual duty length)",
        "Without callout: 10 hours free of all duty (operational)",
        "Between reserve periods: MAX(12 hours, previous duty length)",
    ),
    deadheading=(
        "Deadheading included in total duty for rest calculation",
        "Last sector deadheading doesn't count; before flight duty does count",
    ),
    deadheading_absolute_maximum_hours=16.0,
)


# ============================================================================
# LONG-HAUL (A380/A330/B787) DUTY LIMITS
# ============================================================================

_FLIGHT_DECK_NOTE = "Max 8 hrs continuous & 14 hrs total on flight deck"
_PAX_SEAT_NOTE = "8 consecutive hrs of active duty in flight deck"
_AUGMENTED_SECTORS = "Max 2 sectors if Scheduled Duty > 14 hrs"
_FOUR_PILOT_PLANNING_NOTE = (
    "A pilot cannot spend more than 8 continuous hours on duty in the flight deck "
    "and no more than 14 hours total duty in the flight deck."
)
_TWO_PILOT_PLANNING_SECTORS = "1 if any sector flight time > 6, otherwise 4"


def _two_pilot_planning_row(window: LongHaulSignOnWindow, duty: float, flight: float,
                            sectors: str = _TWO_PILOT_PLANNING_SECTORS,
                            requirements: str = None) -> SignOnTimeRange:
    rest = 11.0 if flight < 8.5 else 22.0
    return SignOnTimeRange(
        label=window.value, max_duty_hours=duty, max_flight_hours=flight,
        pre_rest_hours=rest, post_rest_hours=rest, sector_limit=sectors,
        requirements=requirements, sign_on_window=window,
        rest_facility=RestFacilityClass.NONE,
    )


LH_DUTY_LIMITS: Dict[FRMSLimitType, Dict[CrewComplement, Tuple[SignOnTimeRange, ...]]] = {
    FRMSLimitType.OPERATIONAL: {   # FD10.1
        CrewComplement.TWO_PILOT: (
            SignOnTimeRange(
                label="All sign-on times", max_duty_hours=11.0, max_duty_discretion_hours=12.0,
                max_flight_hours=10.5, pre_rest_hours=10.0, post_rest_hours=10.0,
                flight_time_note="Max Flight Time: 10.5 hrs\n9.5 hrs if > 7 hrs darkness\n10 hrs if > 1 sector",
                rest_facility=RestFacilityClass.NONE,
            ),
        ),
        CrewComplement.THREE_PILOT: (
            SignOnTimeRange(
                label="Class 2 Rest", max_duty_hours=16.0, max_flight_hours=14.0,
                pre_rest_hours=12.0, post_rest_hours=12.0, sector_limit=_AUGMENTED_SECTORS,
                flight_time_note=_FLIGHT_DECK_NOTE, rest_facility=RestFacilityClass.CLASS_2,
            ),
            SignOnTimeRange(
                label="Class 1 Rest", max_duty_hours=18.0, max_flight_hours=14.0,
                pre_rest_hours=12.0, post_rest_hours=24.0, sector_limit=_AUGMENTED_SECTORS,
                flight_time_note=_FLIGHT_DECK_NOTE, rest_facility=RestFacilityClass.CLASS_1,
            ),
        ),
        CrewComplement.FOUR_PILOT: (
            SignOnTimeRange(
                label="Seats in Passenger Compartment", max_duty_hours=14.0, max_flight_hours=8.0,
                pre_rest_hours=12.0, post_rest_hours=12.0, flight_time_note=_PAX_SEAT_NOTE,
                rest_facility=RestFacilityClass.SEAT_IN_PASSENGER_COMPARTMENT,
            ),
            SignOnTimeRange(
                label="2 × Class 2 Rest", max_duty_hours=16.0, max_flight_hours=14.0,
                pre_rest_hours=12.0, post_rest_hours=12.0, sector_limit=_AUGMENTED_SECTORS,
                flight_time_note=_FLIGHT_DECK_NOTE, rest_facility=RestFacilityClass.TWO_CLASS_2,
            ),
            SignOnTimeRange(
                label="1 × Class 1 & 1 × Class 2 Rest", max_duty_hours=20.0, max_flight_hours=14.0,
                pre_rest_hours=12.0, post_rest_hours=24.0, sector_limit=_AUGMENTED_SECTORS,
                flight_time_note=_FLIGHT_DECK_NOTE,
                requirements="Priority higher class for landing crew",
                rest_facility=RestFacilityClass.ONE_CLASS_1_ONE_CLASS_2,
            ),
            SignOnTimeRange(
                label="2 × Class 1 Rest", max_duty_hours=20.0, max_flight_hours=14.0,
                pre_rest_hours=12.0, post_rest_hours=24.0, sector_limit=_AUGMENTED_SECTORS,
                flight_time_note=_FLIGHT_DECK_NOTE, rest_facility=RestFacilityClass.TWO_CLASS_1,
            ),
        ),
    },
    FRMSLimitType.PLANNING: {      # FD3.1
        CrewComplement.TWO_PILOT: (
            _two_pilot_planning_row(LongHaulSignOnWindow.W0500_0759, 11.0, 8.0),
            _two_pilot_planning_row(LongHaulSignOnWindow.W0800_1359, 11.0, 8.5),
            _two_pilot_planning_row(LongHaulSignOnWindow.W0800_1359, 12.0, 9.5,
                                    sectors="1 DAY PATTERN ONLY, maximum 4 sectors",
                                    requirements="Day Pattern Only"),
            _two_pilot_planning_row(LongHaulSignOnWindow.W1400_1559, 11.0, 8.5),
            _two_pilot_planning_row(
                LongHaulSignOnWindow.W1600_0459, 10.0, 8.0,
                sectors="1 if any sector flight time > 6; 2 if sign-on 2100–0300 LT; "
                        "2 if any sector flight time > 2, otherwise 3"),
        ),
        CrewComplement.THREE_PILOT: (
            SignOnTimeRange(
                label="Class 2 Rest", max_duty_hours=12.0, max_flight_hours=8.5,
                pre_rest_hours=12.0, post_rest_hours=12.0,
                sector_limit="3 if duty period > 11, otherwise maximum 4",
                requirements=_FLIGHT_DECK_NOTE, rest_facility=RestFacilityClass.CLASS_2,
            ),
            SignOnTimeRange(
                label="Class 1 Rest", max_duty_hours=14.0, max_flight_hours=12.5,
                pre_rest_hours=12.0, post_rest_hours=18.0,
                sector_limit="3 if duty period > 11, otherwise maximum 4",
                requirements=_FLIGHT_DECK_NOTE, rest_facility=RestFacilityClass.CLASS_1,
            ),
        ),
        CrewComplement.FOUR_PILOT: (
            SignOnTimeRange(
                label="2 × Class 2 Rest", max_duty_hours=16.0, max_flight_hours=14.0,
                pre_rest_hours=12.0, post_rest_hours=12.0,
                sector_limit="≤ 2 rostered sectors if duty period was scheduled to exceed 14 hrs",
                flight_time_note=_FOUR_PILOT_PLANNING_NOTE, rest_facility=RestFacilityClass.TWO_CLASS_2,
            ),
            SignOnTimeRange(
                label="1 × Class 1 & 1 × Class 2 Rest", max_duty_hours=17.5, max_flight_hours=14.0,
                pre_rest_hours=22.0, post_rest_hours=22.0,
                sector_limit="≤ 2 rostered sectors if duty period was scheduled to exceed 14 hrs",
                flight_time_note=_FOUR_PILOT_PLANNING_NOTE,
                rest_facility=RestFacilityClass.ONE_CLASS_1_ONE_CLASS_2,
            ),
            SignOnTimeRange(
                label="2 × Class 1 Rest", max_duty_hours=20.0, max_flight_hours=14.0,
                pre_rest_hours=22.0, post_rest_hours=22.0,
                sector_limit="1 rostered sector if duty period was scheduled to exceed 16 hours",
                flight_time_note=_FOUR_PILOT_PLANNING_NOTE, rest_facility=RestFacilityClass.TWO_CLASS_1,
            ),
        ),
    },
}

# Four-pilot two-class-1 extended duty, only under FD3.4 (relevant sectors)
LH_EXTENDED_DUTY_ROWS: Dict[FRMSLimitType, Tuple[SignOnTimeRange, ...]] = {
    FRMSLimitType.OPERATIONAL: (
        SignOnTimeRange(
            label="2 × Class 1 Rest (>18 hrs — FD3.4)", max_duty_hours=21.0, max_flight_hours=14.0,
            pre_rest_hours=22.0, post_rest_hours=27.0, flight_time_note=_FLIGHT_DECK_NOTE,
            requirements="A380 & B787 only. Relevant Sector disruption limits apply.",
            rest_facility=RestFacilityClass.TWO_CLASS_1,
        ),
    ),
    FRMSLimitType.PLANNING: (),
}

LH_DEADHEAD_LIMITS: Tuple[SignOnTimeRange, ...] = (
    SignOnTimeRange(label="Solely deadhead", max_duty_hours=26.0, sector_limit="2"),
    SignOnTimeRange(
        label="Operate then deadhead (other than to home base or posting)", max_duty_hours=14.5,
        sector_limit="additional paxing sector above operate only limit",
        requirements="Operate portion: same duty period and flight time limits as operate only",
    ),
    SignOnTimeRange(
        label="Operate then deadhead (to home base or posting)", max_duty_hours=18.0,
        sector_limit="additional paxing sector above operate only limit",
        requirements="Operate portion: same duty period and flight time limits as operate only",
    ),
)

for _limit_type in FRMSLimitType:
    require_exhaustive(LH_DUTY_LIMITS[_limit_type], CrewComplement, f"LH_DUTY_LIMITS[{_limit_type.name}]")
require_exhaustive(LH_DUTY_LIMITS, FRMSLimitType, "LH_DUTY_LIMITS")
require_exhaustive(LH_EXTENDED_DUTY_ROWS, FRMSLimitType, "LH_EXTENDED_DUTY_ROWS")
require_exhaustive(SH_TWO_PILOT_DUTY_LIMITS, FRMSLimitType, "SH_TWO_PILOT_DUTY_LIMITS")


# ============================================================================
# EXPECTED DUTY-HOUR BANDS
# ============================================================================

def _band(label: str, lower: float = None, upper: float = None) -> DutyHoursBand:
    return DutyHoursBand(label=label, lower=lower, upper=upper)


LE_11 = _band("≤ 11", upper=11.0)
GT_11 = _band("> 11", lower=11.0)
GT_11_LE_12 = _band("> 11 ≤ 12", lower=11.0, upper=12.0)
LE_12 = _band("≤ 12", upper=12.0)
GT_12 = _band("> 12", lower=12.0)
GT_12_LE_14 = _band("> 12 ≤ 14", lower=12.0, upper=14.0)
LE_14 = _band("≤ 14", upper=14.0)
GT_14_LE_16 = _band("> 14 ≤ 16", lower=14.0, upper=16.0)
LE_16 = _band("≤ 16", upper=16.0)
GT_16 = _band("> 16", lower=16.0)
GT_16_LE_18 = _band("> 16 ≤ 18", lower=16.0, upper=18.0)
LE_18 = _band("≤ 18", upper=18.0)
GT_18 = _band("> 18", lower=18.0)
ANY_DUTY = _band("—")

# Each list refines every rest table used for that combination
EXPECTED_DUTY_BANDS: Dict[Tuple[CrewComplement, FRMSLimitType], Tuple[DutyHoursBand, ...]] = {
    (CrewComplement.TWO_PILOT, FRMSLimitType.PLANNING): (LE_11, GT_11),
    (CrewComplement.TWO_PILOT, FRMSLimitType.OPERATIONAL): (LE_11, GT_11_LE_12, GT_12),
    (CrewComplement.THREE_PILOT, FRMSLimitType.PLANNING): (LE_12, GT_12),
    (CrewComplement.THREE_PILOT, FRMSLimitType.OPERATIONAL): (LE_16, GT_16),
    (CrewComplement.FOUR_PILOT, FRMSLimitType.PLANNING): (LE_12, GT_12_LE_14, GT_14_LE_16, GT_16),
    (CrewComplement.FOUR_PILOT, FRMSLimitType.OPERATIONAL): (LE_16, GT_16_LE_18, GT_18),
}
DEADHEAD_DUTY_BANDS: Tuple[DutyHoursBand, ...] = (LE_12, GT_12)

for _key in itertools.product(CrewComplement, FRMSLimitType):
    if _key not in EXPECTED_DUTY_BANDS:
        raise ValueError(f"EXPECTED_DUTY_BANDS has no entry for {_key}")
    BandTable([(band, band) for band in EXPECTED_DUTY_BANDS[_key]])


# ============================================================================
# RELEVANT SECTORS (FD3.4)
# ============================================================================

RELEVANT_SECTORS: Tuple[str, ...] = (
    "Any planned duty period > 18 hrs",
    "SYD-DFW",
    "MEL-DFW",
    "PER-LHR",
    "AKL-JFK",
)

RELEVANT_SECTOR_PRE_DUTY_REST_HOURS = 22.0
RELEVANT_SECTOR_POST_DUTY_REST_HOURS = 27.0

RELEVANT_SECTOR_PRE_DUTY_ROWS: Tuple[RestRequirementRow, ...] = (
    RestRequirementRow("> 18", RELEVANT_SECTOR_PRE_DUTY_REST_HOURS, "Relevant Sector (FD3.4)"),
)

RELEVANT_SECTOR_POST_DUTY_ROWS: Tuple[RestRequirementRow, ...] = (
    RestRequirementRow("> 18", 27.0, "Captain OR First Officer"),
    RestRequirementRow("> 20", 36.0, "Captain OR First Officer"),
    RestRequirementRow("> 18", 36.0, "Captain AND First Officer"),
    RestRequirementRow("> 18", 24.0, "Next sector flight time < 4 hrs (36 hrs before any Relevant Sector)"),
)

RELEVANT_SECTOR_INBOUND_ROWS: Tuple[RestRequirementRow, ...] = (
    RestRequirementRow("Inbound AU/NZ", 36.0, "Same time zone destination"),
    RestRequirementRow("Inbound AU/NZ", 22.0, "Domestic or trans-Tasman"),
)

RELEVANT_SECTOR_MBTT_NOTE = "MBTT in FD9 will be increased by 1 local night (FD3.4.2)"


# ============================================================================
# REST REQUIREMENT TABLES
# ============================================================================

def _rows(label: str, *entries) -> Tuple[RestRequirementRow, ...]:
    """entries are hours or (hours, condition) pairs"""
    rows = []
    for entry in entries:
        if isinstance(entry, tuple):
            rows.append(RestRequirementRow(label, entry[0], entry[1]))
        else:
            rows.append(RestRequirementRow(label, entry))
    return tuple(rows)


@dataclass(frozen=True)
class RestTable:
    """Banded rest rows plus rows that apply regardless of duty length"""
    bands: BandTable
    general_rows: Tuple[RestRequirementRow, ...] = ()


_PAX_TO_BASE_11 = "operate ≤ 11 duty then pax to base or posting"
_PAX_TO_BASE_12 = "operate ≤ 12 duty then pax to base or posting"
_PAX_TO_BASE_14 = "operate ≤ 14 duty then pax to base or posting"
_HOME_BASE_SHORT = "next duty is to home base or posting augmented crew and duty period < 5 hours"
_WEST_COAST = "within West Coast North America"
_OPERATIONAL_REDUCED_PRE = (
    "If 12 hours rest was rostered between 2 consecutive duties and the first duty "
    "does not exceed 11 hours and the total of both duties do not exceed 24 hours"
)

TWO_PILOT_EXTENSION_FORMULA = (
    "10 + 1 additional hour for each 15 minutes or part thereof when duty exceeded 11 hours"
)
TWO_PILOT_EXTENSION_BAND = GT_11_LE_12

# Keyed by (complement, limit type) -> (pre-duty table, post-duty table)
OPERATING_REST_TABLES: Dict[Tuple[CrewComplement, FRMSLimitType], Tuple[RestTable, RestTable]] = {
    (CrewComplement.TWO_PILOT, FRMSLimitType.PLANNING): (
        RestTable(BandTable([
            (LE_11, _rows("≤ 11", (11.0, "flight time < 8"), 22.0)),
            (GT_11, _rows("> 11", (11.0, _PAX_TO_BASE_11), 22.0)),
        ])),
        RestTable(BandTable([
            (LE_11, _rows("≤ 11", (11.0, "flight time < 8"), 22.0)),
            (GT_11, _rows("> 11", 22.0)),
        ])),
    ),
    (CrewComplement.TWO_PILOT, FRMSLimitType.OPERATIONAL): (
        RestTable(
            BandTable([
                (LE_11, _rows("≤ 11", 10.0)),
                (GT_11, _rows("> 11", 12.0)),
            ]),
            general_rows=(RestRequirementRow(
                "Within a 7 day period", None,
                "1 continuous period embracing 2200 and 0600 on 2 consecutive nights"),),
        ),
        RestTable(BandTable([
            (LE_11, _rows("≤ 11", 10.0)),
            (GT_11_LE_12, (RestRequirementRow(
                "DP > 11 or FT > 8", None,
                "If next duty is solely deadheading, only 12 hours rest is required",
                TWO_PILOT_EXTENSION_FORMULA),)),
            (GT_12, _rows("DP > 12 or FT > 9", 24.0)),
        ])),
    ),
    (CrewComplement.THREE_PILOT, FRMSLimitType.PLANNING): (
        RestTable(BandTable([
            (LE_12, _rows("≤ 12", 12.0)),
            (GT_12, _rows("> 12", (12.0, _PAX_TO_BASE_12), 22.0)),
        ])),
        RestTable(BandTable([
            (LE_12, _rows("≤ 12", (12.0, "flight time < 9"), 18.0)),
            (GT_12, _rows("> 12", (22.0, "acclimated crew"), 32.0)),
        ])),
    ),
    (CrewComplement.THREE_PILOT, FRMSLimitType.OPERATIONAL): (
        RestTable(BandTable([
            (ANY_DUTY, _rows("—", (10.0, _OPERATIONAL_REDUCED_PRE), 12.0)),
        ])),
        RestTable(BandTable([
            (LE_16, _rows("≤ 16", 12.0)),
            (GT_16, _rows("> 16", 24.0)),
        ])),
    ),
    (CrewComplement.FOUR_PILOT, FRMSLimitType.PLANNING): (
        RestTable(BandTable([
            (LE_14, _rows("≤ 14", 12.0)),
            (GT_14_LE_16, _rows("> 14 ≤ 16", (12.0, _PAX_TO_BASE_14), 22.0)),
            (GT_16, _rows("> 16", (32.0, _WEST_COAST), 48.0,
                          (22.0, "Only if prior duty was deadheading."))),
        ])),
        RestTable(BandTable([
            (LE_12, _rows("≤ 12", (12.0, "flight time ≤ 9.5"), 18.0)),
            (GT_12_LE_14, _rows("> 12", (22.0, "acclimated crew OR between two 4 Pilot duties OR "
                                         + _HOME_BASE_SHORT), 32.0)),
            (GT_14_LE_16, _rows("> 14", (22.0, "acclimated crew OR " + _HOME_BASE_SHORT), 32.0)),
            (GT_16, _rows("> 16", (22.0, _HOME_BASE_SHORT), (32.0, _WEST_COAST), 48.0)),
        ])),
    ),
    (CrewComplement.FOUR_PILOT, FRMSLimitType.OPERATIONAL): (
        RestTable(BandTable([
            (LE_18, _rows("—", (10.0, _OPERATIONAL_REDUCED_PRE), 12.0)),
            (GT_18, RELEVANT_SECTOR_PRE_DUTY_ROWS),
        ])),
        RestTable(BandTable([
            (LE_16, _rows("≤ 16", 12.0)),
            (GT_16_LE_18, _rows("> 16", 24.0)),
            (GT_18, RELEVANT_SECTOR_POST_DUTY_ROWS),
        ])),
    ),
}

for _key in itertools.product(CrewComplement, FRMSLimitType):
    if _key not in OPERATING_REST_TABLES:
        raise ValueError(f"OPERATING_REST_TABLES has no entry for {_key}")

# Deadheading (FD3.1), also applied on the day: "if the next duty period is
# solely deadheading then the minimum pre-duty deadheading limits apply"
DEADHEAD_REST_TABLES: Tuple[RestTable, RestTable] = (
    RestTable(BandTable([
        (LE_12, _rows("≤ 12", 11.0)),
        (GT_12, _rows("> 12", (12.0, "Pax to base or posting"), 18.0)),
    ])),
    RestTable(BandTable([
        (LE_12, _rows("≤ 12", 11.0)),
        (GT_12, _rows("> 12", 18.0)),
    ])),
)


# ============================================================================
# MBTT (FD9)
# ============================================================================

MBTT_SINGLE_DAY_REST_HOURS = 12.0

# Bands over days away -> local nights (0 means the single-day hours value)
MBTT_DAYS_AWAY_NIGHTS: BandTable = BandTable([
    (_band("1 day", upper=1.0), 0),
    (_band("2-4 days", lower=1.0, upper=4.0), 1),
    (_band("5-8 days", lower=4.0, upper=8.0), 2),
    (_band("9-12 days", lower=8.0, upper=12.0), 3),
    (_band("> 12 days", lower=12.0), 4),
])

# Bands over credited flight hours -> minimum local nights
MBTT_CREDITED_HOURS_NIGHTS: BandTable = BandTable([
    (_band("≤ 20 hrs", upper=20.0), 0),
    (_band("> 20 hrs", lower=20.0, upper=40.0), 2),
    (_band("> 40 hrs", lower=40.0, upper=60.0), 3),
    (_band("> 60 hrs", lower=60.0), 4),
])
