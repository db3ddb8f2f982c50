# logbook_parser.py - Logbook sector rows to FRMS duty records

"""
Logbook Parser - Rebuild duty periods from logged flight sectors

Supports:
- Raw logbook rows (dicts) validated with pydantic
- Sign-on / sign-off reconstruction from STD, OUT/IN or STA
- Crew complement inference from the named crew
- Grouping of consecutive sectors into one duty period

Times in a row are UTC, as HHMM or HH:MM, on the row's dd/MM/yyyy date.
"""

from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
import logging

import airportsdata
import pytz
from pydantic import BaseModel, ValidationError

from frms_models.data_models import DutyRecord, CrewComplement
from frms_core.parameters import FleetConfiguration

logger = logging.getLogger(__name__)

# Module-level load (cached)
_IATA_DB = airportsdata.load('IATA')

UTC = pytz.utc
DATE_FORMAT = "%d/%m/%Y"
MAX_GAP_BETWEEN_SECTORS = timedelta(hours=3)
EARLY_NEXT_DAY_CUTOFF = timedelta(hours=6)
DOMESTIC_POSITIONING_SIGN_ON_MINUTES = 30
ESTIMATED_DUTY_PADDING_HOURS = 1.5


# ============================================================================
# INPUT MODEL
# ============================================================================

class LogbookSector(BaseModel):
    """One logged sector as stored by the logbook"""
    date: str                            # dd/MM/yyyy
    flight_number: str = ""
    from_airport: str = ""               # IATA
    to_airport: str = ""
    aircraft_type: str = ""

    # UTC clock times, "HHMM" or "HH:MM", empty when not logged
    out_time: str = ""
    in_time: str = ""
    scheduled_departure: str = ""
    scheduled_arrival: str = ""

    block_time_hours: float = 0.0
    sim_time_hours: float = 0.0
    night_time_hours: float = 0.0
    is_positioning: bool = False

    captain_name: Optional[str] = None
    fo_name: Optional[str] = None
    so1_name: Optional[str] = None
    so2_name: Optional[str] = None

    @property
    def flight_time_hours(self) -> float:
        """Block time, or simulator time for a simulator session"""
        return self.block_time_hours if self.block_time_hours > 0 else self.sim_time_hours

    @property
    def is_simulator(self) -> bool:
        return self.block_time_hours <= 0 and self.sim_time_hours > 0

    @property
    def crew_count(self) -> int:
        names = (self.captain_name, self.fo_name, self.so1_name, self.so2_name)
        return sum(1 for name in names if name)

    @property
    def crew_complement(self) -> CrewComplement:
        return CrewComplement.from_crew_count(self.crew_count)


def is_australian_airport(code: str) -> bool:
    airport = _IATA_DB.get((code or "").upper())
    return airport is not None and airport.get('country') == 'AU'


# ============================================================================
# SECTOR DUTY
# ============================================================================

class _SectorDuty:
    """Sign-on/sign-off window reconstructed for a single sector"""

    def __init__(self, sector: LogbookSector, sign_on: datetime, sign_off: datetime):
        self.sector = sector
        self.sign_on = sign_on
        self.sign_off = sign_off


def _parse_clock(day: date, value: str) -> Optional[datetime]:
    digits = (value or "").replace(":", "").strip()
    if len(digits) != 4 or not digits.isdigit():
        return None
    hour, minute = int(digits[:2]), int(digits[2:])
    if hour > 23 or minute > 59:
        return None
    return UTC.localize(datetime.combine(day, time(hour, minute)))


class LogbookParser:
    """
    Group logbook sectors into FRMS duty records.

    Example:
        parser = LogbookParser(get_fleet_configuration("A320/B737"))
        records, skipped = parser.group_into_duties(rows, as_of=now)
    """

    def __init__(self, fleet: FleetConfiguration):
        self.fleet = fleet
        self.tz = pytz.timezone(fleet.home_base_timezone)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_rows(self, rows: Iterable[Union[Dict[str, Any], LogbookSector]]
                      ) -> Tuple[List[LogbookSector], int]:
        """Validated sectors and the number of rows rejected"""
        sectors, rejected = [], 0
        for row in rows:
            if isinstance(row, LogbookSector):
                sectors.append(row)
                continue
            try:
                sectors.append(LogbookSector.model_validate(row))
            except ValidationError as e:
                rejected += 1
                logger.warning(f"Skipping logbook row: {e.error_count()} validation error(s)")
        return sectors, rejected

    # ------------------------------------------------------------------
    # Sign-on / sign-off
    # ------------------------------------------------------------------

    def sign_on_margin(self, sector: LogbookSector, first_of_day: bool) -> timedelta:
        """60 minutes before departure; 30 for a first-of-day domestic positioning sector"""
        minutes = self.fleet.sign_on_minutes_before_departure
        if (first_of_day and sector.is_positioning
                and is_australian_airport(sector.from_airport)
                and is_australian_airport(sector.to_airport)):
            minutes = DOMESTIC_POSITIONING_SIGN_ON_MINUTES
        return timedelta(minutes=minutes)

    def sector_duty(self, sector: LogbookSector, first_of_day: bool = False) -> Optional[_SectorDuty]:
        """
        Duty window for one sector, or None when it cannot be placed.

        Sign-on uses STD when logged, else OUT. Sign-off is IN (else STA)
        plus the fleet margin. Arrivals earlier than departure crossed midnight.
        """
        try:
            day = datetime.strptime(sector.date.strip(), DATE_FORMAT).date()
        except ValueError:
            logger.warning(f"Skipping sector {sector.flight_number or '?'}: invalid date '{sector.date}'")
            return None

        flight_time = sector.flight_time_hours
        if flight_time <= 0 and not sector.is_positioning:
            return None

        margin_on = self.sign_on_margin(sector, first_of_day)
        margin_off = timedelta(minutes=self.fleet.sign_off_minutes_after_arrival)
        std = _parse_clock(day, sector.scheduled_departure)

        if sector.out_time and sector.in_time:
            out_time = _parse_clock(day, sector.out_time)
            in_time = _parse_clock(day, sector.in_time)
            if out_time is None or in_time is None:
                logger.warning(
                    f"Skipping sector on {sector.date}: can't parse "
                    f"OUT({sector.out_time})/IN({sector.in_time})"
                )
                return None
            if in_time < out_time:
                in_time += timedelta(days=1)
            departure = std or out_time
            return _SectorDuty(sector, departure - margin_on, in_time + margin_off)

        sta = _parse_clock(day, sector.scheduled_arrival)
        if std is not None and sta is not None:
            if sta < std:
                sta += timedelta(days=1)
            return _SectorDuty(sector, std - margin_on, sta + margin_off)

        if std is not None:
            sign_on = std - margin_on
            estimated = timedelta(hours=flight_time) + margin_off
            return _SectorDuty(sector, sign_on, sign_on + estimated)

        # No times logged (simulators, rostered sectors): midnight UTC plus padding
        sign_on = UTC.localize(datetime.combine(day, time(0, 0)))
        padding = timedelta(hours=flight_time + ESTIMATED_DUTY_PADDING_HOURS)
        return _SectorDuty(sector, sign_on, sign_on + padding)

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------

    def _same_duty(self, current: List[_SectorDuty], candidate: _SectorDuty) -> bool:
        # Sign-on and sign-off margins overlap on short turnarounds
        if candidate.sign_on < current[0].sign_on:
            return False
        gap = candidate.sign_on - max(item.sign_off for item in current)
        if gap > MAX_GAP_BETWEEN_SECTORS:
            return False

        first_day = current[0].sign_on.astimezone(self.tz).date()
        candidate_local = candidate.sign_on.astimezone(self.tz)
        if candidate_local.date() == first_day:
            return True
        next_day = first_day + timedelta(days=1)
        next_midnight = self.tz.localize(datetime.combine(next_day, time(0, 0)))
        return (candidate_local.date() == next_day
                and candidate.sign_on < next_midnight + EARLY_NEXT_DAY_CUTOFF)

    def _consolidate(self, group: List[_SectorDuty]) -> DutyRecord:
        first = group[0]
        sectors = [item.sector for item in group]
        return DutyRecord.from_times(
            first.sign_on,
            max(item.sign_off for item in group),
            self.fleet.home_base_timezone,
            sectors=len(group),
            flight_time_hours=sum(s.flight_time_hours for s in sectors),
            night_time_hours=sum(s.night_time_hours for s in sectors),
            fleet_id=self.fleet.fleet_id,
            is_positioning=all(s.is_positioning for s in sectors),
            is_simulator=all(s.is_simulator for s in sectors),
            crew_complement=first.sector.crew_complement,
        )

    def group_into_duties(self, rows: Iterable[Union[Dict[str, Any], LogbookSector]],
                          as_of: Optional[datetime] = None) -> Tuple[List[DutyRecord], int]:
        """
        Rebuild duty records from logbook rows.

        Returns (records in sign-on order, number of rows skipped as
        malformed). Only duties signed off by as_of are returned.
        """
        sectors, skipped = self.validate_rows(rows)

        def sort_key(sector: LogbookSector):
            try:
                day = datetime.strptime(sector.date.strip(), DATE_FORMAT).date()
            except ValueError:
                day = date.min
            clock = (sector.out_time or sector.scheduled_departure).replace(":", "")
            return day, clock

        seen_dates = set()
        sector_duties = []
        for sector in sorted(sectors, key=sort_key):
            first_of_day = sector.date not in seen_dates
            seen_dates.add(sector.date)
            duty = self.sector_duty(sector, first_of_day)
            if duty is None:
                if sector.flight_time_hours > 0 or sector.is_positioning:
                    skipped += 1
                continue
            sector_duties.append(duty)

        sector_duties.sort(key=lambda d: d.sign_on)

        records: List[DutyRecord] = []
        group: List[_SectorDuty] = []
        for duty in sector_duties:
            if group and not self._same_duty(group, duty):
                records.append(self._consolidate(group))
                group = []
            group.append(duty)
        if group:
            records.append(self._consolidate(group))

        if as_of is not None:
            cutoff = as_of if as_of.tzinfo else UTC.localize(as_of)
            records = [r for r in records if r.sign_off_utc <= cutoff]

        if skipped:
            logger.warning(f"{skipped} logbook row(s) skipped as malformed")
        logger.info(f"Grouped {len(sector_duties)} sectors into {len(records)} duties")
        return records, skipped
