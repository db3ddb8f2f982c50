"""
Time Window Aggregator
======================

Rolling flight/duty-time sums and consecutive-duty streaks over a pilot's
duty records, evaluated in the fleet's home base calendar.

Windows are closed date ranges [as_of - W + 1, as_of]. Records that cannot
be placed on a calendar day (unparseable date, missing or reversed
sign-on/sign-off, negative hours) are excluded and counted, never raised.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple, Union
import logging
import pytz

from frms_models.data_models import (
    DutyRecord, CumulativeTotals, WindowTotal, StreakCounter, OperationTimeClass,
)
from frms_core.parameters import (
    FleetConfiguration, ComplianceThresholds, TimeOfDayThresholds,
)
from frms_core.compliance import classify, classify_streak

logger = logging.getLogger(__name__)

DATE_FORMATS = ('%d/%m/%Y', '%Y-%m-%d')


# ============================================================================
# TIME-OF-DAY CLASSIFICATION
# ============================================================================

def as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to be UTC already"""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def local_window_overlap_minutes(start_utc: datetime, end_utc: datetime, tz,
                                 window_start: Tuple[int, int],
                                 window_end: Tuple[int, int]) -> float:
    """
    Minutes of [start_utc, end_utc] falling inside a daily local window.
    The window wraps past midnight when window_end <= window_start.
    """
    wraps = window_end <= window_start
    start_local = start_utc.astimezone(tz)
    end_local = end_utc.astimezone(tz)

    total = 0.0
    day = start_local.date() - timedelta(days=1)
    while day <= end_local.date():
        ws = tz.localize(datetime.combine(day, time(*window_start)))
        end_day = day + timedelta(days=1) if wraps else day
        we = tz.localize(datetime.combine(end_day, time(*window_end)))
        overlap = (min(end_utc, we) - max(start_utc, ws)).total_seconds() / 60
        if overlap > 0:
            total += overlap
        day += timedelta(days=1)
    return total


def classify_operation_time(sign_on_utc: datetime, sign_off_utc: datetime,
                            timezone: str,
                            thresholds: TimeOfDayThresholds = None) -> OperationTimeClass:
    """Day, late night or back of clock, in home base local time"""
    thresholds = thresholds or TimeOfDayThresholds()
    tz = pytz.timezone(timezone)
    start, end = as_utc(sign_on_utc), as_utc(sign_off_utc)

    back_of_clock = local_window_overlap_minutes(
        start, end, tz, thresholds.back_of_clock_start, thresholds.back_of_clock_end
    )
    if back_of_clock >= thresholds.back_of_clock_min_minutes:
        return OperationTimeClass.BACK_OF_CLOCK

    late_night = local_window_overlap_minutes(
        start, end, tz, thresholds.late_night_start, thresholds.late_night_end
    )
    if late_night > thresholds.late_night_min_minutes:
        return OperationTimeClass.LATE_NIGHT

    return OperationTimeClass.DAY


def parse_record_date(value: Union[date, str, None]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    return None


# ============================================================================
# AGGREGATOR
# ============================================================================

@dataclass(frozen=True)
class DutyEntry:
    """A record that passed validation, placed on its home base day"""
    record: DutyRecord
    day: date
    sign_on_utc: datetime
    sign_off_utc: datetime
    time_class: OperationTimeClass
    is_early_start: bool


class TimeWindowAggregator:
    """Compute CumulativeTotals for one fleet"""

    def __init__(self, fleet: FleetConfiguration, thresholds: ComplianceThresholds = None):
        self.fleet = fleet
        self.thresholds = thresholds or ComplianceThresholds()
        self.tz = pytz.timezone(fleet.home_base_timezone)

    # ------------------------------------------------------------------
    # Record preparation
    # ------------------------------------------------------------------

    def as_of_day(self, as_of: Union[date, datetime]) -> date:
        if isinstance(as_of, datetime):
            return as_utc(as_of).astimezone(self.tz).date()
        return as_of

    def _malformed_reason(self, record: DutyRecord, day: Optional[date]) -> Optional[str]:
        if day is None:
            return f"unparseable date {record.date!r}"
        if record.sign_on_utc is None or record.sign_off_utc is None:
            return "missing sign-on/sign-off"
        if as_utc(record.sign_off_utc) < as_utc(record.sign_on_utc):
            return "sign-off before sign-on"
        if record.flight_time_hours < 0 or record.duty_time_hours < 0 or record.sectors < 0:
            return "negative duration"
        return None

    def prepare(self, records: Iterable[DutyRecord]) -> Tuple[List[DutyEntry], int]:
        """Validated entries sorted by sign-on, and the number excluded"""
        entries = []
        excluded = 0
        thresholds = self.fleet.time_of_day
        for record in records:
            day = parse_record_date(record.date)
            reason = self._malformed_reason(record, day)
            if reason is not None:
                excluded += 1
                logger.debug(f"Excluding duty record dated {record.date!r}: {reason}")
                continue
            sign_on = as_utc(record.sign_on_utc)
            sign_off = as_utc(record.sign_off_utc)
            entries.append(DutyEntry(
                record=record,
                day=day,
                sign_on_utc=sign_on,
                sign_off_utc=sign_off,
                time_class=classify_operation_time(
                    sign_on, sign_off, self.fleet.home_base_timezone, thresholds
                ),
                is_early_start=sign_on.astimezone(self.tz).hour < thresholds.early_start_before_hour,
            ))
        entries.sort(key=lambda e: e.sign_on_utc)
        return entries, excluded

    # ------------------------------------------------------------------
    # Rolling windows
    # ------------------------------------------------------------------

    @staticmethod
    def in_window(entries: List[DutyEntry], as_of: date, days: int) -> List[DutyEntry]:
        start = as_of - timedelta(days=days - 1)
        return [e for e in entries if start <= e.day <= as_of]

    def window_total(self, entries: List[DutyEntry], as_of: date, days: int,
                     field_name: str, limit: Optional[float]) -> WindowTotal:
        if not entries:
            return WindowTotal(window_days=days, hours=None, limit=limit,
                               status=None, is_complete=False)
        window = self.in_window(entries, as_of, days)
        hours = sum(getattr(e.record, field_name) for e in window)
        earliest = min(e.day for e in entries)
        return WindowTotal(
            window_days=days,
            hours=hours,
            limit=limit,
            status=classify(hours, limit, self.thresholds.warning_threshold),
            is_complete=earliest <= as_of - timedelta(days=days - 1),
        )

    # ------------------------------------------------------------------
    # Streaks
    # ------------------------------------------------------------------

    def contiguous_duty_days(self, entries: List[DutyEntry], as_of: date) -> List[date]:
        """
        Duty days walking back from the most recent one, stopping at the
        first gap. Empty when the most recent duty is more than a day old.
        """
        days = sorted({e.day for e in entries if e.day <= as_of}, reverse=True)
        if not days or (as_of - days[0]).days > 1:
            return []
        run = [days[0]]
        for day in days[1:]:
            if (run[-1] - day).days != 1:
                break
            run.append(day)
        return run

    def consecutive_counts(self, entries: List[DutyEntry], as_of: date) -> Tuple[int, int, int, int]:
        """(consecutive duties, early starts, late nights, duty days in 11)"""
        run = self.contiguous_duty_days(entries, as_of)
        by_day = {}
        for e in entries:
            by_day.setdefault(e.day, []).append(e)

        early_starts = 0
        for day in run:
            if not any(e.is_early_start for e in by_day[day]):
                break
            early_starts += 1

        late_nights = 0
        for day in run:
            if not any(e.time_class.is_late_night for e in by_day[day]):
                break
            late_nights += 1

        duty_days_11 = len({e.day for e in self.in_window(entries, as_of, 11)})
        return len(run), early_starts, late_nights, duty_days_11

    def late_night_duty_hours(self, entries: List[DutyEntry], as_of: date, days: int = 7) -> float:
        """Duty hours of late-night and back-of-clock duties in the trailing window"""
        return sum(e.record.duty_time_hours for e in self.in_window(entries, as_of, days)
                   if e.time_class.is_late_night)

    def previous_duty(self, entries: List[DutyEntry], as_of: datetime) -> Optional[DutyEntry]:
        """Latest duty signed off at or before as_of"""
        cutoff = as_utc(as_of)
        completed = [e for e in entries if e.sign_off_utc <= cutoff]
        return completed[-1] if completed else None

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def aggregate(self, records: Iterable[DutyRecord],
                  as_of: Union[date, datetime]) -> CumulativeTotals:
        all_entries, excluded = self.prepare(records)
        as_of_day = self.as_of_day(as_of)
        entries = [e for e in all_entries if e.day <= as_of_day]
        fleet = self.fleet
        period = fleet.flight_time_window_days

        days_off = None
        if entries:
            days_off = period - len({e.day for e in self.in_window(entries, as_of_day, period)})

        streaks = {}
        limits = fleet.consecutive_limits
        if limits is not None and entries:
            duties, early, late, in_11 = self.consecutive_counts(entries, as_of_day)
            streaks = dict(
                consecutive_duties=StreakCounter(
                    duties, limits.max_consecutive_duties,
                    classify_streak(duties, limits.max_consecutive_duties)),
                consecutive_early_starts=StreakCounter(
                    early, limits.max_consecutive_early_starts,
                    classify_streak(early, limits.max_consecutive_early_starts)),
                consecutive_late_nights=StreakCounter(
                    late, limits.max_consecutive_late_nights,
                    classify_streak(late, limits.max_consecutive_late_nights)),
                duty_days_in_11_days=StreakCounter(
                    in_11, limits.max_duty_days_in_11_days,
                    classify_streak(in_11, limits.max_duty_days_in_11_days)),
            )

        totals = CumulativeTotals(
            as_of=as_of_day,
            flight_time_7_days=self.window_total(
                entries, as_of_day, 7, 'flight_time_hours', fleet.max_flight_time_7_days),
            flight_time_window=self.window_total(
                entries, as_of_day, period, 'flight_time_hours', fleet.max_flight_time_window),
            flight_time_365_days=self.window_total(
                entries, as_of_day, 365, 'flight_time_hours', fleet.max_flight_time_365_days),
            duty_time_7_days=self.window_total(
                entries, as_of_day, 7, 'duty_time_hours', fleet.max_duty_time_7_days),
            duty_time_14_days=self.window_total(
                entries, as_of_day, 14, 'duty_time_hours', fleet.max_duty_time_14_days),
            days_off_in_window=days_off,
            excluded_record_count=excluded,
            included_record_count=len(entries),
            **streaks
        )

        if excluded:
            logger.warning(f"{excluded} malformed duty record(s) excluded from FRMS totals")
        logger.debug(
            f"FRMS totals for {fleet.fleet_id} as of {as_of_day}: "
            f"{len(entries)} duties, {period}-day flight time {totals.flight_time_window.hours}"
        )
        return totals
