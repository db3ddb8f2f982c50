"""
Band Tables
===========

Ordered, statically-constructed band tables and the single lookup used by
every FRMS table: find_band().

A BandTable checks at construction that its duty-hour bands are ordered and
non-overlapping, so a malformed table fails at import rather than at lookup.
"""

from typing import Dict, Generic, Iterable, Optional, Sequence, Tuple, TypeVar

from frms_models.data_models import DutyHoursBand, TimeOfDayBand

T = TypeVar('T')


def find_band(bands: Iterable, value):
    """Return the first band containing value, or None"""
    for band in bands:
        if band.contains(value):
            return band
    return None


def minute_of_day(hour: int, minute: int = 0) -> int:
    return hour * 60 + minute


def hhmm_band(label: str, start_hhmm: int, end_hhmm: int) -> TimeOfDayBand:
    """TimeOfDayBand from "0500"-style integers, end inclusive (e.g. 1459)"""
    return TimeOfDayBand(
        label=label,
        start_minute=minute_of_day(start_hhmm // 100, start_hhmm % 100),
        end_minute=minute_of_day(end_hhmm // 100, end_hhmm % 100),
    )


def _check_duty_band_order(bands: Sequence[DutyHoursBand]) -> None:
    previous_upper = None
    for index, band in enumerate(bands):
        if index == 0:
            if band.upper is None and len(bands) > 1:
                raise ValueError(f"Band '{band.label}' is unbounded but is not the last band")
        else:
            if band.lower is None or band.lower != previous_upper:
                raise ValueError(
                    f"Band '{band.label}' does not start where the previous band ends "
                    f"({band.lower} != {previous_upper})"
                )
        if band.lower is not None and band.upper is not None and band.upper <= band.lower:
            raise ValueError(f"Band '{band.label}' is empty")
        previous_upper = band.upper


def _check_time_band_cover(bands: Sequence[TimeOfDayBand]) -> None:
    covered = [0] * (24 * 60)
    for band in bands:
        for minute in range(24 * 60):
            if band.contains(minute):
                covered[minute] += 1
    overlaps = [m for m, count in enumerate(covered) if count > 1]
    if overlaps:
        raise ValueError(f"Time-of-day bands overlap at minute {overlaps[0]}")


class BandTable(Generic[T]):
    """
    Ordered (band, payload) pairs.

    Duty-hour tables must be contiguous and non-overlapping; time-of-day
    tables must not overlap. Payloads are returned as stored.
    """

    def __init__(self, entries: Sequence[Tuple[object, T]]):
        self._entries = tuple(entries)
        bands = [band for band, _ in self._entries]
        if bands and isinstance(bands[0], DutyHoursBand):
            _check_duty_band_order(bands)
        elif bands and isinstance(bands[0], TimeOfDayBand):
            _check_time_band_cover(bands)

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def bands(self) -> Tuple:
        return tuple(band for band, _ in self._entries)

    def lookup(self, value) -> Optional[T]:
        """Payload of the band containing value, or None"""
        band = find_band(self.bands, value)
        if band is None:
            return None
        return self.payload_for(band)

    def band_for(self, value):
        return find_band(self.bands, value)

    def payload_for(self, band) -> T:
        for candidate, payload in self._entries:
            if candidate == band:
                return payload
        raise KeyError(band.label)


def require_exhaustive(table: Dict, enum_type, name: str) -> None:
    """Fail at import when a table keyed by an enum misses a member"""
    missing = [member for member in enum_type if member not in table]
    if missing:
        raise ValueError(f"{name} has no entry for {', '.join(m.name for m in missing)}")
