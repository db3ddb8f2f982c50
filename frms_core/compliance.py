"""
FRMS Compliance Classification
==============================

Maps (current value, ceiling) pairs to a three-state ComplianceStatus and
checks proposed duties against cumulative ceilings.

Contract for totals: current ≥ limit is a violation, current ≥
warning_threshold × limit is a warning, anything else is compliant.
"""

from typing import Iterable, Optional

from frms_models.data_models import (
    ComplianceStatus, CumulativeTotals, DutyRecord, ComplianceCheckResult,
)
from frms_core.parameters import ComplianceThresholds, FleetConfiguration


def classify(current: float, limit: Optional[float],
             warning_threshold: float = 0.9) -> ComplianceStatus:
    """Classify a cumulative total against its ceiling. No ceiling is compliant."""
    if limit is None:
        return ComplianceStatus.COMPLIANT
    if current >= limit:
        return ComplianceStatus.VIOLATION
    if current >= warning_threshold * limit:
        return ComplianceStatus.WARNING
    return ComplianceStatus.COMPLIANT


def classify_streak(count: int, limit: Optional[int]) -> ComplianceStatus:
    """Streak counters: at the ceiling is a violation, one short is a warning"""
    if limit is None:
        return ComplianceStatus.COMPLIANT
    if count >= limit:
        return ComplianceStatus.VIOLATION
    if count >= limit - 1:
        return ComplianceStatus.WARNING
    return ComplianceStatus.COMPLIANT


def overall_status(statuses: Iterable[Optional[ComplianceStatus]]) -> ComplianceStatus:
    """Worst of the given statuses, ignoring unknowns"""
    worst = ComplianceStatus.COMPLIANT
    for status in statuses:
        if status is not None and status.severity > worst.severity:
            worst = status
    return worst


class FRMSComplianceValidator:
    """Check totals and proposed duties against a fleet's cumulative ceilings"""

    def __init__(self, fleet: FleetConfiguration, thresholds: ComplianceThresholds = None):
        self.fleet = fleet
        self.thresholds = thresholds or ComplianceThresholds()

    def classify(self, current: float, limit: Optional[float]) -> ComplianceStatus:
        return classify(current, limit, self.thresholds.warning_threshold)

    def totals_status(self, totals: CumulativeTotals) -> ComplianceStatus:
        """Overall status across every window total and streak counter"""
        statuses = [t.status for t in totals.window_totals]
        statuses.extend(c.status for c in totals.streak_counters)
        return overall_status(statuses)

    def cumulative_breaches(self, totals: CumulativeTotals, duty_hours: float,
                            flight_hours: float) -> list:
        """Ceilings a proposed duty would push past"""
        breaches = []
        period = self.fleet.flight_time_window_days
        if (totals.flight_time_window.hours or 0.0) + flight_hours > self.fleet.max_flight_time_window:
            breaches.append(f"Would exceed {period}-day flight time limit")
        if (self.fleet.max_flight_time_7_days is not None and
                (totals.flight_time_7_days.hours or 0.0) + flight_hours > self.fleet.max_flight_time_7_days):
            breaches.append("Would exceed 7-day flight time limit")
        if (totals.duty_time_7_days.hours or 0.0) + duty_hours > self.fleet.max_duty_time_7_days:
            breaches.append("Would exceed 7-day duty time limit")
        if (totals.duty_time_14_days.hours or 0.0) + duty_hours > self.fleet.max_duty_time_14_days:
            breaches.append("Would exceed 14-day duty time limit")
        return breaches

    def cumulative_restrictions(self, totals: CumulativeTotals) -> list:
        """Advisories when little headroom remains under a rolling ceiling"""
        restrictions = []
        flight_7 = totals.flight_time_7_days.remaining_hours
        if flight_7 is not None and flight_7 < 10:
            restrictions.append("Limited by 7-day flight time limit")
        flight_window = totals.flight_time_window.remaining_hours
        if flight_window is not None and flight_window < 20:
            restrictions.append(f"Limited by {self.fleet.flight_time_window_days}-day flight time limit")
        duty_7 = totals.duty_time_7_days.remaining_hours
        if duty_7 is not None and duty_7 < 20:
            restrictions.append("Limited by 7-day duty time limit")
        return restrictions

    def check_compliance(self, proposed: DutyRecord, previous: Optional[DutyRecord],
                         totals: CumulativeTotals,
                         minimum_rest_hours: Optional[float] = None) -> ComplianceCheckResult:
        """
        Check a proposed duty after the previous one.

        minimum_rest_hours is the rest owed after `previous`; when given, the
        gap between previous sign-off and proposed sign-on is checked against it.
        """
        messages = self.cumulative_breaches(
            totals, proposed.duty_time_hours, proposed.flight_time_hours
        )
        if (previous is not None and minimum_rest_hours is not None
                and previous.sign_off_utc is not None and proposed.sign_on_utc is not None):
            actual_rest = (proposed.sign_on_utc - previous.sign_off_utc).total_seconds() / 3600
            if actual_rest < minimum_rest_hours:
                messages.append(
                    f"Insufficient rest: {actual_rest:.1f}h (need {minimum_rest_hours:.1f}h)"
                )
        status = ComplianceStatus.VIOLATION if messages else ComplianceStatus.COMPLIANT
        return ComplianceCheckResult(status=status, messages=tuple(messages))
