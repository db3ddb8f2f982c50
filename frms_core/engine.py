"""
FRMS Compliance Engine
======================

Single entry point tying the calculators to one fleet configuration:

- cumulative totals over a duty-record snapshot
- next-duty limits (short-haul windows or long-haul table rows)
- maximum next duty, rest requirements, MBTT and disruption rest
- what-if and proposed-duty compliance checks

Every call takes the records it needs; the engine keeps no state between
calls beyond its read-only configuration.
"""

from datetime import date, datetime
from typing import Iterable, Optional, Tuple, Union
import logging

from frms_models.data_models import (
    DutyRecord, CumulativeTotals, NextDutyParameters, LongHaulParameters, RestScenario,
    DisruptionScenario, WhatIfScenario, ShortHaulNextDutyLimits, LongHaulNextDutyLimits,
    MaximumNextDuty, RestRequirements, MBTTResult, DisruptionRestResult, WhatIfResult,
    ComplianceCheckResult, ComplianceStatus, CrewComplement, FRMSLimitType,
    RestFacilityClass, DaysAwayCategory, CreditedHoursCategory, FRMSFleet,
)
from frms_core.parameters import EngineConfig, FleetConfiguration
from frms_core.aggregator import TimeWindowAggregator, DutyEntry
from frms_core.compliance import FRMSComplianceValidator
from frms_core.short_haul import ShortHaulLimitCalculator
from frms_core.long_haul import LongHaulLimitCalculator
from frms_core.next_duty import MaximumNextDutyCalculator
from frms_core.rest_requirements import RestRequirementCalculator, minimum_rest_after_duty
from frms_core.mbtt import calculate_mbtt
from frms_core.disruption import calculate_disruption_rest

logger = logging.getLogger(__name__)


class FRMSEngine:
    """
    FRMS compliance engine for one fleet and home base.

    Example:
        engine = FRMSEngine("A320/B737", home_base="SYD")
        totals = engine.totals(records, as_of=date(2025, 3, 1))
    """

    def __init__(self, fleet: Union[str, FRMSFleet, FleetConfiguration] = FRMSFleet.A320_B737,
                 config: EngineConfig = None, home_base: Optional[str] = None):
        self.config = config or EngineConfig.default_config()
        if isinstance(fleet, FleetConfiguration):
            self.fleet = fleet if not home_base else fleet.for_home_base(home_base)
        else:
            self.fleet = self.config.fleet_configuration(fleet, home_base)
        thresholds = self.config.compliance

        self.aggregator = TimeWindowAggregator(self.fleet, thresholds)
        self.validator = FRMSComplianceValidator(self.fleet, thresholds)
        self.short_haul = ShortHaulLimitCalculator(self.fleet, thresholds)
        self.long_haul = LongHaulLimitCalculator(self.fleet, thresholds)
        self.maximum = MaximumNextDutyCalculator(self.fleet, thresholds)
        self.rest_calculator = RestRequirementCalculator()

        logger.debug(
            f"FRMS engine for {self.fleet.fleet_id} at {self.fleet.home_base} "
            f"({self.fleet.home_base_timezone})"
        )

    @property
    def is_long_haul(self) -> bool:
        return self.fleet.is_long_haul

    # ========================================================================
    # SNAPSHOT
    # ========================================================================

    def totals(self, records: Iterable[DutyRecord],
               as_of: Union[date, datetime]) -> CumulativeTotals:
        return self.aggregator.aggregate(records, as_of)

    def _snapshot(self, records: Iterable[DutyRecord], as_of: datetime
                  ) -> Tuple[CumulativeTotals, list, Optional[DutyRecord]]:
        records = list(records)
        totals = self.aggregator.aggregate(records, as_of)
        entries, _ = self.aggregator.prepare(records)
        previous: Optional[DutyEntry] = self.aggregator.previous_duty(entries, as_of)
        return totals, entries, previous.record if previous else None

    def status(self, totals: CumulativeTotals) -> ComplianceStatus:
        return self.validator.totals_status(totals)

    # ========================================================================
    # NEXT DUTY
    # ========================================================================

    def next_duty_short_haul(self, records: Iterable[DutyRecord],
                             params: NextDutyParameters) -> ShortHaulNextDutyLimits:
        totals, entries, previous = self._snapshot(records, params.as_of)
        late_night_hours = self.aggregator.late_night_duty_hours(entries, totals.as_of)
        return self.short_haul.calculate(totals, previous, params, late_night_hours)

    def next_duty_long_haul(self, records: Iterable[DutyRecord], as_of: datetime,
                            params: LongHaulParameters) -> LongHaulNextDutyLimits:
        totals, _, previous = self._snapshot(records, as_of)
        return self.long_haul.calculate(totals, previous, params)

    def maximum_next_duty(self, records: Iterable[DutyRecord], as_of: datetime,
                          limit_type: FRMSLimitType = FRMSLimitType.PLANNING,
                          crew_complement: CrewComplement = CrewComplement.TWO_PILOT,
                          rest_facility: RestFacilityClass = RestFacilityClass.NONE) -> MaximumNextDuty:
        totals, _, previous = self._snapshot(records, as_of)
        return self.maximum.calculate(totals, previous, limit_type, crew_complement, rest_facility)

    # ========================================================================
    # REST, MBTT, DISRUPTION
    # ========================================================================

    def rest_requirements(self, scenario: RestScenario) -> RestRequirements:
        return self.rest_calculator.calculate(scenario)

    def minimum_rest_after(self, duty: DutyRecord,
                           limit_type: FRMSLimitType = FRMSLimitType.PLANNING) -> float:
        return minimum_rest_after_duty(duty, self.fleet, limit_type)

    def mbtt(self, days_away: DaysAwayCategory, credited_hours: CreditedHoursCategory,
             had_duty_over_18_hours: bool = False) -> Optional[MBTTResult]:
        """MBTT applies to long-haul rostering only; None for short-haul fleets"""
        if not self.is_long_haul:
            return None
        return calculate_mbtt(days_away, credited_hours, had_duty_over_18_hours)

    def disruption_rest(self, scenario: DisruptionScenario) -> Optional[DisruptionRestResult]:
        return calculate_disruption_rest(scenario)

    # ========================================================================
    # CHECKS
    # ========================================================================

    def what_if(self, records: Iterable[DutyRecord], params: NextDutyParameters,
                scenario: WhatIfScenario) -> WhatIfResult:
        """
        Check a proposed short-haul duty against the next-duty windows.
        Long-haul limits depend on table selections rather than sign-on time,
        so this raises ValueError for a long-haul fleet.
        """
        if self.is_long_haul:
            raise ValueError("What-if checks use short-haul sign-on windows")
        totals, entries, previous = self._snapshot(records, params.as_of)
        late_night_hours = self.aggregator.late_night_duty_hours(entries, totals.as_of)
        limits = self.short_haul.calculate(totals, previous, params, late_night_hours)
        return self.short_haul.check_what_if(scenario, limits, totals)

    def check_compliance(self, records: Iterable[DutyRecord], proposed: DutyRecord,
                         limit_type: FRMSLimitType = FRMSLimitType.PLANNING) -> ComplianceCheckResult:
        """Check a proposed duty against cumulative ceilings and rest after the last duty"""
        totals, _, previous = self._snapshot(records, proposed.sign_on_utc)
        minimum_rest = None
        if previous is not None:
            minimum_rest = minimum_rest_after_duty(previous, self.fleet, limit_type)
        return self.validator.check_compliance(proposed, previous, totals, minimum_rest)
