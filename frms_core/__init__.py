"""
FRMS Core Components
====================

Main exports for the FRMS compliance engine.
"""

from frms_core.parameters import (
    ComplianceThresholds,
    TimeOfDayThresholds,
    ConsecutiveDutyLimits,
    FleetConfiguration,
    EngineConfig,
    MissingFleetConfigurationError,
    InvalidRestFacilityError,
    get_fleet_configuration,
    valid_rest_facilities,
    validate_rest_facility,
)

from frms_core.bands import BandTable, find_band
from frms_core.aggregator import TimeWindowAggregator, classify_operation_time
from frms_core.compliance import (
    FRMSComplianceValidator,
    classify,
    classify_streak,
    overall_status,
)

from frms_core.short_haul import ShortHaulLimitCalculator
from frms_core.long_haul import LongHaulLimitCalculator
from frms_core.next_duty import MaximumNextDutyCalculator
from frms_core.rest_requirements import (
    RestRequirementCalculator,
    expected_duty_bands,
    minimum_rest_after_duty,
    two_pilot_extension_rest_hours,
)
from frms_core.mbtt import calculate_mbtt, calculate_mbtt_for_trip
from frms_core.disruption import calculate_disruption_rest
from frms_core.engine import FRMSEngine

__all__ = [
    # Configuration
    'ComplianceThresholds',
    'TimeOfDayThresholds',
    'ConsecutiveDutyLimits',
    'FleetConfiguration',
    'EngineConfig',
    'MissingFleetConfigurationError',
    'InvalidRestFacilityError',
    'get_fleet_configuration',
    'valid_rest_facilities',
    'validate_rest_facility',
    # Bands
    'BandTable',
    'find_band',
    # Aggregation & classification
    'TimeWindowAggregator',
    'classify_operation_time',
    'FRMSComplianceValidator',
    'classify',
    'classify_streak',
    'overall_status',
    # Next duty
    'ShortHaulLimitCalculator',
    'LongHaulLimitCalculator',
    'MaximumNextDutyCalculator',
    # Rest, MBTT, disruption
    'RestRequirementCalculator',
    'expected_duty_bands',
    'minimum_rest_after_duty',
    'two_pilot_extension_rest_hours',
    'calculate_mbtt',
    'calculate_mbtt_for_trip',
    'calculate_disruption_rest',
    # Facade
    'FRMSEngine',
]
