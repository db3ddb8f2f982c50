"""
test_parameters.py
==================

Fleet lookup, home base resolution and engine configuration presets.

Run: python -m pytest tests/test_parameters.py -v
"""

import pytest

from frms_models.data_models import FRMSFleet
from frms_core.parameters import (
    EngineConfig, MissingFleetConfigurationError, get_fleet_configuration,
    resolve_fleet, resolve_home_base_timezone, DEFAULT_HOME_TIMEZONE,
)
from frms_core.engine import FRMSEngine


class TestFleetLookup:

    def test_unknown_fleet_raises(self):
        with pytest.raises(MissingFleetConfigurationError):
            get_fleet_configuration("DC-3")

    def test_missing_fleet_is_a_key_error(self):
        with pytest.raises(KeyError):
            FRMSEngine("Concorde")

    def test_single_aircraft_type_resolves_to_group(self):
        assert resolve_fleet("B787") == FRMSFleet.A380_A330_B787
        assert resolve_fleet("a320") == FRMSFleet.A320_B737
        assert resolve_fleet("A380_A330_B787") == FRMSFleet.A380_A330_B787

    def test_fleet_windows(self):
        short_haul = get_fleet_configuration("A320/B737")
        long_haul = get_fleet_configuration("A380/A330/B787")
        assert (short_haul.flight_time_window_days, short_haul.max_flight_time_365_days) == (28, 1000.0)
        assert (long_haul.flight_time_window_days, long_haul.max_flight_time_365_days) == (30, 900.0)
        assert short_haul.max_flight_time_7_days is None
        assert long_haul.max_flight_time_7_days == 30.0
        assert short_haul.consecutive_limits is not None
        assert long_haul.consecutive_limits is None

    def test_configurations_are_shared(self):
        assert get_fleet_configuration("A320/B737") is get_fleet_configuration("B737")


class TestHomeBase:

    def test_timezone_from_airportsdata(self):
        assert resolve_home_base_timezone("AKL") == "Pacific/Auckland"
        assert resolve_home_base_timezone("per") == "Australia/Perth"

    def test_unknown_home_base_falls_back_to_sydney(self):
        assert resolve_home_base_timezone("Z9Z") == DEFAULT_HOME_TIMEZONE

    def test_engine_home_base(self):
        engine = FRMSEngine("A320/B737", home_base="AKL")
        assert engine.fleet.home_base == "AKL"
        assert engine.fleet.home_base_timezone == "Pacific/Auckland"
        # Shared configuration untouched
        assert get_fleet_configuration("A320/B737").home_base == "SYD"


class TestEngineConfig:

    def test_presets(self):
        assert EngineConfig.default_config().compliance.warning_threshold == 0.9
        assert EngineConfig.conservative_config().compliance.warning_threshold == 0.8

    def test_engine_is_long_haul(self):
        assert FRMSEngine("A380/A330/B787").is_long_haul
        assert not FRMSEngine().is_long_haul

    def test_custom_fleet_table(self):
        config = EngineConfig()
        del config.fleets[FRMSFleet.A380_A330_B787]
        with pytest.raises(MissingFleetConfigurationError):
            FRMSEngine("B787", config)
        # Module table unaffected
        assert FRMSEngine("B787").is_long_haul
