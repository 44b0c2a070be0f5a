"""
Simulation Errors
=================

Exception hierarchy for the ADCS simulation engine.

A run timing out is not an error and is reported through
``SimulationResult.outcome`` instead.
"""


class AdcsSimulationError(Exception):
    """Base class for all simulation errors."""


class ConfigurationError(AdcsSimulationError):
    """Configuration document is missing a field or holds an invalid value."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"{key}: {message}")


class UnknownDeviceTypeError(AdcsSimulationError):
    """Factory received a device spec it has no constructor for."""


class TimeOrderError(AdcsSimulationError):
    """A device was asked to move backwards in time or past its horizon."""


class SimulatorStateError(AdcsSimulationError):
    """Operation is not allowed in the simulator's current state."""
