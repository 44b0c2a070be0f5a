"""
Simulation Core Module
======================

Core simulation components.
"""

from .config import SimulationConfig, load_config
from .exceptions import (
    AdcsSimulationError,
    ConfigurationError,
    SimulatorStateError,
    TimeOrderError,
    UnknownDeviceTypeError,
)
from .factory import DeviceFactory
from .simulator import DeviceEvent, RunOutcome, SimulationResult, Simulator, SimulatorStatus
from .spacecraft import SatelliteBody
from .time_manager import ClockMode, ClockState, SimulationClock

__all__ = [
    'SimulationConfig',
    'load_config',
    'AdcsSimulationError',
    'ConfigurationError',
    'SimulatorStateError',
    'TimeOrderError',
    'UnknownDeviceTypeError',
    'DeviceFactory',
    'DeviceEvent',
    'RunOutcome',
    'SimulationResult',
    'Simulator',
    'SimulatorStatus',
    'SatelliteBody',
    'ClockMode',
    'ClockState',
    'SimulationClock',
]
