"""
ADCS Simulation Framework
=========================

Sensor and actuator simulation for developing and validating satellite
Attitude Determination and Control System (ADCS) algorithms without flight
hardware.

Components:
- YAML device configuration (sensors, actuators, satellite body, clock)
- Device factory
- Sensor models (gyroscope, accelerometer)
- Actuator models (reaction wheel) with saturation bounds
- Discrete-event simulator with fixed or adaptive timestep and timeout
"""

__version__ = "1.0.0"

from adcs_simulation.core.config import SimulationConfig, load_config
from adcs_simulation.core.factory import DeviceFactory
from adcs_simulation.core.simulator import RunOutcome, SimulationResult, Simulator
from adcs_simulation.core.spacecraft import SatelliteBody
from adcs_simulation.core.time_manager import SimulationClock

__all__ = [
    'SimulationConfig',
    'load_config',
    'DeviceFactory',
    'RunOutcome',
    'SimulationResult',
    'Simulator',
    'SatelliteBody',
    'SimulationClock',
]
