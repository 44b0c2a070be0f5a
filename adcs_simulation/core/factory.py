"""
Device Factory
==============

Builds live sensor and actuator models from configuration records.
"""

import logging
from typing import Dict, Optional

from .config import (
    AccelerometerSpec,
    ActuatorSpec,
    GyroscopeSpec,
    ReactionWheelSpec,
    SensorSpec,
    SimulationConfig,
)
from .exceptions import UnknownDeviceTypeError
from ..actuators.base import Actuator, ActuatorState, DeviceBounds, UNBOUNDED
from ..actuators.reaction_wheel import ReactionWheel
from ..sensors.base import Sensor
from ..sensors.accelerometer import Accelerometer
from ..sensors.gyroscope import Gyroscope

logger = logging.getLogger(__name__)


class DeviceFactory:
    """
    Maps configuration records to device instances.

    A name with no registered spec yields None: not configuring a device is
    a valid outcome. A spec of a type the factory cannot build raises
    ``UnknownDeviceTypeError``.
    """

    def __init__(self, config: SimulationConfig):
        """
        Initialize factory.

        Args:
            config: Loaded simulation configuration
        """
        self.config = config

    @property
    def horizon_ms(self) -> int:
        """Latest time a device built by this factory may be advanced to."""
        return self.config.timeout_ms

    def create_sensor(self, name: str) -> Optional[Sensor]:
        """Build the sensor configured under ``name``, or None."""
        spec = self.config.get_sensor_spec(name)
        if spec is None:
            logger.debug("No sensor configured under %r", name)
            return None
        return self.build_sensor(spec)

    def create_actuator(self, name: str) -> Optional[Actuator]:
        """Build the actuator configured under ``name``, or None."""
        spec = self.config.get_actuator_spec(name)
        if spec is None:
            logger.debug("No actuator configured under %r", name)
            return None
        return self.build_actuator(spec)

    def create_all_sensors(self) -> Dict[str, Sensor]:
        return {name: self.build_sensor(spec) for name, spec in self.config.sensors.items()}

    def create_all_actuators(self) -> Dict[str, Actuator]:
        return {name: self.build_actuator(spec) for name, spec in self.config.actuators.items()}

    def build_sensor(self, spec: SensorSpec) -> Sensor:
        if isinstance(spec, GyroscopeSpec):
            return Gyroscope(spec.polling_time_ms, spec.position)
        if isinstance(spec, AccelerometerSpec):
            return Accelerometer(spec.polling_time_ms, spec.position)
        raise UnknownDeviceTypeError(f"Cannot build sensor from {type(spec).__name__}")

    def build_actuator(self, spec: ActuatorSpec) -> Actuator:
        if isinstance(spec, ReactionWheelSpec):
            bounds = DeviceBounds(
                acceleration=(spec.min_ang_accel, spec.max_ang_accel),
                velocity=(spec.min_ang_vel, spec.max_ang_vel),
                position=UNBOUNDED,
                time_ms=(0, self.horizon_ms),
            )
            return ReactionWheel(
                spec.polling_time_ms,
                spec.position,
                bounds,
                moment_of_inertia=spec.moment_of_inertia,
                axis=spec.axis_of_rotation,
                initial_state=ActuatorState(
                    velocity=spec.velocity,
                    acceleration=spec.acceleration,
                ),
            )
        raise UnknownDeviceTypeError(f"Cannot build actuator from {type(spec).__name__}")
