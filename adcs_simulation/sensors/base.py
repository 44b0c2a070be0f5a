"""
Sensor Base
===========

Common sensor interface and reading record.
"""

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..core.device import Device
from ..core.spacecraft import SatelliteBody


@dataclass(frozen=True, eq=False)
class SensorReading:
    """One sensor sample."""
    time_ms: int
    value: np.ndarray = field(default_factory=lambda: np.zeros(3))


class Sensor(Device, ABC):
    """
    Sensor: produces a reading of the body state at a given time.

    Sensors keep no physical state between samples, so ``sample`` depends
    only on its arguments.
    """

    kind = "sensor"

    @abstractmethod
    def measure(self, body: SatelliteBody) -> np.ndarray:
        """True quantity seen by this sensor at its placement."""

    def sample(self, at_ms: int, body: SatelliteBody) -> SensorReading:
        """
        Sample the sensor.

        Args:
            at_ms: Simulation time [ms]
            body: Satellite body state being observed

        Returns:
            SensorReading stamped with ``at_ms``
        """
        value = np.array(self.measure(body), dtype=float)
        value.setflags(write=False)
        return SensorReading(time_ms=at_ms, value=value)
