"""
Gyroscope Sensor Model
======================

Three-axis rate gyroscope.
"""

import numpy as np

from .base import Sensor
from ..core.spacecraft import SatelliteBody


class Gyroscope(Sensor):
    """
    Three-axis rate gyroscope.

    A rigid body rotates at the same rate everywhere, so placement does not
    change the reading: the gyroscope reports body angular velocity [rad/s].
    """

    def measure(self, body: SatelliteBody) -> np.ndarray:
        return body.velocity.copy()

    def __repr__(self) -> str:
        return f"Gyroscope(polling={self.polling_interval_ms}ms, position={self.position})"
