"""
Accelerometer Sensor Model
==========================

Body-mounted accelerometer offset from the centre of mass.
"""

import numpy as np

from .base import Sensor
from ..core.spacecraft import SatelliteBody


class Accelerometer(Sensor):
    """
    Three-axis accelerometer at ``position`` in the body frame [m].

    Measures the rotational acceleration at its mount point:

        a = α × r + ω × (ω × r)

    where ω is body angular velocity and α the angular acceleration realized
    over the last tick. A sensor at the centre of mass reads zero.
    """

    def measure(self, body: SatelliteBody) -> np.ndarray:
        r = self.position
        omega = body.velocity
        alpha = body.acceleration
        tangential = np.cross(alpha, r)
        centripetal = np.cross(omega, np.cross(omega, r))
        return tangential + centripetal

    def __repr__(self) -> str:
        return f"Accelerometer(polling={self.polling_interval_ms}ms, position={self.position})"
