"""
Reaction Wheel Model
====================

Reaction wheel exchanging angular momentum with the satellite body.
"""

import numpy as np

from .base import Actuator, ActuatorState, DeviceBounds


class ReactionWheel(Actuator):
    """
    Single reaction wheel actuator.

    State is the wheel's angular position, rate and acceleration about its
    spin axis. The commanded input is a wheel angular acceleration [rad/s²];
    use ``torque_to_acceleration`` to command a motor torque instead.

    Features:
    - Acceleration and speed saturation
    - Momentum and reaction torque in the body frame
    """

    def __init__(self,
                 polling_interval_ms: int,
                 position: np.ndarray,
                 bounds: DeviceBounds,
                 moment_of_inertia: float,
                 axis: np.ndarray = None,
                 initial_state: ActuatorState = None):
        """
        Initialize reaction wheel.

        Args:
            polling_interval_ms: Update interval [ms]
            position: Mount position in body frame [m]
            bounds: Acceleration, velocity, position and time limits
            moment_of_inertia: Wheel inertia about its spin axis [kg·m²]
            axis: Spin axis in body frame (normalised here)
            initial_state: Initial wheel state
        """
        if moment_of_inertia <= 0:
            raise ValueError("Wheel inertia must be positive")
        super().__init__(polling_interval_ms, position, bounds, initial_state)

        self.moment_of_inertia = float(moment_of_inertia)
        axis = np.array([0.0, 0.0, 1.0]) if axis is None else np.asarray(axis, dtype=float)
        self.axis = axis / np.linalg.norm(axis)

    @property
    def is_saturated(self) -> bool:
        """Speed limit engaged on the last integration."""
        return self.velocity_clamped

    @property
    def wheel_speed_rpm(self) -> float:
        """Get wheel speed in RPM."""
        return self.state.velocity * 60 / (2 * np.pi)

    @property
    def momentum(self) -> float:
        """Stored angular momentum about the spin axis [Nms]."""
        return self.moment_of_inertia * self.state.velocity

    def command_to_acceleration(self, command: float) -> float:
        return command

    def torque_to_acceleration(self, torque: float) -> float:
        """Wheel acceleration produced by a motor torque [Nm]."""
        return torque / self.moment_of_inertia

    def momentum_vector(self) -> np.ndarray:
        return self.momentum * self.axis

    def torque_vector(self) -> np.ndarray:
        return -self.moment_of_inertia * self.state.acceleration * self.axis

    def __repr__(self) -> str:
        return (f"ReactionWheel(polling={self.polling_interval_ms}ms, "
                f"omega={self.state.velocity:.3f} rad/s, axis={self.axis})")
