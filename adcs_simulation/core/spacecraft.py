"""
Satellite Rigid-Body State
==========================

Body-level state shared by every device placement: inertia, position and
angular velocity. Only the angular velocity changes during a run, through
momentum exchange with the reaction wheels.
"""

import numpy as np
from typing import Optional

from .config import SatelliteParameters


class SatelliteBody:
    """
    Rigid satellite body.

    Inertia and position are fixed for a run. Velocity (body angular rate)
    is updated once per tick by ``apply_momentum_exchange`` after every
    actuator for that tick has integrated.
    """

    def __init__(self, params: SatelliteParameters = None):
        """
        Initialize body state.

        Args:
            params: Satellite rigid-body parameters
        """
        self.params = params or SatelliteParameters()

        self._inertia_inv = np.linalg.inv(self.params.moment_of_inertia)

        self.velocity = self.params.velocity.copy()  # rad/s
        self.acceleration = np.zeros(3)  # rad/s², realized over the last tick

    @property
    def moment_of_inertia(self) -> np.ndarray:
        return self.params.moment_of_inertia

    @property
    def position(self) -> np.ndarray:
        return self.params.position

    def apply_momentum_exchange(self,
                                wheel_momentum_change: np.ndarray,
                                reaction_torque: np.ndarray):
        """
        Apply the summed actuator effect for one tick.

        Angular momentum is conserved, so the body takes the opposite change:
        Δω = -I⁻¹ ΣΔh. Angular acceleration is held at α = I⁻¹ Στ until the
        next update.

        Args:
            wheel_momentum_change: Sum of wheel momentum changes [Nms], body frame
            reaction_torque: Sum of actuator reaction torques [Nm], body frame
        """
        delta_omega = -self._inertia_inv @ np.asarray(wheel_momentum_change, dtype=float)
        self.velocity = self.velocity + delta_omega
        self.acceleration = self._inertia_inv @ np.asarray(reaction_torque, dtype=float)

    def angular_momentum(self, wheel_momentum: Optional[np.ndarray] = None) -> np.ndarray:
        """Total angular momentum in body frame [Nms]."""
        h = self.moment_of_inertia @ self.velocity
        if wheel_momentum is not None:
            h = h + wheel_momentum
        return h

    def kinetic_energy(self) -> float:
        """Rotational kinetic energy of the body [J]."""
        return 0.5 * self.velocity @ self.moment_of_inertia @ self.velocity

    def reset(self):
        """Restore initial body state."""
        self.velocity = self.params.velocity.copy()
        self.acceleration = np.zeros(3)

    def __repr__(self) -> str:
        return f"SatelliteBody(omega={self.velocity}, alpha={self.acceleration})"
