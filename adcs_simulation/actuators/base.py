"""
Actuator Base
=============

Actuator state, bounds, and the clamp-then-integrate step shared by all
actuator models.
"""

import math
import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..core.device import Device
from ..core.exceptions import TimeOrderError


UNBOUNDED = (-math.inf, math.inf)


@dataclass
class ActuatorState:
    """Scalar actuator state along its degree of freedom."""
    position: float = 0.0       # rad, accumulated
    velocity: float = 0.0       # rad/s
    acceleration: float = 0.0   # rad/s²
    time_ms: int = 0


@dataclass(frozen=True)
class DeviceBounds:
    """
    Closed (min, max) ranges an actuator state must stay within.

    Position is logically unbounded. The time range is the device's valid
    simulation horizon in ms.
    """
    acceleration: Tuple[float, float] = UNBOUNDED
    velocity: Tuple[float, float] = UNBOUNDED
    position: Tuple[float, float] = UNBOUNDED
    time_ms: Tuple[float, float] = (0, math.inf)

    def __post_init__(self):
        for name in ("acceleration", "velocity", "position", "time_ms"):
            low, high = getattr(self, name)
            if low > high:
                raise ValueError(f"{name} bounds inverted: {low} > {high}")


def _clamp(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return min(max(value, low), high)


class Actuator(Device, ABC):
    """
    Actuator: holds mutable state and advances it under a commanded input.

    Every ``integrate`` call clamps the commanded acceleration, integrates
    velocity and clamps it, then integrates position. When the velocity
    clamp engages, the stored acceleration is the one actually realized.
    """

    kind = "actuator"

    def __init__(self,
                 polling_interval_ms: int,
                 position: np.ndarray,
                 bounds: DeviceBounds,
                 initial_state: ActuatorState = None):
        super().__init__(polling_interval_ms, position)
        self.bounds = bounds

        initial = initial_state or ActuatorState()
        self._initial_state = ActuatorState(
            position=_clamp(initial.position, bounds.position),
            velocity=_clamp(initial.velocity, bounds.velocity),
            acceleration=_clamp(initial.acceleration, bounds.acceleration),
            time_ms=initial.time_ms,
        )
        self.state = replace(self._initial_state)

        # Held until replaced
        self.commanded_input: float = self._initial_state.acceleration
        self.velocity_clamped = False

    @abstractmethod
    def command_to_acceleration(self, command: float) -> float:
        """Candidate acceleration for a commanded input, before clamping."""

    def set_command(self, command: float):
        """Hold ``command`` as the input for subsequent integrations."""
        self.commanded_input = float(command)

    def integrate(self, at_ms: int, command: Optional[float] = None) -> ActuatorState:
        """
        Advance actuator state to ``at_ms``.

        Args:
            at_ms: Target simulation time [ms]
            command: Commanded input; defaults to the held command

        Returns:
            Snapshot of the new state

        Raises:
            TimeOrderError: If ``at_ms`` is before the current state time or
                outside the device's time bounds
        """
        dt_ms = at_ms - self.state.time_ms
        if dt_ms < 0:
            raise TimeOrderError(
                f"{type(self).__name__} asked to integrate back in time: "
                f"{self.state.time_ms} ms -> {at_ms} ms")
        t_min, t_max = self.bounds.time_ms
        if not t_min <= at_ms <= t_max:
            raise TimeOrderError(
                f"{type(self).__name__} time {at_ms} ms outside horizon "
                f"[{t_min}, {t_max}]")

        if command is not None:
            self.set_command(command)

        dt = dt_ms / 1000.0
        previous = self.state

        acceleration = _clamp(self.command_to_acceleration(self.commanded_input),
                              self.bounds.acceleration)

        unclamped_velocity = previous.velocity + acceleration * dt
        velocity = _clamp(unclamped_velocity, self.bounds.velocity)
        self.velocity_clamped = velocity != unclamped_velocity
        if self.velocity_clamped and dt > 0:
            acceleration = _clamp((velocity - previous.velocity) / dt,
                                  self.bounds.acceleration)

        position = _clamp(previous.position + velocity * dt, self.bounds.position)

        self.state = ActuatorState(
            position=position,
            velocity=velocity,
            acceleration=acceleration,
            time_ms=at_ms,
        )
        return replace(self.state)

    def momentum_vector(self) -> np.ndarray:
        """Angular momentum this actuator stores, body frame [Nms]."""
        return np.zeros(3)

    def torque_vector(self) -> np.ndarray:
        """Reaction torque this actuator applies to the body, body frame [Nm]."""
        return np.zeros(3)

    def reset(self, start_ms: int = 0):
        super().reset(start_ms)
        self.state = replace(self._initial_state, time_ms=start_ms)
        self.commanded_input = self._initial_state.acceleration
        self.velocity_clamped = False
