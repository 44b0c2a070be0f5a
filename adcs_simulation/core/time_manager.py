"""
Simulation Clock
================

Global simulation time for a run. Decides where the next tick lands given
the configured stepping mode, device poll deadlines, and the run timeout.

Time is kept in integer milliseconds so that identical inputs always give
identical tick sequences.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .config import SimulationConfig, TimestepConfig
from .exceptions import TimeOrderError


class ClockMode(Enum):
    """Global stepping mode."""
    FIXED = "fixed"
    ADAPTIVE = "adaptive"


@dataclass
class ClockState:
    """Mutable clock state, owned by the simulator."""
    current_time_ms: int = 0
    mode: ClockMode = ClockMode.FIXED
    step_ms: Optional[int] = 1
    step_min_ms: Optional[int] = None
    step_max_ms: Optional[int] = None
    timeout_ms: int = 1000
    run_start_ms: int = 0
    step_count: int = 0
    last_step_ms: int = 0


class SimulationClock:
    """
    Manages simulation time.

    Provides:
    - Fixed or adaptive step selection
    - Next-event computation against device deadlines
    - Timeout tracking
    """

    def __init__(self,
                 timestep: TimestepConfig = None,
                 timeout_ms: int = 1000,
                 start_ms: int = 0):
        """
        Initialize simulation clock.

        Args:
            timestep: Stepping configuration
            timeout_ms: Run length after which the run times out [ms]
            start_ms: Run start time [ms]
        """
        timestep = timestep or TimestepConfig()
        if timeout_ms <= 0:
            raise ValueError("Timeout must be positive")

        self.state = ClockState(
            current_time_ms=start_ms,
            mode=ClockMode.ADAPTIVE if timestep.variable else ClockMode.FIXED,
            step_ms=timestep.step_ms,
            step_min_ms=timestep.step_min_ms,
            step_max_ms=timestep.step_max_ms,
            timeout_ms=timeout_ms,
            run_start_ms=start_ms,
        )

    @classmethod
    def from_config(cls, config: SimulationConfig) -> 'SimulationClock':
        return cls(timestep=config.timestep, timeout_ms=config.timeout_ms)

    @property
    def current_time_ms(self) -> int:
        return self.state.current_time_ms

    @property
    def current_seconds(self) -> float:
        return self.state.current_time_ms / 1000.0

    @property
    def elapsed_ms(self) -> int:
        return self.state.current_time_ms - self.state.run_start_ms

    @property
    def timeout_deadline_ms(self) -> int:
        """Absolute time at which the run times out."""
        return self.state.run_start_ms + self.state.timeout_ms

    @property
    def is_timed_out(self) -> bool:
        return self.elapsed_ms >= self.state.timeout_ms

    def _adaptive_step(self, gap_ms: int) -> int:
        """
        Step toward a target ``gap_ms`` away.

        Snap when the target is within reach; otherwise take the largest
        step that does not leave a remainder shorter than the minimum step.
        """
        step_min = self.state.step_min_ms
        step_max = self.state.step_max_ms
        if gap_ms <= step_max:
            return gap_ms
        if gap_ms - step_max < step_min and gap_ms - step_min >= step_min:
            return gap_ms - step_min
        return step_max

    def next_event_time(self, device_deadlines: Iterable[int] = ()) -> int:
        """
        Time of the next tick.

        The earliest of the step boundary, the nearest device deadline,
        and the timeout.

        Args:
            device_deadlines: Next poll deadline of each device [ms]

        Returns:
            Next event time [ms]
        """
        now = self.state.current_time_ms
        nearest = min(device_deadlines, default=None)
        target = self.timeout_deadline_ms
        if nearest is not None:
            target = min(target, nearest)

        if self.state.mode is ClockMode.FIXED:
            candidate = now + self.state.step_ms
        else:
            candidate = now + self._adaptive_step(target - now)

        return min(candidate, target)

    def advance_to(self, time_ms: int) -> int:
        """
        Move the clock forward to ``time_ms``.

        Returns:
            Size of the step taken [ms]

        Raises:
            TimeOrderError: If ``time_ms`` is not after the current time
        """
        step = time_ms - self.state.current_time_ms
        if step <= 0:
            raise TimeOrderError(
                f"Clock cannot move from {self.state.current_time_ms} ms to {time_ms} ms")
        self.state.current_time_ms = time_ms
        self.state.last_step_ms = step
        self.state.step_count += 1
        return step

    def reset(self):
        """Reset clock to run start."""
        self.state.current_time_ms = self.state.run_start_ms
        self.state.step_count = 0
        self.state.last_step_ms = 0

    def __repr__(self) -> str:
        return (f"SimulationClock(t={self.state.current_time_ms}ms, "
                f"mode={self.state.mode.value}, steps={self.state.step_count})")
