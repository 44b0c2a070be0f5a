"""
Main Simulator
==============

Discrete-event engine that advances every configured device against a
single global clock.

Each tick:
1. The clock moves to the earliest of the step boundary, the nearest
   device deadline, and the timeout.
2. Due actuators integrate, using the command held at tick start.
3. The satellite body takes the summed momentum exchange once. Its angular
   acceleration is set to I⁻¹ times the summed reaction torque of all
   actuators at their latest realized acceleration.
4. Due sensors sample the updated body.
5. The tick's events are recorded and passed to registered controllers.
6. The run times out when the clock reaches the timeout.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Union

from .config import SimulationConfig
from .exceptions import SimulatorStateError
from .factory import DeviceFactory
from .spacecraft import SatelliteBody
from .time_manager import SimulationClock
from ..actuators.base import Actuator, ActuatorState
from ..sensors.base import Sensor, SensorReading

logger = logging.getLogger(__name__)


class SimulatorStatus(Enum):
    """Simulator lifecycle."""
    IDLE = "idle"
    RUNNING = "running"
    TIMED_OUT = "timed_out"
    STOPPED = "stopped"


class RunOutcome(Enum):
    """How a finished run ended."""
    TIMED_OUT = "timed_out"   # objective not reached within the window
    STOPPED = "stopped"       # cancelled, e.g. objective satisfied


@dataclass(frozen=True, eq=False)
class DeviceEvent:
    """Output of one device poll."""
    time_ms: int
    device: str
    kind: str  # 'sensor' or 'actuator'
    payload: Union[SensorReading, ActuatorState]

    def as_tuple(self) -> tuple:
        """Plain-value form, suitable for exact comparison between runs."""
        if isinstance(self.payload, SensorReading):
            values = tuple(self.payload.value.tolist())
        else:
            values = (self.payload.position, self.payload.velocity,
                      self.payload.acceleration, self.payload.time_ms)
        return (self.time_ms, self.device, self.kind, values)


@dataclass
class SimulationResult:
    """Summary of a finished run."""
    outcome: RunOutcome
    end_time_ms: int
    step_count: int
    events: List[DeviceEvent] = field(default_factory=list)

    @property
    def objective_reached(self) -> bool:
        return self.outcome is RunOutcome.STOPPED


Controller = Callable[['Simulator', List[DeviceEvent]], None]


class Simulator:
    """
    ADCS sensor/actuator simulation engine.

    Integrates:
    - Per-device polling schedules
    - Fixed or adaptive global timestep with a hard timeout
    - Reaction wheel / satellite body momentum exchange
    - Controller hooks that read events and issue commands
    """

    def __init__(self,
                 config: SimulationConfig,
                 factory: DeviceFactory = None):
        """
        Initialize simulator.

        Args:
            config: Simulation configuration
            factory: Device factory (default: built from ``config``)
        """
        self.config = config
        self.factory = factory or DeviceFactory(config)

        self.clock = SimulationClock.from_config(config)
        self.body = SatelliteBody(config.satellite)

        self.actuators: Dict[str, Actuator] = self.factory.create_all_actuators()
        self.sensors: Dict[str, Sensor] = self.factory.create_all_sensors()

        self.status = SimulatorStatus.IDLE
        self.events: List[DeviceEvent] = []
        self.controllers: List[Controller] = []
        self._stop_requested = False

    @property
    def current_time_ms(self) -> int:
        return self.clock.current_time_ms

    @property
    def is_running(self) -> bool:
        return self.status is SimulatorStatus.RUNNING

    @property
    def is_finished(self) -> bool:
        return self.status in (SimulatorStatus.TIMED_OUT, SimulatorStatus.STOPPED)

    def add_controller(self, controller: Controller):
        """Register ``controller(simulator, events)``, called after each tick."""
        self.controllers.append(controller)

    def command(self, name: str, value: float):
        """
        Command an actuator.

        The value is held and consumed at the actuator's next integration.

        Raises:
            KeyError: If no actuator is configured under ``name``
        """
        if name not in self.actuators:
            raise KeyError(f"No actuator named {name!r}")
        self.actuators[name].set_command(value)

    def stop(self):
        """Request cancellation; takes effect at the next tick boundary."""
        if self.is_finished:
            return
        logger.info("Stop requested at %d ms", self.current_time_ms)
        self._stop_requested = True

    def start(self):
        """Begin the run."""
        if self.status is not SimulatorStatus.IDLE:
            raise SimulatorStateError(f"Cannot start from state {self.status.value}")
        self.status = SimulatorStatus.RUNNING
        logger.info("Simulation started: %d sensor(s), %d actuator(s), %s timestep, "
                    "timeout %d ms", len(self.sensors), len(self.actuators),
                    self.clock.state.mode.value, self.config.timeout_ms)

    def step(self) -> List[DeviceEvent]:
        """
        Advance simulation by one tick.

        Returns:
            Events emitted during the tick
        """
        if self.status is not SimulatorStatus.RUNNING:
            raise SimulatorStateError(f"Cannot step in state {self.status.value}")

        if self._stop_requested:
            self._finish(SimulatorStatus.STOPPED)
            return []

        deadlines = [device.next_deadline_ms for device in self._devices()]
        now = self.clock.next_event_time(deadlines)
        self.clock.advance_to(now)

        tick_events: List[DeviceEvent] = []

        # === Actuators ===

        momentum_change = np.zeros(3)
        integrated = False
        for name, actuator in self.actuators.items():
            if not actuator.is_due(now):
                continue
            h_before = actuator.momentum_vector()
            state = actuator.integrate(now)
            actuator.mark_polled(now)
            momentum_change += actuator.momentum_vector() - h_before
            integrated = True
            tick_events.append(DeviceEvent(now, name, actuator.kind, state))

        if integrated:
            torque = sum((a.torque_vector() for a in self.actuators.values()), np.zeros(3))
            self.body.apply_momentum_exchange(momentum_change, torque)

        # === Sensors ===

        for name, sensor in self.sensors.items():
            if not sensor.is_due(now):
                continue
            reading = sensor.sample(now, self.body)
            sensor.mark_polled(now)
            tick_events.append(DeviceEvent(now, name, sensor.kind, reading))

        self.events.extend(tick_events)
        logger.debug("Tick %d at %d ms: %d event(s)",
                     self.clock.state.step_count, now, len(tick_events))

        for controller in self.controllers:
            controller(self, tick_events)

        if self.clock.is_timed_out:
            self._finish(SimulatorStatus.TIMED_OUT)

        return tick_events

    def run(self, progress_callback: Callable[[float], None] = None) -> SimulationResult:
        """
        Run until the run times out or is stopped.

        Args:
            progress_callback: Called with elapsed fraction of the timeout (0-1)

        Returns:
            SimulationResult
        """
        if self.status is SimulatorStatus.IDLE:
            self.start()

        while self.status is SimulatorStatus.RUNNING:
            self.step()
            if progress_callback and self.clock.state.step_count % 100 == 0:
                progress_callback(self.clock.elapsed_ms / self.config.timeout_ms)

        return self.result()

    def result(self) -> SimulationResult:
        """Result of a finished run."""
        if not self.is_finished:
            raise SimulatorStateError(f"Run not finished (state {self.status.value})")
        outcome = (RunOutcome.TIMED_OUT if self.status is SimulatorStatus.TIMED_OUT
                   else RunOutcome.STOPPED)
        return SimulationResult(
            outcome=outcome,
            end_time_ms=self.clock.current_time_ms,
            step_count=self.clock.state.step_count,
            events=list(self.events),
        )

    def reset(self):
        """Return to Idle with initial device, body and clock state."""
        self.clock.reset()
        self.body.reset()
        for device in self._devices():
            device.reset(self.clock.current_time_ms)
        self.events.clear()
        self._stop_requested = False
        self.status = SimulatorStatus.IDLE

    def _devices(self):
        yield from self.actuators.values()
        yield from self.sensors.values()

    def _finish(self, status: SimulatorStatus):
        self.status = status
        if status is SimulatorStatus.TIMED_OUT:
            logger.info("Simulation timed out at %d ms without reaching objective "
                        "(%d events)", self.current_time_ms, len(self.events))
        else:
            logger.info("Simulation stopped at %d ms (%d events)",
                        self.current_time_ms, len(self.events))

    def events_for(self, name: str) -> List[DeviceEvent]:
        return [e for e in self.events if e.device == name]

    def actuator_history(self, name: str, filename: str = None) -> np.ndarray:
        """
        Export one actuator's states.

        Args:
            name: Actuator name
            filename: Optional CSV filename

        Returns:
            Array with columns time_ms, position, velocity, acceleration
        """
        rows = [(e.time_ms, e.payload.position, e.payload.velocity, e.payload.acceleration)
                for e in self.events_for(name) if e.kind == "actuator"]
        data = np.array(rows, dtype=float).reshape(-1, 4)
        if filename:
            np.savetxt(filename, data, delimiter=',',
                       header="time_ms,position,velocity,acceleration")
        return data

    def sensor_history(self, name: str, filename: str = None) -> np.ndarray:
        """
        Export one sensor's readings.

        Args:
            name: Sensor name
            filename: Optional CSV filename

        Returns:
            Array with columns time_ms, x, y, z
        """
        rows = [(e.time_ms, *e.payload.value) for e in self.events_for(name)
                if e.kind == "sensor"]
        data = np.array(rows, dtype=float).reshape(-1, 4)
        if filename:
            np.savetxt(filename, data, delimiter=',', header="time_ms,x,y,z")
        return data

    def get_telemetry(self) -> Dict:
        """
        Get current telemetry data.

        Returns:
            Dictionary of telemetry values
        """
        return {
            'time_ms': self.clock.current_time_ms,
            'status': self.status.value,
            'body_angular_velocity': self.body.velocity.tolist(),
            'body_angular_acceleration': self.body.acceleration.tolist(),
            'actuators': {
                name: {
                    'position': a.state.position,
                    'velocity': a.state.velocity,
                    'acceleration': a.state.acceleration,
                }
                for name, a in self.actuators.items()
            },
        }
