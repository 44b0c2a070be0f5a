"""
Simulation Configuration
========================

Device, satellite and clock configuration records for the ADCS simulator,
and the loader that builds them from a YAML configuration document.

Document layout::

    Satellite:
      Moment: [[...], [...], [...]]   # 3x3 inertia matrix
      Position: [x, y, z]
      Velocity: [x, y, z]
    Actuators:
      <name>:
        type: ReactionWheel
        Moment, MaxAngVel, MaxAngAccel, MinAngVel, MinAngAccel,
        PollingTime (ms), Position, Velocity, AxisOfRotation, Acceleration
    Sensors:
      <name>:
        type: Gyroscope | Accelerometer
        PollingTime (ms), Position
    VariableTimestep: bool
    TimeStep: ms            # fixed mode
    TimeStepMax: ms         # adaptive mode
    TimeStepMin: ms         # adaptive mode
    Timeout: ms

All times are integer milliseconds.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Optional, Union

import numpy as np
import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SensorType(str, Enum):
    """Sensor type tags recognised in the ``Sensors`` section."""
    GYROSCOPE = "Gyroscope"
    ACCELEROMETER = "Accelerometer"


class ActuatorType(str, Enum):
    """Actuator type tags recognised in the ``Actuators`` section."""
    REACTION_WHEEL = "ReactionWheel"


def _frozen_array(value, key: str, shape: tuple) -> np.ndarray:
    """Copy ``value`` into a read-only float array of the given shape."""
    try:
        arr = np.array(value, dtype=float)
    except (TypeError, ValueError):
        raise ConfigurationError(key, f"expected numeric array of shape {shape}")
    if arr.shape != shape:
        raise ConfigurationError(key, f"expected shape {shape}, got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ConfigurationError(key, "values must be finite")
    arr.setflags(write=False)
    return arr


def _check_range(key: str, low: float, high: float):
    if low > high:
        raise ConfigurationError(key, f"minimum {low} exceeds maximum {high}")


# =============================================================================
# Device records
# =============================================================================

@dataclass(frozen=True, eq=False)
class SensorSpec:
    """Common sensor configuration: polling interval and placement."""
    polling_time_ms: int
    position: np.ndarray

    type: ClassVar[SensorType]

    def __post_init__(self):
        if self.polling_time_ms <= 0:
            raise ConfigurationError("PollingTime", "must be positive")
        object.__setattr__(self, "position",
                           _frozen_array(self.position, "Position", (3,)))


@dataclass(frozen=True, eq=False)
class GyroscopeSpec(SensorSpec):
    """Rate gyroscope."""
    type: ClassVar[SensorType] = SensorType.GYROSCOPE


@dataclass(frozen=True, eq=False)
class AccelerometerSpec(SensorSpec):
    """Body-mounted accelerometer."""
    type: ClassVar[SensorType] = SensorType.ACCELEROMETER


@dataclass(frozen=True, eq=False)
class ActuatorSpec:
    """Common actuator configuration: polling interval and placement."""
    polling_time_ms: int
    position: np.ndarray

    type: ClassVar[ActuatorType]

    def __post_init__(self):
        if self.polling_time_ms <= 0:
            raise ConfigurationError("PollingTime", "must be positive")
        object.__setattr__(self, "position",
                           _frozen_array(self.position, "Position", (3,)))


@dataclass(frozen=True, eq=False)
class ReactionWheelSpec(ActuatorSpec):
    """
    Reaction wheel configuration.

    Velocities are wheel angular rates about ``axis_of_rotation``,
    accelerations their time derivatives. ``velocity`` and ``acceleration``
    are the initial values.
    """
    axis_of_rotation: np.ndarray = field(
        default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    moment_of_inertia: float = 1.0
    min_ang_vel: float = 0.0
    max_ang_vel: float = 0.0
    min_ang_accel: float = 0.0
    max_ang_accel: float = 0.0
    velocity: float = 0.0
    acceleration: float = 0.0

    type: ClassVar[ActuatorType] = ActuatorType.REACTION_WHEEL

    def __post_init__(self):
        super().__post_init__()
        axis = _frozen_array(self.axis_of_rotation, "AxisOfRotation", (3,))
        norm = np.linalg.norm(axis)
        if norm < 1e-12:
            raise ConfigurationError("AxisOfRotation", "axis must be non-zero")
        axis = axis / norm
        axis.setflags(write=False)
        object.__setattr__(self, "axis_of_rotation", axis)

        if self.moment_of_inertia <= 0:
            raise ConfigurationError("Moment", "wheel inertia must be positive")
        _check_range("MinAngVel/MaxAngVel", self.min_ang_vel, self.max_ang_vel)
        _check_range("MinAngAccel/MaxAngAccel", self.min_ang_accel, self.max_ang_accel)


# =============================================================================
# Run-level records
# =============================================================================

@dataclass(frozen=True, eq=False)
class SatelliteParameters:
    """Rigid-body properties of the satellite."""
    moment_of_inertia: np.ndarray = field(default_factory=lambda: np.eye(3))
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        inertia = _frozen_array(self.moment_of_inertia, "Satellite.Moment", (3, 3))
        if abs(np.linalg.det(inertia)) < 1e-15:
            raise ConfigurationError("Satellite.Moment", "inertia matrix is singular")
        object.__setattr__(self, "moment_of_inertia", inertia)
        object.__setattr__(self, "position",
                           _frozen_array(self.position, "Satellite.Position", (3,)))
        object.__setattr__(self, "velocity",
                           _frozen_array(self.velocity, "Satellite.Velocity", (3,)))


@dataclass(frozen=True)
class TimestepConfig:
    """Global clock stepping: fixed ``step_ms`` or adaptive within bounds."""
    variable: bool = False
    step_ms: Optional[int] = 1
    step_min_ms: Optional[int] = None
    step_max_ms: Optional[int] = None

    def __post_init__(self):
        if self.variable:
            if self.step_min_ms is None:
                raise ConfigurationError("TimeStepMin", "required for variable timestep")
            if self.step_max_ms is None:
                raise ConfigurationError("TimeStepMax", "required for variable timestep")
            if self.step_min_ms <= 0:
                raise ConfigurationError("TimeStepMin", "must be positive")
            _check_range("TimeStepMin/TimeStepMax", self.step_min_ms, self.step_max_ms)
        else:
            if self.step_ms is None:
                raise ConfigurationError("TimeStep", "required for fixed timestep")
            if self.step_ms <= 0:
                raise ConfigurationError("TimeStep", "must be positive")


@dataclass(frozen=True, eq=False)
class ControllerTargets:
    """Objective parameters for the external controller, passed through as-is."""
    desired_position: Optional[np.ndarray] = None
    allowed_jitter: Optional[float] = None      # deg/s
    required_accuracy: Optional[float] = None   # deg
    hold_time_ms: Optional[int] = None

    def __post_init__(self):
        if self.desired_position is not None:
            object.__setattr__(self, "desired_position",
                               _frozen_array(self.desired_position, "DesiredPosition", (3,)))


@dataclass(frozen=True, eq=False)
class SimulationConfig:
    """
    Complete, immutable configuration of one simulation run.

    Built once (usually by ``load_config``) and handed to the factory and
    the simulator. Spec maps are read-only.
    """
    satellite: SatelliteParameters = field(default_factory=SatelliteParameters)
    sensors: Mapping[str, SensorSpec] = field(default_factory=dict)
    actuators: Mapping[str, ActuatorSpec] = field(default_factory=dict)
    timestep: TimestepConfig = field(default_factory=TimestepConfig)
    timeout_ms: int = 1000
    targets: ControllerTargets = field(default_factory=ControllerTargets)

    def __post_init__(self):
        if self.timeout_ms <= 0:
            raise ConfigurationError("Timeout", "must be positive")
        object.__setattr__(self, "sensors", MappingProxyType(dict(self.sensors)))
        object.__setattr__(self, "actuators", MappingProxyType(dict(self.actuators)))

    def get_sensor_spec(self, name: str) -> Optional[SensorSpec]:
        """Sensor spec registered under ``name``, or None."""
        return self.sensors.get(name)

    def get_actuator_spec(self, name: str) -> Optional[ActuatorSpec]:
        """Actuator spec registered under ``name``, or None."""
        return self.actuators.get(name)

    @classmethod
    def from_dict(cls,
                  document: Mapping[str, Any],
                  exit_document: Optional[Mapping[str, Any]] = None) -> 'SimulationConfig':
        """
        Build a configuration from a parsed configuration document.

        Args:
            document: Parsed main document
            exit_document: Optional parsed exit-conditions document

        Returns:
            Validated SimulationConfig

        Raises:
            ConfigurationError: On any missing or invalid field
        """
        if not isinstance(document, Mapping):
            raise ConfigurationError("<root>", "document must be a mapping")

        satellite = _parse_satellite(_require(document, "Satellite"))

        sensors = {}
        for name, node in _section(document, "Sensors").items():
            sensors[str(name)] = _parse_sensor(f"Sensors.{name}", node)

        actuators = {}
        for name, node in _section(document, "Actuators").items():
            actuators[str(name)] = _parse_actuator(f"Actuators.{name}", node)

        timestep = _parse_timestep(document)
        timeout_ms = _as_ms(_require(document, "Timeout"), "Timeout")

        targets_node = dict(_section(document, "Controller"))
        if exit_document is not None:
            if not isinstance(exit_document, Mapping):
                raise ConfigurationError("<exit>", "expected a mapping")
            targets_node.update(exit_document)
        targets = _parse_targets(targets_node)

        return cls(
            satellite=satellite,
            sensors=sensors,
            actuators=actuators,
            timestep=timestep,
            timeout_ms=timeout_ms,
            targets=targets,
        )


# =============================================================================
# Document parsing
# =============================================================================

def _require(node: Mapping[str, Any], key: str, prefix: str = "") -> Any:
    path = f"{prefix}.{key}" if prefix else key
    if not isinstance(node, Mapping) or key not in node or node[key] is None:
        raise ConfigurationError(path, "missing required field")
    return node[key]


def _section(document: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Optional mapping-valued section; absent or null reads as empty."""
    node = document.get(key)
    if node is None:
        return {}
    if not isinstance(node, Mapping):
        raise ConfigurationError(key, "expected a mapping")
    return node


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(key, "expected a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(key, f"expected a number, got {value!r}")


def _as_ms(value: Any, key: str) -> int:
    """Millisecond quantities must be integral."""
    number = _as_float(value, key)
    if not number.is_integer():
        raise ConfigurationError(key, f"expected whole milliseconds, got {value!r}")
    return int(number)


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ConfigurationError(key, f"expected a boolean, got {value!r}")


def _parse_satellite(node: Mapping[str, Any]) -> SatelliteParameters:
    return SatelliteParameters(
        moment_of_inertia=_require(node, "Moment", "Satellite"),
        position=_require(node, "Position", "Satellite"),
        velocity=_require(node, "Velocity", "Satellite"),
    )


def _polling_ms(node: Mapping[str, Any], path: str) -> int:
    key = f"{path}.PollingTime"
    polling = _as_ms(_require(node, "PollingTime", path), key)
    if polling <= 0:
        raise ConfigurationError(key, "must be positive")
    return polling


_SENSOR_SPECS: Dict[SensorType, type] = {
    SensorType.GYROSCOPE: GyroscopeSpec,
    SensorType.ACCELEROMETER: AccelerometerSpec,
}


def _parse_sensor(path: str, node: Mapping[str, Any]) -> SensorSpec:
    tag = _require(node, "type", path)
    try:
        sensor_type = SensorType(tag)
    except ValueError:
        raise ConfigurationError(f"{path}.type", f"unknown sensor type {tag!r}")

    spec_cls = _SENSOR_SPECS[sensor_type]
    return spec_cls(
        polling_time_ms=_polling_ms(node, path),
        position=_frozen_array(_require(node, "Position", path), f"{path}.Position", (3,)),
    )


def _parse_actuator(path: str, node: Mapping[str, Any]) -> ActuatorSpec:
    tag = _require(node, "type", path)
    try:
        actuator_type = ActuatorType(tag)
    except ValueError:
        raise ConfigurationError(f"{path}.type", f"unknown actuator type {tag!r}")

    if actuator_type is ActuatorType.REACTION_WHEEL:
        def number(key):
            return _as_float(_require(node, key, path), f"{path}.{key}")

        return ReactionWheelSpec(
            polling_time_ms=_polling_ms(node, path),
            position=_frozen_array(_require(node, "Position", path), f"{path}.Position", (3,)),
            axis_of_rotation=_frozen_array(_require(node, "AxisOfRotation", path),
                                           f"{path}.AxisOfRotation", (3,)),
            moment_of_inertia=number("Moment"),
            min_ang_vel=number("MinAngVel"),
            max_ang_vel=number("MaxAngVel"),
            min_ang_accel=number("MinAngAccel"),
            max_ang_accel=number("MaxAngAccel"),
            velocity=number("Velocity"),
            acceleration=number("Acceleration"),
        )

    raise ConfigurationError(f"{path}.type", f"no parser for actuator type {tag!r}")


def _parse_timestep(document: Mapping[str, Any]) -> TimestepConfig:
    variable = _as_bool(document.get("VariableTimestep", False), "VariableTimestep")
    if variable:
        return TimestepConfig(
            variable=True,
            step_ms=None,
            step_min_ms=_as_ms(_require(document, "TimeStepMin"), "TimeStepMin"),
            step_max_ms=_as_ms(_require(document, "TimeStepMax"), "TimeStepMax"),
        )
    return TimestepConfig(
        variable=False,
        step_ms=_as_ms(_require(document, "TimeStep"), "TimeStep"),
    )


def _parse_targets(node: Mapping[str, Any]) -> ControllerTargets:
    def optional_float(key):
        value = node.get(key)
        return None if value is None else _as_float(value, key)

    hold = node.get("HoldTime")
    return ControllerTargets(
        desired_position=node.get("DesiredPosition"),
        allowed_jitter=optional_float("AllowedJitter"),
        required_accuracy=optional_float("RequiredAccuracy"),
        hold_time_ms=None if hold is None else _as_ms(hold, "HoldTime"),
    )


def _read_yaml(path: Union[str, Path]) -> Mapping[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(str(path), f"invalid YAML: {e}") from e
    if data is None:
        raise ConfigurationError(str(path), "configuration file is empty")
    return data


def load_config(path: Union[str, Path],
                exit_path: Optional[Union[str, Path]] = None) -> SimulationConfig:
    """
    Load and validate a simulation configuration file.

    Args:
        path: Main YAML configuration document
        exit_path: Optional YAML document holding controller targets

    Returns:
        SimulationConfig

    Raises:
        FileNotFoundError: If a file doesn't exist
        ConfigurationError: If a document is malformed
    """
    document = _read_yaml(path)
    exit_document = _read_yaml(exit_path) if exit_path is not None else None
    config = SimulationConfig.from_dict(document, exit_document)
    logger.info("Loaded %s: %d sensor(s), %d actuator(s), timeout %d ms",
                path, len(config.sensors), len(config.actuators), config.timeout_ms)
    return config
