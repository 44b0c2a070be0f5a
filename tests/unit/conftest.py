import copy
from pathlib import Path

import pytest

DATA_DIR = Path(__file__).parent / "data"


BASE_DOCUMENT = {
    "Satellite": {
        "Moment": [[1.0, 0, 0], [0, 1.0, 0], [0, 0, 1.0]],
        "Position": [0, 0, 0],
        "Velocity": [0, 0, 0],
    },
    "Sensors": {},
    "Actuators": {},
    "VariableTimestep": False,
    "TimeStep": 1,
    "Timeout": 100,
}


def _wheel_node(**overrides):
    node = {
        "type": "ReactionWheel",
        "Moment": 1,
        "MaxAngVel": 1000,
        "MaxAngAccel": 1000,
        "MinAngVel": 0,
        "MinAngAccel": 0,
        "PollingTime": 1,
        "Position": [0, 0, 0],
        "Velocity": 0,
        "AxisOfRotation": [0, 0, 1],
        "Acceleration": 0,
    }
    node.update(overrides)
    return node


def _sensor_node(sensor_type="Gyroscope", polling=10, position=(0, 0, 0)):
    return {"type": sensor_type, "PollingTime": polling, "Position": list(position)}


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def make_document():
    """Build a configuration document from the base, overriding top-level keys."""
    def _make(sensors=None, actuators=None, **top_level):
        doc = copy.deepcopy(BASE_DOCUMENT)
        doc["Sensors"] = sensors or {}
        doc["Actuators"] = actuators or {}
        doc.update(top_level)
        return doc
    return _make


@pytest.fixture
def wheel_node():
    """Reaction wheel node builder; keyword arguments override fields."""
    return _wheel_node


@pytest.fixture
def sensor_node():
    return _sensor_node
