"""
Sensors Module
==============

Sensor models for the ADCS simulation.
"""

from .base import Sensor, SensorReading
from .gyroscope import Gyroscope
from .accelerometer import Accelerometer

__all__ = [
    'Sensor',
    'SensorReading',
    'Gyroscope',
    'Accelerometer',
]
