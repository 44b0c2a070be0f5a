"""
Actuators Module
================

Actuator models for the ADCS simulation.
"""

from .base import Actuator, ActuatorState, DeviceBounds, UNBOUNDED
from .reaction_wheel import ReactionWheel

__all__ = [
    'Actuator',
    'ActuatorState',
    'DeviceBounds',
    'UNBOUNDED',
    'ReactionWheel',
]
