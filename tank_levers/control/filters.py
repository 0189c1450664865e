"""
Filters used by the mapping engine.
"""

import math

from tank_levers.shared.types import to_float32

DEGREES_PER_RADIAN = to_float32(180.0 / math.pi)


def normalize_angle(radians: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    angle = math.fmod(radians, 2.0 * math.pi)
    if angle <= -math.pi:
        angle += 2.0 * math.pi
    elif angle > math.pi:
        angle -= 2.0 * math.pi
    return angle


def lever_degrees(radians: float) -> float:
    """Hinge angle in single precision degrees, within (-180, 180]."""
    return to_float32(normalize_angle(radians) * DEGREES_PER_RADIAN)


class Deadzone:
    """
    Symmetric deadzone around zero.

    Angles strictly inside (-width, width) read as exactly 0 so the lever
    can be centred by hand.
    """

    def __init__(self, width: float):
        self.width = width

    def apply(self, value: float) -> float:
        if -self.width < value < self.width:
            return 0.0
        return value
