"""
Shared type definitions for Tank Levers.
"""

import math
import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple


class Role(Enum):
    """Logical control channel a lever (or drive pool) belongs to."""
    LEFT = "Left"
    RIGHT = "Right"
    GEAR = "Gear"


def to_float32(value: float) -> float:
    """Round a Python float to single precision."""
    return struct.unpack('<f', struct.pack('<f', value))[0]


@dataclass
class ControlLever:
    """
    A hinge whose angle commands one channel.

    `port` is the hinge port (angle input, enable/limit output).
    `bound_actuators` holds the rotor devices of the lever's drive pool and
    is empty for Gear levers.

    `last_commanded_speed` starts as NaN so the first tick always writes.
    """

    name: str
    port: Any
    role: Role
    reversed: bool = False
    bound_actuators: List[Any] = field(default_factory=list)
    last_commanded_speed: float = math.nan


@dataclass(frozen=True)
class DisplaySurface:
    """A text panel and the channels it wants to show."""

    name: str
    sink: Any
    filter_left: bool = False
    filter_right: bool = False
    filter_gear: bool = False

    @property
    def unfiltered(self) -> bool:
        return not (self.filter_left or self.filter_right or self.filter_gear)


@dataclass
class EngineState:
    """Carried state of the mapping engine between ticks."""
    gear_ratio: float = 1.0


@dataclass
class LeverStatus:
    """What happened to one lever during one tick."""

    name: str
    role: Role
    raw_angle: float               # degrees, before deadzone
    angle: float                   # degrees, after deadzone
    speed: float                   # rpm
    gear: Optional[float] = None   # only set for Gear levers
    wrote: bool = False
    # (rotor name, target velocity before this tick's write)
    previous_speeds: List[Tuple[str, float]] = field(default_factory=list)


@dataclass
class TickReport:
    """Output of one mapping engine tick."""

    left: str = ""
    right: str = ""
    gear: str = ""
    statuses: List[LeverStatus] = field(default_factory=list)
    gear_ratio: float = 1.0

    @property
    def combined(self) -> str:
        return self.left + self.right + self.gear

    def __str__(self):
        return (
            f"TickReport(levers={len(self.statuses)}, "
            f"writes={sum(1 for s in self.statuses if s.wrote)}, "
            f"gear_ratio={self.gear_ratio:.2f})"
        )
