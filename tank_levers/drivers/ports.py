"""
Device Ports

The controller never talks to a device object directly. A hinge is seen
through a HingePort (angle in, enable/limits out), a rotor through a
RotorPort (target velocity), and a display through a TextSink.

This module defines those protocols plus in-memory implementations used
by the simulator and by the tests.

Usage:
    from tank_levers.drivers.ports import SimulatedHinge, SimulatedRotor, TextPanel

    hinge = SimulatedHinge(angle_deg=45.0)
    rotor = SimulatedRotor()
    panel = TextPanel()
"""

import logging
import math
import sys
from typing import List, Optional, Protocol, TextIO

logger = logging.getLogger(__name__)


class HingePort(Protocol):
    """Input capability of a control lever, plus its unlock controls."""

    def get_angle(self) -> float:
        """Current angle in radians."""
        ...

    def set_enabled(self, enabled: bool) -> None: ...

    def set_lower_limit_deg(self, degrees: float) -> None: ...

    def set_upper_limit_deg(self, degrees: float) -> None: ...


class RotorPort(Protocol):
    """Output capability of a drive actuator."""

    def get_target_velocity_rpm(self) -> float: ...

    def set_target_velocity_rpm(self, rpm: float) -> None: ...


class TextSink(Protocol):
    """Anything that can show status text."""

    def clear(self) -> None: ...

    def write_text(self, text: str, append: bool = False) -> None: ...

    def write_line(self, text: str) -> None: ...


# =============================================================================
# SIMULATED DEVICES
# =============================================================================

class SimulatedHinge:
    """
    In-memory hinge.

    Keeps the angle in radians like a real hinge reports it, and records
    every call so tests can assert on side effects.
    """

    def __init__(self, angle_deg: float = 0.0, enabled: bool = True,
                 lower_limit_deg: float = -90.0, upper_limit_deg: float = 90.0):
        self.angle = math.radians(angle_deg)
        self.enabled = enabled
        self.lower_limit_deg = lower_limit_deg
        self.upper_limit_deg = upper_limit_deg
        self.calls: List[tuple] = []

    def set_angle_deg(self, degrees: float):
        self.angle = math.radians(degrees)

    def get_angle(self) -> float:
        return self.angle

    def set_enabled(self, enabled: bool) -> None:
        self.calls.append(("set_enabled", enabled))
        self.enabled = enabled

    def set_lower_limit_deg(self, degrees: float) -> None:
        self.calls.append(("set_lower_limit_deg", degrees))
        self.lower_limit_deg = degrees

    def set_upper_limit_deg(self, degrees: float) -> None:
        self.calls.append(("set_upper_limit_deg", degrees))
        self.upper_limit_deg = degrees


class SimulatedRotor:
    """In-memory rotor that remembers what it was told."""

    def __init__(self, target_velocity_rpm: float = 0.0):
        self.target_velocity_rpm = target_velocity_rpm
        self.write_count = 0

    def get_target_velocity_rpm(self) -> float:
        return self.target_velocity_rpm

    def set_target_velocity_rpm(self, rpm: float) -> None:
        self.write_count += 1
        self.target_velocity_rpm = rpm


# =============================================================================
# TEXT SINKS
# =============================================================================

class TextPanel:
    """In-memory text surface."""

    def __init__(self):
        self.text = ""

    def clear(self) -> None:
        self.text = ""

    def write_text(self, text: str, append: bool = False) -> None:
        self.text = self.text + text if append else text

    def write_line(self, text: str) -> None:
        self.text += text + "\n"


class LogSink:
    """Sends status text to a logger, one record per write."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.log = log or logger
        self.level = level

    def clear(self) -> None:
        pass

    def write_text(self, text: str, append: bool = False) -> None:
        text = text.rstrip("\n")
        if text:
            self.log.log(self.level, "\n%s", text)

    def write_line(self, text: str) -> None:
        self.log.log(self.level, "%s", text)


class ConsoleSink:
    """Redraws the status text on a terminal stream."""

    CLEAR_SCREEN = "\033[2J\033[H"

    def __init__(self, stream: TextIO = None, redraw: bool = True):
        self.stream = stream or sys.stdout
        self.redraw = redraw

    def clear(self) -> None:
        if self.redraw:
            self.stream.write(self.CLEAR_SCREEN)

    def write_text(self, text: str, append: bool = False) -> None:
        if not append:
            self.clear()
        self.stream.write(text)
        self.stream.flush()

    def write_line(self, text: str) -> None:
        self.stream.write(text + "\n")
        self.stream.flush()
