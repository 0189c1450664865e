"""
Status Aggregator

Turns a tick's lever statuses into text and routes it to the displays.

Per-channel text (angles to 1 decimal, speeds and ratios to 2):

    Left @ 45.0°
    	Target Speed: 45.00rpm
    	Tank Drive Left 1 @ 0.00rpm       (one line per rotor written this tick)
    Gear 18.0°
    	Gear Ratio: x 0.36

A display with no Left/Right/Gear tag shows everything (Left, then Right,
then Gear). A filtered display shows only its channels, in the same order.
The controller's own surface and the echo log always get everything.
"""

import logging

from tank_levers.control.registry import ControlRegistry
from tank_levers.shared.types import LeverStatus, Role, TickReport

logger = logging.getLogger(__name__)


def format_drive_status(status: LeverStatus) -> str:
    lines = [
        f"{status.role.value} @ {status.angle:.1f}°",
        f"\tTarget Speed: {status.speed + 0.0:.2f}rpm",  # + 0.0 drops negative zero
    ]
    for name, previous in status.previous_speeds:
        lines.append(f"\t{name} @ {previous:.2f}rpm")
    return "\n".join(lines) + "\n"


def format_gear_status(status: LeverStatus) -> str:
    return (
        f"Gear {round(status.raw_angle, 1) + 0.0:.1f}°\n"
        f"\tGear Ratio: x {status.gear + 0.0:.2f}\n"
    )


def add_status(report: TickReport, status: LeverStatus):
    """Append one lever's status to its channel buffer."""
    report.statuses.append(status)
    if status.role is Role.GEAR:
        report.gear += format_gear_status(status)
    elif status.role is Role.LEFT:
        report.left += format_drive_status(status)
    else:
        report.right += format_drive_status(status)


class StatusAggregator:
    """
    Distributes a TickReport to every display surface.

    Args:
        controller_surface: The controller's own text surface
        echo: Diagnostic output (usually a LogSink)
    """

    def __init__(self, controller_surface=None, echo=None):
        self.controller_surface = controller_surface
        self.echo = echo

    def publish(self, registry: ControlRegistry, report: TickReport) -> str:
        combined = report.combined

        for display in registry.displays:
            display.sink.clear()
            if display.unfiltered:
                display.sink.write_text(combined, True)
                continue
            if display.filter_left:
                display.sink.write_text(report.left, True)
            if display.filter_right:
                display.sink.write_text(report.right, True)
            if display.filter_gear:
                display.sink.write_text(report.gear, True)

        if self.controller_surface is not None:
            self.controller_surface.write_text(combined)
        if self.echo is not None:
            self.echo.write_text(combined)

        logger.debug(f"Published {report}")
        return combined
