"""
Mapping Engine

Per-tick core. For each lever, in registry order:

    1. Read the hinge angle, wrap into (-180, 180] degrees (single precision)
    2. At exactly 0° unlock the hinge: disable it, limits back to +-90°
    3. Deadzone: |angle| < 5° counts as 0°
    4. speed = angle * rpm_per_degree * gear_ratio, negated if Reversed
    5. Gear lever: gear_ratio = angle * gear_ratio_per_degree (negated if
       Reversed); visible to every lever processed after it.
       Left/Right lever: write speed to every bound rotor, but only when it
       differs from the speed last written by this lever.

The gear ratio lives in an EngineState passed in by the caller, so the
order dependency is explicit: whatever a Gear lever writes is what the
levers after it in the same tick use.

Speeds are not clamped here; the rotor enforces its own limits.
"""

import logging
from dataclasses import dataclass, fields

from tank_levers.control.filters import Deadzone, lever_degrees
from tank_levers.control.registry import ControlRegistry
from tank_levers.control.status import add_status
from tank_levers.shared.types import ControlLever, EngineState, LeverStatus, Role, TickReport

logger = logging.getLogger(__name__)


@dataclass
class MappingConfig:
    rpm_per_degree: float = 1.0
    gear_ratio_per_degree: float = 0.02   # 90° => x1.8
    deadzone_deg: float = 5.0             # +- degrees
    default_gear_ratio: float = 1.0
    unlock_lower_limit_deg: float = -90.0
    unlock_upper_limit_deg: float = 90.0

    @classmethod
    def from_dict(cls, config: dict) -> 'MappingConfig':
        """Build from a config section, ignoring keys that aren't fields."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config.items() if k in names})


class MappingEngine:
    """Converts lever angles into rotor target velocities."""

    def __init__(self, config: MappingConfig = None):
        self.config = config or MappingConfig()
        self.deadzone = Deadzone(self.config.deadzone_deg)

    def new_state(self) -> EngineState:
        return EngineState(gear_ratio=self.config.default_gear_ratio)

    def run_tick(self, registry: ControlRegistry, state: EngineState) -> TickReport:
        """
        Process every lever once.

        Device errors are not caught here; a failed read or write aborts the
        tick and the next tick starts over from live device state.

        Args:
            registry: Discovered levers and displays
            state: Carried engine state, updated in place

        Returns:
            TickReport with per-channel text and per-lever statuses
        """
        report = TickReport()
        for lever in registry.levers:
            add_status(report, self.process_lever(lever, state))
        report.gear_ratio = state.gear_ratio
        return report

    def process_lever(self, lever: ControlLever, state: EngineState) -> LeverStatus:
        raw_angle = lever_degrees(lever.port.get_angle())

        # unlock at 0°
        if raw_angle == 0:
            self._unlock(lever)

        angle = self.deadzone.apply(raw_angle)

        speed = angle * self.config.rpm_per_degree * state.gear_ratio
        if lever.reversed:
            speed = -speed

        if lever.role is Role.GEAR:
            gear = angle * self.config.gear_ratio_per_degree
            if lever.reversed:
                gear = -gear
            state.gear_ratio = gear
            return LeverStatus(
                name=lever.name,
                role=lever.role,
                raw_angle=raw_angle,
                angle=angle,
                speed=speed,
                gear=gear,
            )

        status = LeverStatus(
            name=lever.name,
            role=lever.role,
            raw_angle=raw_angle,
            angle=angle,
            speed=speed,
        )

        # skip redundant commands; NaN on the first tick never compares equal
        if speed != lever.last_commanded_speed:
            for rotor in lever.bound_actuators:
                status.previous_speeds.append((rotor.name, rotor.port.get_target_velocity_rpm()))
                rotor.port.set_target_velocity_rpm(speed)
            lever.last_commanded_speed = speed
            status.wrote = True
            logger.debug(f"{lever.name}: {speed:.2f}rpm -> {len(lever.bound_actuators)} rotors")

        return status

    def _unlock(self, lever: ControlLever):
        lever.port.set_enabled(False)
        lever.port.set_lower_limit_deg(self.config.unlock_lower_limit_deg)
        lever.port.set_upper_limit_deg(self.config.unlock_upper_limit_deg)
