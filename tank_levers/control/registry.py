"""
Control Registry

The in-memory model built once at startup: levers in processing order,
the displays, and the drive pools the levers were bound to.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from tank_levers.shared.types import ControlLever, DisplaySurface, Role


@dataclass
class ControlRegistry:
    levers: List[ControlLever] = field(default_factory=list)
    displays: List[DisplaySurface] = field(default_factory=list)
    drive_pools: Dict[Role, list] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def levers_for(self, role: Role) -> List[ControlLever]:
        return [lever for lever in self.levers if lever.role is role]

    def summary(self) -> str:
        left = len(self.drive_pools.get(Role.LEFT, []))
        right = len(self.drive_pools.get(Role.RIGHT, []))
        return (
            f"{len(self.levers_for(Role.LEFT))} left, "
            f"{len(self.levers_for(Role.RIGHT))} right, "
            f"{len(self.levers_for(Role.GEAR))} gear levers; "
            f"{left}+{right} drive rotors; "
            f"{len(self.displays)} displays"
        )
