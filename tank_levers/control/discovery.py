"""
Discovery Adapter

Runs once at startup. Finds the tank's displays, drive rotors and control
hinges in the device directory by their labels and builds the
ControlRegistry from them.

Naming convention:
    Tank Control Left|Right [Reversed]   control lever for one track
    Tank Control Gear [Reversed]         gear ratio lever
    Tank Drive Left|Right                drive rotor
    Tank LCD [Left] [Right] [Gear]       status display, optionally filtered

Levers are registered Gear first, then Left, then Right. The mapping engine
processes them in that order, so drive levers always see the gear ratio set
in the same tick. With more than one Gear lever the last one wins.

Nothing is rejected here. Labels that make the setup ambiguous are logged
as warnings and kept on registry.warnings.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, List

from tank_levers.control import naming
from tank_levers.control.registry import ControlRegistry
from tank_levers.drivers.directory import HINGE, LCD as LCD_KIND, ROTOR, Device
from tank_levers.shared.types import ControlLever, DisplaySurface, Role

logger = logging.getLogger(__name__)

LEVER_PASSES = (Role.GEAR, Role.LEFT, Role.RIGHT)


@dataclass(frozen=True)
class LabelConfig:
    """Typed reading of the role and option tags in one device label."""
    roles: FrozenSet[Role]
    reversed: bool

    def has_role(self, role: Role) -> bool:
        return role in self.roles


def parse_label(label: str) -> LabelConfig:
    return LabelConfig(
        roles=frozenset(role for role in Role if naming.has_token(label, role.value)),
        reversed=naming.has_token(label, naming.REVERSED),
    )


def find_by_tags(directory, kind: str, construct: str, *required_tags: str) -> List[Device]:
    """Devices of one kind on our construct whose label carries every tag."""
    return directory.query(
        lambda device: device.kind == kind
        and device.construct == construct
        and naming.matches(device.name, required_tags)
    )


def discover(directory, construct: str) -> ControlRegistry:
    """
    Build the control registry from the directory.

    Args:
        directory: Anything with query(predicate) -> list of Device
        construct: The controller's own construct; devices elsewhere are ignored

    Returns:
        Populated ControlRegistry
    """
    registry = ControlRegistry()

    for device in find_by_tags(directory, LCD_KIND, construct, naming.TANK, naming.LCD):
        label = parse_label(device.name)
        registry.displays.append(DisplaySurface(
            name=device.name,
            sink=device.port,
            filter_left=label.has_role(Role.LEFT),
            filter_right=label.has_role(Role.RIGHT),
            filter_gear=label.has_role(Role.GEAR),
        ))

    for role in (Role.LEFT, Role.RIGHT):
        registry.drive_pools[role] = find_by_tags(
            directory, ROTOR, construct, naming.TANK, naming.DRIVE, role.value
        )

    for role in LEVER_PASSES:
        pool = registry.drive_pools.get(role, [])
        for device in find_by_tags(directory, HINGE, construct, naming.TANK, naming.CONTROL, role.value):
            label = parse_label(device.name)
            registry.levers.append(ControlLever(
                name=device.name,
                port=device.port,
                role=role,
                reversed=label.reversed,
                bound_actuators=pool if role is not Role.GEAR else [],
            ))

    for message in validate(registry):
        logger.warning(message)
        registry.warnings.append(message)

    logger.info(f"Discovered {registry.summary()}")
    return registry


def validate(registry: ControlRegistry) -> List[str]:
    """Describe every ambiguity in the discovered setup."""
    warnings = []

    seen = set()
    for lever in registry.levers:
        roles = parse_label(lever.name).roles
        if len(roles) > 1 and lever.name not in seen:
            seen.add(lever.name)
            names = "/".join(r.value for r in LEVER_PASSES if r in roles)
            warnings.append(
                f"Lever '{lever.name}' is tagged {names} and is registered once per role"
            )

    gears = registry.levers_for(Role.GEAR)
    if len(gears) > 1:
        warnings.append(
            f"{len(gears)} gear levers found; '{gears[-1].name}' sets the gear ratio"
        )

    for role in (Role.LEFT, Role.RIGHT):
        levers = registry.levers_for(role)
        pool = registry.drive_pools.get(role, [])
        if levers and not pool:
            warnings.append(f"{role.value} lever has no 'Tank Drive {role.value}' rotors to drive")
        if pool and not levers:
            warnings.append(f"{len(pool)} {role.value} drive rotors have no control lever")

    return warnings
