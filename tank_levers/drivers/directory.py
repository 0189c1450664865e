"""
Device Directory

Lists the devices the controller can see. Each device has a label (its
name), a kind (hinge, rotor or lcd), the construct it belongs to, and a
port object that does the actual I/O.

The directory is built once from the device file:

    devices:
      - name: Tank Control Left
        kind: hinge
        driver: sim          # sim | modbus
        angle_deg: 0.0
      - name: Tank Drive Left
        kind: rotor
        driver: modbus
        device_id: 3
      - name: Tank LCD Left
        kind: lcd
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from tank_levers.drivers.modbus_port import ModbusBus, ModbusHinge, ModbusRotor
from tank_levers.drivers.ports import SimulatedHinge, SimulatedRotor, TextPanel
from tank_levers.utils.config import ConfigError

logger = logging.getLogger(__name__)

HINGE = "hinge"
ROTOR = "rotor"
LCD = "lcd"

KINDS = (HINGE, ROTOR, LCD)


@dataclass
class Device:
    """A device as seen through the directory."""
    name: str
    kind: str
    construct: str
    port: Any


class StaticDirectory:
    """Directory over a fixed list of devices, in file order."""

    def __init__(self, devices: Iterable[Device] = ()):
        self._devices: List[Device] = list(devices)

    def __len__(self):
        return len(self._devices)

    def add(self, device: Device):
        self._devices.append(device)

    def query(self, predicate: Callable[[Device], bool]) -> List[Device]:
        return [d for d in self._devices if predicate(d)]

    @classmethod
    def from_config(cls, entries: Iterable[dict], construct: str,
                    bus: Optional[ModbusBus] = None) -> 'StaticDirectory':
        """
        Build a directory from device file entries.

        Args:
            entries: Device dicts (name, kind, driver, ...)
            construct: Construct assigned to entries that don't name one
            bus: Modbus line for entries with driver 'modbus'

        Raises:
            ConfigError: On an entry that isn't a mapping, an unknown kind
                         or driver, or a modbus entry without a bus
        """
        directory = cls()
        for entry in entries:
            directory.add(_build_device(entry, construct, bus))
        logger.info(f"Directory holds {len(directory)} devices")
        return directory


def _build_device(entry: dict, construct: str, bus: Optional[ModbusBus]) -> Device:
    if not isinstance(entry, dict):
        raise ConfigError(f"Device entry is not a mapping: {entry!r}")
    name = entry.get('name')
    kind = entry.get('kind')
    if not name:
        raise ConfigError(f"Device entry without a name: {entry}")
    if kind not in KINDS:
        raise ConfigError(f"Device '{name}' has unknown kind: {kind}")

    driver = entry.get('driver', 'sim')
    if kind == LCD:
        port = TextPanel()
    elif driver == 'sim':
        if kind == HINGE:
            port = SimulatedHinge(angle_deg=entry.get('angle_deg', 0.0))
        else:
            port = SimulatedRotor(entry.get('target_velocity_rpm', 0.0))
    elif driver == 'modbus':
        if bus is None:
            raise ConfigError(f"Device '{name}' uses modbus but no modbus bus is configured")
        device_id = entry.get('device_id')
        if device_id is None:
            raise ConfigError(f"Device '{name}' uses modbus but has no device_id")
        port = ModbusHinge(bus, device_id) if kind == HINGE else ModbusRotor(bus, device_id)
    else:
        raise ConfigError(f"Device '{name}' has unknown driver: {driver}")

    return Device(
        name=name,
        kind=kind,
        construct=entry.get('construct', construct),
        port=port,
    )
