"""
Modbus Device Ports

Hinges and rotors that live behind a Modbus controller (RTU over RS485 or
TCP). Each device is addressed by its Modbus device id; all devices on one
line share a ModbusBus.

Register map (per device id):
    - 0x0000: Hinge angle, int32, 1e-4 rad per unit (read)
    - 0x0000: Hinge enable coil (write)
    - 0x0010: Hinge lower limit, int32, 0.01 deg per unit (write)
    - 0x0012: Hinge upper limit, int32, 0.01 deg per unit (write)
    - 0x0020: Rotor target velocity, int32, 0.01 rpm per unit (read/write)

32-bit values are big-endian, high word first.

Usage:
    from tank_levers.drivers.modbus_port import ModbusBus, ModbusHinge, ModbusRotor

    bus = ModbusBus(method='rtu', serial_port='/dev/ttyUSB0')
    bus.connect()
    hinge = ModbusHinge(bus, device_id=1)
    rotor = ModbusRotor(bus, device_id=2)
"""

import logging
import struct

from pymodbus.client import ModbusSerialClient, ModbusTcpClient

logger = logging.getLogger(__name__)


class DeviceIOError(IOError):
    """A Modbus request came back with an error response."""


class ModbusBus:
    """
    One Modbus line shared by every device port on it.

    Wraps the pymodbus client and the int32 register packing.
    """

    def __init__(self, method: str = 'rtu', host: str = '127.0.0.1', port: int = 502,
                 serial_port: str = '/dev/ttyUSB0', baudrate: int = 38400,
                 timeout: float = 1.0, client=None):
        self.method = method
        if client is not None:
            self.client = client
        elif method == 'tcp':
            self.client = ModbusTcpClient(host, port=port, timeout=timeout)
        elif method == 'rtu':
            self.client = ModbusSerialClient(
                port=serial_port,
                baudrate=baudrate,
                parity='N',
                stopbits=1,
                bytesize=8,
                timeout=timeout
            )
        else:
            raise ValueError(f"Unknown Modbus method: {method}")
        self.connected = False

    @classmethod
    def from_config(cls, config: dict) -> 'ModbusBus':
        return cls(
            method=config.get('method', 'rtu'),
            host=config.get('host', '127.0.0.1'),
            port=config.get('port', 502),
            serial_port=config.get('serial_port', '/dev/ttyUSB0'),
            baudrate=config.get('baudrate', 38400),
            timeout=config.get('timeout', 1.0),
        )

    def connect(self) -> bool:
        if not self.client.connect():
            logger.error(f"Failed to open Modbus {self.method} connection")
            return False
        self.connected = True
        logger.info(f"Modbus {self.method} connection open")
        return True

    def close(self):
        self.client.close()
        self.connected = False
        logger.info("Modbus connection closed")

    def read_int32(self, address: int, device_id: int) -> int:
        result = self.client.read_holding_registers(address, count=2, device_id=device_id)
        if result.isError():
            raise DeviceIOError(f"Read of 0x{address:04X} on device {device_id} failed: {result}")
        high, low = result.registers[:2]
        packed = struct.pack('>HH', high, low)
        return struct.unpack('>i', packed)[0]

    def write_int32(self, address: int, value: int, device_id: int):
        packed = struct.pack('>i', value)
        high, low = struct.unpack('>HH', packed)
        result = self.client.write_registers(address, [high, low], device_id=device_id)
        if result.isError():
            raise DeviceIOError(f"Write of 0x{address:04X} on device {device_id} failed: {result}")

    def write_coil(self, address: int, value: bool, device_id: int):
        result = self.client.write_coil(address, value, device_id=device_id)
        if result.isError():
            raise DeviceIOError(f"Coil 0x{address:04X} on device {device_id} failed: {result}")


class ModbusHinge:
    """Hinge port on a Modbus device."""

    REG_ANGLE = 0x0000
    COIL_ENABLE = 0x0000
    REG_LOWER_LIMIT = 0x0010
    REG_UPPER_LIMIT = 0x0012

    ANGLE_SCALE = 10000   # 1e-4 rad per unit
    LIMIT_SCALE = 100     # 0.01 deg per unit

    def __init__(self, bus: ModbusBus, device_id: int):
        self.bus = bus
        self.device_id = device_id

    def get_angle(self) -> float:
        return self.bus.read_int32(self.REG_ANGLE, self.device_id) / self.ANGLE_SCALE

    def set_enabled(self, enabled: bool) -> None:
        self.bus.write_coil(self.COIL_ENABLE, enabled, self.device_id)

    def set_lower_limit_deg(self, degrees: float) -> None:
        self.bus.write_int32(self.REG_LOWER_LIMIT, round(degrees * self.LIMIT_SCALE), self.device_id)

    def set_upper_limit_deg(self, degrees: float) -> None:
        self.bus.write_int32(self.REG_UPPER_LIMIT, round(degrees * self.LIMIT_SCALE), self.device_id)


class ModbusRotor:
    """Rotor port on a Modbus device."""

    REG_TARGET_VELOCITY = 0x0020

    VELOCITY_SCALE = 100  # 0.01 rpm per unit

    def __init__(self, bus: ModbusBus, device_id: int):
        self.bus = bus
        self.device_id = device_id

    def get_target_velocity_rpm(self) -> float:
        return self.bus.read_int32(self.REG_TARGET_VELOCITY, self.device_id) / self.VELOCITY_SCALE

    def set_target_velocity_rpm(self, rpm: float) -> None:
        self.bus.write_int32(self.REG_TARGET_VELOCITY, round(rpm * self.VELOCITY_SCALE), self.device_id)
