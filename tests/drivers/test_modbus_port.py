"""
Unit Tests for Modbus Device Ports

Test Design Techniques Used:
    - Mock testing (pymodbus client)
    - Equivalence partitioning (positive / negative int32 values)
    - Error guessing (error responses)

Run: pytest tests/drivers/test_modbus_port.py -v
"""

import math
from unittest.mock import MagicMock

import pytest

from tank_levers.drivers.modbus_port import DeviceIOError, ModbusBus, ModbusHinge, ModbusRotor


# =============================================================================
# TEST FIXTURES
# =============================================================================

def ok_response(registers=None):
    response = MagicMock()
    response.isError.return_value = False
    response.registers = registers or []
    return response


def error_response():
    response = MagicMock()
    response.isError.return_value = True
    return response


@pytest.fixture
def client():
    """Create a mock pymodbus client that accepts every write."""
    mock = MagicMock()
    mock.connect.return_value = True
    mock.write_registers.return_value = ok_response()
    mock.write_coil.return_value = ok_response()
    return mock


@pytest.fixture
def bus(client):
    return ModbusBus(client=client)


# =============================================================================
# BUS
# =============================================================================

class TestModbusBus:
    """Tests for ModbusBus."""

    def test_connect_success(self, bus):
        assert bus.connect() is True
        assert bus.connected is True

    def test_connect_failure(self, bus, client):
        """Test a failed connect is reported, not raised."""
        client.connect.return_value = False
        assert bus.connect() is False
        assert bus.connected is False

    def test_close(self, bus, client):
        bus.connect()
        bus.close()
        client.close.assert_called_once()
        assert bus.connected is False

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            ModbusBus(method='carrier-pigeon')

    @pytest.mark.parametrize("value,registers", [
        (0, [0x0000, 0x0000]),
        (4500, [0x0000, 0x1194]),
        (-1, [0xFFFF, 0xFFFF]),
        (-4500, [0xFFFF, 0xEE6C]),
        (70000, [0x0001, 0x1170]),
    ])
    def test_int32_write_words(self, bus, client, value, registers):
        """Test int32 values are split high word first."""
        bus.write_int32(0x0020, value, device_id=3)
        client.write_registers.assert_called_once_with(0x0020, registers, device_id=3)

    @pytest.mark.parametrize("registers,value", [
        ([0x0000, 0x1194], 4500),
        ([0xFFFF, 0xEE6C], -4500),
    ])
    def test_int32_read_words(self, bus, client, registers, value):
        client.read_holding_registers.return_value = ok_response(registers)
        assert bus.read_int32(0x0000, device_id=1) == value
        client.read_holding_registers.assert_called_once_with(0x0000, count=2, device_id=1)

    def test_read_error_raises(self, bus, client):
        """Test an error response becomes DeviceIOError."""
        client.read_holding_registers.return_value = error_response()
        with pytest.raises(DeviceIOError):
            bus.read_int32(0x0000, device_id=1)

    def test_write_error_raises(self, bus, client):
        client.write_registers.return_value = error_response()
        with pytest.raises(DeviceIOError):
            bus.write_int32(0x0020, 1, device_id=1)

    def test_from_config(self, monkeypatch):
        """Test from_config picks the client type from method."""
        import tank_levers.drivers.modbus_port as modbus_port
        tcp = MagicMock()
        monkeypatch.setattr(modbus_port, "ModbusTcpClient", tcp)
        bus = ModbusBus.from_config({'method': 'tcp', 'host': '10.0.0.5', 'port': 5020})
        tcp.assert_called_once_with('10.0.0.5', port=5020, timeout=1.0)
        assert bus.client is tcp.return_value


# =============================================================================
# HINGE / ROTOR
# =============================================================================

class TestModbusHinge:
    """Tests for ModbusHinge."""

    def test_angle_in_radians(self, bus, client):
        """Test angle register is 1e-4 rad per unit."""
        client.read_holding_registers.return_value = ok_response([0x0000, 7854])
        hinge = ModbusHinge(bus, device_id=2)
        assert hinge.get_angle() == pytest.approx(math.pi / 4, abs=1e-4)

    def test_unlock_writes(self, bus, client):
        """Test enable coil and +-90 degree limits in 0.01 deg units."""
        hinge = ModbusHinge(bus, device_id=2)
        hinge.set_enabled(False)
        hinge.set_lower_limit_deg(-90)
        hinge.set_upper_limit_deg(90)

        client.write_coil.assert_called_once_with(ModbusHinge.COIL_ENABLE, False, device_id=2)
        client.write_registers.assert_any_call(ModbusHinge.REG_LOWER_LIMIT, [0xFFFF, 0xDCD8], device_id=2)
        client.write_registers.assert_any_call(ModbusHinge.REG_UPPER_LIMIT, [0x0000, 0x2328], device_id=2)


class TestModbusRotor:
    """Tests for ModbusRotor."""

    def test_set_velocity(self, bus, client):
        """Test velocity register is 0.01 rpm per unit."""
        rotor = ModbusRotor(bus, device_id=4)
        rotor.set_target_velocity_rpm(10.8)
        client.write_registers.assert_called_once_with(ModbusRotor.REG_TARGET_VELOCITY, [0x0000, 1080], device_id=4)

    def test_get_velocity(self, bus, client):
        client.read_holding_registers.return_value = ok_response([0xFFFF, 0xEE6C])
        assert ModbusRotor(bus, device_id=4).get_target_velocity_rpm() == pytest.approx(-45.0)
