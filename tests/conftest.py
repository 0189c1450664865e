"""
Pytest Configuration - Shared Fixtures

This file contains shared fixtures used across all test modules.
"""

import pytest
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tank_levers.drivers.directory import Device, StaticDirectory, HINGE, ROTOR, LCD
from tank_levers.drivers.ports import SimulatedHinge, SimulatedRotor, TextPanel


CONSTRUCT = "Tank"


def hinge(name, angle_deg=0.0, construct=CONSTRUCT):
    """Create a simulated hinge device."""
    return Device(name, HINGE, construct, SimulatedHinge(angle_deg=angle_deg))


def rotor(name, rpm=0.0, construct=CONSTRUCT):
    """Create a simulated rotor device."""
    return Device(name, ROTOR, construct, SimulatedRotor(rpm))


def lcd(name, construct=CONSTRUCT):
    """Create an in-memory display device."""
    return Device(name, LCD, construct, TextPanel())


@pytest.fixture
def construct():
    return CONSTRUCT


@pytest.fixture
def tank_devices():
    """A complete tank: gear lever, two steering levers, four rotors, three displays."""
    return {
        "gear": hinge("Tank Control Gear", 50.0),
        "left": hinge("Tank Control Left", 30.0),
        "right": hinge("Tank Control Right Reversed", -30.0),
        "left_front": rotor("Tank Drive Left Front"),
        "left_rear": rotor("Tank Drive Left Rear"),
        "right_front": rotor("Tank Drive Right Front"),
        "right_rear": rotor("Tank Drive Right Rear"),
        "lcd_all": lcd("Tank LCD"),
        "lcd_left": lcd("Tank LCD Left"),
        "lcd_right_gear": lcd("Tank LCD Right Gear"),
    }


@pytest.fixture
def tank_directory(tank_devices):
    """Directory over tank_devices, in insertion order."""
    return StaticDirectory(tank_devices.values())


@pytest.fixture
def make_hinge():
    return hinge


@pytest.fixture
def make_rotor():
    return rotor


@pytest.fixture
def make_lcd():
    return lcd
