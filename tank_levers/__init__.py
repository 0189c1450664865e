"""
Tank Levers

A periodic control loop that turns the angle of lever hinges into target
velocities for tank-steer drive rotors, and reports the state of each
channel to text displays.
"""

__version__ = "1.1.0"
__author__ = "Tank Levers Team"
