"""
Naming Classifier

Device labels are the configuration language of the tank: a label is a list
of space separated tags, e.g. "Tank Control Left Reversed". Tags are exact,
case-sensitive tokens.
"""

from typing import Iterable, List

TANK = "Tank"
CONTROL = "Control"
DRIVE = "Drive"
LCD = "LCD"
LEFT = "Left"
RIGHT = "Right"
GEAR = "Gear"
REVERSED = "Reversed"


def tags(label: str) -> List[str]:
    """Split a label into its tags."""
    return label.split()


def matches(label: str, required_tags: Iterable[str]) -> bool:
    """Return True if every required tag is present in the label."""
    present = set(tags(label))
    return all(tag in present for tag in required_tags)


def has_token(label: str, token: str) -> bool:
    return token in tags(label)
