"""
Unit Tests for Naming Classifier

Test Design Techniques Used:
    - Equivalence partitioning (exact tag / partial tag / missing tag)
    - Decision table testing (required tag subsets)

Run: pytest tests/control/test_naming.py -v
"""

import pytest

from tank_levers.control import naming


class TestTags:
    """Tests for tags()."""

    def test_splits_on_whitespace(self):
        """Test labels split on any run of whitespace."""
        assert naming.tags("Tank  Control\tLeft") == ["Tank", "Control", "Left"]

    def test_empty_label(self):
        """Test empty label has no tags."""
        assert naming.tags("") == []


class TestMatches:
    """Tests for matches()."""

    @pytest.mark.parametrize("label,required,expected", [
        ("Tank Control Left", {"Tank", "Control", "Left"}, True),
        ("Left Control Tank", {"Tank", "Control", "Left"}, True),       # order irrelevant
        ("Tank Control Left Reversed", {"Tank", "Control"}, True),      # extra tags ok
        ("Tank Control", {"Tank", "Control", "Left"}, False),           # missing tag
        ("Tank Control Lefty", {"Tank", "Control", "Left"}, False),     # no partial match
        ("tank control left", {"Tank", "Control", "Left"}, False),      # case-sensitive
        ("TankControlLeft", {"Tank"}, False),
        ("anything", set(), True),
    ])
    def test_required_tags(self, label, required, expected):
        """Test every required tag must be an exact token."""
        assert naming.matches(label, required) is expected

    def test_pure(self):
        """Test repeated calls give the same answer."""
        label = "Tank Drive Right"
        assert naming.matches(label, ["Tank", "Drive"]) == naming.matches(label, ["Tank", "Drive"])


class TestHasToken:
    """Tests for has_token()."""

    def test_reversed_marker(self):
        """Test Reversed is found as a token."""
        assert naming.has_token("Tank Control Left Reversed", naming.REVERSED)

    def test_substring_is_not_token(self):
        """Test a tag inside a longer word does not count."""
        assert not naming.has_token("Tank Control Left Unreversed", naming.REVERSED)

    def test_display_role_tags(self):
        """Test display role tags are detected independently."""
        label = "Tank LCD Right Gear"
        assert not naming.has_token(label, naming.LEFT)
        assert naming.has_token(label, naming.RIGHT)
        assert naming.has_token(label, naming.GEAR)
