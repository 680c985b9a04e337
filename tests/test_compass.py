"""
Tests for compass conversions.

Run with: python -m pytest tests/test_compass.py -v
"""

import logging
import sys
from pathlib import Path

import pytest

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

sys.path.insert(0, str(Path(__file__).parent.parent))

from superior_surf.compass import (
    COMPASS_POINTS,
    VARIABLE,
    compass_to_degrees,
    degrees_to_compass,
    normalize_direction,
    vector_to_compass,
)


class TestDegreesToCompass:

    def test_sixteen_points_round_trip(self):
        """Every canonical point maps to its center angle and back."""
        for i, point in enumerate(COMPASS_POINTS):
            degrees = i * 22.5
            logger.info(f"[TEST] {point} <-> {degrees}")
            assert degrees_to_compass(degrees) == point
            assert compass_to_degrees(point) == degrees

    def test_northeast_is_45(self):
        assert degrees_to_compass(45) == "NE"
        assert compass_to_degrees("NE") == 45.0

    def test_wraps_near_north(self):
        assert degrees_to_compass(359) == "N"
        assert degrees_to_compass(360) == "N"
        assert degrees_to_compass(-10) == "N"

    def test_sector_boundary_rounds_up(self):
        assert degrees_to_compass(11.0) == "N"
        assert degrees_to_compass(11.25) == "NNE"


class TestNormalizeDirection:

    @pytest.mark.parametrize("token,expected", [
        ("ne", "NE"),
        ("Northeast", "NE"),
        ("north-east", "NE"),
        ("WSW", "WSW"),
        ("225", "SW"),
        (225.0, "SW"),
        (90, "E"),
    ])
    def test_known_tokens(self, token, expected):
        assert normalize_direction(token) == expected

    def test_variable_sentinel(self):
        assert normalize_direction("variable") == VARIABLE
        assert normalize_direction("VRB") == VARIABLE
        assert compass_to_degrees(VARIABLE) is None

    def test_garbage_is_none(self):
        assert normalize_direction("sideways") is None
        assert normalize_direction("") is None
        assert normalize_direction(None) is None


class TestVectorToCompass:
    """u is eastward, v northward; the result is where the wind comes FROM."""

    def test_northerly(self):
        assert vector_to_compass(0.0, -5.0) == "N"

    def test_easterly(self):
        assert vector_to_compass(-5.0, 0.0) == "E"

    def test_southwesterly(self):
        assert vector_to_compass(5.0, 5.0) == "SW"
