"""
Tests for the spot table, directional profiles and station search.

Run with: python -m pytest tests/test_spots.py -v
"""

import logging
import sys
from pathlib import Path

import pytest

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

sys.path.insert(0, str(Path(__file__).parent.parent))

from superior_surf.spots import PROFILES, _profile, all_spot_ids, get_profile, get_spot
from superior_surf.stations import WAVE_BUOYS, haversine_miles, nearest_stations


class TestProfiles:

    def test_known_profile(self):
        profile = get_profile("stoneypoint")
        logger.info(f"[TEST] Stoney Point profile: {profile}")
        assert profile.name == "Stoney Point"
        assert "NE" in profile.ideal_swell_sectors
        assert "N" in profile.marginal_swell_sectors
        assert "W" in profile.blocked_local_wind_sectors
        assert profile.confidence_tier == "high"
        assert not profile.is_fallback

    def test_lookup_is_case_insensitive(self):
        assert get_profile("StoneyPoint") is PROFILES["stoneypoint"]

    def test_unknown_id_uses_fallback(self):
        assert get_profile("atlantis").is_fallback
        assert get_profile(None).is_fallback

    def test_clean_sectors_default_to_ideal(self):
        profile = get_profile("parkpoint")
        assert profile.clean_local_wind_sectors == profile.ideal_swell_sectors

    def test_south_shore_faces_west(self):
        profile = get_profile("marquette")
        assert "W" in profile.favorable_swell_sectors
        assert "NE" in profile.blocked_local_wind_sectors

    def test_invalid_direction_rejected(self):
        with pytest.raises(ValueError):
            _profile("Bad", ["NE", "UP"], [], [], "high")

    def test_invalid_confidence_rejected(self):
        with pytest.raises(ValueError):
            _profile("Bad", ["NE"], [], [], "certain")


class TestSpots:

    def test_spot_record(self):
        spot = get_spot("parkpoint")
        assert spot.name == "Park Point"
        assert spot.difficulty == "beginner"
        assert spot.profile is PROFILES["parkpoint"]

    def test_spot_without_profile_gets_fallback_profile(self):
        spot = get_spot("superiorentry")
        assert spot.name == "Superior Entry"
        assert spot.difficulty == "expert"
        assert spot.profile.is_fallback

    def test_unknown_spot_never_raises(self):
        spot = get_spot("nowhere")
        assert spot.name == "Duluth"
        assert spot.profile.is_fallback

    def test_every_spot_has_coordinates_on_the_lake(self):
        for spot_id in all_spot_ids():
            spot = get_spot(spot_id)
            assert 46.0 < spot.latitude < 48.5
            assert -93.0 < spot.longitude < -84.0


class TestStations:

    def test_one_degree_of_latitude(self):
        assert haversine_miles(46.0, -92.0, 47.0, -92.0) == pytest.approx(69.09, abs=0.1)

    def test_zero_distance(self):
        assert haversine_miles(46.775, -92.093, 46.775, -92.093) == 0.0

    def test_nearest_buoys_for_stoney_point(self):
        spot = get_spot("stoneypoint")
        nearest = nearest_stations(spot.latitude, spot.longitude, WAVE_BUOYS, limit=2)
        ids = [station.id for station, _ in nearest]
        logger.info(f"[TEST] Nearest buoys: {nearest}")
        assert ids == ["45028", "45027"]
        assert nearest[0][1] < nearest[1][1]

    def test_radius_excludes_far_stations(self):
        spot = get_spot("marquette")
        assert nearest_stations(spot.latitude, spot.longitude, WAVE_BUOYS, limit=2, radius_miles=10) == []
