"""
Tests for the surf-likelihood state machine.

Run with: python -m pytest tests/test_likelihood.py -v
"""

import logging
import sys
from pathlib import Path

import pytest

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

sys.path.insert(0, str(Path(__file__).parent.parent))

from superior_surf.likelihood import SurfLikelihoodEngine, rate
from superior_surf.models import BlendedEstimate, LocalWind, SurfLikelihood
from superior_surf.spots import _profile, get_profile

STONEY_POINT = get_profile("stoneypoint")


def waves(value, low=None, high=None):
    return BlendedEstimate(value=value, confidence=0.9, sources=["ndbc-45027"], low=low, high=high)


class TestSurfLikelihoodOrdering:

    def test_quality_scale(self):
        assert SurfLikelihood.FLAT < SurfLikelihood.MAYBE_SURF < SurfLikelihood.GOOD < SurfLikelihood.FIRING

    def test_blown_out_is_not_comparable(self):
        with pytest.raises(TypeError):
            SurfLikelihood.BLOWN_OUT < SurfLikelihood.FIRING
        with pytest.raises(TypeError):
            SurfLikelihood.FIRING > SurfLikelihood.BLOWN_OUT

    def test_downgrade(self):
        assert SurfLikelihood.FIRING.downgrade() is SurfLikelihood.GOOD
        assert SurfLikelihood.MAYBE_SURF.downgrade() is SurfLikelihood.FLAT
        assert SurfLikelihood.FLAT.downgrade() is SurfLikelihood.FLAT
        assert SurfLikelihood.BLOWN_OUT.downgrade() is SurfLikelihood.BLOWN_OUT


class TestRate:

    def test_good_day_at_stoney_point(self):
        """2 ft @ 6 s with a light NE wind."""
        result, notes = rate(waves(2.0), 6.0, 10.0, "NE", STONEY_POINT)
        logger.info(f"[TEST] {result.value}: {notes}")
        assert result is SurfLikelihood.GOOD
        assert any("Ideal wind direction (NE)" in n for n in notes)

    def test_firing(self):
        result, _ = rate(waves(4.0), 7.0, 8.0, "ENE", STONEY_POINT)
        assert result is SurfLikelihood.FIRING

    def test_small_waves_are_flat(self):
        result, _ = rate(waves(0.7), 6.0, 5.0, "NE", STONEY_POINT)
        assert result is SurfLikelihood.FLAT

    def test_range_low_gates_flat(self):
        result, _ = rate(waves(1.25, low=0.5, high=2.0), 6.0, 5.0, "NE", STONEY_POINT)
        assert result is SurfLikelihood.FLAT

    def test_short_or_missing_period_is_flat(self):
        assert rate(waves(2.0), 2.5, 5.0, "NE", STONEY_POINT)[0] is SurfLikelihood.FLAT
        assert rate(waves(2.0), None, 5.0, "NE", STONEY_POINT)[0] is SurfLikelihood.FLAT

    def test_nothing_available_is_flat(self):
        result, _ = rate(BlendedEstimate(), BlendedEstimate(), BlendedEstimate(), BlendedEstimate(), STONEY_POINT)
        assert result is SurfLikelihood.FLAT

    def test_wrong_swell_direction_is_flat(self):
        result, notes = rate(waves(3.5), 7.0, 10.0, "SW", STONEY_POINT)
        assert result is SurfLikelihood.FLAT
        assert "Unfavorable wind direction (SW) for Stoney Point." in notes

    def test_strong_favorable_wind_blows_out(self):
        result, _ = rate(waves(4.0), 7.0, 20.0, "NE", STONEY_POINT)
        assert result is SurfLikelihood.BLOWN_OUT

    def test_failing_every_band_blows_out(self):
        result, _ = rate(waves(2.0), 6.0, 18.0, "NE", STONEY_POINT)
        assert result is SurfLikelihood.BLOWN_OUT

    def test_band_steps_down_on_period(self):
        result, _ = rate(waves(2.0), 4.0, 10.0, "NE", STONEY_POINT)
        assert result is SurfLikelihood.MAYBE_SURF

    @pytest.mark.parametrize("height", [1.5, 2.0, 2.9, 3.0, 4.0, 6.0])
    def test_bigger_waves_never_rate_lower(self, height):
        result, _ = rate(waves(height), 6.0, 10.0, "NE", STONEY_POINT)
        assert result >= SurfLikelihood.GOOD

    def test_marginal_direction_with_moderate_wind_is_downgraded(self):
        """N is marginal at Stoney Point; above 12 mph it chops the face."""
        light, _ = rate(waves(4.0), 7.0, 10.0, "N", STONEY_POINT)
        moderate, _ = rate(waves(4.0), 7.0, 14.0, "N", STONEY_POINT)
        assert light is SurfLikelihood.FIRING
        assert moderate is SurfLikelihood.GOOD

    def test_blocked_local_wind_downgrades(self):
        profile = _profile("Test Break", ["NE", "E"], ["N"], ["N"], "low")
        result, _ = rate(waves(4.0), 7.0, 5.0, "N", profile)
        assert result is SurfLikelihood.GOOD
        assert result < SurfLikelihood.FIRING

    def test_variable_wind_counts_as_favorable(self):
        result, notes = rate(waves(2.0), 6.0, 10.0, "VAR", STONEY_POINT)
        assert result is SurfLikelihood.GOOD
        assert "Variable winds - no clear swell direction." in notes

    def test_missing_direction_counts_as_favorable(self):
        result, notes = rate(waves(2.0), 6.0, 10.0, None, STONEY_POINT)
        assert result is SurfLikelihood.GOOD

    def test_accepts_blended_estimates(self):
        result, _ = rate(
            waves(2.0),
            BlendedEstimate(value=6.0, confidence=0.9),
            BlendedEstimate(value=10.0, confidence=0.9),
            BlendedEstimate(value=45.0, confidence=0.9, label="NE"),
            STONEY_POINT,
        )
        assert result is SurfLikelihood.GOOD

    def test_accepts_degrees(self):
        assert rate(waves(2.0), 6.0, 10.0, 45.0, STONEY_POINT)[0] is SurfLikelihood.GOOD


class TestNotes:

    @pytest.mark.parametrize("kwargs,expected", [
        (dict(speed=16.0), "Strong wind - may cause chop"),
        (dict(speed=26.0), "High winds - challenging conditions"),
        (dict(gust=30.0), "Gusts > 25 mph"),
        (dict(height=0.3), "Very small waves - minimal surf"),
        (dict(height=3.5), "Large waves - experienced surfers only"),
        (dict(period=3.5), "Short period - choppy conditions"),
        (dict(period=9.0), "Long period - clean waves"),
    ])
    def test_advisories(self, kwargs, expected):
        engine = SurfLikelihoodEngine()
        notes = engine.notes(
            waves(kwargs.get("height", 2.0)),
            kwargs.get("period", 6.0),
            kwargs.get("speed", 5.0),
            None,
            STONEY_POINT,
            kwargs.get("gust"),
        )
        assert expected in notes

    def test_notes_do_not_change_rating(self):
        quiet, quiet_notes = rate(waves(2.0), 6.0, 10.0, "NE", STONEY_POINT)
        gusty, gusty_notes = rate(waves(2.0), 6.0, 10.0, "NE", STONEY_POINT, wind_gust=30.0)
        assert quiet is gusty
        assert "Gusts > 25 mph" in gusty_notes
        assert "Gusts > 25 mph" not in quiet_notes

    def test_directional_notes(self):
        engine = SurfLikelihoodEngine()
        assert engine.directional_note(8.0, "NE", STONEY_POINT) == (
            "Ideal wind direction (NE) for Stoney Point. Swell and local wind are both favorable."
        )
        assert engine.directional_note(25.0, "NE", STONEY_POINT).endswith("Wind too strong at the break.")
        assert engine.directional_note(14.0, "N", STONEY_POINT) == (
            "Marginal wind direction (N) - may produce waves with enough fetch. Local wind will be choppy."
        )
        assert engine.directional_note(8.0, "S", STONEY_POINT) == (
            "Wind direction (S) does not build swell at Stoney Point."
        )


class TestClassifyLocalWind:

    def test_categories(self):
        engine = SurfLikelihoodEngine()
        assert engine.classify_local_wind(19.0, "NE", STONEY_POINT) is LocalWind.STRONG
        assert engine.classify_local_wind(5.0, "W", STONEY_POINT) is LocalWind.ONSHORE
        assert engine.classify_local_wind(16.0, "E", STONEY_POINT) is LocalWind.CLEAN
        assert engine.classify_local_wind(12.0, "S", STONEY_POINT) is LocalWind.CLEAN
        assert engine.classify_local_wind(13.0, "S", STONEY_POINT) is LocalWind.ONSHORE
        assert engine.classify_local_wind(None, None, STONEY_POINT) is LocalWind.CLEAN
