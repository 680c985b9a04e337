"""
Tests for the NWS marine prose parser.

Run with: python -m pytest tests/test_marine_forecast.py -v
"""

import logging
import math
import sys
from datetime import datetime, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

sys.path.insert(0, str(Path(__file__).parent.parent))

from superior_surf.compass import VARIABLE
from superior_surf.models import Quantity
from superior_surf.providers.marine_forecast import (
    extract_wave_range,
    extract_wind_direction,
    extract_wind_speed,
    marine_zone_for,
    parse_marine_forecast,
    parse_zone_forecast,
    period_timestamp,
    product_text,
)

CHICAGO = ZoneInfo("America/Chicago")

# Thursday 2025-10-16, 15:00 CDT
ISSUED = datetime(2025, 10, 16, 20, 0, tzinfo=timezone.utc)

BULLETIN = """
FZUS63 KDLH 162000
GLFLS

LSZ162-170300-
Lake Superior west of a line from Saxon Harbor WI to Grand Portage MN beyond 5NM-
.TONIGHT...Northeast winds 10 to 20 knots. Waves 2 to 4 feet.
.FRIDAY...East winds 5 to 15 knots becoming southeast. Waves 1 to 3 feet.
.FRIDAY NIGHT...Variable winds 10 knots or less. Waves 1 foot or less.
.SATURDAY...Southwest winds 15 to 25 knots. Waves 3 to 5 feet.
$$
.SUNDAY...This period belongs to the next zone and is ignored.
"""

GLF_BULLETIN = """
LSZ162-180300-
.TODAY...Northeast winds 10 to 20 knots. Waves 2 to 4 feet.
.TONIGHT...North winds 5 to 15 knots. Waves 1 to 3 feet.
.SAT...Southwest winds 15 to 25 knots. Waves 3 to 5 feet.
.SAT NIGHT...West winds 10 to 20 knots. Waves 2 to 4 feet.
.SUN...Northwest winds 5 to 15 knots. Waves 1 to 3 feet.
$$
"""


class TestExtractors:

    def test_knot_range_midpoint(self):
        assert extract_wind_speed("Northeast winds 10 to 20 knots.") == pytest.approx(17.3)

    def test_mph_passthrough(self):
        assert extract_wind_speed("West winds 10 mph.") == 10.0

    def test_winds_then_direction(self):
        text = "Winds northeast 10 knots."
        assert extract_wind_speed(text) == pytest.approx(11.5)
        assert extract_wind_direction(text) == "NE"

    def test_or_less_speed(self):
        assert extract_wind_speed("Variable winds 10 knots or less.") == pytest.approx(5.8)

    def test_implausible_speed_discarded(self):
        assert extract_wind_speed("Northeast winds 80 knots.") is None

    def test_no_wind(self):
        assert extract_wind_speed("Patchy fog.") is None
        assert extract_wind_direction("Patchy fog.") is None

    def test_variable_direction(self):
        assert extract_wind_direction("Variable winds 10 knots or less.") == VARIABLE

    @pytest.mark.parametrize("text,low,high", [
        ("Waves 2 to 4 feet.", 2.0, 4.0),
        ("Waves 1 foot or less.", 0.0, 1.0),
        ("Waves 2 feet.", 2.0, 2.0),
        ("1-2 foot waves.", 1.0, 2.0),
        ("Seas around 3 ft.", 3.0, 3.0),
    ])
    def test_wave_phrasings(self, text, low, high):
        waves = extract_wave_range(text)
        logger.info(f"[TEST] {text!r} -> {waves}")
        assert (waves.min, waves.max) == (low, high)

    def test_no_waves(self):
        assert extract_wave_range("Northeast winds 10 knots.") is None


class TestPeriodTimestamp:

    def reference(self):
        return ISSUED.astimezone(CHICAGO)

    def test_tonight_is_nine_pm_local(self):
        ts = period_timestamp("TONIGHT", self.reference())
        assert ts == datetime(2025, 10, 16, 21, 0, tzinfo=CHICAGO)

    def test_today_is_noon_local(self):
        ts = period_timestamp("TODAY", self.reference())
        assert ts == datetime(2025, 10, 16, 12, 0, tzinfo=CHICAGO)

    def test_next_weekday(self):
        assert period_timestamp("FRIDAY", self.reference()) == datetime(2025, 10, 17, 12, 0, tzinfo=CHICAGO)
        assert period_timestamp("WEDNESDAY", self.reference()) == datetime(2025, 10, 22, 12, 0, tzinfo=CHICAGO)

    def test_same_weekday_means_next_week(self):
        assert period_timestamp("THURSDAY", self.reference()) == datetime(2025, 10, 23, 12, 0, tzinfo=CHICAGO)

    def test_weekday_night(self):
        ts = period_timestamp("FRIDAY NIGHT", self.reference())
        assert ts == datetime(2025, 10, 17, 21, 0, tzinfo=CHICAGO)

    @pytest.mark.parametrize("name,day", [
        ("SAT", 18),
        ("SUN", 19),
        ("TUES", 21),
        ("WED", 22),
        ("THU", 23),
        ("THURS", 23),
    ])
    def test_abbreviated_weekdays(self, name, day):
        assert period_timestamp(name, self.reference()) == datetime(2025, 10, day, 12, 0, tzinfo=CHICAGO)

    def test_abbreviated_weekday_night(self):
        ts = period_timestamp("SAT NIGHT", self.reference())
        assert ts == datetime(2025, 10, 18, 21, 0, tzinfo=CHICAGO)

    def test_unmapped_name(self):
        assert period_timestamp("EXTENDED OUTLOOK", self.reference()) is None

    def test_result_is_utc(self):
        assert period_timestamp("TONIGHT", self.reference()).tzinfo is timezone.utc


class TestParseMarineForecast:

    def test_periods_in_order(self):
        periods = parse_marine_forecast(BULLETIN, issued=ISSUED)
        names = [p.name for p in periods]
        logger.info(f"[TEST] Periods: {names}")
        assert names == ["TONIGHT", "FRIDAY", "FRIDAY NIGHT", "SATURDAY"]
        assert [p.timestamp for p in periods] == sorted(p.timestamp for p in periods)

    def test_period_values(self):
        tonight, friday, friday_night, saturday = parse_marine_forecast(BULLETIN, issued=ISSUED)

        assert tonight.wind_speed_mph == pytest.approx(17.3)
        assert tonight.wind_direction == "NE"
        assert (tonight.waves.min, tonight.waves.max) == (2.0, 4.0)
        assert tonight.estimated_period_s == 6.0

        assert friday.wind_direction == "E"
        assert friday.wind_speed_mph == pytest.approx(11.5)

        assert friday_night.wind_direction == VARIABLE
        assert (friday_night.waves.min, friday_night.waves.max) == (0.0, 1.0)
        assert friday_night.estimated_period_s == 4.0

        assert saturday.wind_speed_mph == pytest.approx(23.0)
        assert saturday.wind_direction == "SW"

    def test_observations(self):
        tonight = parse_marine_forecast(BULLETIN, issued=ISSUED)[0]
        obs = {o.quantity: o for o in tonight.observations()}

        assert obs[Quantity.WAVE_HEIGHT].value == 3.0
        assert obs[Quantity.WAVE_HEIGHT].low == 2.0
        assert obs[Quantity.WAVE_HEIGHT].high == 4.0
        assert obs[Quantity.WAVE_HEIGHT].confidence == 0.6
        assert obs[Quantity.WAVE_PERIOD].confidence == 0.4
        assert obs[Quantity.WIND_DIRECTION].label == "NE"
        assert all(o.source == "nws-marine" for o in obs.values())

    def test_variable_direction_observation(self):
        friday_night = parse_marine_forecast(BULLETIN, issued=ISSUED)[2]
        direction = [o for o in friday_night.observations() if o.quantity is Quantity.WIND_DIRECTION][0]
        assert direction.label == VARIABLE
        assert math.isnan(direction.value)

    def test_glf_bulletin_with_abbreviated_days(self):
        """Open-lakes bulletins name later periods .SAT... / .SAT NIGHT... / .SUN..."""
        issued = datetime(2025, 10, 17, 15, 0, tzinfo=timezone.utc)  # Friday 10:00 CDT
        periods = parse_marine_forecast(GLF_BULLETIN, issued=issued)
        logger.info(f"[TEST] GLF periods: {[(p.name, p.timestamp.isoformat()) for p in periods]}")

        assert [p.name for p in periods] == ["TODAY", "TONIGHT", "SAT", "SAT NIGHT", "SUN"]
        assert periods[2].timestamp == datetime(2025, 10, 18, 12, 0, tzinfo=CHICAGO)
        assert periods[3].timestamp == datetime(2025, 10, 18, 21, 0, tzinfo=CHICAGO)
        assert periods[4].timestamp == datetime(2025, 10, 19, 12, 0, tzinfo=CHICAGO)
        assert periods[2].wind_direction == "SW"
        assert (periods[4].waves.min, periods[4].waves.max) == (1.0, 3.0)

    def test_nothing_usable(self):
        assert parse_marine_forecast("", issued=ISSUED) == []
        assert parse_marine_forecast(".TONIGHT...Patchy fog.", issued=ISSUED) == []


class TestZoneForecast:

    def test_zone_periods(self):
        payload = {"properties": {"periods": [
            {"name": "Tonight", "startTime": "2025-10-16T18:00:00-05:00",
             "detailedForecast": "Northeast winds 10 to 15 knots. Waves 2 to 3 feet."},
            {"name": "Friday", "startTime": "not a time", "detailedForecast": "Waves 1 foot."},
            {"name": "Friday Night", "startTime": "2025-10-17T18:00:00-05:00",
             "detailedForecast": "Clear."},
        ]}}
        periods = parse_zone_forecast(payload)
        assert len(periods) == 1
        assert periods[0].timestamp == datetime(2025, 10, 16, 23, 0, tzinfo=timezone.utc)
        assert periods[0].source == "nws-zone"
        assert periods[0].wind_direction == "NE"

    def test_empty_payload(self):
        assert parse_zone_forecast({}) == []
        assert parse_zone_forecast(None) == []

    def test_zone_lookup(self):
        assert marine_zone_for(46.54, -87.40) == "GLZ042"
        assert marine_zone_for(46.94, -91.81) == "GLZ043"

    def test_product_text_envelopes(self):
        assert product_text({"productText": "abc"}) == "abc"
        assert product_text({"features": [{"properties": {"productText": "xyz"}}]}) == "xyz"
        assert product_text({"@graph": []}) is None
        assert product_text([]) is None
