"""
Tests for the NOAA CO-OPS water temperature and water level parsers.

Run with: python -m pytest tests/test_tides.py -v
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

sys.path.insert(0, str(Path(__file__).parent.parent))

from superior_surf.models import Quantity, SourceKind
from superior_surf.providers.tides import TidesProvider, parse_water_levels, parse_water_temperature

TEMPERATURE = {
    "metadata": {"id": "9099064", "name": "Duluth"},
    "data": [
        {"t": "2025-10-17 07:00", "v": "46.5", "f": "0,0,0"},
        {"t": "2025-10-17 08:00", "v": "46.8", "f": "0,0,0"},
        {"t": "2025-10-17 09:00", "v": "", "f": "1,1,1"},
    ],
}

LEVELS = {
    "data": [
        {"t": "2025-10-17 06:00", "v": "602.100"},
        {"t": "2025-10-17 07:00", "v": "602.200"},
        {"t": "2025-10-17 08:00", "v": "602.195"},
        {"t": "2025-10-17 09:00", "v": "602.000"},
    ],
}


class TestWaterTemperature:

    def test_latest_valid_reading(self):
        obs = parse_water_temperature(TEMPERATURE, "9099064", distance_miles=17.8)
        logger.info(f"[TEST] Water temp: {obs}")
        assert obs.quantity is Quantity.WATER_TEMP
        assert obs.value == 46.8
        assert obs.source == "coops-9099064"
        assert obs.kind is SourceKind.TIDE_STATION
        assert obs.confidence == 0.8
        assert obs.distance_miles == 17.8
        # 08:00 CDT
        assert obs.timestamp == datetime(2025, 10, 17, 13, 0, tzinfo=timezone.utc)

    def test_error_envelope(self):
        payload = {"error": {"message": "No data was found. This product may not be offered at this station."}}
        assert parse_water_temperature(payload, "9099090") is None

    def test_garbage(self):
        assert parse_water_temperature({"data": [{"t": "yesterday", "v": "47"}]}, "9099064") is None
        assert parse_water_temperature("oops", "9099064") is None


class TestWaterLevels:

    def test_trends(self):
        levels = parse_water_levels(LEVELS)
        assert [lvl.trend for lvl in levels] == ["stable", "rising", "stable", "falling"]

    def test_to_dict(self):
        latest = parse_water_levels(LEVELS)[-1]
        assert latest.to_dict() == {"level": 602.0, "unit": "ft", "trend": "falling", "date": "2025-10-17"}

    def test_error_envelope(self):
        assert parse_water_levels({"error": {"message": "nope"}}) == []


class TestTidesProvider:

    @pytest.mark.asyncio
    async def test_fetch_sends_product_and_station(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(dict(request.url.params))
            if request.url.params["product"] == "water_temperature":
                return httpx.Response(200, json=TEMPERATURE)
            return httpx.Response(200, json=LEVELS)

        now = datetime(2025, 10, 17, 15, 0, tzinfo=timezone.utc)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = TidesProvider(client)
            temps = await provider.fetch_water_temperature("9099064", now=now)
            level = await provider.fetch_water_level("9099064", now=now)

        assert [o.value for o in temps] == [46.8]
        assert level.trend == "falling"
        assert seen[0]["station"] == "9099064"
        assert seen[0]["begin_date"] == "20251016"
        assert seen[0]["end_date"] == "20251017"
        assert seen[1]["product"] == "water_level"

    @pytest.mark.asyncio
    async def test_http_errors_propagate(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await TidesProvider(client).fetch_water_temperature("9099064")
