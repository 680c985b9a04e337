"""
Providers package for Superior Surf

Each provider fetches one external feed and decodes it into Observations.
Decoders never raise on malformed input; HTTP errors propagate to the
orchestrator, which settles them per call.

1. NDBC - wave buoys and shore weather stations (direct telemetry) - confidence 0.9
2. NOAA CO-OPS - water temperature and water level - confidence 0.8
3. Windy - GFS / GFS Wave point forecast (gridded model) - confidence 0.7
4. NWS Marine - GLFLS open-lakes text forecast (prose) - confidence 0.6
"""

from superior_surf.providers.ndbc import (
    BuoyReading,
    NDBCProvider,
    parse_buoy_text,
    parse_weather_station_text,
)

from superior_surf.providers.marine_forecast import (
    MarineForecastPeriod,
    MarineForecastProvider,
    WaveRange,
    parse_marine_forecast,
    parse_zone_forecast,
)

from superior_surf.providers.windy import (
    WindyProvider,
    parse_windy_waves,
    parse_windy_wind,
)

from superior_surf.providers.tides import (
    TidesProvider,
    WaterLevel,
    parse_water_levels,
    parse_water_temperature,
)

__all__ = [
    # NDBC (buoys + weather stations)
    "BuoyReading",
    "NDBCProvider",
    "parse_buoy_text",
    "parse_weather_station_text",
    # NWS marine text forecast
    "MarineForecastPeriod",
    "MarineForecastProvider",
    "WaveRange",
    "parse_marine_forecast",
    "parse_zone_forecast",
    # Windy point forecast
    "WindyProvider",
    "parse_windy_waves",
    "parse_windy_wind",
    # NOAA CO-OPS
    "TidesProvider",
    "WaterLevel",
    "parse_water_levels",
    "parse_water_temperature",
]
