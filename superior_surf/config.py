"""
Runtime settings, read from the environment (and .env via python-dotenv).

ENVIRONMENT:
- WINDY_API_KEY: Windy point-forecast key. Without it the model provider is skipped.
- SURF_REQUEST_TIMEOUT: per-call timeout for current conditions (default 10s)
- SURF_FORECAST_TIMEOUT: per-call timeout for forecast fetches (default 15s)
- SURF_WINDY_MIN_INTERVAL: minimum seconds between Windy calls (default 0.2)
- SURF_WINDY_FORECAST_INTERVAL: same, for forecast mode (default 2.0)
- SURF_STATION_RADIUS_MILES: sensor search radius (default 250)
- SURF_TIMEZONE: local zone for marine forecast periods (default America/Chicago)
- LOG_LEVEL: root logging level (default INFO)
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

USER_AGENT = "(superior-surf, github.com/superior-surf/superior-surf)"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[Settings] Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


@dataclass
class Settings:
    windy_api_key: Optional[str] = None
    request_timeout: float = 10.0
    forecast_timeout: float = 15.0
    windy_min_interval: float = 0.2
    windy_forecast_interval: float = 2.0
    station_radius_miles: float = 250.0
    timezone: str = "America/Chicago"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "Settings":
        if load_dotenv_file:
            load_dotenv()

        settings = cls(
            windy_api_key=os.getenv("WINDY_API_KEY") or None,
            request_timeout=_float_env("SURF_REQUEST_TIMEOUT", 10.0),
            forecast_timeout=_float_env("SURF_FORECAST_TIMEOUT", 15.0),
            windy_min_interval=_float_env("SURF_WINDY_MIN_INTERVAL", 0.2),
            windy_forecast_interval=_float_env("SURF_WINDY_FORECAST_INTERVAL", 2.0),
            station_radius_miles=_float_env("SURF_STATION_RADIUS_MILES", 250.0),
            timezone=os.getenv("SURF_TIMEZONE", "America/Chicago"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

        if not settings.windy_api_key:
            logger.info("[Settings] WINDY_API_KEY not set - gridded model provider disabled")

        return settings
