"""
Superior Surf: Lake Superior surf-condition fusion core

Turns unreliable, disagreeing feeds (NDBC buoys, NWS marine prose, the Windy
point-forecast model, NOAA water stations) into one surf verdict per spot
and per forecast time slot.

Architecture:
    providers/      - Source parsers and fetchers:
                      * ndbc.py            - buoy + weather station telemetry
                      * marine_forecast.py - NWS GLFLS prose forecast
                      * windy.py           - GFS / GFS Wave point forecast
                      * tides.py           - NOAA CO-OPS water temp + level
    spots.py        - Spot table and per-spot directional profiles
    stations.py     - Sensor catalog and nearest-station search
    blender.py      - Confidence-weighted blending with conflict flags
    likelihood.py   - Surf-likelihood state machine
    conditions.py   - Blend -> rate -> outbound record
    bucketizer.py   - Per-timestamp forecast buckets
    orchestrator.py - Concurrent, timeout-bounded, rate-limited fetching
    resilience.py   - Error categories, per-call timeouts, rate limiter
    config.py       - Environment settings

Data flows one way:
    Orchestrator -> Parsers -> Blender -> Likelihood Engine -> (Bucketizer) -> records

Entry Point:
    main.py - command-line surf report
"""

__version__ = "1.0.0"
__author__ = "Superior Surf"
