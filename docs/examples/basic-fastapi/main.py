# Example: FastAPI application with regionpulse monitoring.
# Probes the built-in regional registry over TCP/443 and exposes
# Prometheus metrics and JSON status.
#
# Install:
#   pip install regionpulse[fastapi]
#
# Run:
#   uvicorn main:app --host 0.0.0.0 --port 8080

from datetime import timedelta

from fastapi import FastAPI

from regionpulse.regions import DEFAULT_REGISTRY
from regionpulse_fastapi import RegionPulseMiddleware, regionpulse_lifespan, status_router

# RegionPulse starts on startup (first poll cycle runs immediately)
# and stops on shutdown automatically.
app = FastAPI(
    title="Regional status dashboard",
    lifespan=regionpulse_lifespan(
        DEFAULT_REGISTRY,
        poll_interval=timedelta(seconds=60),
        probe_timeout=timedelta(seconds=5),
    ),
)

# Expose Prometheus metrics on GET /metrics.
app.add_middleware(RegionPulseMiddleware)

# GET /status, /status/logs, /status/report and POST /status/cycle.
app.include_router(status_router)
