"""regionpulse-fastapi: интеграция regionpulse с FastAPI."""

from regionpulse_fastapi.endpoints import status_router
from regionpulse_fastapi.lifespan import regionpulse_lifespan
from regionpulse_fastapi.middleware import RegionPulseMiddleware

__all__ = [
    "RegionPulseMiddleware",
    "regionpulse_lifespan",
    "status_router",
]
