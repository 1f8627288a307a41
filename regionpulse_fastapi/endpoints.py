"""Endpoints under /status: group status, event log, report and on-demand poll cycles."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from regionpulse.api import RegionPulse

status_router = APIRouter()


def _not_ready() -> JSONResponse:
    return JSONResponse(content={"status": "unknown", "groups": {}}, status_code=503)


@status_router.get("/status")
async def status(request: Request) -> JSONResponse:
    """Return group and endpoint status.

    Response format::

        {
            "in_progress": false,
            "groups": {
                "EU (Prague)": {
                    "status": "operational",
                    "coordinates": {"lat": 50.0755, "lng": 14.4378},
                    "endpoints": [{"address": "...", "status": "operational", ...}]
                }
            }
        }
    """
    rp: RegionPulse | None = getattr(request.app.state, "regionpulse", None)
    if rp is None:
        return _not_ready()

    snapshots = rp.snapshots()
    group_statuses = rp.group_statuses()
    groups: dict[str, object] = {}
    for group in rp.registry.groups:
        coords = group.coordinates
        groups[group.name] = {
            "status": str(group_statuses[group.name]),
            "coordinates": {"lat": coords.lat, "lng": coords.lng} if coords else None,
            "endpoints": [snapshots[ep.address].to_dict() for ep in group.endpoints],
        }
    return JSONResponse(content={"in_progress": rp.in_progress, "groups": groups})


@status_router.get("/status/logs")
async def logs(request: Request) -> JSONResponse:
    """Return the event log, newest entries first."""
    rp: RegionPulse | None = getattr(request.app.state, "regionpulse", None)
    if rp is None:
        return _not_ready()
    return JSONResponse(content={"logs": [entry.to_dict() for entry in rp.logs()]})


@status_router.get("/status/report")
async def report(request: Request) -> JSONResponse:
    """Return report data: status tables, incidents and the 24h projection."""
    rp: RegionPulse | None = getattr(request.app.state, "regionpulse", None)
    if rp is None:
        return _not_ready()
    return JSONResponse(content=rp.report().to_dict())


@status_router.post("/status/cycle")
async def trigger_cycle(request: Request) -> JSONResponse:
    """Request an immediate poll cycle.

    Returns 202 when the cycle was scheduled and 409 when one is already
    running (the request is dropped, not queued).
    """
    rp: RegionPulse | None = getattr(request.app.state, "regionpulse", None)
    if rp is None:
        return _not_ready()
    if rp.trigger_cycle() is None:
        return JSONResponse(content={"scheduled": False, "in_progress": True}, status_code=409)
    return JSONResponse(content={"scheduled": True}, status_code=202)
