"""Health endpoints."""

from datetime import UTC, datetime

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from playback_mirror import __version__
from playback_mirror.dependencies import get_auth_flow, get_http_client, get_playback_sync
from playback_mirror.models import DetailedHealthResponse, HealthResponse
from playback_mirror.services.auth_flow import AuthFlow
from playback_mirror.services.playback_sync import PlaybackSync

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health check endpoint.

    Returns simple status for monitoring. For dependency status, use `/health/ready`.
    """
    return HealthResponse(status="ok", version=__version__)


@router.get("/health/ready", response_model=DetailedHealthResponse)
async def readiness_check(
    client: httpx.AsyncClient = Depends(get_http_client),
    auth_flow: AuthFlow = Depends(get_auth_flow),
    playback_sync: PlaybackSync = Depends(get_playback_sync),
):
    """Readiness probe - can the application serve traffic?

    Checks that the HTTP client is open. Login and polling state are reported
    but do not fail the probe: being logged out is a normal state.

    **Returns:**
    - 200: Application is ready to serve requests
    - 503: HTTP client is closed
    """
    checks = {
        "http_client": "ok" if not client.is_closed else "closed",
        "spotify_auth": "ok" if auth_flow.is_logged_in() else "not_authenticated",
        "playback_poll": "running" if playback_sync.is_polling else "stopped",
    }
    all_healthy = checks["http_client"] == "ok"

    status_code = 200 if all_healthy else 503
    status = "healthy" if all_healthy else "unhealthy"

    return JSONResponse(
        status_code=status_code,
        content=DetailedHealthResponse(
            status=status,
            version=__version__,
            timestamp=datetime.now(UTC),
            checks=checks,
        ).model_dump(mode="json"),
    )
