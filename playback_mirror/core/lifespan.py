"""Application lifespan management."""

import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI

from playback_mirror import __version__
from playback_mirror.config import Settings, get_settings
from playback_mirror.logging_config import get_logger, log_with_context
from playback_mirror.middleware.logging_middleware import redact_sensitive_data
from playback_mirror.services.auth_flow import AuthFlow
from playback_mirror.services.playback_sync import PlaybackSync
from playback_mirror.session_store import SessionStore

logger = get_logger(__name__)


async def log_request(request: httpx.Request) -> None:
    """Event hook to log requests with redacted sensitive data."""
    redacted_url = redact_sensitive_data(str(request.url))
    log_with_context(
        logger,
        "debug",
        "HTTP Request",
        method=request.method,
        url=redacted_url,
        event_type="http_request",
    )


async def log_response(response: httpx.Response) -> None:
    """Event hook to log responses with redacted sensitive data."""
    redacted_url = redact_sensitive_data(str(response.request.url))
    log_with_context(
        logger,
        "debug",
        "HTTP Response",
        status_code=response.status_code,
        url=redacted_url,
        event_type="http_response",
    )


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared Spotify HTTP client with granular timeouts."""
    event_hooks: dict[str, list[Callable[..., Any]]] = {
        "request": [log_request],
        "response": [log_response],
    }

    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=5.0,  # Connection establishment timeout
            read=settings.request_timeout,  # Read response timeout
            write=5.0,  # Write operation timeout
            pool=5.0,  # Pool checkout timeout
        ),
        limits=httpx.Limits(
            max_keepalive_connections=5,
            max_connections=10,
            keepalive_expiry=30.0,  # How long to keep idle connections
        ),
        event_hooks=event_hooks,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events.

    Exceptions after yield are re-raised so cleanup always runs and errors
    are not swallowed.
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.startup_time = time.time()
    app.state.request_count = 0

    log_with_context(
        logger,
        "info",
        "Starting Playback Mirror application",
        version=__version__,
        event_type="app_startup",
    )

    client = create_http_client(settings)
    app.state.http_client = client

    # State managers: the auth flow must be restored before playback sync decides whether to poll
    store = SessionStore(settings.session_file)
    app.state.auth_flow = AuthFlow(client, store, settings)
    app.state.playback_sync = PlaybackSync(client, app.state.auth_flow, settings)
    await app.state.auth_flow.initialize()
    await app.state.playback_sync.initialize()
    log_with_context(
        logger,
        "info",
        "State managers initialized",
        session_file=str(settings.session_file),
        event_type="state_managers_ready",
    )

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        log_with_context(
            logger,
            "info",
            "Shutting down Playback Mirror application",
            event_type="app_shutdown",
        )

        # Timers first, so nothing uses the client after it is closed
        await app.state.playback_sync.cleanup()
        await app.state.auth_flow.cleanup()
        log_with_context(
            logger,
            "info",
            "State managers cleaned up",
            event_type="state_managers_cleanup",
        )

        await client.aclose()
        log_with_context(
            logger,
            "info",
            "HTTP client closed",
            event_type="http_client_cleanup",
        )
