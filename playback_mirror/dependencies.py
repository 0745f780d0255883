"""FastAPI dependencies for dependency injection."""

import httpx
from fastapi import Request

from playback_mirror.services.auth_flow import AuthFlow
from playback_mirror.services.playback_sync import PlaybackSync


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Get the shared HTTP client from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared AsyncClient instance.

    Raises:
        RuntimeError: If HTTP client is not initialized.
    """
    client: httpx.AsyncClient | None = getattr(request.app.state, "http_client", None)

    if client is None:
        raise RuntimeError("HTTP client not initialized. This should never happen.")

    return client


async def get_auth_flow(request: Request) -> AuthFlow:
    """
    Get the login flow from app state.

    Raises:
        RuntimeError: If the auth flow is not initialized.
    """
    auth_flow: AuthFlow | None = getattr(request.app.state, "auth_flow", None)

    if auth_flow is None:
        raise RuntimeError("Auth flow not initialized.")

    return auth_flow


async def get_playback_sync(request: Request) -> PlaybackSync:
    """
    Get the playback sync engine from app state.

    Raises:
        RuntimeError: If playback sync is not initialized.
    """
    playback_sync: PlaybackSync | None = getattr(request.app.state, "playback_sync", None)

    if playback_sync is None:
        raise RuntimeError("Playback sync not initialized.")

    return playback_sync
