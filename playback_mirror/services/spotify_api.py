"""Spotify Web API calls used by the auth flow and the playback sync."""

from enum import Enum
from typing import Any

import httpx

from playback_mirror.config import Settings
from playback_mirror.exceptions import AuthException, TransientNetworkException, UnauthorizedException


class PlaybackCommand(Enum):
    """Player control endpoints with their HTTP verb."""

    PLAY = ("PUT", "/me/player/play")
    PAUSE = ("PUT", "/me/player/pause")
    NEXT = ("POST", "/me/player/next")
    PREVIOUS = ("POST", "/me/player/previous")
    SEEK = ("PUT", "/me/player/seek")

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def exchange_code_for_token(
    client: httpx.AsyncClient,
    settings: Settings,
    code: str,
    client_id: str,
    code_verifier: str,
) -> str:
    """Exchange an authorization code for an access token.

    Args:
        client: Shared HTTP client from dependency injection.
        settings: Settings instance
        code: Authorization code from the redirect
        client_id: Spotify client ID the login was started with
        code_verifier: Verifier whose challenge was sent to the authorize endpoint

    Returns:
        Access token string.

    Raises:
        TransientNetworkException: Request failed, non-2xx status or malformed body.
        AuthException: Response did not contain an access token.
    """
    try:
        response = await client.post(
            settings.spotify_token_url,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": settings.spotify_redirect_uri,
                "client_id": client_id,
                "code_verifier": code_verifier,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=settings.request_timeout,
        )
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        raise TransientNetworkException(
            f"Token exchange failed: {e}", details={"status_code": e.response.status_code}
        ) from e
    except httpx.RequestError as e:
        raise TransientNetworkException(f"Token exchange request failed: {e}") from e
    except ValueError as e:
        raise TransientNetworkException(f"Invalid token exchange response: {e}") from e

    access_token = data.get("access_token") if isinstance(data, dict) else None
    if not access_token:
        raise AuthException("Token exchange response did not contain an access token")

    return access_token


async def get_currently_playing(
    client: httpx.AsyncClient,
    settings: Settings,
    token: str,
) -> dict[str, Any] | None:
    """Get the currently playing track.

    Args:
        client: Shared HTTP client from dependency injection.
        settings: Settings instance
        token: Bearer access token

    Returns:
        Decoded payload, or None when nothing is playing (204).

    Raises:
        UnauthorizedException: Spotify answered 401.
        TransientNetworkException: Any other failure.
    """
    try:
        response = await client.get(
            f"{settings.spotify_api_base_url}/me/player/currently-playing",
            headers=_bearer(token),
            timeout=settings.request_timeout,
        )
        if response.status_code == 204:
            return None
        if response.status_code == 401:
            raise UnauthorizedException()
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        raise TransientNetworkException(
            f"Failed to get playback state: {e}", details={"status_code": e.response.status_code}
        ) from e
    except httpx.RequestError as e:
        raise TransientNetworkException(f"Playback state request failed: {e}") from e
    except ValueError as e:
        raise TransientNetworkException(f"Invalid playback state response: {e}") from e

    if not isinstance(data, dict):
        raise TransientNetworkException("Playback state response is not a JSON object")

    return data


async def send_playback_command(
    client: httpx.AsyncClient,
    settings: Settings,
    token: str,
    command: PlaybackCommand,
    position_ms: int | None = None,
) -> None:
    """Send a player control command. The response body is not consumed.

    Args:
        client: Shared HTTP client from dependency injection.
        settings: Settings instance
        token: Bearer access token
        command: Control endpoint to call
        position_ms: Target position, required for SEEK

    Raises:
        UnauthorizedException: Spotify answered 401.
        TransientNetworkException: Any other failure.
    """
    url = f"{settings.spotify_api_base_url}{command.path}"
    params = {"position_ms": position_ms} if command is PlaybackCommand.SEEK else None

    try:
        if command.method == "POST":
            response = await client.post(url, headers=_bearer(token), timeout=settings.request_timeout)
        else:
            response = await client.put(url, headers=_bearer(token), params=params, timeout=settings.request_timeout)
        if response.status_code == 401:
            raise UnauthorizedException()
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise TransientNetworkException(
            f"Spotify {command.name.lower()} error: {e}", details={"status_code": e.response.status_code}
        ) from e
    except httpx.RequestError as e:
        raise TransientNetworkException(f"Spotify {command.name.lower()} request failed: {e}") from e
