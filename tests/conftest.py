"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio

from playback_mirror.config import Settings
from playback_mirror.services.auth_flow import AuthFlow
from playback_mirror.services.playback_sync import PlaybackSync
from playback_mirror.session_store import SessionSlot, SessionStore

CURRENTLY_PLAYING_URL = "https://api.spotify.com/v1/me/player/currently-playing"


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from the developer's .env and session file."""
    return Settings(
        _env_file=None,
        spotify_client_id="",
        spotify_redirect_uri="http://127.0.0.1:8000/",
        session_file=tmp_path / "session.json",
        poll_interval_ms=1000,
        tick_interval_ms=100,
        confirm_delay_ms=300,
        trusted_hosts="localhost,127.0.0.1,testserver",
    )


@pytest.fixture
def mock_http_client():
    """Mock httpx.AsyncClient for Spotify calls."""
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get = AsyncMock()
    mock_client.post = AsyncMock()
    mock_client.put = AsyncMock()
    mock_client.aclose = AsyncMock()
    mock_client.is_closed = False
    return mock_client


@pytest.fixture
def make_response():
    """Build real httpx responses so raise_for_status behaves as in production."""

    def _make(status_code=200, json_data=None, method="GET", url=CURRENTLY_PLAYING_URL, content=None):
        request = httpx.Request(method, url)
        if json_data is not None:
            return httpx.Response(status_code, json=json_data, request=request)
        return httpx.Response(status_code, content=content or b"", request=request)

    return _make


@pytest.fixture
def currently_playing_payload():
    """Spotify currently-playing response for a track a quarter of the way through."""
    return {
        "timestamp": 1700000000000,
        "progress_ms": 50000,
        "is_playing": True,
        "currently_playing_type": "track",
        "item": {
            "id": "track-1",
            "uri": "spotify:track:track-1",
            "name": "Test Song",
            "duration_ms": 200000,
            "artists": [{"name": "Test Artist"}, {"name": "Featured Artist"}],
            "album": {
                "name": "Test Album",
                "images": [
                    {"url": "https://i.scdn.co/image/large", "height": 640, "width": 640},
                    {"url": "https://i.scdn.co/image/small", "height": 64, "width": 64},
                ],
            },
        },
    }


@pytest.fixture
def session_store(test_settings):
    """Session store backed by a temporary file."""
    return SessionStore(test_settings.session_file)


@pytest.fixture
def auth_flow(mock_http_client, session_store, test_settings):
    """Auth flow with an empty session."""
    return AuthFlow(mock_http_client, session_store, test_settings)


@pytest_asyncio.fixture
async def logged_in_auth_flow(mock_http_client, session_store, test_settings):
    """Auth flow restored from a session that holds an access token."""
    session_store.set(SessionSlot.CLIENT_ID, "test-client-id")
    session_store.set(SessionSlot.ACCESS_TOKEN, "test-token")
    flow = AuthFlow(mock_http_client, session_store, test_settings)
    await flow.initialize()
    return flow


@pytest_asyncio.fixture
async def playback_sync(mock_http_client, logged_in_auth_flow, test_settings):
    """Playback sync for a logged-in user; polls are driven by the test."""
    sync = PlaybackSync(mock_http_client, logged_in_auth_flow, test_settings)
    yield sync
    await sync.cleanup()
