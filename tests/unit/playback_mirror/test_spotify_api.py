"""Unit tests for Spotify Web API calls."""

import httpx
import pytest

from playback_mirror.exceptions import AuthException, TransientNetworkException, UnauthorizedException
from playback_mirror.services import spotify_api
from playback_mirror.services.spotify_api import PlaybackCommand

TOKEN_URL = "https://accounts.spotify.com/api/token"


class TestExchangeCodeForToken:
    """Tests for exchange_code_for_token."""

    @pytest.mark.asyncio
    async def test_success(self, mock_http_client, test_settings, make_response):
        mock_http_client.post.return_value = make_response(
            200, {"access_token": "new-token", "token_type": "Bearer", "expires_in": 3600}, "POST", TOKEN_URL
        )

        token = await spotify_api.exchange_code_for_token(
            mock_http_client, test_settings, "auth-code", "client-123", "verifier-abc"
        )

        assert token == "new-token"
        call = mock_http_client.post.call_args
        assert call.args[0] == TOKEN_URL
        assert call.kwargs["data"] == {
            "grant_type": "authorization_code",
            "code": "auth-code",
            "redirect_uri": "http://127.0.0.1:8000/",
            "client_id": "client-123",
            "code_verifier": "verifier-abc",
        }
        assert call.kwargs["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
        # No client secret in a PKCE exchange
        assert "client_secret" not in call.kwargs["data"]

    @pytest.mark.asyncio
    async def test_missing_access_token(self, mock_http_client, test_settings, make_response):
        mock_http_client.post.return_value = make_response(200, {"token_type": "Bearer"}, "POST", TOKEN_URL)

        with pytest.raises(AuthException):
            await spotify_api.exchange_code_for_token(mock_http_client, test_settings, "code", "client", "verifier")

    @pytest.mark.asyncio
    async def test_http_error(self, mock_http_client, test_settings, make_response):
        mock_http_client.post.return_value = make_response(400, {"error": "invalid_grant"}, "POST", TOKEN_URL)

        with pytest.raises(TransientNetworkException) as exc_info:
            await spotify_api.exchange_code_for_token(mock_http_client, test_settings, "code", "client", "verifier")

        assert exc_info.value.details["status_code"] == 400

    @pytest.mark.asyncio
    async def test_network_error(self, mock_http_client, test_settings):
        mock_http_client.post.side_effect = httpx.ConnectError("Connection refused")

        with pytest.raises(TransientNetworkException):
            await spotify_api.exchange_code_for_token(mock_http_client, test_settings, "code", "client", "verifier")

    @pytest.mark.asyncio
    async def test_malformed_body(self, mock_http_client, test_settings, make_response):
        mock_http_client.post.return_value = make_response(200, method="POST", url=TOKEN_URL, content=b"<html>")

        with pytest.raises(TransientNetworkException):
            await spotify_api.exchange_code_for_token(mock_http_client, test_settings, "code", "client", "verifier")


class TestGetCurrentlyPlaying:
    """Tests for get_currently_playing."""

    @pytest.mark.asyncio
    async def test_success(self, mock_http_client, test_settings, make_response, currently_playing_payload):
        mock_http_client.get.return_value = make_response(200, currently_playing_payload)

        payload = await spotify_api.get_currently_playing(mock_http_client, test_settings, "test-token")

        assert payload == currently_playing_payload
        call = mock_http_client.get.call_args
        assert call.args[0] == "https://api.spotify.com/v1/me/player/currently-playing"
        assert call.kwargs["headers"] == {"Authorization": "Bearer test-token"}

    @pytest.mark.asyncio
    async def test_nothing_playing(self, mock_http_client, test_settings, make_response):
        mock_http_client.get.return_value = make_response(204)

        assert await spotify_api.get_currently_playing(mock_http_client, test_settings, "test-token") is None

    @pytest.mark.asyncio
    async def test_unauthorized(self, mock_http_client, test_settings, make_response):
        mock_http_client.get.return_value = make_response(401, {"error": {"status": 401}})

        with pytest.raises(UnauthorizedException) as exc_info:
            await spotify_api.get_currently_playing(mock_http_client, test_settings, "expired-token")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_server_error(self, mock_http_client, test_settings, make_response):
        mock_http_client.get.return_value = make_response(503)

        with pytest.raises(TransientNetworkException) as exc_info:
            await spotify_api.get_currently_playing(mock_http_client, test_settings, "test-token")

        assert exc_info.value.details["status_code"] == 503

    @pytest.mark.asyncio
    async def test_timeout(self, mock_http_client, test_settings):
        mock_http_client.get.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(TransientNetworkException):
            await spotify_api.get_currently_playing(mock_http_client, test_settings, "test-token")

    @pytest.mark.asyncio
    async def test_non_object_body(self, mock_http_client, test_settings, make_response):
        mock_http_client.get.return_value = make_response(200, ["not", "an", "object"])

        with pytest.raises(TransientNetworkException):
            await spotify_api.get_currently_playing(mock_http_client, test_settings, "test-token")


class TestSendPlaybackCommand:
    """Tests for send_playback_command."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("command", "path"),
        [(PlaybackCommand.PLAY, "/me/player/play"), (PlaybackCommand.PAUSE, "/me/player/pause")],
    )
    async def test_put_commands(self, mock_http_client, test_settings, make_response, command, path):
        mock_http_client.put.return_value = make_response(204, method="PUT")

        await spotify_api.send_playback_command(mock_http_client, test_settings, "test-token", command)

        call = mock_http_client.put.call_args
        assert call.args[0] == f"https://api.spotify.com/v1{path}"
        assert call.kwargs["headers"] == {"Authorization": "Bearer test-token"}
        assert call.kwargs["params"] is None
        mock_http_client.post.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("command", "path"),
        [(PlaybackCommand.NEXT, "/me/player/next"), (PlaybackCommand.PREVIOUS, "/me/player/previous")],
    )
    async def test_post_commands(self, mock_http_client, test_settings, make_response, command, path):
        mock_http_client.post.return_value = make_response(204, method="POST")

        await spotify_api.send_playback_command(mock_http_client, test_settings, "test-token", command)

        assert mock_http_client.post.call_args.args[0] == f"https://api.spotify.com/v1{path}"
        mock_http_client.put.assert_not_called()

    @pytest.mark.asyncio
    async def test_seek_sends_position(self, mock_http_client, test_settings, make_response):
        mock_http_client.put.return_value = make_response(204, method="PUT")

        await spotify_api.send_playback_command(
            mock_http_client, test_settings, "test-token", PlaybackCommand.SEEK, position_ms=120000
        )

        call = mock_http_client.put.call_args
        assert call.args[0] == "https://api.spotify.com/v1/me/player/seek"
        assert call.kwargs["params"] == {"position_ms": 120000}

    @pytest.mark.asyncio
    async def test_unauthorized(self, mock_http_client, test_settings, make_response):
        mock_http_client.put.return_value = make_response(401, method="PUT")

        with pytest.raises(UnauthorizedException):
            await spotify_api.send_playback_command(mock_http_client, test_settings, "test-token", PlaybackCommand.PLAY)

    @pytest.mark.asyncio
    async def test_no_active_device(self, mock_http_client, test_settings, make_response):
        mock_http_client.put.return_value = make_response(404, {"error": {"reason": "NO_ACTIVE_DEVICE"}}, "PUT")

        with pytest.raises(TransientNetworkException) as exc_info:
            await spotify_api.send_playback_command(mock_http_client, test_settings, "test-token", PlaybackCommand.PLAY)

        assert "play" in exc_info.value.message
