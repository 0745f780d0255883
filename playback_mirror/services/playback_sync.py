"""Now-playing mirror: authoritative polling, local progress interpolation, commands.

Reconciliation rule: a poll result always overwrites local state. Between
polls the ticker advances progress at wall-clock rate, and seek updates it
optimistically; both are advisory until the next poll arrives.
"""

import asyncio
import math
from collections.abc import Coroutine
from datetime import UTC, datetime
from typing import Any

import httpx

from playback_mirror.config import Settings
from playback_mirror.exceptions import MirrorException, UnauthorizedException, ValidationException
from playback_mirror.logging_config import get_logger, log_with_context
from playback_mirror.models.playback import PlaybackState, PlaybackStateResponse, TrackSnapshot
from playback_mirror.models.session import AuthState
from playback_mirror.services import spotify_api
from playback_mirror.services.auth_flow import AuthFlow
from playback_mirror.services.spotify_api import PlaybackCommand
from playback_mirror.state_managers import StateManager
from playback_mirror.utils.time_format import format_remaining, format_time

logger = get_logger(__name__)


class PlaybackSync(StateManager):
    """Mirrors the user's active playback and forwards control commands.

    Runs two independent asyncio tasks: the poller while logged in and the
    progress ticker while playing.
    """

    def __init__(self, client: httpx.AsyncClient, auth_flow: AuthFlow, settings: Settings):
        self._client = client
        self._auth_flow = auth_flow
        self._settings = settings
        self.state = PlaybackState()

        self._poll_task: asyncio.Task | None = None
        self._tick_task: asyncio.Task | None = None
        self._confirm_tasks: set[asyncio.Task] = set()
        self._tick_origin: float | None = None

        auth_flow.add_listener(self._on_auth_state_change)

    async def initialize(self) -> None:
        """Start polling if a session was restored."""
        if self._auth_flow.is_logged_in():
            self.start_polling()

    async def cleanup(self) -> None:
        """Cancel every background task."""
        tasks = [task for task in (self._poll_task, self._tick_task) if task is not None]
        tasks.extend(self._confirm_tasks)
        self._poll_task = None
        self._tick_task = None
        self._confirm_tasks.clear()

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        log_with_context(logger, "info", "Playback sync stopped", event_type="playback_sync_cleanup")

    # Lifecycle of the background tasks

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    @property
    def is_ticking(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def _on_auth_state_change(self, state: AuthState) -> None:
        if state is AuthState.LOGGED_IN:
            self.start_polling()
        elif state is AuthState.LOGGED_OUT:
            self.stop_polling()
            self._reset()

    def start_polling(self) -> None:
        """Start the poll task; the first poll runs immediately."""
        if self.is_polling:
            return
        self._poll_task = asyncio.get_running_loop().create_task(self._poll_loop())
        log_with_context(
            logger,
            "info",
            "Polling started",
            interval_ms=self._settings.poll_interval_ms,
            event_type="poll_started",
        )

    def stop_polling(self) -> None:
        """Stop the poll task. Safe to call from inside a poll."""
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        if task is not asyncio.current_task():
            task.cancel()
        log_with_context(logger, "info", "Polling stopped", event_type="poll_stopped")

    async def _poll_loop(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self._settings.poll_interval_ms / 1000
        this_task = asyncio.current_task()

        while self._poll_task is this_task:
            started = loop.time()
            await self._guarded_poll("interval")
            if self._poll_task is not this_task:
                break
            # Fixed cadence; a poll that overruns delays the next one instead of overlapping it
            await asyncio.sleep(max(0.0, interval - (loop.time() - started)))

    def _sync_ticker(self) -> None:
        """Run the ticker exactly while playback is playing."""
        if self.state.is_playing and not self.is_ticking:
            self._tick_origin = asyncio.get_running_loop().time()
            self._tick_task = asyncio.get_running_loop().create_task(self._tick_loop())
        elif not self.state.is_playing and self._tick_task is not None:
            task, self._tick_task = self._tick_task, None
            task.cancel()

    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self._settings.tick_interval_ms / 1000

        while self.state.is_playing:
            await asyncio.sleep(interval)
            now = loop.time()
            origin = self._tick_origin if self._tick_origin is not None else now
            self._tick_origin = now
            self.advance((now - origin) * 1000)

    def _schedule_confirmation(self) -> None:
        delay = self._settings.confirm_delay_ms / 1000
        self._spawn(self._confirm_after(delay))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._confirm_tasks.add(task)
        task.add_done_callback(self._confirm_tasks.discard)

    async def _confirm_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        await self._guarded_poll("confirmation")

    async def _guarded_poll(self, trigger: str) -> None:
        """Run one poll; an unexpected error is logged and the next poll retries."""
        try:
            await self.poll()
        except Exception as e:
            log_with_context(
                logger,
                "error",
                "Unexpected error during poll",
                trigger=trigger,
                error=str(e),
                error_type=type(e).__name__,
                event_type="poll_error",
            )

    # State reconciliation

    def _reset(self) -> None:
        self.state = PlaybackState()
        self._sync_ticker()

    def _mark_synced(self) -> None:
        self.state.last_synced_at = datetime.now(UTC)
        self._tick_origin = asyncio.get_running_loop().time()

    def _apply_nothing_playing(self) -> None:
        self.state.snapshot = None
        self.state.is_playing = False
        self.state.progress_ms = 0
        self._mark_synced()
        self._sync_ticker()

    def _apply_payload(self, payload: dict[str, Any]) -> None:
        item = payload.get("item")
        if not item:
            # Ads and some podcast states come back without an item
            log_with_context(logger, "debug", "Poll returned no track item", event_type="poll_no_item")
            return

        try:
            snapshot = TrackSnapshot.from_api(item)
            progress_ms = int(payload.get("progress_ms") or 0)
        except (TypeError, ValueError) as e:
            log_with_context(
                logger,
                "warning",
                "Malformed now-playing payload",
                error=str(e),
                event_type="poll_malformed",
            )
            return

        if self.state.snapshot is None or self.state.snapshot.track_id != snapshot.track_id:
            log_with_context(
                logger,
                "info",
                "Now playing",
                track_id=snapshot.track_id,
                title=snapshot.title,
                event_type="track_changed",
            )
            self.state.snapshot = snapshot
        elif self.state.snapshot.duration_ms != snapshot.duration_ms:
            self.state.snapshot = snapshot

        self.state.progress_ms = min(max(progress_ms, 0), self.state.duration_ms)
        self.state.is_playing = bool(payload.get("is_playing"))
        self._mark_synced()
        self._sync_ticker()

    async def poll(self) -> None:
        """Fetch the currently playing track and apply it as the authoritative state."""
        token = self._auth_flow.access_token
        if not token:
            return

        try:
            payload = await spotify_api.get_currently_playing(self._client, self._settings, token)
        except UnauthorizedException:
            if self._auth_flow.access_token != token:
                return
            log_with_context(logger, "warning", "Access token rejected, logging out", event_type="poll_unauthorized")
            self._auth_flow.invalidate()
            return
        except MirrorException as e:
            log_with_context(
                logger,
                "warning",
                "Poll failed",
                error=e.message,
                error_code=e.code.value,
                event_type="poll_failed",
            )
            return

        # The session may have ended or changed while the request was in flight
        if self._auth_flow.access_token != token:
            log_with_context(logger, "debug", "Discarding stale poll response", event_type="poll_stale")
            return

        if payload is None:
            self._apply_nothing_playing()
        else:
            self._apply_payload(payload)

    def advance(self, elapsed_ms: float) -> None:
        """Advance progress by elapsed wall-clock time, capped at the track duration."""
        if not self.state.is_playing or elapsed_ms <= 0:
            return
        self.state.progress_ms = min(self.state.progress_ms + round(elapsed_ms), self.state.duration_ms)

    def compute_progress_fraction(self) -> float:
        """Fraction of the track played, in [0, 1]; 0 when nothing is playing."""
        duration_ms = self.state.duration_ms
        if duration_ms <= 0:
            return 0.0
        return min(max(self.state.progress_ms / duration_ms, 0.0), 1.0)

    def snapshot_response(self) -> PlaybackStateResponse:
        """Current state as served to the front end."""
        return PlaybackStateResponse(
            track=self.state.snapshot,
            is_playing=self.state.is_playing,
            progress_ms=self.state.progress_ms,
            duration_ms=self.state.duration_ms,
            progress_fraction=self.compute_progress_fraction(),
            elapsed_label=format_time(self.state.progress_ms),
            remaining_label=format_remaining(self.state.duration_ms, self.state.progress_ms),
            last_synced_at=self.state.last_synced_at,
        )

    # Commands

    async def _send(self, token: str, command: PlaybackCommand, position_ms: int | None = None) -> None:
        try:
            await spotify_api.send_playback_command(self._client, self._settings, token, command, position_ms)
        except UnauthorizedException:
            if self._auth_flow.access_token == token:
                log_with_context(
                    logger,
                    "warning",
                    "Access token rejected by control endpoint, logging out",
                    command=command.name.lower(),
                    event_type="command_unauthorized",
                )
                self._auth_flow.invalidate()
        except MirrorException as e:
            log_with_context(
                logger,
                "warning",
                "Playback command failed",
                command=command.name.lower(),
                error=e.message,
                error_code=e.code.value,
                event_type="command_failed",
            )

    async def _command_then_confirm(self, command: PlaybackCommand) -> bool:
        token = self._auth_flow.access_token
        if not token:
            return False

        log_with_context(logger, "info", "Playback command", command=command.name.lower(), event_type="command_sent")
        await self._send(token, command)
        if self._auth_flow.is_logged_in():
            self._schedule_confirmation()
        return True

    async def play(self) -> bool:
        """Resume playback. Returns False if not logged in."""
        return await self._command_then_confirm(PlaybackCommand.PLAY)

    async def pause(self) -> bool:
        """Pause playback. Returns False if not logged in."""
        return await self._command_then_confirm(PlaybackCommand.PAUSE)

    async def skip_next(self) -> bool:
        """Skip to the next track. Returns False if not logged in."""
        return await self._command_then_confirm(PlaybackCommand.NEXT)

    async def skip_previous(self) -> bool:
        """Go back to the previous track. Returns False if not logged in."""
        return await self._command_then_confirm(PlaybackCommand.PREVIOUS)

    async def seek(self, target_ms: int) -> bool:
        """Seek within the current track.

        Progress is updated locally before the request is sent and is not
        rolled back if the request fails.

        Returns:
            False if not logged in or nothing is playing
        """
        token = self._auth_flow.access_token
        duration_ms = self.state.duration_ms
        if not token or duration_ms <= 0:
            return False

        position_ms = min(max(int(target_ms), 0), duration_ms)
        self.state.progress_ms = position_ms
        self._tick_origin = asyncio.get_running_loop().time()

        log_with_context(
            logger,
            "info",
            "Playback command",
            command="seek",
            position_ms=position_ms,
            event_type="command_sent",
        )
        await self._send(token, PlaybackCommand.SEEK, position_ms)
        return True

    async def seek_to_fraction(self, fraction: float) -> bool:
        """Seek to a fraction of the current track, e.g. from a click on the progress bar.

        Raises:
            ValidationException: If fraction is outside [0, 1]
        """
        if not 0.0 <= fraction <= 1.0:
            raise ValidationException("Seek fraction must be between 0 and 1", details={"fraction": str(fraction)})
        return await self.seek(math.floor(fraction * self.state.duration_ms))
