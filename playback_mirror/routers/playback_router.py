"""Playback mirror routes: mirrored state and transport controls."""

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from playback_mirror.dependencies import get_playback_sync
from playback_mirror.exceptions import ValidationException
from playback_mirror.models import CommandResponse, PlaybackStateResponse
from playback_mirror.services.playback_sync import PlaybackSync

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get(
    "/state",
    response_model=PlaybackStateResponse,
    summary="Get mirrored playback state",
    description="""
    Returns the locally mirrored track, progress and play state.

    The state is refreshed from Spotify every second and interpolated locally
    in between, so this endpoint never calls Spotify itself.
    """,
    responses={
        200: {
            "description": "Successful response",
            "content": {
                "application/json": {
                    "example": {
                        "track": {
                            "track_id": "4u7EnebtmKWzUH433cf5Qv",
                            "title": "Bohemian Rhapsody",
                            "artist_names": ["Queen"],
                            "album_name": "A Night at the Opera",
                            "album_art_url": "https://i.scdn.co/image/abc",
                            "duration_ms": 354000,
                        },
                        "is_playing": True,
                        "progress_ms": 125000,
                        "duration_ms": 354000,
                        "progress_fraction": 0.353,
                        "elapsed_label": "2:05",
                        "remaining_label": "-3:49",
                        "last_synced_at": "2026-01-01T12:00:00Z",
                    }
                }
            },
        },
    },
)
@limiter.limit("240/minute")
async def get_playback_state(
    request: Request,
    playback_sync: PlaybackSync = Depends(get_playback_sync),
) -> PlaybackStateResponse:
    return playback_sync.snapshot_response()


@router.post("/play", response_model=CommandResponse, summary="Resume playback")
@limiter.limit("60/minute")
async def play(
    request: Request,
    playback_sync: PlaybackSync = Depends(get_playback_sync),
) -> CommandResponse:
    """Resume playback on the active device.

    Returns accepted=False when no one is logged in. A failed command is
    logged and corrected by the confirmation poll, not reported here.
    """
    return CommandResponse(command="play", accepted=await playback_sync.play())


@router.post("/pause", response_model=CommandResponse, summary="Pause playback")
@limiter.limit("60/minute")
async def pause(
    request: Request,
    playback_sync: PlaybackSync = Depends(get_playback_sync),
) -> CommandResponse:
    """Pause playback on the active device."""
    return CommandResponse(command="pause", accepted=await playback_sync.pause())


@router.post("/next", response_model=CommandResponse, summary="Skip to next track")
@limiter.limit("60/minute")
async def next_track(
    request: Request,
    playback_sync: PlaybackSync = Depends(get_playback_sync),
) -> CommandResponse:
    return CommandResponse(command="next", accepted=await playback_sync.skip_next())


@router.post("/previous", response_model=CommandResponse, summary="Go to previous track")
@limiter.limit("60/minute")
async def previous_track(
    request: Request,
    playback_sync: PlaybackSync = Depends(get_playback_sync),
) -> CommandResponse:
    return CommandResponse(command="previous", accepted=await playback_sync.skip_previous())


@router.put(
    "/seek",
    response_model=CommandResponse,
    summary="Seek within the current track",
    description="""
    Seek by absolute position (`position_ms`, clamped to the track) or by
    fraction of the track (`fraction`, 0 to 1, e.g. from a click on the progress bar).
    Exactly one of the two must be given.
    """,
    responses={
        400: {"description": "Neither or both arguments given, or fraction outside [0, 1]"},
    },
)
@limiter.limit("120/minute")
async def seek(
    request: Request,
    position_ms: int | None = Query(default=None, description="Target position in milliseconds"),
    fraction: float | None = Query(default=None, description="Target position as a fraction of the track"),
    playback_sync: PlaybackSync = Depends(get_playback_sync),
) -> CommandResponse:
    if (position_ms is None) == (fraction is None):
        raise ValidationException("Provide exactly one of position_ms or fraction")

    if fraction is not None:
        accepted = await playback_sync.seek_to_fraction(fraction)
    else:
        accepted = await playback_sync.seek(position_ms)

    return CommandResponse(command="seek", accepted=accepted)
