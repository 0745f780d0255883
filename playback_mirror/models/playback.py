"""Pydantic models for the mirrored playback state."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TrackSnapshot(BaseModel):
    """Track reported by a now-playing poll. Immutable once received."""

    model_config = ConfigDict(frozen=True)

    track_id: str
    title: str
    artist_names: tuple[str, ...] = ()
    album_name: str | None = None
    album_art_url: str | None = None
    duration_ms: int = Field(default=0, ge=0)

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "TrackSnapshot":
        """Build a snapshot from the ``item`` object of a currently-playing response.

        Raises:
            ValueError: If the item or one of its nested objects has the wrong shape
        """
        if not isinstance(item, dict):
            raise ValueError("Track item must be an object")

        album = item.get("album") or {}
        if not isinstance(album, dict):
            raise ValueError("Track album must be an object")

        artists = item.get("artists") or []
        if not isinstance(artists, list) or not all(isinstance(artist, dict) for artist in artists):
            raise ValueError("Track artists must be a list of objects")

        images = album.get("images") or []
        if not isinstance(images, list) or (images and not isinstance(images[0], dict)):
            raise ValueError("Album images must be a list of objects")

        title = item.get("name") or ""

        return cls(
            # Local files have no id; fall back to the URI, then the name
            track_id=item.get("id") or item.get("uri") or title,
            title=title,
            artist_names=tuple(artist.get("name", "") for artist in artists),
            album_name=album.get("name"),
            album_art_url=images[0].get("url") if images else None,
            duration_ms=max(int(item.get("duration_ms") or 0), 0),
        )


class PlaybackState(BaseModel):
    """Locally mirrored playback state.

    progress_ms stays within [0, duration_ms]. Poll results overwrite it,
    the local ticker advances it between polls.
    """

    snapshot: TrackSnapshot | None = None
    progress_ms: int = 0
    is_playing: bool = False
    last_synced_at: datetime | None = None

    @property
    def duration_ms(self) -> int:
        """Duration of the current track, 0 when nothing is playing."""
        return self.snapshot.duration_ms if self.snapshot else 0


class PlaybackStateResponse(BaseModel):
    """Playback state as served to the front end."""

    track: TrackSnapshot | None = None
    is_playing: bool
    progress_ms: int
    duration_ms: int
    progress_fraction: float = Field(ge=0.0, le=1.0)
    elapsed_label: str
    remaining_label: str
    last_synced_at: datetime | None = None


class CommandResponse(BaseModel):
    """Result of a playback command."""

    command: str
    accepted: bool
