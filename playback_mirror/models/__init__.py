"""Playback Mirror models"""

from playback_mirror.models.base_models import DetailedHealthResponse, HealthResponse
from playback_mirror.models.playback import (
    CommandResponse,
    PlaybackState,
    PlaybackStateResponse,
    TrackSnapshot,
)
from playback_mirror.models.session import AuthorizationRequest, AuthState, AuthStatusResponse, Session

__all__ = [
    "AuthState",
    "AuthStatusResponse",
    "AuthorizationRequest",
    "CommandResponse",
    "DetailedHealthResponse",
    "HealthResponse",
    "PlaybackState",
    "PlaybackStateResponse",
    "Session",
    "TrackSnapshot",
]
