"""Playback Mirror - Spotify PKCE login and now-playing mirror"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("playback-mirror")
except PackageNotFoundError:
    __version__ = "dev"
