from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from playback_mirror.logging_config import get_logger

logger = get_logger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent  # playback-mirror/

# Playback scopes requested at login: read state, read current track, control playback
DEFAULT_SPOTIFY_SCOPES = "user-read-playback-state user-read-currently-playing user-modify-playback-state"


class Settings(BaseSettings):
    """Application settings with validation.

    Nothing is strictly required: the client ID is normally entered by the
    user at login time, SPOTIFY_CLIENT_ID only pre-fills it.

    Uses Pydantic v2 API:
    - model_config with SettingsConfigDict
    - @field_validator decorator
    """

    # API server settings
    api_host: str = Field(min_length=1, default="127.0.0.1", description="API server host")
    api_port: int = Field(ge=1, le=65535, default=8000, description="API server port")

    # Spotify OAuth (PKCE, no client secret)
    spotify_client_id: str = Field(default="", description="Optional default Spotify client ID")
    spotify_redirect_uri: str = Field(
        default="http://127.0.0.1:8000/",
        pattern=r"^https?://",
        description="Pre-registered redirect URI (the landing page of this service)",
    )
    spotify_authorize_url: str = Field(
        default="https://accounts.spotify.com/authorize", pattern=r"^https?://", description="Authorize endpoint"
    )
    spotify_token_url: str = Field(
        default="https://accounts.spotify.com/api/token", pattern=r"^https?://", description="Token endpoint"
    )
    spotify_api_base_url: str = Field(
        default="https://api.spotify.com/v1", pattern=r"^https?://", description="Web API base URL"
    )
    spotify_scopes: str = Field(default=DEFAULT_SPOTIFY_SCOPES, min_length=1, description="Space separated scopes")

    # Session persistence
    session_file: Path = Field(default=BASE_DIR / ".session.json", description="Session store file")

    # PKCE verifier length (RFC 7636 allows 43-128 characters)
    verifier_length: int = Field(ge=43, le=128, default=64, description="PKCE code verifier length")

    # Playback sync cadence
    poll_interval_ms: int = Field(ge=100, default=1000, description="Now-playing poll interval")
    tick_interval_ms: int = Field(ge=10, default=100, description="Local progress ticker interval")
    confirm_delay_ms: int = Field(ge=0, default=300, description="Delay before the confirmation poll")
    request_timeout: float = Field(gt=0, default=10.0, description="Timeout for Spotify requests in seconds")

    # Logging and HTTP security
    log_level: str = Field(default="INFO", description="Logging level")
    poll_log_level: str | None = Field(default=None, description="Level for the playback sync logger")
    log_dir: Path = Field(default=BASE_DIR / "logs", description="Directory for the JSON log file")
    cors_origins: str = Field(default="http://localhost:8000,http://127.0.0.1:8000", description="Comma separated")
    trusted_hosts: str = Field(default="localhost,127.0.0.1", description="Comma separated")

    model_config = SettingsConfigDict(
        env_file=Path(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,  # Validate defaults too
    )

    @field_validator("api_host", mode="after")
    @classmethod
    def validate_api_host(cls, v: str) -> str:
        """Ensure api_host is not empty or whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("api_host cannot be empty")
        return v

    @field_validator("spotify_client_id", mode="after")
    @classmethod
    def validate_spotify_client_id(cls, v: str) -> str:
        """Strip surrounding whitespace from the default client ID."""
        return v.strip()

    @field_validator("log_level", "poll_log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str | None:
        """Ensure log levels are known logging levels."""
        if v is None:
            return v
        v = v.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"log level must be a standard logging level, got {v!r}")
        return v

    @property
    def scopes(self) -> list[str]:
        """Requested OAuth scopes as a list."""
        return self.spotify_scopes.split()


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    Returns:
        Cached Settings instance
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
