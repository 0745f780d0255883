"""Host and origin restrictions for the local HTTP surface."""

from playback_mirror.config import Settings
from playback_mirror.exceptions import ConfigurationException


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def get_cors_origins(settings: Settings) -> list[str]:
    """Get allowed CORS origins from settings.

    Args:
        settings: Settings instance with CORS configuration

    Returns:
        List of allowed origins
    """
    return _split(settings.cors_origins)


def get_trusted_hosts(settings: Settings) -> list[str]:
    """Get trusted host patterns from settings.

    Args:
        settings: Settings instance with trusted hosts configuration

    Returns:
        List of trusted host patterns

    Raises:
        ConfigurationException: If no host is configured, which would reject every request
    """
    hosts = _split(settings.trusted_hosts)
    if not hosts:
        raise ConfigurationException("TRUSTED_HOSTS must name at least one host")
    return hosts
