"""File-backed persistence for the login session."""

import json
from enum import Enum
from pathlib import Path

from playback_mirror.exceptions import SessionStoreException
from playback_mirror.logging_config import get_logger, log_with_context
from playback_mirror.models.session import Session

logger = get_logger(__name__)


class SessionSlot(str, Enum):
    """Named values kept in the session file."""

    CLIENT_ID = "client_id"
    CODE_VERIFIER = "code_verifier"
    ACCESS_TOKEN = "access_token"


class SessionStore:
    """Durable key/value store for client ID, code verifier and access token.

    Every write goes straight to disk so the values survive the restart that
    may happen between sending the user to Spotify and the redirect back.
    """

    def __init__(self, session_file: Path):
        self.session_file = Path(session_file)

    def _read(self) -> dict[str, str]:
        if not self.session_file.exists():
            return {}

        try:
            data = json.loads(self.session_file.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log_with_context(
                logger,
                "warning",
                "Session file unreadable, starting with an empty session",
                file_path=str(self.session_file),
                error=str(e),
                event_type="session_store_corrupt",
            )
            return {}

        if not isinstance(data, dict):
            return {}

        return {key: value for key, value in data.items() if isinstance(value, str)}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.session_file.parent.mkdir(parents=True, exist_ok=True)
            self.session_file.write_text(json.dumps(data, indent=2), encoding="utf-8")
            self.session_file.chmod(0o600)  # Secure file permissions
        except OSError as e:
            raise SessionStoreException(
                f"Failed to write session file: {e}",
                details={"file_path": str(self.session_file)},
            ) from e

    def get(self, slot: SessionSlot) -> str | None:
        """Read a slot.

        Returns:
            Stored value, or None if never written or cleared
        """
        return self._read().get(slot.value)

    def set(self, slot: SessionSlot, value: str) -> None:
        """Write a slot and persist it immediately."""
        data = self._read()
        data[slot.value] = value
        self._write(data)
        log_with_context(logger, "debug", "Session slot written", slot=slot.value, event_type="session_store_set")

    def clear(self, slot: SessionSlot) -> None:
        """Remove a slot (no-op if absent)."""
        data = self._read()
        if data.pop(slot.value, None) is None:
            return
        self._write(data)
        log_with_context(logger, "debug", "Session slot cleared", slot=slot.value, event_type="session_store_clear")

    def clear_all(self) -> None:
        """Remove every slot."""
        if self.session_file.exists():
            self._write({})

    def load(self) -> Session:
        """Load all slots as a Session."""
        data = self._read()
        return Session(
            client_id=data.get(SessionSlot.CLIENT_ID.value, ""),
            code_verifier=data.get(SessionSlot.CODE_VERIFIER.value),
            access_token=data.get(SessionSlot.ACCESS_TOKEN.value),
        )
