"""Tests for the file-backed session store."""

import json
import os
import stat

import pytest

from playback_mirror.exceptions import SessionStoreException
from playback_mirror.session_store import SessionSlot, SessionStore


class TestSessionStore:
    """Tests for SessionStore."""

    def test_get_missing_file_returns_none(self, session_store):
        assert session_store.get(SessionSlot.ACCESS_TOKEN) is None
        assert not session_store.session_file.exists()

    def test_set_and_get(self, session_store):
        session_store.set(SessionSlot.CLIENT_ID, "client-123")

        assert session_store.get(SessionSlot.CLIENT_ID) == "client-123"

    def test_values_survive_new_instance(self, session_store):
        """Values written before a restart are visible to a fresh store."""
        session_store.set(SessionSlot.CODE_VERIFIER, "verifier-abc")

        reopened = SessionStore(session_store.session_file)

        assert reopened.get(SessionSlot.CODE_VERIFIER) == "verifier-abc"

    def test_clear_only_removes_one_slot(self, session_store):
        session_store.set(SessionSlot.CLIENT_ID, "client-123")
        session_store.set(SessionSlot.ACCESS_TOKEN, "token-xyz")

        session_store.clear(SessionSlot.ACCESS_TOKEN)

        assert session_store.get(SessionSlot.ACCESS_TOKEN) is None
        assert session_store.get(SessionSlot.CLIENT_ID) == "client-123"

    def test_clear_absent_slot_is_noop(self, session_store):
        session_store.clear(SessionSlot.ACCESS_TOKEN)

        assert not session_store.session_file.exists()

    def test_clear_all(self, session_store):
        session_store.set(SessionSlot.CLIENT_ID, "client-123")
        session_store.set(SessionSlot.ACCESS_TOKEN, "token-xyz")

        session_store.clear_all()

        session = session_store.load()
        assert session.client_id == ""
        assert session.access_token is None

    def test_load(self, session_store):
        session_store.set(SessionSlot.CLIENT_ID, "client-123")
        session_store.set(SessionSlot.ACCESS_TOKEN, "token-xyz")

        session = session_store.load()

        assert session.client_id == "client-123"
        assert session.code_verifier is None
        assert session.access_token == "token-xyz"

    def test_file_holds_flat_strings(self, session_store):
        session_store.set(SessionSlot.CLIENT_ID, "client-123")

        data = json.loads(session_store.session_file.read_text())

        assert data == {"client_id": "client-123"}

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")
    def test_file_is_private(self, session_store):
        session_store.set(SessionSlot.ACCESS_TOKEN, "token-xyz")

        mode = stat.S_IMODE(session_store.session_file.stat().st_mode)

        assert mode == 0o600

    def test_corrupt_file_treated_as_empty(self, session_store):
        session_store.session_file.write_text("{not json")

        assert session_store.get(SessionSlot.ACCESS_TOKEN) is None
        assert session_store.load().client_id == ""

    def test_non_string_values_ignored(self, session_store):
        session_store.session_file.write_text(json.dumps({"client_id": 42, "access_token": "token-xyz"}))

        session = session_store.load()

        assert session.client_id == ""
        assert session.access_token == "token-xyz"

    def test_write_failure_raises(self, tmp_path):
        """A session path below a regular file cannot be written."""
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("")
        store = SessionStore(blocker / "session.json")

        with pytest.raises(SessionStoreException) as exc_info:
            store.set(SessionSlot.CLIENT_ID, "client-123")

        assert exc_info.value.status_code == 500
        assert "session.json" in exc_info.value.details["file_path"]
