"""Tests for structured logging helpers."""

import json
import logging

import pytest

from playback_mirror.logging_config import (
    LOG_FILE_NAME,
    POLL_LOGGER_NAME,
    get_logger,
    log_with_context,
    setup_logging,
)


def test_log_with_context_attaches_fields(caplog):
    logger = get_logger("playback_mirror.test")

    with caplog.at_level(logging.INFO, logger="playback_mirror.test"):
        log_with_context(logger, "info", "Now playing", track_id="track-1", event_type="track_changed")

    record = caplog.records[-1]
    assert record.getMessage() == "Now playing"
    assert record.track_id == "track-1"
    assert record.event_type == "track_changed"


def test_log_with_context_respects_level(caplog):
    logger = get_logger("playback_mirror.test")

    with caplog.at_level(logging.WARNING, logger="playback_mirror.test"):
        log_with_context(logger, "debug", "Poll returned no track item", event_type="poll_no_item")

    assert caplog.records == []


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    poll_logger = logging.getLogger(POLL_LOGGER_NAME)
    saved = (list(root.handlers), root.level, poll_logger.level)
    yield
    for handler in root.handlers:
        if handler not in saved[0]:
            handler.close()
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
    poll_logger.setLevel(saved[2])


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_writes_json_records(self, tmp_path, restore_logging):
        setup_logging("INFO", log_dir=tmp_path)
        logger = get_logger("playback_mirror.test")

        log_with_context(logger, "info", "Now playing", track_id="track-1", event_type="track_changed")
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads((tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8").splitlines()[-1])
        assert record["message"] == "Now playing"
        assert record["event_type"] == "track_changed"
        assert record["track_id"] == "track-1"
        assert record["service"] == "playback-mirror"

    def test_poll_logger_level(self, tmp_path, restore_logging):
        setup_logging("WARNING", poll_log_level="DEBUG", log_dir=tmp_path)

        assert logging.getLogger(POLL_LOGGER_NAME).isEnabledFor(logging.DEBUG)
        assert not get_logger("playback_mirror.services.auth_flow").isEnabledFor(logging.INFO)

    def test_poll_logger_inherits_by_default(self, tmp_path, restore_logging):
        setup_logging("WARNING", log_dir=tmp_path)

        assert logging.getLogger(POLL_LOGGER_NAME).getEffectiveLevel() == logging.WARNING
