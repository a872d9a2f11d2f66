"""
Behavioral tests for structured request logging.
"""

import json
import logging
from datetime import UTC, datetime

import pytest

from image_chat.infrastructure.adapters import RequestLoggerAdapter
from image_chat.telemetry import structured_logging
from image_chat.telemetry.structured_logging import log_request_event


@pytest.fixture
def log_path(tmp_path):
    """Temporarily redirect the request logger to a file under tmp_path."""
    original_handlers = structured_logging.REQUEST_LOGGER.handlers[:]
    structured_logging.REQUEST_LOGGER.handlers = []
    path = tmp_path / "requests.jsonl"
    handler = logging.FileHandler(path)
    handler.setFormatter(logging.Formatter("%(message)s"))
    structured_logging.REQUEST_LOGGER.addHandler(handler)
    try:
        yield path
    finally:
        structured_logging.REQUEST_LOGGER.removeHandler(handler)
        handler.close()
        structured_logging.REQUEST_LOGGER.handlers = original_handlers


def _read_events(path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines() if line]


class TestStructuredLogging:
    def test_adds_timestamp(self, log_path):
        log_request_event({"event": "test", "model": "m"})

        (data,) = _read_events(log_path)
        assert isinstance(data["timestamp"], str)
        datetime.fromisoformat(data["timestamp"])

    def test_serializes_datetime_and_bytes(self, log_path):
        log_request_event({"event": "test", "timestamp": datetime.now(UTC), "blob": b"\x00\x01"})

        (data,) = _read_events(log_path)
        datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))
        assert data["blob"] == "<2 bytes>"

    def test_non_ascii_is_preserved(self, log_path):
        log_request_event({"event": "test", "error_message": "Image generation failed: 🎨"})
        assert "🎨" in log_path.read_text(encoding="utf-8")

    def test_adapter_delegates(self, log_path):
        RequestLoggerAdapter.log_request({"event": "api_request", "status": "success"})

        (data,) = _read_events(log_path)
        assert data["event"] == "api_request"
        assert data["status"] == "success"

    def test_request_logger_does_not_propagate(self):
        assert structured_logging.REQUEST_LOGGER.propagate is False
        assert structured_logging.LOGS_DIR.is_dir()
