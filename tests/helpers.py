"""Reusable test utilities and constants for image chat gateway tests."""

from __future__ import annotations

import base64
import json
from typing import Any

PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
DEFAULT_MODEL = "doubao-seedream-4-5-251128"
CREDENTIAL = "sk-test"


class RecordingLogger:
    """RequestLoggerInterface implementation that keeps events in memory."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def log_request(self, data: dict[str, Any]) -> None:
        self.events.append(data)


def decode_sse_record(record: str) -> dict[str, Any]:
    """Parse one ``data: <json>\\n\\n`` record."""
    assert record.startswith("data: ")
    assert record.endswith("\n\n")
    return json.loads(record[len("data: ") : -2])


def assert_error_response(body: dict[str, Any], code: str) -> None:
    assert set(body) == {"error"}
    assert body["error"]["code"] == code
    assert body["error"]["message"]
    assert body["error"]["request_id"]
