"""Structured logging utilities for the image chat gateway.

Request events are written as JSON Lines (one JSON object per line) to
``logs/requests.jsonl`` at the project root.

Event Schema:
    All events should include:
        - event: Event type identifier (e.g., "api_request", "http_request")
        - timestamp: ISO 8601 timestamp (auto-injected if missing)
        - Additional fields: Operation-specific metadata (request_id, model,
          image_count, latency_ms, status, etc.)
"""

from __future__ import annotations

import functools
import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter


@functools.cache
def _get_logs_dir() -> Path:
    logs_dir = Path(__file__).resolve().parents[3] / "logs"
    logs_dir.mkdir(exist_ok=True)
    return logs_dir


LOGS_DIR = _get_logs_dir()

REQUEST_LOGGER = logging.getLogger("image_chat.requests")
if not REQUEST_LOGGER.handlers:
    REQUEST_LOGGER.setLevel(logging.INFO)
    handler = logging.FileHandler(LOGS_DIR / "requests.jsonl")
    handler.setFormatter(logging.Formatter("%(message)s"))
    REQUEST_LOGGER.addHandler(handler)
    REQUEST_LOGGER.propagate = False


def _json_default(value: Any) -> Any:
    match value:
        case datetime():
            return TypeAdapter(datetime).dump_python(value, mode="json")
        case bytes():
            return f"<{len(value)} bytes>"
        case _:
            return str(value)


def log_request_event(event: dict[str, Any]) -> None:
    """Emit a structured request event.

    Adds a ``timestamp`` to ``event`` if it has none (the dict is mutated).

    Example:
        >>> log_request_event({
        ...     "event": "api_request",
        ...     "operation": "completion",
        ...     "status": "success",
        ...     "model": "doubao-seedream-4-5-251128",
        ...     "image_count": 1,
        ...     "latency_ms": 1234.56,
        ... })
    """
    event.setdefault("timestamp", datetime.now(UTC).isoformat())
    REQUEST_LOGGER.info(json.dumps(event, default=_json_default, ensure_ascii=False))


__all__ = ["LOGS_DIR", "REQUEST_LOGGER", "log_request_event"]
