"""Identifier and timestamp helpers."""

from __future__ import annotations

import time
import uuid


def unique_id() -> str:
    """Return a random 32-character hex identifier."""
    return uuid.uuid4().hex


def unix_timestamp() -> int:
    """Return the current Unix time in whole seconds."""
    return int(time.time())


__all__ = ["unique_id", "unix_timestamp"]
