"""Domain entities for the image chat gateway.

Conversation messages are caller-supplied and read-only. Only the text of
the last message is interpreted, but every message is validated for a
recognised role on construction.
"""

from __future__ import annotations

from dataclasses import dataclass

VALID_ROLES = {"user", "assistant", "system", "tool"}
"""Set of valid message roles for chat messages."""


@dataclass(slots=True, frozen=True)
class ChatMessage:
    """A single chat message.

    Attributes:
        role: Message role. Must be one of VALID_ROLES.
        content: Plain text content. May be empty.

    Raises:
        ValueError: If role is not one of VALID_ROLES.
    """

    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in VALID_ROLES:
            raise ValueError(f"Invalid role '{self.role}'. Must be one of: {sorted(VALID_ROLES)}")
