"""Wire format for chat messages: ``username|message``."""

from __future__ import annotations

from dataclasses import dataclass

USERNAME_SIZE = 32
MESSAGE_SIZE = 256
COLOR_SIZE = 7

SEPARATOR = b"|"
UNKNOWN_USER = "Unknown"
NO_MESSAGE = "Null"

# Largest frame serialize() produces: both fields plus the separator.
MAX_FRAME_SIZE = USERNAME_SIZE + MESSAGE_SIZE + 1


@dataclass(frozen=True)
class ChatMessage:
    """A decoded chat message: who sent it and what it says."""

    username: str = UNKNOWN_USER
    message: str = NO_MESSAGE


def serialize(username: str, message: str) -> bytes:
    """Encode a message as ``username|message``, cut to the maximum frame size."""
    data = username.encode("utf-8") + SEPARATOR + message.encode("utf-8")
    return data[:MAX_FRAME_SIZE]


def _field(token: bytes | None, limit: int, default: str) -> str:
    if token is None:
        return default
    return token[:limit].decode("utf-8", errors="ignore")


def deserialize(data: bytes | str) -> ChatMessage:
    """Decode a ``username|message`` frame.

    Empty fields are skipped, as are any fields after the second. A missing
    username becomes ``"Unknown"`` and a missing message ``"Null"``. Decoding
    stops at the first NUL byte.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    data = data.split(b"\0", 1)[0]
    tokens = iter(token for token in data.split(SEPARATOR) if token)
    username = _field(next(tokens, None), USERNAME_SIZE, UNKNOWN_USER)
    message = _field(next(tokens, None), MESSAGE_SIZE, NO_MESSAGE)
    return ChatMessage(username=username, message=message)