"""Data models for bbb-chatlog."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Message:
    """One chat utterance."""

    author: str
    body: str
    time: datetime


@dataclass
class Conversation:
    """A public or private chat room inside a session."""

    id: str
    messages: list[Message] = field(default_factory=list)


@dataclass(eq=False)
class Session:
    """A meeting, identified by its meeting id.

    Equality and hashing only look at the id. ``start_time`` comes from the
    event that first referenced the session and is never updated.
    """

    id: str
    start_time: datetime
    conversations: dict[str, Conversation] = field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Session):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class ChatRecord:
    """The fields of a decoded log payload needed to place a message."""

    time: datetime  # UTC, naive, millisecond precision
    session_id: str
    conversation_id: str
    sender: str
    body: str
