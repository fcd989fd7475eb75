"""In-memory aggregate of sessions, conversations and messages."""

from datetime import datetime

from bbb_chatlog.logging import get_logger
from bbb_chatlog.models import ChatRecord, Conversation, Message, Session

logger = get_logger(__name__)


def collapse_adjacent(messages: list[Message]) -> list[Message]:
    """Drop every message whose body equals the one right before it.

    Runs of equal bodies shrink to their first message. Equal bodies with
    another message in between are kept; the upstream producer logs every
    event twice in a row, and nothing more is deduplicated.
    """
    collapsed: list[Message] = []
    for message in messages:
        if collapsed and collapsed[-1].body == message.body:
            continue
        collapsed.append(message)
    return collapsed


class ChatStore:
    """Sessions keyed by meeting id, each owning its conversations.

    One store is created per run and handed to the pipeline and the
    renderer; nothing is shared between runs.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def ensure_session(self, session_id: str, created_at: datetime) -> Session:
        """Return the session with this id, creating it if needed.

        A new session takes ``created_at`` as its start time; an existing
        one keeps its original start time.
        """
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(id=session_id, start_time=created_at)
            self._sessions[session_id] = session
            logger.info(
                "session_created",
                session_id=session_id,
                start_time=created_at.isoformat(),
            )
        return session

    def ensure_conversation(self, session: Session, conversation_id: str) -> Conversation:
        """Return the conversation with this id in the session, creating it if needed."""
        conversation = session.conversations.get(conversation_id)
        if conversation is None:
            conversation = Conversation(id=conversation_id)
            session.conversations[conversation_id] = conversation
        return conversation

    def append(self, conversation: Conversation, message: Message) -> None:
        """Append a message, then collapse adjacent duplicate bodies."""
        conversation.messages.append(message)
        conversation.messages = collapse_adjacent(conversation.messages)

    def add_record(self, record: ChatRecord) -> Conversation:
        """Place a mapped record under its session and conversation."""
        session = self.ensure_session(record.session_id, record.time)
        conversation = self.ensure_conversation(session, record.conversation_id)
        self.append(
            conversation,
            Message(author=record.sender, body=record.body, time=record.time),
        )
        return conversation

    def sessions(self) -> list[Session]:
        """All sessions, sorted by id."""
        return [self._sessions[key] for key in sorted(self._sessions)]

    def message_count(self) -> int:
        return sum(
            len(conversation.messages)
            for session in self._sessions.values()
            for conversation in session.conversations.values()
        )
