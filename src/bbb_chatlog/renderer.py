"""Render the aggregated chats as a text report."""

from typing import Any

from bbb_chatlog.models import Conversation, Message, Session
from bbb_chatlog.store import ChatStore

RULE_WIDTH = 80
AUTHOR_WIDTH = 15
SESSION_RULE = "#" * RULE_WIDTH
CONVERSATION_RULE = "_" * RULE_WIDTH
MESSAGE_INDENT = "      "

SESSION_TIME_FORMAT = "%d.%m.%Y %H:%M"
MESSAGE_TIME_FORMAT = "%H:%M"


def sorted_conversations(session: Session) -> list[Conversation]:
    return [session.conversations[key] for key in sorted(session.conversations)]


def format_message(message: Message) -> str:
    """Format one message line, e.g. ``12:13:..........Alice: hi``."""
    time = message.time.strftime(MESSAGE_TIME_FORMAT)
    return f"{time}:{message.author:.>{AUTHOR_WIDTH}}: {message.body}"


def format_conversation(conversation: Conversation) -> str:
    lines = ["", CONVERSATION_RULE, conversation.id]
    lines.extend(MESSAGE_INDENT + format_message(m) for m in conversation.messages)
    return "\n".join(lines) + "\n"


def format_session(session: Session) -> str:
    header = f"\n{SESSION_RULE}\n\n{session.start_time.strftime(SESSION_TIME_FORMAT)} - {session.id}\n"
    return header + "".join(format_conversation(c) for c in sorted_conversations(session))


def render_report(store: ChatStore) -> str:
    """Render the full report: the session count, then one block per session.

    Sessions and conversations are sorted by id so the same input always
    gives the same output. Messages keep their arrival order.
    """
    parts = [f"{len(store)}\n"]
    for session in store.sessions():
        parts.append(f"\n\n{format_session(session)}\n")
    return "".join(parts)


def report_as_dict(store: ChatStore) -> dict[str, Any]:
    """The report as JSON-ready data, in the same order as ``render_report``."""
    return {
        "session_count": len(store),
        "sessions": [
            {
                "id": session.id,
                "start_time": session.start_time.isoformat(),
                "conversations": [
                    {
                        "id": conversation.id,
                        "messages": [
                            {
                                "time": message.time.isoformat(),
                                "author": message.author,
                                "body": message.body,
                            }
                            for message in conversation.messages
                        ],
                    }
                    for conversation in sorted_conversations(session)
                ],
            }
            for session in store.sessions()
        ],
    }


def summarize(store: ChatStore) -> list[dict[str, Any]]:
    """Per-session counts for the summary table."""
    rows = []
    for session in store.sessions():
        rows.append({
            "session": session.id,
            "start_time": session.start_time.strftime(SESSION_TIME_FORMAT),
            "conversations": len(session.conversations),
            "messages": sum(len(c.messages) for c in session.conversations.values()),
        })
    return rows
