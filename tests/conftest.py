"""Pytest fixtures for bbb-chatlog tests."""

import json
import tempfile
from pathlib import Path

import pytest

from bbb_chatlog.logging import configure_logging

LOG_PREFIX = "2023-11-14T22:13:20.000Z akka-apps[1234]: INFO  o.b.c.ChatMessageHdlr - "

HI_PAYLOAD = (
    '{"envelope":{"timestamp":1700000000000,"routing":{"meetingId":"m1"}},'
    '"core":{"body":{"chatId":"c1","msg":{"sender":{"name":"Alice"},"message":"hi"}}}}'
)


def build_payload(
    timestamp=1700000000000,
    meeting_id="m1",
    chat_id="c1",
    sender="Alice",
    message="hi",
) -> dict:
    """Build a decoded chat event; pass None to leave a field out."""
    routing = {} if meeting_id is None else {"meetingId": meeting_id}
    envelope = {"routing": routing}
    if timestamp is not None:
        envelope["timestamp"] = timestamp

    msg = {}
    if sender is not None:
        msg["sender"] = {"name": sender, "role": "VIEWER"}
    if message is not None:
        msg["message"] = message

    body = {"msg": msg}
    if chat_id is not None:
        body["chatId"] = chat_id

    return {"envelope": envelope, "core": {"header": {"name": "GroupChatMessageBroadcastEvtMsg"}, "body": body}}


def build_line(**fields) -> str:
    """A log line with a chat event payload after the usual prefix."""
    return LOG_PREFIX + json.dumps(build_payload(**fields))


@pytest.fixture(scope="session", autouse=True)
def structlog_to_stdlib():
    """Send log events through stdlib logging so caplog sees them."""
    configure_logging()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_log_lines():
    """A small log with two meetings, duplicates, noise and a broken payload."""
    return [
        "akka-apps starting up",
        build_line(timestamp=1700000000000, meeting_id="m2", chat_id="MAIN-PUBLIC-GROUP-CHAT", sender="Bob", message="hello all"),
        build_line(timestamp=1700000000000, meeting_id="m2", chat_id="MAIN-PUBLIC-GROUP-CHAT", sender="Bob", message="hello all"),
        build_line(timestamp=1700000060000, meeting_id="m1", chat_id="c1", sender="Alice", message="hi"),
        build_line(timestamp=1700000060000, meeting_id="m1", chat_id="c1", sender="Alice", message="hi"),
        LOG_PREFIX + '{"envelope": {"timestamp": ',
        build_line(timestamp=1700000120000, meeting_id="m2", chat_id="private-1", sender="Carol", message="psst"),
        build_line(timestamp=1700000180000, meeting_id="m2", chat_id="MAIN-PUBLIC-GROUP-CHAT", sender="Dave", message="hi Bob"),
        "akka-apps shutting down",
    ]


@pytest.fixture
def sample_log_file(temp_dir, sample_log_lines):
    """Write the sample log to a file."""
    log_file = temp_dir / "akka-apps.log"
    log_file.write_text("\n".join(sample_log_lines) + "\n", encoding="utf-8")
    return log_file


@pytest.fixture
def make_payload():
    return build_payload


@pytest.fixture
def make_line():
    return build_line


@pytest.fixture
def hi_line():
    """The end-to-end example event as it appears in the server log."""
    return LOG_PREFIX + HI_PAYLOAD
