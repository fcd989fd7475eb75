"""Locate, decode and map the JSON payload embedded in a log line."""

import json
from datetime import datetime, timedelta
from typing import Any

from bbb_chatlog.models import ChatRecord

PAYLOAD_MARKER = "{"

EPOCH = datetime(1970, 1, 1)

# Payload paths
TIMESTAMP_PATH = ("envelope", "timestamp")
SESSION_ID_PATH = ("envelope", "routing", "meetingId")
CONVERSATION_ID_PATH = ("core", "body", "chatId")
SENDER_PATH = ("core", "body", "msg", "sender", "name")
BODY_PATH = ("core", "body", "msg", "message")

_MISSING = object()


class PayloadDecodeError(ValueError):
    """The text after the payload marker is not valid JSON."""

    def __init__(self, message: str, payload: str) -> None:
        super().__init__(message)
        self.payload = payload


class RequiredFieldError(ValueError):
    """A field the record cannot be placed without is absent or mistyped."""

    def __init__(self, message: str, path: tuple[str, ...]) -> None:
        super().__init__(message)
        self.path = path


def locate_payload(line: str) -> str | None:
    """Return the line from the first ``{`` onwards, or None if there is none."""
    start = line.find(PAYLOAD_MARKER)
    if start == -1:
        return None
    return line[start:]


def decode_payload(text: str) -> Any:
    """Decode payload text into plain Python values.

    Raises:
        PayloadDecodeError: If the text is not a single JSON document.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise PayloadDecodeError(str(e), text) from e


def _walk(value: Any, path: tuple[str, ...]) -> Any:
    for key in path:
        if not isinstance(value, dict) or key not in value:
            return _MISSING
        value = value[key]
    return value


def text_at(value: Any, *path: str) -> str:
    """Read a nested field as text, never failing.

    Missing fields and null become "". Strings are returned as-is, any other
    JSON value is rendered as compact JSON (so ``true``, ``5``, ``[1,2]``).
    """
    found = _walk(value, path)
    if found is _MISSING or found is None:
        return ""
    if isinstance(found, str):
        return found
    return json.dumps(found, separators=(",", ":"), ensure_ascii=False)


def timestamp_at(value: Any, *path: str) -> int:
    """Read a nested field as integer milliseconds.

    Floats are truncated. Booleans, strings and anything else are rejected.

    Raises:
        RequiredFieldError: If the field is missing or not a finite number.
    """
    dotted = ".".join(path)
    found = _walk(value, path)
    if found is _MISSING or found is None:
        raise RequiredFieldError(f"{dotted} is missing", path)
    if isinstance(found, bool) or not isinstance(found, (int, float)):
        raise RequiredFieldError(f"{json.dumps(found)} is not a number", path)
    try:
        return int(found)
    except (ValueError, OverflowError) as e:
        raise RequiredFieldError(f"{found} is not a number", path) from e


def millis_to_datetime(millis: int) -> datetime:
    """Convert milliseconds since the Unix epoch to a naive UTC datetime."""
    return EPOCH + timedelta(milliseconds=millis)


def map_record(value: Any) -> ChatRecord:
    """Extract the fields of a chat event from a decoded payload.

    Only the timestamp is required; the ids, sender and body fall back to ""
    when absent.

    Raises:
        RequiredFieldError: If ``envelope.timestamp`` is missing, not a
            number, or outside the representable date range.
    """
    millis = timestamp_at(value, *TIMESTAMP_PATH)
    try:
        time = millis_to_datetime(millis)
    except OverflowError as e:
        raise RequiredFieldError(f"{millis} is out of range", TIMESTAMP_PATH) from e

    return ChatRecord(
        time=time,
        session_id=text_at(value, *SESSION_ID_PATH),
        conversation_id=text_at(value, *CONVERSATION_ID_PATH),
        sender=text_at(value, *SENDER_PATH),
        body=text_at(value, *BODY_PATH),
    )
