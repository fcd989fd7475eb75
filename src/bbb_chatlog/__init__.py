"""bbb-chatlog: rebuild BigBlueButton chat transcripts from server logs."""

__version__ = "0.1.0"
