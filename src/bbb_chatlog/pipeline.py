"""Feed log lines through locate, decode, map and store."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from bbb_chatlog.extractor import (
    PayloadDecodeError,
    RequiredFieldError,
    decode_payload,
    locate_payload,
    map_record,
)
from bbb_chatlog.logging import get_logger
from bbb_chatlog.store import ChatStore

logger = get_logger(__name__)


@dataclass
class PipelineStats:
    """Counts for one run over the input."""

    lines: int = 0
    passed_through: int = 0
    decode_errors: int = 0
    skipped_records: int = 0
    records: int = 0


def process_lines(
    lines: Iterable[str],
    store: ChatStore,
    emit: Callable[[str], None],
    strict: bool = False,
) -> PipelineStats:
    """Process every line into the store.

    Lines without a payload are handed to ``emit`` unchanged as they are
    read. A payload that fails to decode, or lacks a usable timestamp, is
    reported through ``emit`` as the error message followed by the payload
    text, and adds nothing to the store.

    Args:
        lines: Input lines; a trailing newline is stripped.
        store: Store receiving the records.
        emit: Called with each line of streamed output.
        strict: Re-raise timestamp errors instead of skipping the line.

    Raises:
        RequiredFieldError: In strict mode, on the first line whose
            timestamp is missing or not a number.
    """
    stats = PipelineStats()

    for line_num, line in enumerate(lines, 1):
        line = line.rstrip("\r\n")
        stats.lines += 1

        payload = locate_payload(line)
        if payload is None:
            emit(line)
            stats.passed_through += 1
            continue

        try:
            value = decode_payload(payload)
        except PayloadDecodeError as e:
            logger.warning("payload_decode_failed", line=line_num, error=str(e))
            emit(f"{e}\n{e.payload}")
            stats.decode_errors += 1
            continue

        try:
            record = map_record(value)
        except RequiredFieldError as e:
            if strict:
                raise
            logger.warning("record_skipped", line=line_num, field=".".join(e.path), error=str(e))
            emit(f"{e}\n{payload}")
            stats.skipped_records += 1
            continue

        store.add_record(record)
        stats.records += 1

    logger.info(
        "pipeline_finished",
        lines=stats.lines,
        records=stats.records,
        sessions=len(store),
        messages=store.message_count(),
        decode_errors=stats.decode_errors,
        skipped_records=stats.skipped_records,
    )
    return stats
