"""Streaming decoder for the skip helper's ``path;flag`` records.

The helper writes one record per line as soon as each file is decided, and
the OS may hand those bytes over in chunks that split a record anywhere.
Decoding is a pure function over ``(carry, chunk)``: the last fragment of
every split is held back as the new carry because it may be incomplete.
A fragment still unterminated when the stream ends is never parsed.

Feeding a stream in any chunking yields the same records, in the same
order, as feeding it whole.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Iterable

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = b"\n"
FIELD_SEPARATOR = b";"
SKIP_FLAG = b"1"


@dataclasses.dataclass(frozen=True)
class SkipRecord:
    """One decoded helper record."""

    path: str
    skip: bool


def parse_record(line: bytes) -> SkipRecord | None:
    """Parse one complete line. Returns ``None`` for blank or malformed lines.

    The line is split on its first ``;``. A flag of exactly ``1`` means
    skip; any other flag means check.
    """
    if not line:
        return None

    path, sep, flag = line.partition(FIELD_SEPARATOR)
    if not sep:
        logger.warning("Ignoring malformed skip record: %r", line)
        return None

    return SkipRecord(path=os.fsdecode(path), skip=flag == SKIP_FLAG)


def decode_chunk(carry: bytes, chunk: bytes) -> tuple[bytes, list[SkipRecord]]:
    """Decode *chunk* given the *carry* left over from the previous call.

    Returns the new carry and the records completed by this chunk. An empty
    chunk changes nothing.
    """
    if not chunk:
        return carry, []

    *lines, carry = (carry + chunk).split(RECORD_SEPARATOR)
    records = [record for record in map(parse_record, lines) if record is not None]
    return carry, records


def decode_stream(chunks: Iterable[bytes]) -> dict[str, bool]:
    """Decode a whole stream given as chunks into a ``path -> skip`` mapping.

    Later records for the same path overwrite earlier ones. A trailing
    fragment with no newline is dropped.
    """
    skipped: dict[str, bool] = {}
    carry = b""
    for chunk in chunks:
        carry, records = decode_chunk(carry, chunk)
        skipped.update((r.path, r.skip) for r in records)
    return skipped
