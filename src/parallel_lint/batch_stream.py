"""Skip helper process wrapper with incremental record decoding.

The helper receives every target file at once and prints ``path;flag``
records as it decides each one. Output is consumed in bounded non-blocking
reads via ``get_chunk()`` so the pipe never fills up, and whatever is left
in the pipe when the helper exits is decoded once at finalize.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence

from parallel_lint.errors import ArgumentError
from parallel_lint.process import ExternalProcess
from parallel_lint.records import SkipRecord, decode_chunk

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 8192


def build_batch_command(executable: str, helper_script: str, files: Sequence[str]) -> str:
    """Build ``<executable> -n <helper> <file>...`` with every argument quoted.

    Raises:
        ArgumentError: If *executable* or *helper_script* is empty, or
            *files* has no entries.
    """
    if not executable:
        msg = "PHP executable must be set."
        raise ArgumentError(msg)
    if not helper_script:
        msg = "Skip helper script must be set."
        raise ArgumentError(msg)
    if not files:
        msg = "Files to check must be set."
        raise ArgumentError(msg)

    parts = [shlex.quote(executable), "-n", shlex.quote(helper_script)]
    parts.extend(shlex.quote(f) for f in files)
    return " ".join(parts)


class BatchStreamProcess:
    """Runs the skip helper over many files and decodes its record stream."""

    def __init__(
        self,
        executable: str,
        files: Sequence[str],
        helper_script: str,
        *,
        chunk_size: int = READ_CHUNK_SIZE,
    ) -> None:
        command_line = build_batch_command(executable, helper_script, files)
        self.files = list(files)
        self._chunk_size = chunk_size
        self._skipped: dict[str, bool] = {}
        self._carry = b""
        self._drained = False
        self._process = ExternalProcess(command_line)

    @property
    def process(self) -> ExternalProcess:
        return self._process

    def _feed(self, chunk: bytes) -> None:
        self._carry, records = decode_chunk(self._carry, chunk)
        self._apply(records)

    def _apply(self, records: list[SkipRecord]) -> None:
        for record in records:
            self._skipped[record.path] = record.skip

    def get_chunk(self) -> None:
        """Decode one bounded read of helper output. No-op once finished."""
        if not self.is_finished():
            self._feed(self._process.read_available(self._chunk_size))

    def is_finished(self) -> bool:
        finished = self._process.is_finished()
        if finished and not self._drained:
            self._drained = True
            self._feed(self._process.get_raw_output())
            logger.debug(
                "Skip helper pid=%d decoded %d records", self._process.pid, len(self._skipped)
            )
        return finished

    def is_skipped(self, file: str) -> bool | None:
        """Decoded skip flag for *file*, or ``None`` if no record has arrived."""
        return self._skipped.get(file)

    def skipped_files(self) -> dict[str, bool]:
        return dict(self._skipped)

    def get_output(self) -> str:
        # Only what was still in the pipe at exit; get_chunk() reads are not included.
        return self._process.get_output()

    def get_error_output(self) -> str:
        return self._process.get_error_output()

    def get_status_code(self) -> int:
        return self._process.get_status_code()

    def is_fail(self) -> bool:
        return self._process.is_fail()
