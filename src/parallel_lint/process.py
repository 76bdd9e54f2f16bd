"""Generic non-blocking wrapper around one external process.

The wrapper spawns its child in the constructor and never blocks while the
child runs. Callers poll ``is_finished()``; the first poll that sees the
child exited performs the finalize transition exactly once:

1. drain stdout and stderr into the captured buffers,
2. close both pipes,
3. release the process handle,
4. record the exit status.

Design follows Function Core / Imperative Shell:
- Pure function: _first_not_none
- Imperative shell: ExternalProcess
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from enum import StrEnum
from typing import IO

from parallel_lint.errors import InvalidStateError, SpawnError
from parallel_lint.tracing import get_tracer, process_attributes

logger = logging.getLogger(__name__)

FAILURE_STATUS_CODE = 1


class ProcessState(StrEnum):
    """Lifecycle of an external process wrapper."""

    RUNNING = "running"
    FINISHED = "finished"


def _first_not_none(*values: int | None) -> int | None:
    for value in values:
        if value is not None:
            return value
    return None


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


class ExternalProcess:
    """One spawned child process, its pipes, and its terminal outcome.

    The command line is a single shell-escaped string. It is split with
    :func:`shlex.split` and executed without a shell, so quoted arguments
    reach the child verbatim and are never interpreted.

    Raises:
        SpawnError: If the OS cannot create the process.
    """

    def __init__(self, command_line: str) -> None:
        self._command_line = command_line
        self._state = ProcessState.RUNNING
        self._output = b""
        self._error_output = b""
        self._status_code: int | None = None

        try:
            self._popen: subprocess.Popen[bytes] | None = subprocess.Popen(
                shlex.split(command_line),
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                shell=False,
            )
        except (OSError, ValueError) as e:
            msg = f"Cannot create new process {command_line}"
            raise SpawnError(msg) from e

        # Nothing is ever written to the child.
        self._popen.stdin.close()
        self._pid = self._popen.pid
        logger.debug("Spawned pid=%d: %s", self._pid, command_line)

    # -- introspection -----------------------------------------------------

    @property
    def command_line(self) -> str:
        return self._command_line

    @property
    def pid(self) -> int:
        return self._pid

    @property
    def state(self) -> ProcessState:
        return self._state

    # -- lifecycle ---------------------------------------------------------

    def is_finished(self) -> bool:
        """Return whether the child has exited. Never blocks on a running child.

        The first call that observes the exit drains and closes the pipes,
        releases the handle and records the status. Later calls return
        ``True`` without touching the OS.
        """
        if self._state is ProcessState.FINISHED:
            return True

        live_status = self._popen.poll()
        if live_status is None:
            return False

        self._finalize(live_status)
        return True

    def _finalize(self, live_status: int) -> None:
        popen = self._popen
        with get_tracer().start_as_current_span("parallel_lint.process.finalize") as span:
            try:
                self._output = self._drain(popen.stdout)
                self._error_output = self._drain(popen.stderr)
            finally:
                # Pipes close and the state flips even when a drain raises.
                popen.stdout.close()
                popen.stderr.close()
                self._status_code = _first_not_none(live_status, popen.wait())
                self._popen = None
                self._state = ProcessState.FINISHED

            span.set_attributes(
                process_attributes(
                    self._command_line,
                    self._status_code,
                    len(self._output),
                    len(self._error_output),
                    pid=self._pid,
                )
            )
        logger.debug(
            "Finished pid=%d status=%d stdout=%dB stderr=%dB",
            self._pid,
            self._status_code,
            len(self._output),
            len(self._error_output),
        )

    @staticmethod
    def _drain(stream: IO[bytes]) -> bytes:
        return stream.read()

    def read_available(self, size: int) -> bytes:
        """Read at most *size* bytes from stdout without blocking.

        Returns ``b""`` when nothing is buffered in the pipe, at end of
        stream, or once the process has finished. Bytes consumed here are
        not part of the captured output returned after finalize.
        """
        if self._state is ProcessState.FINISHED:
            return b""

        fd = self._popen.stdout.fileno()
        os.set_blocking(fd, False)
        try:
            return os.read(fd, size)
        except BlockingIOError:
            return b""
        finally:
            os.set_blocking(fd, True)

    # -- results -----------------------------------------------------------

    def _require_finished(self, what: str) -> None:
        if not self.is_finished():
            msg = f"Cannot get {what} for running process"
            raise InvalidStateError(msg)

    def get_output(self) -> str:
        self._require_finished("output")
        return _decode(self._output)

    def get_raw_output(self) -> bytes:
        self._require_finished("output")
        return self._output

    def get_error_output(self) -> str:
        self._require_finished("error output")
        return _decode(self._error_output)

    def get_status_code(self) -> int:
        self._require_finished("status code")
        return self._status_code

    def is_fail(self) -> bool:
        return self.get_status_code() == FAILURE_STATUS_CODE

    def __repr__(self) -> str:
        return (
            f"ExternalProcess(pid={self._pid}, state={self._state.value}, "
            f"command={self._command_line!r})"
        )
