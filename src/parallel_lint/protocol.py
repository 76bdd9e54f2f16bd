"""CommandResult protocol definition."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CommandResult(Protocol):
    """Protocol for anything backed by one external command.

    ``ExternalProcess`` implements the lifecycle; the syntax-check and
    batch-stream wrappers compose it and add their own result decoding.
    """

    def is_finished(self) -> bool:
        """Non-blocking completion check."""
        ...

    def is_fail(self) -> bool:
        """Whether the command's exit status signals failure."""
        ...

    def get_output(self) -> str:
        """Captured standard output. Only valid once finished."""
        ...

    def get_error_output(self) -> str:
        """Captured standard error. Only valid once finished."""
        ...

    def get_status_code(self) -> int:
        """Exit status. Only valid once finished."""
        ...
