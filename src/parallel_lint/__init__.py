"""Non-blocking external process wrappers for parallel PHP syntax checking."""

from __future__ import annotations

from parallel_lint.batch_stream import BatchStreamProcess
from parallel_lint.errors import (
    ArgumentError,
    InvalidStateError,
    ParallelLintError,
    SpawnError,
)
from parallel_lint.process import ExternalProcess, ProcessState
from parallel_lint.protocol import CommandResult
from parallel_lint.syntax_check import SyntaxCheckProcess

__all__ = [
    "ArgumentError",
    "BatchStreamProcess",
    "CommandResult",
    "ExternalProcess",
    "InvalidStateError",
    "ParallelLintError",
    "ProcessState",
    "SpawnError",
    "SyntaxCheckProcess",
]
