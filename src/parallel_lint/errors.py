"""Exceptions raised by the process wrappers."""

from __future__ import annotations


class ParallelLintError(Exception):
    """Base exception for all parallel-lint process operations."""


class SpawnError(ParallelLintError):
    """The OS failed to create the child process."""


class ArgumentError(ParallelLintError, ValueError):
    """A required constructor argument was missing or empty."""


class InvalidStateError(ParallelLintError, RuntimeError):
    """Output or status was requested before the process finished."""
