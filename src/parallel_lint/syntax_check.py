"""PHP syntax check (``php -l``) process wrapper.

The checker prints ``No syntax errors detected`` somewhere in its output on
success. On failure, the diagnostic is on the second line (the first line is
blank or a banner).

Design follows Function Core / Imperative Shell:
- Pure functions: build_syntax_check_command, output_has_syntax_error,
  extract_syntax_error
- Imperative shell: SyntaxCheckProcess (composes ExternalProcess)
"""

from __future__ import annotations

import shlex
import sys

from parallel_lint.errors import ArgumentError
from parallel_lint.models import SyntaxCheckResult
from parallel_lint.process import FAILURE_STATUS_CODE, ExternalProcess

NO_SYNTAX_ERRORS = "No syntax errors detected"

IS_WINDOWS = sys.platform == "win32"


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def _on_off(enabled: bool) -> str:
    return "On" if enabled else "Off"


def build_syntax_check_command(
    executable: str,
    file_to_check: str,
    *,
    asp_tags: bool = False,
    short_tag: bool = False,
) -> str:
    """Build the lint-only, no-config checker command line for one file.

    Raises:
        ArgumentError: If *executable* or *file_to_check* is empty.
    """
    if not executable:
        msg = "PHP executable must be set."
        raise ArgumentError(msg)
    if not file_to_check:
        msg = "File to check must be set."
        raise ArgumentError(msg)

    return " ".join(
        [
            shlex.quote(executable),
            f"-d asp_tags={_on_off(asp_tags)}",
            f"-d short_open_tag={_on_off(short_tag)}",
            "-d error_reporting=E_ALL",
            "-n -l",
            shlex.quote(file_to_check),
        ]
    )


def output_has_syntax_error(output: str) -> bool:
    return NO_SYNTAX_ERRORS not in output


def extract_syntax_error(output: str) -> str | None:
    """Return the diagnostic line from failing checker output.

    ``None`` when the output reports success. Output shorter than two lines
    is returned stripped, since there is no second line to pick.
    """
    if not output_has_syntax_error(output):
        return None

    lines = output.split("\n")
    if len(lines) < 2:
        return output.strip()
    return lines[1]


# ---------------------------------------------------------------------------
# Imperative shell
# ---------------------------------------------------------------------------


class SyntaxCheckProcess:
    """Runs the checker on one file and interprets its output."""

    def __init__(
        self,
        executable: str,
        file_to_check: str,
        *,
        asp_tags: bool = False,
        short_tag: bool = False,
    ) -> None:
        command_line = build_syntax_check_command(
            executable,
            file_to_check,
            asp_tags=asp_tags,
            short_tag=short_tag,
        )
        self.file = file_to_check
        self._process = ExternalProcess(command_line)

    @property
    def process(self) -> ExternalProcess:
        return self._process

    def is_finished(self) -> bool:
        return self._process.is_finished()

    def get_output(self) -> str:
        return self._process.get_output()

    def get_error_output(self) -> str:
        return self._process.get_error_output()

    def get_status_code(self) -> int:
        return self._process.get_status_code()

    def is_fail(self) -> bool:
        # Windows reports the checker's failure only through exit status 1.
        # TODO: re-validate against a real Windows php.exe whether signal
        # terminations elsewhere need a different rule.
        if IS_WINDOWS:
            return self.get_status_code() == FAILURE_STATUS_CODE
        return self._process.is_fail()

    def has_syntax_error(self) -> bool:
        return output_has_syntax_error(self.get_output())

    def get_syntax_error(self) -> str | None:
        return extract_syntax_error(self.get_output())

    def result(self) -> SyntaxCheckResult:
        """Structured verdict. Raises ``InvalidStateError`` while running."""
        return SyntaxCheckResult(
            file=self.file,
            passed=not self.has_syntax_error(),
            error=self.get_syntax_error(),
            status_code=self.get_status_code(),
        )
