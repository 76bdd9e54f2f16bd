"""Tests for parallel_lint.syntax_check — php -l wrapper."""

from __future__ import annotations

import shlex
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest

from parallel_lint.errors import ArgumentError, InvalidStateError
from parallel_lint.protocol import CommandResult
from parallel_lint.syntax_check import (
    SyntaxCheckProcess,
    build_syntax_check_command,
    extract_syntax_error,
    output_has_syntax_error,
)
from tests.conftest import posix_only, wait_until_finished

if TYPE_CHECKING:
    from pathlib import Path

OK_OUTPUT = "Line 1\nNo syntax errors detected\n"
ERROR_OUTPUT = "Line 1\nParse error: syntax error in file.php on line 3\n"


# ---------------------------------------------------------------------------
# build_syntax_check_command (pure function)
# ---------------------------------------------------------------------------


class TestBuildSyntaxCheckCommand:
    def test_default_options(self) -> None:
        cmd = build_syntax_check_command("php", "a.php")
        assert shlex.split(cmd) == [
            "php",
            "-d",
            "asp_tags=Off",
            "-d",
            "short_open_tag=Off",
            "-d",
            "error_reporting=E_ALL",
            "-n",
            "-l",
            "a.php",
        ]

    def test_tag_toggles(self) -> None:
        cmd = build_syntax_check_command("php", "a.php", asp_tags=True, short_tag=True)
        args = shlex.split(cmd)
        assert "asp_tags=On" in args
        assert "short_open_tag=On" in args

    def test_paths_are_escaped(self) -> None:
        exe = "/opt/my php/bin/php"
        target = "src/it's $(rm -rf) here.php"
        args = shlex.split(build_syntax_check_command(exe, target))
        assert args[0] == exe
        assert args[-1] == target

    def test_empty_executable(self) -> None:
        with pytest.raises(ArgumentError, match="PHP executable must be set"):
            build_syntax_check_command("", "a.php")

    def test_empty_file(self) -> None:
        with pytest.raises(ArgumentError, match="File to check must be set"):
            build_syntax_check_command("php", "")

    def test_argument_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            build_syntax_check_command("", "")


# ---------------------------------------------------------------------------
# Output parsing (pure functions)
# ---------------------------------------------------------------------------


class TestOutputParsing:
    def test_success_output(self) -> None:
        assert output_has_syntax_error(OK_OUTPUT) is False
        assert extract_syntax_error(OK_OUTPUT) is None

    def test_error_output(self) -> None:
        assert output_has_syntax_error(ERROR_OUTPUT) is True
        assert extract_syntax_error(ERROR_OUTPUT) == (
            "Parse error: syntax error in file.php on line 3"
        )

    def test_success_phrase_anywhere(self) -> None:
        assert output_has_syntax_error("banner\nmore\nNo syntax errors detected in x.php") is False

    def test_empty_output_is_an_error(self) -> None:
        assert output_has_syntax_error("") is True
        assert extract_syntax_error("") == ""

    def test_single_line_output(self) -> None:
        assert extract_syntax_error("  Could not open input file: x.php  ") == (
            "Could not open input file: x.php"
        )


# ---------------------------------------------------------------------------
# SyntaxCheckProcess (real subprocess via fake checker)
# ---------------------------------------------------------------------------


class TestSyntaxCheckProcessConstruction:
    def test_empty_executable_raises_before_spawn(self) -> None:
        with patch("parallel_lint.syntax_check.ExternalProcess") as spawn:
            with pytest.raises(ArgumentError):
                SyntaxCheckProcess("", "a.php")
        spawn.assert_not_called()

    def test_empty_file_raises_before_spawn(self) -> None:
        with patch("parallel_lint.syntax_check.ExternalProcess") as spawn:
            with pytest.raises(ArgumentError):
                SyntaxCheckProcess("php", "")
        spawn.assert_not_called()


@posix_only
class TestSyntaxCheckProcess:
    def test_clean_file(self, fake_php: Path, php_files: dict[str, Path]) -> None:
        proc = SyntaxCheckProcess(str(fake_php), str(php_files["good"]))
        wait_until_finished(proc)
        assert proc.has_syntax_error() is False
        assert proc.get_syntax_error() is None
        assert proc.get_status_code() == 0
        assert proc.is_fail() is False

    def test_broken_file(self, fake_php: Path, php_files: dict[str, Path]) -> None:
        proc = SyntaxCheckProcess(str(fake_php), str(php_files["bad"]))
        wait_until_finished(proc)
        assert proc.has_syntax_error() is True
        assert proc.get_syntax_error() == "Parse error: syntax error in bad.php on line 3"
        assert proc.get_status_code() == 255

    def test_result_model(self, fake_php: Path, php_files: dict[str, Path]) -> None:
        proc = SyntaxCheckProcess(str(fake_php), str(php_files["bad"]))
        wait_until_finished(proc)
        result = proc.result()
        assert result.file == str(php_files["bad"])
        assert result.passed is False
        assert result.error == "Parse error: syntax error in bad.php on line 3"
        assert result.status_code == 255

    def test_satisfies_command_result_protocol(
        self, fake_php: Path, php_files: dict[str, Path]
    ) -> None:
        proc = SyntaxCheckProcess(str(fake_php), str(php_files["good"]))
        assert isinstance(proc, CommandResult)
        wait_until_finished(proc)

    def test_file_with_spaces(self, fake_php: Path, tmp_path: Path) -> None:
        target = tmp_path / "dir with space" / "a b.php"
        target.parent.mkdir()
        target.write_text("\nNo syntax errors detected in a b.php\n")
        proc = SyntaxCheckProcess(str(fake_php), str(target))
        wait_until_finished(proc)
        assert proc.has_syntax_error() is False

    def test_has_syntax_error_requires_finish(self, tmp_path: Path) -> None:
        slow = tmp_path / "slow-php"
        slow.write_text("#!/bin/sh\nexec sleep 30\n")
        slow.chmod(0o755)
        proc = SyntaxCheckProcess(str(slow), "a.php")
        try:
            with pytest.raises(InvalidStateError):
                proc.has_syntax_error()
        finally:
            proc.process._popen.kill()
            wait_until_finished(proc)


class TestPlatformIsFail:
    def _finished(self, status: int) -> SyntaxCheckProcess:
        proc = SyntaxCheckProcess.__new__(SyntaxCheckProcess)
        proc._process = MagicMock()
        proc._process.get_status_code.return_value = status
        proc._process.is_fail.return_value = status == 1
        return proc

    @pytest.mark.parametrize("windows", [True, False])
    def test_status_one_fails(self, windows: bool) -> None:
        with patch("parallel_lint.syntax_check.IS_WINDOWS", windows):
            assert self._finished(1).is_fail() is True

    @pytest.mark.parametrize("windows", [True, False])
    def test_other_status_passes(self, windows: bool) -> None:
        with patch("parallel_lint.syntax_check.IS_WINDOWS", windows):
            assert self._finished(255).is_fail() is False
