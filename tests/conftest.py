"""Shared test fixtures for parallel-lint."""

from __future__ import annotations

import shlex
import stat
import sys
import textwrap
import time
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

    from parallel_lint.protocol import CommandResult

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell scripts")


def wait_until_finished(proc: CommandResult, timeout: float = 10.0) -> None:
    """Poll *proc* the way a driver would until it reports finished."""
    deadline = time.monotonic() + timeout
    while not proc.is_finished():
        if time.monotonic() > deadline:
            msg = f"process did not finish within {timeout}s"
            raise AssertionError(msg)
        time.sleep(0.01)


def python_command(code: str) -> str:
    """Escaped command line running *code* with the current interpreter."""
    return shlex.join([sys.executable, "-c", code])


def _write_executable(path: Path, content: str) -> Path:
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_php(tmp_path: Path) -> Path:
    """A stand-in for the PHP binary.

    In lint mode (``-l`` among the arguments) it prints the target file's
    contents and exits 0 when they contain the success phrase, 255 otherwise.
    Any other invocation drops the leading ``-n`` and runs the remaining
    arguments as a Python script, which is how the skip helper is launched.
    """
    script = textwrap.dedent(
        f"""\
        #!/bin/sh
        case " $* " in
          *" -l "*)
            for last; do :; done
            cat "$last"
            grep -q "No syntax errors detected" "$last" && exit 0
            exit 255
            ;;
        esac
        shift
        exec {shlex.quote(sys.executable)} "$@"
        """
    )
    return _write_executable(tmp_path / "fake-php", script)


@pytest.fixture
def skip_helper(tmp_path: Path) -> Path:
    """A skip helper that streams ``path;flag`` records, one flush per file.

    Files whose name contains ``skip`` get flag ``1``.
    """
    script = textwrap.dedent(
        """\
        import os
        import sys
        import time

        for path in sys.argv[1:]:
            flag = "1" if "skip" in os.path.basename(path) else "0"
            sys.stdout.write(f"{path};{flag}\\n")
            sys.stdout.flush()
            time.sleep(0.005)
        """
    )
    path = tmp_path / "skip_helper.py"
    path.write_text(script)
    return path


@pytest.fixture
def php_files(tmp_path: Path) -> dict[str, Path]:
    """PHP-ish sources whose contents are what the fake checker echoes."""
    src = tmp_path / "src"
    src.mkdir()
    good = src / "good.php"
    good.write_text("\nNo syntax errors detected in good.php\n")
    bad = src / "bad.php"
    bad.write_text("\nParse error: syntax error in bad.php on line 3\nErrors parsing bad.php\n")
    skipped = src / "skip_me.php"
    skipped.write_text("\nParse error: never checked\n")
    return {"good": good, "bad": bad, "skip": skipped}
