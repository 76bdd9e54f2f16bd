"""CLI entry point for parallel-lint.

Provides ``parallel-lint check``, a small polling driver over the process
wrappers: an optional skip pass through the batch helper, then one syntax
check per remaining file with at most ``--jobs`` running at once.

Follows Function Core / Imperative Shell:
- Pure functions: format_check_results, exit_code_for
- Polling shell: run_skip_pass, run_syntax_checks
- Click commands: main, check
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections import deque
from typing import TYPE_CHECKING

import click

from parallel_lint.batch_stream import BatchStreamProcess
from parallel_lint.config import load_config
from parallel_lint.errors import ArgumentError, SpawnError
from parallel_lint.syntax_check import SyntaxCheckProcess
from parallel_lint.tracing import check_attributes, get_tracer, init_tracing, shutdown_tracing

if TYPE_CHECKING:
    from parallel_lint.models import LintConfig, SyntaxCheckResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INFRASTRUCTURE_ERROR = 3


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def format_check_results(results: list[SyntaxCheckResult], skipped: list[str]) -> str:
    """Format check results as human-readable lines, skipped files last."""
    lines: list[str] = []
    for r in results:
        if r.passed:
            lines.append(f"  [PASS] {r.file}")
        else:
            lines.append(f"  [FAIL] {r.file}: {r.error}")
    lines.extend(f"  [SKIP] {path}" for path in skipped)

    failed = sum(1 for r in results if not r.passed)
    lines.append("")
    lines.append(
        f"Checked {len(results)} files, {failed} with syntax errors, {len(skipped)} skipped."
    )
    return "\n".join(lines)


def exit_code_for(results: list[SyntaxCheckResult]) -> int:
    return EXIT_FAILURE if any(not r.passed for r in results) else EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Polling shell
# ---------------------------------------------------------------------------


def run_skip_pass(config: LintConfig, files: list[str]) -> list[str]:
    """Return the subset of *files* the skip helper flagged for skipping."""
    helper = BatchStreamProcess(
        config.php_executable,
        files,
        config.skip_helper,
        chunk_size=config.read_chunk_size,
    )
    while not helper.is_finished():
        helper.get_chunk()
        time.sleep(config.poll_interval)

    if helper.is_fail():
        logger.warning(
            "Skip helper exited with status %d: %s",
            helper.get_status_code(),
            helper.get_error_output().strip(),
        )
    return [f for f in files if helper.is_skipped(f)]


def _reap(running: list[SyntaxCheckProcess], poll_interval: float) -> None:
    """Wait for checkers left running when the loop is abandoned."""
    while running:
        running = [proc for proc in running if not proc.is_finished()]
        if running:
            time.sleep(poll_interval)


def run_syntax_checks(config: LintConfig, files: list[str]) -> list[SyntaxCheckResult]:
    """Check every file, keeping at most ``config.jobs`` checkers running.

    Results come back in the order of *files*.
    """
    pending = deque(files)
    running: list[SyntaxCheckProcess] = []
    finished: dict[str, SyntaxCheckResult] = {}

    try:
        while pending or running:
            while pending and len(running) < config.jobs:
                running.append(
                    SyntaxCheckProcess(
                        config.php_executable,
                        pending.popleft(),
                        asp_tags=config.asp_tags,
                        short_tag=config.short_tag,
                    )
                )

            still_running: list[SyntaxCheckProcess] = []
            for proc in running:
                if proc.is_finished():
                    finished[proc.file] = proc.result()
                else:
                    still_running.append(proc)
            running = still_running

            if running:
                time.sleep(config.poll_interval)
    finally:
        _reap(running, config.poll_interval)

    return [finished[f] for f in files]


# ---------------------------------------------------------------------------
# Click commands
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="parallel-lint")
def main() -> None:
    """parallel-lint — parallel PHP syntax checker."""


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--php", "php_executable", default=None, help="PHP executable (default: php).")
@click.option("--asp-tags", is_flag=True, help="Enable ASP-style tags.")
@click.option("--short-tag", is_flag=True, help="Enable short open tags.")
@click.option("--skip-helper", default=None, help="Script that decides which files to skip.")
@click.option("--jobs", "-j", type=int, default=None, help="Max concurrent checks (default: 10).")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON.")
@click.option("--verbose", is_flag=True, help="Log process lifecycle to stderr.")
def check(
    files: tuple[str, ...],
    php_executable: str | None,
    asp_tags: bool,
    short_tag: bool,
    skip_helper: str | None,
    jobs: int | None,
    output_json: bool,
    verbose: bool,
) -> None:
    """Check FILES for PHP syntax errors."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(
            php_executable=php_executable,
            asp_tags=asp_tags,
            short_tag=short_tag,
            skip_helper=skip_helper,
            jobs=jobs,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_INFRASTRUCTURE_ERROR)

    try:
        init_tracing()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_INFRASTRUCTURE_ERROR)

    try:
        with get_tracer().start_as_current_span("parallel_lint.check") as span:
            targets = list(files)
            skipped = run_skip_pass(config, targets) if config.skip_helper else []
            skip_set = set(skipped)
            to_check = [f for f in targets if f not in skip_set]
            results = run_syntax_checks(config, to_check)
            failed = sum(1 for r in results if not r.passed)
            span.set_attributes(check_attributes(len(results), failed, len(skipped)))
    except (SpawnError, ArgumentError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_INFRASTRUCTURE_ERROR)
    finally:
        shutdown_tracing()

    if output_json:
        payload = {
            "results": [r.model_dump() for r in results],
            "skipped": skipped,
        }
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(format_check_results(results, skipped))

    sys.exit(exit_code_for(results))
