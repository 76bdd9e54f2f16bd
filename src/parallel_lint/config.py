"""Environment-backed configuration loading.

Resolution order for every setting: explicit override, then environment
variable, then the ``LintConfig`` default.
"""

from __future__ import annotations

import os
from typing import Any

from parallel_lint.models import LintConfig

PHP_EXECUTABLE_ENV = "PARALLEL_LINT_PHP"
SKIP_HELPER_ENV = "PARALLEL_LINT_SKIP_HELPER"
JOBS_ENV = "PARALLEL_LINT_JOBS"


def _env_jobs() -> int | None:
    value = os.environ.get(JOBS_ENV)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        msg = f"Invalid {JOBS_ENV} value {value!r}: expected an integer"
        raise ValueError(msg) from None


def resolve_env_settings() -> dict[str, Any]:
    """Collect settings present in the environment.

    Raises:
        ValueError: If ``PARALLEL_LINT_JOBS`` is not an integer.
    """
    settings: dict[str, Any] = {}
    php = os.environ.get(PHP_EXECUTABLE_ENV)
    if php:
        settings["php_executable"] = php
    helper = os.environ.get(SKIP_HELPER_ENV)
    if helper:
        settings["skip_helper"] = helper
    jobs = _env_jobs()
    if jobs is not None:
        settings["jobs"] = jobs
    return settings


def load_config(**overrides: Any) -> LintConfig:
    """Build a ``LintConfig``. Overrides set to ``None`` are ignored."""
    settings = resolve_env_settings()
    settings.update({k: v for k, v in overrides.items() if v is not None})
    return LintConfig(**settings)
