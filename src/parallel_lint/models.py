"""Core data models for parallel-lint."""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_PHP_EXECUTABLE = "php"
DEFAULT_READ_CHUNK_SIZE = 8192


class LintConfig(BaseModel):
    """Settings shared by the process builders and the CLI driver."""

    php_executable: str = Field(
        default=DEFAULT_PHP_EXECUTABLE,
        description="Path or name of the PHP binary used as the syntax checker.",
    )
    asp_tags: bool = Field(default=False, description="Enable legacy ASP-style tags.")
    short_tag: bool = Field(default=False, description="Enable short open tags.")
    skip_helper: str | None = Field(
        default=None,
        description="Script deciding which files to skip. No skip pass when None.",
    )
    read_chunk_size: int = Field(
        default=DEFAULT_READ_CHUNK_SIZE,
        gt=0,
        description="Bytes read from the skip helper per non-blocking poll.",
    )
    jobs: int = Field(default=10, gt=0, description="Max concurrent syntax checks (CLI only).")
    poll_interval: float = Field(
        default=0.01,
        ge=0,
        description="Seconds the CLI sleeps between polling rounds.",
    )


class SyntaxCheckResult(BaseModel):
    """Verdict for one finished syntax check."""

    file: str
    passed: bool
    error: str | None = Field(
        default=None,
        description="Checker diagnostic when the file has a syntax error.",
    )
    status_code: int
