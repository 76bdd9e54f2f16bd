"""OpenTelemetry tracing setup for parallel-lint.

Each process finalize and each CLI check run opens a span. Without
``init_tracing`` the default no-op provider is used, so library callers pay
nothing for it.

Design follows Function Core / Imperative Shell:
- Pure functions: build_resource, resolve_exporter_type, process_attributes,
  check_attributes. They compute plain dicts and import nothing from the SDK.
- Imperative shell (internal): _create_tracer_provider builds a provider
  without registering it.
- Imperative shell (public): init_tracing, get_tracer, shutdown_tracing.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.trace import Tracer

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SERVICE_NAME = "parallel-lint"
SERVICE_VERSION = "0.1.0"

OTEL_EXPORTER_ENV = "PARALLEL_LINT_OTEL_EXPORTER"
OTEL_ENDPOINT_ENV = "PARALLEL_LINT_OTEL_ENDPOINT"


class ExporterType(Enum):
    """Supported trace exporter backends."""

    CONSOLE = "console"
    OTLP_HTTP = "otlp_http"
    NONE = "none"


# ---------------------------------------------------------------------------
# Pure functions (no OTel SDK imports)
# ---------------------------------------------------------------------------


def build_resource(
    service_name: str = SERVICE_NAME,
    service_version: str = SERVICE_VERSION,
    extra_attributes: dict[str, str] | None = None,
) -> dict[str, str]:
    """Compute resource attributes as a plain dict.

    ``service.name`` and ``service.version`` always come from the explicit
    parameters.
    """
    attrs: dict[str, str] = dict(extra_attributes or {})
    attrs["service.name"] = service_name
    attrs["service.version"] = service_version
    return attrs


def resolve_exporter_type(exporter: ExporterType | None = None) -> ExporterType:
    """Determine the exporter type.

    Resolution order: explicit *exporter*, then the
    ``PARALLEL_LINT_OTEL_EXPORTER`` environment variable, then
    ``ExporterType.NONE``.

    Raises:
        ValueError: If the environment variable holds an unknown value.
    """
    if exporter is not None:
        return exporter

    env_value = os.environ.get(OTEL_EXPORTER_ENV)
    if env_value is None:
        return ExporterType.NONE

    try:
        return ExporterType(env_value)
    except ValueError:
        valid = ", ".join(e.value for e in ExporterType)
        msg = f"Invalid {OTEL_EXPORTER_ENV} value {env_value!r}. Valid options: {valid}"
        raise ValueError(msg) from None


def process_attributes(
    command_line: str,
    status_code: int,
    output_bytes: int,
    error_bytes: int,
    pid: int | None = None,
) -> dict[str, str | int]:
    """Build ``parallel_lint.process.*`` span attributes for a finalized process."""
    attrs: dict[str, str | int] = {
        "parallel_lint.process.command": command_line,
        "parallel_lint.process.status_code": status_code,
        "parallel_lint.process.output_bytes": output_bytes,
        "parallel_lint.process.error_bytes": error_bytes,
    }
    if pid is not None:
        attrs["parallel_lint.process.pid"] = pid
    return attrs


def check_attributes(
    checked: int,
    failed: int,
    skipped: int = 0,
) -> dict[str, int]:
    """Build ``parallel_lint.check.*`` span attributes for one CLI run."""
    return {
        "parallel_lint.check.file_count": checked + skipped,
        "parallel_lint.check.checked_count": checked,
        "parallel_lint.check.failed_count": failed,
        "parallel_lint.check.skipped_count": skipped,
    }


# ---------------------------------------------------------------------------
# Imperative shell — internal
# ---------------------------------------------------------------------------


def _create_tracer_provider(
    resource_attrs: dict[str, str],
    exporter_type: ExporterType,
    endpoint: str | None = None,
) -> TracerProvider:
    """Build a ``TracerProvider`` without setting it globally."""
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider

    provider = TracerProvider(resource=Resource.create(resource_attrs))

    if exporter_type is ExporterType.CONSOLE:
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    elif exporter_type is ExporterType.OTLP_HTTP:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        exporter = OTLPSpanExporter(endpoint=endpoint) if endpoint else OTLPSpanExporter()
        provider.add_span_processor(BatchSpanProcessor(exporter))

    return provider


# ---------------------------------------------------------------------------
# Imperative shell — public
# ---------------------------------------------------------------------------


def init_tracing(
    exporter: ExporterType | None = None,
    endpoint: str | None = None,
) -> None:
    """Create and globally register a ``TracerProvider``.

    Any previously registered SDK provider is shut down first, and the OTel
    set-once guard is reset so the new provider is accepted.
    """
    from opentelemetry import trace

    exporter_type = resolve_exporter_type(exporter)
    if endpoint is None:
        endpoint = os.environ.get(OTEL_ENDPOINT_ENV)
    provider = _create_tracer_provider(build_resource(), exporter_type, endpoint)

    current = trace.get_tracer_provider()
    if hasattr(current, "shutdown"):
        current.shutdown()

    once = trace._TRACER_PROVIDER_SET_ONCE
    with once._lock:
        once._done = False

    trace.set_tracer_provider(provider)


def get_tracer(name: str = "parallel_lint") -> Tracer:
    """Return a tracer from the globally registered provider."""
    from opentelemetry import trace

    return trace.get_tracer(name)


def shutdown_tracing() -> None:
    """Flush pending spans and shut down the global tracer provider."""
    from opentelemetry import trace

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()
