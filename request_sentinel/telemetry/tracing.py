"""Distributed tracing helpers.

Wraps the OpenTelemetry tracing API.  Without an SDK configured by the
host, the API hands out non-recording spans and costs next to nothing.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Optional

from opentelemetry import trace

from request_sentinel.constants import TRACER_NAME


def get_tracer() -> Any:
    """Return the Request Sentinel tracer."""
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def start_span(
    name: str,
    attributes: Optional[dict] = None,
) -> Generator[Any, None, None]:
    """Context manager that starts a trace span."""
    tracer = get_tracer()
    with tracer.start_as_current_span(name, attributes=attributes or {}) as span:
        yield span
