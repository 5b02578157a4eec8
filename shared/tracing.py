"""Tracing utilities built on the OpenTelemetry API.

Spans are no-ops until the host application installs a tracer provider.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode


def get_tracer(name: str, enabled: bool = True) -> trace.Tracer:
    """Get a tracer instance; a disabled tracer never records spans."""
    if not enabled:
        return trace.NoOpTracer()
    return trace.get_tracer(name)


@contextmanager
def traced_span(tracer: trace.Tracer, name: str, **attributes: Any) -> Iterator[Span]:
    """Run a block inside a span, recording any exception that escapes it."""
    with tracer.start_as_current_span(name, record_exception=False, set_status_on_exception=False) as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, value)
        try:
            yield span
        except BaseException as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            raise
        else:
            span.set_status(Status(StatusCode.OK))
