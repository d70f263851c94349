"""Tracing utilities on the OpenTelemetry API."""

import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Generator, TypeVar

from opentelemetry import trace
from opentelemetry.trace import StatusCode

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def get_tracer(name: str = "variant_availability") -> trace.Tracer:
    """
    Get an OpenTelemetry tracer.

    Without a configured SDK provider the API hands back a no-op tracer, so
    spans cost next to nothing in library use.
    """
    return trace.get_tracer(name)


def traced(
    name: str | None = None,
    attributes: dict[str, Any] | None = None,
    record_exception: bool = True,
) -> Callable[[F], F]:
    """
    Decorator to trace a synchronous function.

    Args:
        name: Span name (defaults to function name).
        attributes: Static attributes to add to the span.
        record_exception: Whether to record exceptions on the span.

    Example:
        @traced(name="decode_product", attributes={"component": "boundary"})
        def decode_product(payload):
            ...
    """
    def decorator(func: F) -> F:
        span_name = name or func.__name__
        tracer = get_tracer(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name) as span:
                if attributes:
                    span.set_attributes(attributes)
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if record_exception:
                        span.record_exception(e)
                        span.set_status(StatusCode.ERROR)
                    raise

        return wrapper  # type: ignore

    return decorator


@contextmanager
def pipeline_span(
    stage_name: str,
    product_id: str | None = None,
    **attributes,
) -> Generator[trace.Span, None, None]:
    """
    Context manager for tracing a resolution stage.

    Example:
        with pipeline_span("build_map", product_id="p-1", variants=12):
            ...
    """
    tracer = get_tracer("variant_availability.pipeline")

    span_attrs: dict[str, Any] = {"pipeline.stage": stage_name}
    if product_id:
        span_attrs["product.id"] = product_id
    span_attrs.update(attributes)

    with tracer.start_as_current_span(f"availability.{stage_name}") as span:
        span.set_attributes(span_attrs)
        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(StatusCode.ERROR)
            raise


def add_span_attribute(key: str, value: Any) -> None:
    """Add an attribute to the current span."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attribute(key, value)


def get_current_trace_id() -> str | None:
    """Current trace ID as hex, or None outside a valid trace."""
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        return format(ctx.trace_id, "032x")
    return None


def get_current_span_id() -> str | None:
    """Current span ID as hex, or None outside a valid span."""
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        return format(ctx.span_id, "016x")
    return None
