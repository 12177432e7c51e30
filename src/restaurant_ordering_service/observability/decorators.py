"""OpenTelemetry tracing decorators."""

import asyncio
import functools
from collections.abc import Callable
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

# Type variable for generic function signatures
F = TypeVar("F", bound=Callable[..., Any])


def _record_failure(span: Span, error: Exception) -> None:
    span.set_attribute("success", False)
    span.set_attribute("error.type", type(error).__name__)
    span.set_attribute("error.message", str(error))
    span.record_exception(error)
    span.set_status(Status(StatusCode.ERROR, str(error)))


def traced(
    span_name: str | None = None,
    service_name: str = "ordering-svc",
    attributes: dict[str, str] | None = None,
) -> Callable[[F], F]:
    """Decorator to add OpenTelemetry tracing to a function.

    Creates a span around the decorated function and records any exception on
    it before re-raising. Both sync and async functions are supported.

    Args:
        span_name: Name for the span (defaults to the function's qualified name)
        service_name: Service name for span attributes
        attributes: Static attributes added to every span

    Returns:
        Decorated function with tracing

    Example:
        @traced("place_order", attributes={"component": "orders"})
        async def create_order(self, request: CreateOrderRequest) -> Order:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__qualname__
        tracer = trace.get_tracer(service_name)
        static_attributes = {"service.name": service_name, "function.name": func.__name__}
        static_attributes.update(attributes or {})

        if asyncio.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with tracer.start_as_current_span(name, attributes=static_attributes) as span:
                    try:
                        result = await func(*args, **kwargs)
                    except Exception as e:
                        _record_failure(span, e)
                        raise
                    span.set_attribute("success", True)
                    return result

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name, attributes=static_attributes) as span:
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _record_failure(span, e)
                    raise
                span.set_attribute("success", True)
                return result

        return sync_wrapper  # type: ignore

    return decorator
