"""Decorators for instrumenting media operations with Logfire spans."""

import functools
import inspect
from typing import Any, Callable, Dict, Optional, TypeVar

import logfire

T = TypeVar("T")

MAX_REPR_LENGTH = 200


def traced(
    name: Optional[str] = None,
    capture_args: bool = True,
    **extra_attributes: Any,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to wrap a function call in a Logfire span.

    Args:
        name: Optional span name (defaults to module and function name)
        capture_args: Whether to record a short repr of the arguments
        **extra_attributes: Additional attributes to add to the span

    Returns:
        Decorated function
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        span_name = name or f"{func.__module__}.{func.__name__}"

        def span_attributes(args: tuple, kwargs: Dict[str, Any]) -> Dict[str, Any]:
            attributes = {
                "function": func.__name__,
                "module": func.__module__,
                **extra_attributes,
            }
            if capture_args:
                # Skip ``self`` on bound methods
                attributes["call_args"] = _safe_repr(args[1:] if args else args)
                attributes["call_kwargs"] = _safe_repr(kwargs)
            return attributes

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> T:
                with logfire.span(span_name, **span_attributes(args, kwargs)) as span:
                    try:
                        return await func(*args, **kwargs)
                    except Exception as e:
                        _mark_failed(span, e)
                        raise

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> T:
            with logfire.span(span_name, **span_attributes(args, kwargs)) as span:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    _mark_failed(span, e)
                    raise

        return sync_wrapper

    return decorator


def _safe_repr(value: Any) -> str:
    text = repr(value)
    if len(text) > MAX_REPR_LENGTH:
        return text[:MAX_REPR_LENGTH] + "..."
    return text


def _mark_failed(span: Any, error: Exception) -> None:
    span.set_attribute("error", True)
    span.set_attribute("error_type", type(error).__name__)
    span.set_attribute("error_message", str(error))
