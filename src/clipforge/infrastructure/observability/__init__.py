"""Observability infrastructure: Logfire tracing and structured logging."""

from .decorators import traced
from .logfire_setup import configure_logfire
from .logging_setup import configure_logging

__all__ = ["configure_logfire", "configure_logging", "traced"]
