"""Observability helpers for LearnSphere."""

from learnsphere.observability.logging import (
    LogContext,
    configure_logging,
    correlation_id_var,
    request_id_var,
    user_id_var,
)

__all__ = [
    "LogContext",
    "configure_logging",
    "correlation_id_var",
    "request_id_var",
    "user_id_var",
]
