"""Observability package.

Request-scoped context, the ASGI middleware, structured event logging,
in-process metrics, and the call logger that records every controller call.
"""

__all__ = [
    "call_logger",
    "context",
    "logger",
    "metrics",
    "middleware",
    "records",
    "sinks",
]
