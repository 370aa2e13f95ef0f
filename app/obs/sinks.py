"""Log sinks: where serialized call records end up.

A sink only has to accept a string. Each implementation owns its own locking,
so the call logger can write from any thread or task without coordination.
"""

from typing import List, Protocol
import logging
import threading


class LogSink(Protocol):
    def write(self, text: str) -> None:
        ...


class LoggingSink:
    """Forward records to the stdlib logging tree at INFO."""

    def __init__(self, logger_name: str = "app.calls"):
        self.logger = logging.getLogger(logger_name)

    def write(self, text: str) -> None:
        self.logger.info(text)


class StdoutSink:
    """Print records; the lock keeps multi-line records contiguous."""

    def __init__(self):
        self._lock = threading.Lock()

    def write(self, text: str) -> None:
        with self._lock:
            print(text, flush=True)


class MemorySink:
    """Keep records in memory. Used by tests and local introspection."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: List[str] = []

    def write(self, text: str) -> None:
        with self._lock:
            self._records.append(text)

    @property
    def records(self) -> List[str]:
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


def build_sink(name: str) -> LogSink:
    if name == "logging":
        return LoggingSink()
    if name == "stdout":
        return StdoutSink()
    if name == "memory":
        return MemorySink()
    raise ValueError(f"Unknown call log sink: {name!r}")
