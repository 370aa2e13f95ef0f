from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from fastapi import APIRouter

from app.obs.call_logger import CallLogger, WRAPPED_MARKER, get_call_logger


@dataclass(frozen=True)
class InterceptedHandler:
    path: str
    handler: Callable
    wrapped: Callable
    param_names: Tuple[str, ...]


def is_public_handler(endpoint: Callable) -> bool:
    return not getattr(endpoint, "__name__", "").startswith("_")


class CallLoggingRouter(APIRouter):
    """APIRouter that wraps each public endpoint with the call logger.

    Wrapping happens once, when the route is added; ``intercepted`` keeps the
    handler/wrapper pairs so the set of logged endpoints is inspectable.
    """

    def __init__(self, *args: Any, call_logger: Optional[CallLogger] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._call_logger = call_logger
        self.intercepted: List[InterceptedHandler] = []

    @property
    def call_logger(self) -> CallLogger:
        return self._call_logger or get_call_logger()

    def add_api_route(self, path: str, endpoint: Callable, **kwargs: Any) -> None:
        if is_public_handler(endpoint) and not getattr(endpoint, WRAPPED_MARKER, False):
            wrapped = self.call_logger.wrap(endpoint)
            self.intercepted.append(
                InterceptedHandler(
                    path=path,
                    handler=endpoint,
                    wrapped=wrapped,
                    param_names=wrapped.call_log_params,
                )
            )
            endpoint = wrapped
        super().add_api_route(path, endpoint, **kwargs)
