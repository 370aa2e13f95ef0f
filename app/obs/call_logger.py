"""Call logger: one structured record per controller invocation.

Wraps a handler, times it, and writes a CallRecord to a LogSink on both the
success and the failure path. Handler errors are re-raised unchanged; errors
inside the logger itself are reported as events and never reach the caller.

Duration covers interceptor entry to record finalization on both paths.
Serialization and the sink write are not included.
"""

from functools import lru_cache, wraps
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple
import inspect
import time

from pydantic_core import PydanticSerializationError

from app.config import settings
from app.obs.context import RequestContext, current_request_context
from app.obs.logger import log_event
from app.obs.metrics import inc_counter, record_timing
from app.obs.records import CallRecord, describe_exception
from app.obs.sinks import LogSink, build_sink

NULL_PLACEHOLDER = "null"

# Set on wrappers so a handler is never intercepted twice.
WRAPPED_MARKER = "__call_logged__"


def signature_of(handler: Callable) -> Optional[inspect.Signature]:
    try:
        return inspect.signature(handler)
    except (TypeError, ValueError):
        return None


def declared_parameters(handler: Callable, signature: Optional[inspect.Signature] = None) -> Tuple[str, ...]:
    """Names of the handler's named parameters, in declaration order."""
    if signature is None:
        signature = inspect.signature(handler)
    return tuple(
        p.name for p in signature.parameters.values()
        if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    )


def stringify(value: Any) -> str:
    if value is None:
        return NULL_PLACEHOLDER
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def bind_arguments(
    signature: inspect.Signature,
    args: Sequence[Any],
    kwargs: Mapping[str, Any],
) -> Optional[Mapping[str, Any]]:
    """Values the handler receives, by parameter name, defaults included.

    None when the call does not match the signature.
    """
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError:
        return None
    bound.apply_defaults()
    return bound.arguments


def capture_arguments(
    param_names: Sequence[str],
    args: Sequence[Any] = (),
    kwargs: Optional[Mapping[str, Any]] = None,
    signature: Optional[inspect.Signature] = None,
) -> Dict[str, str]:
    """Pair each declared name with the value bound to it.

    Without a usable signature, keywords are matched by name and the
    remaining names take positional values in order.
    """
    kwargs = kwargs or {}
    bound = bind_arguments(signature, args, kwargs) if signature is not None else None
    captured: Dict[str, str] = {}
    for i, name in enumerate(param_names):
        if bound is not None:
            value = bound.get(name)
        elif name in kwargs:
            value = kwargs[name]
        else:
            value = args[i] if i < len(args) else None
        captured[name] = stringify(value)
    return captured


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", repr(handler))


class CallLogger:
    def __init__(
        self,
        sink: LogSink,
        indent: Optional[int] = 2,
        clock: Callable[[], float] = time.time,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.sink = sink
        self.indent = indent
        self._clock = clock
        self._timer = timer

    # -- interception -------------------------------------------------------

    def invoke(
        self,
        handler: Callable,
        context: RequestContext,
        param_names: Sequence[str],
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
        signature: Optional[inspect.Signature] = None,
    ) -> Any:
        kwargs = kwargs or {}
        if signature is None:
            signature = signature_of(handler)
        start = self._timer()
        try:
            result = handler(*args, **kwargs)
        except Exception as exc:
            self._observe(handler, context, param_names, signature, args, kwargs, start, exc=exc)
            raise
        self._observe(handler, context, param_names, signature, args, kwargs, start, result=result)
        return result

    async def ainvoke(
        self,
        handler: Callable,
        context: RequestContext,
        param_names: Sequence[str],
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
        signature: Optional[inspect.Signature] = None,
    ) -> Any:
        kwargs = kwargs or {}
        if signature is None:
            signature = signature_of(handler)
        start = self._timer()
        try:
            result = await handler(*args, **kwargs)
        except Exception as exc:
            self._observe(handler, context, param_names, signature, args, kwargs, start, exc=exc)
            raise
        self._observe(handler, context, param_names, signature, args, kwargs, start, result=result)
        return result

    def wrap(self, handler: Callable, param_names: Optional[Sequence[str]] = None) -> Callable:
        """Return a wrapper that logs every call of ``handler``.

        Parameter names are fixed here, once, not per call. The request
        context is read when the wrapper runs and passed down explicitly.
        """
        if getattr(handler, WRAPPED_MARKER, False):
            return handler
        signature = signature_of(handler)
        if param_names is not None:
            names = tuple(param_names)
        else:
            names = declared_parameters(handler, signature)

        if inspect.iscoroutinefunction(handler):
            @wraps(handler)
            async def async_wrapper(*args, **kwargs):
                return await self.ainvoke(handler, current_request_context(), names, args, kwargs, signature)
            wrapper = async_wrapper
        else:
            @wraps(handler)
            def sync_wrapper(*args, **kwargs):
                return self.invoke(handler, current_request_context(), names, args, kwargs, signature)
            wrapper = sync_wrapper

        setattr(wrapper, WRAPPED_MARKER, True)
        wrapper.call_log_params = names
        return wrapper

    # -- record construction ------------------------------------------------

    def build_record(
        self,
        handler: Callable,
        context: RequestContext,
        param_names: Sequence[str],
        signature: Optional[inspect.Signature],
        args: Sequence[Any],
        kwargs: Mapping[str, Any],
        start: float,
        result: Any = None,
        exc: Optional[BaseException] = None,
    ) -> CallRecord:
        record = CallRecord(
            handler=_handler_name(handler),
            request_id=context.request_id,
            client_ip=context.client_ip or "",
            method=context.method or "",
            path=context.path or "",
            arguments=capture_arguments(param_names, args, kwargs, signature),
        )
        if exc is not None:
            record.exception = describe_exception(exc)
        else:
            record.response = result
        end = self._timer()
        record.completed_at_epoch_millis = int(self._clock() * 1000)
        record.duration_millis = max(0, int((end - start) * 1000))
        return record

    def render(self, record: CallRecord) -> str:
        try:
            return record.render(self.indent)
        except (PydanticSerializationError, ValueError) as e:
            log_event(
                "call_log_serialization_failed",
                level="ERROR",
                handler=record.handler,
                response_type=type(record.response).__name__,
                error=str(e),
            )
            placeholder = f"<unserializable {type(record.response).__name__}>"
            return record.model_copy(update={"response": placeholder}).render(self.indent)

    def emit(self, record: CallRecord) -> None:
        self.sink.write(self.render(record))

    def _observe(self, handler, context, param_names, signature, args, kwargs, start, result=None, exc=None) -> None:
        name = _handler_name(handler)
        try:
            record = self.build_record(handler, context, param_names, signature, args, kwargs, start, result=result, exc=exc)
            inc_counter("handler_calls_total", {"handler": name, "outcome": "error" if record.failed else "success"})
            record_timing("handler_latency_ms", record.duration_millis, {"handler": name})
            self.emit(record)
        except Exception as e:
            log_event("call_log_write_failed", level="ERROR", handler=name, error=str(e))


@lru_cache
def get_call_logger() -> CallLogger:
    """Process-wide logger built from settings."""
    return CallLogger(sink=build_sink(settings.CALL_LOG_SINK), indent=settings.CALL_LOG_INDENT)
