from typing import Any, Dict, Optional
from types import FrameType
import os
import traceback

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExceptionInfo(_Record):
    type: str
    message: Optional[str] = None
    source_file: Optional[str] = None  # innermost frame
    class_name: Optional[str] = None
    method_name: Optional[str] = None
    line_number: Optional[int] = None
    stack_trace: str = ""


class CallRecord(_Record):
    handler: str = ""
    request_id: Optional[str] = None
    client_ip: str = ""
    method: str = ""
    path: str = ""
    arguments: Dict[str, str] = Field(default_factory=dict)
    response: Any = None
    exception: Optional[ExceptionInfo] = None
    completed_at_epoch_millis: int = 0
    duration_millis: int = 0

    @property
    def failed(self) -> bool:
        return self.exception is not None

    def render(self, indent: Optional[int] = 2) -> str:
        # Only one of response/exception is ever emitted.
        exclude = {"response"} if self.failed else {"exception"}
        return self.model_dump_json(indent=indent, by_alias=True, exclude=exclude)


def _owner(frame: FrameType) -> str:
    """Module plus enclosing class (if any) of the frame's function."""
    module = frame.f_globals.get("__name__", "")
    qualname = getattr(frame.f_code, "co_qualname", frame.f_code.co_name)
    owner = qualname.rpartition(".")[0]
    if owner:
        return f"{module}.{owner}" if module else owner
    return module


def _render_frame(frame: FrameType, lineno: int) -> str:
    code = frame.f_code
    owner = _owner(frame)
    name = f"{owner}.{code.co_name}" if owner else code.co_name
    return f"{name}({os.path.basename(code.co_filename)}:{lineno})"


def _message(exc: BaseException) -> Optional[str]:
    try:
        return str(exc) or None
    except Exception:
        return f"<unprintable {type(exc).__name__}>"


def describe_exception(exc: BaseException) -> ExceptionInfo:
    """Summarize an exception and the frame it was raised from."""
    frames = list(traceback.walk_tb(exc.__traceback__))
    info: Dict[str, Any] = {
        "type": type(exc).__qualname__,
        "message": _message(exc),
        "stack_trace": ", ".join(_render_frame(f, n) for f, n in frames),
    }
    if frames:
        frame, lineno = frames[-1]
        info.update(
            source_file=os.path.basename(frame.f_code.co_filename),
            class_name=_owner(frame) or None,
            method_name=frame.f_code.co_name,
            line_number=lineno,
        )
    return ExceptionInfo(**info)
