from enum import Enum
from typing import Any

from pydantic import BaseModel


class StandardResponse(Enum):
    OK = (200, "success")
    BAD_REQUEST = (400, "Bad Request")
    FORBIDDEN = (403, "Access Denied")
    NOT_FOUND = (404, "Not Found")
    ERROR = (500, "Business Error")

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]


class CommonResponse(BaseModel):
    """Envelope returned by every controller endpoint."""
    code: int
    message: str
    data: Any = None

    @classmethod
    def success(cls, data: Any = None) -> "CommonResponse":
        return cls.of(StandardResponse.OK, data)

    @classmethod
    def of(cls, status: StandardResponse, data: Any = None) -> "CommonResponse":
        return cls(code=status.code, message=status.message, data=data)
