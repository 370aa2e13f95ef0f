"""Domain errors and their FastAPI handlers.

A BusinessError raised from a controller is observed by the call logger like
any other exception, then rendered here into the CommonResponse envelope.
Anything else falls through to the framework's default 500 handling.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.obs.logger import log_event
from app.types import CommonResponse, StandardResponse


class BusinessError(Exception):
    def __init__(
        self,
        status: StandardResponse = StandardResponse.ERROR,
        message: Optional[str] = None,
        data: Any = None,
    ):
        self.status = status
        self.message = message or status.message
        self.data = data
        super().__init__(self.message)

    def to_response(self) -> CommonResponse:
        return CommonResponse(code=self.status.code, message=self.message, data=self.data)


def register_error_handlers(app: FastAPI) -> None:
    """Register envelope rendering for domain errors on the FastAPI app."""

    @app.exception_handler(BusinessError)
    async def business_error_handler(request: Request, exc: BusinessError):
        log_event(
            "business_error",
            level="WARNING",
            path=request.url.path,
            code=exc.status.code,
            error=exc.message,
        )
        return JSONResponse(
            status_code=exc.status.code,
            content=exc.to_response().model_dump(mode="json"),
        )
