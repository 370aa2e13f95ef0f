"""ASGI middleware: binds the request context and writes the access log."""

from typing import Callable, Any, Optional
import time
import uuid

from app.config import settings
from app.obs.context import RequestContext, bind_request_context, request_context_var, request_id_var
from app.obs.logger import log_event
from app.obs.metrics import record_timing, inc_counter
from app.utils.client_ip import headers_from_scope, resolve_client_ip


def context_from_scope(scope: dict, trust_proxy_headers: bool = True) -> RequestContext:
    client = scope.get("client") or (None, None)
    headers = headers_from_scope(scope.get("headers") or [])
    return RequestContext(
        client_ip=resolve_client_ip(headers, client[0], trust_proxy_headers),
        method=scope.get("method", ""),
        path=scope.get("path", ""),
        request_id=headers.get("x-request-id") or str(uuid.uuid4()),
    )


class ObservabilityMiddleware:
    def __init__(self, app: Callable, trust_proxy_headers: Optional[bool] = None):
        self.app = app
        if trust_proxy_headers is None:
            trust_proxy_headers = settings.TRUST_PROXY_HEADERS
        self.trust_proxy_headers = trust_proxy_headers

    async def __call__(self, scope: dict, receive: Callable, send: Callable[[dict], Any]):
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        ctx = context_from_scope(scope, self.trust_proxy_headers)
        id_token = request_id_var.set(ctx.request_id)
        ctx_token = bind_request_context(ctx)
        route = ctx.path
        start = time.monotonic()
        status_code = 500

        async def send_wrapper(message: dict):
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 200))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (time.monotonic() - start) * 1000.0
            record_timing("request_latency_ms", elapsed_ms, {"route": route})
            inc_counter("requests_total", {"route": route, "status": str(status_code)})
            log_event(
                "request",
                method=ctx.method,
                route=route,
                status=status_code,
                ms_total=round(elapsed_ms, 2),
            )
            request_context_var.reset(ctx_token)
            request_id_var.reset(id_token)
