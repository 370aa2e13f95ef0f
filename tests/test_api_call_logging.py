import json
from typing import Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.controllers.routing import CallLoggingRouter
from app.errors import BusinessError, register_error_handlers
from app.obs.middleware import ObservabilityMiddleware
from app.types import CommonResponse, StandardResponse


def build_app(call_logger):
    router = CallLoggingRouter(call_logger=call_logger)

    @router.get("/items/{item_id}")
    def get_item(item_id: int, q: Optional[str] = None):
        return CommonResponse.success({"id": item_id, "q": q})

    @router.get("/async/{name}")
    async def greet(name: str):
        return CommonResponse.success(f"hi {name}")

    @router.get("/boom")
    def explode():
        raise RuntimeError("boom")

    @router.get("/forbidden")
    def forbidden():
        raise BusinessError(StandardResponse.FORBIDDEN)

    @router.get("/private")
    def _private():
        return {"logged": False}

    api = FastAPI()
    register_error_handlers(api)
    api.include_router(router)
    return ObservabilityMiddleware(api, trust_proxy_headers=True), router


@pytest.fixture
def client_and_router(call_logger):
    app, router = build_app(call_logger)
    return TestClient(app), router


def records(sink):
    return [json.loads(r) for r in sink.records]


def test_router_registers_public_handlers_only(client_and_router):
    _, router = client_and_router
    paths = [h.path for h in router.intercepted]
    assert paths == ["/items/{item_id}", "/async/{name}", "/boom", "/forbidden"]
    item = router.intercepted[0]
    assert item.param_names == ("item_id", "q")
    assert item.handler.__name__ == "get_item"


def test_path_and_query_arguments_captured(client_and_router, sink):
    client, _ = client_and_router
    r = client.get("/items/3")
    assert r.status_code == 200
    assert r.json() == {"code": 200, "message": "success", "data": {"id": 3, "q": None}}

    (rec,) = records(sink)
    assert rec["method"] == "GET"
    assert rec["path"] == "/items/3"
    assert rec["arguments"] == {"item_id": "3", "q": "null"}
    assert rec["response"]["data"] == {"id": 3, "q": None}
    assert "exception" not in rec


def test_async_endpoint(client_and_router, sink):
    client, _ = client_and_router
    r = client.get("/async/ada")
    assert r.json()["data"] == "hi ada"
    assert records(sink)[0]["arguments"] == {"name": "ada"}


def test_unhandled_error_is_logged_and_still_raised(client_and_router, sink):
    client, _ = client_and_router
    with pytest.raises(RuntimeError, match="boom"):
        client.get("/boom")

    (rec,) = records(sink)
    assert "response" not in rec
    assert rec["exception"]["message"] == "boom"
    assert rec["exception"]["methodName"] == "explode"
    assert rec["exception"]["stackTrace"]
    assert rec["path"] == "/boom"


def test_unhandled_error_becomes_500(call_logger, sink):
    app, _ = build_app(call_logger)
    client = TestClient(app, raise_server_exceptions=False)
    assert client.get("/boom").status_code == 500
    assert len(sink.records) == 1


def test_business_error_rendered_as_envelope(client_and_router, sink):
    client, _ = client_and_router
    r = client.get("/forbidden")
    assert r.status_code == 403
    assert r.json() == {"code": 403, "message": "Access Denied", "data": None}

    rec = records(sink)[0]
    assert rec["exception"]["type"] == "BusinessError"
    assert rec["exception"]["message"] == "Access Denied"


def test_private_handler_not_logged(client_and_router, sink):
    client, _ = client_and_router
    assert client.get("/private").json() == {"logged": False}
    assert sink.records == []


def test_request_context_from_headers(client_and_router, sink):
    client, _ = client_and_router
    client.get("/items/1", headers={"X-Forwarded-For": "203.0.113.5, 10.0.0.1", "X-Request-ID": "abc-123"})
    rec = records(sink)[0]
    assert rec["clientIp"] == "203.0.113.5"
    assert rec["requestId"] == "abc-123"


def test_peer_address_without_proxy_headers(client_and_router, sink):
    client, _ = client_and_router
    client.get("/items/1")
    assert records(sink)[0]["clientIp"] == "testclient"


def test_one_record_per_request(client_and_router, sink):
    client, _ = client_and_router
    for i in range(5):
        client.get(f"/items/{i}", params={"q": str(i)})
    recs = records(sink)
    assert [r["arguments"] for r in recs] == [{"item_id": str(i), "q": str(i)} for i in range(5)]
