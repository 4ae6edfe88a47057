"""Error Dispatch: exactly-once response guarantee at the request boundary.

Tests cover:
    - Success passes through without touching the classifier
    - Failures before the response started → one JSON error response
    - Failures after the response started → ResponseAlreadyCommittedError, one start only
    - Serialization failures, unknown routes, 405 fallback, no internal leaks
    - Raw failures are logged by the dispatcher at the kind's severity
"""

import asyncio
import json
import logging

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from errorgate.api.error_dispatch import ErrorDispatcher, ErrorDispatchMiddleware
from errorgate.api.framework_rules import build_classifier
from errorgate.core.classifier import Classifier
from errorgate.core.errors import ResponseAlreadyCommittedError, conflict
from errorgate.main import create_app
from errorgate.schemas.error import ErrorResponseBody


class CountingClassifier(Classifier):
    def __init__(self):
        super().__init__(build_classifier().rules)
        self.calls = 0

    def classify(self, failure):
        self.calls += 1
        return super().classify(failure)


def _scope(path="/things"):
    return {
        "type": "http", "method": "GET", "path": path, "headers": [],
        "query_string": b"", "root_path": "",
    }


async def _receive():
    return {"type": "http.request", "body": b"", "more_body": False}


@pytest.fixture
def sent():
    return []


@pytest.fixture
def send(sent):
    async def _send(message):
        sent.append(message)
    return _send


def _middleware(downstream, clock=None, classifier=None):
    dispatcher = ErrorDispatcher(classifier or build_classifier(), clock=clock)
    return ErrorDispatchMiddleware(downstream, dispatcher)


def _starts(sent):
    return [m for m in sent if m["type"] == "http.response.start"]


# ─── Raw ASGI ───────────────────────────────────────────────────

async def test_success_passes_through_untouched(sent, send):
    classifier = CountingClassifier()

    async def ok(scope, receive, send):
        await send({"type": "http.response.start", "status": 204, "headers": []})
        await send({"type": "http.response.body", "body": b""})

    await _middleware(ok, classifier=classifier)(_scope(), _receive, send)
    assert _starts(sent)[0]["status"] == 204
    assert classifier.calls == 0


async def test_failure_before_start_writes_one_json_response(sent, send, fixed_clock):
    classifier = CountingClassifier()

    async def fails(scope, receive, send):
        raise conflict("email already registered")

    await _middleware(fails, fixed_clock, classifier)(_scope("/users"), _receive, send)

    assert classifier.calls == 1
    starts = _starts(sent)
    assert len(starts) == 1
    assert starts[0]["status"] == 409
    assert (b"content-type", b"application/json") in starts[0]["headers"]
    body = json.loads(sent[-1]["body"])
    assert body["error"] == "Conflict"
    assert body["path"] == "/users"


async def test_failure_after_partial_write_is_fatal(sent, send):
    async def partial_then_fail(scope, receive, send):
        await send({"type": "http.response.start", "status": 200, "headers": []})
        await send({
            "type": "http.response.body", "body": b"partial", "more_body": True,
        })
        raise RuntimeError("stream broke")

    with pytest.raises(ResponseAlreadyCommittedError) as info:
        await _middleware(partial_then_fail)(_scope(), _receive, send)

    assert isinstance(info.value.__cause__, RuntimeError)
    assert len(_starts(sent)) == 1
    assert _starts(sent)[0]["status"] == 200


async def test_second_response_start_is_refused(sent, send):
    async def double_write(scope, receive, send):
        await send({"type": "http.response.start", "status": 200, "headers": []})
        await send({"type": "http.response.body", "body": b"one"})
        await send({"type": "http.response.start", "status": 500, "headers": []})

    with pytest.raises(ResponseAlreadyCommittedError):
        await _middleware(double_write)(_scope(), _receive, send)
    assert len(_starts(sent)) == 1


async def test_cancellation_propagates_without_writing(sent, send):
    async def cancelled(scope, receive, send):
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await _middleware(cancelled)(_scope(), _receive, send)
    assert sent == []


async def test_non_http_scopes_pass_through(sent, send):
    seen = []

    async def lifespan_app(scope, receive, send):
        seen.append(scope["type"])

    await _middleware(lifespan_app)({"type": "lifespan"}, _receive, send)
    assert seen == ["lifespan"]


# ─── Through the FastAPI app ────────────────────────────────────

class _Credentials(BaseModel):
    db_password_hash: int


@pytest.fixture
def failing_app(settings, fixed_clock):
    app = create_app(settings=settings, clock=fixed_clock)

    @app.get("/explode")
    async def explode():
        raise RuntimeError("password=hunter2 host=db.internal")

    @app.get("/unserializable")
    async def unserializable():
        return {"value": object()}

    @app.get("/internal-model")
    async def internal_model():
        return _Credentials(db_password_hash="secret-value").model_dump()

    return app


@pytest.fixture
async def failing_client(failing_app):
    async with AsyncClient(
        transport=ASGITransport(app=failing_app), base_url="http://test",
    ) as c:
        yield c


async def test_unrecognized_failure_is_500_without_leak(failing_client):
    res = await failing_client.get("/explode")
    assert res.status_code == 500
    data = res.json()
    assert data["error"] == "Internal"
    assert "hunter2" not in res.text
    assert "RuntimeError" not in res.text


async def test_invalid_internal_model_is_500_without_field_names(failing_client):
    res = await failing_client.get("/internal-model")
    assert res.status_code == 500
    data = res.json()
    assert data["error"] == "Internal"
    assert data["fieldErrors"] == []
    assert "db_password_hash" not in res.text
    assert "secret-value" not in res.text


async def test_serialization_failure_is_500(failing_client):
    res = await failing_client.get("/unserializable")
    assert res.status_code == 500
    assert res.json()["error"] == "Internal"
    assert res.json()["path"] == "/unserializable"


async def test_unknown_route_is_not_found_body(client):
    res = await client.get("/no/such/route")
    assert res.status_code == 404
    assert res.json()["error"] == "NotFound"


async def test_unclassified_http_status_keeps_framework_default(client):
    res = await client.post("/health")
    assert res.status_code == 405
    assert res.json() == {"detail": "Method Not Allowed"}


async def test_error_responses_carry_cors_headers(failing_client):
    res = await failing_client.get(
        "/explode", headers={"Origin": "http://localhost:5173"},
    )
    assert res.status_code == 500
    assert res.headers["access-control-allow-origin"] == "http://localhost:5173"


async def test_internal_failure_logged_with_traceback(failing_client, caplog):
    with caplog.at_level(logging.ERROR, logger="errorgate.api.error_dispatch"):
        await failing_client.get("/explode")
    record = next(r for r in caplog.records if r.name == "errorgate.api.error_dispatch")
    assert record.levelno == logging.CRITICAL
    assert record.exc_info is not None
    assert record.error_kind == "Internal"
    assert record.status_code == 500


async def test_client_failure_logged_as_warning(client, caplog):
    with caplog.at_level(logging.WARNING, logger="errorgate.api.error_dispatch"):
        await client.post("/users", json={"email": "a@b.io", "name": "A"})
        await client.post("/users", json={"email": "a@b.io", "name": "A"})
    record = next(r for r in caplog.records if r.name == "errorgate.api.error_dispatch")
    assert record.levelno == logging.WARNING
    assert record.error_code == "conflict"


@pytest.mark.parametrize("failure, status, level", [
    (conflict("email already registered"), 409, logging.WARNING),
    (RuntimeError("boom"), 500, logging.CRITICAL),
])
def test_log_level_follows_kind_severity(failure, status, level, caplog):
    dispatcher = ErrorDispatcher(build_classifier())
    with caplog.at_level(logging.DEBUG, logger="errorgate.api.error_dispatch"):
        body = dispatcher.build_error_response(failure, "/things")
    assert isinstance(body, ErrorResponseBody)
    assert body.status == status
    records = [r for r in caplog.records if r.name == "errorgate.api.error_dispatch"]
    assert [r.levelno for r in records] == [level]
