"""Error Dispatch: the request boundary that turns any failure into one JSON response.

Invariants:
    - Every HTTP request gets exactly one response; failures never propagate
      past ErrorDispatchMiddleware as raw exceptions
    - On failure: classify once, respond once, log the raw failure once, write once
    - Log level follows the kind's taxonomy severity; Internal carries the traceback
    - A failure after the response started is fatal: ResponseAlreadyCommittedError
      is raised (chained to the original) instead of writing a second response
    - Successful responses pass through untouched; classifier/responder not invoked
    - No state shared across requests beyond the immutable classifier

Design Decisions:
    - Pure ASGI middleware over BaseHTTPMiddleware: only the raw `send` channel
      tells us whether the response has already started
    - RequestValidationError and HTTPException are handled by FastAPI inside the
      router, so they get exception hooks that delegate to the same dispatcher
    - HTTPExceptions outside the classifier's status table (405, 413, ...) keep
      FastAPI's default handling
    - CancelledError (BaseException) is not caught: cancellation wins, and the
      commit guard still blocks a second writer
"""

import logging
from datetime import datetime
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from errorgate.api.framework_rules import is_classified_http_exception
from errorgate.core.classifier import ClassifiedError, Classifier
from errorgate.core.domain_types import ErrorKind, ErrorSeverity
from errorgate.core.errors import (
    Failure, LifecycleTransitionError, ResponseAlreadyCommittedError,
)
from errorgate.core.request_lifecycle import RequestLifecycle
from errorgate.core.responder import render, respond
from errorgate.core.taxonomy import describe_kind
from errorgate.schemas.error import ErrorResponseBody

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = b"application/json"

SEVERITY_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


class ErrorDispatcher:
    """Classifier + Responder + logging for one failure at a time."""

    def __init__(
        self,
        classifier: Classifier,
        clock: Callable[[], datetime] | None = None,
    ):
        self._classifier = classifier
        self._clock = clock

    def build_error_response(
        self, failure: BaseException, path: str,
    ) -> ErrorResponseBody:
        classified = self._classifier.classify(failure)
        now = self._clock() if self._clock else None
        body = respond(classified, path, now=now)
        self._log(failure, classified, body)
        return body

    def to_json_response(
        self, failure: BaseException, path: str,
        headers: dict[str, str] | None = None,
    ) -> JSONResponse:
        body = self.build_error_response(failure, path)
        return JSONResponse(
            status_code=body.status,
            content=body.model_dump(mode="json", by_alias=True),
            headers=headers,
        )

    def _log(
        self, failure: BaseException, classified: ClassifiedError,
        body: ErrorResponseBody,
    ) -> None:
        extra = {
            "error_kind": body.error,
            "error_code": _error_code(failure),
            "path": body.path,
            "status_code": body.status,
            "debug_info": getattr(failure, "debug_info", None),
        }
        # The body is what the client saw; a responder fallback may differ from
        # the classified kind.
        kind = ErrorKind(body.error)
        level = SEVERITY_LEVELS[describe_kind(kind).severity]
        if kind is ErrorKind.INTERNAL:
            logger.log(
                level, f"Unhandled failure on {body.path}: {failure!r}",
                exc_info=failure, extra=extra,
            )
        else:
            logger.log(
                level, f"{body.error} on {body.path}: {classified.message}",
                extra=extra,
            )


def _error_code(failure: BaseException) -> str:
    if isinstance(failure, Failure):
        return failure.tag.value
    return type(failure).__name__


class ErrorDispatchMiddleware:
    """Wraps the downstream app; guarantees a single response per HTTP request."""

    def __init__(self, app: ASGIApp, dispatcher: ErrorDispatcher):
        self.app = app
        self._dispatcher = dispatcher

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        lifecycle = RequestLifecycle(path)

        async def guarded_send(message: Message) -> None:
            if message["type"] == "http.response.start":
                lifecycle.commit()
            await send(message)

        try:
            await self.app(scope, receive, guarded_send)
        except (ResponseAlreadyCommittedError, LifecycleTransitionError):
            lifecycle.fail()
            raise
        except Exception as exc:
            lifecycle.fail()
            if lifecycle.committed:
                logger.critical(
                    f"Failure after response started on {path}: {exc!r}",
                    exc_info=exc, extra={"path": path},
                )
                raise ResponseAlreadyCommittedError(path) from exc
            body = self._dispatcher.build_error_response(exc, path)
            await self._write(body, lifecycle, send)
            return
        lifecycle.succeed()

    async def _write(
        self, body: ErrorResponseBody, lifecycle: RequestLifecycle, send: Send,
    ) -> None:
        payload = render(body)
        lifecycle.commit()
        await send({
            "type": "http.response.start",
            "status": body.status,
            "headers": [
                (b"content-type", JSON_CONTENT_TYPE),
                (b"content-length", str(len(payload)).encode("latin-1")),
            ],
        })
        await send({"type": "http.response.body", "body": payload})


def install_error_dispatch(app: FastAPI, dispatcher: ErrorDispatcher) -> None:
    """Register the middleware and the framework exception hooks.

    Call before adding middleware that should also see error responses
    (e.g. CORS), since later middleware wraps earlier middleware.
    """
    app.add_middleware(ErrorDispatchMiddleware, dispatcher=dispatcher)

    @app.exception_handler(RequestValidationError)
    async def validation_error_hook(request: Request, exc: RequestValidationError):
        """Schema validation failures → InvalidRequest with fieldErrors."""
        return dispatcher.to_json_response(exc, request.url.path)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_hook(request: Request, exc: StarletteHTTPException):
        """Known HTTP statuses → structured body; the rest → FastAPI default."""
        if not is_classified_http_exception(exc):
            return await http_exception_handler(request, exc)
        return dispatcher.to_json_response(
            exc, request.url.path, headers=getattr(exc, "headers", None),
        )
