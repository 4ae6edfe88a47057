"""Responder: renders a ClassifiedError into the wire-level error body.

Invariants:
    - Status comes from the taxonomy only; the kind → status mapping is total
    - fieldErrors are emitted for InvalidRequest only
    - respond() never raises: malformed input degrades to Internal/500 with a
      fixed message
    - timestamp is a UTC instant; path is echoed verbatim
"""

from datetime import datetime, timezone

from pydantic import ValidationError

from errorgate.core.classifier import ClassifiedError
from errorgate.core.domain_types import ErrorKind
from errorgate.core.taxonomy import describe_kind
from errorgate.schemas.error import ErrorResponseBody, FieldErrorBody


FALLBACK_MESSAGE = describe_kind(ErrorKind.INTERNAL).default_message


def respond(
    classified: ClassifiedError,
    request_path: str,
    now: datetime | None = None,
) -> ErrorResponseBody:
    """Build the error body for one classified failure."""
    timestamp = now or datetime.now(timezone.utc)
    path = request_path if isinstance(request_path, str) else ""
    if not _is_well_formed(classified):
        return _fallback_body(path, timestamp)
    kind_spec = describe_kind(classified.kind)
    field_errors = (
        classified.field_errors
        if classified.kind is ErrorKind.INVALID_REQUEST else ()
    )
    try:
        return ErrorResponseBody(
            status=kind_spec.http_status,
            error=kind_spec.label,
            message=classified.message,
            field_errors=[
                FieldErrorBody(field=fe.field, message=fe.message)
                for fe in field_errors
            ],
            path=path,
            timestamp=timestamp,
        )
    except (ValidationError, AttributeError, TypeError):
        return _fallback_body(path, timestamp)


def render(body: ErrorResponseBody) -> bytes:
    """Serialize a body to JSON bytes using wire (camelCase) names."""
    return body.model_dump_json(by_alias=True).encode("utf-8")


def _is_well_formed(classified: object) -> bool:
    return (
        isinstance(classified, ClassifiedError)
        and isinstance(classified.kind, ErrorKind)
        and isinstance(classified.message, str)
    )


def _fallback_body(path: str, timestamp: datetime) -> ErrorResponseBody:
    kind_spec = describe_kind(ErrorKind.INTERNAL)
    return ErrorResponseBody(
        status=kind_spec.http_status,
        error=kind_spec.label,
        message=FALLBACK_MESSAGE,
        field_errors=[],
        path=path,
        timestamp=timestamp,
    )
