"""Framework Rules: classifier rows for FastAPI and Starlette exceptions.

Invariants:
    - RequestValidationError → InvalidRequest with one FieldError per reported
      error, in reported order
    - A bare pydantic ValidationError is not matched: request input arrives as
      RequestValidationError, so any other model failure is a server fault and
      falls through to Internal
    - Field names are dotted `loc` paths without the leading location segment
      (body, query, path, header, cookie)
    - Only HTTPExceptions with statuses in HTTP_STATUS_KINDS are classified;
      anything else is left to the caller

Design Decisions:
    - Kept out of core/ so the classifier core has no framework imports
"""

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from errorgate.core.classifier import (
    ClassificationRule, Classifier, build_default_rules,
)
from errorgate.core.domain_types import ErrorKind, FieldError
from errorgate.core.taxonomy import describe_kind


LOCATION_SEGMENTS = frozenset({"body", "query", "path", "header", "cookie"})

HTTP_STATUS_KINDS: dict[int, ErrorKind] = {
    400: ErrorKind.INVALID_REQUEST,
    401: ErrorKind.ACCESS_DENIED,
    403: ErrorKind.ACCESS_DENIED,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    422: ErrorKind.INVALID_REQUEST,
}


def field_name(loc: tuple | list) -> str:
    """Dotted field path for a pydantic error location."""
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in LOCATION_SEGMENTS:
        parts = parts[1:]
    return ".".join(parts)


def _describe_framework_validation(failure: BaseException):
    return "validation failed", [
        FieldError(field_name(e.get("loc", ())), e.get("msg", "invalid value"))
        for e in failure.errors()
    ]


def is_classified_http_exception(failure: BaseException) -> bool:
    return (
        isinstance(failure, StarletteHTTPException)
        and failure.status_code in HTTP_STATUS_KINDS
    )


def _http_rule(kind: ErrorKind) -> ClassificationRule:
    statuses = frozenset(s for s, k in HTTP_STATUS_KINDS.items() if k is kind)
    default = describe_kind(kind).default_message

    def _matches(failure: BaseException) -> bool:
        return (
            isinstance(failure, StarletteHTTPException)
            and failure.status_code in statuses
        )

    def _describe(failure: BaseException):
        detail = failure.detail
        return (detail if isinstance(detail, str) and detail else default), ()

    return ClassificationRule(
        f"http_{kind.value}", kind, _matches, _describe,
    )


def framework_validation_rules() -> tuple[ClassificationRule, ...]:
    return (
        ClassificationRule(
            "request_validation", ErrorKind.INVALID_REQUEST,
            lambda f: isinstance(f, RequestValidationError),
            _describe_framework_validation,
        ),
    )


def http_exception_rules() -> tuple[ClassificationRule, ...]:
    return tuple(
        _http_rule(kind) for kind in (
            ErrorKind.INVALID_REQUEST, ErrorKind.ACCESS_DENIED,
            ErrorKind.NOT_FOUND, ErrorKind.CONFLICT,
        )
    )


def build_classifier() -> Classifier:
    """Default classifier: tagged rules plus framework rules."""
    return Classifier(build_default_rules(
        validation_rules=framework_validation_rules(),
        http_rules=http_exception_rules(),
    ))
