"""Failure Values: the one exception type business logic raises, plus layer faults.

Invariants:
    - Every Failure carries a FailureTag and a client-safe message
    - resource_missing failures always carry a resource identifier
    - validation failures carry an ordered tuple of FieldErrors (possibly empty)
    - debug_info is for logs only; it never reaches a response body
    - ResponseAlreadyCommittedError / LifecycleTransitionError are programming
      errors: they propagate, they are never converted into responses

Design Decisions:
    - Single Failure class with a tag instead of a subclass per error: the
      Classifier's ordered rule list replaces "catch the superclass" dispatch
    - Constructor helpers per tag keep call sites short and messages uniform
"""

from typing import Any, Iterable

from errorgate.core.domain_types import FailureTag, FieldError


class Failure(Exception):
    """Tagged failure raised by route handlers and services."""

    def __init__(
        self,
        tag: FailureTag,
        message: str,
        *,
        field_errors: Iterable[FieldError] = (),
        resource_type: str | None = None,
        resource_id: str | None = None,
        debug_info: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.tag = tag
        self.message = message
        self.field_errors = tuple(field_errors)
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.debug_info = debug_info

    def __repr__(self) -> str:
        return f"Failure(tag={self.tag.value!r}, message={self.message!r})"


# ─── Constructors ───────────────────────────────────────────────

def validation_failed(
    violations: Iterable[FieldError | tuple[str, str]],
    debug_info: dict[str, Any] | None = None,
) -> Failure:
    """Aggregate of field-level violations. Order is preserved."""
    field_errors = tuple(
        v if isinstance(v, FieldError) else FieldError(*v) for v in violations
    )
    return Failure(
        FailureTag.VALIDATION_AGGREGATE, "validation failed",
        field_errors=field_errors, debug_info=debug_info,
    )


def permission_denied(
    message: str = "permission denied",
    debug_info: dict[str, Any] | None = None,
) -> Failure:
    return Failure(
        FailureTag.PERMISSION_DENIED, message, debug_info=debug_info,
    )


def authentication_failed(
    message: str = "authentication failed",
    debug_info: dict[str, Any] | None = None,
) -> Failure:
    return Failure(
        FailureTag.AUTHENTICATION_FAILED, message, debug_info=debug_info,
    )


def resource_missing(
    resource_type: str, resource_id: str,
    debug_info: dict[str, Any] | None = None,
) -> Failure:
    """Requested resource does not exist."""
    return Failure(
        FailureTag.RESOURCE_MISSING,
        f"{resource_type} '{resource_id}' not found",
        resource_type=resource_type, resource_id=str(resource_id),
        debug_info=debug_info,
    )


def conflict(
    message: str, debug_info: dict[str, Any] | None = None,
) -> Failure:
    """Operation conflicts with an existing resource (e.g. duplicate key)."""
    return Failure(FailureTag.CONFLICT, message, debug_info=debug_info)


# ─── Layer Faults ───────────────────────────────────────────────

class ResponseAlreadyCommittedError(RuntimeError):
    """A second response commit was attempted for the same request."""

    def __init__(self, path: str | None = None):
        where = f" for {path}" if path else ""
        super().__init__(
            f"Response already committed{where}; refusing to write a second response",
        )
        self.path = path


class LifecycleTransitionError(RuntimeError):
    """Dispatch state changed after reaching a terminal state."""
