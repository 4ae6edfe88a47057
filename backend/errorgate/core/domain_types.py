"""Domain Types: enums and value types shared by the dispatch core.

Invariants:
    - ErrorKind is closed: exactly five members, value == wire label
    - FailureTag values are stable strings (they appear in logs as error_code)
    - FieldError is immutable; order of a sequence of FieldErrors is meaningful

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
    - Tags over subclasses: one failure type, classified by an ordered rule list
"""

from dataclasses import dataclass
from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class ErrorKind(str, Enum):
    """Failure categories used for response mapping. Value is the wire label."""
    INVALID_REQUEST = "InvalidRequest"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    ACCESS_DENIED = "AccessDenied"
    INTERNAL = "Internal"


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class FailureTag(str, Enum):
    """Tags business logic attaches to a raised Failure."""
    VALIDATION_AGGREGATE = "validation_aggregate"
    PERMISSION_DENIED = "permission_denied"
    AUTHENTICATION_FAILED = "authentication_failed"
    RESOURCE_MISSING = "resource_missing"
    CONFLICT = "conflict"


class DispatchState(str, Enum):
    """Per-request dispatch states. SUCCEEDED and FAILED are terminal."""
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class FieldError:
    """One field-level violation."""
    field: str
    message: str
