"""Error Taxonomy: fixed, read-only metadata for every ErrorKind.

Invariants:
    - TAXONOMY is total over ErrorKind (one KindSpec per member)
    - Every kind maps to exactly one HTTP status; statuses are unique
    - No kind is retryable: all represent client or permanent server faults
    - The table is immutable after import (MappingProxyType)
"""

from dataclasses import dataclass
from types import MappingProxyType

from errorgate.core.domain_types import ErrorKind, ErrorSeverity


@dataclass(frozen=True)
class KindSpec:
    """Static description of one error kind."""
    kind: ErrorKind
    http_status: int
    label: str
    severity: ErrorSeverity
    retryable: bool = False
    default_message: str = ""


TAXONOMY: MappingProxyType = MappingProxyType({
    ErrorKind.INVALID_REQUEST: KindSpec(
        ErrorKind.INVALID_REQUEST, 400, ErrorKind.INVALID_REQUEST.value,
        ErrorSeverity.WARNING, default_message="validation failed",
    ),
    ErrorKind.ACCESS_DENIED: KindSpec(
        ErrorKind.ACCESS_DENIED, 403, ErrorKind.ACCESS_DENIED.value,
        ErrorSeverity.WARNING, default_message="access denied",
    ),
    ErrorKind.NOT_FOUND: KindSpec(
        ErrorKind.NOT_FOUND, 404, ErrorKind.NOT_FOUND.value,
        ErrorSeverity.WARNING, default_message="resource not found",
    ),
    ErrorKind.CONFLICT: KindSpec(
        ErrorKind.CONFLICT, 409, ErrorKind.CONFLICT.value,
        ErrorSeverity.WARNING, default_message="conflicts with existing resource",
    ),
    ErrorKind.INTERNAL: KindSpec(
        ErrorKind.INTERNAL, 500, ErrorKind.INTERNAL.value,
        ErrorSeverity.CRITICAL, default_message="An unexpected error occurred",
    ),
})


def describe_kind(kind: ErrorKind) -> KindSpec:
    """Look up the static description of a kind. KeyError for non-kinds."""
    return TAXONOMY[kind]
