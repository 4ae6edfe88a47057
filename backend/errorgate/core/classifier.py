"""Classifier: maps any raised failure to a ClassifiedError via an ordered rule table.

Invariants:
    - classify() is total: it never raises, whatever it is given
    - First matching rule wins; rule order is priority order
    - A rule whose matcher or describer raises counts as a non-match
    - Unmatched failures become Internal with a generic message; the raw
      failure is kept only in `cause`, never in `message`
    - Pure: no logging, no IO, no mutation. Same input → equal output

Design Decisions:
    - Rule table built explicitly and passed to Classifier (no global registry)
    - One rule may match several tags (e.g. permission_denied and
      authentication_failed both → AccessDenied)
    - Framework-specific rules (FastAPI/pydantic/Starlette) live in the api
      layer and are spliced in through build_default_rules() so core stays
      framework-free
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from errorgate.core.domain_types import ErrorKind, FailureTag, FieldError
from errorgate.core.errors import Failure
from errorgate.core.taxonomy import describe_kind


Matcher = Callable[[BaseException], bool]
Describer = Callable[[BaseException], tuple[str, Iterable[FieldError]]]


@dataclass(frozen=True)
class ClassifiedError:
    """Kind + client-safe context for one failure. Consumed only by the Responder."""
    kind: ErrorKind
    message: str
    field_errors: tuple[FieldError, ...] = ()
    cause: Any = None


@dataclass(frozen=True)
class ClassificationRule:
    """One row of the rule table."""
    name: str
    kind: ErrorKind
    matches: Matcher
    describe: Describer


# ─── Matchers & Describers ──────────────────────────────────────

def match_tags(*tags: FailureTag) -> Matcher:
    """Matcher for Failure values carrying any of the given tags."""
    wanted = frozenset(tags)

    def _matches(failure: BaseException) -> bool:
        return isinstance(failure, Failure) and failure.tag in wanted

    return _matches


def _describe_validation(failure: BaseException):
    return "validation failed", failure.field_errors


def _describe_with_default(default: str) -> Describer:
    def _describe(failure: BaseException):
        return failure.message or default, ()
    return _describe


def _describe_missing(failure: BaseException):
    # Without an id there is nothing to render; keep the author's message.
    if failure.resource_id is None:
        default = describe_kind(ErrorKind.NOT_FOUND).default_message
        return failure.message or default, ()
    resource_type = failure.resource_type or "Resource"
    return f"{resource_type} '{failure.resource_id}' not found", ()


# ─── Rule Table ─────────────────────────────────────────────────

def build_default_rules(
    *,
    validation_rules: Iterable[ClassificationRule] = (),
    http_rules: Iterable[ClassificationRule] = (),
) -> tuple[ClassificationRule, ...]:
    """Default priority order. Extra validation rules share priority 1;
    extra http rules slot in after the tagged rules."""
    return (
        ClassificationRule(
            "validation_aggregate", ErrorKind.INVALID_REQUEST,
            match_tags(FailureTag.VALIDATION_AGGREGATE), _describe_validation,
        ),
        *validation_rules,
        ClassificationRule(
            "access_denied", ErrorKind.ACCESS_DENIED,
            match_tags(
                FailureTag.PERMISSION_DENIED, FailureTag.AUTHENTICATION_FAILED,
            ),
            _describe_with_default("access denied"),
        ),
        ClassificationRule(
            "resource_missing", ErrorKind.NOT_FOUND,
            match_tags(FailureTag.RESOURCE_MISSING), _describe_missing,
        ),
        ClassificationRule(
            "conflict", ErrorKind.CONFLICT,
            match_tags(FailureTag.CONFLICT),
            _describe_with_default("conflicts with existing resource"),
        ),
        *http_rules,
    )


class Classifier:
    """Ordered, immutable rule table with an Internal fallback."""

    def __init__(self, rules: Iterable[ClassificationRule] | None = None):
        self._rules = tuple(
            build_default_rules() if rules is None else rules,
        )

    @property
    def rules(self) -> tuple[ClassificationRule, ...]:
        return self._rules

    @property
    def rule_names(self) -> tuple[str, ...]:
        return tuple(rule.name for rule in self._rules)

    def classify(self, failure: BaseException) -> ClassifiedError:
        for rule in self._rules:
            classified = _apply(rule, failure)
            if classified is not None:
                return classified
        return internal_error(failure)


def _apply(rule: ClassificationRule, failure: BaseException) -> ClassifiedError | None:
    # A faulty rule is a non-match: classify() must stay total.
    try:
        if not rule.matches(failure):
            return None
        message, field_errors = rule.describe(failure)
        if not isinstance(message, str):
            return None
        return ClassifiedError(rule.kind, message, tuple(field_errors), failure)
    except Exception:
        return None


def internal_error(failure: BaseException | None = None) -> ClassifiedError:
    """Generic Internal classification. Never echoes the failure's text."""
    return ClassifiedError(
        ErrorKind.INTERNAL,
        describe_kind(ErrorKind.INTERNAL).default_message,
        (),
        failure,
    )
