"""User Directory: in-memory user registry behind the /users routes.

Invariants:
    - Emails are unique, compared case-insensitively after stripping
    - register() validates every field before checking uniqueness; all
      violations are reported together, in field order (email, name)
    - get() raises resource_missing with the requested id
    - One directory per application instance (held on app.state)

Design Decisions:
    - In-memory dict: the directory exists to exercise the dispatch layer,
      persistence is out of scope (state lost on restart)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from errorgate.core.domain_types import FieldError
from errorgate.core.errors import conflict, resource_missing, validation_failed

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 100


@dataclass(frozen=True)
class User:
    email: str
    name: str
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


def validate_registration(email: str, name: str) -> list[FieldError]:
    """Business-level checks. Pure - returns violations, raises nothing."""
    violations = []
    email = email.strip()
    if not email:
        violations.append(FieldError("email", "must not be blank"))
    elif "@" not in email or email.startswith("@") or email.endswith("@"):
        violations.append(FieldError("email", "must be a valid email address"))
    name = name.strip()
    if not name:
        violations.append(FieldError("name", "must not be blank"))
    elif len(name) > MAX_NAME_LENGTH:
        violations.append(FieldError(
            "name", f"must be at most {MAX_NAME_LENGTH} characters",
        ))
    return violations


class UserDirectory:
    """Registers and looks up users."""

    def __init__(self):
        self._users: dict[UUID, User] = {}
        self._ids_by_email: dict[str, UUID] = {}

    def register(self, email: str, name: str) -> User:
        violations = validate_registration(email, name)
        if violations:
            raise validation_failed(violations)
        key = email.strip().lower()
        existing = self._ids_by_email.get(key)
        if existing is not None:
            raise conflict(
                "email already registered",
                debug_info={"existing_user_id": str(existing)},
            )
        user = User(email=email.strip(), name=name.strip())
        self._users[user.id] = user
        self._ids_by_email[key] = user.id
        logger.info(f"Registered user {user.id}")
        return user

    def get(self, user_id: UUID) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise resource_missing("User", str(user_id))
        return user

    def count(self) -> int:
        return len(self._users)
