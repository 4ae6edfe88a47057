"""Admin Reports: token-gated summary of the user directory.

Invariants:
    - Missing token → authentication_failed; wrong token → permission_denied
    - Token comparison is constant-time
"""

import hmac
from datetime import datetime, timezone

from errorgate.core.errors import authentication_failed, permission_denied
from errorgate.services.user_directory import UserDirectory


class AdminReportService:
    """Builds admin reports for callers holding the admin token."""

    def __init__(self, admin_token: str, directory: UserDirectory):
        self._admin_token = admin_token
        self._directory = directory

    def authorize(self, provided_token: str | None) -> None:
        if not provided_token:
            raise authentication_failed("admin token required")
        if not hmac.compare_digest(
            provided_token.encode("utf-8"), self._admin_token.encode("utf-8"),
        ):
            raise permission_denied("admin access required")

    def summary(self, provided_token: str | None) -> dict:
        self.authorize(provided_token)
        return {
            "total_users": self._directory.count(),
            "generated_at": datetime.now(timezone.utc).isoformat(),
        }
