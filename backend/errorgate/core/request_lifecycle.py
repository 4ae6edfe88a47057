"""Request Lifecycle: per-request dispatch state and one-shot response commit.

Invariants:
    - State moves RUNNING → SUCCEEDED or RUNNING → FAILED, never further
    - commit() succeeds at most once per request; the second call raises
      ResponseAlreadyCommittedError
    - One instance per request; nothing here is shared across requests
"""

from errorgate.core.domain_types import DispatchState
from errorgate.core.errors import (
    LifecycleTransitionError, ResponseAlreadyCommittedError,
)


class RequestLifecycle:
    """Tracks one request from handler start to its single response."""

    def __init__(self, path: str = ""):
        self.path = path
        self.state = DispatchState.RUNNING
        self.committed = False

    def commit(self) -> None:
        """Claim the right to write the response. One-shot."""
        if self.committed:
            raise ResponseAlreadyCommittedError(self.path)
        self.committed = True

    def succeed(self) -> None:
        self._transition(DispatchState.SUCCEEDED)

    def fail(self) -> None:
        self._transition(DispatchState.FAILED)

    def _transition(self, target: DispatchState) -> None:
        if self.state is not DispatchState.RUNNING:
            raise LifecycleTransitionError(
                f"Cannot move from {self.state.value} to {target.value}",
            )
        self.state = target
