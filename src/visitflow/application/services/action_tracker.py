"""
Explicit pending/success/failure state per (visit, action).

A second identical action on the same visit is refused while the first is
still pending. The authoritative status check remains the repository's
compare-and-set.
"""

from collections import OrderedDict
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Optional, Set, Tuple

from visitflow.domain.errors import ActionInFlightError

ActionKey = Tuple[str, str]


class ActionStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ActionTracker:
    """Pending actions are held until they finish; only the most recent
    ``max_outcomes`` final results are remembered."""

    def __init__(self, max_outcomes: int = 1000) -> None:
        self._max_outcomes = max_outcomes
        self._pending: Set[ActionKey] = set()
        self._outcomes: "OrderedDict[ActionKey, ActionStatus]" = OrderedDict()

    def status(self, visit_id: str, action: str) -> Optional[ActionStatus]:
        key = (visit_id, action)
        if key in self._pending:
            return ActionStatus.PENDING
        return self._outcomes.get(key)

    def is_pending(self, visit_id: str, action: str) -> bool:
        return (visit_id, action) in self._pending

    def __len__(self) -> int:
        return len(self._pending) + len(self._outcomes)

    @asynccontextmanager
    async def track(self, visit_id: str, action: str) -> AsyncIterator[None]:
        key = (visit_id, action)
        # No await between check and add, so this is atomic on the event loop
        if key in self._pending:
            raise ActionInFlightError(visit_id, action)
        self._pending.add(key)
        self._outcomes.pop(key, None)
        try:
            yield
        except BaseException:
            self._finish(key, ActionStatus.FAILED)
            raise
        self._finish(key, ActionStatus.SUCCEEDED)

    def _finish(self, key: ActionKey, outcome: ActionStatus) -> None:
        self._pending.discard(key)
        self._outcomes[key] = outcome
        while len(self._outcomes) > self._max_outcomes:
            self._outcomes.popitem(last=False)
