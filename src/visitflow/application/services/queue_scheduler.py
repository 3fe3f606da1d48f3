"""
Queue ordering for staff attention.

Pure function of its input: priority tier first (EMERGENCY > URGENT > NORMAL),
then earliest arrival. Visit ID is the last resort so the order is total.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from visitflow.domain.entities.visit import Visit
from visitflow.domain.enums.workflow import Priority


@dataclass(frozen=True)
class QueueEntry:
    """Derived projection of a visit; never persisted."""

    visit: Visit
    position: int
    waiting_minutes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "waiting_minutes": self.waiting_minutes,
            **self.visit.get_summary(),
        }


@dataclass
class QueueSnapshot:
    """One ordered read of the active visit set.

    ``entries`` may be cut short by a limit; the counts always cover every
    active visit.
    """

    entries: List[QueueEntry]
    active: List[Visit] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def total_count(self) -> int:
        return len(self.active)

    def count_for(self, priority: Priority) -> int:
        return sum(1 for visit in self.active if visit.priority is priority)

    def counts(self) -> Dict[str, int]:
        return {
            "total": self.total_count,
            "emergency": self.count_for(Priority.EMERGENCY),
            "urgent": self.count_for(Priority.URGENT),
            "normal": self.count_for(Priority.NORMAL),
        }


class QueueScheduler:
    """Orders active visits. Holds no state between calls."""

    @staticmethod
    def sort_key(visit: Visit) -> Tuple[int, datetime, str]:
        return (-visit.priority.rank, visit.created_at, visit.visit_id.value)

    def order(self, visits: Iterable[Visit]) -> List[Visit]:
        """Active visits in the order staff should attend to them."""
        active = [visit for visit in visits if visit.is_active]
        return sorted(active, key=self.sort_key)

    def snapshot(
        self,
        visits: Iterable[Visit],
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> QueueSnapshot:
        now = now or datetime.utcnow()
        ordered = self.order(visits)
        page = ordered[:limit] if limit is not None else ordered
        entries = [
            QueueEntry(visit=visit, position=index, waiting_minutes=visit.waiting_minutes(now))
            for index, visit in enumerate(page, start=1)
        ]
        return QueueSnapshot(entries=entries, active=ordered, generated_at=now)
