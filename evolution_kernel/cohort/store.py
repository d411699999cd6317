"""
Decision and Special Event sources.

Both record kinds belong to the content subsystem; the cohort matcher only
reads them. These in-memory stores stand in for it in the prototype and
in tests.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from evolution_kernel.models.cohort import Decision, SpecialEvent

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class DecisionStore:
    """In-memory decision source, listed newest first."""

    def __init__(self):
        self._decisions: Dict[str, Decision] = {}

    def upsert(self, decision: Decision) -> None:
        self._decisions[decision.id] = decision

    def get(self, decision_id: str) -> Optional[Decision]:
        return self._decisions.get(decision_id)

    def list_by_date_desc(self) -> List[Decision]:
        """All decisions ordered by descending date, then creation time, then id."""
        return sorted(
            self._decisions.values(),
            key=lambda d: (d.date, d.created_at, d.id),
            reverse=True,
        )

    def count(self) -> int:
        return len(self._decisions)


class SpecialEventStore:
    """In-memory special event records holding persisted cohort rules."""

    def __init__(self):
        self._events: Dict[str, SpecialEvent] = {}

    def upsert(self, event: SpecialEvent) -> None:
        self._events[event.id] = event

    def get(self, event_id: str) -> Optional[SpecialEvent]:
        return self._events.get(event_id)

    def get_by_slug(self, slug: str) -> Optional[SpecialEvent]:
        for event in self._events.values():
            if event.slug == slug:
                return event
        return None

    def list(
        self,
        featured: Optional[bool] = None,
        active_only: bool = False,
        current_time: Optional[datetime] = None,
    ) -> List[SpecialEvent]:
        """
        Events filtered by ``featured`` and, with ``active_only``, by whether
        they are running at ``current_time``. Sorted by ascending priority,
        then most recent start first.
        """
        events = list(self._events.values())
        if featured is not None:
            events = [e for e in events if e.featured == featured]
        if active_only:
            now = current_time or datetime.now(timezone.utc)
            events = [e for e in events if e.is_running(now)]

        # Two stable passes: start date newest first, then priority ascending
        events.sort(key=lambda e: e.start_date or _EPOCH, reverse=True)
        events.sort(key=lambda e: e.priority)
        return events
