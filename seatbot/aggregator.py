"""
Per-user and overall seat totals, always rebuilt from the full event log.

The log is the single source of truth. Every refresh folds all events again;
no running counter is stored.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .event_log import EventLog
from .models import BookingEvent, UserAggregate


@dataclass(frozen=True)
class BookingSnapshot:
    users: Dict[str, UserAggregate] = field(default_factory=dict)
    grand_total: int = 0

    def user_total(self, user_id: str) -> int:
        agg = self.users.get(user_id)
        return agg.total_seats if agg else 0

    def ranked(self) -> List[UserAggregate]:
        """Seats descending; equal totals keep the order users first appeared in the log."""
        return sorted(self.users.values(), key=lambda a: -a.total_seats)

    def by_last_update(self) -> List[UserAggregate]:
        return sorted(self.users.values(), key=lambda a: a.last_updated, reverse=True)


def fold_events(events: Iterable[BookingEvent]) -> BookingSnapshot:
    """Fold events in log order into a snapshot.

    Name and conversation follow the latest event by log position, not by
    timestamp. Users whose total ends up <= 0 are dropped and do not count
    towards the grand total.
    """
    running: Dict[str, UserAggregate] = {}
    for ev in events:
        agg = running.get(ev.user_id)
        if agg is None:
            running[ev.user_id] = UserAggregate(
                user_id=ev.user_id,
                user_name=ev.user_name,
                conversation_id=ev.conversation_id,
                last_updated=ev.timestamp,
                total_seats=ev.delta,
            )
            continue
        agg.total_seats += ev.delta
        agg.user_name = ev.user_name
        agg.conversation_id = ev.conversation_id
        if ev.timestamp > agg.last_updated:
            agg.last_updated = ev.timestamp

    users = {uid: agg for uid, agg in running.items() if agg.total_seats > 0}
    return BookingSnapshot(users=users, grand_total=sum(a.total_seats for a in users.values()))


class Aggregator:
    """Keeps the last materialized snapshot of an EventLog.

    ``summary`` is anything with a ``write(list[UserAggregate])`` method, e.g.
    sheets_store.SummarySheet. It is optional so the aggregator also runs
    against a purely in-memory log.
    """

    def __init__(self, event_log: EventLog, summary=None):
        self.event_log = event_log
        self.summary = summary
        self._snapshot = BookingSnapshot()

    @property
    def snapshot(self) -> BookingSnapshot:
        return self._snapshot

    def refresh(self) -> BookingSnapshot:
        self._snapshot = fold_events(self.event_log.scan_all())
        return self._snapshot

    def recompute(self) -> BookingSnapshot:
        """Refresh from the log and rewrite the summary table."""
        snapshot = self.refresh()
        if self.summary is not None:
            self.summary.write(snapshot.by_last_update())
        logging.debug(f"Recomputed totals: {len(snapshot.users)} user(s), grand total {snapshot.grand_total}")
        return snapshot

    def current_user_total(self, user_id: Optional[str]) -> int:
        return self._snapshot.user_total(user_id)

    def current_grand_total(self) -> int:
        return self._snapshot.grand_total

    def ranked(self) -> List[UserAggregate]:
        return self._snapshot.ranked()
