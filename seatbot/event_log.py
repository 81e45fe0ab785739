"""Append-only log of booking events, keyed by event id."""

from abc import ABC, abstractmethod
from typing import Dict, List

from .models import AppendResult, BookingEvent


class EventLog(ABC):
    """Storage contract for the raw booking log."""

    @abstractmethod
    def contains(self, event_id: str) -> bool:
        ...

    @abstractmethod
    def append(self, event: BookingEvent) -> AppendResult:
        """Insert ``event`` unless its event id is already present."""

    @abstractmethod
    def scan_all(self) -> List[BookingEvent]:
        """Return every event in insertion order."""

    @abstractmethod
    def clear(self) -> None:
        ...


class InMemoryEventLog(EventLog):
    def __init__(self):
        self._events: List[BookingEvent] = []
        self._ids: Dict[str, int] = {}

    def contains(self, event_id: str) -> bool:
        return event_id in self._ids

    def append(self, event: BookingEvent) -> AppendResult:
        if event.event_id in self._ids:
            return AppendResult(inserted=False)
        self._ids[event.event_id] = len(self._events)
        self._events.append(event)
        return AppendResult(inserted=True)

    def scan_all(self) -> List[BookingEvent]:
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()
        self._ids.clear()

    def __len__(self) -> int:
        return len(self._events)
