# -*- coding: utf-8 -*-
"""
Records kept by the bot.

  • BookingEvent   – one row of the raw log (Messages sheet)
  • UserAggregate  – one row of the summary (Bookings sheet)

Rows are read back from Sheets as strings, so the converters here are lenient:
a missing or garbled Delta counts as 0, the same way a rejected attempt does.
"""

from dataclasses import dataclass
from datetime import datetime

from dateutil import parser

# ===============================
# Sheet layout
# ===============================
RAW_HEADERS = ["Timestamp", "ConversationId", "UserId", "UserName", "Delta", "EventId"]
SUMMARY_HEADERS = ["LastUpdate", "ConversationId", "UserId", "UserName", "TotalSeats"]

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

# Placeholders for a missing group/room or sender
NO_CONVERSATION = "N/A"
UNKNOWN_USER = "N/A"


def _to_int(value) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def _to_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return parser.parse(str(value))
    except (ValueError, OverflowError):
        return datetime.min


def format_timestamp(ts: datetime) -> str:
    return ts.strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class BookingEvent:
    event_id: str
    timestamp: datetime
    user_id: str
    user_name: str
    delta: int
    conversation_id: str = NO_CONVERSATION

    def to_row(self) -> list:
        return [
            format_timestamp(self.timestamp),
            self.conversation_id,
            self.user_id,
            self.user_name,
            self.delta,
            self.event_id,
        ]

    @classmethod
    def from_row(cls, row: list) -> "BookingEvent":
        """Build an event from a raw-log row (short rows are padded)."""
        row = list(row) + [""] * (len(RAW_HEADERS) - len(row))
        return cls(
            event_id=str(row[5]),
            timestamp=_to_datetime(row[0]),
            conversation_id=str(row[1] or NO_CONVERSATION),
            user_id=str(row[2]),
            user_name=str(row[3]),
            delta=_to_int(row[4]),
        )


@dataclass
class UserAggregate:
    user_id: str
    user_name: str
    conversation_id: str
    last_updated: datetime
    total_seats: int = 0

    def to_row(self) -> list:
        return [
            format_timestamp(self.last_updated),
            self.conversation_id,
            self.user_id,
            self.user_name,
            self.total_seats,
        ]


@dataclass(frozen=True)
class AppendResult:
    inserted: bool
