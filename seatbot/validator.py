"""Capacity rules for seat bookings and cancellations."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import MAX_DELTA
from .errors import ConfigError


class RejectReason(str, Enum):
    INSUFFICIENT_USER_BOOKINGS = "INSUFFICIENT_USER_BOOKINGS"
    GLOBAL_CAPACITY_EXCEEDED = "GLOBAL_CAPACITY_EXCEEDED"
    PER_USER_LIMIT_EXCEEDED = "PER_USER_LIMIT_EXCEEDED"


@dataclass(frozen=True)
class Decision:
    accepted: bool
    reason: Optional[RejectReason] = None

    def recorded_delta(self, delta: int) -> int:
        """Delta written to the log: rejected attempts are kept as 0."""
        return delta if self.accepted else 0


ACCEPT = Decision(accepted=True)


class BookingValidator:
    def __init__(self, max_seats: int, max_seats_per_user: Optional[int]):
        if max_seats_per_user is None:
            raise ConfigError("max_seats_per_user must be configured")
        self.max_seats = max_seats
        self.max_seats_per_user = max_seats_per_user

    @classmethod
    def from_config(cls, config) -> "BookingValidator":
        return cls(config.max_seats, config.max_seats_per_user)

    def decide(self, delta: int, user_total: int, grand_total: int) -> Decision:
        if delta == 0 or abs(delta) > MAX_DELTA:
            raise ValueError(f"delta must be within ±1..±{MAX_DELTA}, got {delta}")

        if delta < 0:
            if -delta > user_total:
                return Decision(False, RejectReason.INSUFFICIENT_USER_BOOKINGS)
            return ACCEPT

        if grand_total + delta > self.max_seats:
            return Decision(False, RejectReason.GLOBAL_CAPACITY_EXCEEDED)
        if user_total + delta > self.max_seats_per_user:
            return Decision(False, RejectReason.PER_USER_LIMIT_EXCEEDED)
        return ACCEPT
