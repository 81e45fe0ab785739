"""LINE seat booking bot backed by Google Sheets."""

from .aggregator import Aggregator, BookingSnapshot, fold_events
from .config import BotConfig, IncrementVocabulary, load_config
from .errors import BookingBotError, ConfigError, InvalidSignature, MalformedPayload
from .event_log import EventLog, InMemoryEventLog
from .models import AppendResult, BookingEvent, UserAggregate
from .router import CommandRouter, CommandType, classify, reset_bookings
from .validator import BookingValidator, Decision, RejectReason

__all__ = [
    "Aggregator",
    "AppendResult",
    "BookingBotError",
    "BookingEvent",
    "BookingSnapshot",
    "BookingValidator",
    "BotConfig",
    "CommandRouter",
    "CommandType",
    "ConfigError",
    "Decision",
    "EventLog",
    "InMemoryEventLog",
    "IncrementVocabulary",
    "InvalidSignature",
    "MalformedPayload",
    "RejectReason",
    "UserAggregate",
    "classify",
    "fold_events",
    "load_config",
    "reset_bookings",
]
