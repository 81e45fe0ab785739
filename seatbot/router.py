# -*- coding: utf-8 -*-
"""
Message routing: classify a chat text and run the matching command.

  • STATUS_CHECK   – keyword, replies with booked/remaining seats
  • NAME_LIST      – keyword, replies with who booked how many
  • BOOKING_DELTA  – a vocabulary token (+1, 加二, -3, 減四 ...)
  • IGNORED        – anything else, no reply

A booking is appended to the log before its reply is sent.
"""

import logging
import threading
from enum import Enum
from typing import List, Optional, Tuple

from .aggregator import Aggregator, BookingSnapshot
from .event_log import EventLog
from .line_api import PROFILE_FAILED_NAME, UNKNOWN_NAME
from .models import UNKNOWN_USER, BookingEvent, UserAggregate
from .validator import BookingValidator, Decision, RejectReason
from .webhook import InboundMessage


class CommandType(Enum):
    STATUS_CHECK = "status_check"
    NAME_LIST = "name_list"
    BOOKING_DELTA = "booking_delta"
    IGNORED = "ignored"


def classify(text: str, config) -> Tuple[CommandType, Optional[int]]:
    token = (text or '').strip().lower()
    if token == config.status_keyword.strip().lower():
        return CommandType.STATUS_CHECK, None
    if token == config.name_list_keyword.strip().lower():
        return CommandType.NAME_LIST, None
    delta = config.vocabulary.parse(token)
    if delta is not None:
        return CommandType.BOOKING_DELTA, delta
    return CommandType.IGNORED, None


# ===============================
# Reply texts
# ===============================

def status_text(grand_total: int, max_seats: int) -> str:
    remaining = max_seats - grand_total
    return f"目前預訂狀況:\n總預訂人數: {grand_total} 位\n剩餘座位: {remaining} 位"


def name_list_text(ranked: List[UserAggregate]) -> str:
    if not ranked:
        return '目前還沒有人預訂'
    total = sum(a.total_seats for a in ranked)
    lines = '\n'.join(f"{a.user_name}: {a.total_seats} 位" for a in ranked)
    return f"預訂名單：\n{lines}\n\n總計：{total} 位"


def accepted_text(delta: int, new_total: int) -> str:
    action = '預訂' if delta > 0 else '取消'
    return f"已記錄{action} {abs(delta)} 位。目前總計: {new_total} 位"


def rejection_text(reason: RejectReason, user_total: int, grand_total: int, validator: BookingValidator) -> str:
    if reason is RejectReason.INSUFFICIENT_USER_BOOKINGS:
        return f"無法取消預約。您目前只預訂了 {user_total} 位。"
    if reason is RejectReason.GLOBAL_CAPACITY_EXCEEDED:
        return f"抱歉，目前剩餘座位不足。現有預訂人數: {grand_total}，最大座位數: {validator.max_seats}"
    return f"您已報名 {user_total} 位，每人報名限制{validator.max_seats_per_user} 位。"


def reset_bookings(event_log: EventLog, aggregator: Aggregator) -> BookingSnapshot:
    """Drop every recorded event and rebuild the (now empty) summary."""
    event_log.clear()
    return aggregator.recompute()


class CommandRouter:
    def __init__(self, config, event_log: EventLog, aggregator: Aggregator, notifier,
                 validator: Optional[BookingValidator] = None, lock=None):
        self.config = config
        self.event_log = event_log
        self.aggregator = aggregator
        self.notifier = notifier
        self.validator = validator or BookingValidator.from_config(config)
        # serialises read-decide-write cycles and the daily reset within this process
        self.lock = lock or threading.Lock()

    def handle(self, msg: InboundMessage) -> Optional[str]:
        """Run the command in ``msg``; return the reply text, or None if nothing was said."""
        command, delta = classify(msg.text, self.config)
        logging.info(f"📥 {command.name} from {msg.user_id} (message {msg.event_id})")

        if command is CommandType.STATUS_CHECK:
            return self._send(msg, self._status())
        if command is CommandType.NAME_LIST:
            return self._send(msg, self._name_list())
        if command is CommandType.BOOKING_DELTA:
            text = self._book(msg, delta)
            return self._send(msg, text) if text else None
        return None

    def reset(self) -> BookingSnapshot:
        with self.lock:
            return reset_bookings(self.event_log, self.aggregator)

    # ===============================
    # Commands
    # ===============================

    def _status(self) -> str:
        snapshot = self.aggregator.refresh()
        return status_text(snapshot.grand_total, self.validator.max_seats)

    def _name_list(self) -> str:
        return name_list_text(self.aggregator.refresh().ranked())

    def _book(self, msg: InboundMessage, delta: int) -> Optional[str]:
        with self.lock:
            if self.event_log.contains(msg.event_id):
                logging.info(f"Duplicate message detected, skipping: {msg.event_id}")
                return None

            snapshot = self.aggregator.refresh()
            user_total = snapshot.user_total(msg.user_id)
            decision: Decision = self.validator.decide(delta, user_total, snapshot.grand_total)

            event = BookingEvent(
                event_id=msg.event_id,
                timestamp=msg.timestamp,
                conversation_id=msg.conversation_id,
                user_id=msg.user_id,
                user_name=self._display_name(msg.user_id),
                delta=decision.recorded_delta(delta),
            )
            if not self.event_log.append(event).inserted:
                logging.info(f"Message {msg.event_id} was recorded concurrently, skipping")
                return None
            snapshot = self.aggregator.recompute()

        if not decision.accepted:
            logging.info(f"Rejected {delta:+d} for {msg.user_id}: {decision.reason.value}")
            return rejection_text(decision.reason, user_total, snapshot.grand_total, self.validator)
        logging.info(f"✅ Recorded {delta:+d} for {msg.user_id}, total now {snapshot.grand_total}")
        return accepted_text(delta, snapshot.grand_total)

    # ===============================
    # Notifier calls (best-effort)
    # ===============================

    def _display_name(self, user_id: str) -> str:
        if not user_id or user_id == UNKNOWN_USER:
            return UNKNOWN_NAME
        try:
            return self.notifier.display_name(user_id)
        except Exception:
            logging.exception(f"display_name lookup failed for {user_id}")
            return PROFILE_FAILED_NAME

    def _send(self, msg: InboundMessage, text: str) -> str:
        try:
            self.notifier.reply(msg.reply_token, text)
        except Exception:
            logging.exception(f"reply failed for message {msg.event_id}")
        return text
