# -*- coding: utf-8 -*-
"""
LINE webhook payload handling.

Expected body:
    {"events": [{"type": "message",
                 "message": {"type": "text", "text": "+1", "id": "..."},
                 "source": {"userId": "...", "groupId": "..."},
                 "replyToken": "...", "timestamp": 1700000000000}]}

The JSON may also arrive url-encoded in a form field named ``data``.
"""

import base64
import hashlib
import hmac
import json
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from .errors import InvalidSignature, MalformedPayload
from .models import NO_CONVERSATION, UNKNOWN_USER


@dataclass(frozen=True)
class InboundMessage:
    event_id: str
    text: str
    user_id: str
    timestamp: datetime
    reply_token: Optional[str] = None
    conversation_id: str = NO_CONVERSATION


def verify_signature(body: bytes, signature: Optional[str], channel_secret: str):
    digest = hmac.new(channel_secret.encode('utf-8'), body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode('utf-8')
    if not signature or not hmac.compare_digest(expected, signature):
        raise InvalidSignature("Invalid signature")


def parse_payload(body: bytes, form_data: Optional[str] = None) -> List[dict]:
    """Return the ``events`` list of a webhook delivery."""
    raw = form_data.encode('utf-8') if form_data else (body or b'')
    if not raw.strip():
        raise MalformedPayload("No data received")
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        raise MalformedPayload("Invalid data format") from None
    if not isinstance(data, dict) or not isinstance(data.get('events'), list):
        raise MalformedPayload("Invalid data format")
    return data['events']


def _event_time(ms, tzinfo) -> datetime:
    if isinstance(ms, bool) or not isinstance(ms, (int, float)):
        return datetime.now(tzinfo).replace(tzinfo=None)
    return datetime.fromtimestamp(ms / 1000, tzinfo).replace(tzinfo=None)


def to_message(event: dict, tzinfo=None) -> Optional[InboundMessage]:
    """Text message events become InboundMessage; everything else is None."""
    if not isinstance(event, dict) or event.get('type') != 'message':
        return None
    message = event.get('message') or {}
    if message.get('type') != 'text':
        return None
    source = event.get('source') or {}
    if not message.get('id') or not isinstance(message.get('text'), str):
        raise MalformedPayload("text message without id or text")
    return InboundMessage(
        event_id=str(message['id']),
        text=message['text'],
        user_id=source.get('userId') or UNKNOWN_USER,
        timestamp=_event_time(event.get('timestamp'), tzinfo),
        reply_token=event.get('replyToken'),
        conversation_id=source.get('groupId') or source.get('roomId') or NO_CONVERSATION,
    )
