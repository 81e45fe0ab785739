# -*- coding: utf-8 -*-
"""
Thin LINE Messaging API client: reply to a message, look up a display name.

Both calls are best-effort. Failures are logged and degrade (placeholder name,
no reply); nothing here retries.
"""

import logging
from typing import Optional

import requests

from .models import UNKNOWN_USER

LINE_API = 'https://api.line.me/v2/bot'
REPLY_URL = f'{LINE_API}/message/reply'
PROFILE_URL = f'{LINE_API}/profile/{{user_id}}'

UNKNOWN_NAME = 'Unknown'
PROFILE_HTTP_ERROR_NAME = 'Error fetching name'
PROFILE_FAILED_NAME = 'Error'


class LineClient:
    def __init__(self, access_token: str, session: Optional[requests.Session] = None, timeout: float = 10):
        self.access_token = access_token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self) -> dict:
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.access_token}',
        }

    def reply(self, reply_token: Optional[str], text: str) -> bool:
        if not reply_token:
            logging.warning("reply(): no reply token, message dropped")
            return False
        payload = {
            'replyToken': reply_token,
            'messages': [{'type': 'text', 'text': text}],
        }
        try:
            resp = self.session.post(REPLY_URL, headers=self._headers(), json=payload, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logging.error(f"reply() failed: {e}")
            return False
        logging.info(f"📤 Replied: {text!r}")
        return True

    def display_name(self, user_id: Optional[str]) -> str:
        if not user_id or user_id == UNKNOWN_USER:
            return UNKNOWN_NAME
        try:
            resp = self.session.get(PROFILE_URL.format(user_id=user_id), headers=self._headers(),
                                    timeout=self.timeout)
            if resp.status_code != 200:
                logging.warning(f"display_name(): profile lookup for {user_id} returned HTTP {resp.status_code}")
                return PROFILE_HTTP_ERROR_NAME
            return resp.json().get('displayName') or UNKNOWN_NAME
        except (requests.RequestException, ValueError) as e:
            logging.error(f"display_name() failed for {user_id}: {e}")
            return PROFILE_FAILED_NAME
