# -*- coding: utf-8 -*-
"""
Bot configuration.

Values come from the environment (a local .env file is honoured). Capacity rules
live on BotConfig and are handed to the validator/router explicitly.

MAX_SEATS_PER_USER has no default on purpose: leaving it unset is a ConfigError.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dateutil import tz
from dotenv import load_dotenv

from .errors import ConfigError

# ===============================
# Defaults
# ===============================
DEFAULT_MAX_SEATS = 10
DEFAULT_CLEAR_HOUR = 1
DEFAULT_STATUS_KEYWORD = 'check'
DEFAULT_NAME_LIST_KEYWORD = 'name'
DEFAULT_TIMEZONE = 'Asia/Taipei'
MAX_DELTA = 4

DEFAULT_INCREMENTS = {
    '+1': 1, '加一': 1,
    '+2': 2, '加二': 2,
    '+3': 3, '加三': 3,
    '+4': 4, '加四': 4,
    '-1': -1, '減一': -1,
    '-2': -2, '減二': -2,
    '-3': -3, '減三': -3,
    '-4': -4, '減四': -4,
}


class IncrementVocabulary:
    """Closed token <-> seat delta mapping."""

    def __init__(self, mapping: Optional[Dict[str, int]] = None):
        mapping = DEFAULT_INCREMENTS if mapping is None else mapping
        self._by_token: Dict[str, int] = {}
        for token, delta in mapping.items():
            key = str(token).strip().lower()
            if isinstance(delta, bool) or not isinstance(delta, int):
                raise ConfigError(f"increment for {token!r} must be an integer, got {delta!r}")
            if delta == 0 or abs(delta) > MAX_DELTA:
                raise ConfigError(f"increment for {token!r} must be within ±1..±{MAX_DELTA}, got {delta}")
            if not key:
                raise ConfigError("increment tokens must not be blank")
            self._by_token[key] = delta

    def parse(self, token: str) -> Optional[int]:
        return self._by_token.get(token.strip().lower())

    def tokens_for(self, delta: int) -> List[str]:
        return [t for t, d in self._by_token.items() if d == delta]

    def __contains__(self, token: str) -> bool:
        return self.parse(token) is not None

    def __len__(self) -> int:
        return len(self._by_token)


@dataclass(frozen=True)
class BotConfig:
    max_seats: int
    max_seats_per_user: int
    clear_hour: int = DEFAULT_CLEAR_HOUR
    status_keyword: str = DEFAULT_STATUS_KEYWORD
    name_list_keyword: str = DEFAULT_NAME_LIST_KEYWORD
    vocabulary: IncrementVocabulary = field(default_factory=IncrementVocabulary)
    timezone: str = DEFAULT_TIMEZONE

    # LINE / Google Sheets wiring
    line_channel_access_token: str = ''
    line_channel_secret: str = ''
    credentials_file: str = 'credentials.json'
    raw_sheet_id: str = ''
    summary_sheet_id: str = ''
    raw_sheet_name: str = 'Messages'
    summary_sheet_name: str = 'Bookings'
    enable_scheduler: bool = True

    def __post_init__(self):
        if self.max_seats_per_user is None:
            raise ConfigError("MAX_SEATS_PER_USER must be set explicitly")
        if self.max_seats < 0:
            raise ConfigError(f"MAX_SEATS must not be negative, got {self.max_seats}")
        if self.max_seats_per_user < 1:
            raise ConfigError(f"MAX_SEATS_PER_USER must be at least 1, got {self.max_seats_per_user}")
        if not 0 <= self.clear_hour <= 23:
            raise ConfigError(f"CLEAR_HOUR must be 0-23, got {self.clear_hour}")
        if self.status_keyword.strip().lower() == self.name_list_keyword.strip().lower():
            raise ConfigError("STATUS_KEYWORD and NAME_LIST_KEYWORD must differ")
        if self.tzinfo is None:
            raise ConfigError(f"Unknown TIMEZONE {self.timezone!r}")

    @property
    def tzinfo(self):
        return tz.gettz(self.timezone)


# ===============================
# Environment loading
# ===============================

def _env_int(env, name: str, default: Optional[int]) -> Optional[int]:
    raw = env.get(name)
    if raw is None or str(raw).strip() == '':
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(env, name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or str(raw).strip() == '':
        return default
    return str(raw).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_vocabulary(env) -> IncrementVocabulary:
    raw = env.get('INCREMENT_VOCABULARY')
    if not raw:
        return IncrementVocabulary()
    try:
        mapping = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"INCREMENT_VOCABULARY is not valid JSON: {e}") from e
    if not isinstance(mapping, dict):
        raise ConfigError("INCREMENT_VOCABULARY must be a JSON object of token -> integer")
    return IncrementVocabulary(mapping)


def load_config(env=None, dotenv: bool = True) -> BotConfig:
    """Build a BotConfig from ``env`` (defaults to os.environ)."""
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ

    max_per_user = _env_int(env, 'MAX_SEATS_PER_USER', None)
    if max_per_user is None:
        raise ConfigError("MAX_SEATS_PER_USER is not set")

    return BotConfig(
        max_seats=_env_int(env, 'MAX_SEATS', DEFAULT_MAX_SEATS),
        max_seats_per_user=max_per_user,
        clear_hour=_env_int(env, 'CLEAR_HOUR', DEFAULT_CLEAR_HOUR),
        status_keyword=env.get('STATUS_KEYWORD', DEFAULT_STATUS_KEYWORD).strip().lower(),
        name_list_keyword=env.get('NAME_LIST_KEYWORD', DEFAULT_NAME_LIST_KEYWORD).strip().lower(),
        vocabulary=_env_vocabulary(env),
        timezone=env.get('TIMEZONE', DEFAULT_TIMEZONE),
        line_channel_access_token=env.get('LINE_CHANNEL_ACCESS_TOKEN', ''),
        line_channel_secret=env.get('LINE_CHANNEL_SECRET', ''),
        credentials_file=env.get('GOOGLE_CREDENTIALS_FILE', 'credentials.json'),
        raw_sheet_id=env.get('RAW_SHEET_ID', ''),
        summary_sheet_id=env.get('SUMMARY_SHEET_ID', ''),
        raw_sheet_name=env.get('RAW_SHEET_NAME', 'Messages'),
        summary_sheet_name=env.get('SUMMARY_SHEET_NAME', 'Bookings'),
        enable_scheduler=_env_bool(env, 'ENABLE_SCHEDULER', True),
    )
