from datetime import datetime, timedelta

import gspread
import pytest

from seatbot.aggregator import Aggregator
from seatbot.config import BotConfig
from seatbot.event_log import InMemoryEventLog
from seatbot.models import BookingEvent
from seatbot.router import CommandRouter
from seatbot.webhook import InboundMessage

T0 = datetime(2026, 10, 18, 9, 0, 0)


def make_config(**overrides) -> BotConfig:
    values = dict(max_seats=10, max_seats_per_user=4, enable_scheduler=False)
    values.update(overrides)
    return BotConfig(**values)


def make_event(event_id, user_id="U1", delta=1, minutes=0, user_name=None, conversation_id="G1") -> BookingEvent:
    return BookingEvent(
        event_id=event_id,
        timestamp=T0 + timedelta(minutes=minutes),
        user_id=user_id,
        user_name=user_name or f"name-{user_id}",
        delta=delta,
        conversation_id=conversation_id,
    )


def make_message(event_id, text, user_id="U1", reply_token="rt", minutes=0) -> InboundMessage:
    return InboundMessage(
        event_id=event_id,
        text=text,
        user_id=user_id,
        timestamp=T0 + timedelta(minutes=minutes),
        reply_token=reply_token,
        conversation_id="G1",
    )


class FakeNotifier:
    def __init__(self, names=None, fail_names=False, fail_replies=False):
        self.names = names or {}
        self.fail_names = fail_names
        self.fail_replies = fail_replies
        self.replies = []
        self.lookups = []

    def display_name(self, user_id):
        self.lookups.append(user_id)
        if self.fail_names:
            raise RuntimeError("profile API down")
        return self.names.get(user_id, f"name-{user_id}")

    def reply(self, reply_token, text):
        if self.fail_replies:
            raise RuntimeError("reply API down")
        self.replies.append((reply_token, text))
        return True


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the store; cells come back as strings like Sheets does."""

    def __init__(self, title="Sheet", rows=None):
        self.title = title
        self.rows = [list(map(str, r)) for r in (rows or [])]
        self.frozen_rows = 0
        self.formats = {}
        self.sent = []

    def _cells(self, row, value_input_option):
        self.sent.append((list(row), value_input_option))
        # USER_ENTERED: a leading apostrophe only marks the cell as text
        if value_input_option == "USER_ENTERED":
            return [v[1:] if isinstance(v, str) and v.startswith("'") else str(v) for v in row]
        return [str(v) for v in row]

    def row_values(self, row):
        return list(self.rows[row - 1]) if len(self.rows) >= row else []

    def col_values(self, col):
        return [r[col - 1] if len(r) >= col else "" for r in self.rows]

    def get_all_values(self):
        return [list(r) for r in self.rows]

    def update(self, range_name=None, values=None, value_input_option=None):
        assert range_name == "A1"
        for i, row in enumerate(values):
            row = self._cells(row, value_input_option)
            if i < len(self.rows):
                self.rows[i] = row
            else:
                self.rows.append(row)

    def append_row(self, values, value_input_option=None, table_range=None):
        self.rows.append(self._cells(values, value_input_option))

    def clear(self):
        self.rows = []

    def freeze(self, rows=None, cols=None):
        self.frozen_rows = rows

    def format(self, ranges, fmt):
        self.formats[ranges] = fmt


class FakeSpreadsheet:
    def __init__(self, worksheets=None):
        self.worksheets = {ws.title: ws for ws in (worksheets or [])}

    def worksheet(self, title):
        if title not in self.worksheets:
            raise gspread.WorksheetNotFound(title)
        return self.worksheets[title]

    def add_worksheet(self, title, rows, cols):
        ws = FakeWorksheet(title)
        self.worksheets[title] = ws
        return ws


class FakeClient:
    def __init__(self, spreadsheets):
        self.spreadsheets = spreadsheets

    def open_by_key(self, key):
        return self.spreadsheets[key]


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def event_log():
    return InMemoryEventLog()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def router(config, event_log, notifier):
    return CommandRouter(config, event_log, Aggregator(event_log), notifier)
