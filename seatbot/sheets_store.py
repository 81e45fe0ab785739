# -*- coding: utf-8 -*-
"""
Google Sheets persistence.

  • Messages  – raw log, one row per LINE message (see models.RAW_HEADERS)
  • Bookings  – summary, rewritten in full after every recomputation

Worksheets are auto-created with headers when missing. Rows are written
USER_ENTERED so column A becomes a real date-time; every other text cell gets a
leading apostrophe so LINE message ids stay exact and names are never formulas.
"""

import logging
from typing import Iterable, List, Tuple

import gspread
from google.oauth2.service_account import Credentials

from .event_log import EventLog
from .models import RAW_HEADERS, SUMMARY_HEADERS, AppendResult, BookingEvent, UserAggregate

SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
    'https://www.googleapis.com/auth/drive'
]

EVENT_ID_COL = RAW_HEADERS.index("EventId") + 1
TIMESTAMP_PATTERN = 'yyyy-mm-dd hh:mm:ss'


def authorize(credentials_file: str) -> gspread.Client:
    creds = Credentials.from_service_account_file(credentials_file, scopes=SCOPES)
    return gspread.authorize(creds)


def ensure_worksheet(spreadsheet, title: str, headers: List[str]):
    """Open or create worksheet ``title`` and make sure row 1 holds ``headers``."""
    try:
        ws = spreadsheet.worksheet(title)
    except gspread.WorksheetNotFound:
        logging.info(f"Worksheet {title!r} not found, creating it")
        ws = spreadsheet.add_worksheet(title=title, rows=200, cols=max(26, len(headers)))
    first_row = ws.row_values(1)
    if first_row != headers:
        ws.update(range_name='A1', values=[headers])
    return ws


def format_worksheet(ws):
    """Freeze the header and show column A as a date-time."""
    ws.freeze(rows=1)
    ws.format('A:A', {"numberFormat": {"type": "DATE_TIME", "pattern": TIMESTAMP_PATTERN}})


def _as_user_entered(row: list) -> list:
    ts, *rest = row
    return [ts] + [f"'{v}" if isinstance(v, str) else v for v in rest]


def _non_blank(rows: Iterable[list]) -> List[list]:
    return [r for r in rows if any(str(c).strip() for c in r)]


class SheetsEventLog(EventLog):
    def __init__(self, worksheet):
        self.ws = worksheet

    def contains(self, event_id: str) -> bool:
        # header sits in row 1
        ids = self.ws.col_values(EVENT_ID_COL)[1:]
        return str(event_id) in ids

    def append(self, event: BookingEvent) -> AppendResult:
        if self.contains(event.event_id):
            logging.info(f"Duplicate message detected, skipping: {event.event_id}")
            return AppendResult(inserted=False)
        self.ws.append_row(_as_user_entered(event.to_row()), value_input_option='USER_ENTERED', table_range='A1')
        logging.debug(f"Raw log row appended: {event.to_row()}")
        return AppendResult(inserted=True)

    def scan_all(self) -> List[BookingEvent]:
        values = self.ws.get_all_values()
        return [BookingEvent.from_row(r) for r in _non_blank(values[1:])]

    def clear(self) -> None:
        self.ws.clear()
        self.ws.update(range_name='A1', values=[RAW_HEADERS])
        logging.info(f"Raw log {self.ws.title!r} cleared, header preserved")


class SummarySheet:
    """Materialized per-user totals. Never patched, only rewritten."""

    def __init__(self, worksheet):
        self.ws = worksheet

    def write(self, aggregates: List[UserAggregate]):
        rows = [_as_user_entered(a.to_row()) for a in aggregates]
        self.ws.clear()
        self.ws.update(range_name='A1', values=[SUMMARY_HEADERS] + rows,
                       value_input_option='USER_ENTERED')
        logging.debug(f"Summary {self.ws.title!r} rewritten with {len(rows)} row(s)")


# ===============================
# Wiring
# ===============================

def open_sheets(config, client=None) -> Tuple[SheetsEventLog, SummarySheet]:
    """Open (creating if needed) the raw log and summary worksheets."""
    client = client or authorize(config.credentials_file)
    raw_ws = ensure_worksheet(client.open_by_key(config.raw_sheet_id), config.raw_sheet_name, RAW_HEADERS)
    summary_ws = ensure_worksheet(client.open_by_key(config.summary_sheet_id), config.summary_sheet_name,
                                  SUMMARY_HEADERS)
    return SheetsEventLog(raw_ws), SummarySheet(summary_ws)


def setup_sheets(config, client=None) -> Tuple[SheetsEventLog, SummarySheet]:
    event_log, summary = open_sheets(config, client=client)
    format_worksheet(event_log.ws)
    format_worksheet(summary.ws)
    logging.info("✅ Sheets ready: headers written, header row frozen, timestamps formatted")
    return event_log, summary
