from datetime import datetime

from seatbot.models import BookingEvent, UserAggregate

from conftest import T0, make_event


def test_event_row_layout():
    event = make_event("123456789012345678", "U1", -2, user_name="Amy")
    assert event.to_row() == ["2026-10-18 09:00:00", "G1", "U1", "Amy", -2, "123456789012345678"]


def test_event_from_sheet_strings():
    row = ["2026-10-18 09:00:00", "G1", "U1", "Amy", "3", "123456789012345678"]
    event = BookingEvent.from_row(row)
    assert event.timestamp == T0
    assert event.delta == 3
    assert event.event_id == "123456789012345678"


def test_garbled_or_missing_cells_are_tolerated():
    event = BookingEvent.from_row(["not a date", "", "U1", "Amy", "oops"])
    assert event.delta == 0
    assert event.timestamp == datetime.min
    assert event.conversation_id == "N/A"
    assert event.event_id == ""


def test_summary_row_layout():
    agg = UserAggregate("U1", "Amy", "G1", T0, 3)
    assert agg.to_row() == ["2026-10-18 09:00:00", "G1", "U1", "Amy", 3]
