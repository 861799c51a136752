"""
Tests for reading the ticket CSV export.
"""

from datetime import datetime

import pytest
import pytz

from app.application.services.ticket_csv_transformer import (
    DEFAULT_DRIVER,
    DEFAULT_STATUS,
    parse_currency,
    parse_deadline,
    read_csv_rows,
    row_to_ticket,
    rows_to_tickets,
)

HEADER = "IHS Ticket ID;SPXTN;Driver;Station;PNR Order Value;Status;SLA Deadline"


@pytest.mark.parametrize("raw,expected", [
    ("R$ 1.200,50", 1200.5),
    ("1,200.50", 1200.5),
    ("12,5", 12.5),
    ("35", 35.0),
    ("", 0.0),
    (None, 0.0),
    ("n/a", 0.0),
])
def test_parse_currency(raw, expected):
    assert parse_currency(raw) == pytest.approx(expected)


def test_naive_deadline_is_local_time():
    parsed = parse_deadline("2024-05-01 09:00")
    assert parsed == datetime(2024, 5, 1, 12, 0, tzinfo=pytz.utc)


def test_brazilian_deadline_format():
    assert parse_deadline("01/05/2024 09:00") == datetime(2024, 5, 1, 12, 0, tzinfo=pytz.utc)


def test_deadline_with_offset_is_kept():
    assert parse_deadline("2024-05-01T09:00:00+00:00") == datetime(2024, 5, 1, 9, 0, tzinfo=pytz.utc)


def test_bad_deadline_is_dropped():
    assert parse_deadline("amanhã") is None
    assert parse_deadline("  ") is None


def test_row_mapping_with_defaults():
    ticket = row_to_ticket({
        "IHS Ticket ID": " 1001 ",
        "SPXTN": "",
        "Driver": "",
        "Station": "SP01",
        "PNR Order Value": "R$ 25,00",
        "Status": "",
        "SLA Deadline": "",
        "Extra": "ignored",
    })

    assert ticket.ticket_id == "1001"
    assert ticket.spxtn is None
    assert ticket.driver_name == DEFAULT_DRIVER
    assert ticket.original_status == DEFAULT_STATUS
    assert ticket.pnr_value == 25.0
    assert ticket.sla_deadline is None


def test_row_without_ticket_id():
    assert row_to_ticket({"Driver": "Ana"}).ticket_id == ""


def test_read_semicolon_export():
    content = "\n".join([
        HEADER,
        "1001;BR1;Ana Souza;SP01;R$ 1.200,50;Created;2024-05-01 09:00",
        ";;;;;;",
        "1002;;Bruno;RJ02;10;Delivered;",
    ]).encode("utf-8")

    tickets = rows_to_tickets(read_csv_rows(content))

    assert [t.ticket_id for t in tickets] == ["1001", "1002"]
    assert tickets[0].spxtn == "BR1"
    assert tickets[0].pnr_value == 1200.5
    assert tickets[1].spxtn is None


def test_read_latin1_export():
    content = (HEADER + "\n1001;BR1;João;SP01;1;Created;\n").encode("latin-1")

    rows = read_csv_rows(content)

    assert rows[0]["Driver"] == "João"


def test_empty_file():
    assert read_csv_rows(b"") == []
    assert read_csv_rows(b"  \n") == []
