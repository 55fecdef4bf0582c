"""CSV exports."""

from __future__ import annotations

import csv
import io
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.services.export import (
    DONATION_HEADER,
    DONATORS_HEADER,
    donations_csv,
    donators_csv,
    donor_history_csv,
    export_filename,
)
from app.services.reporting import DonationRecord, DonorSummary

UTC = ZoneInfo("UTC")


def _record(note, donor_name='Rao, Asha "AR"', created_at=None, quantity=4):
    return DonationRecord(
        id="abc",
        created_at=created_at or datetime(2024, 3, 15, 23, 30),
        donor_id="d1",
        donor_name=donor_name,
        donor_email="asha@example.com",
        school_id="s1",
        school_name="Hillside",
        food_item_id="f1",
        food_item_name="Rice",
        quantity=quantity,
        note=note,
        status="pending",
    )


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_donations_csv_quotes_awkward_fields():
    text = donations_csv([_record("bags, sealed\nsecond line")], UTC)

    rows = _rows(text)
    assert tuple(rows[0]) == DONATION_HEADER
    assert rows[1] == [
        "2024-03-15",
        'Rao, Asha "AR"',
        "Rice",
        "4",
        "bags, sealed\nsecond line",
    ]


def test_empty_note_renders_na():
    rows = _rows(donor_history_csv([_record(None)], UTC))

    assert rows[0] == ["Date", "Food Item", "Quantity", "Note"]
    assert rows[1][-1] == "N/A"


def test_dates_follow_local_timezone():
    rows = _rows(donations_csv([_record(None)], ZoneInfo("Asia/Kolkata")))

    assert rows[1][0] == "2024-03-16"


def test_donators_csv():
    summaries = [DonorSummary("d1", "Ben", "ben@example.com", None, 3, 9)]

    rows = _rows(donators_csv(summaries))

    assert tuple(rows[0]) == DONATORS_HEADER
    assert rows[1] == ["Ben", "ben@example.com", "", "3"]


def test_export_filename():
    assert export_filename("donation-history", date(2024, 3, 5)) == (
        "donation-history-2024-03-05.csv"
    )
    assert export_filename("donation-history-Asha Rao/2", date(2024, 3, 5)) == (
        "donation-history-Asha-Rao-2-2024-03-05.csv"
    )


def test_donations_csv_round_trip():
    records = [
        _record("first", created_at=datetime(2024, 3, 14, 8, 0), quantity=2),
        _record(None, donor_name="Ben Lee", created_at=datetime(2024, 3, 15, 9, 5), quantity=7),
        _record("rice, dal", donor_name="Chen", created_at=datetime(2024, 3, 16, 18, 0), quantity=1),
    ]

    rows = _rows(donations_csv(records, UTC))

    assert len(rows) == len(records) + 1
    assert [(row[0], row[1], int(row[3])) for row in rows[1:]] == [
        ("2024-03-14", 'Rao, Asha "AR"', 2),
        ("2024-03-15", "Ben Lee", 7),
        ("2024-03-16", "Chen", 1),
    ]
