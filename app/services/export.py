"""CSV rendering for donation and donor reports."""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.services.reporting import DonationRecord, DonorSummary
from app.utils.clock import get_zone, to_local, utcnow

DONATION_HEADER = ("Date", "Donor", "Food Item", "Quantity", "Note")
DONOR_HISTORY_HEADER = ("Date", "Food Item", "Quantity", "Note")
DONATORS_HEADER = ("Name", "Email", "Phone", "Total Donations")

EMPTY_NOTE = "N/A"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def render_csv(header: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    """Return RFC 4180 text: fields with commas, quotes or newlines are quoted."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def _format_date(value: datetime, zone: ZoneInfo) -> str:
    return to_local(value, zone).date().isoformat()


def donations_csv(
    records: Iterable[DonationRecord],
    zone: ZoneInfo | None = None,
) -> str:
    zone = zone or get_zone()
    return render_csv(
        DONATION_HEADER,
        (
            (
                _format_date(record.created_at, zone),
                record.donor_name,
                record.food_item_name,
                record.quantity,
                record.note or EMPTY_NOTE,
            )
            for record in records
        ),
    )


def donor_history_csv(
    records: Iterable[DonationRecord],
    zone: ZoneInfo | None = None,
) -> str:
    zone = zone or get_zone()
    return render_csv(
        DONOR_HISTORY_HEADER,
        (
            (
                _format_date(record.created_at, zone),
                record.food_item_name,
                record.quantity,
                record.note or EMPTY_NOTE,
            )
            for record in records
        ),
    )


def donators_csv(summaries: Iterable[DonorSummary]) -> str:
    return render_csv(
        DONATORS_HEADER,
        (
            (
                summary.name,
                summary.email or "",
                summary.phone or "",
                summary.donation_count,
            )
            for summary in summaries
        ),
    )


def export_filename(subject: str, today: date | None = None) -> str:
    """Return ``<subject>-<YYYY-MM-DD>.csv`` with a filesystem-safe subject."""

    if today is None:
        today = to_local(utcnow(), get_zone()).date()
    slug = _UNSAFE_FILENAME_CHARS.sub("-", subject).strip("-") or "export"
    return f"{slug}-{today.isoformat()}.csv"


__all__ = [
    "DONATION_HEADER",
    "DONOR_HISTORY_HEADER",
    "DONATORS_HEADER",
    "EMPTY_NOTE",
    "donations_csv",
    "donor_history_csv",
    "donators_csv",
    "export_filename",
    "render_csv",
]
