"""Read-only donation views: enrichment, sorting, today filter, donor grouping."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.donation import Donation
from app.models.food_item import FoodItem
from app.models.school import School
from app.models.user import User
from app.utils.clock import get_zone, local_midnight, to_local, utcnow

UNKNOWN_USER = "Unknown User"
UNKNOWN_ITEM = "Unknown Item"
UNKNOWN_SCHOOL = "Unknown School"


@dataclass(slots=True)
class DonationRecord:
    """A donation joined with the names a reader needs to make sense of it."""

    id: str
    created_at: datetime
    donor_id: str
    donor_name: str
    donor_email: Optional[str]
    school_id: str
    school_name: str
    food_item_id: str
    food_item_name: str
    quantity: int
    note: Optional[str]
    status: str


@dataclass(slots=True)
class DonorSummary:
    donor_id: str
    name: str
    email: Optional[str]
    phone: Optional[str]
    donation_count: int
    total_quantity: int


async def _lookup(
    session: AsyncSession,
    model: Any,
    ids: set[str],
) -> dict[str, Any]:
    if not ids:
        return {}
    result = await session.execute(select(model).where(model.id.in_(ids)))
    return {row.id: row for row in result.scalars().all()}


async def _fetch_records(
    session: AsyncSession,
    *criteria: Any,
) -> list[DonationRecord]:
    result = await session.execute(select(Donation).where(*criteria))
    donations = result.scalars().all()

    users = await _lookup(session, User, {d.user_id for d in donations})
    schools = await _lookup(session, School, {d.school_id for d in donations})
    items = await _lookup(session, FoodItem, {d.food_item_id for d in donations})

    records = []
    for donation in donations:
        donor = users.get(donation.user_id)
        school = schools.get(donation.school_id)
        item = items.get(donation.food_item_id)
        records.append(
            DonationRecord(
                id=donation.id,
                created_at=donation.created_at,
                donor_id=donation.user_id,
                donor_name=donor.name if donor else UNKNOWN_USER,
                donor_email=donor.email if donor else None,
                school_id=donation.school_id,
                school_name=school.name if school else UNKNOWN_SCHOOL,
                food_item_id=donation.food_item_id,
                food_item_name=item.name if item else UNKNOWN_ITEM,
                quantity=donation.quantity,
                note=donation.note,
                status=donation.status,
            )
        )
    return sort_newest_first(records)


def sort_newest_first(records: Iterable[DonationRecord]) -> list[DonationRecord]:
    return sorted(records, key=lambda record: record.created_at, reverse=True)


async def list_school_donations(
    session: AsyncSession, school_id: str
) -> list[DonationRecord]:
    return await _fetch_records(session, Donation.school_id == school_id)


async def list_donor_donations(
    session: AsyncSession, donor_id: str
) -> list[DonationRecord]:
    return await _fetch_records(session, Donation.user_id == donor_id)


async def list_all_donations(session: AsyncSession) -> list[DonationRecord]:
    return await _fetch_records(session)


def is_today(
    created_at: datetime,
    now: datetime | None = None,
    zone: ZoneInfo | None = None,
) -> bool:
    """Return whether ``created_at`` counts as "today".

    Not a rolling window: the donation must fall at or after local midnight
    and share its day of month. A future-dated donation on the same day of a
    later month therefore matches too.
    """

    zone = zone or get_zone()
    midnight = local_midnight(now or utcnow(), zone)
    local = to_local(created_at, zone)
    return local >= midnight and local.day == midnight.day


def filter_today(
    records: Iterable[DonationRecord],
    now: datetime | None = None,
    zone: ZoneInfo | None = None,
) -> list[DonationRecord]:
    zone = zone or get_zone()
    now = now or utcnow()
    return [record for record in records if is_today(record.created_at, now, zone)]


def summarize_donors(
    records: Iterable[DonationRecord],
    profiles: dict[str, User],
) -> list[DonorSummary]:
    """Group donations per donor; donors without a profile are left out."""

    summaries: dict[str, DonorSummary] = {}
    for record in records:
        profile = profiles.get(record.donor_id)
        if profile is None:
            continue
        summary = summaries.get(record.donor_id)
        if summary is None:
            summary = summaries[record.donor_id] = DonorSummary(
                donor_id=profile.id,
                name=profile.name,
                email=profile.email,
                phone=profile.phone,
                donation_count=0,
                total_quantity=0,
            )
        summary.donation_count += 1
        summary.total_quantity += record.quantity
    return sorted(summaries.values(), key=lambda s: s.donation_count, reverse=True)


async def list_school_donors(
    session: AsyncSession, school_id: str
) -> list[DonorSummary]:
    records = await list_school_donations(session, school_id)
    profiles = await _lookup(session, User, {record.donor_id for record in records})
    return summarize_donors(records, profiles)


async def list_users_with_totals(session: AsyncSession) -> list[DonorSummary]:
    """Every profile with its donation totals, including users who never donated."""

    result = await session.execute(select(User).order_by(User.name))
    users = result.scalars().all()
    records = await list_all_donations(session)

    totals: dict[str, tuple[int, int]] = {}
    for record in records:
        count, quantity = totals.get(record.donor_id, (0, 0))
        totals[record.donor_id] = (count + 1, quantity + record.quantity)

    return [
        DonorSummary(
            donor_id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            donation_count=totals.get(user.id, (0, 0))[0],
            total_quantity=totals.get(user.id, (0, 0))[1],
        )
        for user in users
    ]


def search_donors(summaries: Iterable[DonorSummary], term: str | None) -> list[DonorSummary]:
    """Case-insensitive substring match over name, email and phone."""

    summaries = list(summaries)
    needle = (term or "").strip().lower()
    if not needle:
        return summaries
    return [
        summary
        for summary in summaries
        if any(
            needle in (value or "").lower()
            for value in (summary.name, summary.email, summary.phone)
        )
    ]


__all__ = [
    "DonationRecord",
    "DonorSummary",
    "UNKNOWN_ITEM",
    "UNKNOWN_SCHOOL",
    "UNKNOWN_USER",
    "filter_today",
    "is_today",
    "list_all_donations",
    "list_donor_donations",
    "list_school_donations",
    "list_school_donors",
    "list_users_with_totals",
    "search_donors",
    "sort_newest_first",
    "summarize_donors",
]
