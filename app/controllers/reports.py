"""School donation reports and their CSV exports."""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.dependencies import CurrentPrincipalDep, SessionDep
from app.controllers.schools import get_school_or_404
from app.errors import NotFound
from app.models.user import User as UserModel
from app.services import Action, authorize
from app.services.export import (
    donations_csv,
    donators_csv,
    donor_history_csv,
    export_filename,
)
from app.services.reporting import (
    DonationRecord,
    filter_today,
    list_school_donations,
    list_school_donors,
    search_donors,
)
from app.views import DonationResponse, DonorSummaryResponse

router = APIRouter(prefix="/reports", tags=["reports"])


def csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/schools/{school_id}/donations", response_model=list[DonationResponse]
)
async def school_donations(
    school_id: str,
    session: SessionDep,
    principal: CurrentPrincipalDep,
    today: bool = False,
) -> list[DonationResponse]:
    authorize(principal, Action.VIEW_SCHOOL_REPORTS, school_id=school_id)
    records = await list_school_donations(session, school_id)
    if today:
        records = filter_today(records)
    return [DonationResponse.model_validate(record) for record in records]


@router.get("/schools/{school_id}/donations/export")
async def export_school_donations(
    school_id: str,
    session: SessionDep,
    principal: CurrentPrincipalDep,
    scope: Literal["all", "today"] = "all",
) -> Response:
    authorize(principal, Action.VIEW_SCHOOL_REPORTS, school_id=school_id)
    records = await list_school_donations(session, school_id)
    if scope == "today":
        records = filter_today(records)
        subject = "todays-donations"
    else:
        subject = "donation-history"
    return csv_response(donations_csv(records), export_filename(subject))


@router.get(
    "/schools/{school_id}/donors", response_model=list[DonorSummaryResponse]
)
async def school_donors(
    school_id: str,
    session: SessionDep,
    principal: CurrentPrincipalDep,
    search: Optional[str] = Query(None, max_length=120),
) -> list[DonorSummaryResponse]:
    authorize(principal, Action.VIEW_SCHOOL_REPORTS, school_id=school_id)
    summaries = search_donors(await list_school_donors(session, school_id), search)
    return [DonorSummaryResponse.model_validate(summary) for summary in summaries]


@router.get("/schools/{school_id}/donors/export")
async def export_school_donors(
    school_id: str,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> Response:
    authorize(principal, Action.VIEW_SCHOOL_REPORTS, school_id=school_id)
    summaries = await list_school_donors(session, school_id)
    return csv_response(donators_csv(summaries), export_filename("donators"))


async def _donor_records(
    session: AsyncSession, school_id: str, donor_id: str
) -> tuple[UserModel, list[DonationRecord]]:
    donor = await session.get(UserModel, donor_id)
    if donor is None:
        raise NotFound("Donor not found")
    records = await list_school_donations(session, school_id)
    return donor, [record for record in records if record.donor_id == donor_id]


@router.get(
    "/schools/{school_id}/donors/{donor_id}/donations",
    response_model=list[DonationResponse],
)
async def donor_history(
    school_id: str,
    donor_id: str,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> list[DonationResponse]:
    authorize(principal, Action.VIEW_SCHOOL_REPORTS, school_id=school_id)
    await get_school_or_404(session, school_id)
    _, records = await _donor_records(session, school_id, donor_id)
    return [DonationResponse.model_validate(record) for record in records]


@router.get("/schools/{school_id}/donors/{donor_id}/donations/export")
async def export_donor_history(
    school_id: str,
    donor_id: str,
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> Response:
    authorize(principal, Action.VIEW_SCHOOL_REPORTS, school_id=school_id)
    donor, records = await _donor_records(session, school_id, donor_id)
    return csv_response(
        donor_history_csv(records),
        export_filename(f"donation-history-{donor.name}"),
    )
