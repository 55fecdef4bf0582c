"""Donation submission and the donor's own history."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from app.controllers.dependencies import (
    CurrentPrincipalDep,
    DonationRecorderDep,
    SessionDep,
)
from app.controllers.reports import csv_response
from app.services import Action, authorize
from app.services.export import donor_history_csv, export_filename
from app.services.reporting import list_donor_donations
from app.views import DonationCreateRequest, DonationReceiptResponse, DonationResponse

router = APIRouter(prefix="/donations", tags=["donations"])


@router.post(
    "/", response_model=DonationReceiptResponse, status_code=status.HTTP_201_CREATED
)
async def submit_donation(
    payload: DonationCreateRequest,
    principal: CurrentPrincipalDep,
    recorder: DonationRecorderDep,
) -> DonationReceiptResponse:
    authorize(principal, Action.DONATE)
    receipt = await recorder.submit(
        principal.subject,
        payload.schoolId,
        payload.foodItemId,
        payload.quantity,
        payload.note,
    )

    if receipt.need_synced:
        message = "Donation submitted successfully!"
    else:
        message = (
            "Donation submitted. The school's remaining need will update shortly."
        )
    return DonationReceiptResponse(
        donationId=receipt.donation_id,
        remainingNeed=receipt.remaining_need,
        needSynced=receipt.need_synced,
        message=message,
    )


@router.get("/me", response_model=list[DonationResponse])
async def my_donations(
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> list[DonationResponse]:
    records = await list_donor_donations(session, principal.subject)
    return [DonationResponse.model_validate(record) for record in records]


@router.get("/me/export")
async def export_my_donations(
    session: SessionDep,
    principal: CurrentPrincipalDep,
) -> Response:
    records = await list_donor_donations(session, principal.subject)
    return csv_response(donor_history_csv(records), export_filename("my-donations"))
