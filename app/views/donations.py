"""Pydantic schemas for donations and donor reports."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class DonationCreateRequest(BaseModel):
    """A donor's pledge.

    Quantity is checked by the donation service so that every invalid value
    produces the same message.
    """

    schoolId: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("schoolId", "school_id"),
        serialization_alias="schoolId",
    )
    foodItemId: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("foodItemId", "food_item_id"),
        serialization_alias="foodItemId",
    )
    quantity: int
    note: Optional[str] = Field(None, max_length=2000)


class DonationReceiptResponse(BaseModel):
    donationId: str = Field(..., serialization_alias="donationId")
    remainingNeed: Optional[int] = Field(None, serialization_alias="remainingNeed")
    needSynced: bool = Field(..., serialization_alias="needSynced")
    message: str


class DonationResponse(BaseModel):
    """A donation enriched with donor, school and food item names."""

    id: str
    created_at: datetime
    donorId: str = Field(
        ...,
        validation_alias=AliasChoices("donorId", "donor_id"),
        serialization_alias="donorId",
    )
    donorName: str = Field(
        ...,
        validation_alias=AliasChoices("donorName", "donor_name"),
        serialization_alias="donorName",
    )
    donorEmail: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("donorEmail", "donor_email"),
        serialization_alias="donorEmail",
    )
    schoolId: str = Field(
        ...,
        validation_alias=AliasChoices("schoolId", "school_id"),
        serialization_alias="schoolId",
    )
    schoolName: str = Field(
        ...,
        validation_alias=AliasChoices("schoolName", "school_name"),
        serialization_alias="schoolName",
    )
    foodItemId: str = Field(
        ...,
        validation_alias=AliasChoices("foodItemId", "food_item_id"),
        serialization_alias="foodItemId",
    )
    foodItemName: str = Field(
        ...,
        validation_alias=AliasChoices("foodItemName", "food_item_name"),
        serialization_alias="foodItemName",
    )
    quantity: int
    note: Optional[str] = None
    status: str

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class DonorSummaryResponse(BaseModel):
    donorId: str = Field(
        ...,
        validation_alias=AliasChoices("donorId", "donor_id"),
        serialization_alias="donorId",
    )
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    donationCount: int = Field(
        ...,
        validation_alias=AliasChoices("donationCount", "donation_count"),
        serialization_alias="donationCount",
    )
    totalQuantity: int = Field(
        ...,
        validation_alias=AliasChoices("totalQuantity", "total_quantity"),
        serialization_alias="totalQuantity",
    )

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


__all__ = [
    "DonationCreateRequest",
    "DonationReceiptResponse",
    "DonationResponse",
    "DonorSummaryResponse",
]
