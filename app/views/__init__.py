"""Pydantic schemas used as views in the MVC architecture."""

from .auth import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    TokenResponse,
)
from .common import ErrorResponse, SuccessResponse
from .donations import (
    DonationCreateRequest,
    DonationReceiptResponse,
    DonationResponse,
    DonorSummaryResponse,
)
from .food_items import FoodItemCreateRequest, FoodItemResponse, FoodItemUpdateRequest
from .schools import (
    NeedResponse,
    NeedUpdateRequest,
    SchoolRegistrationRequest,
    SchoolResponse,
    SchoolUpdateRequest,
)
from .users import (
    AccountDeletionResponse,
    AdminUserUpdateRequest,
    ProfileUpdateRequest,
    UserRegistrationRequest,
    UserRegistrationResponse,
    UserResponse,
)

__all__ = [
    "AccountDeletionResponse",
    "AdminUserUpdateRequest",
    "DonationCreateRequest",
    "DonationReceiptResponse",
    "DonationResponse",
    "DonorSummaryResponse",
    "ErrorResponse",
    "FoodItemCreateRequest",
    "FoodItemResponse",
    "FoodItemUpdateRequest",
    "ForgotPasswordRequest",
    "ForgotPasswordResponse",
    "LoginRequest",
    "NeedResponse",
    "NeedUpdateRequest",
    "ProfileUpdateRequest",
    "SchoolRegistrationRequest",
    "SchoolResponse",
    "SchoolUpdateRequest",
    "SuccessResponse",
    "TokenResponse",
    "UserRegistrationRequest",
    "UserRegistrationResponse",
    "UserResponse",
]
