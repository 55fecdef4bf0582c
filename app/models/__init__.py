"""SQLAlchemy models for the MVC architecture."""

from .base import Base
from .donation import Donation  # noqa: F401
from .food_item import FoodItem  # noqa: F401
from .identity import Identity  # noqa: F401
from .job_run import JobRun  # noqa: F401
from .log import RequestLog  # noqa: F401
from .school import School  # noqa: F401
from .user import User, UserRole  # noqa: F401

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Identity",
    "School",
    "FoodItem",
    "Donation",
    "JobRun",
    "RequestLog",
]
