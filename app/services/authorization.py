"""Single authorization check used before every mutating or scoped action."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.config.settings import settings
from app.errors import NotAuthenticated, PermissionDenied
from app.models.user import User, UserRole


def is_super_admin_email(email: str | None) -> bool:
    if not email:
        return False
    allowed = {address.strip().lower() for address in settings.security.super_admin_emails}
    return email.strip().lower() in allowed


@dataclass(slots=True)
class Principal:
    """The authenticated caller: identity subject plus its profile, if any."""

    subject: str
    email: str
    profile: Optional[User] = None
    is_super_admin: bool = False

    @property
    def role(self) -> UserRole | None:
        return self.profile.role if self.profile is not None else None

    @property
    def school_id(self) -> str | None:
        return self.profile.school_id if self.profile is not None else None


class Action(str, Enum):
    DONATE = "donate"
    REGISTER_SCHOOL = "register_school"
    MANAGE_SCHOOL = "manage_school"
    MANAGE_FOOD_ITEMS = "manage_food_items"
    VIEW_SCHOOL_REPORTS = "view_school_reports"
    EDIT_USER = "edit_user"
    ADMINISTER = "administer"


_SCHOOL_SCOPED_MESSAGES = {
    Action.MANAGE_SCHOOL: "You don't have permission to manage this school",
    Action.MANAGE_FOOD_ITEMS: "You don't have permission to edit this food item",
    Action.VIEW_SCHOOL_REPORTS: "You don't have permission to view this school's donations",
}


def authorize(
    principal: Principal | None,
    action: Action,
    *,
    school_id: str | None = None,
    user_id: str | None = None,
) -> None:
    """Raise unless ``principal`` may perform ``action`` on the target.

    The super administrator may do everything. School-scoped actions need a
    school administrator of that very school.
    """

    if principal is None or not principal.subject:
        raise NotAuthenticated("Not authenticated")

    if principal.is_super_admin:
        return

    if action is Action.ADMINISTER:
        raise PermissionDenied("Only the super administrator can perform this action")

    if action is Action.DONATE:
        if principal.profile is None:
            raise PermissionDenied("Complete your profile before donating")
        return

    if action is Action.EDIT_USER:
        if user_id is None or user_id != principal.subject:
            raise PermissionDenied("You can only edit your own profile")
        return

    if principal.role is not UserRole.SCHOOL_ADMIN:
        raise PermissionDenied("Only school administrators can perform this action")

    if action is Action.REGISTER_SCHOOL:
        if principal.school_id is not None:
            raise PermissionDenied("This administrator already manages a school")
        return

    if school_id is None or principal.school_id != school_id:
        raise PermissionDenied(_SCHOOL_SCOPED_MESSAGES[action])


__all__ = ["Action", "Principal", "authorize", "is_super_admin_email"]
