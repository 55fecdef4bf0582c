"""Who may do what."""

from __future__ import annotations

import pytest

from app.errors import NotAuthenticated, PermissionDenied
from app.models import User, UserRole
from app.services import Action, Principal, authorize, is_super_admin_email


def _principal(role=UserRole.DONOR, school_id=None, super_admin=False, profile=True):
    user = None
    if profile:
        user = User(id="u1", name="Pat", email="pat@example.com", role=role, school_id=school_id)
    return Principal(
        subject="u1",
        email="pat@example.com",
        profile=user,
        is_super_admin=super_admin,
    )


def test_super_admin_may_do_everything():
    root = _principal(profile=False, super_admin=True)
    for action in Action:
        authorize(root, action, school_id="s1", user_id="someone-else")


def test_super_admin_emails_come_from_settings():
    assert is_super_admin_email(" Root@Example.com ")
    assert not is_super_admin_email("pat@example.com")
    assert not is_super_admin_email(None)


def test_missing_principal():
    with pytest.raises(NotAuthenticated):
        authorize(None, Action.DONATE)


def test_school_admin_scoped_to_own_school():
    admin = _principal(UserRole.SCHOOL_ADMIN, school_id="s1")

    authorize(admin, Action.MANAGE_SCHOOL, school_id="s1")
    authorize(admin, Action.MANAGE_FOOD_ITEMS, school_id="s1")
    authorize(admin, Action.VIEW_SCHOOL_REPORTS, school_id="s1")
    with pytest.raises(PermissionDenied, match="food item"):
        authorize(admin, Action.MANAGE_FOOD_ITEMS, school_id="s2")
    with pytest.raises(PermissionDenied):
        authorize(admin, Action.VIEW_SCHOOL_REPORTS, school_id="s2")


def test_donor_cannot_manage_schools():
    with pytest.raises(PermissionDenied):
        authorize(_principal(), Action.MANAGE_SCHOOL, school_id="s1")


def test_donating_needs_a_profile():
    authorize(_principal(), Action.DONATE)
    with pytest.raises(PermissionDenied):
        authorize(_principal(profile=False), Action.DONATE)


def test_edit_user_only_self():
    authorize(_principal(), Action.EDIT_USER, user_id="u1")
    with pytest.raises(PermissionDenied):
        authorize(_principal(), Action.EDIT_USER, user_id="u2")


def test_register_school_once():
    authorize(_principal(UserRole.SCHOOL_ADMIN), Action.REGISTER_SCHOOL)
    with pytest.raises(PermissionDenied):
        authorize(_principal(UserRole.SCHOOL_ADMIN, school_id="s1"), Action.REGISTER_SCHOOL)
    with pytest.raises(PermissionDenied):
        authorize(_principal(), Action.REGISTER_SCHOOL)


def test_console_is_super_admin_only():
    with pytest.raises(PermissionDenied):
        authorize(_principal(UserRole.SCHOOL_ADMIN, school_id="s1"), Action.ADMINISTER)
