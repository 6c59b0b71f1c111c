"""Permission checks used by the hours store and the calendar"""
import uuid

import pytest

from tarsit.models import TeamRole
from tarsit.services.team.team_service import TeamService


def test_owner_holds_every_permission(db, business, owner):
    assert TeamService.has_permission(db, owner.id, business.id, "canManageHours")
    assert TeamService.has_permission(db, owner.id, business.id, "canManageAppointments")


def test_non_member_has_no_permission(db, business, stranger):
    assert not TeamService.has_permission(db, stranger.id, business.id, "canManageHours")


def test_staff_gets_only_granted_flags(db, business, make_user, make_member):
    staff = make_user()
    make_member(business, staff, can_manage_hours=True)

    assert TeamService.has_permission(db, staff.id, business.id, "canManageHours")
    assert not TeamService.has_permission(db, staff.id, business.id, "canManageAppointments")


def test_manager_holds_every_permission(db, business, make_user, make_member):
    manager = make_user()
    make_member(business, manager, role=TeamRole.MANAGER)

    assert TeamService.has_permission(db, manager.id, business.id, "canManageAppointments")


def test_inactive_member_is_denied(db, business, make_user, make_member):
    staff = make_user()
    make_member(business, staff, active=False, can_manage_hours=True)

    assert not TeamService.has_permission(db, staff.id, business.id, "canManageHours")
    assert not TeamService.can_view_business(db, staff.id, business.id)


def test_unknown_business_is_denied(db, owner):
    assert not TeamService.has_permission(db, owner.id, uuid.uuid4(), "canManageHours")


def test_unknown_permission_name_raises(db, business, owner):
    with pytest.raises(ValueError):
        TeamService.has_permission(db, owner.id, business.id, "canFlyPlanes")


def test_active_member_can_view_business(db, business, make_user, make_member):
    staff = make_user()
    make_member(business, staff)

    assert TeamService.can_view_business(db, staff.id, business.id)
