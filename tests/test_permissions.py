"""
Unit tests for the role policy table and the /permissions/me endpoint.
"""

import pytest

from clinihof.core.permissions import (
    PERMISSIONS,
    can_access,
    can_manage_team,
    can_write,
    readable_resources,
    visible_menu_items,
)
from clinihof.db.models import UserRole

from tests.helpers import create_account, login

ALL_ROLES = list(UserRole)


# ── Tests: can_access / can_write ────────────────────────────────────

@pytest.mark.parametrize("role", ALL_ROLES)
def test_write_implies_read(role):
    for resource in PERMISSIONS:
        if can_write(role, resource):
            assert can_access(role, resource)


def test_master_and_admin_write_everything():
    for resource in PERMISSIONS:
        assert can_write(UserRole.MASTER, resource)
    for resource in PERMISSIONS:
        assert can_write(UserRole.ADMIN, resource)


def test_receptionist_reads_but_does_not_write_patients():
    assert can_access(UserRole.RECEPTIONIST, "patients")
    assert not can_write(UserRole.RECEPTIONIST, "patients")
    assert can_access(UserRole.RECEPTIONIST, "procedures")
    assert not can_write(UserRole.RECEPTIONIST, "procedures")
    assert can_write(UserRole.RECEPTIONIST, "agenda")
    assert not can_access(UserRole.RECEPTIONIST, "costs")


def test_receptionist_reads_catalogue_and_quotes_only():
    for resource in ("quotes", "supplies", "packages"):
        assert can_access(UserRole.RECEPTIONIST, resource)
        assert not can_write(UserRole.RECEPTIONIST, resource)
        assert can_write(UserRole.MANAGER, resource)


def test_manager_cannot_write_commissions_or_settings():
    assert not can_access(UserRole.MANAGER, "commissions")
    assert not can_write(UserRole.MANAGER, "commissions")
    assert not can_write(UserRole.MANAGER, "settings")
    assert can_write(UserRole.MANAGER, "costs")


def test_user_only_touches_agenda():
    assert readable_resources(UserRole.USER) == ["agenda"]
    assert can_write(UserRole.USER, "agenda")
    assert not can_write(UserRole.USER, "patients")


def test_unknown_role_or_resource_denied():
    assert not can_access("GHOST", "patients")
    assert not can_access(None, "patients")
    assert not can_access(UserRole.ADMIN, "nonexistent")
    assert not can_write(UserRole.ADMIN, "")


def test_roles_accepted_as_strings():
    assert can_access("ADMIN", "costs")
    assert not can_write("RECEPTIONIST", "patients")


# ── Tests: can_manage_team ───────────────────────────────────────────

def test_can_manage_team_matrix():
    assert can_manage_team(UserRole.MASTER, UserRole.ADMIN)
    assert can_manage_team(UserRole.ADMIN, UserRole.MANAGER)
    assert not can_manage_team(UserRole.ADMIN, UserRole.MASTER)
    assert can_manage_team(UserRole.MANAGER, UserRole.RECEPTIONIST)
    assert can_manage_team(UserRole.MANAGER, UserRole.USER)
    assert not can_manage_team(UserRole.MANAGER, UserRole.ADMIN)
    assert not can_manage_team(UserRole.RECEPTIONIST, UserRole.USER)
    assert not can_manage_team(UserRole.USER, UserRole.USER)


# ── Tests: menu ──────────────────────────────────────────────────────

def test_menu_matches_readable_resources():
    for role in ALL_ROLES:
        keys = [item["key"] for item in visible_menu_items(role)]
        assert keys == readable_resources(role)


def test_receptionist_menu():
    keys = [item["key"] for item in visible_menu_items(UserRole.RECEPTIONIST)]
    assert keys == ["agenda", "patients", "quotes", "procedures", "supplies", "packages"]


async def test_permissions_me_endpoint(client, session_maker):
    admin, workspace = await create_account(session_maker, "owner@clinica.com")
    await create_account(
        session_maker,
        "recepcao@clinica.com",
        role=UserRole.RECEPTIONIST,
        owns_workspace=False,
        member_of=workspace.id,
    )
    headers = await login(client, "recepcao@clinica.com")

    response = await client.get("/api/v1/permissions/me", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "RECEPTIONIST"
    assert "patients" in body["readable"]
    assert "patients" not in body["writable"]
    assert [item["key"] for item in body["menu"]] == [
        "agenda", "patients", "quotes", "procedures", "supplies", "packages",
    ]


async def test_receptionist_blocked_from_writing_patients(client, session_maker):
    admin, workspace = await create_account(session_maker, "owner@clinica.com")
    await create_account(
        session_maker,
        "recepcao@clinica.com",
        role=UserRole.RECEPTIONIST,
        owns_workspace=False,
        member_of=workspace.id,
    )
    headers = await login(client, "recepcao@clinica.com")

    read = await client.get("/api/v1/patients/", headers=headers)
    assert read.status_code == 200

    write = await client.post(
        "/api/v1/patients/", json={"name": "Nova", "phone": "123"}, headers=headers
    )
    assert write.status_code == 403
    assert write.json() == {"error": "Insufficient permissions"}
