"""
Signup, login, logout and session resolution.
"""

import pytest
from sqlmodel import select, func

from clinihof.core.config import settings
from clinihof.db.models import Collaborator, Patient, Procedure, User, UserRole, Workspace
from clinihof.schemas.auth import SignupRequest
from clinihof.services.auth_service import AuthService

from tests.helpers import FakeTokenStore, create_account, login

SIGNUP = {
    "email": "Nova@Clinica.com",
    "password": "segredo1",
    "fullName": "Dra. Nova",
    "clinicName": "Clinica Nova",
}


async def count(session_maker, model, *criteria):
    async with session_maker() as session:
        stmt = select(func.count()).select_from(model).where(*criteria)
        return (await session.execute(stmt)).scalar()


# ── Tests: signup ────────────────────────────────────────────────────

async def test_signup_creates_admin_owner_and_seed(client, session_maker):
    response = await client.post("/api/v1/auth/signup", json=SIGNUP)
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["message"] == "Account created successfully"
    assert body["user"]["email"] == "nova@clinica.com"
    workspace_id = body["workspace_id"]

    async with session_maker() as session:
        user = (await session.execute(select(User).where(User.email == "nova@clinica.com"))).scalars().one()
        workspace = (await session.execute(select(Workspace).where(Workspace.owner_id == user.id))).scalars().one()
        assert user.role == UserRole.ADMIN
        assert str(workspace.id) == workspace_id
        assert user.workspace_id == workspace.id
        assert workspace.slug.startswith("clinica-nova-")

    assert await count(session_maker, Procedure, Procedure.workspace_id == workspace.id) == 3
    assert await count(session_maker, Collaborator, Collaborator.workspace_id == workspace.id) == 2
    assert await count(session_maker, Patient, Patient.workspace_id == workspace.id) == 3


async def test_signup_then_login(client):
    await client.post("/api/v1/auth/signup", json=SIGNUP)

    response = await client.post(
        "/api/v1/auth/login", json={"email": "nova@clinica.com", "password": "segredo1"}
    )
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "ADMIN"
    assert response.json()["user"]["workspace_name"] == "Clinica Nova"
    assert settings.SESSION_COOKIE_NAME in response.headers["set-cookie"]


async def test_signup_duplicate_email_conflicts(client):
    assert (await client.post("/api/v1/auth/signup", json=SIGNUP)).status_code == 201

    again = await client.post("/api/v1/auth/signup", json={**SIGNUP, "email": "nova@clinica.com"})
    assert again.status_code == 409
    assert again.json() == {"error": "Email already registered"}


async def test_signup_validation_errors_are_400(client):
    response = await client.post("/api/v1/auth/signup", json={**SIGNUP, "password": "123"})
    assert response.status_code == 400
    assert "password" in response.json()["error"]

    missing = await client.post("/api/v1/auth/signup", json={"email": "x@y.com", "password": "segredo1"})
    assert missing.status_code == 400


async def test_signup_is_atomic(session_maker, monkeypatch):
    async def broken_workspace(self, owner, clinic_name):
        raise RuntimeError("storage unavailable")

    monkeypatch.setattr(AuthService, "_create_workspace", broken_workspace)

    async with session_maker() as session:
        with pytest.raises(RuntimeError):
            await AuthService(session, FakeTokenStore()).signup(SignupRequest(**SIGNUP))

    assert await count(session_maker, User) == 0
    assert await count(session_maker, Workspace) == 0


async def test_signup_survives_seed_failure(session_maker, monkeypatch):
    async def broken_seed(session, workspace_id):
        raise RuntimeError("seed failed")

    monkeypatch.setattr("clinihof.services.auth_service.seed_workspace_data", broken_seed)

    async with session_maker() as session:
        result = await AuthService(session, FakeTokenStore()).signup(SignupRequest(**SIGNUP))

    assert result.workspace_id is not None
    assert await count(session_maker, User) == 1
    assert await count(session_maker, Workspace) == 1
    assert await count(session_maker, Procedure) == 0


# ── Tests: login / logout / session ──────────────────────────────────

async def test_login_wrong_password(client, admin_account):
    response = await client.post(
        "/api/v1/auth/login", json={"email": "admin@clinica.com", "password": "errada"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


async def test_login_inactive_user(client, session_maker):
    user, _ = await create_account(session_maker, "inativo@clinica.com")
    async with session_maker() as session:
        stored = await session.get(User, user.id)
        stored.is_active = False
        session.add(stored)
        await session.commit()

    response = await client.post(
        "/api/v1/auth/login", json={"email": "inativo@clinica.com", "password": "secret123"}
    )
    assert response.status_code == 401


async def test_session_via_cookie(client, admin_account):
    response = await client.post(
        "/api/v1/auth/login", json={"email": "admin@clinica.com", "password": "secret123"}
    )
    assert response.status_code == 200

    session_info = await client.get("/api/v1/auth/session")
    assert session_info.status_code == 200
    body = session_info.json()
    assert body["user"]["email"] == "admin@clinica.com"
    assert body["workspace_name"] == "Clinica Teste"
    assert body["is_impersonating"] is False
    assert "token" not in body["user"]


async def test_unauthenticated_request(client):
    response = await client.get("/api/v1/auth/session")
    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


async def test_logout_revokes_token(client, admin_headers, token_store):
    assert (await client.get("/api/v1/auth/session", headers=admin_headers)).status_code == 200

    response = await client.post("/api/v1/auth/logout", headers=admin_headers)
    assert response.status_code == 200
    assert token_store.tokens == {}

    assert (await client.get("/api/v1/auth/session", headers=admin_headers)).status_code == 401


async def test_role_change_applies_immediately(client, session_maker, admin_account, admin_headers):
    user, _ = admin_account
    create = await client.post("/api/v1/patients/", json={"name": "Ana", "phone": "1"}, headers=admin_headers)
    assert create.status_code == 201

    async with session_maker() as session:
        stored = await session.get(User, user.id)
        stored.role = UserRole.RECEPTIONIST
        session.add(stored)
        await session.commit()

    blocked = await client.post("/api/v1/patients/", json={"name": "Bia", "phone": "2"}, headers=admin_headers)
    assert blocked.status_code == 403


async def test_request_id_echoed(client):
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "abc123"
    assert (await client.get("/")).headers["X-Request-ID"]
