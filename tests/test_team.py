from uuid import UUID

from clinihof.db.models import User, UserRole, Workspace

from tests.helpers import create_account, login


async def test_invite_member_with_generated_password(client, admin_headers):
    response = await client.post("/api/v1/team/", json={
        "name": "Recepcao", "email": "Recepcao@Clinica.com", "role": "RECEPTIONIST",
    }, headers=admin_headers)
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["user"]["email"] == "recepcao@clinica.com"
    assert body["user"]["role"] == "RECEPTIONIST"
    assert body["temporary_password"]

    member_headers = await login(client, "recepcao@clinica.com", body["temporary_password"])
    session_info = (await client.get("/api/v1/auth/session", headers=member_headers)).json()
    assert session_info["workspace_name"] == "Clinica Teste"

    team = (await client.get("/api/v1/team/", headers=admin_headers)).json()
    assert sorted(m["email"] for m in team) == ["admin@clinica.com", "recepcao@clinica.com"]


async def test_manager_cannot_invite_admin(client, session_maker, admin_account):
    _, workspace = admin_account
    await create_account(
        session_maker, "gerente@clinica.com", role=UserRole.MANAGER, owns_workspace=False, member_of=workspace.id
    )
    headers = await login(client, "gerente@clinica.com")

    denied = await client.post("/api/v1/team/", json={
        "name": "Chefe", "email": "chefe@clinica.com", "role": "ADMIN", "password": "secret123",
    }, headers=headers)
    assert denied.status_code == 403

    allowed = await client.post("/api/v1/team/", json={
        "name": "Atendente", "email": "atendente@clinica.com", "role": "USER", "password": "secret123",
    }, headers=headers)
    assert allowed.status_code == 201
    assert allowed.json()["temporary_password"] is None


async def test_duplicate_member_email(client, admin_headers):
    response = await client.post("/api/v1/team/", json={
        "name": "Outro", "email": "admin@clinica.com", "role": "USER",
    }, headers=admin_headers)
    assert response.status_code == 409


async def test_user_limit(client, session_maker, admin_account, admin_headers):
    _, workspace = admin_account
    async with session_maker() as session:
        stored = await session.get(Workspace, workspace.id)
        stored.max_users = 1
        session.add(stored)
        await session.commit()

    response = await client.post("/api/v1/team/", json={
        "name": "Extra", "email": "extra@clinica.com", "role": "USER",
    }, headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Workspace user limit reached"}


async def test_change_role_and_remove(client, session_maker, admin_headers):
    invited = (await client.post("/api/v1/team/", json={
        "name": "Equipe", "email": "equipe@clinica.com", "role": "USER", "password": "secret123",
    }, headers=admin_headers)).json()["user"]

    promoted = await client.patch(
        f"/api/v1/team/{invited['id']}/role", json={"role": "MANAGER"}, headers=admin_headers
    )
    assert promoted.status_code == 200
    assert promoted.json()["role"] == "MANAGER"

    to_master = await client.patch(
        f"/api/v1/team/{invited['id']}/role", json={"role": "MASTER"}, headers=admin_headers
    )
    assert to_master.status_code == 403

    removed = await client.delete(f"/api/v1/team/{invited['id']}", headers=admin_headers)
    assert removed.status_code == 204

    async with session_maker() as session:
        member = await session.get(User, UUID(invited["id"]))
        assert member.is_active is False
        assert member.workspace_id is None

    response = await client.post(
        "/api/v1/auth/login", json={"email": "equipe@clinica.com", "password": "secret123"}
    )
    assert response.status_code == 401


async def test_owner_cannot_be_removed(client, admin_account, admin_headers):
    user, _ = admin_account
    response = await client.delete(f"/api/v1/team/{user.id}", headers=admin_headers)
    assert response.status_code == 400


# ── Account ──────────────────────────────────────────────────────────

async def test_change_password(client, admin_headers):
    wrong = await client.put("/api/v1/account/password", json={
        "current_password": "errada", "new_password": "nova1234",
    }, headers=admin_headers)
    assert wrong.status_code == 400

    ok = await client.put("/api/v1/account/password", json={
        "current_password": "secret123", "new_password": "nova1234",
    }, headers=admin_headers)
    assert ok.status_code == 200

    assert await login(client, "admin@clinica.com", "nova1234")


async def test_update_profile_email_conflict(client, session_maker, admin_headers):
    await create_account(session_maker, "ocupado@clinica.com", workspace_name="Outra")

    conflict = await client.patch("/api/v1/account/profile", json={"email": "ocupado@clinica.com"}, headers=admin_headers)
    assert conflict.status_code == 409

    updated = await client.patch("/api/v1/account/profile", json={"name": "Dra. Admin"}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["name"] == "Dra. Admin"
