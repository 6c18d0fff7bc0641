from datetime import date

from sqlmodel import select

from clinihof.db.models import (
    Cost,
    CostInstallment,
    CostType,
    Package,
    PackageItem,
    Patient,
    Procedure,
    Quote,
    QuoteItem,
    UserRole,
    Workspace,
)

from tests.helpers import create_account, login


async def master_headers(client, session_maker):
    await create_account(session_maker, "master@hof.com", role=UserRole.MASTER, workspace_name="HOF")
    return await login(client, "master@hof.com")


async def test_console_requires_master(client, admin_headers):
    for path in ("/api/v1/master/stats", "/api/v1/master/workspaces", "/api/v1/master/users"):
        response = await client.get(path, headers=admin_headers)
        assert response.status_code == 403
        assert response.json() == {"error": "Master access required"}


async def test_stats_and_listing(client, session_maker):
    headers = await master_headers(client, session_maker)
    _, alpha = await create_account(session_maker, "alpha@clinica.com", workspace_name="Alpha Estetica")
    await create_account(session_maker, "beta@clinica.com", workspace_name="Beta Derma")
    async with session_maker() as session:
        session.add(Patient(workspace_id=alpha.id, name="Ana", phone="1"))
        await session.commit()

    stats = (await client.get("/api/v1/master/stats", headers=headers)).json()
    assert stats["total_workspaces"] == 3
    assert stats["active_workspaces"] == 3
    assert stats["total_users"] == 3
    assert stats["total_patients"] == 1

    listing = (await client.get(
        "/api/v1/master/workspaces", params={"search": "alpha", "limit": 5}, headers=headers
    )).json()
    assert [w["name"] for w in listing["workspaces"]] == ["Alpha Estetica"]
    assert listing["workspaces"][0]["owner"]["email"] == "alpha@clinica.com"
    assert listing["pagination"] == {"page": 1, "limit": 5, "total": 1, "total_pages": 1}

    detail = (await client.get(f"/api/v1/master/workspaces/{alpha.id}", headers=headers)).json()
    assert detail["metrics"]["patients"] == 1


async def test_suspend_workspace_and_filter(client, session_maker):
    headers = await master_headers(client, session_maker)
    _, alpha = await create_account(session_maker, "alpha@clinica.com", workspace_name="Alpha")

    invalid = await client.patch(f"/api/v1/master/workspaces/{alpha.id}", json={"plan": "galactic"}, headers=headers)
    assert invalid.status_code == 400

    empty = await client.patch(f"/api/v1/master/workspaces/{alpha.id}", json={}, headers=headers)
    assert empty.status_code == 400

    suspended = await client.patch(
        f"/api/v1/master/workspaces/{alpha.id}", json={"status": "SUSPENDED"}, headers=headers
    )
    assert suspended.status_code == 200
    assert suspended.json()["status"] == "SUSPENDED"

    listing = (await client.get(
        "/api/v1/master/workspaces", params={"status": "SUSPENDED"}, headers=headers
    )).json()
    assert [w["id"] for w in listing["workspaces"]] == [str(alpha.id)]


async def test_change_user_role(client, session_maker):
    headers = await master_headers(client, session_maker)
    user, _ = await create_account(session_maker, "alpha@clinica.com", workspace_name="Alpha")

    response = await client.patch(f"/api/v1/master/users/{user.id}/role", json={"role": "MANAGER"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["role"] == "MANAGER"

    masters = (await client.get("/api/v1/master/users", params={"role": "MASTER"}, headers=headers)).json()
    assert [u["email"] for u in masters] == ["master@hof.com"]

    demote_self = await client.patch(
        f"/api/v1/master/users/{masters[0]['id']}/role", json={"role": "ADMIN"}, headers=headers
    )
    assert demote_self.status_code == 400


async def test_delete_workspace_removes_owned_rows(client, session_maker):
    headers = await master_headers(client, session_maker)
    _, alpha = await create_account(session_maker, "alpha@clinica.com", workspace_name="Alpha")
    async with session_maker() as session:
        patient = Patient(workspace_id=alpha.id, name="Ana", phone="1")
        procedure = Procedure(workspace_id=alpha.id, name="Botox", price=800)
        cost = Cost(workspace_id=alpha.id, description="Autoclave", cost_type=CostType.FIXED, fixed_value=900)
        package = Package(workspace_id=alpha.id, name="Combo", final_price=700)
        session.add_all([patient, procedure, cost, package])
        await session.flush()
        quote = Quote(workspace_id=alpha.id, patient_id=patient.id, title="Botox", final_amount=800)
        session.add(quote)
        await session.flush()
        session.add_all([
            QuoteItem(quote_id=quote.id, procedure_id=procedure.id, description="Botox", unit_price=800, total_price=800),
            PackageItem(package_id=package.id, procedure_id=procedure.id),
            CostInstallment(cost_id=cost.id, installment_number=1, amount=900, due_date=date(2024, 1, 10)),
        ])
        await session.commit()

    response = await client.delete(f"/api/v1/master/workspaces/{alpha.id}", headers=headers)
    assert response.status_code == 204

    async with session_maker() as session:
        for model in (Patient, Quote, QuoteItem, Package, PackageItem, Cost, CostInstallment):
            assert (await session.execute(select(model))).scalars().all() == []
        remaining = (await session.execute(select(Workspace))).scalars().all()
        assert [w.name for w in remaining] == ["HOF"]
