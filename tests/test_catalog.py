"""
Supplies inventory and procedure packages.
"""

from clinihof.db.models import UserRole

from tests.helpers import create_account, login


# ── Tests: supplies ──────────────────────────────────────────────────

async def test_supply_crud(client, admin_headers):
    created = await client.post("/api/v1/supplies/", json={
        "name": "Toxina botulinica", "unit": "un", "cost_per_unit": 450, "stock_qty": 4, "min_stock": 2,
    }, headers=admin_headers)
    assert created.status_code == 201, created.text
    supply = created.json()

    updated = await client.patch(f"/api/v1/supplies/{supply['id']}", json={"stock_qty": 1}, headers=admin_headers)
    assert updated.json()["stock_qty"] == 1

    found = (await client.get("/api/v1/supplies/", params={"search": "TOXINA"}, headers=admin_headers)).json()
    assert [s["id"] for s in found] == [supply["id"]]

    assert (await client.delete(f"/api/v1/supplies/{supply['id']}", headers=admin_headers)).status_code == 204
    assert (await client.get(f"/api/v1/supplies/{supply['id']}", headers=admin_headers)).status_code == 404


async def test_supply_name_and_unit_unique(client, admin_headers):
    payload = {"name": "Acido hialuronico", "unit": "ml", "cost_per_unit": 90}
    assert (await client.post("/api/v1/supplies/", json=payload, headers=admin_headers)).status_code == 201

    duplicate = await client.post("/api/v1/supplies/", json=payload, headers=admin_headers)
    assert duplicate.status_code == 409

    other_unit = await client.post("/api/v1/supplies/", json={**payload, "unit": "un"}, headers=admin_headers)
    assert other_unit.status_code == 201

    renamed = await client.patch(
        f"/api/v1/supplies/{other_unit.json()['id']}", json={"unit": "ml"}, headers=admin_headers
    )
    assert renamed.status_code == 409


async def test_supply_stats(client, admin_headers):
    for payload in (
        {"name": "Luva", "unit": "un", "cost_per_unit": 0.5, "stock_qty": 200, "min_stock": 50},
        {"name": "Gaze", "unit": "un", "cost_per_unit": 0.2, "stock_qty": 10, "min_stock": 20},
        {"name": "Fio PDO", "unit": "un", "cost_per_unit": 30, "stock_qty": 0, "min_stock": 5},
    ):
        await client.post("/api/v1/supplies/", json=payload, headers=admin_headers)

    stats = (await client.get("/api/v1/supplies/stats", headers=admin_headers)).json()
    assert stats == {
        "total_supplies": 3,
        "total_inventory_value": 102,
        "low_stock_items": 2,
        "out_of_stock_items": 1,
    }


async def test_receptionist_cannot_edit_supplies(client, session_maker, admin_account):
    _, workspace = admin_account
    await create_account(
        session_maker, "recepcao@clinica.com", role=UserRole.RECEPTIONIST, owns_workspace=False, member_of=workspace.id
    )
    headers = await login(client, "recepcao@clinica.com")

    assert (await client.get("/api/v1/supplies/", headers=headers)).status_code == 200
    response = await client.post("/api/v1/supplies/", json={"name": "Luva", "unit": "un"}, headers=headers)
    assert response.status_code == 403


# ── Tests: packages ──────────────────────────────────────────────────

async def procedure(client, headers, name, price):
    response = await client.post("/api/v1/procedures/", json={"name": name, "price": price}, headers=headers)
    return response.json()


async def test_package_crud(client, admin_headers):
    botox = await procedure(client, admin_headers, "Botox", 800)
    peeling = await procedure(client, admin_headers, "Peeling", 250)

    created = await client.post("/api/v1/packages/", json={
        "name": "Combo rejuvenescimento",
        "final_price": 1200,
        "discount_percent": 10,
        "items": [{"procedure_id": botox["id"]}, {"procedure_id": peeling["id"], "quantity": 2}],
    }, headers=admin_headers)
    assert created.status_code == 201, created.text
    package = created.json()
    assert package["total_value"] == 1300
    assert [(i["procedure_name"], i["quantity"]) for i in package["items"]] == [("Botox", 1), ("Peeling", 2)]

    updated = await client.patch(f"/api/v1/packages/{package['id']}", json={
        "final_price": 700, "items": [{"procedure_id": botox["id"]}],
    }, headers=admin_headers)
    assert updated.json()["final_price"] == 700
    assert [i["procedure_name"] for i in updated.json()["items"]] == ["Botox"]

    blocked = await client.delete(f"/api/v1/procedures/{botox['id']}", headers=admin_headers)
    assert blocked.status_code == 409

    assert (await client.delete(f"/api/v1/packages/{package['id']}", headers=admin_headers)).status_code == 204
    assert (await client.get("/api/v1/packages/", headers=admin_headers)).json() == []

    # Once the package is retired the procedure is free again
    assert (await client.delete(f"/api/v1/procedures/{botox['id']}", headers=admin_headers)).status_code == 204


async def test_package_needs_known_procedures(client, session_maker, admin_headers):
    await create_account(session_maker, "outra@clinica.com", workspace_name="Outra")
    other_headers = await login(client, "outra@clinica.com")
    foreign = await procedure(client, other_headers, "Laser", 500)

    response = await client.post("/api/v1/packages/", json={
        "name": "Laser", "final_price": 400, "items": [{"procedure_id": foreign["id"]}],
    }, headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "One or more procedures not found"}

    empty = await client.post("/api/v1/packages/", json={
        "name": "Vazio", "final_price": 100, "items": [],
    }, headers=admin_headers)
    assert empty.status_code == 400
