"""
Cost validation rules and the costs API.
"""

from datetime import date, timezone
from uuid import uuid4

import pytest
from fastapi import HTTPException

from clinihof.db.models import Cost, CostCategory, CostType, RecurrenceFrequency, RecurrenceType
from clinihof.schemas.cost import CostResponse
from clinihof.services.cost_service import validate_cost_fields


def fixed(**overrides):
    fields = dict(description="Aluguel", cost_type=CostType.FIXED, category=CostCategory.OPERATIONAL, fixed_value=1000.0)
    fields.update(overrides)
    return fields


def rejected(fields):
    with pytest.raises(HTTPException) as exc:
        validate_cost_fields(fields)
    assert exc.value.status_code == 400
    return exc.value.detail


# ── Tests: validate_cost_fields ──────────────────────────────────────

def test_fixed_cost_ok():
    fields = validate_cost_fields(fixed(percentage=10))
    assert fields["fixed_value"] == 1000.0
    assert fields["percentage"] is None
    assert fields["recurrence_frequency"] is None


def test_description_required():
    assert rejected(fixed(description="  ")) == "Description is required"


def test_fixed_value_must_be_positive():
    rejected(fixed(fixed_value=0))
    rejected(fixed(fixed_value=None))


def test_percentage_bounds():
    base = dict(description="Imposto", cost_type=CostType.PERCENTAGE, category=CostCategory.TAX)
    rejected({**base, "percentage": 0})
    rejected({**base, "percentage": 120})
    fields = validate_cost_fields({**base, "percentage": 6, "fixed_value": 99})
    assert fields["percentage"] == 6
    assert fields["fixed_value"] is None


def test_custom_category_needs_name():
    rejected(fixed(category=CostCategory.CUSTOM))
    fields = validate_cost_fields(fixed(category=CostCategory.CUSTOM, custom_category="Marketing"))
    assert fields["custom_category"] == "Marketing"


def test_custom_name_dropped_for_other_categories():
    assert validate_cost_fields(fixed(custom_category="Marketing"))["custom_category"] is None


def test_card_fee_requires_operator_and_days():
    base = dict(description="Taxa cartao", cost_type=CostType.PERCENTAGE, category=CostCategory.CARD, percentage=3.5)
    rejected(base)
    rejected({**base, "card_operator": "Stone"})
    fields = validate_cost_fields({**base, "card_operator": "Stone", "receiving_days": 30})
    assert fields["receiving_days"] == 30


def test_frequency_implies_recurring():
    fields = validate_cost_fields(fixed(
        recurrence_frequency=RecurrenceFrequency.MONTHLY, next_recurrence_date=date(2024, 5, 1)
    ))
    assert fields["is_recurring"] is True


def test_recurring_needs_next_date():
    assert "Next recurrence date" in rejected(fixed(recurrence_frequency=RecurrenceFrequency.MONTHLY))


def test_recurring_needs_frequency():
    detail = rejected(fixed(is_recurring=True, next_recurrence_date=date(2024, 5, 1)))
    assert detail == "Recurrence frequency is required for recurring costs"
    assert "frequency" in rejected(fixed(is_recurring=True))


def test_explicit_false_clears_schedule():
    fields = validate_cost_fields(fixed(
        is_recurring=False,
        recurrence_frequency=RecurrenceFrequency.MONTHLY,
        next_recurrence_date=date(2024, 5, 1),
    ))
    assert fields["is_recurring"] is False
    assert fields["recurrence_frequency"] is None
    assert fields["next_recurrence_date"] is None


def test_installment_plan_needs_two_installments():
    plan = fixed(
        recurrence_frequency=RecurrenceFrequency.MONTHLY,
        next_recurrence_date=date(2024, 5, 1),
        recurrence_type=RecurrenceType.INSTALLMENTS,
    )
    rejected(plan)
    rejected({**plan, "total_installments": 1})
    assert validate_cost_fields({**plan, "total_installments": 2})["total_installments"] == 2


def test_indefinite_recurrence_drops_installment_count():
    fields = validate_cost_fields(fixed(
        recurrence_frequency=RecurrenceFrequency.MONTHLY,
        next_recurrence_date=date(2024, 5, 1),
        total_installments=6,
    ))
    assert fields["recurrence_type"] == RecurrenceType.INDEFINITE
    assert fields["total_installments"] is None


def test_only_fixed_costs_recur():
    rejected(dict(
        description="Imposto",
        cost_type=CostType.PERCENTAGE,
        percentage=5,
        recurrence_frequency=RecurrenceFrequency.MONTHLY,
        next_recurrence_date=date(2024, 5, 1),
    ))


def test_type_required():
    assert rejected({"description": "Sem tipo"}) == "Cost type is required"


def test_response_reads_cost_rows():
    cost = Cost(workspace_id=uuid4(), **validate_cost_fields(fixed()))
    response = CostResponse.model_validate(cost)
    assert response.id == cost.id
    assert response.fixed_value == 1000.0
    assert response.created_at.tzinfo == timezone.utc
    assert response.created_at <= cost.updated_at


# ── Tests: API ───────────────────────────────────────────────────────

async def test_cost_crud(client, admin_headers):
    created = await client.post("/api/v1/costs/", json={
        "description": "Aluguel",
        "cost_type": "FIXED",
        "fixed_value": 3500,
        "recurrence_frequency": "MONTHLY",
        "next_recurrence_date": "2024-05-10",
    }, headers=admin_headers)
    assert created.status_code == 201, created.text
    cost = created.json()
    assert cost["is_recurring"] is True
    assert cost["source_cost_id"] is None

    updated = await client.patch(f"/api/v1/costs/{cost['id']}", json={"fixed_value": 3800}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["fixed_value"] == 3800
    assert updated.json()["recurrence_frequency"] == "MONTHLY"

    stopped = await client.patch(f"/api/v1/costs/{cost['id']}", json={
        "is_recurring": False, "recurrence_frequency": None,
    }, headers=admin_headers)
    assert stopped.json()["next_recurrence_date"] is None

    assert (await client.delete(f"/api/v1/costs/{cost['id']}", headers=admin_headers)).status_code == 204
    assert (await client.get("/api/v1/costs/", headers=admin_headers)).json() == []


async def test_invalid_cost_rejected(client, admin_headers):
    response = await client.post("/api/v1/costs/", json={
        "description": "Taxa", "cost_type": "PERCENTAGE", "percentage": 150,
    }, headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Percentage must be between 0 and 100"}


async def test_cost_stats(client, admin_headers):
    for payload in (
        {"description": "Aluguel", "cost_type": "FIXED", "fixed_value": 2000},
        {"description": "Agua", "cost_type": "FIXED", "fixed_value": 150.5},
        {"description": "Ads", "cost_type": "FIXED", "fixed_value": 300, "category": "CUSTOM", "custom_category": "Marketing"},
        {"description": "Simples", "cost_type": "PERCENTAGE", "percentage": 6, "category": "TAX"},
    ):
        assert (await client.post("/api/v1/costs/", json=payload, headers=admin_headers)).status_code == 201

    stats = (await client.get("/api/v1/costs/stats", headers=admin_headers)).json()
    assert stats["total_fixed"] == 2450.5
    assert stats["total_percentage"] == 6
    assert stats["count"] == 4
    assert stats["by_category"] == {"OPERATIONAL": 2150.5, "Marketing": 300}


async def test_recurring_cost_without_frequency_rejected(client, admin_headers):
    response = await client.post("/api/v1/costs/", json={
        "description": "Aluguel",
        "cost_type": "FIXED",
        "fixed_value": 3500,
        "is_recurring": True,
        "next_recurrence_date": "2024-05-10",
    }, headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Recurrence frequency is required for recurring costs"}


async def test_switching_recurrence_off_stops_replication(client, admin_headers):
    created = await client.post("/api/v1/costs/", json={
        "description": "Aluguel",
        "cost_type": "FIXED",
        "fixed_value": 3500,
        "recurrence_frequency": "MONTHLY",
        "next_recurrence_date": "2024-01-10",
    }, headers=admin_headers)
    cost = created.json()
    assert cost["is_recurring"] is True

    stopped = await client.patch(f"/api/v1/costs/{cost['id']}", json={"is_recurring": False}, headers=admin_headers)
    assert stopped.status_code == 200, stopped.text
    assert stopped.json()["is_recurring"] is False
    assert stopped.json()["recurrence_frequency"] is None
    assert stopped.json()["next_recurrence_date"] is None

    processed = await client.post("/api/v1/costs/recurrence/process", headers=admin_headers)
    assert processed.status_code == 200
    assert processed.json()["processed_count"] == 0


async def test_patch_without_is_recurring_keeps_recurrence(client, admin_headers):
    created = await client.post("/api/v1/costs/", json={
        "description": "Aluguel",
        "cost_type": "FIXED",
        "fixed_value": 3500,
        "recurrence_frequency": "MONTHLY",
        "next_recurrence_date": "2024-01-10",
    }, headers=admin_headers)
    cost = created.json()

    renamed = await client.patch(f"/api/v1/costs/{cost['id']}", json={"description": "Aluguel sala 2"}, headers=admin_headers)
    assert renamed.json()["is_recurring"] is True
    assert renamed.json()["recurrence_frequency"] == "MONTHLY"


# ── Tests: installment plans ─────────────────────────────────────────

async def create_plan(client, headers, **overrides):
    payload = {
        "description": "Autoclave",
        "cost_type": "FIXED",
        "fixed_value": 1000,
        "recurrence_frequency": "MONTHLY",
        "next_recurrence_date": "2024-01-31",
        "recurrence_type": "INSTALLMENTS",
        "total_installments": 3,
    }
    payload.update(overrides)
    response = await client.post("/api/v1/costs/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_installment_plan_schedule(client, admin_headers):
    plan = await create_plan(client, admin_headers)
    assert plan["recurrence_type"] == "INSTALLMENTS"
    assert plan["total_installments"] == 3

    installments = (await client.get(f"/api/v1/costs/{plan['id']}/installments", headers=admin_headers)).json()
    assert [i["installment_number"] for i in installments] == [1, 2, 3]
    assert [i["amount"] for i in installments] == [333.33, 333.33, 333.34]
    assert [i["due_date"] for i in installments] == ["2024-01-31", "2024-02-29", "2024-03-31"]
    assert {i["status"] for i in installments} == {"PENDING"}


async def test_installment_plan_rebuilt_on_change(client, admin_headers):
    plan = await create_plan(client, admin_headers)
    await client.patch(f"/api/v1/costs/{plan['id']}", json={"total_installments": 2}, headers=admin_headers)

    installments = (await client.get(f"/api/v1/costs/{plan['id']}/installments", headers=admin_headers)).json()
    assert [i["amount"] for i in installments] == [500, 500]


async def test_installment_plan_is_not_replicated(client, admin_headers):
    await create_plan(client, admin_headers)
    processed = (await client.post("/api/v1/costs/recurrence/process", headers=admin_headers)).json()
    assert processed["processed_count"] == 0


async def test_installment_plan_requires_count(client, admin_headers):
    response = await client.post("/api/v1/costs/", json={
        "description": "Autoclave",
        "cost_type": "FIXED",
        "fixed_value": 1000,
        "recurrence_frequency": "MONTHLY",
        "next_recurrence_date": "2024-01-31",
        "recurrence_type": "INSTALLMENTS",
    }, headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Installment plans need at least 2 installments"}


# ── Tests: card fees ─────────────────────────────────────────────────

STONE_CREDIT = {
    "card_operator": "Stone",
    "card_type": "CREDIT",
    "receiving_days": 30,
    "installments": [{"count": 1, "fee_percentage": 3.2}, {"count": 2, "fee_percentage": 4.1}],
}


async def test_card_fee_group_lifecycle(client, admin_headers):
    created = await client.post("/api/v1/costs/card-fees", json=STONE_CREDIT, headers=admin_headers)
    assert created.status_code == 201, created.text
    assert [r["installment_count"] for r in created.json()["rules"]] == [1, 2]

    overview = (await client.get("/api/v1/costs/card-fees", headers=admin_headers)).json()
    assert len(overview["rules"]) == 2
    assert overview["card_costs"] == []

    replaced = await client.patch("/api/v1/costs/card-fees/group", json={
        **STONE_CREDIT, "installments": [{"count": 1, "fee_percentage": 2.9}],
    }, headers=admin_headers)
    assert replaced.status_code == 200
    overview = (await client.get("/api/v1/costs/card-fees", headers=admin_headers)).json()
    assert [(r["installment_count"], r["fee_percentage"]) for r in overview["rules"]] == [(1, 2.9)]

    deleted = await client.delete(
        "/api/v1/costs/card-fees/group", params={"operator": "Stone", "type": "CREDIT"}, headers=admin_headers
    )
    assert deleted.status_code == 204
    assert (await client.get("/api/v1/costs/card-fees", headers=admin_headers)).json()["rules"] == []

    again = await client.delete(
        "/api/v1/costs/card-fees/group", params={"operator": "Stone", "type": "CREDIT"}, headers=admin_headers
    )
    assert again.status_code == 404


async def test_card_fee_conflicts(client, admin_headers):
    assert (await client.post("/api/v1/costs/card-fees", json=STONE_CREDIT, headers=admin_headers)).status_code == 201

    clash = await client.post("/api/v1/costs/card-fees", json={
        **STONE_CREDIT, "installments": [{"count": 2, "fee_percentage": 5}],
    }, headers=admin_headers)
    assert clash.status_code == 409

    repeated = await client.post("/api/v1/costs/card-fees", json={
        **STONE_CREDIT, "card_type": "DEBIT", "installments": [{"count": 1, "fee_percentage": 1}] * 2,
    }, headers=admin_headers)
    assert repeated.status_code == 400
    assert repeated.json() == {"error": "Installment counts must be unique"}


async def test_card_costs_listed_with_fees(client, admin_headers):
    await client.post("/api/v1/costs/", json={
        "description": "Taxa Stone",
        "cost_type": "PERCENTAGE",
        "percentage": 3.5,
        "category": "CARD",
        "card_operator": "Stone",
        "receiving_days": 30,
    }, headers=admin_headers)
    overview = (await client.get("/api/v1/costs/card-fees", headers=admin_headers)).json()
    assert [c["description"] for c in overview["card_costs"]] == ["Taxa Stone"]
