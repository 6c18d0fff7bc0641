from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinihof.core.utils import utcnow
from clinihof.db.models import (
    Cost,
    CostCategory,
    CostInstallment,
    CostType,
    RecurrenceFrequency,
    RecurrenceType,
)
from clinihof.schemas.cost import CostCreate, CostStats, CostUpdate
from clinihof.services.recurrence_service import FREQUENCY_STEPS
from clinihof.services.workspace_service import TenantContext

# Fields that shape an installment plan; changing any of them rebuilds the schedule
INSTALLMENT_FIELDS = (
    "fixed_value",
    "is_recurring",
    "recurrence_frequency",
    "next_recurrence_date",
    "recurrence_type",
    "total_installments",
)


def validate_cost_fields(fields: dict) -> dict:
    """
    Check a complete set of cost fields and drop the ones that do not apply
    to its type, category or recurrence. Raises a 400 on invalid input.

    ``is_recurring`` set to None means the caller did not say; it is then
    inferred from the presence of a recurrence frequency. An explicit False
    switches recurrence off and clears the schedule.
    """
    if not (fields.get("description") or "").strip():
        raise HTTPException(status_code=400, detail="Description is required")

    cost_type = fields.get("cost_type")
    category = fields.get("category") or CostCategory.OPERATIONAL

    if category == CostCategory.CUSTOM and not fields.get("custom_category"):
        raise HTTPException(status_code=400, detail="Custom category name is required")

    if cost_type == CostType.FIXED:
        if not fields.get("fixed_value") or fields["fixed_value"] <= 0:
            raise HTTPException(status_code=400, detail="Fixed value must be greater than zero")
        fields["percentage"] = None
    elif cost_type == CostType.PERCENTAGE:
        percentage = fields.get("percentage")
        if not percentage or percentage <= 0 or percentage > 100:
            raise HTTPException(status_code=400, detail="Percentage must be between 0 and 100")
        fields["fixed_value"] = None
    else:
        raise HTTPException(status_code=400, detail="Cost type is required")

    if category == CostCategory.CARD:
        if not fields.get("card_operator"):
            raise HTTPException(status_code=400, detail="Card operator is required for card fees")
        if not fields.get("receiving_days") or fields["receiving_days"] <= 0:
            raise HTTPException(status_code=400, detail="Receiving days must be greater than zero")
    else:
        fields["card_operator"] = None
        fields["receiving_days"] = None

    if category != CostCategory.CUSTOM:
        fields["custom_category"] = None

    if fields.get("is_recurring") is None:
        fields["is_recurring"] = fields.get("recurrence_frequency") is not None

    recurrence_type = fields.get("recurrence_type") or RecurrenceType.INDEFINITE
    if fields["is_recurring"]:
        if cost_type != CostType.FIXED:
            raise HTTPException(status_code=400, detail="Only fixed costs can recur")
        if fields.get("recurrence_frequency") is None:
            raise HTTPException(status_code=400, detail="Recurrence frequency is required for recurring costs")
        if fields.get("next_recurrence_date") is None:
            raise HTTPException(status_code=400, detail="Next recurrence date is required for recurring costs")
        if recurrence_type == RecurrenceType.INSTALLMENTS:
            if not fields.get("total_installments") or fields["total_installments"] < 2:
                raise HTTPException(status_code=400, detail="Installment plans need at least 2 installments")
        else:
            fields["total_installments"] = None
    else:
        fields["recurrence_frequency"] = None
        fields["next_recurrence_date"] = None
        fields["total_installments"] = None
        recurrence_type = RecurrenceType.INDEFINITE

    fields["recurrence_type"] = recurrence_type
    fields["category"] = category
    return fields


def build_installments(cost: Cost) -> List[CostInstallment]:
    """Split an installment plan into dated rows, one step of its frequency apart."""
    total = cost.total_installments
    amount = round(cost.fixed_value / total, 2)
    step = FREQUENCY_STEPS[RecurrenceFrequency(cost.recurrence_frequency)]
    installments = []
    for number in range(1, total + 1):
        installments.append(CostInstallment(
            cost_id=cost.id,
            installment_number=number,
            # Rounding leftovers go to the last installment
            amount=amount if number < total else round(cost.fixed_value - amount * (total - 1), 2),
            due_date=cost.next_recurrence_date + step * (number - 1),
        ))
    return installments


class CostService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_costs(self, ctx: TenantContext) -> List[Cost]:
        stmt = select(Cost).where(
            Cost.workspace_id == ctx.workspace_id,
            Cost.is_active == True,
        ).order_by(Cost.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_cost(self, ctx: TenantContext, cost_id: UUID) -> Cost:
        stmt = select(Cost).where(Cost.id == cost_id, Cost.workspace_id == ctx.workspace_id)
        result = await self.session.execute(stmt)
        cost = result.scalars().first()
        if not cost:
            raise HTTPException(status_code=404, detail="Cost not found")
        return cost

    async def list_installments(self, ctx: TenantContext, cost_id: UUID) -> List[CostInstallment]:
        await self.get_cost(ctx, cost_id)
        stmt = select(CostInstallment).where(
            CostInstallment.cost_id == cost_id
        ).order_by(CostInstallment.installment_number)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def create_cost(self, ctx: TenantContext, data: CostCreate) -> Cost:
        fields = data.model_dump()
        if "is_recurring" not in data.model_fields_set:
            fields["is_recurring"] = None
        fields = validate_cost_fields(fields)

        cost = Cost(workspace_id=ctx.workspace_id, **fields)
        self.session.add(cost)
        if cost.recurrence_type == RecurrenceType.INSTALLMENTS:
            await self.session.flush()
            self.session.add_all(build_installments(cost))
        await self.session.commit()
        await self.session.refresh(cost)
        return cost

    async def update_cost(self, ctx: TenantContext, cost_id: UUID, data: CostUpdate) -> Cost:
        cost = await self.get_cost(ctx, cost_id)
        before = {key: getattr(cost, key) for key in INSTALLMENT_FIELDS}

        fields = {key: getattr(cost, key) for key in CostUpdate.model_fields}
        fields.update(data.model_dump(exclude_unset=True))
        if "is_recurring" not in data.model_fields_set:
            # Re-derived from the (possibly cleared) frequency
            fields["is_recurring"] = None
        fields = validate_cost_fields(fields)

        for key, value in fields.items():
            setattr(cost, key, value)
        cost.updated_at = utcnow()
        self.session.add(cost)

        if any(getattr(cost, key) != before[key] for key in INSTALLMENT_FIELDS):
            await self.session.execute(delete(CostInstallment).where(CostInstallment.cost_id == cost.id))
            if cost.recurrence_type == RecurrenceType.INSTALLMENTS:
                self.session.add_all(build_installments(cost))

        await self.session.commit()
        await self.session.refresh(cost)
        return cost

    async def delete_cost(self, ctx: TenantContext, cost_id: UUID) -> None:
        cost = await self.get_cost(ctx, cost_id)
        cost.is_active = False
        cost.updated_at = utcnow()
        self.session.add(cost)
        await self.session.commit()

    async def get_stats(self, ctx: TenantContext) -> CostStats:
        costs = await self.list_costs(ctx)
        by_category: dict = {}
        total_fixed = 0.0
        total_percentage = 0.0

        for cost in costs:
            if cost.cost_type == CostType.FIXED:
                amount = cost.fixed_value or 0
                total_fixed += amount
                key = cost.custom_category if cost.category == CostCategory.CUSTOM else cost.category.value
                by_category[key] = by_category.get(key, 0) + amount
            else:
                total_percentage += cost.percentage or 0

        return CostStats(
            total_fixed=round(total_fixed, 2),
            total_percentage=round(total_percentage, 2),
            count=len(costs),
            by_category=by_category,
        )
