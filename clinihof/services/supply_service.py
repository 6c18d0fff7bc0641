from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, or_, func

from clinihof.db.models import Supply
from clinihof.schemas.supply import SupplyCreate, SupplyStats, SupplyUpdate
from clinihof.services.workspace_service import TenantContext

class SupplyService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _ensure_unique(self, ctx: TenantContext, name: str, unit: str, exclude_id: Optional[UUID] = None) -> None:
        stmt = select(Supply).where(
            Supply.workspace_id == ctx.workspace_id,
            Supply.name == name,
            Supply.unit == unit,
        )
        if exclude_id:
            stmt = stmt.where(Supply.id != exclude_id)
        if (await self.session.execute(stmt)).scalars().first():
            raise HTTPException(status_code=409, detail="A supply with this name and unit already exists")

    async def list_supplies(self, ctx: TenantContext, search: Optional[str] = None) -> List[Supply]:
        stmt = select(Supply).where(Supply.workspace_id == ctx.workspace_id)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(or_(
                func.lower(Supply.name).like(pattern),
                func.lower(Supply.unit).like(pattern),
            ))
        result = await self.session.execute(stmt.order_by(Supply.name))
        return result.scalars().all()

    async def get_supply(self, ctx: TenantContext, supply_id: UUID) -> Supply:
        stmt = select(Supply).where(Supply.id == supply_id, Supply.workspace_id == ctx.workspace_id)
        result = await self.session.execute(stmt)
        supply = result.scalars().first()
        if not supply:
            raise HTTPException(status_code=404, detail="Supply not found")
        return supply

    async def create_supply(self, ctx: TenantContext, data: SupplyCreate) -> Supply:
        await self._ensure_unique(ctx, data.name, data.unit)
        supply = Supply(workspace_id=ctx.workspace_id, **data.model_dump())
        self.session.add(supply)
        await self.session.commit()
        await self.session.refresh(supply)
        return supply

    async def update_supply(self, ctx: TenantContext, supply_id: UUID, data: SupplyUpdate) -> Supply:
        supply = await self.get_supply(ctx, supply_id)
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in updates or "unit" in updates:
            await self._ensure_unique(
                ctx, updates.get("name", supply.name), updates.get("unit", supply.unit), exclude_id=supply.id
            )
        for key, value in updates.items():
            setattr(supply, key, value)
        self.session.add(supply)
        await self.session.commit()
        await self.session.refresh(supply)
        return supply

    async def delete_supply(self, ctx: TenantContext, supply_id: UUID) -> None:
        supply = await self.get_supply(ctx, supply_id)
        await self.session.delete(supply)
        await self.session.commit()

    async def get_stats(self, ctx: TenantContext) -> SupplyStats:
        supplies = await self.list_supplies(ctx)
        return SupplyStats(
            total_supplies=len(supplies),
            total_inventory_value=round(sum(s.cost_per_unit * s.stock_qty for s in supplies), 2),
            low_stock_items=sum(1 for s in supplies if s.stock_qty <= s.min_stock),
            out_of_stock_items=sum(1 for s in supplies if s.stock_qty == 0),
        )
