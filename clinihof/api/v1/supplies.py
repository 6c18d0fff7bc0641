from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.supply import SupplyCreate, SupplyResponse, SupplyStats, SupplyUpdate
from clinihof.services.supply_service import SupplyService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

async def get_supply_service(session: AsyncSession = Depends(get_session)) -> SupplyService:
    return SupplyService(session)

@router.get("/", response_model=List[SupplyResponse])
async def read_supplies(
    search: Optional[str] = None,
    ctx: TenantContext = Depends(require_permission("supplies")),
    service: SupplyService = Depends(get_supply_service)
):
    return await service.list_supplies(ctx, search)

@router.post("/", response_model=SupplyResponse, status_code=status.HTTP_201_CREATED)
async def create_supply(
    payload: SupplyCreate,
    ctx: TenantContext = Depends(require_permission("supplies", write=True)),
    service: SupplyService = Depends(get_supply_service)
):
    return await service.create_supply(ctx, payload)

@router.get("/stats", response_model=SupplyStats)
async def read_supply_stats(
    ctx: TenantContext = Depends(require_permission("supplies")),
    service: SupplyService = Depends(get_supply_service)
):
    return await service.get_stats(ctx)

@router.get("/{supply_id}", response_model=SupplyResponse)
async def read_supply(
    supply_id: UUID,
    ctx: TenantContext = Depends(require_permission("supplies")),
    service: SupplyService = Depends(get_supply_service)
):
    return await service.get_supply(ctx, supply_id)

@router.patch("/{supply_id}", response_model=SupplyResponse)
async def update_supply(
    supply_id: UUID,
    payload: SupplyUpdate,
    ctx: TenantContext = Depends(require_permission("supplies", write=True)),
    service: SupplyService = Depends(get_supply_service)
):
    return await service.update_supply(ctx, supply_id, payload)

@router.delete("/{supply_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_supply(
    supply_id: UUID,
    ctx: TenantContext = Depends(require_permission("supplies", write=True)),
    service: SupplyService = Depends(get_supply_service)
):
    await service.delete_supply(ctx, supply_id)
