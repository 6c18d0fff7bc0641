from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.sale import DashboardStats, SaleCreate, SaleResponse
from clinihof.services.sale_service import SaleService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

async def get_sale_service(session: AsyncSession = Depends(get_session)) -> SaleService:
    return SaleService(session)

@router.get("/", response_model=List[SaleResponse])
async def read_sales(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    ctx: TenantContext = Depends(require_permission("sales")),
    service: SaleService = Depends(get_sale_service)
):
    return await service.list_sales(ctx, start_date, end_date)

@router.post("/", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(
    payload: SaleCreate,
    ctx: TenantContext = Depends(require_permission("sales", write=True)),
    service: SaleService = Depends(get_sale_service)
):
    return await service.create_sale(ctx, payload)

@router.get("/{sale_id}", response_model=SaleResponse)
async def read_sale(
    sale_id: UUID,
    ctx: TenantContext = Depends(require_permission("sales")),
    service: SaleService = Depends(get_sale_service)
):
    return await service.get_sale(ctx, sale_id)

@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sale(
    sale_id: UUID,
    ctx: TenantContext = Depends(require_permission("sales", write=True)),
    service: SaleService = Depends(get_sale_service)
):
    await service.delete_sale(ctx, sale_id)

dashboard_router = APIRouter()

@dashboard_router.get("/dashboard", response_model=DashboardStats)
async def read_dashboard(
    ctx: TenantContext = Depends(require_permission("dashboard")),
    service: SaleService = Depends(get_sale_service)
):
    return await service.dashboard(ctx)
