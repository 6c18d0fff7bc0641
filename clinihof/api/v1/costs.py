from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.models import CardType
from clinihof.db.session import get_session
from clinihof.schemas.card_fee import CardFeeGroupCreate, CardFeeGroupResult, CardFeeOverview
from clinihof.schemas.cost import (
    CostCreate,
    CostInstallmentResponse,
    CostResponse,
    CostStats,
    CostUpdate,
    RecurrencePending,
    RecurrenceProcessResult,
)
from clinihof.services.card_fee_service import CardFeeService
from clinihof.services.cost_service import CostService
from clinihof.services.recurrence_service import RecurrenceService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

async def get_cost_service(session: AsyncSession = Depends(get_session)) -> CostService:
    return CostService(session)

async def get_recurrence_service(session: AsyncSession = Depends(get_session)) -> RecurrenceService:
    return RecurrenceService(session)

async def get_card_fee_service(session: AsyncSession = Depends(get_session)) -> CardFeeService:
    return CardFeeService(session)

@router.get("/", response_model=List[CostResponse])
async def read_costs(
    ctx: TenantContext = Depends(require_permission("costs")),
    service: CostService = Depends(get_cost_service)
):
    return await service.list_costs(ctx)

@router.post("/", response_model=CostResponse, status_code=status.HTTP_201_CREATED)
async def create_cost(
    payload: CostCreate,
    ctx: TenantContext = Depends(require_permission("costs", write=True)),
    service: CostService = Depends(get_cost_service)
):
    return await service.create_cost(ctx, payload)

@router.get("/stats", response_model=CostStats)
async def read_cost_stats(
    ctx: TenantContext = Depends(require_permission("costs")),
    service: CostService = Depends(get_cost_service)
):
    return await service.get_stats(ctx)

@router.get("/recurrence/pending", response_model=RecurrencePending)
async def read_pending_recurrences(
    ctx: TenantContext = Depends(require_permission("costs")),
    service: RecurrenceService = Depends(get_recurrence_service)
):
    return await service.get_pending(ctx)

@router.post("/recurrence/process", response_model=RecurrenceProcessResult)
async def process_recurrences(
    ctx: TenantContext = Depends(require_permission("costs", write=True)),
    service: RecurrenceService = Depends(get_recurrence_service)
):
    return await service.process(ctx)

@router.get("/card-fees", response_model=CardFeeOverview)
async def read_card_fees(
    ctx: TenantContext = Depends(require_permission("costs")),
    service: CardFeeService = Depends(get_card_fee_service)
):
    return await service.overview(ctx)

@router.post("/card-fees", response_model=CardFeeGroupResult, status_code=status.HTTP_201_CREATED)
async def create_card_fees(
    payload: CardFeeGroupCreate,
    ctx: TenantContext = Depends(require_permission("costs", write=True)),
    service: CardFeeService = Depends(get_card_fee_service)
):
    return await service.create_group(ctx, payload)

@router.patch("/card-fees/group", response_model=CardFeeGroupResult)
async def replace_card_fee_group(
    payload: CardFeeGroupCreate,
    ctx: TenantContext = Depends(require_permission("costs", write=True)),
    service: CardFeeService = Depends(get_card_fee_service)
):
    return await service.replace_group(ctx, payload)

@router.delete("/card-fees/group", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card_fee_group(
    operator: str = Query(..., min_length=1),
    card_type: CardType = Query(..., alias="type"),
    ctx: TenantContext = Depends(require_permission("costs", write=True)),
    service: CardFeeService = Depends(get_card_fee_service)
):
    await service.delete_group(ctx, operator, card_type)

@router.get("/{cost_id}", response_model=CostResponse)
async def read_cost(
    cost_id: UUID,
    ctx: TenantContext = Depends(require_permission("costs")),
    service: CostService = Depends(get_cost_service)
):
    return await service.get_cost(ctx, cost_id)

@router.get("/{cost_id}/installments", response_model=List[CostInstallmentResponse])
async def read_cost_installments(
    cost_id: UUID,
    ctx: TenantContext = Depends(require_permission("costs")),
    service: CostService = Depends(get_cost_service)
):
    return await service.list_installments(ctx, cost_id)

@router.patch("/{cost_id}", response_model=CostResponse)
async def update_cost(
    cost_id: UUID,
    payload: CostUpdate,
    ctx: TenantContext = Depends(require_permission("costs", write=True)),
    service: CostService = Depends(get_cost_service)
):
    return await service.update_cost(ctx, cost_id, payload)

@router.delete("/{cost_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cost(
    cost_id: UUID,
    ctx: TenantContext = Depends(require_permission("costs", write=True)),
    service: CostService = Depends(get_cost_service)
):
    await service.delete_cost(ctx, cost_id)
