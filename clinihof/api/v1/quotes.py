from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.models import QuoteStatus
from clinihof.db.session import get_session
from clinihof.schemas.quote import (
    QuoteConvert,
    QuoteConvertResult,
    QuoteCreate,
    QuoteResponse,
    QuoteStats,
    QuoteUpdate,
)
from clinihof.services.quote_service import QuoteService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

async def get_quote_service(session: AsyncSession = Depends(get_session)) -> QuoteService:
    return QuoteService(session)

@router.get("/", response_model=List[QuoteResponse])
async def read_quotes(
    status_filter: Optional[QuoteStatus] = Query(default=None, alias="status"),
    ctx: TenantContext = Depends(require_permission("quotes")),
    service: QuoteService = Depends(get_quote_service)
):
    return await service.list_quotes(ctx, status_filter)

@router.post("/", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
async def create_quote(
    payload: QuoteCreate,
    ctx: TenantContext = Depends(require_permission("quotes", write=True)),
    service: QuoteService = Depends(get_quote_service)
):
    return await service.create_quote(ctx, payload)

@router.get("/stats", response_model=QuoteStats)
async def read_quote_stats(
    ctx: TenantContext = Depends(require_permission("quotes")),
    service: QuoteService = Depends(get_quote_service)
):
    return await service.get_stats(ctx)

@router.get("/{quote_id}", response_model=QuoteResponse)
async def read_quote(
    quote_id: UUID,
    ctx: TenantContext = Depends(require_permission("quotes")),
    service: QuoteService = Depends(get_quote_service)
):
    return await service.get_quote(ctx, quote_id)

@router.patch("/{quote_id}", response_model=QuoteResponse)
async def update_quote(
    quote_id: UUID,
    payload: QuoteUpdate,
    ctx: TenantContext = Depends(require_permission("quotes", write=True)),
    service: QuoteService = Depends(get_quote_service)
):
    return await service.update_quote(ctx, quote_id, payload)

@router.delete("/{quote_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quote(
    quote_id: UUID,
    ctx: TenantContext = Depends(require_permission("quotes", write=True)),
    service: QuoteService = Depends(get_quote_service)
):
    await service.delete_quote(ctx, quote_id)

@router.post("/{quote_id}/convert", response_model=QuoteConvertResult, status_code=status.HTTP_201_CREATED)
async def convert_quote(
    quote_id: UUID,
    payload: Optional[QuoteConvert] = None,
    ctx: TenantContext = Depends(require_permission("quotes", write=True)),
    service: QuoteService = Depends(get_quote_service)
):
    return await service.convert_to_sale(ctx, quote_id, payload or QuoteConvert())
