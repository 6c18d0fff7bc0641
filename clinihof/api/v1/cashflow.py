from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.cashflow import CashFlowReport
from clinihof.services.cashflow_service import CashFlowService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

@router.get("/", response_model=CashFlowReport)
async def read_cashflow(
    start_date: date,
    end_date: date,
    ctx: TenantContext = Depends(require_permission("cashflow")),
    session: AsyncSession = Depends(get_session)
):
    service = CashFlowService(session)
    return await service.report(ctx, start_date, end_date)
