from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.commission import CommissionReport
from clinihof.services.commission_service import CommissionService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

@router.get("/", response_model=CommissionReport)
async def read_commissions(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    seller_id: Optional[UUID] = None,
    ctx: TenantContext = Depends(require_permission("commissions")),
    session: AsyncSession = Depends(get_session)
):
    service = CommissionService(session)
    return await service.report(ctx, start_date, end_date, seller_id)
