from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.procedure_session import SessionComplete, SessionResponse, SessionStats, SessionUpdate
from clinihof.services.session_service import ProcedureSessionService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

async def get_session_service(session: AsyncSession = Depends(get_session)) -> ProcedureSessionService:
    return ProcedureSessionService(session)

@router.get("/pending", response_model=List[SessionResponse])
async def read_pending_sessions(
    ctx: TenantContext = Depends(require_permission("agenda")),
    service: ProcedureSessionService = Depends(get_session_service)
):
    return await service.list_pending(ctx)

@router.get("/stats", response_model=SessionStats)
async def read_session_stats(
    ctx: TenantContext = Depends(require_permission("agenda")),
    service: ProcedureSessionService = Depends(get_session_service)
):
    return await service.stats(ctx)

@router.get("/{session_id}", response_model=SessionResponse)
async def read_session(
    session_id: UUID,
    ctx: TenantContext = Depends(require_permission("agenda")),
    service: ProcedureSessionService = Depends(get_session_service)
):
    return await service.get_session(ctx, session_id)

@router.patch("/{session_id}", response_model=SessionResponse)
async def update_session(
    session_id: UUID,
    payload: SessionUpdate,
    ctx: TenantContext = Depends(require_permission("agenda", write=True)),
    service: ProcedureSessionService = Depends(get_session_service)
):
    return await service.update_session(ctx, session_id, payload)

@router.post("/{session_id}/complete", response_model=SessionResponse)
async def complete_session(
    session_id: UUID,
    payload: SessionComplete,
    ctx: TenantContext = Depends(require_permission("agenda", write=True)),
    service: ProcedureSessionService = Depends(get_session_service)
):
    return await service.complete_session(ctx, session_id, payload)
