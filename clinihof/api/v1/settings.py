from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.workspace import WorkspaceResponse, WorkspaceSettingsUpdate
from clinihof.services.workspace_service import TenantContext, WorkspaceService

router = APIRouter()

@router.get("/", response_model=WorkspaceResponse)
async def read_settings(ctx: TenantContext = Depends(require_permission("settings"))):
    return ctx.workspace

@router.patch("/", response_model=WorkspaceResponse)
async def update_settings(
    payload: WorkspaceSettingsUpdate,
    ctx: TenantContext = Depends(require_permission("settings", write=True)),
    session: AsyncSession = Depends(get_session)
):
    service = WorkspaceService(session)
    return await service.update_settings(ctx, payload)
