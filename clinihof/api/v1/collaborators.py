from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.collaborator import (
    CollaboratorCreate,
    CollaboratorResponse,
    CollaboratorStats,
    CollaboratorUpdate,
)
from clinihof.services.collaborator_service import CollaboratorService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

async def get_collaborator_service(session: AsyncSession = Depends(get_session)) -> CollaboratorService:
    return CollaboratorService(session)

@router.get("/", response_model=List[CollaboratorResponse])
async def read_collaborators(
    search: Optional[str] = None,
    include_inactive: bool = False,
    ctx: TenantContext = Depends(require_permission("collaborators")),
    service: CollaboratorService = Depends(get_collaborator_service)
):
    collaborators = await service.list_collaborators(ctx, search, include_inactive)
    return [CollaboratorResponse.model_validate(c) for c in collaborators]

@router.post("/", response_model=CollaboratorResponse, status_code=status.HTTP_201_CREATED)
async def create_collaborator(
    payload: CollaboratorCreate,
    ctx: TenantContext = Depends(require_permission("collaborators", write=True)),
    service: CollaboratorService = Depends(get_collaborator_service)
):
    collaborator = await service.create_collaborator(ctx, payload)
    return CollaboratorResponse.model_validate(collaborator)

@router.get("/stats", response_model=CollaboratorStats)
async def read_collaborator_stats(
    ctx: TenantContext = Depends(require_permission("collaborators")),
    service: CollaboratorService = Depends(get_collaborator_service)
):
    return await service.get_stats(ctx)

@router.get("/{collaborator_id}", response_model=CollaboratorResponse)
async def read_collaborator(
    collaborator_id: UUID,
    ctx: TenantContext = Depends(require_permission("collaborators")),
    service: CollaboratorService = Depends(get_collaborator_service)
):
    collaborator = await service.get_collaborator(ctx, collaborator_id)
    return CollaboratorResponse.model_validate(collaborator)

@router.put("/{collaborator_id}", response_model=CollaboratorResponse)
async def update_collaborator(
    collaborator_id: UUID,
    payload: CollaboratorUpdate,
    ctx: TenantContext = Depends(require_permission("collaborators", write=True)),
    service: CollaboratorService = Depends(get_collaborator_service)
):
    collaborator = await service.update_collaborator(ctx, collaborator_id, payload)
    return CollaboratorResponse.model_validate(collaborator)

@router.delete("/{collaborator_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_collaborator(
    collaborator_id: UUID,
    ctx: TenantContext = Depends(require_permission("collaborators", write=True)),
    service: CollaboratorService = Depends(get_collaborator_service)
):
    await service.deactivate_collaborator(ctx, collaborator_id)
