from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.procedure import ProcedureCreate, ProcedureResponse, ProcedureUpdate
from clinihof.services.procedure_service import ProcedureService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

async def get_procedure_service(session: AsyncSession = Depends(get_session)) -> ProcedureService:
    return ProcedureService(session)

@router.get("/", response_model=List[ProcedureResponse])
async def read_procedures(
    ctx: TenantContext = Depends(require_permission("procedures")),
    service: ProcedureService = Depends(get_procedure_service)
):
    return await service.list_procedures(ctx)

@router.post("/", response_model=ProcedureResponse, status_code=status.HTTP_201_CREATED)
async def create_procedure(
    payload: ProcedureCreate,
    ctx: TenantContext = Depends(require_permission("procedures", write=True)),
    service: ProcedureService = Depends(get_procedure_service)
):
    return await service.create_procedure(ctx, payload)

@router.get("/{procedure_id}", response_model=ProcedureResponse)
async def read_procedure(
    procedure_id: UUID,
    ctx: TenantContext = Depends(require_permission("procedures")),
    service: ProcedureService = Depends(get_procedure_service)
):
    return await service.get_procedure(ctx, procedure_id)

@router.put("/{procedure_id}", response_model=ProcedureResponse)
async def update_procedure(
    procedure_id: UUID,
    payload: ProcedureUpdate,
    ctx: TenantContext = Depends(require_permission("procedures", write=True)),
    service: ProcedureService = Depends(get_procedure_service)
):
    return await service.update_procedure(ctx, procedure_id, payload)

@router.delete("/{procedure_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_procedure(
    procedure_id: UUID,
    ctx: TenantContext = Depends(require_permission("procedures", write=True)),
    service: ProcedureService = Depends(get_procedure_service)
):
    await service.delete_procedure(ctx, procedure_id)
