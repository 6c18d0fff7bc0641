from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.patient import (
    OriginStats,
    PatientCreate,
    PatientImportRequest,
    PatientImportResult,
    PatientResponse,
    PatientUpdate,
)
from clinihof.services.patient_service import PatientService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

async def get_patient_service(session: AsyncSession = Depends(get_session)) -> PatientService:
    return PatientService(session)

@router.get("/", response_model=List[PatientResponse])
async def read_patients(
    search: Optional[str] = None,
    ctx: TenantContext = Depends(require_permission("patients")),
    service: PatientService = Depends(get_patient_service)
):
    return await service.list_patients(ctx, search)

@router.post("/", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    payload: PatientCreate,
    ctx: TenantContext = Depends(require_permission("patients", write=True)),
    service: PatientService = Depends(get_patient_service)
):
    return await service.create_patient(ctx, payload)

@router.post("/import", response_model=PatientImportResult)
async def import_patients(
    payload: PatientImportRequest,
    ctx: TenantContext = Depends(require_permission("patients", write=True)),
    service: PatientService = Depends(get_patient_service)
):
    return await service.import_patients(ctx, payload)

@router.get("/birthdays", response_model=List[PatientResponse])
async def read_birthdays(
    ctx: TenantContext = Depends(require_permission("patients")),
    service: PatientService = Depends(get_patient_service)
):
    return await service.birthdays_this_month(ctx)

@router.get("/stats/origin", response_model=OriginStats)
async def read_origin_stats(
    ctx: TenantContext = Depends(require_permission("patients")),
    service: PatientService = Depends(get_patient_service)
):
    return await service.origin_stats(ctx)

@router.get("/{patient_id}", response_model=PatientResponse)
async def read_patient(
    patient_id: UUID,
    ctx: TenantContext = Depends(require_permission("patients")),
    service: PatientService = Depends(get_patient_service)
):
    return await service.get_patient(ctx, patient_id)

@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: UUID,
    payload: PatientUpdate,
    ctx: TenantContext = Depends(require_permission("patients", write=True)),
    service: PatientService = Depends(get_patient_service)
):
    return await service.update_patient(ctx, patient_id, payload)

@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(
    patient_id: UUID,
    ctx: TenantContext = Depends(require_permission("patients", write=True)),
    service: PatientService = Depends(get_patient_service)
):
    await service.delete_patient(ctx, patient_id)
