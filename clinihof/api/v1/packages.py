from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import require_permission
from clinihof.db.session import get_session
from clinihof.schemas.package import PackageCreate, PackageResponse, PackageUpdate
from clinihof.services.package_service import PackageService
from clinihof.services.workspace_service import TenantContext

router = APIRouter()

async def get_package_service(session: AsyncSession = Depends(get_session)) -> PackageService:
    return PackageService(session)

@router.get("/", response_model=List[PackageResponse])
async def read_packages(
    ctx: TenantContext = Depends(require_permission("packages")),
    service: PackageService = Depends(get_package_service)
):
    return await service.list_packages(ctx)

@router.post("/", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
async def create_package(
    payload: PackageCreate,
    ctx: TenantContext = Depends(require_permission("packages", write=True)),
    service: PackageService = Depends(get_package_service)
):
    return await service.create_package(ctx, payload)

@router.get("/{package_id}", response_model=PackageResponse)
async def read_package(
    package_id: UUID,
    ctx: TenantContext = Depends(require_permission("packages")),
    service: PackageService = Depends(get_package_service)
):
    return await service.get_package(ctx, package_id)

@router.patch("/{package_id}", response_model=PackageResponse)
async def update_package(
    package_id: UUID,
    payload: PackageUpdate,
    ctx: TenantContext = Depends(require_permission("packages", write=True)),
    service: PackageService = Depends(get_package_service)
):
    return await service.update_package(ctx, package_id, payload)

@router.delete("/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_package(
    package_id: UUID,
    ctx: TenantContext = Depends(require_permission("packages", write=True)),
    service: PackageService = Depends(get_package_service)
):
    await service.delete_package(ctx, package_id)
