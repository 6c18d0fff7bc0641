from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, delete

from clinihof.db.models import Package, PackageItem, Procedure
from clinihof.schemas.package import (
    PackageCreate,
    PackageItemIn,
    PackageItemResponse,
    PackageResponse,
    PackageUpdate,
)
from clinihof.services.workspace_service import TenantContext

class PackageService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _check_procedures(self, ctx: TenantContext, items: List[PackageItemIn]) -> None:
        ids = {item.procedure_id for item in items}
        stmt = select(Procedure.id).where(Procedure.id.in_(ids), Procedure.workspace_id == ctx.workspace_id)
        found = set((await self.session.execute(stmt)).scalars().all())
        if found != ids:
            raise HTTPException(status_code=400, detail="One or more procedures not found")

    def _add_items(self, package_id: UUID, items: List[PackageItemIn]) -> None:
        self.session.add_all([
            PackageItem(package_id=package_id, procedure_id=item.procedure_id, quantity=item.quantity)
            for item in items
        ])

    async def _to_response(self, package: Package) -> PackageResponse:
        stmt = (
            select(PackageItem, Procedure)
            .join(Procedure, Procedure.id == PackageItem.procedure_id)
            .where(PackageItem.package_id == package.id)
            .order_by(Procedure.name)
        )
        items = [
            PackageItemResponse(
                id=item.id,
                procedure_id=procedure.id,
                procedure_name=procedure.name,
                unit_price=procedure.price,
                quantity=item.quantity,
            )
            for item, procedure in (await self.session.execute(stmt)).all()
        ]
        return PackageResponse(
            id=package.id,
            workspace_id=package.workspace_id,
            name=package.name,
            final_price=package.final_price,
            discount_percent=package.discount_percent,
            is_active=package.is_active,
            created_at=package.created_at,
            total_value=round(sum(i.unit_price * i.quantity for i in items), 2),
            items=items,
        )

    async def _get(self, ctx: TenantContext, package_id: UUID) -> Package:
        stmt = select(Package).where(
            Package.id == package_id,
            Package.workspace_id == ctx.workspace_id,
            Package.is_active == True,
        )
        package = (await self.session.execute(stmt)).scalars().first()
        if not package:
            raise HTTPException(status_code=404, detail="Package not found")
        return package

    async def list_packages(self, ctx: TenantContext) -> List[PackageResponse]:
        stmt = select(Package).where(
            Package.workspace_id == ctx.workspace_id,
            Package.is_active == True,
        ).order_by(Package.name)
        packages = (await self.session.execute(stmt)).scalars().all()
        return [await self._to_response(p) for p in packages]

    async def get_package(self, ctx: TenantContext, package_id: UUID) -> PackageResponse:
        return await self._to_response(await self._get(ctx, package_id))

    async def create_package(self, ctx: TenantContext, data: PackageCreate) -> PackageResponse:
        await self._check_procedures(ctx, data.items)
        package = Package(
            workspace_id=ctx.workspace_id,
            name=data.name,
            final_price=data.final_price,
            discount_percent=data.discount_percent,
        )
        self.session.add(package)
        await self.session.flush()
        self._add_items(package.id, data.items)
        await self.session.commit()
        await self.session.refresh(package)
        return await self._to_response(package)

    async def update_package(self, ctx: TenantContext, package_id: UUID, data: PackageUpdate) -> PackageResponse:
        package = await self._get(ctx, package_id)
        updates = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"items"})
        for key, value in updates.items():
            setattr(package, key, value)
        self.session.add(package)

        if data.items is not None:
            await self._check_procedures(ctx, data.items)
            await self.session.execute(delete(PackageItem).where(PackageItem.package_id == package.id))
            self._add_items(package.id, data.items)

        await self.session.commit()
        await self.session.refresh(package)
        return await self._to_response(package)

    async def delete_package(self, ctx: TenantContext, package_id: UUID) -> None:
        package = await self._get(ctx, package_id)
        package.is_active = False
        self.session.add(package)
        await self.session.commit()
