from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, or_, func, delete

from clinihof.core.logger import logger
from clinihof.db.models import Patient, ProcedureSession, Quote, Sale
from clinihof.schemas.patient import (
    OriginCount,
    OriginStats,
    PatientCreate,
    PatientImportError,
    PatientImportRequest,
    PatientImportResult,
    PatientUpdate,
)
from clinihof.services.workspace_service import TenantContext

ORIGIN_LABELS = {
    "INSTAGRAM": "Instagram",
    "INDICACAO": "Indicação",
    "GOOGLE": "Google",
    "WHATSAPP": "WhatsApp",
    "FACEBOOK": "Facebook",
    "SITE": "Site",
    "OUTROS": "Outros",
    "NAO_INFORMADO": "Não Informado",
}
UNKNOWN_ORIGIN = "NAO_INFORMADO"

class PatientService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_duplicate(
        self, workspace_id: UUID, name: str, phone: str, exclude_id: Optional[UUID] = None
    ) -> Patient | None:
        stmt = select(Patient).where(
            Patient.workspace_id == workspace_id,
            Patient.name == name,
            Patient.phone == phone,
        )
        if exclude_id is not None:
            stmt = stmt.where(Patient.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_patients(self, ctx: TenantContext, search: Optional[str] = None) -> List[Patient]:
        stmt = select(Patient).where(Patient.workspace_id == ctx.workspace_id)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(or_(
                func.lower(Patient.name).like(pattern),
                Patient.phone.like(f"%{search}%"),
                func.lower(Patient.email).like(pattern),
            ))
        stmt = stmt.order_by(Patient.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_patient(self, ctx: TenantContext, patient_id: UUID) -> Patient:
        stmt = select(Patient).where(
            Patient.id == patient_id,
            Patient.workspace_id == ctx.workspace_id,
        )
        result = await self.session.execute(stmt)
        patient = result.scalars().first()
        if not patient:
            raise HTTPException(status_code=404, detail="Patient not found")
        return patient

    async def create_patient(self, ctx: TenantContext, data: PatientCreate) -> Patient:
        if await self.find_duplicate(ctx.workspace_id, data.name, data.phone):
            raise HTTPException(status_code=409, detail="A patient with this name and phone already exists")

        patient = Patient(workspace_id=ctx.workspace_id, **data.model_dump())
        self.session.add(patient)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise HTTPException(status_code=409, detail="A patient with this name and phone already exists")
        await self.session.refresh(patient)
        return patient

    async def update_patient(self, ctx: TenantContext, patient_id: UUID, data: PatientUpdate) -> Patient:
        patient = await self.get_patient(ctx, patient_id)
        updates = data.model_dump(exclude_unset=True)

        name = updates.get("name") or patient.name
        phone = updates.get("phone") or patient.phone
        if await self.find_duplicate(ctx.workspace_id, name, phone, exclude_id=patient.id):
            raise HTTPException(status_code=409, detail="A patient with this name and phone already exists")

        for key, value in updates.items():
            if key in ("name", "phone") and value is None:
                continue
            setattr(patient, key, value)

        self.session.add(patient)
        await self.session.commit()
        await self.session.refresh(patient)
        return patient

    async def delete_patient(self, ctx: TenantContext, patient_id: UUID) -> None:
        patient = await self.get_patient(ctx, patient_id)

        sales_stmt = select(func.count()).select_from(Sale).where(Sale.patient_id == patient.id)
        if ((await self.session.execute(sales_stmt)).scalar() or 0) > 0:
            raise HTTPException(status_code=409, detail="Patient has sales and cannot be deleted")

        quotes_stmt = select(func.count()).select_from(Quote).where(Quote.patient_id == patient.id)
        if ((await self.session.execute(quotes_stmt)).scalar() or 0) > 0:
            raise HTTPException(status_code=409, detail="Patient has quotes and cannot be deleted")

        await self.session.execute(
            delete(ProcedureSession).where(ProcedureSession.patient_id == patient.id)
        )
        await self.session.delete(patient)
        await self.session.commit()

    async def import_patients(self, ctx: TenantContext, payload: PatientImportRequest) -> PatientImportResult:
        """Create patients row by row; a bad row is reported, never fatal for the batch."""
        created = 0
        skipped = 0
        errors: List[PatientImportError] = []

        for index, row in enumerate(payload.patients, start=1):
            name = (row.name or "").strip()
            phone = (row.phone or "").strip()
            if not name or not phone:
                errors.append(PatientImportError(row=index, name=row.name, error="Name and phone are required"))
                continue

            if await self.find_duplicate(ctx.workspace_id, name, phone):
                skipped += 1
                continue

            try:
                async with self.session.begin_nested():
                    self.session.add(Patient(
                        workspace_id=ctx.workspace_id,
                        name=name,
                        phone=phone,
                        email=row.email,
                        birthday=row.birthday,
                        origin=row.origin,
                        notes=row.notes,
                    ))
                created += 1
            except IntegrityError as exc:
                logger.warning(f"Patient import row {index} rejected: {exc}")
                errors.append(PatientImportError(row=index, name=name, error="Duplicate patient"))

        await self.session.commit()
        logger.info(f"Imported {created} patients into workspace {ctx.workspace_id} ({skipped} skipped, {len(errors)} errors)")
        return PatientImportResult(created=created, skipped=skipped, errors=errors)

    async def birthdays_this_month(self, ctx: TenantContext, today: Optional[date] = None) -> List[Patient]:
        today = today or date.today()
        stmt = select(Patient).where(
            Patient.workspace_id == ctx.workspace_id,
            Patient.birthday.is_not(None),
        )
        result = await self.session.execute(stmt)
        patients = [p for p in result.scalars().all() if p.birthday.month == today.month]
        return sorted(patients, key=lambda p: p.birthday.day)

    async def origin_stats(self, ctx: TenantContext) -> OriginStats:
        """Patient count per acquisition channel, largest first."""
        stmt = select(Patient.origin, func.count()).where(
            Patient.workspace_id == ctx.workspace_id
        ).group_by(Patient.origin)
        counts: dict = {}
        for origin, count in (await self.session.execute(stmt)).all():
            key = origin or UNKNOWN_ORIGIN
            counts[key] = counts.get(key, 0) + count

        stats = [
            OriginCount(origin=key, label=ORIGIN_LABELS.get(key, key), count=count)
            for key, count in sorted(counts.items(), key=lambda item: item[1], reverse=True)
        ]
        return OriginStats(stats=stats, total=sum(counts.values()))
