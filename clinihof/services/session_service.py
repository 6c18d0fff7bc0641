from typing import List
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, func

from clinihof.core.utils import utcnow
from clinihof.db.models import Collaborator, ProcedureSession, SessionStatus
from clinihof.schemas.procedure_session import SessionComplete, SessionStats, SessionUpdate
from clinihof.services.workspace_service import TenantContext

OPEN_STATUSES = (SessionStatus.PENDING, SessionStatus.SCHEDULED)

class ProcedureSessionService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_pending(self, ctx: TenantContext) -> List[ProcedureSession]:
        stmt = select(ProcedureSession).where(
            ProcedureSession.workspace_id == ctx.workspace_id,
            ProcedureSession.status.in_(OPEN_STATUSES),
        ).order_by(ProcedureSession.created_at)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_session(self, ctx: TenantContext, session_id: UUID) -> ProcedureSession:
        stmt = select(ProcedureSession).where(
            ProcedureSession.id == session_id,
            ProcedureSession.workspace_id == ctx.workspace_id,
        )
        result = await self.session.execute(stmt)
        procedure_session = result.scalars().first()
        if not procedure_session:
            raise HTTPException(status_code=404, detail="Session not found")
        return procedure_session

    async def update_session(self, ctx: TenantContext, session_id: UUID, data: SessionUpdate) -> ProcedureSession:
        procedure_session = await self.get_session(ctx, session_id)
        if procedure_session.status == SessionStatus.COMPLETED:
            raise HTTPException(status_code=400, detail="Completed sessions cannot be changed")

        updates = data.model_dump(exclude_unset=True)
        if updates.get("collaborator_id"):
            stmt = select(Collaborator).where(
                Collaborator.id == updates["collaborator_id"],
                Collaborator.workspace_id == ctx.workspace_id,
            )
            if not (await self.session.execute(stmt)).scalars().first():
                raise HTTPException(status_code=404, detail="Collaborator not found")
        if updates.get("status") == SessionStatus.COMPLETED:
            raise HTTPException(status_code=400, detail="Use the complete action to finish a session")

        for key, value in updates.items():
            if key == "status" and value is None:
                continue
            setattr(procedure_session, key, value)
        if "scheduled_date" in updates and updates["scheduled_date"] and procedure_session.status == SessionStatus.PENDING:
            procedure_session.status = SessionStatus.SCHEDULED

        self.session.add(procedure_session)
        await self.session.commit()
        await self.session.refresh(procedure_session)
        return procedure_session

    async def complete_session(self, ctx: TenantContext, session_id: UUID, data: SessionComplete) -> ProcedureSession:
        procedure_session = await self.get_session(ctx, session_id)
        if procedure_session.status not in OPEN_STATUSES:
            raise HTTPException(status_code=400, detail=f"Session is already {procedure_session.status.value.lower()}")

        procedure_session.status = SessionStatus.COMPLETED
        procedure_session.completed_date = data.completed_date or utcnow()
        if data.notes is not None:
            procedure_session.notes = data.notes

        self.session.add(procedure_session)
        await self.session.commit()
        await self.session.refresh(procedure_session)
        return procedure_session

    async def stats(self, ctx: TenantContext) -> SessionStats:
        stmt = select(ProcedureSession.status, func.count()).where(
            ProcedureSession.workspace_id == ctx.workspace_id,
        ).group_by(ProcedureSession.status)
        result = await self.session.execute(stmt)

        by_status = {status.value: 0 for status in SessionStatus}
        for status, count in result.all():
            by_status[SessionStatus(status).value] = count

        total = sum(by_status.values())
        completed = by_status[SessionStatus.COMPLETED.value]
        cancelled = by_status[SessionStatus.CANCELLED.value]
        # Attendance: completed over sessions that were due to happen
        attended_base = completed + cancelled
        attendance_rate = round(completed / attended_base * 100, 2) if attended_base else 0.0

        return SessionStats(total=total, by_status=by_status, attendance_rate=attendance_rate)
