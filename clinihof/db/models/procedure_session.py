from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

class SessionStatus(str, Enum):
    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

class ProcedureSession(SQLModel, table=True):
    __tablename__ = "procedure_sessions"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    sale_id: Optional[UUID] = Field(default=None, foreign_key="sales.id", index=True)
    patient_id: UUID = Field(foreign_key="patients.id", index=True)
    procedure_id: UUID = Field(foreign_key="procedures.id")
    collaborator_id: Optional[UUID] = Field(default=None, foreign_key="collaborators.id")
    status: SessionStatus = Field(default=SessionStatus.PENDING)
    scheduled_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    completed_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
