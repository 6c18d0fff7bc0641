from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict
from uuid import UUID
from datetime import datetime

from clinihof.db.models.procedure_session import SessionStatus

class SessionUpdate(BaseModel):
    scheduled_date: Optional[datetime] = None
    collaborator_id: Optional[UUID] = None
    notes: Optional[str] = None
    status: Optional[SessionStatus] = None

class SessionComplete(BaseModel):
    completed_date: Optional[datetime] = None
    notes: Optional[str] = None

class SessionResponse(BaseModel):
    id: UUID
    workspace_id: UUID
    sale_id: Optional[UUID]
    patient_id: UUID
    procedure_id: UUID
    collaborator_id: Optional[UUID]
    status: SessionStatus
    scheduled_date: Optional[datetime]
    completed_date: Optional[datetime]
    notes: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class SessionStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    attendance_rate: float
