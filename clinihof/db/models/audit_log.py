from sqlmodel import SQLModel, Field
from sqlalchemy import JSON, Column, DateTime
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    actor_id: Optional[UUID] = None
    workspace_id: Optional[UUID] = None
    action: str
    payload: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
