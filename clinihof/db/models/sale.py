from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

class Sale(SQLModel, table=True):
    __tablename__ = "sales"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    patient_id: UUID = Field(foreign_key="patients.id", index=True)
    seller_id: Optional[UUID] = Field(default=None, foreign_key="collaborators.id", index=True)
    total_amount: float
    payment_method: Optional[str] = None
    sale_date: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
