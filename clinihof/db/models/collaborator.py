from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime, date
from enum import Enum
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

class CommissionType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"

class Collaborator(SQLModel, table=True):
    __tablename__ = "collaborators"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    name: str
    role: str
    phone: Optional[str] = None
    email: Optional[str] = None
    admission_date: Optional[date] = None
    base_salary: float = Field(default=0)
    charges: float = Field(default=0)
    monthly_hours: int = Field(default=160)
    commission_type: CommissionType = Field(default=CommissionType.PERCENTAGE)
    commission_value: float = Field(default=0)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    @property
    def hourly_cost(self) -> float:
        if not self.monthly_hours:
            return 0.0
        return (self.base_salary + self.charges) / self.monthly_hours
