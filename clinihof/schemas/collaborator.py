from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from uuid import UUID
from datetime import datetime, date

from clinihof.db.models.collaborator import CommissionType

class CollaboratorBase(BaseModel):
    name: str = Field(min_length=1)
    role: str = Field(min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    admission_date: Optional[date] = None
    base_salary: float = Field(default=0, ge=0)
    charges: float = Field(default=0, ge=0)
    monthly_hours: int = Field(default=160, ge=0)
    commission_type: CommissionType = CommissionType.PERCENTAGE
    commission_value: float = Field(default=0, ge=0)

class CollaboratorCreate(CollaboratorBase):
    pass

class CollaboratorUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    admission_date: Optional[date] = None
    base_salary: Optional[float] = Field(default=None, ge=0)
    charges: Optional[float] = Field(default=None, ge=0)
    monthly_hours: Optional[int] = Field(default=None, ge=0)
    commission_type: Optional[CommissionType] = None
    commission_value: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None

class CollaboratorResponse(CollaboratorBase):
    id: UUID
    workspace_id: UUID
    is_active: bool
    hourly_cost: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class CollaboratorStats(BaseModel):
    total_collaborators: int
    active_collaborators: int
    total_monthly_cost: float
