from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

class ProcedureBase(BaseModel):
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    duration: int = Field(default=30, gt=0)
    fixed_cost: float = Field(default=0, ge=0)
    color: Optional[str] = None

class ProcedureCreate(ProcedureBase):
    pass

class ProcedureUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, gt=0)
    fixed_cost: Optional[float] = Field(default=None, ge=0)
    color: Optional[str] = None

class ProcedureResponse(ProcedureBase):
    id: UUID
    workspace_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
