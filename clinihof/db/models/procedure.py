from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

class Procedure(SQLModel, table=True):
    __tablename__ = "procedures"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    name: str
    price: float = Field(default=0)
    duration: int = Field(default=30)  # minutes
    fixed_cost: float = Field(default=0)
    color: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
