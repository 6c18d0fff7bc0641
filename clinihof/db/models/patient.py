from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint, DateTime
from typing import Optional, TYPE_CHECKING
from datetime import datetime, date
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

if TYPE_CHECKING:
    from .workspace import Workspace

class Patient(SQLModel, table=True):
    __tablename__ = "patients"
    __table_args__ = (
        UniqueConstraint("workspace_id", "name", "phone", name="uq_patient_workspace_name_phone"),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    name: str
    phone: str
    email: Optional[str] = None
    birthday: Optional[date] = None
    origin: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    workspace: Optional["Workspace"] = Relationship(back_populates="patients")
