from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import DateTime
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

if TYPE_CHECKING:
    from .patient import Patient
    from .cost import Cost

class WorkspaceStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    CANCELLED = "CANCELLED"

WORKSPACE_PLANS = ("free", "pro", "enterprise")

class Workspace(SQLModel, table=True):
    __tablename__ = "workspaces"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    slug: str = Field(unique=True, index=True)
    owner_id: UUID = Field(foreign_key="users.id", unique=True, index=True)
    status: WorkspaceStatus = Field(default=WorkspaceStatus.ACTIVE)
    plan: str = Field(default="free")
    max_users: int = Field(default=5)
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    patients: List["Patient"] = Relationship(back_populates="workspace")
    costs: List["Cost"] = Relationship(back_populates="workspace")
