from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from typing import Optional
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

class UserRole(str, Enum):
    MASTER = "MASTER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"
    RECEPTIONIST = "RECEPTIONIST"

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # Team membership; the owned workspace is found through Workspace.owner_id
    workspace_id: Optional[UUID] = Field(default=None, index=True)
    role: UserRole = Field(default=UserRole.USER)
    name: str
    email: str = Field(unique=True, index=True)
    phone: Optional[str] = None
    password_hash: Optional[str] = None
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
