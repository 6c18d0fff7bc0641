from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from datetime import datetime
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

class Package(SQLModel, table=True):
    __tablename__ = "packages"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    name: str
    final_price: float
    discount_percent: float = Field(default=0)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

class PackageItem(SQLModel, table=True):
    __tablename__ = "package_items"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    package_id: UUID = Field(foreign_key="packages.id", index=True)
    procedure_id: UUID = Field(foreign_key="procedures.id", index=True)
    quantity: int = Field(default=1)
