from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint, DateTime
from datetime import datetime
from uuid import UUID, uuid4

from clinihof.core.utils import utcnow

class Supply(SQLModel, table=True):
    __tablename__ = "supplies"
    __table_args__ = (
        UniqueConstraint("workspace_id", "name", "unit", name="uq_supply_workspace_name_unit"),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", index=True)
    name: str
    unit: str  # ml, un, g
    cost_per_unit: float = Field(default=0)
    stock_qty: int = Field(default=0)
    min_stock: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
