from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from clinihof.db.models.user import UserRole
from clinihof.db.models.workspace import WorkspaceStatus

class WorkspaceOwner(BaseModel):
    id: UUID
    name: str
    email: str
    role: UserRole

    model_config = ConfigDict(from_attributes=True)

class WorkspaceResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    owner_id: UUID
    status: WorkspaceStatus
    plan: str
    max_users: int
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class WorkspaceListItem(WorkspaceResponse):
    owner: Optional[WorkspaceOwner] = None
    sales_count: int = 0
    user_count: int = 0

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

class WorkspaceListResponse(BaseModel):
    workspaces: List[WorkspaceListItem]
    pagination: Pagination

class WorkspaceMetrics(BaseModel):
    patients: int = 0
    procedures: int = 0
    sales: int = 0
    collaborators: int = 0
    costs: int = 0
    total_revenue: float = 0
    monthly_revenue: float = 0
    total_costs: float = 0

class WorkspaceDetail(WorkspaceResponse):
    owner: Optional[WorkspaceOwner] = None
    metrics: WorkspaceMetrics

class WorkspaceAdminUpdate(BaseModel):
    status: Optional[WorkspaceStatus] = None
    plan: Optional[str] = None
    max_users: Optional[int] = Field(default=None, gt=0)

class WorkspaceSettingsUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    address: Optional[str] = None

class MasterStats(BaseModel):
    total_workspaces: int
    active_workspaces: int
    suspended_workspaces: int
    total_users: int
    total_patients: int
    total_revenue: float

class ImpersonationRequest(BaseModel):
    workspace_id: UUID

class ImpersonatedWorkspace(BaseModel):
    id: UUID
    name: str
    expires_at: Optional[datetime] = None

class ImpersonationStatus(BaseModel):
    is_impersonating: bool
    workspace: Optional[ImpersonatedWorkspace] = None

class ImpersonationState(BaseModel):
    """Decoded, unexpired impersonation cookie."""
    workspace_id: UUID
    workspace_name: str
    expires_at: Optional[datetime] = None
