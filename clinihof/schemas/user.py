from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from clinihof.db.models.user import UserRole

class UserBase(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None

class UserResponse(UserBase):
    id: UUID
    workspace_id: Optional[UUID]
    role: UserRole
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, min_length=3)
    phone: Optional[str] = None

class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)

class TeamMemberCreate(UserBase):
    role: UserRole = UserRole.USER
    password: Optional[str] = Field(default=None, min_length=6)

class TeamMemberCreated(BaseModel):
    user: UserResponse
    # Only returned when the password was generated
    temporary_password: Optional[str] = None

class RoleUpdate(BaseModel):
    role: UserRole
