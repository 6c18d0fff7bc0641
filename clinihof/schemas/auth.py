from pydantic import BaseModel, AliasChoices, Field
from typing import Optional
from uuid import UUID

from clinihof.db.models.user import UserRole

class SignupRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1, validation_alias=AliasChoices("full_name", "fullName"))
    clinic_name: str = Field(min_length=1, validation_alias=AliasChoices("clinic_name", "clinicName"))

class SignupUser(BaseModel):
    id: UUID
    email: str
    name: str

class SignupResponse(BaseModel):
    message: str
    user: SignupUser
    workspace_id: UUID

class LoginRequest(BaseModel):
    email: str
    password: str

class UserInfo(BaseModel):
    id: UUID
    name: str
    email: str
    role: UserRole
    workspace_id: Optional[UUID] = None
    workspace_name: Optional[str] = None

class LoginResponse(BaseModel):
    access_token: str
    token_type: str
    user: UserInfo

class SessionUser(BaseModel):
    """Authenticated caller, validated once at the request boundary."""
    id: UUID
    role: UserRole
    email: str
    name: str
    workspace_id: Optional[UUID] = None
    token: Optional[str] = Field(default=None, exclude=True)

    @property
    def is_master(self) -> bool:
        return self.role == UserRole.MASTER

class SessionResponse(BaseModel):
    user: SessionUser
    workspace_id: Optional[UUID] = None
    workspace_name: Optional[str] = None
    is_impersonating: bool = False
