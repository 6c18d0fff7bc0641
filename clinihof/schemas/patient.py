from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime, date

class PatientBase(BaseModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: Optional[str] = None
    birthday: Optional[date] = None
    origin: Optional[str] = None
    notes: Optional[str] = None

class PatientCreate(PatientBase):
    pass

class PatientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    birthday: Optional[date] = None
    origin: Optional[str] = None
    notes: Optional[str] = None

class PatientResponse(PatientBase):
    id: UUID
    workspace_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class PatientImportRow(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    birthday: Optional[date] = None
    origin: Optional[str] = None
    notes: Optional[str] = None

class PatientImportRequest(BaseModel):
    patients: List[PatientImportRow]

class PatientImportError(BaseModel):
    row: int
    name: Optional[str] = None
    error: str

class PatientImportResult(BaseModel):
    created: int
    skipped: int
    errors: List[PatientImportError]

class OriginCount(BaseModel):
    origin: str
    label: str
    count: int

class OriginStats(BaseModel):
    stats: List[OriginCount]
    total: int
