from pydantic import BaseModel
from typing import List

from clinihof.db.models.user import UserRole

class MenuItem(BaseModel):
    key: str
    name: str
    href: str

class PermissionsResponse(BaseModel):
    role: UserRole
    readable: List[str]
    writable: List[str]
    menu: List[MenuItem]
