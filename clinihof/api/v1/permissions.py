from fastapi import APIRouter, Depends

from clinihof.api.deps import get_current_user
from clinihof.core.permissions import readable_resources, visible_menu_items, writable_resources
from clinihof.schemas.auth import SessionUser
from clinihof.schemas.permission import PermissionsResponse

router = APIRouter()

@router.get("/me", response_model=PermissionsResponse)
async def read_my_permissions(user: SessionUser = Depends(get_current_user)):
    return PermissionsResponse(
        role=user.role,
        readable=readable_resources(user.role),
        writable=writable_resources(user.role),
        menu=visible_menu_items(user.role),
    )
