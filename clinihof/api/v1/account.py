from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import get_current_user
from clinihof.db.session import get_session
from clinihof.schemas.auth import SessionUser
from clinihof.schemas.user import PasswordChange, ProfileUpdate, UserResponse
from clinihof.services.account_service import AccountService

router = APIRouter()

async def get_account_service(session: AsyncSession = Depends(get_session)) -> AccountService:
    return AccountService(session)

@router.put("/password")
async def change_password(
    payload: PasswordChange,
    user: SessionUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service)
):
    return await service.change_password(user, payload)

@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    payload: ProfileUpdate,
    user: SessionUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service)
):
    return await service.update_profile(user, payload)
