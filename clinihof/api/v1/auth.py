from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.api.deps import get_current_user, get_impersonation, get_session_token, get_token_store
from clinihof.core.config import settings
from clinihof.core.redis import RedisClient
from clinihof.db.session import get_session
from clinihof.schemas.auth import (
    LoginRequest,
    LoginResponse,
    SessionResponse,
    SessionUser,
    SignupRequest,
    SignupResponse,
)
from clinihof.schemas.workspace import ImpersonationState
from clinihof.services.auth_service import AuthService

router = APIRouter()

async def get_auth_service(
    session: AsyncSession = Depends(get_session),
    token_store: RedisClient = Depends(get_token_store),
) -> AuthService:
    return AuthService(session, token_store)

@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    service: AuthService = Depends(get_auth_service)
):
    return await service.signup(payload)

@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service)
):
    result = await service.login(login_data)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        result.access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return result

@router.post("/logout")
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    service: AuthService = Depends(get_auth_service)
):
    await service.logout(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    response.delete_cookie(settings.IMPERSONATION_COOKIE_NAME)
    return {"success": True}

@router.get("/session", response_model=SessionResponse)
async def read_session(
    user: SessionUser = Depends(get_current_user),
    impersonation: Optional[ImpersonationState] = Depends(get_impersonation),
    service: AuthService = Depends(get_auth_service)
):
    return await service.describe_session(user, impersonation)
