from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jwt.exceptions import PyJWTError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from clinihof.core.config import settings
from clinihof.core.permissions import can_access, can_write
from clinihof.core.redis import RedisClient, redis_client
from clinihof.core.security import decode_access_token, decode_impersonation_token
from clinihof.db.models import User
from clinihof.db.session import get_session
from clinihof.schemas.auth import SessionUser
from clinihof.schemas.workspace import ImpersonationState
from clinihof.services.workspace_service import TenantContext, resolve_tenant_context

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)

def get_token_store() -> RedisClient:
    return redis_client

def get_session_token(request: Request, bearer: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or bearer

async def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    session: AsyncSession = Depends(get_session),
    token_store: RedisClient = Depends(get_token_store),
) -> SessionUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    try:
        payload = decode_access_token(token)
        user_id = UUID(payload.get("sub"))
    except (PyJWTError, ValidationError, ValueError, TypeError):
        raise credentials_exception

    # Logged-out tokens are gone from the store
    if await token_store.get_token(token) is None:
        raise credentials_exception

    # Role comes from the database, never from the token, so changes apply at once
    user = await session.get(User, user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    return SessionUser(
        id=user.id,
        role=user.role,
        email=user.email,
        name=user.name,
        workspace_id=user.workspace_id,
        token=token,
    )

def get_impersonation(request: Request) -> Optional[ImpersonationState]:
    """Decode the impersonation cookie; a missing, forged or expired one reads as None."""
    raw = request.cookies.get(settings.IMPERSONATION_COOKIE_NAME)
    if not raw:
        return None
    try:
        payload = decode_impersonation_token(raw)
        return ImpersonationState(
            workspace_id=payload["workspace_id"],
            workspace_name=payload["workspace_name"],
            expires_at=payload.get("exp"),
        )
    except (PyJWTError, ValidationError, KeyError):
        return None

async def get_tenant_context(
    user: SessionUser = Depends(get_current_user),
    impersonation: Optional[ImpersonationState] = Depends(get_impersonation),
    session: AsyncSession = Depends(get_session),
) -> TenantContext:
    return await resolve_tenant_context(session, user, impersonation)

def require_permission(resource: str, write: bool = False):
    """Dependency factory: check the caller's role against ``resource`` then resolve the tenant."""

    async def dependency(
        user: SessionUser = Depends(get_current_user),
        impersonation: Optional[ImpersonationState] = Depends(get_impersonation),
        session: AsyncSession = Depends(get_session),
    ) -> TenantContext:
        allowed = can_write(user.role, resource) if write else can_access(user.role, resource)
        if not allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return await resolve_tenant_context(session, user, impersonation)

    return dependency

async def require_master(user: SessionUser = Depends(get_current_user)) -> SessionUser:
    if not user.is_master:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Master access required")
    return user
