from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt
from jwt.exceptions import PyJWTError
from passlib.context import CryptContext

from clinihof.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

IMPERSONATION_TOKEN_TYPE = "impersonation"
SESSION_TOKEN_TYPE = "session"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "typ": SESSION_TOKEN_TYPE})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("typ") != SESSION_TOKEN_TYPE:
        raise PyJWTError("Not a session token")
    return payload


def create_impersonation_token(workspace_id: UUID, workspace_name: str) -> tuple[str, datetime]:
    """Sign the impersonation cookie value; returns the token and its expiry."""
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=settings.IMPERSONATION_TTL_SECONDS)
    payload = {
        "workspace_id": str(workspace_id),
        "workspace_name": workspace_name,
        "exp": expires_at,
        "typ": IMPERSONATION_TOKEN_TYPE,
    }
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return token, expires_at


def decode_impersonation_token(token: str) -> dict:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("typ") != IMPERSONATION_TOKEN_TYPE:
        raise PyJWTError("Not an impersonation token")
    return payload
