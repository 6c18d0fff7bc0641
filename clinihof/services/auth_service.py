from datetime import timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinihof.core.config import settings
from clinihof.core.logger import logger
from clinihof.core.redis import RedisClient
from clinihof.core.security import verify_password, get_password_hash, create_access_token
from clinihof.core.utils import generate_slug
from clinihof.db.models import User, UserRole, Workspace
from clinihof.schemas.auth import (
    LoginRequest,
    LoginResponse,
    SessionResponse,
    SessionUser,
    SignupRequest,
    SignupResponse,
    SignupUser,
    UserInfo,
)
from clinihof.schemas.workspace import ImpersonationState
from clinihof.services.seed_service import seed_workspace_data
from clinihof.services.workspace_service import resolve_effective_workspace

class AuthService:
    def __init__(self, session: AsyncSession, token_store: Optional[RedisClient] = None):
        self.session = session
        self.token_store = token_store

    async def get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def _create_workspace(self, owner: User, clinic_name: str) -> Workspace:
        workspace = Workspace(
            name=clinic_name,
            slug=generate_slug(clinic_name),
            owner_id=owner.id,
        )
        self.session.add(workspace)
        await self.session.flush()
        return workspace

    async def signup(self, data: SignupRequest) -> SignupResponse:
        email = data.email.strip().lower()
        if await self.get_user_by_email(email):
            raise HTTPException(status_code=409, detail="Email already registered")

        # User and workspace are created together or not at all
        try:
            user = User(
                email=email,
                name=data.full_name,
                role=UserRole.ADMIN,
                password_hash=get_password_hash(data.password),
            )
            self.session.add(user)
            await self.session.flush()

            workspace = await self._create_workspace(user, data.clinic_name)
            user.workspace_id = workspace.id
            self.session.add(user)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            logger.exception(f"Signup failed for {email}")
            raise

        user_id, user_name, workspace_id = user.id, user.name, workspace.id
        logger.info(f"Created account {user_id} with workspace {workspace_id}")

        if settings.SEED_ON_SIGNUP:
            try:
                await seed_workspace_data(self.session, workspace_id)
            except Exception:
                # Example data is a convenience; the account already exists
                await self.session.rollback()
                logger.exception(f"Error creating example data for workspace {workspace_id}")

        return SignupResponse(
            message="Account created successfully",
            user=SignupUser(id=user_id, email=email, name=user_name),
            workspace_id=workspace_id,
        )

    async def login(self, login_data: LoginRequest) -> LoginResponse:
        user = await self.get_user_by_email(login_data.email)

        if not user or not user.is_active:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        if not verify_password(login_data.password, user.password_hash):
            raise HTTPException(status_code=401, detail="Invalid email or password")

        expires_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
        access_token = create_access_token(
            data={"sub": str(user.id), "role": user.role.value},
            expires_delta=timedelta(minutes=expires_minutes),
        )

        await self.token_store.set_token(
            access_token,
            {"user_id": str(user.id), "role": user.role.value},
            expires_minutes * 60,
        )

        workspace = await resolve_effective_workspace(self.session, self._session_user(user))
        logger.info(f"User {user.id} logged in")

        return LoginResponse(
            access_token=access_token,
            token_type="bearer",
            user=UserInfo(
                id=user.id,
                name=user.name,
                email=user.email,
                role=user.role,
                workspace_id=workspace.id if workspace else None,
                workspace_name=workspace.name if workspace else None,
            ),
        )

    async def logout(self, token: Optional[str]) -> None:
        if token:
            await self.token_store.delete_token(token)

    async def describe_session(
        self, user: SessionUser, impersonation: Optional[ImpersonationState]
    ) -> SessionResponse:
        workspace = await resolve_effective_workspace(self.session, user, impersonation)
        return SessionResponse(
            user=user,
            workspace_id=workspace.id if workspace else None,
            workspace_name=workspace.name if workspace else None,
            is_impersonating=user.is_master and impersonation is not None,
        )

    @staticmethod
    def _session_user(user: User) -> SessionUser:
        return SessionUser(
            id=user.id,
            role=user.role,
            email=user.email,
            name=user.name,
            workspace_id=user.workspace_id,
        )
