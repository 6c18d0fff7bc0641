from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinihof.core.logger import logger
from clinihof.core.security import get_password_hash, verify_password
from clinihof.db.models import User
from clinihof.schemas.auth import SessionUser
from clinihof.schemas.user import PasswordChange, ProfileUpdate

class AccountService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_user(self, user_id) -> User:
        user = await self.session.get(User, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    async def change_password(self, current_user: SessionUser, data: PasswordChange) -> dict:
        user = await self._get_user(current_user.id)

        if not verify_password(data.current_password, user.password_hash):
            raise HTTPException(status_code=400, detail="Current password is incorrect")

        user.password_hash = get_password_hash(data.new_password)
        self.session.add(user)
        await self.session.commit()
        logger.info(f"User {user.id} changed password")
        return {"message": "Password changed successfully"}

    async def update_profile(self, current_user: SessionUser, data: ProfileUpdate) -> User:
        user = await self._get_user(current_user.id)
        updates = data.model_dump(exclude_unset=True)

        if "email" in updates and updates["email"] is not None:
            email = updates["email"].strip().lower()
            stmt = select(User).where(User.email == email, User.id != user.id)
            result = await self.session.execute(stmt)
            if result.scalars().first():
                raise HTTPException(status_code=409, detail="Email already in use")
            updates["email"] = email

        for key, value in updates.items():
            if value is not None or key == "phone":
                setattr(user, key, value)

        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user
