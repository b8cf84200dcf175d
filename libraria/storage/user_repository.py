"""
Credential store: user accounts.
"""

from typing import Any, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Role, UserModel


class UserRepository:
    """
    Async repository for user accounts.

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str, active_only: bool = False) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.email == email)
        if active_only:
            stmt = stmt.where(UserModel.is_active == True)  # noqa: E712
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def create(
        self,
        name: str,
        email: str,
        hashed_password: str,
        role: Role = Role.READER,
    ) -> UserModel:
        user = UserModel(
            name=name,
            email=email,
            hashed_password=hashed_password,
            role=role,
            is_active=True,
        )
        self.session.add(user)
        await self.session.flush()
        logger.debug(f"User row inserted: {user.id}")
        return user

    async def update(self, user: UserModel, changes: dict[str, Any]) -> UserModel:
        for key, value in changes.items():
            if key == "hashed_password":
                continue
            if hasattr(user, key):
                setattr(user, key, value)
        await self.session.flush()
        return user

    async def deactivate(self, user: UserModel) -> UserModel:
        user.is_active = False
        await self.session.flush()
        return user
