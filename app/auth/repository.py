"""
User repository - Data Access Layer for learner accounts.
Emails are stored lower-cased and looked up the same way.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for learner accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, email: str, hashed_password: str) -> User:
        """Insert an active account with an already hashed password."""
        now = datetime.now(timezone.utc)
        user = User(
            id=str(uuid4()),
            email=email.lower(),
            hashed_password=hashed_password,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        logger.info(f"[UserRepository] Created user: {user.id}")
        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID, or None."""
        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive), or None."""
        stmt = select(User).where(User.email == email.lower())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """Check whether an email is already registered."""
        stmt = select(func.count()).select_from(User).where(User.email == email.lower())
        result = await self.db.execute(stmt)
        return result.scalar_one() > 0

    async def record_sign_in(self, user: User) -> None:
        """Stamp the account's last sign-in time."""
        user.last_login = datetime.now(timezone.utc)
        await self.db.flush()
