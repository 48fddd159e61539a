"""
Identity Store access: user lookup, registration and profile edits.
"""

from typing import List, Optional
from uuid import uuid4

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.errors import ConflictError, IdentityStoreUnavailableError, UserNotFoundError
from socialnet.core.logging import get_logger
from socialnet.core.security import get_password_hash
from socialnet.models.user import User

logger = get_logger(__name__)


class IdentityService:
    """Reads and writes User records"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: str) -> Optional[User]:
        try:
            result = await self.db.execute(select(User).where(User.id == user_id))
        except OperationalError as e:
            logger.error("identity.lookup_failed", user_id=user_id, error=str(e))
            raise IdentityStoreUnavailableError() from e
        return result.scalar_one_or_none()

    async def resolve_user(self, user_id: str) -> User:
        """Return the user or raise UserNotFoundError"""
        user = await self.get_user(user_id)
        if user is None:
            raise UserNotFoundError(details={"user_id": user_id})
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def create_user(
        self,
        email: str,
        username: str,
        name: str,
        password: str,
        avatar: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> User:
        email = email.lower()
        stmt = select(User).where(or_(User.email == email, User.username == username))
        existing = (await self.db.execute(stmt)).scalars().first()
        if existing:
            field = "email" if existing.email == email else "username"
            raise ConflictError(f"User with this {field} already exists", details={"field": field})

        user = User(
            id=str(uuid4()),
            email=email,
            username=username,
            name=name,
            avatar=avatar,
            bio=bio,
            hashed_password=get_password_hash(password),
            status="active",
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("User with this email or username already exists") from e
        await self.db.refresh(user)
        logger.info("identity.user_created", user_id=user.id, username=user.username)
        return user

    async def update_profile(self, user_id: str, changes: dict) -> User:
        user = await self.resolve_user(user_id)

        new_username = changes.get("username")
        if new_username and new_username != user.username:
            stmt = select(User.id).where(User.username == new_username)
            if (await self.db.execute(stmt)).scalar_one_or_none():
                raise ConflictError("Username is already taken", details={"field": "username"})

        for field, value in changes.items():
            setattr(user, field, value)

        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def set_password(self, user: User, password: str) -> None:
        user.hashed_password = get_password_hash(password)
        await self.db.commit()

    async def search(self, query: str, exclude_user_id: str, limit: int = 20) -> List[User]:
        """Case-insensitive match on name or username"""
        pattern = f"%{query.lower()}%"
        stmt = (
            select(User)
            .where(
                User.id != exclude_user_id,
                User.status == "active",
                or_(func.lower(User.name).like(pattern), func.lower(User.username).like(pattern)),
            )
            .order_by(User.username)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
