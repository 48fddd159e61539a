"""
Interest Catalog: per-user categories of rated items.
"""

from typing import List, Optional, Sequence
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from socialnet.core.errors import NotFoundError, ValidationError
from socialnet.core.logging import get_logger
from socialnet.models.interest import RATING_MAX, RATING_MIN, Interest, InterestItem

logger = get_logger(__name__)


def normalize_category(category: str) -> str:
    return category.strip()


class InterestService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: str) -> List[Interest]:
        stmt = (
            select(Interest)
            .where(Interest.user_id == user_id)
            .options(selectinload(Interest.items))
            .order_by(Interest.position, Interest.category)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _get(self, user_id: str, category: str) -> Optional[Interest]:
        stmt = (
            select(Interest)
            .where(Interest.user_id == user_id, Interest.category == normalize_category(category))
            .options(selectinload(Interest.items))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _replace_items(interest: Interest, items: Sequence[dict]) -> None:
        interest.items = [
            InterestItem(id=str(uuid4()), name=item["name"], rating=item["rating"], position=idx)
            for idx, item in enumerate(items)
        ]

    async def put_category(self, user_id: str, category: str, items: Sequence[dict]) -> Interest:
        """Create the category or replace its items, keeping the given order"""
        category = normalize_category(category)
        if not category:
            raise ValidationError("category cannot be empty")
        for item in items:
            if not RATING_MIN <= item["rating"] <= RATING_MAX:
                raise ValidationError(
                    f"rating must be between {RATING_MIN} and {RATING_MAX}",
                    details={"item": item["name"], "rating": item["rating"]},
                )

        interest = await self._get(user_id, category)
        if interest is None:
            max_pos = await self.db.scalar(
                select(func.max(Interest.position)).where(Interest.user_id == user_id)
            )
            interest = Interest(
                id=str(uuid4()),
                user_id=user_id,
                category=category,
                position=(max_pos + 1) if max_pos is not None else 0,
                items=[],
            )
            self.db.add(interest)

        self._replace_items(interest, items)
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent request created the same category first; overwrite its items
            await self.db.rollback()
            logger.info("interests.create_conflict", user_id=user_id, category=category)
            interest = await self._get(user_id, category)
            if interest is None:
                raise
            self._replace_items(interest, items)
            await self.db.commit()

        return await self._get(user_id, category)

    async def delete_category(self, user_id: str, category: str) -> None:
        interest = await self._get(user_id, category)
        if interest is None:
            raise NotFoundError("Interest category not found.", details={"category": normalize_category(category)})
        await self.db.delete(interest)
        await self.db.commit()
