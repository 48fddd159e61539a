from typing import TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialnet.models.base import Base, TimestampMixin

RATING_MIN = 1
RATING_MAX = 5

if TYPE_CHECKING:
    from socialnet.models.user import User


class Interest(Base, TimestampMixin):
    """One category of a user's interests (e.g. "Music")"""

    __tablename__ = "interests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("user_id", "category", name="uq_interests_user_category"),
        Index("idx_interests_user_position", "user_id", "position"),
    )

    user: Mapped["User"] = relationship("User", back_populates="interests")
    items: Mapped[List["InterestItem"]] = relationship(
        "InterestItem",
        back_populates="interest",
        cascade="all, delete-orphan",
        order_by="InterestItem.position",
    )


class InterestItem(Base):
    __tablename__ = "interest_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    interest_id: Mapped[str] = mapped_column(ForeignKey("interests.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(f"rating >= {RATING_MIN} AND rating <= {RATING_MAX}", name="chk_interest_items_rating"),
        Index("idx_interest_items_interest", "interest_id", "position"),
    )

    interest: Mapped["Interest"] = relationship("Interest", back_populates="items")
