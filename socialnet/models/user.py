from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialnet.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from socialnet.models.interest import Interest
    from socialnet.models.token import AuthToken


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # status: active | disabled (users are never hard-deleted)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")

    # Relationships
    interests: Mapped[List["Interest"]] = relationship(
        "Interest",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Interest.position",
    )
    tokens: Mapped[List["AuthToken"]] = relationship("AuthToken", back_populates="user")
