from datetime import datetime
from typing import TYPE_CHECKING, Optional, Tuple

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialnet.models.base import Base

if TYPE_CHECKING:
    from socialnet.models.user import User


REQUEST_PENDING = "pending"
REQUEST_ACCEPTED = "accepted"
REQUEST_REJECTED = "rejected"


def ordered_pair(a: str, b: str) -> Tuple[str, str]:
    """Canonical (low, high) ordering of an unordered user pair"""
    return (a, b) if a <= b else (b, a)


def pair_key(a: str, b: str) -> str:
    low, high = ordered_pair(a, b)
    return f"{low}:{high}"


class FriendRequest(Base):
    __tablename__ = "friend_requests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    sender_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    recipient_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)

    # status: 'pending' | 'accepted' | 'rejected'
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=REQUEST_PENDING)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)

    # "<low>:<high>" while pending, NULL once resolved
    pending_pair_key: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)

    __table_args__ = (
        CheckConstraint("sender_id <> recipient_id", name="chk_friend_requests_not_self"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="chk_friend_requests_status",
        ),
        # At most one pending request per unordered pair
        UniqueConstraint("pending_pair_key", name="uq_friend_requests_pending_pair"),
        Index("idx_friend_requests_recipient", "recipient_id", "status", "created_at"),
        Index("idx_friend_requests_sender", "sender_id", "status", "created_at"),
    )

    sender: Mapped["User"] = relationship("User", foreign_keys=[sender_id])
    recipient: Mapped["User"] = relationship("User", foreign_keys=[recipient_id])

    @property
    def is_pending(self) -> bool:
        return self.status == REQUEST_PENDING


class FriendshipEdge(Base):
    """Active friendship between two users, keyed by the ordered pair"""

    __tablename__ = "friendship_edges"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_low_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    user_high_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    request_id: Mapped[Optional[str]] = mapped_column(ForeignKey("friend_requests.id"), nullable=True)
    since: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("user_low_id < user_high_id", name="chk_friendship_edges_ordered"),
        UniqueConstraint("user_low_id", "user_high_id", name="uq_friendship_edges_pair"),
        Index("idx_friendship_edges_high", "user_high_id"),
    )
