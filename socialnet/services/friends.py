"""
Friend Relationship Engine

Owns every transition of the friend request state machine and is the only
writer of FriendRequest and FriendshipEdge rows:

    pending -> accepted   (creates the friendship edge)
    pending -> rejected

Both outcomes are terminal. Unfriending deletes the edge and leaves the
originating request untouched. Each mutation runs as one transaction while
holding the lock for its user pair; notifications go out after the commit.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from enum import Enum
from typing import AsyncIterator, List, Optional, Tuple, Type
from uuid import uuid4

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from socialnet.core.errors import (
    AlreadyFriendsError,
    AlreadyResolvedError,
    AppError,
    DuplicatePendingError,
    InvalidTargetError,
    NotAuthorizedError,
    NotFriendsError,
    RequestNotFoundError,
)
from socialnet.core.logging import get_logger
from socialnet.models.friend import (
    REQUEST_ACCEPTED,
    REQUEST_PENDING,
    REQUEST_REJECTED,
    FriendRequest,
    FriendshipEdge,
    ordered_pair,
    pair_key,
)
from socialnet.models.interest import Interest
from socialnet.models.user import User
from socialnet.services.identity import IdentityService
from socialnet.services.interests import InterestService
from socialnet.services.locks import PairLockRegistry
from socialnet.services.notifications import NotificationRelay, RelationshipEvent

logger = get_logger(__name__)


class FriendDecision(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class FriendService:
    """Friend requests and friendships for one database session"""

    def __init__(self, db: AsyncSession, relay: NotificationRelay, locks: PairLockRegistry):
        self.db = db
        self.relay = relay
        self.locks = locks
        self.identity = IdentityService(db)

    # ============ Internals ============

    @asynccontextmanager
    async def _atomic(
        self,
        user_a: str,
        user_b: str,
        conflict_error: Type[AppError],
    ) -> AsyncIterator[None]:
        """Serialize on the pair and commit (or roll back) as one unit.

        A unique-constraint violation means another process won the race for
        the same pair; it surfaces as ``conflict_error``.
        """
        async with self.locks.hold(user_a, user_b):
            try:
                yield
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                logger.warning("friend.write_conflict", pair=pair_key(user_a, user_b), error=str(e.orig))
                raise conflict_error() from e
            except Exception:
                await self.db.rollback()
                raise

    async def _edge_between(self, user_a: str, user_b: str) -> Optional[FriendshipEdge]:
        low, high = ordered_pair(user_a, user_b)
        stmt = select(FriendshipEdge).where(
            FriendshipEdge.user_low_id == low,
            FriendshipEdge.user_high_id == high,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _pending_between(self, user_a: str, user_b: str) -> Optional[FriendRequest]:
        stmt = select(FriendRequest).where(FriendRequest.pending_pair_key == pair_key(user_a, user_b))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    # ============ Commands ============

    async def send_request(self, sender_id: str, recipient_id: str) -> FriendRequest:
        if sender_id == recipient_id:
            raise InvalidTargetError()

        await self.identity.resolve_user(sender_id)
        await self.identity.resolve_user(recipient_id)

        async with self._atomic(sender_id, recipient_id, DuplicatePendingError):
            if await self._edge_between(sender_id, recipient_id):
                raise AlreadyFriendsError()

            existing = await self._pending_between(sender_id, recipient_id)
            if existing:
                if existing.sender_id == sender_id:
                    raise DuplicatePendingError(
                        "You have already sent a friend request.",
                        details={"request_id": existing.id},
                    )
                raise DuplicatePendingError(
                    "This user has already sent you a friend request. Please check your inbox.",
                    details={"request_id": existing.id},
                )

            request = FriendRequest(
                id=str(uuid4()),
                sender_id=sender_id,
                recipient_id=recipient_id,
                status=REQUEST_PENDING,
                created_at=datetime.utcnow(),
                pending_pair_key=pair_key(sender_id, recipient_id),
            )
            self.db.add(request)

        logger.info("friend.request_sent", request_id=request.id, sender_id=sender_id, recipient_id=recipient_id)
        self.relay.emit(RelationshipEvent.request_received(recipient_id, sender_id, request.id))
        return request

    async def respond_to_request(
        self,
        request_id: str,
        responder_id: str,
        decision: FriendDecision,
    ) -> FriendRequest:
        decision = FriendDecision(decision)

        request = await self.db.get(FriendRequest, request_id)
        if request is None:
            raise RequestNotFoundError(details={"request_id": request_id})
        if request.recipient_id != responder_id:
            raise NotAuthorizedError()

        async with self._atomic(request.sender_id, request.recipient_id, AlreadyFriendsError):
            # Re-read under the pair lock; a concurrent response may have won
            request = await self.db.get(
                FriendRequest, request_id, populate_existing=True, with_for_update=True
            )
            if not request.is_pending:
                raise AlreadyResolvedError(
                    f"Request is already {request.status}.",
                    details={"request_id": request_id, "status": request.status},
                )

            now = datetime.utcnow()
            request.responded_at = now
            request.pending_pair_key = None

            if decision is FriendDecision.ACCEPT:
                request.status = REQUEST_ACCEPTED
                low, high = ordered_pair(request.sender_id, request.recipient_id)
                self.db.add(FriendshipEdge(
                    id=str(uuid4()),
                    user_low_id=low,
                    user_high_id=high,
                    request_id=request.id,
                    since=now,
                ))
            else:
                request.status = REQUEST_REJECTED

        logger.info(
            "friend.request_resolved",
            request_id=request.id,
            status=request.status,
            responder_id=responder_id,
        )
        # Rejections are silent: the sender is never told
        if decision is FriendDecision.ACCEPT:
            self.relay.emit(RelationshipEvent.request_accepted(request.sender_id, responder_id, request.id))
        return request

    async def unfriend(self, user_id: str, friend_id: str) -> None:
        async with self._atomic(user_id, friend_id, NotFriendsError):
            edge = await self._edge_between(user_id, friend_id)
            if edge is None:
                raise NotFriendsError(details={"friend_id": friend_id})
            await self.db.delete(edge)

        logger.info("friend.unfriended", user_id=user_id, friend_id=friend_id)

    # ============ Queries ============

    async def are_friends(self, user_a: str, user_b: str) -> bool:
        if user_a == user_b:
            return False
        return await self._edge_between(user_a, user_b) is not None

    async def list_friends(self, user_id: str) -> List[User]:
        stmt = (
            select(User)
            .join(FriendshipEdge, or_(
                and_(FriendshipEdge.user_low_id == user_id, FriendshipEdge.user_high_id == User.id),
                and_(FriendshipEdge.user_high_id == user_id, FriendshipEdge.user_low_id == User.id),
            ))
            .order_by(User.name, User.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_pending_requests(self, user_id: str) -> List[FriendRequest]:
        """Pending requests addressed to the user, newest first"""
        stmt = (
            select(FriendRequest)
            .where(FriendRequest.recipient_id == user_id, FriendRequest.status == REQUEST_PENDING)
            .options(selectinload(FriendRequest.sender))
            .order_by(FriendRequest.created_at.desc(), FriendRequest.id.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_sent_requests(self, user_id: str) -> List[FriendRequest]:
        """Pending requests the user has sent, newest first"""
        stmt = (
            select(FriendRequest)
            .where(FriendRequest.sender_id == user_id, FriendRequest.status == REQUEST_PENDING)
            .options(selectinload(FriendRequest.recipient))
            .order_by(FriendRequest.created_at.desc(), FriendRequest.id.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_request(self, request_id: str, viewer_id: str) -> FriendRequest:
        """A single request, visible only to its sender and recipient"""
        stmt = (
            select(FriendRequest)
            .where(FriendRequest.id == request_id)
            .options(selectinload(FriendRequest.sender), selectinload(FriendRequest.recipient))
        )
        request = (await self.db.execute(stmt)).scalar_one_or_none()
        if request is None or viewer_id not in (request.sender_id, request.recipient_id):
            raise RequestNotFoundError(details={"request_id": request_id})
        return request

    async def get_friend_profile(self, user_id: str, friend_id: str) -> Tuple[User, List[Interest]]:
        if not await self.are_friends(user_id, friend_id):
            raise NotFriendsError(details={"friend_id": friend_id})
        friend = await self.identity.resolve_user(friend_id)
        interests = await InterestService(self.db).list_for_user(friend_id)
        return friend, interests
