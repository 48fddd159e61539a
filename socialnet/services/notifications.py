"""
Notification Relay

The friend engine hands relationship events to the relay after its transaction
commits. Delivery (persisting the inbox row, pushing over WebSocket) runs as a
background task; failures are logged and never reach the engine.
"""

import asyncio
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable, List, Optional, Set
from uuid import uuid4

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.config import settings
from socialnet.core.errors import NotFoundError
from socialnet.core.logging import LatencyLogger, get_logger
from socialnet.infra.db import AsyncSessionLocal
from socialnet.models.notification import (
    NOTIFICATION_FRIEND_REQUEST_ACCEPTED,
    NOTIFICATION_FRIEND_REQUEST_RECEIVED,
    Notification,
)
from socialnet.services.connection_manager import ConnectionManager, manager

logger = get_logger(__name__)


@dataclass(frozen=True)
class RelationshipEvent:
    type: str
    recipient_id: str
    sender_id: str
    request_id: str

    @classmethod
    def request_received(cls, recipient_id: str, sender_id: str, request_id: str) -> "RelationshipEvent":
        return cls(NOTIFICATION_FRIEND_REQUEST_RECEIVED, recipient_id, sender_id, request_id)

    @classmethod
    def request_accepted(cls, original_sender_id: str, accepter_id: str, request_id: str) -> "RelationshipEvent":
        return cls(NOTIFICATION_FRIEND_REQUEST_ACCEPTED, original_sender_id, accepter_id, request_id)


def serialize_notification(notification: Notification) -> dict:
    return {
        "id": notification.id,
        "type": notification.type,
        "actor_id": notification.actor_id,
        "payload": notification.payload or {},
        "is_read": notification.is_read,
        "created_at": notification.created_at.isoformat(),
    }


class NotificationRelay:
    """Fire-and-forget delivery of relationship events"""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        connections: ConnectionManager,
    ):
        self._session_factory = session_factory
        self._connections = connections
        self._tasks: Set[asyncio.Task] = set()

    def emit(self, event: RelationshipEvent) -> None:
        """Schedule delivery and return immediately"""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("notification.no_event_loop", event_type=event.type, recipient_id=event.recipient_id)
            return

        task = loop.create_task(self._deliver(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, event: RelationshipEvent) -> None:
        try:
            with LatencyLogger("notification.deliver", logger):
                async with self._session_factory() as session:
                    notification = Notification(
                        id=str(uuid4()),
                        user_id=event.recipient_id,
                        actor_id=event.sender_id,
                        type=event.type,
                        payload=asdict(event),
                        is_read=False,
                        created_at=datetime.utcnow(),
                    )
                    message = {"type": "notification", "data": serialize_notification(notification)}
                    session.add(notification)
                    await session.commit()

                pushed = await self._connections.send_to_user(event.recipient_id, message)
            logger.info(
                "notification.delivered",
                event_type=event.type,
                recipient_id=event.recipient_id,
                pushed=pushed,
            )
        except Exception as e:
            # the relationship change is already committed; only log
            logger.error(
                "notification.delivery_failed",
                event_type=event.type,
                recipient_id=event.recipient_id,
                error=str(e),
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for in-flight deliveries (shutdown, tests)"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


relay = NotificationRelay(AsyncSessionLocal, manager)


def get_notification_relay() -> NotificationRelay:
    return relay


class NotificationService:
    """Inbox queries for the notifications a user has received"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        stmt = stmt.limit(limit or settings.notification_page_size)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def unread_count(self, user_id: str) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        return (await self.db.scalar(stmt)) or 0

    async def mark_read(self, user_id: str, notification_id: str) -> Notification:
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
        notification = (await self.db.execute(stmt)).scalar_one_or_none()
        if notification is None:
            raise NotFoundError("Notification not found.")

        notification.is_read = True
        await self.db.commit()
        return notification

    async def mark_all_read(self, user_id: str) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount or 0
