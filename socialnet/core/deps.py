"""
Dependency Injection

FastAPI dependencies for routes.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.token import CurrentUserDep, get_current_user_id, security_scheme
from socialnet.infra.db import get_db
from socialnet.services.friends import FriendService
from socialnet.services.identity import IdentityService
from socialnet.services.interests import InterestService
from socialnet.services.locks import PairLockRegistry, pair_locks
from socialnet.services.notifications import NotificationRelay, NotificationService, get_notification_relay


# Type aliases for common dependencies
SessionDep = Annotated[AsyncSession, Depends(get_db)]
RelayDep = Annotated[NotificationRelay, Depends(get_notification_relay)]


def get_pair_locks() -> PairLockRegistry:
    return pair_locks


def get_identity_service(db: SessionDep) -> IdentityService:
    return IdentityService(db)


def get_interest_service(db: SessionDep) -> InterestService:
    return InterestService(db)


def get_friend_service(
    db: SessionDep,
    relay: RelayDep,
    locks: Annotated[PairLockRegistry, Depends(get_pair_locks)],
) -> FriendService:
    return FriendService(db, relay=relay, locks=locks)


def get_notification_service(db: SessionDep) -> NotificationService:
    return NotificationService(db)


IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
InterestServiceDep = Annotated[InterestService, Depends(get_interest_service)]
FriendServiceDep = Annotated[FriendService, Depends(get_friend_service)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
