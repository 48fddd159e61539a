"""
API Router
"""

from fastapi import APIRouter, Depends

from socialnet.api.user.friend import router as friend_router
from socialnet.api.user.interests import router as interests_router
from socialnet.api.user.login import router as auth_router
from socialnet.api.user.notifications import router as notifications_router
from socialnet.api.user.profile import router as profile_router
from socialnet.core.token import security_scheme

api_router = APIRouter()

# 1. Routes that DON'T need authentication
api_router.include_router(auth_router)

# 2. Routes that DO need authentication (Protected)
api_router.include_router(profile_router, dependencies=[Depends(security_scheme)])
api_router.include_router(interests_router, dependencies=[Depends(security_scheme)])
api_router.include_router(friend_router, dependencies=[Depends(security_scheme)])
api_router.include_router(notifications_router, dependencies=[Depends(security_scheme)])


@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
