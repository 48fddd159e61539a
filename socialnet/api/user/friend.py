from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, ConfigDict

from socialnet.api.user.interests import InterestSchema
from socialnet.api.user.profile import UserSummary
from socialnet.core.deps import FriendServiceDep, get_current_user_id
from socialnet.models.friend import FriendRequest as FriendRequestModel
from socialnet.services.friends import FriendDecision

router = APIRouter(tags=["friend"])

# --- Schemas ---

class SendFriendRequestPayload(BaseModel):
    recipient_id: str


class RespondFriendRequestPayload(BaseModel):
    decision: FriendDecision


class FriendRequestRecord(BaseModel):
    id: str
    sender_id: str
    recipient_id: str
    status: str
    created_at: datetime
    responded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ReceivedFriendRequest(FriendRequestRecord):
    sender: UserSummary


class SentFriendRequest(FriendRequestRecord):
    recipient: UserSummary


class FriendRequestDetail(FriendRequestRecord):
    sender: UserSummary
    recipient: UserSummary


class FriendProfile(BaseModel):
    id: str
    name: str
    username: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    interests: List[InterestSchema]


def _record(request: FriendRequestModel) -> FriendRequestRecord:
    return FriendRequestRecord.model_validate(request)

# --- Requests ---

@router.post(
    "/user/friend/request",
    response_model=FriendRequestRecord,
    status_code=status.HTTP_201_CREATED,
)
async def send_friend_request(
    payload: SendFriendRequestPayload,
    friends: FriendServiceDep,
    user_id: str = Depends(get_current_user_id),
):
    request = await friends.send_request(user_id, payload.recipient_id)
    return _record(request)


@router.get("/user/friend/requests/received", response_model=List[ReceivedFriendRequest])
async def get_received_friend_requests(
    friends: FriendServiceDep,
    user_id: str = Depends(get_current_user_id),
):
    """
    Pending requests addressed to me, newest first
    """
    return await friends.list_pending_requests(user_id)


@router.get("/user/friend/requests/sent", response_model=List[SentFriendRequest])
async def get_sent_friend_requests(
    friends: FriendServiceDep,
    user_id: str = Depends(get_current_user_id),
):
    return await friends.list_sent_requests(user_id)


@router.get("/user/friend/request/{request_id}", response_model=FriendRequestDetail)
async def get_friend_request(
    friends: FriendServiceDep,
    request_id: str = Path(..., description="The ID of the friend request"),
    user_id: str = Depends(get_current_user_id),
):
    return await friends.get_request(request_id, user_id)


@router.post("/user/friend/request/{request_id}/respond", response_model=FriendRequestRecord)
async def respond_friend_request(
    payload: RespondFriendRequestPayload,
    friends: FriendServiceDep,
    request_id: str = Path(..., description="The ID of the friend request"),
    user_id: str = Depends(get_current_user_id),
):
    request = await friends.respond_to_request(request_id, user_id, payload.decision)
    return _record(request)


@router.post("/user/friend/request/{request_id}/accept", response_model=FriendRequestRecord)
async def accept_friend_request(
    friends: FriendServiceDep,
    request_id: str = Path(..., description="The ID of the friend request"),
    user_id: str = Depends(get_current_user_id),
):
    request = await friends.respond_to_request(request_id, user_id, FriendDecision.ACCEPT)
    return _record(request)


@router.post("/user/friend/request/{request_id}/reject", response_model=FriendRequestRecord)
async def reject_friend_request(
    friends: FriendServiceDep,
    request_id: str = Path(..., description="The ID of the friend request"),
    user_id: str = Depends(get_current_user_id),
):
    request = await friends.respond_to_request(request_id, user_id, FriendDecision.REJECT)
    return _record(request)

# --- Friendships ---

@router.get("/user/friends", response_model=List[UserSummary])
async def list_friends(
    friends: FriendServiceDep,
    user_id: str = Depends(get_current_user_id),
):
    return await friends.list_friends(user_id)


@router.delete("/user/friends/{friend_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unfriend(
    friends: FriendServiceDep,
    friend_id: str = Path(...),
    user_id: str = Depends(get_current_user_id),
):
    await friends.unfriend(user_id, friend_id)


@router.get("/user/friends/{friend_id}/profile", response_model=FriendProfile)
async def get_friend_profile(
    friends: FriendServiceDep,
    friend_id: str = Path(...),
    user_id: str = Depends(get_current_user_id),
):
    friend, interests = await friends.get_friend_profile(user_id, friend_id)
    return FriendProfile(
        id=friend.id,
        name=friend.name,
        username=friend.username,
        avatar=friend.avatar,
        bio=friend.bio,
        interests=[InterestSchema.model_validate(i) for i in interests],
    )
