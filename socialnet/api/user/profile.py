from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from socialnet.api.user.login import USERNAME_PATTERN
from socialnet.core.deps import IdentityServiceDep, get_current_user_id
from socialnet.core.errors import ValidationError

router = APIRouter(tags=["profile"])


class UserProfile(BaseModel):
    id: str
    email: EmailStr
    name: str
    username: str
    avatar: Optional[str] = None
    bio: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    id: str
    name: str
    username: str
    avatar: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    username: Optional[str] = Field(None, min_length=3, max_length=64, pattern=USERNAME_PATTERN)
    avatar: Optional[str] = Field(None, max_length=512)
    bio: Optional[str] = None


@router.get("/user/profile", response_model=UserProfile)
async def get_user_profile(
    identity: IdentityServiceDep,
    user_id: str = Depends(get_current_user_id),
):
    return await identity.resolve_user(user_id)


@router.patch("/user/profile", response_model=UserProfile)
async def update_user_profile(
    data: UserProfileUpdateRequest,
    identity: IdentityServiceDep,
    user_id: str = Depends(get_current_user_id),
):
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No update fields provided")
    if "name" in changes and (changes["name"] is None or not changes["name"].strip()):
        raise ValidationError("name cannot be empty")
    if "username" in changes and changes["username"] is None:
        raise ValidationError("username cannot be empty")

    return await identity.update_profile(user_id, changes)


@router.get("/user/search", response_model=List[UserSummary])
async def search_users(
    identity: IdentityServiceDep,
    q: str = Query(..., min_length=1, max_length=64),
    user_id: str = Depends(get_current_user_id),
):
    """
    Find people to add, matching name or username
    """
    return await identity.search(q, exclude_user_id=user_id)
