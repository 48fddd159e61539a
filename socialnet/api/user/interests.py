from typing import List

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, ConfigDict, Field

from socialnet.core.deps import InterestServiceDep, get_current_user_id
from socialnet.models.interest import RATING_MAX, RATING_MIN

router = APIRouter(tags=["interests"])

# ============ Schemas ============

class InterestItemSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    rating: int = Field(..., ge=RATING_MIN, le=RATING_MAX)

    model_config = ConfigDict(from_attributes=True)


class InterestSchema(BaseModel):
    category: str
    items: List[InterestItemSchema]

    model_config = ConfigDict(from_attributes=True)


class InterestUpdateRequest(BaseModel):
    items: List[InterestItemSchema] = Field(default_factory=list)

# ============ Endpoints ============

@router.get("/user/interests", response_model=List[InterestSchema])
async def list_my_interests(
    interests: InterestServiceDep,
    user_id: str = Depends(get_current_user_id),
):
    return await interests.list_for_user(user_id)


@router.put("/user/interests/{category}", response_model=InterestSchema)
async def put_interest_category(
    data: InterestUpdateRequest,
    interests: InterestServiceDep,
    category: str = Path(..., min_length=1, max_length=64),
    user_id: str = Depends(get_current_user_id),
):
    """
    Create a category or replace its items (order is kept)
    """
    return await interests.put_category(
        user_id, category, [item.model_dump() for item in data.items]
    )


@router.delete("/user/interests/{category}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_interest_category(
    interests: InterestServiceDep,
    category: str = Path(..., min_length=1, max_length=64),
    user_id: str = Depends(get_current_user_id),
):
    await interests.delete_category(user_id, category)
