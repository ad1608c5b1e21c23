"""
User preference endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from foodsync.database import get_db
from foodsync.models.account import Account, Role
from foodsync.models.rating import UserPreferences
from foodsync.api.auth import require_role
from foodsync.utils.validators import split_comma_list

router = APIRouter()


class PreferencesUpdate(BaseModel):
    # Lists may arrive as "pizza, pasta" strings from the preferences form
    favorite_foods: Union[List[str], str, None] = None
    dietary_restrictions: Union[List[str], str, None] = None
    avg_quantity_ordered: Optional[float] = Field(default=None, ge=0)
    family_members: Optional[int] = Field(default=None, ge=1)
    ac_preference: bool = False

    @field_validator("favorite_foods", "dietary_restrictions")
    @classmethod
    def split_lists(cls, v):
        return split_comma_list(v)


class PreferencesResponse(BaseModel):
    id: int
    user_id: int
    favorite_foods: List[str]
    dietary_restrictions: List[str]
    avg_quantity_ordered: Optional[float]
    family_members: Optional[int]
    ac_preference: bool
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


def _response(prefs: UserPreferences) -> PreferencesResponse:
    return PreferencesResponse(
        id=prefs.id,
        user_id=prefs.user_id,
        favorite_foods=prefs.favorite_foods or [],
        dietary_restrictions=prefs.dietary_restrictions or [],
        avg_quantity_ordered=prefs.avg_quantity_ordered,
        family_members=prefs.family_members,
        ac_preference=bool(prefs.ac_preference),
        updated_at=prefs.updated_at,
    )


async def _find(db: AsyncSession, user_id: int) -> Optional[UserPreferences]:
    result = await db.execute(select(UserPreferences).where(UserPreferences.user_id == user_id))
    return result.scalar_one_or_none()


@router.get("/", response_model=Optional[PreferencesResponse])
async def get_preferences(
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_role(Role.USER)),
):
    prefs = await _find(db, current_account.id)
    return _response(prefs) if prefs else None


@router.put("/", response_model=PreferencesResponse)
async def save_preferences(
    data: PreferencesUpdate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_role(Role.USER)),
):
    """Create or overwrite the caller's preferences"""
    prefs = await _find(db, current_account.id)
    if prefs is None:
        prefs = UserPreferences(user_id=current_account.id)
        db.add(prefs)

    for key, value in data.model_dump().items():
        setattr(prefs, key, value)

    await db.commit()
    await db.refresh(prefs)
    return _response(prefs)
