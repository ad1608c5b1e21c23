"""
Restaurant rating endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, field_validator

from foodsync.database import get_db
from foodsync.models.account import Account, Role, Capability
from foodsync.models.rating import RestaurantRating
from foodsync.api.auth import require_capability
from foodsync.utils.validators import validate_rating
from foodsync.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


class RatingUpsert(BaseModel):
    rating: int
    review: Optional[str] = None

    @field_validator("rating")
    @classmethod
    def check_rating(cls, v: int) -> int:
        return validate_rating(v)


class RatingResponse(BaseModel):
    id: int
    user_id: int
    restaurant_id: int
    rating: int
    review: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class RatingSummary(BaseModel):
    restaurant_id: int
    rating_count: int
    average_rating: Optional[float]


async def rating_summary(db: AsyncSession, restaurant_id: int) -> RatingSummary:
    result = await db.execute(
        select(func.count(RestaurantRating.id), func.avg(RestaurantRating.rating))
        .where(RestaurantRating.restaurant_id == restaurant_id)
    )
    count, average = result.one()
    return RatingSummary(
        restaurant_id=restaurant_id,
        rating_count=count or 0,
        average_rating=round(float(average), 2) if average is not None else None,
    )


async def _get_restaurant(db: AsyncSession, restaurant_id: int) -> Account:
    restaurant = await db.get(Account, restaurant_id)
    if not restaurant or Role(restaurant.role) != Role.RESTAURANT:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


async def _find_rating(db: AsyncSession, user_id: int, restaurant_id: int) -> Optional[RestaurantRating]:
    result = await db.execute(
        select(RestaurantRating).where(
            RestaurantRating.user_id == user_id,
            RestaurantRating.restaurant_id == restaurant_id,
        )
    )
    return result.scalar_one_or_none()


@router.put("/restaurant/{restaurant_id}", response_model=RatingResponse)
async def rate_restaurant(
    restaurant_id: int,
    data: RatingUpsert,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.RATE_RESTAURANTS)),
):
    """Create or replace the caller's rating of a restaurant"""
    await _get_restaurant(db, restaurant_id)

    rating = await _find_rating(db, current_account.id, restaurant_id)
    if rating:
        rating.rating = data.rating
        rating.review = data.review or None
    else:
        rating = RestaurantRating(
            user_id=current_account.id,
            restaurant_id=restaurant_id,
            rating=data.rating,
            review=data.review or None,
        )
        db.add(rating)

    await db.commit()
    await db.refresh(rating)
    logger.info(f"User {current_account.id} rated restaurant {restaurant_id}: {data.rating}")
    return rating


@router.get("/restaurant/{restaurant_id}/mine", response_model=Optional[RatingResponse])
async def get_my_rating(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.RATE_RESTAURANTS)),
):
    return await _find_rating(db, current_account.id, restaurant_id)


@router.get("/restaurant/{restaurant_id}/summary", response_model=RatingSummary)
async def get_rating_summary(restaurant_id: int, db: AsyncSession = Depends(get_db)):
    await _get_restaurant(db, restaurant_id)
    return await rating_summary(db, restaurant_id)
