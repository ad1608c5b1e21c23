"""
Directory endpoints - explore restaurants and find NGOs and packing companies
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional
from pydantic import BaseModel

from foodsync.database import get_db
from foodsync.models.account import Account, Role
from foodsync.models.rating import RestaurantRating
from foodsync.api.auth import get_current_account
from foodsync.api.menu import MenuItemResponse, list_menu
from foodsync.api.ratings import RatingSummary, rating_summary

router = APIRouter()


class DirectoryEntry(BaseModel):
    id: int
    display_name: str
    email: str
    phone_number: Optional[str]
    address: Optional[str]
    description: Optional[str] = None
    contact_person: Optional[str] = None
    specialty: Optional[str] = None
    verified: bool

    class Config:
        from_attributes = True


class RestaurantListing(DirectoryEntry):
    average_rating: Optional[float] = None
    rating_count: int = 0


class RestaurantDetail(BaseModel):
    restaurant: DirectoryEntry
    menu: List[MenuItemResponse]
    ratings: RatingSummary


async def _list_role(db: AsyncSession, role: Role, search: Optional[str] = None) -> list[Account]:
    query = select(Account).where(Account.role == role).order_by(Account.display_name)
    if search:
        query = query.where(Account.display_name.ilike(f"%{search}%"))
    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("/restaurants", response_model=List[RestaurantListing])
async def explore_restaurants(
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    """All restaurants with their rating averages"""
    restaurants = await _list_role(db, Role.RESTAURANT, search)

    result = await db.execute(
        select(
            RestaurantRating.restaurant_id,
            func.count(RestaurantRating.id),
            func.avg(RestaurantRating.rating),
        ).group_by(RestaurantRating.restaurant_id)
    )
    stats = {rid: (count, avg) for rid, count, avg in result.all()}

    listings = []
    for r in restaurants:
        count, avg = stats.get(r.id, (0, None))
        listing = RestaurantListing.model_validate(r)
        listing.rating_count = count
        listing.average_rating = round(float(avg), 2) if avg is not None else None
        listings.append(listing)
    return listings


@router.get("/restaurants/{restaurant_id}", response_model=RestaurantDetail)
async def get_restaurant(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    """Restaurant profile with its available menu and rating summary"""
    restaurant = await db.get(Account, restaurant_id)
    if not restaurant or Role(restaurant.role) != Role.RESTAURANT:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return RestaurantDetail(
        restaurant=DirectoryEntry.model_validate(restaurant),
        menu=[
            MenuItemResponse.model_validate(item)
            for item in await list_menu(db, restaurant_id, available_only=True)
        ],
        ratings=await rating_summary(db, restaurant_id),
    )


@router.get("/ngos", response_model=List[DirectoryEntry])
async def list_ngos(
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    """NGOs a restaurant can schedule pickups with"""
    return await _list_role(db, Role.NGO, search)


@router.get("/packing-companies", response_model=List[DirectoryEntry])
async def list_packing_companies(
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    """Packing companies that can receive packing requests"""
    return await _list_role(db, Role.PACKING, search)
