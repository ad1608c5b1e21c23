"""
Restaurant menu endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from foodsync.database import get_db
from foodsync.models.account import Account, Role, Capability
from foodsync.models.menu_item import MenuItem
from foodsync.api.auth import require_capability

router = APIRouter()


# --- Pydantic Schemas ---

class MenuItemResponse(BaseModel):
    id: int
    restaurant_id: int
    name: str
    description: Optional[str]
    price: float
    is_vegetarian: bool
    is_vegan: bool
    carbon_footprint: Optional[float]
    is_available: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class MenuItemCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(ge=0)
    is_vegetarian: bool = False
    is_vegan: bool = False
    carbon_footprint: Optional[float] = Field(default=None, ge=0)
    is_available: bool = True


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    is_vegetarian: Optional[bool] = None
    is_vegan: Optional[bool] = None
    carbon_footprint: Optional[float] = Field(default=None, ge=0)
    is_available: Optional[bool] = None


# --- Helpers ---

async def list_menu(db: AsyncSession, restaurant_id: int, available_only: bool = False) -> list[MenuItem]:
    query = select(MenuItem).where(MenuItem.restaurant_id == restaurant_id).order_by(MenuItem.name)
    if available_only:
        query = query.where(MenuItem.is_available == True)
    result = await db.execute(query)
    return list(result.scalars().all())


async def _get_owned_item(db: AsyncSession, item_id: int, restaurant: Account) -> MenuItem:
    item = await db.get(MenuItem, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    if item.restaurant_id != restaurant.id:
        raise HTTPException(status_code=403, detail="Menu item belongs to another restaurant")
    return item


# --- Endpoints ---

@router.get("/restaurant/{restaurant_id}", response_model=List[MenuItemResponse])
async def get_restaurant_menu(
    restaurant_id: int,
    available_only: bool = False,
    db: AsyncSession = Depends(get_db),
):
    """Public menu of a restaurant"""
    restaurant = await db.get(Account, restaurant_id)
    if not restaurant or Role(restaurant.role) != Role.RESTAURANT:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return await list_menu(db, restaurant_id, available_only)


@router.get("/", response_model=List[MenuItemResponse])
async def list_my_menu(
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.OWN_MENU)),
):
    """The calling restaurant's full menu, unavailable items included"""
    return await list_menu(db, current_account.id)


@router.post("/", response_model=MenuItemResponse)
async def create_menu_item(
    data: MenuItemCreate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.OWN_MENU)),
):
    item = MenuItem(restaurant_id=current_account.id, **data.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


@router.put("/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    item_id: int,
    data: MenuItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.OWN_MENU)),
):
    item = await _get_owned_item(db, item_id, current_account)

    updates = data.model_dump(exclude_none=True)
    for key, value in updates.items():
        setattr(item, key, value)

    await db.commit()
    await db.refresh(item)
    return item


@router.delete("/{item_id}")
async def delete_menu_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.OWN_MENU)),
):
    item = await _get_owned_item(db, item_id, current_account)
    await db.delete(item)
    await db.commit()
    return {"message": "Menu item deleted"}
