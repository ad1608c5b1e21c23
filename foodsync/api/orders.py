"""
User order endpoints - place orders and view order history and stats
"""
from collections import Counter

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from foodsync.database import get_db
from foodsync.models.account import Account, Role, Capability
from foodsync.models.menu_item import MenuItem
from foodsync.models.order import UserOrder
from foodsync.api.auth import require_capability
from foodsync.services.request_lifecycle import resolve_display_names
from foodsync.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


class OrderLine(BaseModel):
    menu_item_id: int
    quantity: int = Field(ge=1)


class OrderCreate(BaseModel):
    restaurant_id: int
    items: List[OrderLine] = Field(min_length=1)


class OrderItemResponse(BaseModel):
    menu_item_id: int
    name: str
    price: float
    quantity: int
    total: float


class OrderResponse(BaseModel):
    id: int
    user_id: int
    restaurant_id: int
    restaurant_name: Optional[str] = None
    items: List[OrderItemResponse]
    total_amount: float
    status: str
    order_date: Optional[datetime]


class UserStats(BaseModel):
    total_orders: int
    total_spent: float
    avg_order_value: float
    favorite_restaurant: Optional[str]


def _response(order: UserOrder, restaurant_name: Optional[str] = None) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        restaurant_id=order.restaurant_id,
        restaurant_name=restaurant_name,
        items=order.items,
        total_amount=order.total_amount,
        status=order.status,
        order_date=order.order_date,
    )


@router.post("/", response_model=OrderResponse)
async def place_order(
    data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.PLACE_ORDERS)),
):
    """Place an order; prices are taken from the restaurant's current menu"""
    restaurant = await db.get(Account, data.restaurant_id)
    if not restaurant or Role(restaurant.role) != Role.RESTAURANT:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    item_ids = {line.menu_item_id for line in data.items}
    result = await db.execute(
        select(MenuItem).where(
            MenuItem.id.in_(item_ids),
            MenuItem.restaurant_id == restaurant.id,
            MenuItem.is_available == True,
        )
    )
    menu = {item.id: item for item in result.scalars().all()}

    missing = sorted(item_ids - set(menu))
    if missing:
        raise HTTPException(
            status_code=422,
            detail=f"Menu items not available at this restaurant: {missing}",
        )

    lines = []
    for line in data.items:
        item = menu[line.menu_item_id]
        lines.append({
            "menu_item_id": item.id,
            "name": item.name,
            "price": float(item.price),
            "quantity": line.quantity,
            "total": round(float(item.price) * line.quantity, 2),
        })

    order = UserOrder(
        user_id=current_account.id,
        restaurant_id=restaurant.id,
        items=lines,
        total_amount=round(sum(l["total"] for l in lines), 2),
        status="completed",
    )
    db.add(order)
    await db.commit()
    await db.refresh(order)
    logger.info(f"User {current_account.id} placed order {order.id} at restaurant {restaurant.id}")
    return _response(order, restaurant.display_name)


@router.get("/", response_model=List[OrderResponse])
async def list_my_orders(
    limit: int = Query(5, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.PLACE_ORDERS)),
):
    """Most recent orders first"""
    result = await db.execute(
        select(UserOrder)
        .where(UserOrder.user_id == current_account.id)
        .order_by(UserOrder.order_date.desc(), UserOrder.id.desc())
        .limit(limit)
    )
    orders = result.scalars().all()
    names = await resolve_display_names(db, (o.restaurant_id for o in orders))
    return [_response(o, names.get(o.restaurant_id)) for o in orders]


@router.get("/stats", response_model=UserStats)
async def get_my_stats(
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.PLACE_ORDERS)),
):
    result = await db.execute(
        select(UserOrder.restaurant_id, UserOrder.total_amount)
        .where(UserOrder.user_id == current_account.id)
    )
    rows = result.all()
    if not rows:
        return UserStats(total_orders=0, total_spent=0.0, avg_order_value=0.0, favorite_restaurant=None)

    total_spent = round(sum(float(r.total_amount) for r in rows), 2)
    favorite_id, _ = Counter(r.restaurant_id for r in rows).most_common(1)[0]
    names = await resolve_display_names(db, [favorite_id])
    return UserStats(
        total_orders=len(rows),
        total_spent=total_spent,
        avg_order_value=round(total_spent / len(rows), 2),
        favorite_restaurant=names.get(favorite_id),
    )
