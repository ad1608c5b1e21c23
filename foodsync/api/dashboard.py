"""
Dashboard API - per-role summary counts for the landing page
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Dict
from pydantic import BaseModel

from foodsync.database import get_db
from foodsync.models.account import Account, Role
from foodsync.models.menu_item import MenuItem
from foodsync.models.order import UserOrder
from foodsync.models.rating import RestaurantRating
from foodsync.models.request import RequestStatus
from foodsync.api.auth import get_current_account
from foodsync.services.request_lifecycle import FOOD, PACKING, PICKUP, count_requests

router = APIRouter()


class DashboardSummary(BaseModel):
    role: Role
    dashboard: str
    display_name: str
    counts: Dict[str, int]


async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return result.scalar() or 0


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    role = Role(current_account.role)
    me = current_account.id
    pending = RequestStatus.PENDING
    counts: Dict[str, int] = {}

    if role == Role.RESTAURANT:
        counts["menu_items"] = await _count(
            db, select(func.count(MenuItem.id)).where(MenuItem.restaurant_id == me)
        )
        counts["pending_food_requests"] = await count_requests(db, FOOD, me, FOOD.addressee_column, pending)
        counts["pickups_scheduled"] = await count_requests(db, PICKUP, me, PICKUP.requester_column)
        counts["packing_requests_sent"] = await count_requests(db, PACKING, me, PACKING.requester_column)
        counts["ratings"] = await _count(
            db, select(func.count(RestaurantRating.id)).where(RestaurantRating.restaurant_id == me)
        )
    elif role == Role.NGO:
        counts["food_requests_sent"] = await count_requests(db, FOOD, me, FOOD.requester_column)
        counts["pending_pickups"] = await count_requests(db, PICKUP, me, PICKUP.addressee_column, pending)
        counts["packing_requests_sent"] = await count_requests(db, PACKING, me, PACKING.requester_column)
    elif role == Role.PACKING:
        counts["pending_packing_requests"] = await count_requests(
            db, PACKING, me, PACKING.addressee_column, pending
        )
        counts["packing_requests_total"] = await count_requests(db, PACKING, me, PACKING.addressee_column)
    elif role == Role.USER:
        counts["orders"] = await _count(
            db, select(func.count(UserOrder.id)).where(UserOrder.user_id == me)
        )
        counts["ratings_given"] = await _count(
            db, select(func.count(RestaurantRating.id)).where(RestaurantRating.user_id == me)
        )
    elif role == Role.ADMIN:
        result = await db.execute(select(Account.role, func.count(Account.id)).group_by(Account.role))
        for account_role, n in result.all():
            counts[f"{Role(account_role).value}_accounts"] = n

    return DashboardSummary(
        role=role,
        dashboard=current_account.dashboard,
        display_name=current_account.display_name,
        counts=counts,
    )
