"""
Pickup request endpoints - restaurants schedule surplus-food pickups with NGOs
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from foodsync.database import get_db
from foodsync.models.account import Account, Capability
from foodsync.models.request import PickupRequest, RequestStatus
from foodsync.api.auth import get_current_account, require_capability
from foodsync.api.request_common import (
    RequestCreateBase, RequestResponseBase, StatusUpdate, to_http_error, default_direction,
)
from foodsync.services import request_lifecycle as lifecycle
from foodsync.services.exceptions import FoodSyncError

router = APIRouter()

PICKUP_TITLE_PREFIX = "Food Pickup Request: "


class PickupRequestCreate(RequestCreateBase):
    ngo_id: int
    request_title: Optional[str] = None
    request_description: str


class PickupRequestResponse(RequestResponseBase):
    restaurant_id: int
    ngo_id: int


def _response(request: PickupRequest, counterparty_name: Optional[str] = None) -> PickupRequestResponse:
    response = PickupRequestResponse.model_validate(request)
    response.counterparty_name = counterparty_name
    return response


@router.post("/", response_model=PickupRequestResponse)
async def schedule_pickup(
    data: PickupRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.REQUEST_PICKUP)),
):
    """Ask an NGO to collect surplus food; the title defaults to the food description"""
    title = data.request_title or f"{PICKUP_TITLE_PREFIX}{data.request_description[:30]}"
    try:
        request = await lifecycle.create_request(
            db, lifecycle.PICKUP, current_account, data.ngo_id,
            title=title,
            description=data.request_description,
            quantity=data.quantity,
            due_date=data.due_date,
        )
    except FoodSyncError as e:
        raise to_http_error(e)
    names = await lifecycle.resolve_display_names(db, [request.ngo_id])
    return _response(request, names.get(request.ngo_id))


@router.get("/", response_model=List[PickupRequestResponse])
async def list_pickup_requests(
    direction: Optional[str] = None,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    direction = default_direction(lifecycle.PICKUP, current_account, direction)
    try:
        rows = await lifecycle.list_requests(db, lifecycle.PICKUP, current_account, direction, status)
    except FoodSyncError as e:
        raise to_http_error(e)
    return [_response(r, name) for r, name in rows]


@router.get("/{request_id}", response_model=PickupRequestResponse)
async def get_pickup_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    try:
        request = await lifecycle.get_request(db, lifecycle.PICKUP, request_id, current_account)
    except FoodSyncError as e:
        raise to_http_error(e)
    other = request.ngo_id if current_account.id == request.restaurant_id else request.restaurant_id
    names = await lifecycle.resolve_display_names(db, [other])
    return _response(request, names.get(other, lifecycle.UNKNOWN_COUNTERPARTY))


async def _transition(db: AsyncSession, request_id: int, account: Account, target) -> PickupRequestResponse:
    try:
        request = await lifecycle.transition_request(db, lifecycle.PICKUP, request_id, account, target)
    except FoodSyncError as e:
        raise to_http_error(e)
    names = await lifecycle.resolve_display_names(db, [request.restaurant_id])
    return _response(request, names.get(request.restaurant_id, lifecycle.UNKNOWN_COUNTERPARTY))


@router.put("/{request_id}/status", response_model=PickupRequestResponse)
async def update_pickup_request_status(
    request_id: int,
    data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    """Accept, reject or complete a pickup (addressed NGO only)"""
    return await _transition(db, request_id, current_account, data.status)


@router.post("/{request_id}/accept", response_model=PickupRequestResponse)
async def accept_pickup_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    return await _transition(db, request_id, current_account, RequestStatus.ACCEPTED)


@router.post("/{request_id}/reject", response_model=PickupRequestResponse)
async def reject_pickup_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    return await _transition(db, request_id, current_account, RequestStatus.REJECTED)


@router.post("/{request_id}/complete", response_model=PickupRequestResponse)
async def complete_pickup_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    return await _transition(db, request_id, current_account, RequestStatus.COMPLETED)
