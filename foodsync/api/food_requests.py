"""
Food request endpoints - NGOs ask restaurants for surplus food
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from foodsync.database import get_db
from foodsync.models.account import Account, Capability
from foodsync.models.request import FoodRequest, RequestStatus
from foodsync.api.auth import get_current_account, require_capability
from foodsync.api.request_common import (
    RequestCreateBase, RequestResponseBase, StatusUpdate, to_http_error, default_direction,
)
from foodsync.services import request_lifecycle as lifecycle
from foodsync.services.exceptions import FoodSyncError

router = APIRouter()


class FoodRequestCreate(RequestCreateBase):
    restaurant_id: int


class FoodRequestResponse(RequestResponseBase):
    ngo_id: int
    restaurant_id: int


def _response(request: FoodRequest, counterparty_name: Optional[str] = None) -> FoodRequestResponse:
    response = FoodRequestResponse.model_validate(request)
    response.counterparty_name = counterparty_name
    return response


@router.post("/", response_model=FoodRequestResponse)
async def create_food_request(
    data: FoodRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.REQUEST_FOOD)),
):
    """Submit a food request to a restaurant"""
    try:
        request = await lifecycle.create_request(
            db, lifecycle.FOOD, current_account, data.restaurant_id,
            title=data.request_title,
            description=data.request_description,
            quantity=data.quantity,
            due_date=data.due_date,
        )
    except FoodSyncError as e:
        raise to_http_error(e)
    names = await lifecycle.resolve_display_names(db, [request.restaurant_id])
    return _response(request, names.get(request.restaurant_id))


@router.get("/", response_model=List[FoodRequestResponse])
async def list_food_requests(
    direction: Optional[str] = None,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    """NGO request history, or a restaurant's incoming requests"""
    direction = default_direction(lifecycle.FOOD, current_account, direction)
    try:
        rows = await lifecycle.list_requests(db, lifecycle.FOOD, current_account, direction, status)
    except FoodSyncError as e:
        raise to_http_error(e)
    return [_response(r, name) for r, name in rows]


@router.get("/{request_id}", response_model=FoodRequestResponse)
async def get_food_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    try:
        request = await lifecycle.get_request(db, lifecycle.FOOD, request_id, current_account)
    except FoodSyncError as e:
        raise to_http_error(e)
    other = request.restaurant_id if current_account.id == request.ngo_id else request.ngo_id
    names = await lifecycle.resolve_display_names(db, [other])
    return _response(request, names.get(other, lifecycle.UNKNOWN_COUNTERPARTY))


async def _transition(db: AsyncSession, request_id: int, account: Account, target) -> FoodRequestResponse:
    try:
        request = await lifecycle.transition_request(db, lifecycle.FOOD, request_id, account, target)
    except FoodSyncError as e:
        raise to_http_error(e)
    names = await lifecycle.resolve_display_names(db, [request.ngo_id])
    return _response(request, names.get(request.ngo_id, lifecycle.UNKNOWN_COUNTERPARTY))


@router.put("/{request_id}/status", response_model=FoodRequestResponse)
async def update_food_request_status(
    request_id: int,
    data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    """Move a request along its lifecycle (addressed restaurant only)"""
    return await _transition(db, request_id, current_account, data.status)


@router.post("/{request_id}/accept", response_model=FoodRequestResponse)
async def accept_food_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    return await _transition(db, request_id, current_account, RequestStatus.ACCEPTED)


@router.post("/{request_id}/reject", response_model=FoodRequestResponse)
async def reject_food_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    return await _transition(db, request_id, current_account, RequestStatus.REJECTED)


@router.post("/{request_id}/complete", response_model=FoodRequestResponse)
async def complete_food_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    return await _transition(db, request_id, current_account, RequestStatus.COMPLETED)
