"""
Packing request endpoints - restaurants and NGOs order packaging from
packing companies
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from foodsync.database import get_db
from foodsync.models.account import Account, Capability
from foodsync.models.request import PackingRequest, RequestStatus
from foodsync.api.auth import get_current_account, require_capability
from foodsync.api.request_common import (
    RequestCreateBase, RequestResponseBase, StatusUpdate, to_http_error, default_direction,
)
from foodsync.services import request_lifecycle as lifecycle
from foodsync.services.exceptions import FoodSyncError

router = APIRouter()


class PackingRequestCreate(RequestCreateBase):
    packing_company_id: int


class PackingRequestResponse(RequestResponseBase):
    requester_id: int
    requester_role: str
    packing_company_id: int


def _response(request: PackingRequest, counterparty_name: Optional[str] = None) -> PackingRequestResponse:
    response = PackingRequestResponse.model_validate(request)
    response.counterparty_name = counterparty_name
    return response


@router.post("/", response_model=PackingRequestResponse)
async def create_packing_request(
    data: PackingRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.REQUEST_PACKING)),
):
    """Send a packaging request to a packing company"""
    try:
        request = await lifecycle.create_request(
            db, lifecycle.PACKING, current_account, data.packing_company_id,
            title=data.request_title,
            description=data.request_description,
            quantity=data.quantity,
            due_date=data.due_date,
        )
    except FoodSyncError as e:
        raise to_http_error(e)
    names = await lifecycle.resolve_display_names(db, [request.packing_company_id])
    return _response(request, names.get(request.packing_company_id))


@router.get("/", response_model=List[PackingRequestResponse])
async def list_packing_requests(
    direction: Optional[str] = None,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    """Requests sent by a restaurant/NGO, or received by a packing company"""
    direction = default_direction(lifecycle.PACKING, current_account, direction)
    try:
        rows = await lifecycle.list_requests(db, lifecycle.PACKING, current_account, direction, status)
    except FoodSyncError as e:
        raise to_http_error(e)
    return [_response(r, name) for r, name in rows]


@router.get("/{request_id}", response_model=PackingRequestResponse)
async def get_packing_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    try:
        request = await lifecycle.get_request(db, lifecycle.PACKING, request_id, current_account)
    except FoodSyncError as e:
        raise to_http_error(e)
    if current_account.id == request.requester_id:
        other = request.packing_company_id
    else:
        other = request.requester_id
    names = await lifecycle.resolve_display_names(db, [other])
    return _response(request, names.get(other, lifecycle.UNKNOWN_COUNTERPARTY))


async def _transition(db: AsyncSession, request_id: int, account: Account, target) -> PackingRequestResponse:
    try:
        request = await lifecycle.transition_request(db, lifecycle.PACKING, request_id, account, target)
    except FoodSyncError as e:
        raise to_http_error(e)
    names = await lifecycle.resolve_display_names(db, [request.requester_id])
    return _response(request, names.get(request.requester_id, lifecycle.UNKNOWN_COUNTERPARTY))


@router.put("/{request_id}/status", response_model=PackingRequestResponse)
async def update_packing_request_status(
    request_id: int,
    data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    """Approve, reject or complete a request (addressed packing company only)"""
    return await _transition(db, request_id, current_account, data.status)


@router.post("/{request_id}/accept", response_model=PackingRequestResponse)
async def accept_packing_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    return await _transition(db, request_id, current_account, RequestStatus.ACCEPTED)


@router.post("/{request_id}/reject", response_model=PackingRequestResponse)
async def reject_packing_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    return await _transition(db, request_id, current_account, RequestStatus.REJECTED)


@router.post("/{request_id}/complete", response_model=PackingRequestResponse)
async def complete_packing_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(get_current_account),
):
    return await _transition(db, request_id, current_account, RequestStatus.COMPLETED)
