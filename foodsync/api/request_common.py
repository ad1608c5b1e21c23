"""
Schemas and helpers shared by the food, packing and pickup request endpoints
"""
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from pydantic import BaseModel, Field

from foodsync.models.account import Account, Role
from foodsync.models.request import RequestStatus
from foodsync.services.exceptions import (
    FoodSyncError, ValidationFailed, NotFound, NotPermitted, TransitionNotAllowed,
)
from foodsync.services.request_lifecycle import RequestKind

ERROR_STATUS_CODES = [
    (ValidationFailed, 422),
    (NotFound, 404),
    (NotPermitted, 403),
    (TransitionNotAllowed, 409),
]


def to_http_error(error: FoodSyncError) -> HTTPException:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(status_code=400, detail=error.message)


class RequestCreateBase(BaseModel):
    # Any "status" sent by the client is ignored; new requests start pending
    request_title: str = Field(min_length=1)
    request_description: Optional[str] = None
    quantity: int
    due_date: datetime


class StatusUpdate(BaseModel):
    status: str


class RequestResponseBase(BaseModel):
    id: int
    request_title: str
    request_description: Optional[str]
    quantity: int
    due_date: datetime
    status: RequestStatus
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    counterparty_name: Optional[str] = None

    class Config:
        from_attributes = True


def default_direction(kind: RequestKind, account: Account, direction: Optional[str]) -> str:
    """Requesters see what they sent, addressees what they received"""
    role = Role(account.role)
    if direction:
        return direction
    if role in kind.requester_roles:
        return "outgoing"
    if role == kind.addressee_role:
        return "incoming"
    raise HTTPException(status_code=403, detail=f"No {kind.name} requests for a {role.value} account")
