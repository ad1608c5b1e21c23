"""
Request lifecycle - creation, status transitions and listing for food,
packing and pickup requests.

    pending ──> accepted ──> completed
       │
       └──────> rejected

Only the account a request is addressed to may move it along; the
requester creates and reads. Status updates are compare-and-set on the
current status, so two racing transitions cannot both apply.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Type

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from foodsync.models.account import Account, Role
from foodsync.models.request import FoodRequest, PackingRequest, PickupRequest, RequestStatus
from foodsync.services.exceptions import (
    ValidationFailed, NotFound, NotPermitted, NotAddressedParty, TransitionNotAllowed,
)
from foodsync.utils.validators import validate_future_date, validate_quantity
from foodsync.utils.logger import get_logger

logger = get_logger(__name__)

MIN_TITLE_LENGTH = 5
UNKNOWN_COUNTERPARTY = "Unknown"

ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.ACCEPTED, RequestStatus.REJECTED}),
    RequestStatus.ACCEPTED: frozenset({RequestStatus.COMPLETED}),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.COMPLETED: frozenset(),
}

# Packing companies historically answered with "approved"
STATUS_ALIASES = {"approved": RequestStatus.ACCEPTED}


@dataclass(frozen=True)
class RequestKind:
    name: str
    model: Type
    requester_column: str
    addressee_column: str
    requester_roles: tuple[Role, ...]
    addressee_role: Role


FOOD = RequestKind(
    name="food",
    model=FoodRequest,
    requester_column="ngo_id",
    addressee_column="restaurant_id",
    requester_roles=(Role.NGO,),
    addressee_role=Role.RESTAURANT,
)

PACKING = RequestKind(
    name="packing",
    model=PackingRequest,
    requester_column="requester_id",
    addressee_column="packing_company_id",
    requester_roles=(Role.RESTAURANT, Role.NGO),
    addressee_role=Role.PACKING,
)

PICKUP = RequestKind(
    name="pickup",
    model=PickupRequest,
    requester_column="restaurant_id",
    addressee_column="ngo_id",
    requester_roles=(Role.RESTAURANT,),
    addressee_role=Role.NGO,
)


def parse_status(value) -> RequestStatus:
    if isinstance(value, RequestStatus):
        return value
    key = str(value).strip().lower()
    if key in STATUS_ALIASES:
        return STATUS_ALIASES[key]
    try:
        return RequestStatus(key)
    except ValueError:
        raise ValidationFailed(f"Unknown request status: {value}")


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(RequestStatus(current), frozenset())


def check_transition(current: RequestStatus, target: RequestStatus) -> None:
    if not can_transition(current, target):
        raise TransitionNotAllowed(
            f"Cannot move a request from {RequestStatus(current).value} to {target.value}"
        )


async def create_request(
    db: AsyncSession,
    kind: RequestKind,
    requester: Account,
    addressee_id: int,
    *,
    title: str,
    description: Optional[str],
    quantity: int,
    due_date: datetime,
):
    """Insert a new request in `pending`, whatever status the caller had in mind"""
    requester_role = Role(requester.role)
    if requester_role not in kind.requester_roles:
        raise NotPermitted(f"A {requester_role.value} account cannot create {kind.name} requests")

    if not title or len(title.strip()) < MIN_TITLE_LENGTH:
        raise ValidationFailed(f"Title must be at least {MIN_TITLE_LENGTH} characters")
    try:
        validate_quantity(quantity)
        due_date = validate_future_date(due_date)
    except ValueError as e:
        raise ValidationFailed(str(e))

    addressee = await db.get(Account, addressee_id)
    if addressee is None or Role(addressee.role) != kind.addressee_role:
        raise NotFound(f"No {kind.addressee_role.value} with id {addressee_id}")

    fields = {
        kind.requester_column: requester.id,
        kind.addressee_column: addressee.id,
    }
    if kind is PACKING:
        fields["requester_role"] = requester_role.value

    request = kind.model(
        **fields,
        request_title=title.strip(),
        request_description=description,
        quantity=quantity,
        due_date=due_date,
        status=RequestStatus.PENDING,
    )
    db.add(request)
    await db.commit()
    await db.refresh(request)
    logger.info(
        f"Created {kind.name} request {request.id}: "
        f"{requester_role.value} {requester.id} -> {kind.addressee_role.value} {addressee.id}"
    )
    return request


async def get_request(db: AsyncSession, kind: RequestKind, request_id: int, viewer: Account):
    """Fetch a request visible to `viewer` (its requester or its addressee)"""
    request = await db.get(kind.model, request_id)
    if request is None:
        raise NotFound(f"{kind.name.capitalize()} request not found")
    if viewer.id not in (
        getattr(request, kind.requester_column),
        getattr(request, kind.addressee_column),
    ):
        raise NotFound(f"{kind.name.capitalize()} request not found")
    return request


async def transition_request(
    db: AsyncSession,
    kind: RequestKind,
    request_id: int,
    actor: Account,
    target,
):
    """Move a request to `target` on behalf of its addressee"""
    target_status = parse_status(target)

    request = await db.get(kind.model, request_id)
    if request is None:
        raise NotFound(f"{kind.name.capitalize()} request not found")

    if Role(actor.role) != kind.addressee_role or getattr(request, kind.addressee_column) != actor.id:
        logger.warning(
            f"Account {actor.id} tried to move {kind.name} request {request_id} "
            f"addressed to {getattr(request, kind.addressee_column)}"
        )
        raise NotAddressedParty("Only the addressed party can update this request")

    current = RequestStatus(request.status)
    check_transition(current, target_status)

    model = kind.model
    result = await db.execute(
        update(model)
        .where(model.id == request_id, model.status == current)
        .values(status=target_status, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise TransitionNotAllowed("Request status changed in the meantime, reload and retry")

    await db.commit()
    await db.refresh(request)
    logger.info(f"{kind.name.capitalize()} request {request_id}: {current.value} -> {target_status.value}")
    return request


async def resolve_display_names(db: AsyncSession, account_ids) -> dict[int, str]:
    """Display names for a set of account ids in one query"""
    ids = {i for i in account_ids if i is not None}
    if not ids:
        return {}
    result = await db.execute(
        select(Account.id, Account.display_name).where(Account.id.in_(ids))
    )
    return {row.id: row.display_name for row in result.all()}


async def list_requests(
    db: AsyncSession,
    kind: RequestKind,
    account: Account,
    direction: str = "outgoing",
    status: Optional[str] = None,
) -> list[tuple[object, str]]:
    """
    Requests sent (`outgoing`) or received (`incoming`) by `account`,
    newest first, each paired with the counterparty's display name.
    `status` takes the same spellings as a transition (`approved` included).
    """
    if direction == "outgoing":
        own_column, other_column = kind.requester_column, kind.addressee_column
    elif direction == "incoming":
        own_column, other_column = kind.addressee_column, kind.requester_column
    else:
        raise ValidationFailed("direction must be 'outgoing' or 'incoming'")

    model = kind.model
    query = (
        select(model)
        .where(getattr(model, own_column) == account.id)
        .order_by(model.created_at.desc(), model.id.desc())
    )
    if kind is PACKING and direction == "outgoing":
        query = query.where(model.requester_role == Role(account.role).value)
    if status is not None:
        query = query.where(model.status == parse_status(status))

    result = await db.execute(query)
    requests = result.scalars().all()

    names = await resolve_display_names(db, (getattr(r, other_column) for r in requests))
    return [
        (r, names.get(getattr(r, other_column), UNKNOWN_COUNTERPARTY))
        for r in requests
    ]


async def count_requests(
    db: AsyncSession,
    kind: RequestKind,
    account_id: int,
    column: str,
    status: Optional[RequestStatus] = None,
) -> int:
    model = kind.model
    query = select(func.count(model.id)).where(getattr(model, column) == account_id)
    if status is not None:
        query = query.where(model.status == status)
    result = await db.execute(query)
    return result.scalar() or 0
