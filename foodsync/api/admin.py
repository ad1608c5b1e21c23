"""
Admin user management endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from foodsync.database import get_db
from foodsync.models.account import Account, Role, Capability
from foodsync.api.auth import (
    require_capability, account_response, AccountResponse, RegisterRequest,
)
from foodsync.services import authenticator
from foodsync.services.exceptions import InvalidRole, DuplicateAccount, ValidationFailed
from foodsync.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/accounts", response_model=List[AccountResponse])
async def list_accounts(
    role: Optional[Role] = None,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.MANAGE_ACCOUNTS)),
):
    """All accounts, optionally of one role"""
    query = select(Account).order_by(Account.role, Account.id)
    if role:
        query = query.where(Account.role == role)
    result = await db.execute(query)
    return [account_response(a) for a in result.scalars().all()]


@router.post("/accounts", response_model=AccountResponse)
async def create_account(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.MANAGE_ACCOUNTS)),
):
    """Create an account of any role, admins included; created verified"""
    try:
        account = await authenticator.register_account(db, **data.model_dump(), verified=True)
    except InvalidRole as e:
        raise HTTPException(status_code=400, detail=e.message)
    except DuplicateAccount as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ValidationFailed as e:
        raise HTTPException(status_code=422, detail=e.message)
    logger.info(f"Admin {current_account.id} created {account.role.value} account {account.id}")
    return account_response(account)


@router.put("/accounts/{account_id}/verify", response_model=AccountResponse)
async def toggle_verification(
    account_id: int,
    db: AsyncSession = Depends(get_db),
    current_account: Account = Depends(require_capability(Capability.MANAGE_ACCOUNTS)),
):
    """Flip an account's verified flag"""
    account = await db.get(Account, account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    account.verified = not account.verified
    await db.commit()
    await db.refresh(account)
    logger.info(
        f"Admin {current_account.id} set account {account.id} "
        f"{'verified' if account.verified else 'unverified'}"
    )
    return account_response(account)
